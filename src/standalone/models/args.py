"""
Resolved harness inputs.

The lifecycle engine never looks at the command line or the environment
itself; it receives one of these, already resolved by standalone.cli.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from standalone.models.enums import LogLevel


@dataclass(frozen=True)
class HarnessArgs:
    """Inputs resolved from the command line and environment."""
    log_level: LogLevel = LogLevel.WARN
    confdir: Optional[Path] = None               # Overrides the system config dir
    extra: Dict[str, Any] = field(default_factory=dict)  # Component-defined options
