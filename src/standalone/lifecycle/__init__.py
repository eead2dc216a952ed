"""
Lifecycle subsystem
-------------------

Exports the public API for:
- the component protocol
- the signal-safe shutdown notifier and signal bridge
- the lifecycle engine

External code should import from:
    from standalone.lifecycle import Standalone, LifecycleEngine
"""

from .shutdown_notifier import ShutdownNotifier
from .signal_bridge import SignalBridge, TERMINATION_SIGNALS
from .component_protocol import Standalone
from .lifecycle_engine import LifecycleEngine, run_lifecycle

__all__ = [
    "ShutdownNotifier",
    "SignalBridge",
    "TERMINATION_SIGNALS",
    "Standalone",
    "LifecycleEngine",
    "run_lifecycle",
]
