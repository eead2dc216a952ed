"""
Managers for configuration and logging setup
"""

from .config_manager import resolve_config_dirs, load_first_matching
from .log_manager import bootstrap_logger, handoff_logger

__all__ = ['resolve_config_dirs', 'load_first_matching', 'bootstrap_logger', 'handoff_logger']
