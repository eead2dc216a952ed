"""
Enums for the standalone harness
"""

from enum import Enum, auto


class LogLevel(Enum):
    """Log severity levels (ordered, least severe first)"""
    TRACE = auto()
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()
    OFF = auto()     # Filter only: nothing is logged at this level


class LogCategory(Enum):
    """Log categories for grouping related events"""
    CONFIG = auto()      # Configuration directory resolution, loading
    LOG_SETUP = auto()   # Bootstrap logger and handoff to file config
    SIGNAL = auto()      # Signal handler registration and delivery
    LIFECYCLE = auto()   # State machine transitions
    SHUTDOWN = auto()    # Component shutdown paths
    SYSTEM = auto()      # Startup, exit
    GENERAL = auto()     # Default general category


class LifecycleState(Enum):
    """
    States of the lifecycle engine.

    START -> BOOTSTRAP_LOG -> CONFIG_RESOLVED -> CREATED -> SIGNALS_ARMED
          -> RUNNING -> AWAITING_SIGNAL -> SHUTDOWN -> TERMINATED

    Error branches:
        CONFIG_MISSING -> TERMINATED
        CREATE_FAILED -> SHUTDOWN -> TERMINATED
        SIGNAL_ARM_FAILED -> SHUTDOWN -> TERMINATED
        RUNNING -> SHUTDOWN_ERR -> TERMINATED
    """
    START = auto()
    BOOTSTRAP_LOG = auto()
    CONFIG_RESOLVED = auto()
    CONFIG_MISSING = auto()
    CREATED = auto()
    CREATE_FAILED = auto()
    SIGNALS_ARMED = auto()
    SIGNAL_ARM_FAILED = auto()
    RUNNING = auto()
    AWAITING_SIGNAL = auto()
    SHUTDOWN = auto()
    SHUTDOWN_ERR = auto()
    TERMINATED = auto()
