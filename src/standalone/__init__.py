"""
constellation-standalone
------------------------

Common support for running components as standalone executables: uniform
configuration discovery, logging setup, signal-driven shutdown, and a
one-line program entry point.

    from standalone import Standalone, CreateFailed, RunFailed

    class EchoComponent(Standalone):
        ...

    if __name__ == "__main__":
        EchoComponent.main()
"""

__version__ = "0.1.0"

from .errors import ArgumentError, CreateFailed, NotifyError, RunFailed, SignalArmError, StandaloneError
from .lifecycle import LifecycleEngine, ShutdownNotifier, SignalBridge, Standalone
from .models import HarnessArgs, LifecycleState, LogCategory, LogLevel

__all__ = [
    "__version__",
    "Standalone",
    "LifecycleEngine",
    "ShutdownNotifier",
    "SignalBridge",
    "HarnessArgs",
    "LifecycleState",
    "LogLevel",
    "LogCategory",
    "StandaloneError",
    "ArgumentError",
    "NotifyError",
    "SignalArmError",
    "CreateFailed",
    "RunFailed",
]
