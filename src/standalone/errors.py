"""
Error types for the standalone harness.

Errors carry a machine-readable code, a human-readable message and optional
details, the same way across the package. Phase failures additionally carry
the cleanup token the failing phase produced.
"""

from typing import Any, Optional


class StandaloneError(Exception):
    """Base class for harness errors"""
    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ArgumentError(StandaloneError):
    """Command line / environment could not be resolved"""
    def __init__(self, message: str, **details):
        super().__init__(code="BAD_ARGUMENTS", message=message, details=details)


class NotifyError(StandaloneError):
    """Shutdown notifier is unusable (closed or invalid descriptor)"""
    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        super().__init__(
            code="NOTIFIER_UNUSABLE",
            message=f"shutdown notifier unusable during {operation}: {cause}",
            details={"operation": operation},
        )
        self.cause = cause


class SignalArmError(StandaloneError):
    """A termination signal handler could not be registered"""
    def __init__(self, signal_name: str, cause: BaseException):
        super().__init__(
            code="SIGNAL_ARM_FAILED",
            message=f"error registering signal handler for {signal_name}: {cause}",
            details={"signal": signal_name},
        )
        self.signal_name = signal_name
        self.cause = cause


class PhaseFailed(StandaloneError):
    """
    A component phase failed but still produced a cleanup token.

    Components raise the concrete subclasses (CreateFailed, RunFailed) so that
    whatever they acquired before the failure can be released by the matching
    shutdown path.
    """
    phase = "phase"

    def __init__(self, cleanup: Any = None, message: Optional[str] = None):
        super().__init__(
            code=f"{self.phase.upper()}_FAILED",
            message=message or f"{self.phase} failed",
        )
        self.cleanup = cleanup


class CreateFailed(PhaseFailed):
    """Raised from Standalone.create(); cleanup is the CreateCleanup token"""
    phase = "create"


class RunFailed(PhaseFailed):
    """Raised from Standalone.run(); cleanup is the RunErrorCleanup token"""
    phase = "run"
