"""
Lifecycle engine that takes a component from configuration to exit.

Sequence:
    bootstrap logger -> resolve config dirs -> hand off logger -> load config
    -> create -> arm signals -> run -> wait for shutdown signal -> shutdown

Every failure path logs, runs the best cleanup available, and terminates.
Nothing is retried.
"""

from typing import Any, Callable, List, Optional, Type

from standalone.errors import CreateFailed, NotifyError, RunFailed, SignalArmError
from standalone.lifecycle.component_protocol import Standalone
from standalone.lifecycle.signal_bridge import SignalBridge
from standalone.managers.config_manager import load_first_matching, resolve_config_dirs
from standalone.managers.log_manager import bootstrap_logger, handoff_logger
from standalone.models.args import HarnessArgs
from standalone.models.enums import LifecycleState
from standalone.models.outcome import Failed, capture_phase, split_pair
from standalone.utils.logger import Logger, get_logger, LogCategory

EXIT_OK = 0
EXIT_FAILURE = 1


class LifecycleEngine:
    """
    Runs one component through its lifecycle, exactly once.

    Example:
        engine = LifecycleEngine(EchoComponent, HarnessArgs(log_level=LogLevel.INFO))
        sys.exit(engine.run())
    """

    def __init__(
        self,
        component: Type[Standalone],
        args: HarnessArgs,
        install_signals: Callable[[], SignalBridge] = SignalBridge.install,
        logger: Optional[Logger] = None,
    ):
        """
        Args:
            component: Standalone subclass to run
            args: Resolved log level, config dir override, extra options
            install_signals: Builds the notifier and arms the signal handlers
            logger: Logger handle to bootstrap (default: process singleton)
        """
        self.component = component
        self.args = args
        self.bridge: Optional[SignalBridge] = None
        self.state = LifecycleState.START
        self.history: List[LifecycleState] = [LifecycleState.START]
        self._install_signals = install_signals
        self._logger = logger
        base = logger if logger is not None else get_logger()
        self._log = base.for_category(LogCategory.LIFECYCLE)
        self._shutdown_log = self._log.with_category(LogCategory.SHUTDOWN)

    def _transition(self, state: LifecycleState) -> None:
        self._log.debug(f"{self.state.name} -> {state.name}")
        self.state = state
        self.history.append(state)

    def _report_failure(self, phase: str, outcome: Failed) -> None:
        if outcome.expected:
            self._log.error(f"{self.component.COMPONENT_NAME} {phase} failed", error=str(outcome.error))
        else:
            self._log.error(
                f"{self.component.COMPONENT_NAME} {phase} raised unexpectedly",
                error=repr(outcome.error),
                exc_info=outcome.error,
            )

    def run(self) -> int:
        """
        Execute the whole lifecycle.

        Returns:
            Process exit status: 0 after a graceful shutdown, 1 otherwise
        """
        name = self.component.COMPONENT_NAME

        self._transition(LifecycleState.BOOTSTRAP_LOG)
        handle = bootstrap_logger(self.args.log_level, self._logger)

        dirs = resolve_config_dirs(
            name,
            self.args.confdir,
            home_subdir=self.component.HOME_CONFIG_SUBDIR,
            system_dir=self.component.SYSTEM_CONFIG_DIR,
            env_name=self.component.CONFIG_DIR_ENV,
        )
        handoff_logger(handle, dirs, self.component.LOG_CONFIG_FILES)

        config = load_first_matching(dirs, self.component.CONFIG_FILES, model=self.component.config_model)
        if config is None:
            self._log.error("could not obtain valid configuration", category=LogCategory.CONFIG)
            self._transition(LifecycleState.CONFIG_MISSING)
            return self._terminate(EXIT_FAILURE)
        self._transition(LifecycleState.CONFIG_RESOLVED)

        created = capture_phase(
            lambda: self.component.create(config, self.args),
            CreateFailed,
            split=split_pair,
        )
        if not created.ok:
            self._transition(LifecycleState.CREATE_FAILED)
            self._report_failure("create", created)
            self._shutdown_log.debug("cleaning up after create error")
            self._shutdown(created.cleanup, None)
            self._shutdown_log.info(f"{name} cleaned up after error")
            return self._terminate(EXIT_FAILURE)

        self._transition(LifecycleState.CREATED)
        app, create_cleanup = created.value, created.cleanup

        # The bridge constructs the notifier before arming any handler
        try:
            self.bridge = self._install_signals()
        except SignalArmError as err:
            self._log.error(
                f"error registering signal handler: {err.cause}",
                category=LogCategory.SIGNAL,
                signal=err.signal_name,
            )
            self._transition(LifecycleState.SIGNAL_ARM_FAILED)
            self._shutdown(create_cleanup, None)
            return self._terminate(EXIT_FAILURE)
        self._transition(LifecycleState.SIGNALS_ARMED)

        self._transition(LifecycleState.RUNNING)
        ran = capture_phase(app.run, RunFailed)
        if not ran.ok:
            self._report_failure("run", ran)
            self._shutdown_err(create_cleanup, ran.cleanup)
            return self._terminate(EXIT_FAILURE)

        self._transition(LifecycleState.AWAITING_SIGNAL)
        self._log.info(f"{name} running, waiting for shutdown signal")
        self.wait_for_shutdown()

        self._shutdown(create_cleanup, ran.cleanup)
        self._log.info(f"{name} shutdown successful")
        return self._terminate(EXIT_OK)

    def wait_for_shutdown(self) -> None:
        """
        Block until a termination signal arrives.

        A broken notifier is logged, not raised: shutdown must still run.
        """
        if self.bridge is None:
            raise RuntimeError("Signal handlers are not armed")

        try:
            self.bridge.wait()
        except NotifyError as err:
            self._log.error("bad shutdown notifier", error=str(err))
            return
        self._log.debug("shutdown notification received")

    def _shutdown(self, create_cleanup: Any, run_cleanup: Optional[Any]) -> None:
        self._transition(LifecycleState.SHUTDOWN)
        try:
            self.component.shutdown(create_cleanup, run_cleanup)
        except Exception as e:
            self._shutdown_log.error(f"Error shutting down {self.component.COMPONENT_NAME}: {e}", exc_info=True)

    def _shutdown_err(self, create_cleanup: Any, run_error_cleanup: Any) -> None:
        self._transition(LifecycleState.SHUTDOWN_ERR)
        try:
            self.component.shutdown_err(create_cleanup, run_error_cleanup)
        except Exception as e:
            self._shutdown_log.error(
                f"Error shutting down {self.component.COMPONENT_NAME} after run failure: {e}",
                exc_info=True,
            )

    def _terminate(self, code: int) -> int:
        self._transition(LifecycleState.TERMINATED)
        return code


def run_lifecycle(component: Type[Standalone], args: HarnessArgs) -> int:
    """Run `component` with the process-wide logger and real signal handlers."""
    return LifecycleEngine(component, args).run()
