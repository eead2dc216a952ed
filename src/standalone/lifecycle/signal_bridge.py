"""
Signal bridge: maps termination signals onto the shutdown notifier.

SIGTERM, SIGINT and SIGHUP all request a graceful shutdown. A second SIGINT
while the first is still being handled terminates the process immediately,
without any cleanup (operator override for a hung shutdown).
"""

import os
import signal
from typing import Callable, Dict, Iterable, List, Optional

from standalone.errors import NotifyError, SignalArmError
from standalone.lifecycle.shutdown_notifier import ShutdownNotifier
from standalone.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SIGNAL)

# Registration order matters: arming stops at the first failure.
TERMINATION_SIGNALS = (signal.SIGTERM, signal.SIGINT, signal.SIGHUP)

FORCED_EXIT_CODE = 1
STDERR_FD = 2

SignalRegistrar = Callable[[int, Callable], object]
WakeupSetter = Callable[[int], int]


def _force_exit() -> None:
    os._exit(FORCED_EXIT_CODE)


def _set_wakeup_fd(fd: int) -> int:
    return signal.set_wakeup_fd(fd, warn_on_full_buffer=False)


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return str(signum)


class SignalBridge:
    """
    Owns the shutdown notifier and the interrupt escalation flag.

    Build it with install(), which constructs the notifier before any
    handler referencing it is registered:

        bridge = SignalBridge.install()
        ...
        bridge.wait()

    The notifier's pipe is also the interpreter's wakeup fd, so a signal
    landing just before wait() blocks still wakes it; the Python-level
    handler then runs and sets shutdown_requested.
    """

    def __init__(self, notifier: ShutdownNotifier, terminate: Optional[Callable[[], None]] = None):
        """
        Args:
            notifier: Fully constructed notifier the handler will wake
            terminate: Called on the second SIGINT (default: os._exit(1))
        """
        self.notifier = notifier
        self.interrupt_seen = False
        self.shutdown_requested = False
        self._terminate = terminate or _force_exit
        self._previous: Dict[int, object] = {}
        self._previous_wakeup: Optional[int] = None

    @classmethod
    def install(
        cls,
        signals: Iterable[int] = TERMINATION_SIGNALS,
        register: SignalRegistrar = signal.signal,
        terminate: Optional[Callable[[], None]] = None,
        set_wakeup: WakeupSetter = _set_wakeup_fd,
    ) -> "SignalBridge":
        """
        Construct the notifier, point the wakeup fd at it, then arm handlers
        for `signals` in order.

        Raises:
            SignalArmError: the wakeup fd or a handler could not be set;
                signals after the failing one were not attempted
        """
        bridge = cls(ShutdownNotifier(), terminate)
        bridge.arm(signals, register, set_wakeup)
        return bridge

    @property
    def armed(self) -> List[int]:
        return list(self._previous)

    def arm(
        self,
        signals: Iterable[int],
        register: SignalRegistrar = signal.signal,
        set_wakeup: WakeupSetter = _set_wakeup_fd,
    ) -> None:
        try:
            self._previous_wakeup = set_wakeup(self.notifier.wakeup_fd)
        except (OSError, ValueError) as err:
            raise SignalArmError("wakeup fd", err) from err

        for sig in signals:
            name = _signal_name(sig)
            try:
                self._previous[sig] = register(sig, self.handle)
            except (OSError, ValueError, RuntimeError) as err:
                raise SignalArmError(name, err) from err
            log.debug("signal handler installed", signal=name)

    def disarm(
        self,
        register: SignalRegistrar = signal.signal,
        set_wakeup: WakeupSetter = _set_wakeup_fd,
    ) -> None:
        """Put back the handlers and wakeup fd that were active before arm()."""
        for sig, previous in self._previous.items():
            register(sig, previous if previous is not None else signal.SIG_DFL)
        self._previous.clear()
        if self._previous_wakeup is not None:
            set_wakeup(self._previous_wakeup)
            self._previous_wakeup = None

    def wait(self) -> None:
        """
        Block until a termination signal has been handled.

        The wakeup fd also fires for signals this bridge does not handle;
        those wake-ups are ignored.

        Raises:
            NotifyError: the notifier is unusable
        """
        while not self.shutdown_requested:
            self.notifier.wait()

    def handle(self, signum: int, frame=None) -> None:
        """
        Signal handler body: escalation check, then notify. Never raises.

        The escalation flag is set before notify() so that a second SIGINT
        arriving mid-handler still escalates.
        """
        if signum == signal.SIGINT:
            if self.interrupt_seen:
                self._terminate()
                return
            self.interrupt_seen = True

        self.shutdown_requested = True
        try:
            self.notifier.notify()
        except NotifyError as err:
            # print() may be mid-call in the interrupted frame; write the fd directly
            try:
                os.write(STDERR_FD, f"SIGNAL error sending shutdown notification: {err}\n".encode())
            except OSError:
                pass
