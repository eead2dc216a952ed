"""
Shutdown notifier: a signal-safe wake-up for the lifecycle thread.

notify() is called from Python signal handlers, which run between bytecodes
of whatever the main thread was doing, so it must not take any lock the
interrupted code may hold. The notifier is a self-pipe: notify() is one
non-blocking os.write(), wait() blocks on the read end and drains it.
"""

import os
import selectors

from standalone.errors import NotifyError

_WAKE_BYTE = b"\x00"
_DRAIN_CHUNK = 512


class ShutdownNotifier:
    """
    One-shot-per-cycle wake-up signal.

    Any number of notify() calls before wait() collapse into a single
    wake-up; once wait() has returned, the next wait() needs a fresh
    notify().

    Example:
        notifier = ShutdownNotifier()
        signal.signal(signal.SIGTERM, lambda *_: notifier.notify())
        notifier.wait()
    """

    def __init__(self) -> None:
        self._read_fd, self._write_fd = os.pipe()
        os.set_blocking(self._read_fd, False)
        os.set_blocking(self._write_fd, False)

    @property
    def wakeup_fd(self) -> int:
        """Write end of the pipe, for signal.set_wakeup_fd()."""
        return self._write_fd

    def notify(self) -> None:
        """
        Request a wake-up. Safe to call from a signal handler.

        Raises:
            NotifyError: the pipe is closed or otherwise unusable
        """
        try:
            os.write(self._write_fd, _WAKE_BYTE)
        except BlockingIOError:
            # Pipe full: a wake-up is already pending
            pass
        except OSError as err:
            raise NotifyError("notify", err) from err

    def wait(self) -> None:
        """
        Block until notify() has been called since the last wake-up.

        No timeout. Signals delivered while blocked run their handlers and
        the wait is resumed (PEP 475), so a handler that calls notify()
        ends the wait.

        Raises:
            NotifyError: the pipe is closed or otherwise unusable
        """
        try:
            with selectors.DefaultSelector() as selector:
                selector.register(self._read_fd, selectors.EVENT_READ)
                while not self._drain():
                    selector.select()
        except (OSError, ValueError) as err:
            raise NotifyError("wait", err) from err

    def _drain(self) -> bool:
        """Consume every pending wake byte. Returns True if any were pending."""
        drained = False
        while True:
            try:
                chunk = os.read(self._read_fd, _DRAIN_CHUNK)
            except BlockingIOError:
                return drained
            if not chunk:
                raise NotifyError("wait", EOFError("write end of notifier closed"))
            drained = True

    def close(self) -> None:
        """Release both pipe ends. Later notify()/wait() raise NotifyError."""
        for fd in (self._read_fd, self._write_fd):
            if fd >= 0:
                os.close(fd)
        self._read_fd = self._write_fd = -1
