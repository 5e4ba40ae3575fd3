"""Process-wide deadline enforcement.

Philosophy:
- One timer for the whole run, armed before any network activity
- Expiry interrupts the main thread so scoped sessions still unwind
- A hard exit backstop guarantees the deadline even if unwinding hangs

Public API:
    Watchdog: Cancellable deadline guard (context manager)
    DEADLINE_EXIT_CODE: Exit status used when the deadline is exceeded
"""

import _thread
import logging
import os
import signal
import threading
from collections.abc import Callable

from hopscp.exceptions import DeadlineExceededError

logger = logging.getLogger(__name__)

DEADLINE_EXIT_CODE = DeadlineExceededError.exit_code

# Longest single wait the timer thread can make without overflowing the
# platform lock timeout; longer deadlines fire at this bound
MAX_TIMER_SECONDS = min(threading.TIMEOUT_MAX, 2.0**31)


class Watchdog:
    """Abort the run when the overall deadline elapses.

    Inside the context manager, expiry raises DeadlineExceededError in the
    main thread wherever it currently is (mid-dial, mid-copy). The timer
    thread is a daemon and never keeps the process alive.

    The context manager must be entered on the main thread, the only thread
    a signal can interrupt. Other threads call arm() with an on_expire hook.

    Example:
        >>> with Watchdog(timeout=300):
        ...     run_transfer()
    """

    def __init__(
        self,
        timeout: float,
        grace_period: float | None = 5.0,
        on_expire: Callable[[], None] | None = None,
    ):
        """Initialize watchdog.

        Args:
            timeout: Seconds until the deadline
            grace_period: Seconds the main thread gets to unwind after expiry
                before the process is killed; None disables the backstop
            on_expire: Called on the timer thread at expiry instead of
                interrupting the main thread
        """
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.timeout = timeout
        self.grace_period = grace_period
        self._on_expire = on_expire
        self._expired = threading.Event()
        self._disarmed = threading.Event()
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._main_thread_id: int | None = None
        self._previous_handler = None
        self._handler_installed = False

    @property
    def expired(self) -> bool:
        return self._expired.is_set()

    @property
    def armed(self) -> bool:
        return self._timer is not None and not self._disarmed.is_set()

    def arm(self) -> "Watchdog":
        """Start the deadline timer."""
        if self._timer is not None:
            raise RuntimeError("watchdog already armed")
        self._main_thread_id = threading.main_thread().ident
        self._timer = threading.Timer(min(self.timeout, MAX_TIMER_SECONDS), self._fire)
        self._timer.daemon = True
        self._timer.name = "hopscp-watchdog"
        self._timer.start()
        logger.debug(f"Watchdog armed for {self.timeout:g}s")
        return self

    def cancel(self) -> None:
        """Stop the timer and the hard exit backstop."""
        with self._lock:
            self._disarmed.set()
        if self._timer is not None:
            self._timer.cancel()

    def _fire(self) -> None:
        # No interrupt may be delivered once cancel() has returned
        with self._lock:
            if self._disarmed.is_set():
                return
            self._expired.set()
            logger.error(f"Action timed out after {self.timeout:g}s")

            if self._on_expire is not None:
                self._on_expire()
            else:
                self._interrupt_main()

        if self.grace_period is not None and not self._disarmed.wait(self.grace_period):
            logger.error("Main thread did not stop in time, terminating")
            os._exit(DEADLINE_EXIT_CODE)

    def _interrupt_main(self) -> None:
        if self._handler_installed and self._main_thread_id is not None:
            # Real signal so blocking system calls in the main thread return
            signal.pthread_kill(self._main_thread_id, signal.SIGALRM)
        else:
            _thread.interrupt_main()

    def _handle_alarm(self, signum, frame) -> None:
        if self.expired:
            raise DeadlineExceededError(self.timeout)
        if callable(self._previous_handler):
            self._previous_handler(signum, frame)

    def _install_handler(self) -> None:
        self._previous_handler = signal.signal(signal.SIGALRM, self._handle_alarm)
        self._handler_installed = True

    def _restore_handler(self) -> None:
        if self._handler_installed:
            signal.signal(signal.SIGALRM, self._previous_handler)
            self._handler_installed = False

    def __enter__(self) -> "Watchdog":
        if threading.current_thread() is not threading.main_thread():
            raise RuntimeError("Watchdog must be entered on the main thread")
        self._install_handler()
        return self.arm()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            self.cancel()
        finally:
            self._disarmed.set()
            self._restore_handler()
        if exc_type is KeyboardInterrupt and self.expired:
            raise DeadlineExceededError(self.timeout) from exc_val


__all__ = ["DEADLINE_EXIT_CODE", "MAX_TIMER_SECONDS", "Watchdog"]
