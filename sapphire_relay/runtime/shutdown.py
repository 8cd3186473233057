from __future__ import annotations

import asyncio
import signal
import time
from collections.abc import Callable

LEAVE_WARNING = (
    "relay may be mid-flight: funds can sit in the intermediate account or have a "
    "granted allowance without a deposit. Stopping now leaves them there until the "
    "relay is started again with the same seed."
)


class TerminationGuard:
    """Asks for a second interrupt before stopping the relay."""

    def __init__(
        self,
        log,
        *,
        confirm_window: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
        notify: Callable[[str], None] | None = None,
    ):
        self.log = log
        self.confirm_window = float(confirm_window)
        self._clock = clock
        self._notify = notify
        self._armed_at: float | None = None
        self._task: asyncio.Task | None = None

    def install(self, loop: asyncio.AbstractEventLoop, task: asyncio.Task) -> None:
        self._task = task
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.trigger)
            except (NotImplementedError, RuntimeError):
                # no signal handlers on this platform; plain Ctrl+C still stops asyncio.run
                self.log.debug("signal handler unavailable for %s", sig)

    def trigger(self) -> bool:
        """Returns True when this interrupt confirmed the stop."""
        now = self._clock()
        if self._armed_at is not None and now - self._armed_at <= self.confirm_window:
            self.log.warning("stop confirmed; leaving relay")
            if self._task is not None:
                self._task.cancel()
            return True
        self._armed_at = now
        msg = f"{LEAVE_WARNING} Interrupt again within {self.confirm_window:.0f}s to stop."
        self.log.warning(msg)
        if self._notify is not None:
            self._notify(msg)
        return False
