"""
Frame schedulers for the live render loop.

The render loop never sleeps on its own: after every tick it asks a scheduler
to call it again on the next display frame. Two schedulers are provided:

    ManualFrameScheduler - holds the pending callback until run_pending() is
                           called (headless demos and tests)
    QtFrameScheduler     - single-shot QTimer re-armed each tick with the
                           primary screen's refresh interval
"""

import logging
from typing import Callable, Optional, Protocol

from PB_Libs.constants import DEFAULT_REFRESH_RATE_HZ

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class FrameScheduler(Protocol):
    def schedule(self, callback: TickCallback) -> None:
        ...

    def cancel(self) -> None:
        ...


class ManualFrameScheduler:
    """Scheduler driven explicitly by the caller."""

    def __init__(self) -> None:
        self._pending: Optional[TickCallback] = None
        self.scheduled_count = 0

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def schedule(self, callback: TickCallback) -> None:
        self._pending = callback
        self.scheduled_count += 1

    def cancel(self) -> None:
        self._pending = None

    def run_pending(self) -> bool:
        """
        Run the pending callback, if any.

        Returns:
            True if a callback ran
        """
        callback = self._pending
        if callback is None:
            return False
        self._pending = None
        callback()
        return True

    def run_frames(self, count: int) -> int:
        """Run up to count display frames; returns how many actually ran."""
        ran = 0
        for _ in range(count):
            if not self.run_pending():
                break
            ran += 1
        return ran


class QtFrameScheduler:
    """Display-paced scheduler built on a single-shot QTimer."""

    def __init__(self, parent=None, fallback_rate_hz: float = DEFAULT_REFRESH_RATE_HZ) -> None:
        from PyQt5.QtCore import Qt, QTimer

        self._timer = QTimer(parent)
        self._timer.setSingleShot(True)
        self._timer.setTimerType(Qt.PreciseTimer)
        self._timer.timeout.connect(self._fire)
        self._callback: Optional[TickCallback] = None
        self._interval_ms = self._refresh_interval_ms(fallback_rate_hz)
        logger.debug(f"Frame interval {self._interval_ms} ms")

    @staticmethod
    def _refresh_interval_ms(fallback_rate_hz: float) -> int:
        from PyQt5.QtGui import QGuiApplication

        rate = fallback_rate_hz
        screen = QGuiApplication.primaryScreen()
        if screen is not None and screen.refreshRate() > 0:
            rate = screen.refreshRate()
        return max(1, int(round(1000.0 / rate)))

    def schedule(self, callback: TickCallback) -> None:
        self._callback = callback
        self._timer.start(self._interval_ms)

    def cancel(self) -> None:
        self._timer.stop()
        self._callback = None

    def _fire(self) -> None:
        callback = self._callback
        self._callback = None
        if callback is not None:
            callback()
