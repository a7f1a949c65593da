# core/chrono.py
import time

from PySide6.QtCore import QObject, QTimer, Signal

DEFAULT_TICK_MS = 100


class SessionTicker(QObject):
    """Periodic wall-clock tick that drives the session's time budget checks."""

    ticked = Signal(float)  # clock() at the tick, time.time() by default

    def __init__(self, tick_ms: int = DEFAULT_TICK_MS, clock=time.time, parent=None):
        super().__init__(parent)
        self.clock = clock
        self._timer = QTimer(self)
        self._timer.setInterval(tick_ms)
        self._timer.timeout.connect(self._emit_tick)

    @property
    def running(self) -> bool:
        return self._timer.isActive()

    @property
    def interval_ms(self) -> int:
        return self._timer.interval()

    def start(self):
        self._timer.start()

    def stop(self):
        self._timer.stop()

    def _emit_tick(self):
        self.ticked.emit(self.clock())
