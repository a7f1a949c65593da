from PySide6.QtCore import QEventLoop, QTimer

from core.chrono import SessionTicker


def test_ticks_carry_clock_value(qapp):
    ticker = SessionTicker(tick_ms=5, clock=lambda: 42.0)
    seen = []
    loop = QEventLoop()

    def on_tick(now):
        seen.append(now)
        if len(seen) == 3:
            loop.quit()

    ticker.ticked.connect(on_tick)
    ticker.start()
    assert ticker.running
    QTimer.singleShot(2000, loop.quit)
    loop.exec()
    ticker.stop()

    assert seen[:3] == [42.0, 42.0, 42.0]
    assert not ticker.running


def test_default_interval(qapp):
    assert SessionTicker().interval_ms == 100
