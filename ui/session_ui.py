from __future__ import annotations
import logging
import time

from PySide6.QtCore import QTimer, Signal

from app import events as ev
from app.state import Phase
from core.chrono import DEFAULT_TICK_MS, SessionTicker
from ui.projector import project
from ui.screen import Screen
from ui.widgets.session_dialog import render_session_dialog
from ui.widgets.typing_area import render_typing_area

log = logging.getLogger(__name__)

VIEW_MARGIN = 4


def key_to_event(key: str):
    if key in ("esc", "ctrl+c"):
        return ev.Quit()
    if key == "up":
        return ev.AdjustDuration(+1)
    if key == "down":
        return ev.AdjustDuration(-1)
    if key == "enter":
        return ev.Confirm()
    if key == "backspace":
        return ev.Backspace()
    if key == "space":
        return ev.CharInput(" ")
    if len(key) == 1:
        return ev.CharInput(key)
    return None


class SessionUI(Screen):
    """
    Runs one typing session: feeds keys, timer ticks and generation results
    into the engine, carries out the effects it asks for, and redraws.
    Returns the finished TypingSession, or None when the user quit.
    """

    finished = Signal(object)

    def __init__(self, live, keys, theme, engine, adapter=None, tick_ms: int = DEFAULT_TICK_MS, clock=time.time, parent=None):
        super().__init__(live, keys, theme, parent)
        self.engine = engine
        self.adapter = adapter
        self.clock = clock

        self.timer = SessionTicker(tick_ms=tick_ms, clock=clock, parent=self)
        self.timer.ticked.connect(self.on_tick)

        if adapter is not None:
            adapter.continuationReady.connect(self.on_continuation_ready)
            adapter.continuationFailed.connect(self.on_continuation_failed)

    # ---------------- inputs ----------------
    def on_enter(self):
        self.timer.start()

    def on_key(self, key: str):
        event = key_to_event(key)
        if event is not None:
            self.dispatch(event)

    def on_tick(self, now: float):
        self.dispatch(ev.TimerTick(), now)

    def on_continuation_ready(self, text: str):
        self.dispatch(ev.GenerationComplete(text))

    def on_continuation_failed(self, reason: str):
        self.dispatch(ev.GenerationFailed(reason))

    # ---------------- engine ----------------
    def dispatch(self, event, now: float | None = None):
        if self.engine.finished:
            return
        now = self.clock() if now is None else now
        for effect in self.engine.handle(event, now):
            self._run_effect(effect)

        if self.engine.finished:
            self._finish()
        else:
            self.refresh()

    def _run_effect(self, effect):
        if isinstance(effect, ev.RequestGeneration):
            if self.adapter is None:
                self.engine.handle(ev.GenerationFailed("no text generator configured"), self.clock())
                return
            self.adapter.request_continuation(effect.context, effect.error_chars, effect.error_words)
        elif isinstance(effect, ev.ScheduleFlashClear):
            QTimer.singleShot(effect.delay_ms, self._clear_flash)

    def _clear_flash(self):
        self.dispatch(ev.FlashCleared())

    def _finish(self):
        self.timer.stop()
        if self.adapter is not None:
            self.adapter.cancel()
        session = self.engine.finalize()
        if self.engine.phase is Phase.QUIT:
            log.info("session cancelled by user")
        self.finished.emit(session)
        self.done(session)

    # ---------------- view ----------------
    def render(self):
        frame = project(
            self.engine.state,
            self.clock(),
            max(1, self.width - VIEW_MARGIN),
            self.engine.typo_flash_duration_ms if self.engine.typo_flash_enabled else 0,
        )
        if frame.phase is Phase.CONFIGURING:
            return render_session_dialog(frame.duration_minutes, self.theme)
        return render_typing_area(frame, self.theme, self.width)
