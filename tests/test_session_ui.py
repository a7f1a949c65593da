from datetime import datetime, timedelta
from io import StringIO

import pytest
from PySide6.QtCore import QEventLoop, QObject, QTimer, Signal
from rich.console import Console

from app import events as ev
from app.state import Phase, TypingSession, UserStats
from app.themes import DEFAULT_THEME
from conftest import T0
from ui.main_window import WelcomeAction, WelcomeScreen
from ui.session_summary import SessionSummary, render_summary
from ui.session_ui import SessionUI


class FakeLive:
    def __init__(self, width=80):
        self.console = Console(width=width, file=StringIO(), color_system=None)
        self.renderable = None
        self.updates = 0

    def update(self, renderable, refresh=False):
        self.renderable = renderable
        self.updates += 1

    def text(self):
        self.console.file = StringIO()
        self.console.print(self.renderable)
        return self.console.file.getvalue()


class FakeKeys(QObject):
    keyPressed = Signal(str)


class FakeAdapter(QObject):
    continuationReady = Signal(str)
    continuationFailed = Signal(str)

    def __init__(self):
        super().__init__()
        self.requests = []
        self.cancelled = False

    def request_continuation(self, context, error_chars, error_words):
        self.requests.append((context, error_chars, error_words))
        return len(self.requests)

    def cancel(self):
        self.cancelled = True


@pytest.fixture
def live():
    return FakeLive()


@pytest.fixture
def keys(qapp):
    return FakeKeys()


def _session_ui(live, keys, engine, adapter=None):
    return SessionUI(live, keys, DEFAULT_THEME, engine, adapter=adapter, clock=lambda: T0 + 1)


def test_configuring_screen_then_typing(make_engine, live, keys):
    ui = _session_ui(live, keys, make_engine(started=False, duration_minutes=2))
    ui.refresh()
    assert "Session Duration" in live.text()
    assert "2 minutes" in live.text()

    ui.on_key("up")
    assert "3 minutes" in live.text()
    ui.on_key("enter")
    assert ui.engine.phase is Phase.ACTIVE
    out = live.text()
    assert "Time Remaining: 3:00" in out
    assert "Press ESC or CTRL-C to exit" in out


def test_keys_reach_the_engine(make_engine, live, keys):
    engine = make_engine("hello world")
    ui = _session_ui(live, keys, engine)
    for key in ["h", "a", "backspace", "e", "space"]:
        ui.on_key(key)
    assert engine.state.typed_text == "he "
    assert engine.state.error_count == 1


def test_quit_finishes_with_no_session(make_engine, live, keys):
    ui = _session_ui(live, keys, make_engine())
    results = []
    ui.finished.connect(results.append)
    ui.on_key("esc")
    assert ui.engine.phase is Phase.QUIT
    assert results == [None]
    assert ui.result is None
    assert not ui.timer.running


def test_completion_returns_session(make_engine, live, keys):
    ui = _session_ui(live, keys, make_engine("hi"))
    ui.dispatch(ev.CharInput("h"), T0 + 1)
    ui.dispatch(ev.CharInput("i"), T0 + 2)
    assert isinstance(ui.result, TypingSession)
    assert ui.result.errors == 0
    # further input after the end is ignored
    ui.dispatch(ev.CharInput("x"), T0 + 3)
    assert ui.engine.state.typed_text == "hi"


def test_generation_request_goes_to_adapter(make_engine, live, keys):
    adapter = FakeAdapter()
    engine = make_engine("abc", generative=True)
    ui = _session_ui(live, keys, engine, adapter=adapter)
    ui.on_tick(T0 + 0.5)
    assert adapter.requests and adapter.requests[0][0] == "abc"

    adapter.continuationReady.emit("Next one.")
    assert engine.state.target_text == "abc Next one."
    assert "Generating" not in live.text()


def test_generation_failure_from_adapter(make_engine, live, keys):
    adapter = FakeAdapter()
    engine = make_engine("abc", generative=True)
    ui = _session_ui(live, keys, engine, adapter=adapter)
    ui.on_tick(T0 + 0.5)
    adapter.continuationFailed.emit("offline")
    assert engine.state.generation.consecutive_failures == 1
    assert not engine.state.generation.pending


def test_pending_generation_shows_in_header(make_engine, live, keys):
    adapter = FakeAdapter()
    ui = _session_ui(live, keys, make_engine("abc", generative=True), adapter=adapter)
    ui.on_tick(T0 + 0.5)
    assert "Generating..." in live.text()


def test_request_without_adapter_fails_immediately(make_engine, live, keys):
    engine = make_engine("abc", generative=True)
    ui = _session_ui(live, keys, engine)
    ui.on_tick(T0 + 0.5)
    assert not engine.state.generation.pending
    assert engine.state.generation.consecutive_failures == 1


def test_quit_cancels_adapter(make_engine, live, keys):
    adapter = FakeAdapter()
    ui = _session_ui(live, keys, make_engine("abc", generative=True), adapter=adapter)
    ui.on_key("ctrl+c")
    assert adapter.cancelled


def test_flash_is_cleared_by_timer(make_engine, live, keys):
    engine = make_engine(typo_flash_enabled=True, typo_flash_duration_ms=10)
    ui = _session_ui(live, keys, engine)
    ui.on_key("x")
    assert engine.state.flash_started_at is not None

    loop = QEventLoop()
    QTimer.singleShot(100, loop.quit)
    loop.exec()
    assert engine.state.flash_started_at is None


def test_exec_runs_until_quit(make_engine, live, keys):
    ui = _session_ui(live, keys, make_engine(started=False))
    QTimer.singleShot(0, lambda: keys.keyPressed.emit("esc"))
    assert ui.exec() is None
    assert ui.engine.phase is Phase.QUIT


# ---------------- welcome / summary ----------------
def _history():
    return [
        TypingSession(datetime(2024, 1, 1), 40.0, 90.0, 5, timedelta(seconds=60)),
        TypingSession(datetime(2024, 1, 2), 60.0, 98.0, 1, timedelta(seconds=60)),
    ]


def test_welcome_menu_navigation(live, keys):
    screen = WelcomeScreen(live, keys, DEFAULT_THEME, UserStats())
    screen.on_key("down")
    assert screen.cursor == 1
    screen.on_key("j")
    assert screen.cursor == 0
    screen.on_key("up")
    assert screen.cursor == 1
    screen.on_key("enter")
    assert screen.result is WelcomeAction.EXIT


def test_welcome_start_and_quit_keys(live, keys):
    screen = WelcomeScreen(live, keys, DEFAULT_THEME, UserStats())
    screen.on_key("space")
    assert screen.result is WelcomeAction.START_SESSION

    screen = WelcomeScreen(live, keys, DEFAULT_THEME, UserStats())
    screen.on_key("q")
    assert screen.result is WelcomeAction.EXIT


def test_welcome_shows_history(live, keys):
    screen = WelcomeScreen(live, keys, DEFAULT_THEME, UserStats(sessions=_history()))
    screen.refresh()
    out = live.text()
    assert "WPM: 50" in out
    assert "Sessions: 2" in out
    assert "Lets Exercise" in out


def test_summary_contents():
    session = TypingSession(datetime(2024, 1, 3), 52.0, 96.0, 2, timedelta(seconds=75))
    console = Console(width=100, file=StringIO(), color_system=None)
    console.print(render_summary(session, _history() + [session], DEFAULT_THEME, 100, weak_keys=["e", " "]))
    out = console.file.getvalue()
    assert "SESSION COMPLETE!" in out
    assert "1:15" in out
    assert "96.0%" in out
    assert "Historical Stats" in out
    assert "Outstanding" in out
    assert "Weak keys" in out


def test_summary_only_enter_leaves(live, keys):
    session = TypingSession(datetime(2024, 1, 3), 30.0, 80.0, 9, timedelta(seconds=60))
    screen = SessionSummary(live, keys, DEFAULT_THEME, session)
    screen.on_key("esc")
    screen.on_key("q")
    assert not screen._done
    screen.on_key("enter")
    assert screen._done
