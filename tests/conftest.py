import pytest
from PySide6.QtCore import QCoreApplication

from app import events as ev
from services.typing_engine import TypingEngine

T0 = 1_000_000.0


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point config/data lookups at a throwaway directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("TOUCHTYPER_LLM_API_KEY", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def make_engine():
    """Build an engine; started=True confirms the duration at T0."""

    def _make(text="hello world", started=True, **kwargs):
        engine = TypingEngine(text, **kwargs)
        if started:
            engine.handle(ev.Confirm(), T0)
        return engine

    return _make


def type_text(engine, text, start=T0 + 1.0, step=0.1):
    """Feed ``text`` one key at a time; returns collected effects and the last timestamp."""
    effects = []
    now = start
    for ch in text:
        effects.extend(engine.handle(ev.CharInput(ch), now))
        now += step
    return effects, now
