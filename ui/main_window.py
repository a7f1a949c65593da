# ui/main_window.py
from __future__ import annotations
import logging
from enum import Enum
from typing import List, Optional

from rich import box
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from app.calculation import historical_stats
from app.errors import StatsError
from app.state import SessionResult, UserStats
from app.themes import get_theme, load_custom_themes
from app.validation import analyze_errors
from core.threads import TextGenerationAdapter
from services.typing_engine import TypingEngine
from ui.screen import Screen
from ui.session_summary import SessionSummary
from ui.session_ui import SessionUI
from ui.terminal import KeyReader, raw_terminal
from utils.file_handler import default_themes_path
from utils.stats_store import load_user_stats, save_user_stats

log = logging.getLogger(__name__)

LOGO = r"""
 ████████╗ ██████╗ ██╗   ██╗ ██████╗██╗  ██╗
 ╚══██╔══╝██╔═══██╗██║   ██║██╔════╝██║  ██║
    ██║   ██║   ██║██║   ██║██║     ███████║
    ██║   ██║   ██║██║   ██║██║     ██╔══██║
    ██║   ╚██████╔╝╚██████╔╝╚██████╗██║  ██║
    ╚═╝    ╚═════╝  ╚═════╝  ╚═════╝╚═╝  ╚═╝
"""


class WelcomeAction(Enum):
    START_SESSION = "Lets Exercise"
    EXIT = "Naah not today lets exit"


class WelcomeScreen(Screen):
    def __init__(self, live, keys, theme, stats: UserStats, parent=None):
        super().__init__(live, keys, theme, parent)
        self.stats = stats
        self.choices: List[WelcomeAction] = [WelcomeAction.START_SESSION, WelcomeAction.EXIT]
        self.cursor = 0

    def on_key(self, key: str):
        if key in ("ctrl+c", "esc", "q"):
            self.done(WelcomeAction.EXIT)
            return
        if key in ("up", "k"):
            self.cursor = (self.cursor - 1) % len(self.choices)
        elif key in ("down", "j"):
            self.cursor = (self.cursor + 1) % len(self.choices)
        elif key in ("enter", "space"):
            self.done(self.choices[self.cursor])
            return
        self.refresh()

    def render(self):
        t = self.theme
        parts = [
            Text(LOGO, style=t.title),
            Text("      AI-Powered Touch Typing Trainer", style=t.subtitle),
            Text(""),
        ]

        if self.stats.sessions:
            avg_wpm, best_wpm, avg_acc = historical_stats(self.stats.sessions)
            line = Text()
            line.append("Avg", style=t.info)
            line.append(f" WPM: {avg_wpm:.0f} | ")
            line.append("Best", style=t.highlight)
            line.append(f" WPM: {best_wpm:.0f} | ")
            line.append("Accuracy", style=t.info)
            line.append(f": {avg_acc:.1f}% | ")
            line.append("Sessions", style=t.info)
            line.append(f": {len(self.stats.sessions)}")
            parts.extend([Panel(line, box=box.ROUNDED, border_style=t.border, expand=False), Text("")])

        menu = Text()
        for i, choice in enumerate(self.choices):
            if i == self.cursor:
                menu.append("> ", style=t.highlight)
                menu.append(choice.value + "\n", style=t.highlight)
            else:
                menu.append("   " + choice.value + "\n")
        parts.append(Panel(menu, box=box.ROUNDED, border_style=t.border, padding=(1, 2), width=50))
        parts.append(Text(""))
        parts.append(Text("Use arrow keys (↑/↓) to navigate • Enter to select • q/Ctrl+C to quit", style=t.muted))
        return Group(*parts)


class MainWindow:
    """
    Whole-program flow: welcome menu -> typing session -> saved stats -> summary.
    Must be created after the QCoreApplication.
    """

    def __init__(self, config, text: str, text_source, console: Optional[Console] = None):
        self.config = config
        self.text = text
        self.text_source = text_source
        self.console = console or Console()
        try:
            load_custom_themes(default_themes_path())
        except OSError as e:
            log.warning("Could not locate custom themes: %s", e)
        self.theme = get_theme(config.ui.theme)

    def _make_engine(self) -> TypingEngine:
        generative = bool(getattr(self.text_source, "supports_continuation", False))
        return TypingEngine.from_config(self.text, self.config, generative=generative)

    def _make_adapter(self, engine: TypingEngine) -> Optional[TextGenerationAdapter]:
        if not engine.state.generation.enabled:
            return None
        return TextGenerationAdapter(self.text_source, timeout=float(self.config.text.llm.timeout_seconds))

    @staticmethod
    def _weak_keys(engine: TypingEngine) -> List[str]:
        s = engine.state
        ranked = s.generation.ranked_error_chars()
        tail, _ = analyze_errors(s.typed_text, s.target_text)
        return ranked + sorted(tail - set(ranked))

    def run(self) -> SessionResult:
        stats_path = self.config.stats.file_dir
        try:
            stats = load_user_stats(stats_path)
        except StatsError as e:
            return SessionResult(error=e)

        with raw_terminal(), Live(console=self.console, screen=True, auto_refresh=False, transient=True) as live:
            keys = KeyReader()

            action = WelcomeScreen(live, keys, self.theme, stats).exec()
            if action is not WelcomeAction.START_SESSION:
                return SessionResult(exited=True)

            engine = self._make_engine()
            session = SessionUI(live, keys, self.theme, engine, adapter=self._make_adapter(engine)).exec()
            if session is None:
                return SessionResult(exited=True)

            stats.sessions.append(session)
            try:
                save_user_stats(stats_path, stats)
            except StatsError as e:
                # still show the results
                log.warning("Failed to save stats: %s", e)

            SessionSummary(live, keys, self.theme, session, stats.sessions, self._weak_keys(engine)).exec()

        return SessionResult(session=session)
