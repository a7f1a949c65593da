# ui/session_summary.py
from __future__ import annotations
from typing import Sequence

from rich import box
from rich.align import Align
from rich.columns import Columns
from rich.console import Group
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from app.calculation import format_duration, historical_stats, performance_message
from ui.screen import Screen

WIDE_LAYOUT_MIN = 90
STAT_BOX_WIDTH = 18


def _stat_box(theme, label: str, value: str, highlight: bool = False) -> Panel:
    body = Text(justify="center")
    body.append(label + "\n\n", style=theme.muted)
    body.append(value, style=theme.highlight if highlight else "")
    return Panel(
        body,
        box=box.ROUNDED,
        border_style=theme.progress_fill if highlight else theme.border,
        padding=(1, 1),
        width=STAT_BOX_WIDTH,
    )


def _rows(boxes: Sequence[Panel], width: int):
    if width >= WIDE_LAYOUT_MIN:
        return Align.center(Columns(boxes, padding=(0, 1)))
    # narrow terminals get two rows of two
    return Group(
        Align.center(Columns(boxes[:2], padding=(0, 1))),
        Align.center(Columns(boxes[2:], padding=(0, 1))),
    )


def render_summary(session, sessions: Sequence, theme, width: int, weak_keys: Sequence[str] = ()):
    parts = [
        Panel(Align.center(Text("SESSION COMPLETE!", style=theme.title)), box=box.ROUNDED, border_style=theme.border),
        Rule(Text("Your Performance", style=theme.info), style=theme.border),
        _rows(
            [
                _stat_box(theme, "WPM", f"{session.wpm:.0f}", highlight=True),
                _stat_box(theme, "Accuracy", f"{session.accuracy:.1f}%"),
                _stat_box(theme, "Errors", str(session.errors)),
                _stat_box(theme, "Duration", format_duration(session.duration.total_seconds())),
            ],
            width,
        ),
    ]

    if sessions:
        avg_wpm, best_wpm, avg_acc = historical_stats(sessions)
        parts.append(Rule(Text("Historical Stats", style=theme.info), style=theme.border))
        parts.append(
            _rows(
                [
                    _stat_box(theme, "Avg WPM", f"{avg_wpm:.0f}"),
                    _stat_box(theme, "Best WPM", f"{best_wpm:.0f}", highlight=True),
                    _stat_box(theme, "Avg Accuracy", f"{avg_acc:.1f}%"),
                    _stat_box(theme, "Sessions", str(len(sessions))),
                ],
                width,
            )
        )

    if weak_keys:
        keys = Text("Weak keys: ", style=theme.muted)
        keys.append("  ".join(repr(k) if k == " " else k for k in weak_keys), style=theme.incorrect)
        parts.append(Align.center(keys))

    message = Text(performance_message(session.wpm, session.accuracy), style="italic")
    parts.append(Panel(Align.center(message), box=box.ROUNDED, border_style=theme.border))
    parts.append(Align.center(Text("Press Enter to exit...", style=theme.muted)))
    return Group(*parts)


class SessionSummary(Screen):
    """Post-session dashboard. Only Enter leaves it."""

    def __init__(self, live, keys, theme, session, sessions: Sequence = (), weak_keys: Sequence[str] = (), parent=None):
        super().__init__(live, keys, theme, parent)
        self.session = session
        self.sessions = list(sessions)
        self.weak_keys = list(weak_keys)

    def on_key(self, key: str):
        if key == "enter":
            self.done()

    def render(self):
        return render_summary(self.session, self.sessions, self.theme, self.width, self.weak_keys)
