# ui/widgets/typing_area.py
from rich.columns import Columns
from rich.console import Group
from rich.panel import Panel
from rich.text import Text
from rich import box

from app.calculation import format_duration
from ui.projector import CharClass, Frame

PROGRESS_MAX_WIDTH = 50


def _class_style(theme, cls: CharClass) -> str:
    return {
        CharClass.CORRECT: theme.correct,
        CharClass.INCORRECT: theme.incorrect,
        CharClass.CURSOR: theme.current,
        CharClass.PENDING: theme.normal,
    }[cls]


def render_header(frame: Frame, theme) -> Text:
    h = frame.header
    line = (
        f"Time Remaining: {format_duration(h.remaining_seconds)} | "
        f"WPM: {h.wpm:.0f} | Accuracy: {h.accuracy:.1f}% | Errors: {h.errors}"
    )
    if h.generation_pending:
        line += " | Generating..."
    return Text(line, style=theme.flash if frame.flash_active else "")


def render_progress(frame: Frame, theme, terminal_width: int) -> Text:
    bar_width = max(0, min(PROGRESS_MAX_WIDTH, terminal_width - 10))
    filled = int(bar_width * frame.header.progress)
    out = Text("Progress: [")
    out.append("█" * filled, style=theme.progress_fill)
    out.append("░" * (bar_width - filled), style=theme.progress_bar)
    out.append(f"] {frame.header.progress * 100:.0f}%")
    return out


def render_text(frame: Frame, theme) -> Text:
    out = Text(no_wrap=True, overflow="crop")
    for ch, cls in frame.spans:
        if ch in ("\n", "\t"):
            ch = " "
        out.append(ch, style=_class_style(theme, cls))
    if frame.waiting_for_text:
        out.append(" …", style=theme.muted)
    return out


def render_problem_words(frame: Frame, theme):
    if not frame.problem_words:
        return None
    boxes = [Panel(word, box=box.ROUNDED, border_style=theme.border, padding=(0, 0), expand=False)
             for word in frame.problem_words]
    return Group(
        Text("Mistyped words for ai suggestions:", style=theme.muted),
        Columns(boxes, padding=(0, 0)),
    )


def render_typing_area(frame: Frame, theme, terminal_width: int):
    parts = [
        render_header(frame, theme),
        render_progress(frame, theme, terminal_width),
        Text(""),
        render_text(frame, theme),
    ]
    words = render_problem_words(frame, theme)
    if words is not None:
        parts.extend([Text(""), words])
    parts.extend([Text(""), Text("Press ESC or CTRL-C to exit", style=theme.muted)])
    return Group(*parts)
