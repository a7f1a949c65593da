# ui/widgets/session_dialog.py
from rich.console import Group
from rich.panel import Panel
from rich.text import Text
from rich import box

from app.state import MAX_DURATION_MINUTES, MIN_DURATION_MINUTES

DIALOG_WIDTH = 45


def duration_label(minutes: int) -> str:
    return f"{minutes} minute" if minutes == 1 else f"{minutes} minutes"


def render_session_dialog(minutes: int, theme):
    """Duration picker shown while the session is being configured."""
    body = Text(justify="center")
    body.append("Session Duration:\n\n", style=theme.info)
    body.append(duration_label(minutes) + "\n\n", style=theme.highlight)
    body.append(
        f"Use ↑/↓ arrows to adjust ({MIN_DURATION_MINUTES}-{MAX_DURATION_MINUTES} minutes)",
        style=theme.muted,
    )

    config_box = Panel(body, box=box.ROUNDED, border_style=theme.border, padding=(1, 2), width=DIALOG_WIDTH)

    hints = Text()
    hints.append("Press ENTER to start\n", style=theme.info)
    hints.append("Press ESC or CTRL-C to exit", style=theme.muted)
    hint_box = Panel(hints, box=box.DOUBLE, border_style=theme.border, padding=(0, 1), width=DIALOG_WIDTH)

    return Group(Text("Session Configuration", style=theme.title), Text(""), config_box, Text(""), hint_box)
