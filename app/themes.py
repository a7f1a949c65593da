# app/themes.py
from __future__ import annotations
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Any
import json
import logging

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Theme:
    """rich style strings for each role on screen."""
    name: str
    correct: str
    incorrect: str
    current: str
    normal: str
    title: str
    subtitle: str
    border: str
    highlight: str
    muted: str
    info: str
    progress_bar: str
    progress_fill: str
    flash: str


# -------- Built-in themes --------
DEFAULT_THEME = Theme(
    name="Default",
    correct="green",
    incorrect="red",
    current="black on cyan",
    normal="white",
    title="bold white",
    subtitle="italic bright_black",
    border="bright_black",
    highlight="bold cyan",
    muted="bright_black",
    info="white",
    progress_bar="bright_black",
    progress_fill="cyan",
    flash="bold white on red",
)

DARK_THEME = Theme(
    name="Dark",
    correct="bright_green",
    incorrect="bright_red",
    current="black on bright_yellow",
    normal="bright_white",
    title="bold bright_cyan",
    subtitle="italic bright_magenta",
    border="bright_cyan",
    highlight="bold bright_yellow",
    muted="bright_black",
    info="bright_blue",
    progress_bar="bright_black",
    progress_fill="bright_cyan",
    flash="bold bright_white on red",
)

THEMES: Dict[str, Theme] = {
    "default": DEFAULT_THEME,
    "dark": DARK_THEME,
}


# -------- helpers --------
def _theme_from_dict(d: Dict[str, Any]) -> Theme:
    """Unspecified roles inherit from the default theme."""
    if "name" not in d:
        raise ValueError("Missing theme key: name")
    base = {f.name: getattr(DEFAULT_THEME, f.name) for f in fields(Theme)}
    unknown = set(d) - set(base)
    if unknown:
        raise ValueError(f"Unknown theme keys: {', '.join(sorted(unknown))}")
    base.update({k: str(v) for k, v in d.items()})
    return Theme(**base)


# -------- public API --------
def load_custom_themes(path) -> int:
    """Load extra themes from a themes.json list. Returns how many were added."""
    p = Path(path)
    if not p.exists():
        return 0
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log.warning("Failed to read themes file %s: %s", p, e)
        return 0
    if not isinstance(data, list):
        log.warning("Themes file %s must hold a list", p)
        return 0
    added = 0
    for item in data:
        try:
            theme = _theme_from_dict(item)
        except (TypeError, ValueError) as e:
            log.warning("Skipping theme entry %r: %s", item, e)
            continue
        THEMES[theme.name.lower()] = theme
        added += 1
    return added


def get_theme(name: str) -> Theme:
    theme = THEMES.get((name or "").lower())
    if theme is None:
        log.warning("Unknown theme %r, using default", name)
        return DEFAULT_THEME
    return theme
