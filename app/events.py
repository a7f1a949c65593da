"""
Events consumed by the session engine and effects it hands back.

Key input, timer ticks and generation results all arrive through the one
Qt event loop and are turned into these values before reaching
``TypingEngine.handle``. Effects are requests the engine cannot carry out
itself (starting a background job, arming a timer).
"""
from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class AdjustDuration:
    delta: int


@dataclass(frozen=True)
class Confirm:
    pass


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class TimerTick:
    pass


@dataclass(frozen=True)
class CharInput:
    char: str

    def __post_init__(self):
        if len(self.char) != 1:
            raise ValueError(f"CharInput takes a single character, got {self.char!r}")


@dataclass(frozen=True)
class Backspace:
    pass


@dataclass(frozen=True)
class GenerationComplete:
    text: str


@dataclass(frozen=True)
class GenerationFailed:
    reason: str = ""


@dataclass(frozen=True)
class FlashCleared:
    pass


# -------- effects --------
@dataclass(frozen=True)
class RequestGeneration:
    context: str
    error_chars: Counter = field(default_factory=Counter, compare=False)
    error_words: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ScheduleFlashClear:
    delay_ms: int
