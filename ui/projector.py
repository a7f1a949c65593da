# ui/projector.py
"""
SessionState -> Frame.

Everything the screen shows is derived here from the state and the
current time, with no side effects, so the same state always yields the
same frame.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from app.calculation import current_accuracy, current_wpm
from app.state import Phase, SessionState


class CharClass(Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    CURSOR = "cursor"
    PENDING = "pending"


@dataclass(frozen=True)
class HeaderStats:
    wpm: float
    accuracy: float
    errors: int
    remaining_seconds: float
    progress: float
    generation_pending: bool


@dataclass(frozen=True)
class Frame:
    phase: Phase
    duration_minutes: int
    header: HeaderStats
    spans: Tuple[Tuple[str, CharClass], ...]
    problem_words: Tuple[str, ...]
    flash_active: bool
    viewport_start: int
    waiting_for_text: bool


def viewport(text_len: int, cursor: int, width: int) -> Tuple[int, int]:
    if width <= 0:
        return 0, 0
    if text_len <= width:
        return 0, text_len
    start = cursor - width // 2
    start = max(0, min(start, text_len - width))
    return start, start + width


def classify(typed: str, target: str, i: int) -> CharClass:
    if i < len(typed):
        return CharClass.CORRECT if typed[i] == target[i] else CharClass.INCORRECT
    if i == len(typed):
        return CharClass.CURSOR
    return CharClass.PENDING


def project(state: SessionState, now: float, width: int, flash_duration_ms: int = 0) -> Frame:
    typed, target = state.typed_text, state.target_text
    elapsed = state.elapsed(now)

    if state.elapsed_budget > 0:
        progress = min(1.0, elapsed / state.elapsed_budget)
    else:
        progress = 0.0

    header = HeaderStats(
        wpm=current_wpm(len(typed), elapsed),
        accuracy=current_accuracy(len(typed), state.error_count),
        errors=state.error_count,
        remaining_seconds=state.remaining_seconds(now),
        progress=progress,
        generation_pending=state.generation.pending,
    )

    # a cursor at the end of the text gets a blank slot of its own
    slots = len(target) + (1 if state.cursor >= len(target) else 0)
    start, end = viewport(slots, state.cursor, width)
    spans = tuple(
        (target[i] if i < len(target) else " ", classify(typed, target, i))
        for i in range(start, end)
    )

    flash = (
        state.flash_started_at is not None
        and (now - state.flash_started_at) * 1000.0 < flash_duration_ms
    )

    return Frame(
        phase=state.phase,
        duration_minutes=state.configured_duration_minutes,
        header=header,
        spans=spans,
        problem_words=tuple(state.current_problem_words),
        flash_active=flash,
        viewport_start=start,
        waiting_for_text=state.generation.pending and state.cursor >= len(target),
    )
