# app/state.py
from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Set

MIN_DURATION_MINUTES = 1
MAX_DURATION_MINUTES = 60
MAX_PROBLEM_WORDS = 10


class Phase(Enum):
    CONFIGURING = "configuring"
    ACTIVE = "active"
    COMPLETED = "completed"
    QUIT = "quit"

    @property
    def is_terminal(self) -> bool:
        return self in (Phase.COMPLETED, Phase.QUIT)


@dataclass
class GenerationState:
    enabled: bool = False
    pending: bool = False
    ready_text: Optional[str] = None
    last_context_sentence: str = ""
    accumulated_error_chars: Counter = field(default_factory=Counter)
    accumulated_error_words: Set[str] = field(default_factory=set)
    pregenerate_threshold: int = 20
    consecutive_failures: int = 0
    max_failures: int = 3
    gave_up: bool = False

    @property
    def ready(self) -> bool:
        return self.ready_text is not None

    @property
    def can_request(self) -> bool:
        return self.enabled and not self.pending and not self.ready and not self.gave_up

    def fold_errors(self, error_chars, problem_words):
        # called once per finished sentence with the whole typed prefix, so older misses keep counting up
        self.accumulated_error_chars.update(error_chars)
        self.accumulated_error_words.update(problem_words)

    def ranked_error_chars(self) -> List[str]:
        return [ch for ch, _ in sorted(self.accumulated_error_chars.items(), key=lambda x: (-x[1], x[0]))]


@dataclass
class SessionState:
    target_text: str = ""
    typed_text: str = ""
    error_count: int = 0
    word_error_positions: Set[int] = field(default_factory=set)
    start_time: float = 0.0
    last_keystroke_time: float = 0.0
    configured_duration_minutes: int = 1
    elapsed_budget: float = 0.0  # seconds
    phase: Phase = Phase.CONFIGURING
    generation: GenerationState = field(default_factory=GenerationState)

    keystroke_latencies: List[float] = field(default_factory=list)
    current_problem_words: List[str] = field(default_factory=list)
    last_word_end: int = 0
    sentence_end: int = 0
    has_typo: bool = False
    flash_started_at: Optional[float] = None

    @property
    def cursor(self) -> int:
        return len(self.typed_text)

    @property
    def remaining_chars(self) -> int:
        return len(self.target_text) - len(self.typed_text)

    def elapsed(self, now: float) -> float:
        if self.phase is Phase.CONFIGURING:
            return 0.0
        return max(0.0, now - self.start_time)

    def remaining_seconds(self, now: float) -> float:
        if self.phase is Phase.CONFIGURING:
            return self.configured_duration_minutes * 60.0
        return max(0.0, self.elapsed_budget - self.elapsed(now))


@dataclass(frozen=True)
class TypingSession:
    started_at: datetime
    wpm: float
    accuracy: float
    errors: int
    duration: timedelta

    def to_dict(self) -> Dict[str, object]:
        return {
            "date": self.started_at.isoformat(),
            "wpm": self.wpm,
            "accuracy": self.accuracy,
            "errors": self.errors,
            "duration": self.duration.total_seconds(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, object]) -> "TypingSession":
        return cls(
            started_at=datetime.fromisoformat(str(d["date"])),
            wpm=float(d.get("wpm", 0.0)),
            accuracy=float(d.get("accuracy", 0.0)),
            errors=int(d.get("errors", 0)),
            duration=timedelta(seconds=float(d.get("duration", 0.0))),
        )


@dataclass
class UserStats:
    sessions: List[TypingSession] = field(default_factory=list)


@dataclass
class SessionResult:
    error: Optional[Exception] = None
    session: Optional[TypingSession] = None
    exited: bool = False
