# services/typing_engine.py
"""
Session state machine.

``TypingEngine`` owns one ``SessionState`` and is the only thing that
mutates it. Every input (keys, timer ticks, background generation
results) is fed through ``handle(event, now)``; the return value is a list
of effects the caller must carry out. Once the session reaches a terminal
phase every further event is ignored.
"""
from __future__ import annotations
import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import List, Optional

from app import events as ev
from app.calculation import final_accuracy, final_wpm
from app.state import (
    MAX_DURATION_MINUTES,
    MAX_PROBLEM_WORDS,
    MIN_DURATION_MINUTES,
    GenerationState,
    Phase,
    SessionState,
    TypingSession,
)
from app.validation import analyze_errors

log = logging.getLogger(__name__)


class TypingEngine:
    def __init__(
        self,
        target_text: str,
        *,
        generative: bool = False,
        pregenerate_threshold: int = 20,
        max_generation_failures: int = 3,
        block_on_typo: bool = False,
        typo_flash_enabled: bool = False,
        typo_flash_duration_ms: int = 150,
        duration_minutes: int = 1,
    ):
        self.block_on_typo = block_on_typo
        self.typo_flash_enabled = typo_flash_enabled
        self.typo_flash_duration_ms = typo_flash_duration_ms
        self.state = SessionState(
            target_text=target_text or "",
            configured_duration_minutes=_clamp_minutes(duration_minutes),
            sentence_end=len(target_text or ""),
            generation=GenerationState(
                enabled=generative,
                last_context_sentence=target_text or "",
                pregenerate_threshold=pregenerate_threshold,
                max_failures=max(1, max_generation_failures),
            ),
        )

    @classmethod
    def from_config(cls, target_text: str, config, generative: bool = False) -> "TypingEngine":
        return cls(
            target_text,
            generative=generative,
            pregenerate_threshold=config.text.llm.pregenerate_threshold,
            max_generation_failures=config.text.llm.max_failures,
            block_on_typo=config.ui.block_on_typo,
            typo_flash_enabled=config.ui.typo_flash_enabled,
            typo_flash_duration_ms=config.ui.typo_flash_duration_ms,
            duration_minutes=config.ui.default_duration_minutes,
        )

    # ---------------- queries ----------------
    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def finished(self) -> bool:
        return self.state.phase.is_terminal

    @property
    def waiting_for_text(self) -> bool:
        """Cursor sits at the end of the text while a continuation is on its way."""
        s = self.state
        return s.phase is Phase.ACTIVE and s.generation.pending and s.cursor >= len(s.target_text)

    def flash_active(self, now: float) -> bool:
        started = self.state.flash_started_at
        if started is None:
            return False
        return (now - started) * 1000.0 < self.typo_flash_duration_ms

    # ---------------- dispatch ----------------
    def handle(self, event, now: float) -> List[object]:
        s = self.state
        if s.phase.is_terminal:
            return []

        if isinstance(event, ev.Quit):
            s.phase = Phase.QUIT
            return []

        if s.phase is Phase.CONFIGURING:
            return self._handle_configuring(event, now)

        if isinstance(event, ev.TimerTick):
            return self._on_tick(now)
        if isinstance(event, ev.CharInput):
            return self._on_char(event.char, now)
        if isinstance(event, ev.Backspace):
            self._on_backspace()
            return []
        if isinstance(event, ev.GenerationComplete):
            self._on_generation_complete(event.text)
            return []
        if isinstance(event, ev.GenerationFailed):
            self._on_generation_failed(event.reason)
            return []
        if isinstance(event, ev.FlashCleared):
            s.flash_started_at = None
            return []
        if isinstance(event, (ev.AdjustDuration, ev.Confirm)):
            return []
        raise AssertionError(f"unhandled event {event!r}")

    def _handle_configuring(self, event, now: float) -> List[object]:
        s = self.state
        if isinstance(event, ev.AdjustDuration):
            s.configured_duration_minutes = _clamp_minutes(s.configured_duration_minutes + event.delta)
        elif isinstance(event, ev.Confirm):
            s.phase = Phase.ACTIVE
            s.start_time = now
            s.last_keystroke_time = now
            s.elapsed_budget = s.configured_duration_minutes * 60.0
            log.info("session started: %d min, %d chars of text", s.configured_duration_minutes, len(s.target_text))
        # typing and generation results are meaningless before the session starts
        return []

    # ---------------- active handlers ----------------
    def _on_tick(self, now: float) -> List[object]:
        s = self.state
        gen = s.generation
        if now - s.start_time >= s.elapsed_budget:
            self._complete("time budget exhausted")
            return []

        if gen.can_request:
            remaining = s.remaining_chars
            if 0 < remaining <= gen.pregenerate_threshold:
                gen.pending = True
                log.debug("requesting continuation with %d chars left", remaining)
                return [
                    ev.RequestGeneration(
                        context=gen.last_context_sentence,
                        error_chars=Counter(gen.accumulated_error_chars),
                        error_words=tuple(sorted(gen.accumulated_error_words)),
                    )
                ]

        self._complete_if_exhausted()
        return []

    def _on_char(self, ch: str, now: float) -> List[object]:
        s = self.state
        if self.block_on_typo and s.has_typo:
            return []
        if s.cursor >= len(s.target_text):
            # only reachable while waiting on a continuation
            return []

        pos = s.cursor
        s.typed_text += ch
        s.keystroke_latencies.append(now - s.last_keystroke_time)
        s.last_keystroke_time = now

        effects: List[object] = []
        if ch != s.target_text[pos]:
            s.error_count += 1
            s.word_error_positions.add(pos)
            s.has_typo = True
            if self.typo_flash_enabled:
                s.flash_started_at = now
                effects.append(ev.ScheduleFlashClear(self.typo_flash_duration_ms))

        self._check_word_completed()
        self._check_sentence_completed()
        assert s.cursor <= len(s.target_text), "cursor ran past the target text"
        return effects

    def _on_backspace(self):
        s = self.state
        if not s.typed_text:
            return
        s.typed_text = s.typed_text[:-1]
        s.has_typo = False
        if s.last_word_end > s.cursor:
            # back inside a finished word: it gets re-checked from its first char
            s.last_word_end = s.typed_text.rfind(" ", 0, s.cursor) + 1

    def _on_generation_complete(self, text: str):
        s = self.state
        gen = s.generation
        if not gen.enabled:
            return
        text = (text or "").strip()
        if not text:
            self._on_generation_failed("empty continuation")
            return
        gen.pending = False
        gen.ready_text = text
        gen.consecutive_failures = 0
        s.target_text += " " + text

    def _on_generation_failed(self, reason: str):
        gen = self.state.generation
        if not gen.enabled:
            return
        gen.pending = False
        gen.ready_text = None
        gen.consecutive_failures += 1
        log.warning("text generation failed (%d in a row): %s", gen.consecutive_failures, reason)
        if gen.consecutive_failures >= gen.max_failures:
            gen.gave_up = True
            log.warning("giving up on text generation for this session")
        self._complete_if_exhausted()

    # ---------------- word / sentence tracking ----------------
    def _check_word_completed(self):
        s = self.state
        typed, target = s.typed_text, s.target_text
        n = len(typed)
        if n == 0 or n <= s.last_word_end:
            return
        if typed[-1] != " " and n != len(target):
            return

        start = s.last_word_end
        while start < n and typed[start] == " ":
            start += 1
        end = n - 1 if typed[-1] == " " else n

        if start < end:
            typed_word = typed[start:end]
            t_start, t_end = min(start, len(target)), min(end, len(target))
            while t_start < t_end and target[t_start] == " ":
                t_start += 1
            if t_end > t_start and target[t_end - 1] == " ":
                t_end -= 1
            if t_start < t_end:
                target_word = target[t_start:t_end]
                had_errors = any(i in s.word_error_positions for i in range(start, end))
                if had_errors or typed_word != target_word:
                    if target_word not in s.current_problem_words and len(s.current_problem_words) < MAX_PROBLEM_WORDS:
                        s.current_problem_words.append(target_word)

        s.last_word_end = n

    def _check_sentence_completed(self):
        s = self.state
        gen = s.generation
        if s.cursor < s.sentence_end:
            return

        if not gen.enabled:
            self._complete("text finished")
            return

        if gen.ready:
            end = s.sentence_end
            error_chars, problem_words = analyze_errors(s.typed_text[:end], s.target_text[:end])
            gen.fold_errors(error_chars, problem_words)
            gen.last_context_sentence = gen.ready_text
            gen.ready_text = None
            s.sentence_end = len(s.target_text)
            s.current_problem_words = []
            s.word_error_positions = set()
            s.last_word_end = s.cursor
            return

        if gen.pending:
            return  # wait for the continuation

        self._complete_if_exhausted()

    def _complete_if_exhausted(self):
        s = self.state
        gen = s.generation
        if not gen.enabled or gen.pending or gen.ready:
            return
        if s.cursor >= len(s.target_text):
            self._complete("no more text available")

    def _complete(self, reason: str):
        self.state.phase = Phase.COMPLETED
        log.info("session completed: %s", reason)

    # ---------------- result ----------------
    def finalize(self) -> Optional[TypingSession]:
        s = self.state
        if s.phase is Phase.QUIT or s.phase is Phase.CONFIGURING:
            return None
        duration = max(0.0, s.last_keystroke_time - s.start_time)
        typed_len = len(s.typed_text)
        return TypingSession(
            started_at=datetime.fromtimestamp(s.start_time),
            wpm=final_wpm(typed_len, duration),
            accuracy=final_accuracy(typed_len, s.error_count),
            errors=s.error_count,
            duration=timedelta(seconds=duration),
        )


def _clamp_minutes(minutes: int) -> int:
    return max(MIN_DURATION_MINUTES, min(MAX_DURATION_MINUTES, int(minutes)))
