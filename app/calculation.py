from typing import Sequence, Tuple

CHARS_PER_WORD = 5.0
MIN_ELAPSED_SEC = 1.0


def current_wpm(typed_len: int, elapsed_sec: float) -> float:
    """
    WPM = (typed chars / 5) / (elapsed minutes)
    Returns 0 for the first second to avoid a spike on the first keystroke.
    """
    if elapsed_sec < MIN_ELAPSED_SEC:
        return 0.0
    return (typed_len / CHARS_PER_WORD) / (elapsed_sec / 60.0)


def current_accuracy(typed_len: int, error_count: int) -> float:
    if typed_len == 0:
        return 0.0
    return 100.0 * (typed_len - error_count) / typed_len


def final_wpm(typed_len: int, duration_sec: float) -> float:
    # duration is start -> last keystroke, not the configured session length
    return current_wpm(typed_len, duration_sec)


def final_accuracy(typed_len: int, error_count: int) -> float:
    return current_accuracy(typed_len, error_count)


def historical_stats(sessions: Sequence) -> Tuple[float, float, float]:
    """(average wpm, best wpm, average accuracy) over past sessions."""
    if not sessions:
        return 0.0, 0.0, 0.0
    total_wpm = sum(s.wpm for s in sessions)
    total_acc = sum(s.accuracy for s in sessions)
    best = max(0.0, max(s.wpm for s in sessions))
    return total_wpm / len(sessions), best, total_acc / len(sessions)


def format_duration(seconds: float) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


def performance_message(wpm: float, accuracy: float) -> str:
    if accuracy >= 95 and wpm >= 50:
        return "Outstanding! You're a typing master!"
    if accuracy >= 90 and wpm >= 40:
        return "Great job! Keep up the excellent work!"
    if accuracy >= 85:
        return "Good progress! Practice makes perfect!"
    return "Keep practicing! You're improving!"
