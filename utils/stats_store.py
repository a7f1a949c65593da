import json
from pathlib import Path

from app.errors import StatsError
from app.state import TypingSession, UserStats


def _stats_path(path) -> Path:
    return Path(path).expanduser()


def load_user_stats(path) -> UserStats:
    p = _stats_path(path)
    if not p.exists():
        return UserStats()
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as e:
        raise StatsError(f"failed to read stats {p}: {e}")
    if not raw.strip():
        return UserStats()
    try:
        data = json.loads(raw)
        sessions = data.get("sessions") or []
        return UserStats(sessions=[TypingSession.from_dict(s) for s in sessions])
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        raise StatsError(f"corrupt stats file {p}: {e}")


def save_user_stats(path, stats: UserStats) -> None:
    p = _stats_path(path)
    payload = {"sessions": [s.to_dict() for s in stats.sessions]}
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    except OSError as e:
        raise StatsError(f"failed to save stats {p}: {e}")
