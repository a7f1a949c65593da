# app/config.py
from __future__ import annotations
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from app.errors import ConfigError
from utils.file_handler import default_config_path, default_stats_path, ensure_dir, find_config_file

log = logging.getLogger(__name__)


@dataclass
class LLMConfig:
    provider: str = "anthropic"
    model: str = "claude-3-5-haiku-latest"
    api_base: str = ""
    pregenerate_threshold: int = 20
    fallback_to_dummy: bool = True
    timeout_seconds: int = 5
    max_retries: int = 1
    max_failures: int = 3


@dataclass
class TextConfig:
    source: str = "dummy"
    llm: LLMConfig = field(default_factory=LLMConfig)


@dataclass
class UiConfig:
    theme: str = "default"
    block_on_typo: bool = False
    typo_flash_enabled: bool = False
    typo_flash_duration_ms: int = 150
    default_duration_minutes: int = 1


@dataclass
class StatsConfig:
    file_dir: str = ""


@dataclass
class Config:
    text: TextConfig = field(default_factory=TextConfig)
    ui: UiConfig = field(default_factory=UiConfig)
    stats: StatsConfig = field(default_factory=StatsConfig)


def default_config() -> Config:
    cfg = Config()
    try:
        cfg.stats.file_dir = str(default_stats_path())
    except OSError:
        cfg.stats.file_dir = "user_stats.json"
    return cfg


# -------- dict <-> dataclass --------
_TRUE_WORDS = {"true", "yes", "on", "1"}
_FALSE_WORDS = {"false", "no", "off", "0"}


def _to_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    word = str(value).strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _overlay(obj, data: Dict[str, Any], where: str):
    if not isinstance(data, dict):
        raise ConfigError(f"'{where}' must be a mapping, got {type(data).__name__}")
    for f in fields(obj):
        if f.name not in data or data[f.name] is None:
            continue
        current = getattr(obj, f.name)
        value = data[f.name]
        name = f"{where}.{f.name}" if where else f.name
        if hasattr(current, "__dataclass_fields__"):
            _overlay(current, value, name)
            continue
        try:
            if isinstance(current, bool):
                value = _to_bool(value)
            elif isinstance(current, int):
                value = int(value)
            else:
                value = str(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid value for '{name}': {value!r}") from e
        setattr(obj, f.name, value)


def config_from_dict(data: Optional[Dict[str, Any]]) -> Config:
    """Overlay ``data`` onto the defaults; unknown keys are ignored."""
    cfg = default_config()
    if data:
        _overlay(cfg, data, "")
    return cfg


def config_to_dict(cfg: Config) -> Dict[str, Any]:
    return asdict(cfg)


# -------- files --------
def load_config(path) -> Config:
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"failed to read config {p}: {e}") from e
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {p}: {e}") from e
    if data is not None and not isinstance(data, dict):
        raise ConfigError(f"config {p} must be a mapping at the top level")
    return config_from_dict(data)


def save_config(cfg: Config, path) -> Path:
    p = Path(path)
    ensure_dir(p.parent)
    p.write_text(yaml.safe_dump(config_to_dict(cfg), sort_keys=False), encoding="utf-8")
    return p


def create_default_config_file() -> Path:
    path = default_config_path()
    if path.exists():
        return path
    return save_config(default_config(), path)


def load_or_create_config(explicit_path: Optional[str] = None) -> Tuple[Config, Optional[Path]]:
    try:
        path = find_config_file(explicit_path)
    except FileNotFoundError as e:
        raise ConfigError(str(e)) from e

    if path is not None:
        return load_config(path), path

    try:
        path = create_default_config_file()
    except OSError as e:
        log.warning("could not create default config (%s); using built-in defaults", e)
        return default_config(), None
    log.info("created default config at %s", path)
    return load_config(path), path
