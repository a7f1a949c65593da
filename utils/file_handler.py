import os
import sys
from pathlib import Path
from typing import Optional

APP_DIR_NAME = "touchtyper"
CONFIG_FILE_NAME = "config.yaml"
STATS_FILE_NAME = "user_stats.json"
API_KEY_FILE_NAME = "api-key"
THEMES_FILE_NAME = "themes.json"
LOG_FILE_NAME = "touchtyper.log"


def get_config_dir() -> Path:
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if not appdata:
            raise OSError("APPDATA environment variable not set")
        return Path(appdata) / APP_DIR_NAME
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def get_data_dir() -> Path:
    if sys.platform == "win32":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if not base:
            raise OSError("LOCALAPPDATA and APPDATA environment variables not set")
        return Path(base) / APP_DIR_NAME
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / APP_DIR_NAME
    return Path.home() / ".local" / "share" / APP_DIR_NAME


def ensure_dir(path) -> Path:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def default_config_path() -> Path:
    return get_config_dir() / CONFIG_FILE_NAME


def default_stats_path() -> Path:
    return get_data_dir() / STATS_FILE_NAME


def default_log_path() -> Path:
    return get_data_dir() / LOG_FILE_NAME


def default_themes_path() -> Path:
    return get_config_dir() / THEMES_FILE_NAME


def find_config_file(explicit_path: Optional[str] = None) -> Optional[Path]:
    """
    Lookup order:
      1. explicit path (must exist)
      2. <config dir>/config.yaml
      3. ./config.yaml
    Returns None when nothing is found.
    """
    if explicit_path:
        p = Path(explicit_path).expanduser()
        if p.exists():
            return p
        raise FileNotFoundError(f"config file not found at specified path: {explicit_path}")

    try:
        candidate = default_config_path()
        if candidate.exists():
            return candidate
    except OSError:
        pass

    local = Path(CONFIG_FILE_NAME)
    if local.exists():
        return local
    return None


def find_api_key_file() -> Optional[Path]:
    try:
        candidate = get_config_dir() / API_KEY_FILE_NAME
        if candidate.exists():
            return candidate
    except OSError:
        pass
    local = Path(API_KEY_FILE_NAME)
    if local.exists():
        return local
    return None


def read_api_key() -> str:
    path = find_api_key_file()
    if path is None:
        return ""
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError:
        return ""
