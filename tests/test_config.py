import pytest
import yaml

from app.config import (
    config_from_dict,
    create_default_config_file,
    default_config,
    load_config,
    load_or_create_config,
    save_config,
)
from app.errors import ConfigError
from utils.file_handler import default_config_path, find_config_file

VALID = """\
text:
  source: llm
  llm:
    model: "haiku"
    pregenerate_threshold: 20
    fallback_to_dummy: true
    timeout_seconds: 5
    max_retries: 1
ui:
  theme: "default"
stats:
  file_dir: "user_stats.json"
"""


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


def test_load_valid_config(tmp_path):
    cfg = load_config(_write(tmp_path / "config.yaml", VALID))
    assert cfg.text.source == "llm"
    assert cfg.text.llm.model == "haiku"
    assert cfg.text.llm.pregenerate_threshold == 20
    assert cfg.text.llm.fallback_to_dummy is True
    assert cfg.text.llm.timeout_seconds == 5
    assert cfg.text.llm.max_retries == 1
    assert cfg.ui.theme == "default"
    assert cfg.stats.file_dir == "user_stats.json"


def test_missing_file_raises(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.yaml")


def test_invalid_yaml_raises(tmp_path):
    path = _write(tmp_path / "bad.yaml", "text:\n  source: [dummy\n")
    with pytest.raises(ConfigError, match="invalid YAML"):
        load_config(path)


def test_non_mapping_document_raises(tmp_path):
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path / "list.yaml", "- a\n- b\n"))


def test_empty_file_gives_defaults(tmp_path):
    cfg = load_config(_write(tmp_path / "empty.yaml", ""))
    assert cfg == default_config()


def test_minimal_config_keeps_other_defaults(tmp_path):
    cfg = load_config(_write(tmp_path / "minimal.yaml", "text:\n  source: dummy\n"))
    assert cfg.text.source == "dummy"
    assert cfg.ui.theme == "default"
    assert cfg.ui.typo_flash_duration_ms == 150
    assert cfg.text.llm.max_failures == 3
    assert cfg.stats.file_dir.endswith("user_stats.json")


def test_bad_value_type_names_the_key():
    with pytest.raises(ConfigError, match="ui.typo_flash_duration_ms"):
        config_from_dict({"ui": {"typo_flash_duration_ms": "fast"}})


def test_quoted_booleans_are_parsed():
    assert config_from_dict({"ui": {"block_on_typo": "false"}}).ui.block_on_typo is False
    assert config_from_dict({"ui": {"block_on_typo": "Yes"}}).ui.block_on_typo is True
    assert config_from_dict({"ui": {"typo_flash_enabled": True}}).ui.typo_flash_enabled is True


def test_unrecognised_boolean_is_rejected():
    with pytest.raises(ConfigError, match="ui.block_on_typo"):
        config_from_dict({"ui": {"block_on_typo": "maybe"}})


def test_section_must_be_a_mapping():
    with pytest.raises(ConfigError, match="'text'"):
        config_from_dict({"text": "dummy"})


def test_unknown_keys_are_ignored():
    cfg = config_from_dict({"ui": {"colour": "red"}, "extra": 1})
    assert cfg.ui.theme == "default"


def test_save_then_load(tmp_path):
    cfg = default_config()
    cfg.ui.block_on_typo = True
    cfg.text.llm.provider = "ollama"
    path = save_config(cfg, tmp_path / "sub" / "config.yaml")
    assert yaml.safe_load(path.read_text())["ui"]["block_on_typo"] is True
    assert load_config(path) == cfg


def test_create_default_config_file_in_config_dir(isolated_home):
    path = create_default_config_file()
    assert path == default_config_path()
    assert path.exists()
    assert str(isolated_home / "config") in str(path)


def test_load_or_create_creates_once(isolated_home):
    cfg, path = load_or_create_config()
    assert path == default_config_path()
    assert cfg.text.source == "dummy"

    _write(path, "text:\n  source: llm\n")
    cfg, again = load_or_create_config()
    assert again == path
    assert cfg.text.source == "llm"


def test_explicit_path_must_exist(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_or_create_config(str(tmp_path / "missing.yaml"))


def test_explicit_path_wins(tmp_path):
    path = _write(tmp_path / "mine.yaml", "ui:\n  theme: dark\n")
    cfg, used = load_or_create_config(str(path))
    assert used == path
    assert cfg.ui.theme == "dark"


def test_local_config_is_found(isolated_home):
    # cwd is the tmp dir; nothing in the config dir yet
    _write(isolated_home / "config.yaml", "ui:\n  theme: dark\n")
    assert find_config_file().name == "config.yaml"
    cfg, _ = load_or_create_config()
    assert cfg.ui.theme == "dark"
