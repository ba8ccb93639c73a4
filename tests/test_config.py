"""
Tests for vcsorigin configuration loading.
"""
import json
import os
import logging

import pytest
import yaml

from vcsorigin.config import (
    apply_env_overrides,
    get_config_path,
    get_default_config,
    load_config,
    merge_configs,
    save_config,
    setup_logging,
)


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Isolated HOME with no config and no VCSORIGIN_* variables."""
    monkeypatch.setenv("HOME", str(tmp_path))
    for key in list(os.environ):
        if key.startswith("VCSORIGIN_"):
            monkeypatch.delenv(key)
    return tmp_path


class TestConfigPath:

    def test_default_path(self, home):
        assert get_config_path() == home / ".vcsorigin" / "config.json"

    def test_env_override(self, home, monkeypatch):
        path = home / "custom.yaml"
        path.write_text("authoring:\n  strict: true\n")
        monkeypatch.setenv("VCSORIGIN_CONFIG", str(path))
        assert get_config_path() == path

    def test_env_override_missing_file_falls_back(self, home, monkeypatch):
        monkeypatch.setenv("VCSORIGIN_CONFIG", str(home / "missing.json"))
        assert get_config_path() == home / ".vcsorigin" / "config.json"

    def test_finds_toml(self, home):
        config_dir = home / ".vcsorigin"
        config_dir.mkdir()
        (config_dir / "config.toml").write_text('[general]\ncache_dir = "/tmp/mirrors"\n')
        assert get_config_path() == config_dir / "config.toml"


class TestLoadConfig:

    def test_defaults(self, home):
        config = load_config()
        assert config == get_default_config()

    def test_yaml_file(self, home, monkeypatch):
        path = home / "config.yaml"
        with open(path, "w") as f:
            yaml.safe_dump({"authoring": {"mode": "allowed", "allowed": ["*@example.com"]}}, f)
        monkeypatch.setenv("VCSORIGIN_CONFIG", str(path))

        config = load_config()
        assert config["authoring"]["mode"] == "allowed"
        assert config["authoring"]["allowed"] == ["*@example.com"]
        assert config["authoring"]["strict"] is False

    def test_toml_file(self, home):
        config_dir = home / ".vcsorigin"
        config_dir.mkdir()
        (config_dir / "config.toml").write_text(
            '[origins.upstream]\ntype = "git"\nurl = "https://example.com/repo.git"\n')
        config = load_config()
        assert config["origins"]["upstream"]["url"] == "https://example.com/repo.git"

    def test_invalid_file_keeps_defaults(self, home, monkeypatch, caplog):
        path = home / "config.json"
        path.write_text("{not json")
        monkeypatch.setenv("VCSORIGIN_CONFIG", str(path))
        with caplog.at_level(logging.ERROR, logger="vcsorigin"):
            config = load_config()
        assert config == get_default_config()
        assert "Error loading config" in caplog.text

    def test_env_overrides(self, home, monkeypatch):
        monkeypatch.setenv("VCSORIGIN_AUTHORING_STRICT", "true")
        monkeypatch.setenv("VCSORIGIN_GENERAL_GIT_TIMEOUT_SECONDS", "30")
        monkeypatch.setenv("VCSORIGIN_LOGGING_LEVEL", "DEBUG")
        config = load_config()
        assert config["authoring"]["strict"] is True
        assert config["general"]["git_timeout_seconds"] == 30
        assert config["logging"]["level"] == "DEBUG"


class TestHelpers:

    def test_merge_is_recursive(self):
        merged = merge_configs({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})
        assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}

    def test_unknown_env_keys_ignored(self, monkeypatch):
        monkeypatch.setenv("VCSORIGIN_NOPE_THING", "1")
        config = apply_env_overrides(get_default_config())
        assert "nope" not in config

    def test_save_round_trip(self, home):
        config = get_default_config()
        config["authoring"]["strict"] = True
        path = save_config(config)
        assert path == home / ".vcsorigin" / "config.json"
        assert json.loads(path.read_text())["authoring"]["strict"] is True

    def test_setup_logging_level(self):
        config = get_default_config()
        config["logging"]["level"] = "debug"
        setup_logging(config)
        assert logging.getLogger().level == logging.DEBUG
        setup_logging()
        assert logging.getLogger().level == logging.WARNING
