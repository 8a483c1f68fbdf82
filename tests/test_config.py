"""
Unit Tests for Configuration Module

Tests configuration file discovery, loading, validation, environment
variable merging and error handling.

Author: Tron Project
License: MIT
"""

import pytest
import yaml
from pathlib import Path

from tron.config.config_loader import ConfigLoader, load_config, CONFIG_FILENAME
from tron.config.schema import TronConfig, ConfigEntry, LoggingConfig


def write_config(path: Path, data: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(data, f)
    return path


SAMPLE = {
    "dotfiles": {"repo_path": "~/dotfiles"},
    "config": [
        {
            "name": "nvim",
            "category": "editor",
            "repo_path": "nvim/init.lua",
            "system_path": "${HOME}/.config/nvim/init.lua",
        },
        {
            "name": "git",
            "category": "cli",
            "repo_path": "git/.gitconfig",
            "system_path": "~/.gitconfig",
        },
    ],
}


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep the real home directory and TRON_* variables out of the tests."""
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    for var in ("TRON_CONFIG", "TRON_REPO_PATH", "TRON_LOG_LEVEL", "TRON_LOG_FILE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(work)
    return home


class TestConfigLoader:
    """Test suite for ConfigLoader class."""

    def test_load_explicit_path(self, tmp_path):
        """Test loading a config from an explicit path."""
        config_path = write_config(tmp_path / "custom.yaml", SAMPLE)

        config = ConfigLoader(str(config_path)).load()

        assert isinstance(config, TronConfig)
        assert config.dotfiles.repo_path == "~/dotfiles"
        assert [entry.name for entry in config.config] == ["nvim", "git"]

    def test_explicit_path_must_exist(self, tmp_path):
        """Test that a missing explicit path is an error, not a fallback."""
        write_config(Path.cwd() / CONFIG_FILENAME, SAMPLE)

        with pytest.raises(FileNotFoundError, match="Config file not found"):
            ConfigLoader(str(tmp_path / "missing.yaml")).load()

    def test_finds_config_in_current_directory(self):
        """Test discovery of ./tron.yaml."""
        expected = write_config(Path.cwd() / CONFIG_FILENAME, SAMPLE)

        loader = ConfigLoader()
        loader.load()

        assert loader.resolved_path == expected

    def test_env_var_config_path_wins(self, tmp_path, monkeypatch):
        """Test that TRON_CONFIG is searched before the current directory."""
        write_config(Path.cwd() / CONFIG_FILENAME, SAMPLE)
        env_config = write_config(tmp_path / "elsewhere" / "tron.yaml", {
            "dotfiles": {"repo_path": "/srv/dotfiles"},
        })
        monkeypatch.setenv("TRON_CONFIG", str(env_config))

        config = load_config()

        assert config.dotfiles.repo_path == "/srv/dotfiles"
        assert config.config == []

    def test_finds_config_in_dotfiles_repo(self, isolated_env):
        """Test discovery of ~/Projects/tron-ares-dotfiles/tron.yaml."""
        expected = write_config(
            isolated_env / "Projects" / "tron-ares-dotfiles" / CONFIG_FILENAME, SAMPLE
        )

        loader = ConfigLoader()
        loader.load()

        assert loader.resolved_path == expected

    def test_finds_config_in_xdg_directory(self, isolated_env):
        """Test discovery of ~/.config/tron/tron.yaml."""
        expected = write_config(isolated_env / ".config" / "tron" / CONFIG_FILENAME, SAMPLE)

        loader = ConfigLoader()
        loader.load()

        assert loader.resolved_path == expected

    def test_missing_config_lists_searched_locations(self):
        """Test the error message when no config exists anywhere."""
        with pytest.raises(FileNotFoundError) as exc_info:
            ConfigLoader().load()

        message = str(exc_info.value)
        assert "Looked in" in message
        assert "tron init" in message

    def test_invalid_yaml_raises_value_error(self, tmp_path):
        """Test that malformed YAML is reported as ValueError."""
        config_path = tmp_path / "broken.yaml"
        config_path.write_text("dotfiles: [unclosed\n")

        with pytest.raises(ValueError, match="Failed to parse YAML config"):
            ConfigLoader(str(config_path)).load()

    def test_non_mapping_yaml_rejected(self, tmp_path):
        """Test that a YAML list at top level is rejected."""
        config_path = tmp_path / "list.yaml"
        config_path.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="expected a mapping"):
            ConfigLoader(str(config_path)).load()

    def test_missing_dotfiles_section_is_invalid(self, tmp_path):
        """Test that the repository root is required."""
        config_path = write_config(tmp_path / "tron.yaml", {"config": []})

        with pytest.raises(ValueError):
            ConfigLoader(str(config_path)).load()

    def test_empty_config_key(self, tmp_path):
        """Test that `config:` with no entries loads as an empty list."""
        config_path = tmp_path / "tron.yaml"
        config_path.write_text("dotfiles:\n  repo_path: /srv/dotfiles\nconfig:\n")

        config = ConfigLoader(str(config_path)).load()

        assert config.config == []

    def test_env_var_override(self, tmp_path, monkeypatch):
        """Test environment variable overrides."""
        monkeypatch.setenv("TRON_REPO_PATH", "/override/dotfiles")
        monkeypatch.setenv("TRON_LOG_LEVEL", "debug")
        monkeypatch.setenv("TRON_LOG_FILE", "/tmp/tron-test.log")
        config_path = write_config(tmp_path / "tron.yaml", SAMPLE)

        config = ConfigLoader(str(config_path)).load()

        assert config.dotfiles.repo_path == "/override/dotfiles"
        assert config.logging.level == "DEBUG"
        assert config.logging.file == "/tmp/tron-test.log"

    def test_save_round_trips(self, tmp_path):
        """Test that a saved config loads back unchanged."""
        config_path = write_config(tmp_path / "tron.yaml", SAMPLE)
        loader = ConfigLoader(str(config_path))
        config = loader.load()

        saved = loader.save(config, str(tmp_path / "copy.yaml"))
        reloaded = ConfigLoader(str(saved)).load()

        assert reloaded == config


class TestInitRepo:
    """Test suite for the starter config written by `tron init`."""

    def test_init_creates_loadable_config(self, tmp_path):
        repo = tmp_path / "dotfiles"

        created, config_path = ConfigLoader.init_repo(str(repo))

        assert created is True
        assert config_path == repo / CONFIG_FILENAME
        config = ConfigLoader(str(config_path)).load()
        assert Path(config.dotfiles.repo_path) == repo
        assert config.config == []

    def test_init_template_documents_tokens(self, tmp_path):
        _, config_path = ConfigLoader.init_repo(str(tmp_path / "dotfiles"))

        assert "${HOME}/.config/example/config.toml" in config_path.read_text()

    def test_init_does_not_overwrite(self, tmp_path):
        repo = tmp_path / "dotfiles"
        repo.mkdir()
        existing = repo / CONFIG_FILENAME
        existing.write_text("# mine\n")

        created, config_path = ConfigLoader.init_repo(str(repo))

        assert created is False
        assert config_path.read_text() == "# mine\n"

    def test_init_defaults_to_projects_directory(self, isolated_env):
        created, config_path = ConfigLoader.init_repo()

        assert created is True
        assert config_path == isolated_env / "Projects" / "tron-ares-dotfiles" / CONFIG_FILENAME


class TestConfigSchema:
    """Test suite for configuration schema models."""

    def test_duplicate_names_rejected(self):
        """Test that entry names must be unique."""
        entry = {"name": "nvim", "category": "editor", "repo_path": "a", "system_path": "b"}

        with pytest.raises(ValueError, match="Duplicate config names"):
            TronConfig(dotfiles={"repo_path": "/r"}, config=[entry, dict(entry, category="other")])

    def test_blank_name_rejected(self):
        with pytest.raises(ValueError):
            ConfigEntry(name="  ", category="x", repo_path="a", system_path="b")

    def test_entries_are_immutable(self):
        entry = ConfigEntry(name="nvim", category="editor", repo_path="a", system_path="b")

        with pytest.raises(Exception):
            entry.name = "vim"

    def test_logging_defaults(self):
        config = LoggingConfig()

        assert config.level == "WARNING"
        assert config.file is None
        assert config.json_format is False
        assert config.rotation_size == 10485760
        assert config.retention_count == 5

    def test_logging_level_validated(self):
        with pytest.raises(ValueError):
            LoggingConfig(level="LOUD")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
