"""
Integration Tests for the Command Line Interface

Runs the click commands against real files in a temporary directory.

Author: Tron Project
License: MIT
"""

import json
import logging
import os
import pytest
import yaml
from click.testing import CliRunner

from tron import __version__
from tron.cli import main
from tron.utils.logger import ROOT_LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop the handlers bound to the runner's captured streams."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """A dotfiles repo, a fake system directory and a tron.yaml describing both."""
    home = tmp_path / "home"
    repo = tmp_path / "dotfiles"
    system = tmp_path / "system"
    for directory in (home, repo, system):
        directory.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for var in ("TRON_CONFIG", "TRON_REPO_PATH", "TRON_LOG_LEVEL", "TRON_LOG_FILE"):
        monkeypatch.delenv(var, raising=False)

    config_path = tmp_path / "tron.yaml"
    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.safe_dump({
            "dotfiles": {"repo_path": str(repo)},
            "config": [
                {"name": "nvim", "category": "editor", "repo_path": "nvim/init.lua",
                 "system_path": str(system / "nvim" / "init.lua")},
                {"name": "git", "category": "cli", "repo_path": "git/gitconfig",
                 "system_path": str(system / "gitconfig")},
            ],
        }, f)

    return {"config": str(config_path), "repo": repo, "system": system, "home": home}


def write(path, content, mtime=None):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    if mtime is not None:
        os.utime(path, (mtime, mtime))


def run(workspace, *args):
    return CliRunner().invoke(main, ["--config", workspace["config"], *args])


class TestStatusCommand:
    """Test suite for `tron status`."""

    def test_status_table(self, workspace):
        write(workspace["repo"] / "nvim" / "init.lua", "a\nb\nc\n", mtime=2_000_000)
        write(workspace["system"] / "nvim" / "init.lua", "a\nx\nc\n", mtime=1_000_000)

        result = run(workspace, "status")

        assert result.exit_code == 0
        assert "repo newer" in result.output
        assert "both missing" in result.output
        assert "0/2 configs in sync" in result.output

    def test_outdated_all_synced(self, workspace):
        for relative, system_name in (("nvim/init.lua", "nvim/init.lua"), ("git/gitconfig", "gitconfig")):
            write(workspace["repo"] / relative, "same\n")
            write(workspace["system"] / system_name, "same\n")

        result = run(workspace, "status", "--outdated")

        assert result.exit_code == 0
        assert "All configs are in sync!" in result.output

    def test_unknown_category(self, workspace):
        result = run(workspace, "status", "--category", "nope")

        assert result.exit_code == 0
        assert "No configs found." in result.output


class TestListCommand:
    """Test suite for `tron list`."""

    def test_list_json(self, workspace):
        result = run(workspace, "list", "--json")

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [entry["name"] for entry in data] == ["nvim", "git"]
        assert data[1]["system_path"] == str(workspace["system"] / "gitconfig")

    def test_list_table(self, workspace):
        result = run(workspace, "list", "-c", "cli")

        assert result.exit_code == 0
        assert "git" in result.output
        assert "1 configs" in result.output


class TestDeployBackupCommands:
    """Test suite for `tron deploy` and `tron backup`."""

    def test_deploy_copies_repo_to_system(self, workspace):
        write(workspace["repo"] / "nvim" / "init.lua", "set number\n")

        result = run(workspace, "deploy", "nvim")

        assert result.exit_code == 0
        assert "✓ nvim" in result.output
        assert (workspace["system"] / "nvim" / "init.lua").read_text() == "set number\n"

    def test_deploy_refuses_newer_system(self, workspace):
        write(workspace["repo"] / "git" / "gitconfig", "repo\n", mtime=1_000_000)
        write(workspace["system"] / "gitconfig", "system\n", mtime=2_000_000)

        refused = run(workspace, "deploy", "git")
        assert refused.exit_code == 0
        assert "use --force" in refused.output
        assert (workspace["system"] / "gitconfig").read_text() == "system\n"

        forced = run(workspace, "deploy", "git", "--force")
        assert forced.exit_code == 0
        assert (workspace["system"] / "gitconfig").read_text() == "repo\n"

    def test_dry_run(self, workspace):
        write(workspace["repo"] / "nvim" / "init.lua", "set number\n")

        result = run(workspace, "deploy", "--dry-run")

        assert result.exit_code == 0
        assert "(dry run - no files changed)" in result.output
        assert not (workspace["system"] / "nvim" / "init.lua").exists()

    def test_backup_missing_repo_file(self, workspace):
        write(workspace["system"] / "gitconfig", "[user]\n")

        result = run(workspace, "backup", "-c", "cli")

        assert result.exit_code == 0
        assert (workspace["repo"] / "git" / "gitconfig").read_text() == "[user]\n"

    def test_no_configs_matched(self, workspace):
        result = run(workspace, "deploy", "-c", "nope")

        assert result.exit_code == 0
        assert "No configs matched." in result.output

    @pytest.mark.skipif(os.name == "nt" or (hasattr(os, "geteuid") and os.geteuid() == 0),
                        reason="needs POSIX permissions without root")
    def test_copy_failure_sets_exit_code(self, workspace):
        write(workspace["repo"] / "nvim" / "init.lua", "one\n")
        write(workspace["repo"] / "git" / "gitconfig", "two\n")
        locked = workspace["system"] / "nvim"
        locked.mkdir()
        locked.chmod(0o500)
        try:
            result = run(workspace, "deploy")
        finally:
            locked.chmod(0o700)

        assert result.exit_code == 1
        assert "failed" in result.output
        assert (workspace["system"] / "gitconfig").read_text() == "two\n"


class TestDiffCommand:
    """Test suite for `tron diff`."""

    def test_diff_output(self, workspace):
        write(workspace["repo"] / "nvim" / "init.lua", "a\nb\nc\n")
        write(workspace["system"] / "nvim" / "init.lua", "a\nx\nc\n")

        result = run(workspace, "diff", "nvim")

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert "-x" in lines
        assert "+b" in lines
        assert " a" in lines

    def test_reverse(self, workspace):
        write(workspace["repo"] / "nvim" / "init.lua", "a\nb\nc\n")
        write(workspace["system"] / "nvim" / "init.lua", "a\nx\nc\n")

        lines = run(workspace, "diff", "nvim", "--reverse").output.splitlines()

        assert "-b" in lines
        assert "+x" in lines

    def test_identical(self, workspace):
        write(workspace["repo"] / "nvim" / "init.lua", "same\n")
        write(workspace["system"] / "nvim" / "init.lua", "same\n")

        result = run(workspace, "diff", "nvim")

        assert result.exit_code == 0
        assert "Files are identical." in result.output

    def test_undecodable_bytes_are_not_identical(self, workspace):
        repo_file = workspace["repo"] / "nvim" / "init.lua"
        system_file = workspace["system"] / "nvim" / "init.lua"
        for path, data in ((repo_file, b"x=\xff\n"), (system_file, b"x=\xfe\n")):
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        result = run(workspace, "diff", "nvim")

        assert result.exit_code == 0
        assert "Files are identical." not in result.output

    def test_unknown_name_fails(self, workspace):
        result = run(workspace, "diff", "zsh")

        assert result.exit_code == 1
        assert "Config 'zsh' not found" in result.output


class TestShowAndCategories:
    """Test suite for `tron show` and `tron categories`."""

    def test_show(self, workspace):
        write(workspace["repo"] / "git" / "gitconfig", "12345")

        result = run(workspace, "show", "git")

        assert result.exit_code == 0
        assert "Name: git" in result.output
        assert "system missing" in result.output
        assert "Repo Size: 5 bytes" in result.output
        assert "System Size" not in result.output

    def test_show_unknown(self, workspace):
        assert run(workspace, "show", "zsh").exit_code == 1

    def test_categories(self, workspace):
        result = run(workspace, "categories")

        assert result.exit_code == 0
        assert "cli (1)" in result.output
        assert "editor (1)" in result.output


class TestEditCommand:
    """Test suite for `tron edit`."""

    def test_opens_repo_file(self, workspace, monkeypatch):
        target = workspace["repo"] / "git" / "gitconfig"
        write(target, "[user]\n")
        opened = []
        monkeypatch.setattr("click.edit", lambda filename=None, **kwargs: opened.append(filename))

        result = run(workspace, "edit", "git")

        assert result.exit_code == 0
        assert opened == [str(target)]

    def test_missing_file(self, workspace, monkeypatch):
        monkeypatch.setattr("click.edit", lambda **kwargs: pytest.fail("editor should not open"))

        result = run(workspace, "edit", "git", "--system")

        assert result.exit_code == 1
        assert "File does not exist" in result.output


class TestConfigErrors:
    """Configuration problems are fatal."""

    def test_missing_config(self, tmp_path):
        result = CliRunner().invoke(main, ["--config", str(tmp_path / "nope.yaml"), "status"])

        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_duplicate_names(self, tmp_path):
        config_path = tmp_path / "tron.yaml"
        entry = {"name": "a", "category": "c", "repo_path": "a", "system_path": "/a"}
        config_path.write_text(yaml.safe_dump({"dotfiles": {"repo_path": "/r"}, "config": [entry, entry]}))

        result = CliRunner().invoke(main, ["--config", str(config_path), "list"])

        assert result.exit_code == 1
        assert "Duplicate config names" in result.output


class TestInitAndVersion:
    """Test suite for commands that need no config."""

    def test_init(self, tmp_path):
        repo = tmp_path / "dotfiles"

        first = CliRunner().invoke(main, ["init", "--repo", str(repo)])
        second = CliRunner().invoke(main, ["init", "--repo", str(repo)])

        assert first.exit_code == 0
        assert "Created" in first.output
        assert (repo / "tron.yaml").exists()
        assert "already exists" in second.output

    def test_version(self):
        result = CliRunner().invoke(main, ["--version"])

        assert __version__ in result.output


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
