"""
Tests for the scopedfs command line interface.
"""

import os
import sys

import pytest
from click.testing import CliRunner

from scopedfs.cli import main


@pytest.fixture
def runner():
    return CliRunner()


class TestResolveCommand:
    """Tests for `scopedfs resolve`."""

    def test_resolves_against_cwd_option(self, runner, tmp_path):
        result = runner.invoke(main, ["--cwd", str(tmp_path / "work"), "resolve", "a", "../b"])

        assert result.exit_code == 0
        assert result.output.splitlines() == [
            str(tmp_path / "work" / "a"),
            str(tmp_path / "b"),
        ]

    def test_no_arguments_prints_working_directory(self, runner, tmp_path):
        result = runner.invoke(main, ["--cwd", str(tmp_path), "resolve"])

        assert result.exit_code == 0
        assert result.output.strip() == str(tmp_path)

    def test_invalid_log_level(self, runner):
        result = runner.invoke(main, ["--log-level", "chatty", "resolve"])

        assert result.exit_code == 1
        assert "Unknown log level" in result.output


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
class TestWhichCommand:
    """Tests for `scopedfs which`."""

    def test_finds_executable(self, runner, tmp_path):
        tool = tmp_path / "bin" / "tool"
        tool.parent.mkdir()
        tool.write_bytes(b"#!/bin/sh\n")
        tool.chmod(0o755)

        result = runner.invoke(
            main, ["--cwd", str(tmp_path), "which", "tool", "--path", "bin"]
        )

        assert result.exit_code == 0
        assert result.output.strip() == str(tool)

    def test_missing_command(self, runner, tmp_path):
        result = runner.invoke(
            main, ["--cwd", str(tmp_path), "which", "nothing", "--path", str(tmp_path)]
        )

        assert result.exit_code == 1
        assert "'nothing' not found" in result.output

    def test_uses_path_environment_by_default(self, runner, tmp_path, monkeypatch):
        tool = tmp_path / "tool"
        tool.write_bytes(b"")
        tool.chmod(0o755)
        monkeypatch.setenv("PATH", str(tmp_path))

        result = runner.invoke(main, ["which", "tool"])

        assert result.exit_code == 0
        assert result.output.strip() == str(tool)


class TestLsCommand:
    """Tests for `scopedfs ls`."""

    def test_lists_entries(self, runner, tmp_path):
        (tmp_path / "alpha.txt").write_bytes(b"abc")
        (tmp_path / "beta").mkdir()

        result = runner.invoke(main, ["--cwd", str(tmp_path), "ls"])

        assert result.exit_code == 0
        assert "alpha.txt" in result.output
        assert "beta/" in result.output

    def test_missing_directory(self, runner, tmp_path):
        result = runner.invoke(main, ["--cwd", str(tmp_path), "ls", "missing"])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert not os.path.exists(tmp_path / "missing")
