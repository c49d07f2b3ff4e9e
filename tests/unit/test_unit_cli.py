# tests/unit/test_unit_cli.py - v1
"""Tests for main.py - CLI entry point."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from smelltrack.main import _build_parser, main


@pytest.fixture
def cli_env(monkeypatch, tmp_path: Path, scripted_client):
    """Isolated environment: JSON cache under tmp, scripted backend."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("WORKSPACE_ROOT", raising=False)
    monkeypatch.setenv("CACHE_BACKEND", "json")
    monkeypatch.setenv("CACHE_ROOT", str(tmp_path / "cache"))
    monkeypatch.setenv("FILTER_CONFIG_PATH", str(tmp_path / "smells.json"))
    monkeypatch.setattr(
        "smelltrack.app.HttpAnalysisClient", lambda *args, **kwargs: scripted_client
    )
    return tmp_path


class TestBuildParser:
    def test_version_flag(self):
        with pytest.raises(SystemExit) as exc_info:
            _build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0

    def test_detect_subcommand(self):
        args = _build_parser().parse_args(["-w", "/ws", "detect", "a.py"])
        assert args.command == "detect"
        assert args.path == Path("a.py")
        assert args.workspace == Path("/ws")

    def test_filters_set(self):
        args = _build_parser().parse_args(["filters", "-y", "set", "too-many-arguments", "max_args", "9"])
        assert args.yes is True
        assert (args.key, args.option, args.value) == ("too-many-arguments", "max_args", "9")

    def test_filters_disable_sets_flag(self):
        args = _build_parser().parse_args(["filters", "disable", "no-self-use"])
        assert args.enabled is False
        assert args.yes is False


class TestDetect:
    def test_no_command_returns_1(self):
        assert main([]) == 1

    def test_missing_path(self, cli_env):
        assert main(["detect", str(cli_env / "nope.py")]) == 1

    def test_detect_file(self, cli_env, workspace, capsys):
        assert main(["-w", str(workspace), "detect", str(workspace / "a.py")]) == 0
        assert "no_issues" in capsys.readouterr().out

    def test_detect_folder_with_findings(self, cli_env, workspace, scripted_client, smell_factory, capsys):
        scripted_client.findings["b.py"] = [smell_factory(path=str(workspace / "pkg" / "b.py"))]
        assert main(["-w", str(workspace), "detect", str(workspace)]) == 0
        out = capsys.readouterr().out
        assert "passed" in out
        assert "too-many-arguments (R0913)" in out

    def test_backend_down(self, cli_env, workspace, scripted_client):
        scripted_client.reachable = False
        assert main(["-w", str(workspace), "detect", str(workspace / "a.py")]) == 1

    def test_status_reads_persisted_cache(self, cli_env, workspace, capsys):
        main(["-w", str(workspace), "detect", str(workspace)])
        capsys.readouterr()
        assert main(["-w", str(workspace), "status"]) == 0
        out = capsys.readouterr().out
        assert "Cache entries:  2" in out
        assert "Clean:          2" in out

    def test_forget_and_wipe(self, cli_env, workspace, capsys):
        main(["-w", str(workspace), "detect", str(workspace / "a.py")])
        assert main(["-w", str(workspace), "forget", str(workspace / "a.py")]) == 0
        assert "Forgot" in capsys.readouterr().out
        assert main(["-w", str(workspace), "wipe"]) == 0
        assert "Cache wiped." in capsys.readouterr().out

    def test_watch_without_root(self, cli_env):
        assert main(["watch"]) == 1


class TestFilters:
    def test_disable_with_yes(self, cli_env, capsys):
        assert main(["filters", "-y", "disable", "no-self-use"]) == 0
        saved = json.loads((cli_env / "smells.json").read_text(encoding="utf-8"))
        assert saved["smells"]["no-self-use"]["enabled"] is False
        main(["filters", "list"])
        assert "[ ] no-self-use" in capsys.readouterr().out

    def test_declined_prompt(self, cli_env, monkeypatch, capsys):
        monkeypatch.setattr("builtins.input", lambda prompt="": "n")
        assert main(["filters", "disable-all"]) == 0
        assert "No change." in capsys.readouterr().out
        assert not (cli_env / "smells.json").exists()

    def test_dont_remind_prompt(self, cli_env, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda prompt="": "d")
        assert main(["filters", "set", "long-message-chain", "threshold", "4"]) == 0
        saved = json.loads((cli_env / "smells.json").read_text(encoding="utf-8"))
        assert saved["suppress_invalidation_warning"] is True
        assert saved["smells"]["long-message-chain"]["analyzer_options"]["threshold"]["value"] == 4

    def test_unknown_smell(self, cli_env):
        assert main(["filters", "-y", "enable", "not-a-smell"]) == 1

    def test_bad_option_value(self, cli_env):
        assert main(["filters", "-y", "set", "too-many-arguments", "max_args", "lots"]) == 1

    def test_reset(self, cli_env):
        main(["filters", "-y", "disable-all"])
        assert main(["filters", "-y", "reset"]) == 0
        saved = json.loads((cli_env / "smells.json").read_text(encoding="utf-8"))
        assert all(s["enabled"] for s in saved["smells"].values())
