"""
tests/test_cli.py -- Tests for the terminal renderers and the flapper CLI.

Colors are disabled so assertions can match plain text. The CLI is driven
through main() with sys.argv patched and the relay clients replaced by mocks
on DashboardSession construction.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

import main as cli
from core.fetcher import RemoteError
from core.formatter import format_log, format_mitigations, format_run, strip_ansi
from core.models import LogEntry, LogType, RunMode, RunResult, RunStatus
from core.registry import MitigationRegistry
from core.session import DashboardSession


@pytest.fixture(autouse=True)
def _no_color(monkeypatch):
    monkeypatch.setattr("core.formatter._color_enabled", False)


class TestFormatter:
    def test_strip_ansi(self):
        assert strip_ansi("\033[91mCRITICAL\033[0m") == "CRITICAL"

    def test_mitigations_show_applied_mark(self):
        registry = MitigationRegistry()
        registry.mark_applied("smb1")
        out = format_mitigations(registry.list())
        assert "[x] smb1" in out
        assert "[ ] rdp" in out

    def test_log_lines(self):
        out = format_log([LogEntry(id="abc", timestamp="12:00:00", message="hello", type=LogType.info)])
        assert out == "  [12:00:00] hello"

    def test_failed_run_shows_message_and_stderr(self):
        result = RunResult(mode=RunMode.enforce, status=RunStatus.failed, message="boom", stderr="denied\n")
        out = format_run(result)
        assert "Hardening enforce" in out
        assert "boom" in out
        assert "SCRIPT ERRORS" in out
        assert "denied" in out


def _session_factory(settings, executor_client, inventory_client):
    def factory(_settings):
        return DashboardSession(settings, executor_client=executor_client, inventory_client=inventory_client)

    return factory


class TestMain:
    def test_run_audit_exit_zero(self, settings, executor_client, inventory_client, capsys):
        with patch("main.DashboardSession", _session_factory(settings, executor_client, inventory_client)):
            with patch("sys.argv", ["flapper", "run", "audit"]):
                with pytest.raises(SystemExit) as exc_info:
                    cli.main()
        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert "What if: 5 changes" in out
        assert "Hardening audit run completed" in out

    def test_run_failure_exit_one(self, settings, executor_client, inventory_client, capsys):
        executor_client.run_hardening.side_effect = RemoteError("Connection refused")
        with patch("main.DashboardSession", _session_factory(settings, executor_client, inventory_client)):
            with patch("sys.argv", ["flapper", "run", "enforce"]):
                with pytest.raises(SystemExit) as exc_info:
                    cli.main()
        assert exc_info.value.code == 1
        assert "Connection refused" in capsys.readouterr().out

    def test_status_lists_services(self, settings, executor_client, inventory_client, capsys):
        with patch("main.DashboardSession", _session_factory(settings, executor_client, inventory_client)):
            with patch("sys.argv", ["flapper", "status"]):
                with pytest.raises(SystemExit) as exc_info:
                    cli.main()
        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert "mDNS" in out
        assert "2 exposed port(s), 1 software package(s)" in out

    def test_status_inventory_failure_shows_baseline(self, settings, executor_client, capsys):
        inventory_client = MagicMock()
        inventory_client.fetch_inventory.side_effect = RemoteError("Connection refused")
        with patch("main.DashboardSession", _session_factory(settings, executor_client, inventory_client)):
            with patch("sys.argv", ["flapper", "status"]):
                with pytest.raises(SystemExit) as exc_info:
                    cli.main()
        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "Failed to load inventory from API" in out
        assert "Telnet" in out

    def test_no_command_prints_help(self, capsys):
        with patch("sys.argv", ["flapper"]):
            cli.main()
        assert "usage: flapper" in capsys.readouterr().out
