"""
tests/test_fetcher.py -- Unit tests for the relay HTTP clients and payload parsing.

All HTTP calls are mocked by patching the module-level requests session in
core.fetcher, so no network access is needed.

Covers:
  - ExecutorClient posts {"mode": ...} and returns stdout/stderr
  - Error envelope, non-JSON body and connection errors become RemoteError
  - InventoryClient returns the inventory object or raises RemoteError
  - parse_services: defaults, case-insensitive enums, malformed entries
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from core.fetcher import ExecutorClient, InventoryClient, RemoteError, parse_services
from core.models import PortStatus, Protocol, RiskLevel, RunMode


def _response(status_code: int = 200, body=None, json_error: bool = False) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    if json_error:
        resp.json.side_effect = ValueError("not json")
    else:
        resp.json.return_value = body
    return resp


class TestExecutorClient:
    def test_run_posts_mode_and_returns_output(self):
        body = {"status": "ok", "mode": "audit", "stdout": "What if: ...", "stderr": ""}
        with patch("core.fetcher._session") as session:
            session.post.return_value = _response(200, body)
            out = ExecutorClient("http://relay:3001/", timeout=5).run_hardening(RunMode.audit)

        session.post.assert_called_once_with(
            "http://relay:3001/hardening/run",
            json={"mode": "audit"},
            timeout=5,
        )
        assert out == {"mode": "audit", "stdout": "What if: ...", "stderr": ""}

    def test_error_envelope_raises_with_message(self):
        body = {"status": "error", "message": "Hardening script not found"}
        with patch("core.fetcher._session") as session:
            session.post.return_value = _response(500, body)
            with pytest.raises(RemoteError) as exc_info:
                ExecutorClient("http://relay:3001").run_hardening("enforce")
        assert exc_info.value.message == "Hardening script not found"
        assert exc_info.value.status_code == 500

    def test_script_output_carried_on_failure(self):
        body = {"status": "error", "message": "Hardening script exited with code 1", "stdout": "a", "stderr": "b"}
        with patch("core.fetcher._session") as session:
            session.post.return_value = _response(500, body)
            with pytest.raises(RemoteError) as exc_info:
                ExecutorClient("http://relay:3001").run_hardening(RunMode.enforce)
        assert (exc_info.value.stdout, exc_info.value.stderr) == ("a", "b")

    def test_non_json_body_uses_generic_message(self):
        with patch("core.fetcher._session") as session:
            session.post.return_value = _response(502, json_error=True)
            with pytest.raises(RemoteError, match="Hardening run failed"):
                ExecutorClient("http://relay:3001").run_hardening(RunMode.audit)

    def test_ok_status_code_with_error_status_field_raises(self):
        with patch("core.fetcher._session") as session:
            session.post.return_value = _response(200, {"status": "error"})
            with pytest.raises(RemoteError, match="Hardening run failed"):
                ExecutorClient("http://relay:3001").run_hardening(RunMode.audit)

    def test_connection_error_raises_remote_error(self):
        with patch("core.fetcher._session") as session:
            session.post.side_effect = requests.ConnectionError("Connection refused")
            with pytest.raises(RemoteError, match="Connection refused"):
                ExecutorClient("http://relay:3001").run_hardening(RunMode.audit)


class TestInventoryClient:
    def test_returns_inventory_object(self):
        inventory = {"ports": [], "software": []}
        with patch("core.fetcher._session") as session:
            session.get.return_value = _response(200, {"status": "ok", "inventory": inventory})
            assert InventoryClient("http://relay:3001").fetch_inventory() == inventory
        session.get.assert_called_once_with("http://relay:3001/inventory", timeout=15.0)

    def test_missing_file_raises(self):
        with patch("core.fetcher._session") as session:
            session.get.return_value = _response(404, {"status": "error", "message": "Inventory file not found"})
            with pytest.raises(RemoteError, match="Inventory file not found"):
                InventoryClient("http://relay:3001").fetch_inventory()

    def test_missing_inventory_object_raises(self):
        with patch("core.fetcher._session") as session:
            session.get.return_value = _response(200, {"status": "ok"})
            with pytest.raises(RemoteError):
                InventoryClient("http://relay:3001").fetch_inventory()

    def test_timeout_raises_remote_error(self):
        with patch("core.fetcher._session") as session:
            session.get.side_effect = requests.Timeout("read timed out")
            with pytest.raises(RemoteError):
                InventoryClient("http://relay:3001").fetch_inventory()


class TestParseServices:
    def test_full_entry(self):
        [svc] = parse_services([{"port": 3389, "name": "RDP", "protocol": "tcp", "status": "open", "risk": "high"}])
        assert svc.port == 3389
        assert svc.name == "RDP"
        assert svc.protocol is Protocol.TCP
        assert svc.status is PortStatus.OPEN
        assert svc.risk is RiskLevel.HIGH

    def test_defaults_for_missing_fields(self):
        [svc] = parse_services([{"port": "8080"}])
        assert svc.port == 8080
        assert svc.name == "Port 8080"
        assert svc.protocol is Protocol.TCP
        assert svc.status is PortStatus.OPEN
        assert svc.risk is RiskLevel.LOW

    def test_empty_list(self):
        assert parse_services([]) == []

    @pytest.mark.parametrize(
        "ports",
        [
            {"port": 80},
            [{"name": "no port"}],
            [{"port": 70000}],
            [{"port": 80, "status": "HALF-OPEN"}],
            ["445"],
        ],
    )
    def test_malformed_payload_raises_value_error(self, ports):
        with pytest.raises(ValueError):
            parse_services(ports)
