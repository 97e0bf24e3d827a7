"""
tests/test_web_routes.py -- Integration tests for the server-rendered UI.

Each page must render with the shared session state, and each form POST must
answer 303 to the right page so a browser refresh never repeats the action.

Fixtures used (from conftest.py):
  - web_client: TestClient with follow_redirects=False
  - session / executor_client: the same objects the app uses
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from core.fetcher import RemoteError


class TestPages:
    def test_hub_renders_stats_and_services(self, web_client: TestClient) -> None:
        resp = web_client.get("/")
        assert resp.status_code == 200
        assert "text/html" in resp.headers["content-type"]
        assert "HARDENING LEVEL" in resp.text
        assert "0 of 5 Mitigations" in resp.text
        assert "mDNS" in resp.text
        assert "Awaiting hardening sequence initialization..." in resp.text

    def test_hardening_lists_mitigations(self, web_client: TestClient) -> None:
        resp = web_client.get("/hardening")
        assert resp.status_code == 200
        assert "Disable SMBv1" in resp.text
        assert resp.text.count("Deploy Mitigation") == 5

    def test_academy_library(self, web_client: TestClient) -> None:
        resp = web_client.get("/academy")
        assert resp.status_code == 200
        assert "Explain BadUSB Attacks" in resp.text

    def test_academy_topic_fallback(self, web_client: TestClient) -> None:
        resp = web_client.get("/academy", params={"topic": "SMB Relay"})
        assert resp.status_code == 200
        assert "Security explanation unavailable offline." in resp.text
        assert "Back to Library" in resp.text

    def test_logs_empty(self, web_client: TestClient) -> None:
        resp = web_client.get("/logs")
        assert resp.status_code == 200
        assert "No logs currently in buffer" in resp.text


class TestForms:
    def test_apply_redirects_and_runs_workflow(self, web_client: TestClient, session) -> None:
        resp = web_client.post("/hardening/smb1/apply")
        assert resp.status_code == 303
        assert resp.headers["location"] == "/hardening"

        web_client.portal.call(session.controller.wait)
        page = web_client.get("/hardening").text
        assert "Secured" in page
        assert "1 of 5 Mitigations" in web_client.get("/").text

    def test_run_audit(self, web_client: TestClient, executor_client) -> None:
        resp = web_client.post("/hardening/run", data={"mode": "audit"})
        assert resp.status_code == 303
        assert resp.headers["location"] == "/hardening"
        assert "Last run: audit" in web_client.get("/hardening").text

    def test_failed_run_shows_alert_banner(self, web_client: TestClient, executor_client) -> None:
        executor_client.run_hardening.side_effect = RemoteError("Hardening script not found")
        web_client.post("/hardening/run", data={"mode": "enforce"})
        assert "Hardening script not found" in web_client.get("/").text

        resp = web_client.post("/alert/dismiss", headers={"referer": "http://testserver/hardening"})
        assert resp.headers["location"] == "/hardening"
        assert "Hardening script not found" not in web_client.get("/").text

    def test_unknown_run_mode_sets_alert(self, web_client: TestClient, executor_client) -> None:
        web_client.post("/hardening/run", data={"mode": "reboot"})
        executor_client.run_hardening.assert_not_called()
        assert "Unknown run mode: reboot" in web_client.get("/hardening").text

    def test_dry_run_toggle_returns_to_referer(self, web_client: TestClient, session) -> None:
        resp = web_client.post("/dry-run", headers={"referer": "http://testserver/logs"})
        assert resp.status_code == 303
        assert resp.headers["location"] == "/logs"
        assert session.controller.dry_run is True
        assert "DRY RUN MODE: <strong>ON</strong>" in web_client.get("/").text

    def test_foreign_referer_falls_back_to_hub(self, web_client: TestClient) -> None:
        resp = web_client.post("/dry-run", headers={"referer": "https://evil.example/phish"})
        assert resp.headers["location"] == "/"

    def test_clear_logs(self, web_client: TestClient, session) -> None:
        session.log.append("Manual entry")
        resp = web_client.post("/logs/clear")
        assert resp.status_code == 303
        assert resp.headers["location"] == "/logs"
        assert len(session.log) == 0
