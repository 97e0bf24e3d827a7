"""
fetcher.py -- HTTP clients for the two remote collaborators.

  ExecutorClient   POST {executor}/hardening/run   {"mode": "audit"|"enforce"}
  InventoryClient  GET  {inventory}/inventory

Both speak the relay's envelope: {"status": "ok", ...} on success and
{"status": "error", "message": ...} on failure. Every failure mode (network
error, non-2xx, body that is not JSON, status != "ok") is raised as
RemoteError carrying a human-readable message. Callers turn that into an
Alert; nothing here retries, since an enforce run is not safe to repeat.
"""

import logging
from typing import Any, Optional

import requests

from core.models import PortStatus, Protocol, RiskLevel, RunMode, ServiceRecord

logger = logging.getLogger("flapper.fetcher")

# Module-level session shared across all client calls for connection pooling.
# The relay lives on a known host, so 3 redirects is already generous.
_session = requests.Session()
_session.max_redirects = 3


class RemoteError(Exception):
    """A remote call failed. str(exc) is safe to show to the user."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.stdout = stdout
        self.stderr = stderr


def _decode(resp: requests.Response, fallback: str) -> dict[str, Any]:
    """Return the JSON body of a successful envelope or raise RemoteError."""
    try:
        data = resp.json()
    except ValueError:
        raise RemoteError(fallback, status_code=resp.status_code) from None
    if not isinstance(data, dict):
        raise RemoteError(fallback, status_code=resp.status_code)
    if not resp.ok or data.get("status") != "ok":
        raise RemoteError(
            str(data.get("message") or fallback),
            status_code=resp.status_code,
            stdout=str(data.get("stdout") or ""),
            stderr=str(data.get("stderr") or ""),
        )
    return data


class ExecutorClient:
    """Client for the Hardening Executor."""

    def __init__(self, base_url: str, timeout: float = 330.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def run_hardening(self, mode: RunMode) -> dict[str, Any]:
        """Trigger one audit or enforce pass. Blocks until the script exits."""
        mode = RunMode(mode)
        try:
            resp = _session.post(
                f"{self.base_url}/hardening/run",
                json={"mode": mode.value},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Hardening %s request failed: %s", mode.value, e)
            raise RemoteError(str(e) or "Hardening run failed") from e
        data = _decode(resp, "Hardening run failed")
        return {
            "mode": data.get("mode", mode.value),
            "stdout": str(data.get("stdout") or ""),
            "stderr": str(data.get("stderr") or ""),
        }


class InventoryClient:
    """Client for the Inventory Provider."""

    def __init__(self, base_url: str, timeout: float = 15.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def fetch_inventory(self) -> dict[str, Any]:
        """Return the raw inventory object ({"ports": [...], "software": [...]})."""
        try:
            resp = _session.get(f"{self.base_url}/inventory", timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Inventory fetch failed: %s", e)
            raise RemoteError(str(e) or "Inventory request failed") from e
        data = _decode(resp, "Inventory request failed")
        inventory = data.get("inventory")
        if not isinstance(inventory, dict):
            raise RemoteError("Inventory response is missing the inventory object", status_code=resp.status_code)
        return inventory


# ---------------------------------------------------------------------------
# Payload parsing
# ---------------------------------------------------------------------------


def _enum_value(enum_cls, raw: Any, default):
    if raw is None or raw == "":
        return default
    return enum_cls(str(raw).strip().upper())


def parse_services(ports: Any) -> list[ServiceRecord]:
    """Convert the inventory's raw port list into ServiceRecords.

    Raises ValueError on any malformed entry so the caller can reject the
    whole payload rather than render a partial table.
    """
    if not isinstance(ports, list):
        raise ValueError("inventory.ports must be a list")
    services: list[ServiceRecord] = []
    for entry in ports:
        if not isinstance(entry, dict):
            raise ValueError(f"Port entry is not an object: {entry!r}")
        try:
            port = int(entry["port"])
        except (KeyError, TypeError, ValueError):
            raise ValueError(f"Port entry has no valid port number: {entry!r}") from None
        if not 0 <= port <= 65535:
            raise ValueError(f"Port out of range: {port}")
        services.append(
            ServiceRecord(
                port=port,
                name=str(entry.get("name") or f"Port {port}"),
                protocol=_enum_value(Protocol, entry.get("protocol"), Protocol.TCP),
                status=_enum_value(PortStatus, entry.get("status"), PortStatus.OPEN),
                risk=_enum_value(RiskLevel, entry.get("risk"), RiskLevel.LOW),
            )
        )
    return services
