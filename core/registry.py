"""
core/registry.py -- Fixed catalog of hardening mitigations for one session.

The registry is seeded from DEFAULT_MITIGATIONS and never gains or loses
records at runtime. The only mutation is mark_applied(), which is a silent
no-op for unknown or already-applied ids so a repeated request can never
produce a second success entry in the activity log.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Optional

from core.models import (
    Category,
    MitigationRecord,
    PortStatus,
    Protocol,
    RiskLevel,
    ServiceRecord,
    sort_by_risk,
)

logger = logging.getLogger("flapper.registry")

# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------

DEFAULT_MITIGATIONS: tuple[MitigationRecord, ...] = (
    MitigationRecord(
        id="smb1",
        name="Disable SMBv1",
        description="Legacy protocol vulnerable to EternalBlue and Wannacry.",
        category=Category.SERVICES,
        target="Registry/FS",
        risk_level=RiskLevel.CRITICAL,
    ),
    MitigationRecord(
        id="rdp",
        name="Disable Remote Desktop",
        description="Unprotected RDP is a prime target for brute force attacks.",
        category=Category.NETWORK,
        target="Port 3389",
        risk_level=RiskLevel.HIGH,
    ),
    MitigationRecord(
        id="badusb",
        name="USB Guard (BadUSB)",
        description="Block unauthorized HID devices from registering as keyboards.",
        category=Category.HARDWARE,
        target="HID Driver",
        risk_level=RiskLevel.HIGH,
    ),
    MitigationRecord(
        id="llmnr",
        name="Disable LLMNR/NBT-NS",
        description="Used by attackers to capture hashes (Responder).",
        category=Category.NETWORK,
        target="Network Stack",
        risk_level=RiskLevel.MEDIUM,
    ),
    MitigationRecord(
        id="autorun",
        name="Block Autorun/Autoplay",
        description="Prevents automatic execution of malicious scripts from drives.",
        category=Category.SYSTEM,
        target="Shell",
        risk_level=RiskLevel.MEDIUM,
    ),
)

# Shown on the attack-surface view until the first inventory fetch succeeds.
DEFAULT_SERVICES: tuple[ServiceRecord, ...] = (
    ServiceRecord(445, "Microsoft-DS (SMB)", Protocol.TCP, PortStatus.OPEN, RiskLevel.CRITICAL),
    ServiceRecord(3389, "RDP", Protocol.TCP, PortStatus.OPEN, RiskLevel.HIGH),
    ServiceRecord(135, "RPC Endpoint Mapper", Protocol.TCP, PortStatus.OPEN, RiskLevel.MEDIUM),
    ServiceRecord(23, "Telnet", Protocol.TCP, PortStatus.CLOSED, RiskLevel.CRITICAL),
)


class MitigationRegistry:
    def __init__(self, records: Optional[Iterable[MitigationRecord]] = None) -> None:
        seed = DEFAULT_MITIGATIONS if records is None else records
        # Copy so sessions never share mutable records with the seed tuple.
        self._records: dict[str, MitigationRecord] = {}
        for record in seed:
            if record.id in self._records:
                raise ValueError(f"Duplicate mitigation id: {record.id}")
            self._records[record.id] = replace(record)

    def __len__(self) -> int:
        return len(self._records)

    def list(self) -> list[MitigationRecord]:
        """Return all records in catalog order."""
        return list(self._records.values())

    def by_risk(self) -> list[MitigationRecord]:
        return sort_by_risk(self.list())

    def find(self, mitigation_id: str) -> Optional[MitigationRecord]:
        return self._records.get(mitigation_id)

    def mark_applied(self, mitigation_id: str) -> Optional[MitigationRecord]:
        """Flip is_applied to True. Returns None without side effects when the
        id is unknown or the record is already applied."""
        record = self._records.get(mitigation_id)
        if record is None or record.is_applied:
            return None
        record.is_applied = True
        logger.info("Mitigation %s marked applied", mitigation_id)
        return record

    def applied_count(self) -> int:
        return sum(1 for r in self._records.values() if r.is_applied)

    def progress(self) -> float:
        """Hardening level as a percentage of applied records."""
        if not self._records:
            return 0.0
        return 100 * self.applied_count() / len(self._records)
