"""
core/models.py -- Domain dataclasses and enums for the Flapper dashboard.

Pure data containers. Behaviour (apply workflow, run single-flight, log
eviction) lives in the component modules that own each piece of state.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class RiskLevel(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def severity(self) -> int:
        """Ordinal rank, higher is more severe. Opaque -- not a CVSS score."""
        return _SEVERITY[self]


_SEVERITY = {
    RiskLevel.CRITICAL: 4,
    RiskLevel.HIGH: 3,
    RiskLevel.MEDIUM: 2,
    RiskLevel.LOW: 1,
}


class Category(str, Enum):
    NETWORK = "Network"
    SERVICES = "Services"
    HARDWARE = "Hardware"
    SYSTEM = "System"


class Protocol(str, Enum):
    TCP = "TCP"
    UDP = "UDP"


class PortStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    FILTERED = "FILTERED"


class LogType(str, Enum):
    info = "info"
    success = "success"
    warning = "warning"
    error = "error"


class RunMode(str, Enum):
    audit = "audit"  # non-mutating what-if pass
    enforce = "enforce"  # mutating pass


class AlertType(str, Enum):
    success = "success"
    error = "error"


class ApplyPhase(str, Enum):
    idle = "idle"
    validating = "validating"
    waiting_dependencies = "waiting_dependencies"
    committing = "committing"


class ApplyStatus(str, Enum):
    accepted = "accepted"  # workflow scheduled, not finished yet
    applied = "applied"
    skipped = "skipped"  # dry-run terminal state
    rejected = "rejected"


class RunStatus(str, Enum):
    completed = "completed"
    failed = "failed"
    rejected = "rejected"


class RejectReason(str, Enum):
    not_found = "not_found"
    already_applied = "already_applied"
    busy = "busy"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass
class MitigationRecord:
    """A hardening action with an applied/not-applied status.

    is_applied only ever moves False -> True within a session.
    """

    id: str
    name: str
    description: str
    category: Category
    target: str
    risk_level: RiskLevel
    is_applied: bool = False


@dataclass(frozen=True)
class ServiceRecord:
    port: int
    name: str
    protocol: Protocol
    status: PortStatus
    risk: RiskLevel


@dataclass(frozen=True)
class InventorySnapshot:
    """Externally supplied view of open ports and installed software.

    Frozen so a snapshot can only be replaced, never edited in place.
    """

    services: tuple[ServiceRecord, ...]
    software: tuple[dict, ...] = ()
    source: str = "builtin"  # "builtin" | "remote"
    loaded_at: Optional[str] = None


@dataclass(frozen=True)
class LogEntry:
    id: str
    timestamp: str
    message: str
    type: LogType


@dataclass
class RunState:
    is_running: bool = False
    last_run_mode: Optional[RunMode] = None  # None = no completed run yet


@dataclass(frozen=True)
class Alert:
    type: AlertType
    message: str


@dataclass(frozen=True)
class EducationalContent:
    title: str
    summary: str
    technical_details: str
    remediation_steps: str


# ---------------------------------------------------------------------------
# Result variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ApplyResult:
    mitigation_id: str
    status: ApplyStatus
    reason: Optional[RejectReason] = None

    @classmethod
    def rejected(cls, mitigation_id: str, reason: RejectReason) -> "ApplyResult":
        return cls(mitigation_id=mitigation_id, status=ApplyStatus.rejected, reason=reason)


@dataclass(frozen=True)
class RunResult:
    mode: RunMode
    status: RunStatus
    message: str = ""
    stdout: str = ""
    stderr: str = ""
    reason: Optional[RejectReason] = None


def sort_by_risk(items: list, key=lambda item: item.risk_level) -> list:
    """Return items ordered most severe first; ties keep their original order."""
    return sorted(items, key=lambda item: -key(item).severity)

