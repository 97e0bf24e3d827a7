"""
API request and response models for the Flapper REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in core/models.py, which
own the internal domain representation. The from_* factories keep the mapping
next to the output model rather than scattered across route handlers.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from core.models import (
    Alert,
    ApplyResult,
    EducationalContent,
    InventorySnapshot,
    LogEntry,
    MitigationRecord,
    RunResult,
    RunState,
    ServiceRecord,
)

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class RunModeEnum(str, Enum):
    audit = "audit"
    enforce = "enforce"


class LogOrderEnum(str, Enum):
    oldest = "oldest"
    newest = "newest"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RunRequest(BaseModel):
    """Request body for POST /api/v1/runs."""

    mode: RunModeEnum


class DryRunUpdate(BaseModel):
    """Request body for PUT /api/v1/settings/dry-run."""

    enabled: bool


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class MitigationResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    category: str
    target: str
    risk_level: str
    is_applied: bool

    @classmethod
    def from_record(cls, record: MitigationRecord) -> "MitigationResponse":
        return cls(
            id=record.id,
            name=record.name,
            description=record.description,
            category=record.category.value,
            target=record.target,
            risk_level=record.risk_level.value,
            is_applied=record.is_applied,
        )


class ApplyResponse(BaseModel):
    """Outcome of an apply request.

    status is "accepted" when the workflow was started in the background,
    "applied"/"skipped" when the caller waited for completion, and
    "rejected" (with a reason) when nothing happened.
    """

    model_config = ConfigDict(frozen=True)

    mitigation_id: str
    status: str
    reason: Optional[str] = None

    @classmethod
    def from_result(cls, result: ApplyResult) -> "ApplyResponse":
        return cls(
            mitigation_id=result.mitigation_id,
            status=result.status.value,
            reason=result.reason.value if result.reason else None,
        )


class LogEntryResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: str
    message: str
    type: str

    @classmethod
    def from_entry(cls, entry: LogEntry) -> "LogEntryResponse":
        return cls(id=entry.id, timestamp=entry.timestamp, message=entry.message, type=entry.type.value)


class RunStateResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_running: bool
    last_run_mode: Optional[str] = None

    @classmethod
    def from_state(cls, state: RunState) -> "RunStateResponse":
        return cls(
            is_running=state.is_running,
            last_run_mode=state.last_run_mode.value if state.last_run_mode else None,
        )


class RunResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: str
    status: str
    message: str = ""
    stdout: str = ""
    stderr: str = ""
    reason: Optional[str] = None

    @classmethod
    def from_result(cls, result: RunResult) -> "RunResponse":
        return cls(
            mode=result.mode.value,
            status=result.status.value,
            message=result.message,
            stdout=result.stdout,
            stderr=result.stderr,
            reason=result.reason.value if result.reason else None,
        )


class AlertResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    message: str

    @classmethod
    def from_alert(cls, alert: Alert) -> "AlertResponse":
        return cls(type=alert.type.value, message=alert.message)


class DryRunResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool


class ServiceResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    port: int
    name: str
    protocol: str
    status: str
    risk: str

    @classmethod
    def from_record(cls, service: ServiceRecord) -> "ServiceResponse":
        return cls(
            port=service.port,
            name=service.name,
            protocol=service.protocol.value,
            status=service.status.value,
            risk=service.risk.value,
        )


class InventoryResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    loaded_at: Optional[str]
    exposed_ports: int
    services: list[ServiceResponse]
    software: list[dict]

    @classmethod
    def from_snapshot(cls, snapshot: InventorySnapshot) -> "InventoryResponse":
        services = [ServiceResponse.from_record(s) for s in snapshot.services]
        return cls(
            source=snapshot.source,
            loaded_at=snapshot.loaded_at,
            exposed_ports=sum(1 for s in services if s.status == "OPEN"),
            services=services,
            software=list(snapshot.software),
        )


class RefreshResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    refreshed: bool
    inventory: InventoryResponse


class EducationResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    summary: str
    technical_details: str
    remediation_steps: str

    @classmethod
    def from_content(cls, content: EducationalContent) -> "EducationResponse":
        return cls(
            title=content.title,
            summary=content.summary,
            technical_details=content.technical_details,
            remediation_steps=content.remediation_steps,
        )


class DashboardResponse(BaseModel):
    """Response for GET /api/v1/dashboard."""

    model_config = ConfigDict(frozen=True)

    hardening_level: float
    applied: int
    total: int
    exposed_ports: int
    session_events: int
    dry_run: bool
    hardening_in_progress: bool
    apply_phase: str
    is_running: bool
    last_run_mode: Optional[str] = None
    alert: Optional[AlertResponse] = None


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
