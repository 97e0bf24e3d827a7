"""
core/controller.py -- Single-flight mitigation apply workflow.

One workflow runs at a time per controller. A request is checked and the
slot reserved synchronously in submit(), before any await, so two requests
arriving on the same event loop can never both be accepted.

Workflow phases and their log entries (exactly one entry per transition):

  Validating             info     "Initiating [DRY RUN] hardening for <name>..."
  Waiting-Dependencies   info     "Checking system dependencies for <target>..."
  Committing -> Applied  success  "Successfully applied mitigation: <name>"
  Committing -> Skipped  warning  "DRY RUN COMPLETE: No changes were made to the system."

The two delays stand in for a real preflight check and a real commit step.
Rejected requests (unknown id, already applied, busy) log nothing and change
nothing; callers get an ApplyResult carrying the reason.
"""

import asyncio
import logging
from typing import Optional

from core.activity_log import ActivityLog
from core.models import ApplyPhase, ApplyResult, ApplyStatus, LogType, MitigationRecord, RejectReason
from core.registry import MitigationRegistry

logger = logging.getLogger("flapper.controller")


class MitigationController:
    def __init__(
        self,
        registry: MitigationRegistry,
        log: ActivityLog,
        validate_delay: float = 0.8,
        commit_delay: float = 1.2,
    ) -> None:
        self.registry = registry
        self.log = log
        self.validate_delay = validate_delay
        self.commit_delay = commit_delay
        self.dry_run = False
        self.phase = ApplyPhase.idle
        self.current_id: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Dry-run toggle
    # ------------------------------------------------------------------

    def set_dry_run(self, enabled: bool) -> None:
        self.dry_run = bool(enabled)

    def toggle_dry_run(self) -> bool:
        self.dry_run = not self.dry_run
        return self.dry_run

    # ------------------------------------------------------------------
    # Apply
    # ------------------------------------------------------------------

    @property
    def in_progress(self) -> bool:
        return self.current_id is not None

    def submit(self, mitigation_id: str) -> ApplyResult:
        """Validate the request and schedule the workflow on the running loop.

        Returns ACCEPTED when the workflow was started, REJECTED otherwise.
        Must be called from within a running event loop.
        """
        record = self.registry.find(mitigation_id)
        if record is None:
            return ApplyResult.rejected(mitigation_id, RejectReason.not_found)
        if record.is_applied:
            return ApplyResult.rejected(mitigation_id, RejectReason.already_applied)
        if self.in_progress:
            logger.debug("Apply %s rejected: %s in progress", mitigation_id, self.current_id)
            return ApplyResult.rejected(mitigation_id, RejectReason.busy)

        self.current_id = record.id
        self._task = asyncio.create_task(self._workflow(record, self.dry_run))
        return ApplyResult(mitigation_id=record.id, status=ApplyStatus.accepted)

    async def apply(self, mitigation_id: str) -> ApplyResult:
        """Run the whole workflow and return its terminal result."""
        result = self.submit(mitigation_id)
        if result.status is ApplyStatus.rejected:
            return result
        return await self._task

    async def wait(self) -> Optional[ApplyResult]:
        """Wait for the in-flight workflow, if any."""
        if self._task is None:
            return None
        return await self._task

    async def _workflow(self, record: MitigationRecord, dry_run: bool) -> ApplyResult:
        try:
            self.phase = ApplyPhase.validating
            prefix = "[DRY RUN] " if dry_run else ""
            self.log.append(f"Initiating {prefix}hardening for {record.name}...", LogType.info)
            await asyncio.sleep(self.validate_delay)

            self.phase = ApplyPhase.waiting_dependencies
            self.log.append(f"Checking system dependencies for {record.target}...", LogType.info)
            await asyncio.sleep(self.commit_delay)

            self.phase = ApplyPhase.committing
            if dry_run:
                self.log.append("DRY RUN COMPLETE: No changes were made to the system.", LogType.warning)
                return ApplyResult(mitigation_id=record.id, status=ApplyStatus.skipped)

            self.registry.mark_applied(record.id)
            self.log.append(f"Successfully applied mitigation: {record.name}", LogType.success)
            return ApplyResult(mitigation_id=record.id, status=ApplyStatus.applied)
        finally:
            self.phase = ApplyPhase.idle
            self.current_id = None
