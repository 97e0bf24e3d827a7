"""
core/session.py -- One dashboard session and everything it owns.

DashboardSession replaces ambient UI globals with a single object that the
API and web layers receive from app.state. It owns the registry, activity
log, alert slot, both controllers, the inventory loader and the academy
provider, and it has an explicit start()/stop() lifecycle for the inventory
polling task.
"""

import asyncio
import contextlib
import logging
from typing import Any, Optional

from core.activity_log import ActivityLog
from core.alerts import AlertBoard
from core.config import Settings
from core.controller import MitigationController
from core.education import EducationProvider
from core.fetcher import ExecutorClient, InventoryClient
from core.inventory import InventoryLoader
from core.models import EducationalContent
from core.orchestrator import RunOrchestrator
from core.registry import MitigationRegistry

logger = logging.getLogger("flapper.session")


class DashboardSession:
    def __init__(
        self,
        settings: Settings,
        executor_client: Optional[ExecutorClient] = None,
        inventory_client: Optional[InventoryClient] = None,
        education: Optional[EducationProvider] = None,
        registry: Optional[MitigationRegistry] = None,
    ) -> None:
        self.settings = settings
        self.registry = registry or MitigationRegistry()
        self.log = ActivityLog(capacity=settings.log_capacity)
        self.alerts = AlertBoard()
        self.controller = MitigationController(
            self.registry,
            self.log,
            validate_delay=settings.validate_delay,
            commit_delay=settings.commit_delay,
        )
        self.orchestrator = RunOrchestrator(
            executor_client or ExecutorClient(settings.executor_url, timeout=settings.run_timeout),
            self.alerts,
            self.log,
        )
        self.inventory = InventoryLoader(
            inventory_client or InventoryClient(settings.inventory_url, timeout=settings.remote_timeout),
            self.alerts,
        )
        self.education = education or EducationProvider(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            timeout=settings.remote_timeout,
        )
        self._poll_task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Load the inventory once and start background polling."""
        await self.inventory.refresh()
        interval = self.settings.inventory_poll_seconds
        if interval > 0:
            self._poll_task = asyncio.create_task(self.inventory.poll(interval))
        logger.info("Session started (%d mitigations, poll=%ss)", len(self.registry), interval)

    async def stop(self) -> None:
        """Cancel polling and let an in-flight apply workflow finish."""
        if self._poll_task is not None:
            self._poll_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._poll_task
            self._poll_task = None
        await self.controller.wait()
        logger.info("Session stopped")

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def summary(self) -> dict[str, Any]:
        state = self.orchestrator.state
        return {
            "hardening_level": self.registry.progress(),
            "applied": self.registry.applied_count(),
            "total": len(self.registry),
            "exposed_ports": self.inventory.exposed_ports(),
            "session_events": len(self.log),
            "dry_run": self.controller.dry_run,
            "hardening_in_progress": self.controller.in_progress,
            "apply_phase": self.controller.phase.value,
            "is_running": state.is_running,
            "last_run_mode": state.last_run_mode.value if state.last_run_mode else None,
        }

    async def explain(self, topic: str) -> EducationalContent:
        return await asyncio.to_thread(self.education.lookup, topic)
