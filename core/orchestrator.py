"""
core/orchestrator.py -- Single-flight audit/enforce runs against the executor.

The executor call is a blocking requests call, so it is pushed to a worker
thread with asyncio.to_thread. The event loop stays free to serve other
requests, which is why is_running must be checked and set before the first
await.
"""

import asyncio
import logging
from typing import Optional

from core.activity_log import ActivityLog
from core.alerts import AlertBoard
from core.fetcher import ExecutorClient, RemoteError
from core.models import LogType, RejectReason, RunMode, RunResult, RunState, RunStatus

logger = logging.getLogger("flapper.orchestrator")


class RunOrchestrator:
    def __init__(self, client: ExecutorClient, alerts: AlertBoard, log: Optional[ActivityLog] = None) -> None:
        self.client = client
        self.alerts = alerts
        self.log = log
        self.state = RunState()

    def _append(self, message: str, type: LogType) -> None:
        if self.log is not None:
            self.log.append(message, type)

    async def run(self, mode: RunMode) -> RunResult:
        """Run one hardening pass. Never raises for remote failures.

        Raises ValueError only for a mode that is neither audit nor enforce.
        """
        mode = RunMode(mode)
        if self.state.is_running:
            return RunResult(mode=mode, status=RunStatus.rejected, reason=RejectReason.busy)

        self.state.is_running = True
        try:
            self._append(f"Starting {mode.value} run...", LogType.info)
            try:
                outcome = await asyncio.to_thread(self.client.run_hardening, mode)
            except RemoteError as e:
                logger.warning("Hardening %s run failed: %s", mode.value, e.message)
                self.alerts.error(e.message)
                self._append(f"Hardening {mode.value} run failed: {e.message}", LogType.error)
                return RunResult(
                    mode=mode,
                    status=RunStatus.failed,
                    message=e.message,
                    stdout=e.stdout,
                    stderr=e.stderr,
                )

            self.state.last_run_mode = mode
            self.alerts.clear_errors()
            self._append(f"Hardening {mode.value} run completed", LogType.success)
            return RunResult(
                mode=mode,
                status=RunStatus.completed,
                stdout=outcome.get("stdout", ""),
                stderr=outcome.get("stderr", ""),
            )
        finally:
            self.state.is_running = False
