"""
core/inventory.py -- Network attack surface snapshot, refreshed by polling.

The snapshot is replaced as a whole on every successful fetch. A failed or
malformed fetch raises an alert and leaves the previous snapshot on screen.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from core.alerts import AlertBoard
from core.fetcher import InventoryClient, RemoteError, parse_services
from core.models import InventorySnapshot, PortStatus
from core.registry import DEFAULT_SERVICES

logger = logging.getLogger("flapper.inventory")

LOAD_FAILED_MESSAGE = "Failed to load inventory from API"


class InventoryLoader:
    def __init__(
        self,
        client: InventoryClient,
        alerts: AlertBoard,
        snapshot: Optional[InventorySnapshot] = None,
    ) -> None:
        self.client = client
        self.alerts = alerts
        self.snapshot = snapshot or InventorySnapshot(services=DEFAULT_SERVICES)

    def exposed_ports(self) -> int:
        return sum(1 for s in self.snapshot.services if s.status is PortStatus.OPEN)

    async def refresh(self) -> bool:
        """Fetch and swap in a new snapshot. Returns True on success."""
        try:
            inventory = await asyncio.to_thread(self.client.fetch_inventory)
            services = parse_services(inventory.get("ports", []))
            software = inventory.get("software") or []
            if not isinstance(software, list):
                raise ValueError("inventory.software must be a list")
        except (RemoteError, ValueError) as e:
            logger.warning("Inventory refresh failed: %s", e)
            self.alerts.error(LOAD_FAILED_MESSAGE)
            return False

        self.snapshot = InventorySnapshot(
            services=tuple(services),
            software=tuple(s for s in software if isinstance(s, dict)),
            source="remote",
            loaded_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info("Inventory loaded (%d services, %d software)", len(services), len(self.snapshot.software))
        return True

    async def poll(self, interval: float) -> None:
        """Refresh every `interval` seconds until cancelled.

        An unexpected error in one refresh is logged and the loop keeps going;
        only cancellation ends it.
        """
        while True:
            await asyncio.sleep(interval)
            try:
                await self.refresh()
            except Exception:
                logger.exception("Inventory poll iteration failed")
