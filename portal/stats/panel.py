"""Read-only dashboard statistics for a chosen time window."""

import logging
from typing import Optional

from portal.api.client import ApiClient
from portal.core.panel import AdminContext
from portal.core.toasts import Toaster
from portal.exceptions import ApiError
from portal.stats.schemas import DashboardStats, TimeRange

logger = logging.getLogger(__name__)


class StatsPanel:
    endpoint = "/api/admin/dashboard/stats"

    def __init__(self, api: ApiClient, context: Optional[AdminContext] = None, toaster: Optional[Toaster] = None):
        self.api = api
        self.context = context or AdminContext()
        self.toaster = toaster or Toaster()
        self.time_range = TimeRange.MONTH
        self.stats: Optional[DashboardStats] = None
        self.loading = False
        self.error: Optional[str] = None

    async def refresh(self) -> bool:
        self.loading = True
        self.error = None
        try:
            envelope = await self.api.get(
                self.endpoint,
                params={"timeRange": self.time_range.value, "adminId": self.context.admin_id},
            )
        except ApiError as exc:
            logger.error("Error fetching dashboard stats: %s", exc.server_message or exc.status_code)
            self.error = "An error occurred while fetching dashboard statistics"
            self.toaster.error("Error loading dashboard data")
            return False
        finally:
            self.loading = False

        if not envelope.success:
            self.error = "Failed to load dashboard statistics"
            self.toaster.error("Failed to load statistics")
            return False
        self.stats = DashboardStats.model_validate(envelope.data or {})
        self.stats.generated_for = self.time_range
        return True

    async def load(self) -> None:
        await self.refresh()

    async def set_time_range(self, time_range: str) -> bool:
        self.time_range = TimeRange(time_range)
        return await self.refresh()
