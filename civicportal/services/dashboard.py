"""
Leader dashboard metrics
"""

from typing import Optional

from civicportal.endpoints import Dashboard
from civicportal.models import LeaderDashboard
from civicportal.services.base import BaseService


class DashboardService(BaseService):

    async def leader(self) -> Optional[LeaderDashboard]:
        return await self._one("GET", Dashboard.LEADER, LeaderDashboard.from_api,
                               "Failed to fetch dashboard")
