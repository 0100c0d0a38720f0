"""
Announcements service
"""

from typing import Any, Dict, Optional

from civicportal.endpoints import Announcements, paginated_params, DEFAULT_PAGE_SIZE
from civicportal.models import Announcement, Page
from civicportal.services.base import BaseService


class AnnouncementsService(BaseService):

    async def list(self, page: int = 0, size: int = DEFAULT_PAGE_SIZE,
                   sort_by: str = "createdAt", sort_dir: str = "desc") -> Optional[Page[Announcement]]:
        return await self._page(Announcements.ROOT, Announcement.from_api, "Failed to fetch announcements",
                                params=paginated_params(page, size, sort_by, sort_dir))

    async def get(self, announcement_id: int) -> Optional[Announcement]:
        return await self._one("GET", Announcements.by_id(announcement_id), Announcement.from_api,
                               "Failed to fetch announcement")

    async def create(self, request: Dict[str, Any]) -> Optional[Announcement]:
        return await self._one("POST", Announcements.ROOT, Announcement.from_api,
                               "Failed to create announcement", json=request)

    async def update(self, announcement_id: int, request: Dict[str, Any]) -> Optional[Announcement]:
        return await self._one("PUT", Announcements.by_id(announcement_id), Announcement.from_api,
                               "Failed to update announcement", json=request)

    async def delete(self, announcement_id: int) -> Optional[bool]:
        return await self._action("DELETE", Announcements.by_id(announcement_id),
                                  "Failed to delete announcement")

    async def mark_viewed(self, announcement_id: int) -> Optional[bool]:
        return await self._action("POST", Announcements.view(announcement_id),
                                  "Failed to record announcement view")
