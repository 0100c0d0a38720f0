"""
Leaders service - leader accounts (admin) and the leader directory
"""

from typing import Any, Dict, List, Optional, Union

from civicportal.endpoints import Leaders, Users, DEFAULT_PAGE_SIZE
from civicportal.models import AddLeaderResult, LeaderSearchResult, Level, Page
from civicportal.services.base import BaseService, enum_value


class LeadersService(BaseService):

    async def list(self) -> Optional[List[LeaderSearchResult]]:
        return await self._list(Leaders.ROOT, LeaderSearchResult.from_api, "Failed to fetch leaders")

    async def get(self, leader_id: int) -> Optional[LeaderSearchResult]:
        return await self._one("GET", Leaders.by_id(leader_id), LeaderSearchResult.from_api,
                               "Failed to fetch leader")

    async def create(self, request: Dict[str, Any]) -> Optional[AddLeaderResult]:
        """Add a leader; the result carries the generated first password"""
        return await self._one("POST", Leaders.ROOT, AddLeaderResult.from_api,
                               "Failed to add leader", json=request)

    async def update(self, leader_id: int, request: Dict[str, Any]) -> Optional[LeaderSearchResult]:
        return await self._one("PUT", Leaders.by_id(leader_id), LeaderSearchResult.from_api,
                               "Failed to update leader", json=request)

    async def delete(self, leader_id: int) -> Optional[bool]:
        return await self._action("DELETE", Leaders.by_id(leader_id), "Failed to delete leader")

    async def generate_password(self, leader_id: int) -> Optional[AddLeaderResult]:
        return await self._one("POST", Leaders.generate_password(leader_id), AddLeaderResult.from_api,
                               "Failed to generate password")

    async def search(self, name: Optional[str] = None, level: Union[Level, str, None] = None,
                     leadership_name: Optional[str] = None,
                     department_id: Optional[int] = None) -> Optional[List[LeaderSearchResult]]:
        params: Dict[str, Any] = {}
        if name:
            params["name"] = name.strip()
        if level:
            params["level"] = enum_value(level)
        if leadership_name:
            params["leadershipName"] = leadership_name
        if department_id:
            params["departmentId"] = department_id
        return await self._list(Leaders.SEARCH, LeaderSearchResult.from_api,
                                "Failed to search leaders", params=params)

    async def search_directory(self, name: Optional[str] = None, page: int = 0,
                               size: int = DEFAULT_PAGE_SIZE) -> Optional[Page[LeaderSearchResult]]:
        """Leader lookup available to citizens, e.g. when assigning an issue"""
        params: Dict[str, Any] = {"page": page, "size": size}
        if name:
            params["name"] = name
        return await self._page(Users.SEARCH_LEADERS, LeaderSearchResult.from_api,
                                "Failed to search leaders", params=params)
