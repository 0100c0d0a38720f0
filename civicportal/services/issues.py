"""
Issues service - citizen reports and their admin workflow
"""

from typing import Any, Dict, Optional, Union

from civicportal.endpoints import Issues, paginated_params, DEFAULT_PAGE_SIZE
from civicportal.models import Issue, IssueStatus, Level, Page, Urgency
from civicportal.services.base import BaseService, enum_value


class IssuesService(BaseService):
    """CRUD and workflow calls for /api/issues"""

    async def list(self, page: int = 0, size: int = DEFAULT_PAGE_SIZE,
                   sort_by: str = "id", sort_dir: str = "desc") -> Optional[Page[Issue]]:
        return await self._page(
            Issues.ROOT, Issue.from_api, "Failed to fetch issues",
            params=paginated_params(page, size, sort_by, sort_dir),
        )

    async def search(self, query: Optional[str] = None,
                     status: Union[IssueStatus, str, None] = None,
                     urgency: Union[Urgency, str, None] = None,
                     page: int = 0, size: int = DEFAULT_PAGE_SIZE,
                     sort_by: str = "id", sort_dir: str = "desc") -> Optional[Page[Issue]]:
        """Full-text search with optional status/urgency filters"""
        params = paginated_params(
            page, size, sort_by, sort_dir,
            query=query,
            status=enum_value(status),
            urgency=enum_value(urgency),
        )
        return await self._page(Issues.SEARCH, Issue.from_api, "Failed to search issues", params=params)

    async def get(self, issue_id: int) -> Optional[Issue]:
        return await self._one("GET", Issues.by_id(issue_id), Issue.from_api, "Failed to fetch issue")

    async def create(self, request: Dict[str, Any]) -> Optional[Issue]:
        return await self._one("POST", Issues.ROOT, Issue.from_api, "Failed to create issue", json=request)

    async def update(self, issue_id: int, request: Dict[str, Any]) -> Optional[Issue]:
        return await self._one("PUT", Issues.by_id(issue_id), Issue.from_api,
                               "Failed to update issue", json=request)

    async def delete(self, issue_id: int) -> Optional[bool]:
        return await self._action("DELETE", Issues.by_id(issue_id), "Failed to delete issue")

    async def like(self, issue_id: int, unlike: bool = False) -> Optional[bool]:
        """POST likes, DELETE takes the like back"""
        method = "DELETE" if unlike else "POST"
        return await self._action(method, Issues.like(issue_id), "Failed to update like")

    async def follow(self, issue_id: int, unfollow: bool = False) -> Optional[bool]:
        method = "DELETE" if unfollow else "POST"
        return await self._action(method, Issues.follow(issue_id), "Failed to update follow")

    async def update_status(self, issue_id: int, status: Union[IssueStatus, str]) -> Optional[Issue]:
        return await self._one("PATCH", Issues.status(issue_id), Issue.from_api,
                               "Failed to update issue status", params={"status": enum_value(status)})

    async def update_urgency(self, issue_id: int, urgency: Union[Urgency, str]) -> Optional[Issue]:
        return await self._one("PATCH", Issues.urgency(issue_id), Issue.from_api,
                               "Failed to update issue urgency", params={"urgency": enum_value(urgency)})

    async def escalate(self, issue_id: int, level: Union[Level, str],
                       user_id: Optional[int] = None) -> Optional[Issue]:
        """Escalate to a level, optionally to one leader at that level"""
        params: Dict[str, Any] = {"level": enum_value(level)}
        if user_id is not None:
            params["userId"] = user_id
        return await self._one("PATCH", Issues.escalate(issue_id), Issue.from_api,
                               "Failed to escalate issue", params=params)
