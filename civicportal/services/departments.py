"""
Departments service (admin)
"""

from typing import Any, Dict, Optional

from civicportal.endpoints import Departments, paginated_params, DEFAULT_PAGE_SIZE
from civicportal.models import Department, Page
from civicportal.services.base import BaseService


class DepartmentsService(BaseService):

    async def list(self, page: int = 0, size: int = DEFAULT_PAGE_SIZE) -> Optional[Page[Department]]:
        """Departments sorted by English name"""
        return await self._page(Departments.ROOT, Department.from_api, "Failed to fetch departments",
                                params=paginated_params(page, size, "nameEn", "asc"))

    async def get(self, department_id: int) -> Optional[Department]:
        return await self._one("GET", Departments.by_id(department_id), Department.from_api,
                               "Failed to fetch department")

    async def create(self, request: Dict[str, Any]) -> Optional[Department]:
        return await self._one("POST", Departments.ROOT, Department.from_api,
                               "Failed to create department", json=request)

    async def update(self, department_id: int, request: Dict[str, Any]) -> Optional[Department]:
        return await self._one("PUT", Departments.by_id(department_id), Department.from_api,
                               "Failed to update department", json=request)

    async def delete(self, department_id: int) -> Optional[bool]:
        return await self._action("DELETE", Departments.by_id(department_id), "Failed to delete department")

    async def activate(self, department_id: int) -> Optional[bool]:
        return await self._action("POST", Departments.activate(department_id), "Failed to activate department")

    async def deactivate(self, department_id: int) -> Optional[bool]:
        return await self._action("POST", Departments.deactivate(department_id),
                                  "Failed to deactivate department")
