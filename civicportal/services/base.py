"""
Shared plumbing for resource services.

Every service wraps one ``AuthenticatedClient``. Methods return typed
records, None only when the interceptor ended the session, and raise
APIError for any other failed status.
"""

from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

from civicportal.exceptions import APIError
from civicportal.interceptor import AuthenticatedClient, handle_api_response
from civicportal.models import Page


T = TypeVar("T")


class BaseService:
    """Common request helpers for the resource services"""

    def __init__(self, client: AuthenticatedClient):
        self.client = client

    async def _call(self, method: str, path: str, error_message: str, **kwargs) -> Any:
        response = await self.client.request(method, path, **kwargs)
        return handle_api_response(response, error_message)

    async def _one(self, method: str, path: str, item: Callable[[Dict[str, Any]], T],
                   error_message: str, allow_empty: bool = False,
                   **kwargs) -> Optional[Union[T, bool]]:
        """
        One record from the response body.

        An empty 2xx body returns True when ``allow_empty`` is set and
        raises APIError otherwise.
        """
        response = await self.client.request(method, path, **kwargs)
        if response is None:
            return None
        data = handle_api_response(response, error_message)
        if not data:
            if allow_empty:
                return True
            raise APIError(f"{error_message}: empty response", status_code=response.status_code)
        return item(data)

    async def _page(self, path: str, item: Callable[[Dict[str, Any]], T],
                    error_message: str, **kwargs) -> Optional[Page[T]]:
        data = await self._call("GET", path, error_message, **kwargs)
        if data is None:
            return None
        return Page.from_api(data, item)

    async def _list(self, path: str, item: Callable[[Dict[str, Any]], T],
                    error_message: str, **kwargs) -> Optional[List[T]]:
        data = await self._call("GET", path, error_message, **kwargs)
        if data is None:
            return None
        # Some listings come back paged even when unpaged was asked for
        if isinstance(data, dict):
            data = data.get("content", [])
        return [item(entry) for entry in data]

    async def _action(self, method: str, path: str, error_message: str, **kwargs) -> Optional[bool]:
        """Fire-and-check call; True on success, None if the session ended"""
        response = await self.client.request(method, path, **kwargs)
        if response is None:
            return None
        handle_api_response(response, error_message)
        return True


def enum_value(item: Any) -> Optional[str]:
    """Wire value of an enum member or plain string"""
    if item is None:
        return None
    return item.value if hasattr(item, "value") else str(item)
