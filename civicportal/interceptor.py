"""
Authenticated request wrapper.

Every protected call goes through ``AuthenticatedClient.request``. It reads
the token of its own session namespace, attaches it, and on a 401 tears
that namespace down and hands the caller ``None``. Callers treat ``None``
as "stop, the session is gone" and never retry.
"""

import time
from typing import Any, Dict, Optional

import httpx

from civicportal.config import DEFAULT_API_BASE_URL
from civicportal.exceptions import error_for_status
from civicportal.logging_config import (
    logger,
    generate_request_id,
    set_request_id,
    set_namespace,
)
from civicportal.session import SessionNamespace


JSON_CONTENT_TYPE = "application/json"
BODY_METHODS = {"POST", "PUT", "PATCH"}
UNAUTHORIZED_REASON = "Your session has expired. Please log in again."


class AuthenticatedClient:
    """
    httpx client bound to one session namespace.

    Usage:
        async with AuthenticatedClient(namespace, base_url) as client:
            response = await client.get("/api/issues")
            if response is None:
                return  # session was torn down
    """

    def __init__(
        self,
        namespace: SessionNamespace,
        base_url: str = DEFAULT_API_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.namespace = namespace
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "AuthenticatedClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    def _build_headers(self, method: str, headers: Optional[Dict[str, str]],
                       has_body: bool) -> httpx.Headers:
        merged = httpx.Headers(headers or {})

        token = self.namespace.get_token()
        if token:
            merged["Authorization"] = f"Bearer {token}"

        if has_body and method in BODY_METHODS and "content-type" not in merged:
            merged["Content-Type"] = JSON_CONTENT_TYPE

        return merged

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        content: Any = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Optional[httpx.Response]:
        """
        Send one request for this namespace.

        Returns None when the namespace has been torn down or the server
        answered 401; otherwise the response exactly as received.
        Transport failures propagate.
        """
        method = method.upper()
        set_namespace(self.namespace.name)
        set_request_id(generate_request_id())

        if self.namespace.invalidated:
            logger.debug(f"Skipping {method} {url}: {self.namespace.name} session was torn down")
            return None

        has_body = json is not None or content is not None or data is not None
        request_headers = self._build_headers(method, headers, has_body)

        start = time.perf_counter()
        try:
            response = await self._client.request(
                method,
                url,
                headers=request_headers,
                params=params,
                json=json,
                content=content,
                data=data,
            )
        except httpx.TransportError as e:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.log_request(method, url, None, duration_ms)
            logger.log_error_with_context(e, f"{method} {url}", session_namespace=self.namespace.name)
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        logger.log_request(method, url, response.status_code, duration_ms)

        if response.status_code == 401:
            logger.warning(f"{method} {url} returned 401, ending {self.namespace.name} session")
            self.namespace.force_logout(UNAUTHORIZED_REASON)
            return None

        return response

    async def get(self, url: str, **kwargs) -> Optional[httpx.Response]:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs) -> Optional[httpx.Response]:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs) -> Optional[httpx.Response]:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: str, **kwargs) -> Optional[httpx.Response]:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs) -> Optional[httpx.Response]:
        return await self.request("DELETE", url, **kwargs)


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return fallback


def handle_api_response(response: Optional[httpx.Response],
                        error_message: str = "Request failed") -> Any:
    """
    Turn an interceptor result into data.

    None (session torn down) stays None and nothing else returns None: a
    2xx with an empty body gives an empty dict. A non-2xx status raises the
    matching APIError, using the backend's ``message`` when it sent one.
    """
    if response is None:
        return None

    if not response.is_success:
        message = _error_message(response, f"{error_message}: {response.status_code}")
        raise error_for_status(response.status_code, message, {"url": str(response.request.url)})

    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError:
        return response.text
    return {} if data is None else data
