"""
Shared test helpers: token minting, payload builders, fake backend
"""
import json
import time
from typing import Any, Callable, Dict, List, Optional

import httpx
from faker import Faker
from jose import jwt


fake = Faker()

TEST_BASE_URL = "http://civic.test"
SIGNING_KEY = "unit-test-signing-key"


def make_token(expires_in: float = 3600, **claims: Any) -> str:
    """Signed JWT whose exp is expires_in seconds from now"""
    payload = {"sub": str(fake.random_int(1, 9999)), "exp": int(time.time() + expires_in)}
    payload.update(claims)
    return jwt.encode(payload, SIGNING_KEY, algorithm="HS256")


def user_payload(**overrides: Any) -> Dict[str, Any]:
    """Backend user record as returned by /api/auth/login"""
    user = {
        "id": fake.random_int(1, 9999),
        "firstName": fake.first_name(),
        "lastName": fake.last_name(),
        "email": fake.email(),
        "phoneNumber": "0788" + str(fake.random_int(100000, 999999)),
        "role": "CITIZEN",
        "location": {
            "district": "Gasabo",
            "sector": "Kimironko",
            "cell": "Bibare",
            "village": "Amahoro",
        },
    }
    user.update(overrides)
    return user


class MockBackend:
    """
    Routes requests to canned responses and records everything it saw.

    Routes are keyed by (METHOD, path); a value is either a response
    factory taking the request or a (status, json) tuple.
    """

    def __init__(self):
        self.routes: Dict[tuple, Any] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, status: int = 200, json_body: Any = None,
            handler: Optional[Callable[[httpx.Request], httpx.Response]] = None) -> None:
        self.routes[(method.upper(), path)] = handler or (status, json_body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": f"No route for {request.method} {request.url.path}"})
        if callable(route):
            return route(request)
        status, body = route
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


