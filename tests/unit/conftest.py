"""
Civic Portal - Unit Test Fixtures
"""
import pytest

from civicportal.config import PortalConfig
from civicportal.session import (
    AuthState,
    ReloadSignal,
    SessionTokens,
    admin_namespace,
    citizen_namespace,
)
from civicportal.storage import MemoryStorage

from tests.unit.helpers import TEST_BASE_URL, MockBackend, make_token, user_payload


@pytest.fixture
def backend() -> MockBackend:
    return MockBackend()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def auth_state() -> AuthState:
    return AuthState()


@pytest.fixture
def reload_signal() -> ReloadSignal:
    return ReloadSignal()


@pytest.fixture
def citizen(storage, auth_state):
    return citizen_namespace(storage, auth_state)


@pytest.fixture
def admin(storage, reload_signal):
    return admin_namespace(storage, reload_signal)


@pytest.fixture
def config(tmp_path) -> PortalConfig:
    return PortalConfig(api_base_url=TEST_BASE_URL, config_dir=str(tmp_path))


@pytest.fixture
def logged_in_citizen(citizen):
    """Citizen namespace holding a valid session"""
    user = user_payload()
    citizen.save(
        SessionTokens(make_token(), make_token(expires_in=86400)),
        {"id": str(user["id"]), "first_name": user["firstName"], "last_name": user["lastName"],
         "name": f"{user['firstName']} {user['lastName']}", "email": user["email"]},
    )
    return citizen
