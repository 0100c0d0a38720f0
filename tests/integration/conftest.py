"""
Civic Portal - Integration Test Fixtures

Skipped unless CIVIC_INTEGRATION=1 and a backend is reachable at
CIVIC_API_BASE_URL.
"""
import pytest

from civicportal.config import PortalConfig
from civicportal.session import admin_namespace, citizen_namespace
from civicportal.storage import MemoryStorage

from tests.integration.config import config as integration_config


def pytest_collection_modifyitems(config, items):
    if integration_config.enabled:
        return
    skip = pytest.mark.skip(reason="set CIVIC_INTEGRATION=1 to run against a live backend")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
def portal_config(tmp_path) -> PortalConfig:
    return PortalConfig(
        api_base_url=integration_config.api_base_url,
        timeout=integration_config.request_timeout,
        config_dir=str(tmp_path),
    )


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def citizen(storage):
    return citizen_namespace(storage)


@pytest.fixture
def admin(storage):
    return admin_namespace(storage)
