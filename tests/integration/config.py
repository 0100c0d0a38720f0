"""
Civic Portal - Integration Test Configuration
"""
import os
from dataclasses import dataclass


@dataclass
class IntegrationConfig:
    """Backend and accounts used by the integration suite"""
    # URLs
    api_base_url: str = os.getenv("CIVIC_API_BASE_URL", "http://localhost:8080")

    # Citizen account
    citizen_login: str = os.getenv("CIVIC_TEST_CITIZEN", "citizen@test.rw")
    citizen_password: str = os.getenv("CIVIC_TEST_CITIZEN_PASSWORD", "TestPassword123!")

    # Leader account
    leader_login: str = os.getenv("CIVIC_TEST_LEADER", "leader@test.rw")
    leader_password: str = os.getenv("CIVIC_TEST_LEADER_PASSWORD", "TestPassword123!")

    # Timeouts
    request_timeout: float = 30.0

    @property
    def enabled(self) -> bool:
        return os.getenv("CIVIC_INTEGRATION") == "1"


# Global config instance
config = IntegrationConfig()
