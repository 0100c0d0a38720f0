"""
Unit Tests for the session lifecycle
Tests for: login, register, restore, refresh, auto-refresh, profile completion, logout
"""
import asyncio

import httpx
import pytest

from civicportal.auth import AuthManager
from civicportal.interceptor import AuthenticatedClient
from civicportal.models import Leader, UserProfile
from civicportal.session import SessionTokens

from tests.unit.helpers import TEST_BASE_URL, make_token, user_payload


def login_response(**user_overrides):
    return {
        "accessToken": make_token(),
        "refreshToken": make_token(expires_in=86400),
        "user": user_payload(**user_overrides),
    }


class TestLogin:
    """Test logging in"""

    @pytest.mark.asyncio
    async def test_citizen_login_stores_session(self, citizen, auth_state, config, backend):
        """Test tokens and the mapped profile land in the citizen keys"""
        payload = login_response(firstName="Aline", lastName="Uwase")
        backend.add("POST", "/api/auth/login", json_body=payload)
        manager = AuthManager(citizen, config, transport=backend.transport)

        assert await manager.login("aline@example.rw", "secret") is True

        assert backend.body() == {"emailOrPhone": "aline@example.rw", "password": "secret"}
        assert citizen.get_token() == payload["accessToken"]
        assert citizen.get_tokens().refresh_token == payload["refreshToken"]
        profile = manager.current_profile
        assert isinstance(profile, UserProfile)
        assert profile.name == "Aline Uwase"
        assert profile.is_profile_complete()
        assert auth_state.current_user["name"] == "Aline Uwase"
        await manager.close()

    @pytest.mark.asyncio
    async def test_admin_login_maps_leader(self, admin, storage, config, backend):
        """Test the admin namespace caches a Leader with its level"""
        backend.add("POST", "/api/auth/login", json_body=login_response(role="SECTOR_LEADER"))
        manager = AuthManager(admin, config, transport=backend.transport)

        assert await manager.login("0788123456", "secret") is True

        leader = manager.current_profile
        assert isinstance(leader, Leader)
        assert leader.level == "sector"
        assert leader.department == "Administration"
        assert leader.verified is True
        assert leader.joined_at
        assert storage.get_item("authTokens") is None
        await manager.close()

    @pytest.mark.asyncio
    async def test_rejected_login(self, citizen, config, backend):
        """Test bad credentials store nothing"""
        backend.add("POST", "/api/auth/login", status=400, json_body={"message": "Invalid credentials"})
        manager = AuthManager(citizen, config, transport=backend.transport)

        assert await manager.login("someone", "wrong") is False
        assert citizen.get_tokens() is None
        await manager.close()

    @pytest.mark.asyncio
    async def test_login_lifts_invalidation(self, citizen, config, backend):
        """Test a fresh login re-enables a torn-down namespace"""
        citizen.force_logout()
        backend.add("POST", "/api/auth/login", json_body=login_response())
        manager = AuthManager(citizen, config, transport=backend.transport)

        await manager.login("someone", "secret")

        assert citizen.invalidated is False
        assert manager.is_authenticated
        await manager.close()

    @pytest.mark.asyncio
    async def test_register_stores_unverified_leader(self, admin, config, backend):
        """Test registration logs straight in, unverified"""
        backend.add("POST", "/api/auth/register", json_body=login_response(role="CELL_LEADER"))
        manager = AuthManager(admin, config, transport=backend.transport)

        assert await manager.register({"email": "new@example.rw", "password": "pw"}) is True
        assert manager.current_profile.verified is False
        assert manager.current_profile.level == "cell"
        await manager.close()


class TestRestoreSession:
    """Test start-up restore"""

    def test_valid_session_restored(self, logged_in_citizen, auth_state, config):
        """Test a valid cached session comes back"""
        manager = AuthManager(logged_in_citizen, config)
        profile = manager.restore_session()

        assert profile is not None
        assert auth_state.current_user["id"] == profile.id

    def test_expired_token_clears_everything(self, citizen, storage, config):
        """Test an expired access token drops the refresh token too"""
        citizen.save(SessionTokens(make_token(expires_in=-60), make_token(expires_in=86400)), {"id": "1"})
        manager = AuthManager(citizen, config)

        assert manager.restore_session() is None
        assert storage.get_item("authTokens") is None
        assert storage.get_item("currentUser") is None

    def test_malformed_token_clears(self, citizen, config):
        """Test an unreadable access token counts as expired"""
        citizen.save(SessionTokens("not-a-jwt"), {"id": "1"})
        manager = AuthManager(citizen, config)

        assert manager.restore_session() is None
        assert citizen.get_tokens() is None

    def test_orphaned_tokens_cleared(self, citizen, storage, config):
        """Test an expired token record without a profile loses its refresh token"""
        citizen.save_tokens(SessionTokens(make_token(expires_in=-60), "valid-refresh"))
        manager = AuthManager(citizen, config)

        assert manager.restore_session() is None
        assert storage.get_item("authTokens") is None

    def test_valid_tokens_without_profile_cleared(self, citizen, storage, config):
        """Test a live token record with no cached profile is not kept"""
        citizen.save_tokens(SessionTokens(make_token(), "valid-refresh"))
        manager = AuthManager(citizen, config)

        assert manager.restore_session() is None
        assert storage.get_item("authTokens") is None

    def test_orphaned_profile_cleared(self, citizen, storage, config):
        """Test a cached profile with no tokens is removed"""
        citizen.save_profile({"id": "1", "name": "x"})
        manager = AuthManager(citizen, config)

        assert manager.restore_session() is None
        assert storage.get_item("currentUser") is None

    def test_corrupt_tokens_cleared(self, citizen, storage, config):
        """Test an unreadable token record is dropped"""
        storage.set_item("authTokens", "{broken")
        manager = AuthManager(citizen, config)

        assert manager.restore_session() is None
        assert storage.get_item("authTokens") is None

    def test_nothing_stored(self, citizen, config):
        """Test an empty namespace restores nothing"""
        assert AuthManager(citizen, config).restore_session() is None


class TestRefresh:
    """Test refreshing tokens"""

    @pytest.mark.asyncio
    async def test_refresh_success(self, logged_in_citizen, config, backend):
        """Test a new pair replaces the stored one"""
        old = logged_in_citizen.get_tokens()
        new_access = make_token(role="new")
        backend.add("POST", "/api/auth/refresh", json_body={"accessToken": new_access})
        manager = AuthManager(logged_in_citizen, config, transport=backend.transport)

        assert await manager.refresh_session() is True

        assert backend.body() == {"refreshToken": old.refresh_token}
        tokens = logged_in_citizen.get_tokens()
        assert tokens.access_token == new_access
        assert tokens.refresh_token == old.refresh_token
        await manager.close()

    @pytest.mark.asyncio
    async def test_refresh_rejected(self, logged_in_citizen, config, backend):
        """Test a rejected refresh leaves tokens in place"""
        backend.add("POST", "/api/auth/refresh", status=401)
        manager = AuthManager(logged_in_citizen, config, transport=backend.transport)

        assert await manager.refresh_session() is False
        assert logged_in_citizen.get_tokens() is not None
        await manager.close()

    @pytest.mark.asyncio
    async def test_refresh_network_error_clears(self, logged_in_citizen, auth_state, config, backend):
        """Test a network failure during refresh tears the session down"""
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        manager = AuthManager(logged_in_citizen, config, transport=httpx.MockTransport(refuse))

        assert await manager.refresh_session() is False
        assert logged_in_citizen.get_tokens() is None
        assert logged_in_citizen.invalidated is True
        assert auth_state.last_reason

        guarded = AuthenticatedClient(logged_in_citizen, base_url=TEST_BASE_URL, transport=backend.transport)
        assert await guarded.get("/api/issues") is None
        assert backend.requests == []
        await guarded.close()
        await manager.close()

    @pytest.mark.asyncio
    async def test_no_refresh_token(self, citizen, config, backend):
        """Test nothing is sent without a refresh token"""
        citizen.save(SessionTokens(make_token()), {"id": "1"})
        manager = AuthManager(citizen, config, transport=backend.transport)

        assert await manager.refresh_session() is False
        assert backend.requests == []
        await manager.close()

    @pytest.mark.asyncio
    async def test_auto_refresh_failure_logs_out(self, logged_in_citizen, auth_state, config, backend):
        """Test a failed background refresh forces a logout"""
        backend.add("POST", "/api/auth/refresh", status=401)
        manager = AuthManager(logged_in_citizen, config, transport=backend.transport)

        task = manager.start_auto_refresh(interval=0.01)
        await asyncio.wait_for(task, timeout=2)

        assert logged_in_citizen.invalidated is True
        assert logged_in_citizen.get_tokens() is None
        assert auth_state.last_reason
        await manager.close()


class TestProfile:
    """Test profile completion and logout"""

    @pytest.mark.asyncio
    async def test_complete_profile(self, logged_in_citizen, config, backend):
        """Test the updated user replaces the cached profile"""
        user_id = logged_in_citizen.get_profile()["id"]
        backend.add("PUT", f"/api/users/{user_id}/complete-profile",
                    json_body=user_payload(id=int(user_id)))
        manager = AuthManager(logged_in_citizen, config, transport=backend.transport)
        assert manager.is_profile_complete is False

        assert await manager.complete_profile({"district": "Gasabo"}) is True

        assert backend.last.headers["Authorization"].startswith("Bearer ")
        assert manager.is_profile_complete is True
        await manager.close()

    @pytest.mark.asyncio
    async def test_complete_profile_error(self, logged_in_citizen, config, backend):
        """Test a rejected update keeps the old profile"""
        user_id = logged_in_citizen.get_profile()["id"]
        backend.add("PUT", f"/api/users/{user_id}/complete-profile", status=400,
                    json_body={"message": "District is required"})
        manager = AuthManager(logged_in_citizen, config, transport=backend.transport)

        assert await manager.complete_profile({}) is False
        assert manager.is_profile_complete is False
        await manager.close()

    def test_update_profile(self, logged_in_citizen, config):
        """Test local changes merge into the cached profile"""
        manager = AuthManager(logged_in_citizen, config)
        profile = manager.update_profile(phone_number="0788000000")
        assert profile.phone_number == "0788000000"
        assert manager.current_profile.phone_number == "0788000000"

    @pytest.mark.asyncio
    async def test_logout(self, logged_in_citizen, auth_state, config):
        """Test logout clears the session without an expiry message"""
        manager = AuthManager(logged_in_citizen, config)
        await manager.logout()

        assert logged_in_citizen.get_tokens() is None
        assert auth_state.current_user is None
        assert auth_state.last_reason is None
        assert manager.is_authenticated is False
        await manager.close()
