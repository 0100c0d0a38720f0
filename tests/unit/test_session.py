"""
Unit Tests for session namespaces
Tests for: key isolation, corrupt records, force logout, teardown signals
"""
import json

import pytest

from civicportal.session import (
    AuthState,
    ReloadSignal,
    SessionTokens,
    admin_namespace,
    citizen_namespace,
)
from civicportal.storage import MemoryStorage

from tests.unit.helpers import make_token


class TestSessionTokens:
    """Test token record parsing"""

    def test_round_trip_uses_camel_case_keys(self):
        """Test the persisted JSON uses accessToken/refreshToken"""
        raw = SessionTokens("access", "refresh").to_json()
        assert json.loads(raw) == {"accessToken": "access", "refreshToken": "refresh"}
        assert SessionTokens.from_json(raw) == SessionTokens("access", "refresh")

    @pytest.mark.parametrize("raw", [None, "", "{not json", "[]", '{"refreshToken": "r"}', '{"accessToken": 5}'])
    def test_unusable_record_reads_as_no_session(self, raw):
        """Test corrupt or partial records are treated as absent"""
        assert SessionTokens.from_json(raw) is None


class TestNamespaceKeys:
    """Test namespace storage layout"""

    def test_citizen_keys(self, storage):
        """Test citizen session lives under authTokens/currentUser"""
        ns = citizen_namespace(storage)
        ns.save(SessionTokens("a", "r"), {"id": "1"})
        assert set(storage.keys()) == {"authTokens", "currentUser"}

    def test_admin_keys(self, storage):
        """Test admin session lives under adminAuthTokens/adminCurrentLeader"""
        ns = admin_namespace(storage)
        ns.save(SessionTokens("a", "r"), {"id": "1"})
        assert set(storage.keys()) == {"adminAuthTokens", "adminCurrentLeader"}

    def test_namespaces_do_not_share_tokens(self, storage):
        """Test each namespace reads only its own token"""
        citizen = citizen_namespace(storage)
        admin = admin_namespace(storage)
        citizen.save(SessionTokens("citizen-token"), {"id": "1"})
        admin.save(SessionTokens("admin-token"), {"id": "2"})

        assert citizen.get_token() == "citizen-token"
        assert admin.get_token() == "admin-token"

    def test_corrupt_profile_reads_as_none(self, storage):
        """Test unreadable profile JSON gives no profile"""
        ns = citizen_namespace(storage)
        storage.set_item("currentUser", "{broken")
        storage.set_item("authTokens", SessionTokens("a").to_json())
        assert ns.get_profile() is None
        assert ns.has_session() is False


class TestForceLogout:
    """Test session teardown"""

    def test_clears_only_own_namespace(self, storage):
        """Test citizen teardown leaves the admin session intact"""
        citizen = citizen_namespace(storage)
        admin = admin_namespace(storage)
        citizen.save(SessionTokens(make_token()), {"id": "1"})
        admin.save(SessionTokens(make_token()), {"id": "2"})
        snapshot = {k: storage.get_item(k) for k in ("adminAuthTokens", "adminCurrentLeader")}

        citizen.force_logout("expired")

        assert citizen.get_tokens() is None
        assert citizen.get_profile() is None
        assert {k: storage.get_item(k) for k in ("adminAuthTokens", "adminCurrentLeader")} == snapshot

    def test_idempotent(self, storage):
        """Test repeated teardown on an empty session is harmless"""
        ns = citizen_namespace(storage)
        ns.force_logout("first")
        ns.force_logout("second")
        assert storage.keys() == []
        assert ns.invalidated is True

    def test_save_lifts_invalidation(self, storage):
        """Test a fresh login makes the namespace usable again"""
        ns = citizen_namespace(storage)
        ns.force_logout("expired")
        ns.save(SessionTokens("fresh"), {"id": "1"})
        assert ns.invalidated is False
        assert ns.get_token() == "fresh"

    def test_citizen_signal_resets_auth_state(self, storage):
        """Test citizen teardown clears the reactive user and notifies subscribers"""
        state = AuthState()
        seen = []
        state.subscribe(lambda user, reason: seen.append((user, reason)))
        state.set_user({"id": "1"})
        ns = citizen_namespace(storage, state)

        ns.force_logout("Session expired")

        assert state.current_user is None
        assert seen[-1] == (None, "Session expired")

    def test_admin_signal_fires_reload(self, storage):
        """Test admin teardown triggers the reload hook once"""
        reasons = []
        signal = ReloadSignal(hook=reasons.append)
        ns = admin_namespace(storage, signal)

        ns.force_logout("Session expired")

        assert reasons == ["Session expired"]
        assert signal.consume() is True
        assert signal.consume() is False


class TestAuthState:
    """Test reactive user state"""

    def test_unsubscribe(self):
        """Test a removed subscriber is not called again"""
        state = AuthState()
        calls = []
        unsubscribe = state.subscribe(lambda user, reason: calls.append(user))
        state.set_user({"id": "1"})
        unsubscribe()
        state.set_user(None)
        assert calls == [{"id": "1"}]
