"""
Civic Portal Session Namespaces
===============================

Two independent sessions can live in the same storage:

  citizen   authTokens / currentUser
  admin     adminAuthTokens / adminCurrentLeader

A ``SessionNamespace`` owns one pair of keys and one teardown signal.
Everything that needs "the current token" or "log this session out"
talks to a namespace, never to the raw storage keys.

Teardown differs per role:
  - citizen: ``AuthState`` drops the in-memory user and tells its
    subscribers, which show a login prompt where the user already is.
  - admin: ``ReloadSignal`` fires a reload hook; the front end reruns
    start-up, finds no session and lands on the login screen.
"""

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from civicportal.logging_config import logger
from civicportal.storage import KeyValueStorage


DEFAULT_LOGOUT_REASON = "Your session has expired. Please log in again."


@dataclass(frozen=True)
class SessionTokens:
    """Access/refresh token pair as persisted"""
    access_token: str
    refresh_token: str = ""

    def to_json(self) -> str:
        return json.dumps({
            "accessToken": self.access_token,
            "refreshToken": self.refresh_token,
        })

    @classmethod
    def from_json(cls, raw: Optional[str]) -> Optional["SessionTokens"]:
        """Parse the stored record; anything unusable reads as no session"""
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            return None
        if not isinstance(data, dict):
            return None
        access = data.get("accessToken")
        if not isinstance(access, str) or not access:
            return None
        refresh = data.get("refreshToken")
        return cls(access_token=access, refresh_token=refresh if isinstance(refresh, str) else "")


class AuthState:
    """
    In-memory current user for the citizen namespace.

    Subscribers are called with the new user (or None) on every change.
    """

    def __init__(self):
        self._user: Optional[Dict[str, Any]] = None
        self._subscribers: List[Callable[[Optional[Dict[str, Any]], Optional[str]], None]] = []
        self.last_reason: Optional[str] = None

    @property
    def current_user(self) -> Optional[Dict[str, Any]]:
        return self._user

    def subscribe(self, callback: Callable[[Optional[Dict[str, Any]], Optional[str]], None]) -> Callable[[], None]:
        """Register a callback; returns a function that removes it"""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def set_user(self, user: Optional[Dict[str, Any]], reason: Optional[str] = None) -> None:
        self._user = user
        self.last_reason = reason
        for callback in list(self._subscribers):
            callback(user, reason)

    def __call__(self, reason: str) -> None:
        self.set_user(None, reason)


class ReloadSignal:
    """Reload hook for the admin namespace"""

    def __init__(self, hook: Optional[Callable[[str], None]] = None):
        self.hook = hook
        self.pending = False
        self.last_reason: Optional[str] = None

    def __call__(self, reason: str) -> None:
        self.pending = True
        self.last_reason = reason
        if self.hook is not None:
            self.hook(reason)

    def consume(self) -> bool:
        """Return True once per fired reload"""
        pending, self.pending = self.pending, False
        return pending


class SessionNamespace:
    """
    One role's persisted session plus its teardown signal.

    After ``force_logout`` the namespace stays invalidated until ``save``
    stores a fresh login, so callers holding a stale reference cannot put
    another request on the wire.
    """

    def __init__(self, name: str, storage: KeyValueStorage, tokens_key: str,
                 profile_key: str, on_unauthorized: Callable[[str], None]):
        self.name = name
        self.storage = storage
        self.tokens_key = tokens_key
        self.profile_key = profile_key
        self._signal = on_unauthorized
        self.invalidated = False
        self.auth_state: Optional[AuthState] = None
        self.reload: Optional[ReloadSignal] = None

    # ==================== Reads ====================

    def get_tokens(self) -> Optional[SessionTokens]:
        return SessionTokens.from_json(self.storage.get_item(self.tokens_key))

    def get_token(self) -> Optional[str]:
        """Current access token, or None"""
        tokens = self.get_tokens()
        return tokens.access_token if tokens else None

    def get_profile(self) -> Optional[Dict[str, Any]]:
        raw = self.storage.get_item(self.profile_key)
        if not raw:
            return None
        try:
            profile = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring unreadable {self.profile_key} record")
            return None
        return profile if isinstance(profile, dict) else None

    def has_session(self) -> bool:
        return self.get_tokens() is not None and self.get_profile() is not None

    # ==================== Writes ====================

    def save(self, tokens: SessionTokens, profile: Dict[str, Any]) -> None:
        """Store a fresh login; lifts a previous invalidation"""
        self.storage.set_item(self.tokens_key, tokens.to_json())
        self.storage.set_item(self.profile_key, json.dumps(profile))
        self.invalidated = False

    def save_tokens(self, tokens: SessionTokens) -> None:
        self.storage.set_item(self.tokens_key, tokens.to_json())

    def save_profile(self, profile: Dict[str, Any]) -> None:
        self.storage.set_item(self.profile_key, json.dumps(profile))

    def clear(self) -> None:
        """Remove both keys of this namespace only"""
        self.storage.remove_item(self.tokens_key)
        self.storage.remove_item(self.profile_key)

    # ==================== Teardown ====================

    def on_unauthorized(self, reason: str) -> None:
        self._signal(reason)

    def force_logout(self, reason: str = DEFAULT_LOGOUT_REASON) -> None:
        """Clear persisted state, then fire the teardown signal.

        Safe to call repeatedly; an empty session stays empty.
        """
        self.clear()
        self.invalidated = True
        logger.log_auth_event("force_logout", success=True, reason=reason, session_namespace=self.name)
        self.on_unauthorized(reason)

    def __repr__(self) -> str:
        return f"SessionNamespace({self.name!r})"


def citizen_namespace(storage: KeyValueStorage, auth_state: Optional[AuthState] = None) -> SessionNamespace:
    """Citizen session: authTokens/currentUser, reactive teardown"""
    state = auth_state if auth_state is not None else AuthState()
    namespace = SessionNamespace("citizen", storage, "authTokens", "currentUser", state)
    namespace.auth_state = state
    return namespace


def admin_namespace(storage: KeyValueStorage, reload: Optional[ReloadSignal] = None) -> SessionNamespace:
    """Admin session: adminAuthTokens/adminCurrentLeader, reload teardown"""
    signal = reload if reload is not None else ReloadSignal()
    namespace = SessionNamespace("admin", storage, "adminAuthTokens", "adminCurrentLeader", signal)
    namespace.reload = signal
    return namespace
