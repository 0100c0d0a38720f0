"""
Civic Portal Authentication
===========================

Login, registration and the session lifecycle for one namespace:

  login / register     POST /api/auth/... and store tokens + profile
  restore_session      start-up; an expired access token ends the session
  refresh_session      swap the refresh token for a new pair
  auto-refresh         background task, logs the session out on failure
  complete_profile     PUT through the interceptor, updates the cache
  logout               voluntary, no "session expired" signal

The citizen namespace caches a ``UserProfile``; the admin namespace caches
a ``Leader``.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

import httpx

from civicportal.config import PortalConfig
from civicportal.endpoints import Auth, Users
from civicportal.exceptions import APIError
from civicportal.interceptor import AuthenticatedClient, handle_api_response
from civicportal.logging_config import logger, set_namespace
from civicportal.models import Leader, UserProfile
from civicportal.session import DEFAULT_LOGOUT_REASON, SessionNamespace, SessionTokens
from civicportal.tokens import is_token_expired


Profile = Union[UserProfile, Leader]


class AuthManager:
    """
    Session lifecycle for one namespace.

    Unauthenticated calls (login, register, refresh) go out on a plain
    httpx client; everything else uses ``self.client``, the interceptor
    bound to the same namespace.
    """

    def __init__(self, namespace: SessionNamespace, config: Optional[PortalConfig] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.namespace = namespace
        self.config = config or PortalConfig.load_default()
        self.transport = transport
        self.client = AuthenticatedClient(
            namespace,
            base_url=self.config.api_base_url,
            transport=transport,
            timeout=self.config.timeout,
        )
        self._refresh_task: Optional[asyncio.Task] = None

    @property
    def is_admin(self) -> bool:
        return self.namespace.name == "admin"

    async def close(self) -> None:
        await self.stop_auto_refresh()
        await self.client.close()

    def _plain_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.api_base_url,
            transport=self.transport,
            timeout=self.config.timeout,
        )

    # ==================== Profile mapping ====================

    def _profile_from_user(self, user: Dict[str, Any], verified: bool = True) -> Profile:
        if self.is_admin:
            return Leader.from_auth_user(
                user,
                verified=verified,
                joined_at=datetime.now(timezone.utc).isoformat(),
            )
        return UserProfile.from_auth_user(user)

    def _profile_from_dict(self, data: Dict[str, Any]) -> Profile:
        if self.is_admin:
            return Leader.from_dict(data)
        return UserProfile.from_dict(data)

    def _publish(self, profile: Optional[Profile]) -> None:
        """Push the in-memory user to reactive subscribers"""
        if self.namespace.auth_state is not None:
            self.namespace.auth_state.set_user(profile.to_dict() if profile else None)

    def _store_auth_response(self, data: Dict[str, Any], verified: bool) -> Profile:
        tokens = SessionTokens(
            access_token=data["accessToken"],
            refresh_token=data.get("refreshToken") or "",
        )
        profile = self._profile_from_user(data.get("user") or {}, verified=verified)
        self.namespace.save(tokens, profile.to_dict())
        self._publish(profile)
        return profile

    # ==================== Login / Register ====================

    async def _authenticate(self, path: str, payload: Dict[str, Any], event: str,
                            user_label: str, verified: bool) -> bool:
        set_namespace(self.namespace.name)
        try:
            async with self._plain_client() as client:
                response = await client.post(path, json=payload)
        except httpx.TransportError as e:
            logger.log_auth_event(event, success=False, user=user_label, reason=f"network error: {e}")
            raise

        if not response.is_success:
            try:
                reason = response.json().get("message")
            except (ValueError, AttributeError):
                reason = None
            logger.log_auth_event(event, success=False, user=user_label,
                                  reason=reason or f"HTTP {response.status_code}")
            return False

        data = response.json()
        if not isinstance(data, dict) or not data.get("accessToken"):
            logger.log_auth_event(event, success=False, user=user_label, reason="no access token in response")
            return False

        self._store_auth_response(data, verified=verified)
        logger.log_auth_event(event, success=True, user=user_label)
        return True

    async def login(self, email_or_phone: str, password: str) -> bool:
        """Log in with email or phone number; True when a session was stored"""
        return await self._authenticate(
            Auth.LOGIN,
            {"emailOrPhone": email_or_phone, "password": password},
            "login",
            email_or_phone,
            verified=True,
        )

    async def register(self, request: Dict[str, Any]) -> bool:
        """Create an account and log straight into it"""
        label = request.get("email") or request.get("phoneNumber") or ""
        return await self._authenticate(Auth.REGISTER, request, "register", label, verified=False)

    async def logout(self) -> None:
        await self.stop_auto_refresh()
        self.namespace.clear()
        self._publish(None)
        logger.log_auth_event("logout", success=True)

    # ==================== Session lifecycle ====================

    def restore_session(self) -> Optional[Profile]:
        """
        Restore the cached session at start-up.

        An access token that is missing, expired or unreadable ends the
        whole session (refresh token included) without contacting the
        server. So does a token record with no cached profile.
        """
        set_namespace(self.namespace.name)
        tokens = self.namespace.get_tokens()
        stored = self.namespace.get_profile()
        if tokens is None and stored is None:
            # Also drops a corrupt record that reads as no session
            self.namespace.clear()
            logger.debug("No stored session to restore")
            return None

        if tokens is None or is_token_expired(tokens.access_token):
            self.namespace.clear()
            self._publish(None)
            logger.log_auth_event("restore", success=False, reason="access token missing or expired")
            return None

        if stored is None:
            self.namespace.clear()
            logger.log_auth_event("restore", success=False, reason="no cached profile")
            return None

        try:
            profile = self._profile_from_dict(stored)
        except TypeError as e:
            logger.warning(f"Cached profile unreadable, clearing session: {e}")
            self.namespace.clear()
            return None

        self._publish(profile)
        logger.log_auth_event("restore", success=True, user=profile.name)
        return profile

    async def refresh_session(self) -> bool:
        """Exchange the refresh token for a new token pair"""
        tokens = self.namespace.get_tokens()
        if tokens is None or not tokens.refresh_token:
            return False

        try:
            async with self._plain_client() as client:
                response = await client.post(Auth.REFRESH, json={"refreshToken": tokens.refresh_token})
        except httpx.TransportError as e:
            logger.log_auth_event("refresh", success=False, reason=str(e))
            self.namespace.force_logout(DEFAULT_LOGOUT_REASON)
            return False

        if not response.is_success:
            logger.log_auth_event("refresh", success=False, reason=f"HTTP {response.status_code}")
            return False

        data = response.json()
        access = data.get("accessToken") if isinstance(data, dict) else None
        if not access:
            logger.log_auth_event("refresh", success=False, reason="no access token in response")
            return False

        self.namespace.save_tokens(SessionTokens(
            access_token=access,
            refresh_token=data.get("refreshToken") or tokens.refresh_token,
        ))
        logger.log_auth_event("refresh", success=True)
        return True

    def start_auto_refresh(self, interval: Optional[float] = None) -> asyncio.Task:
        """Refresh every ``interval`` seconds while a session exists"""
        if self._refresh_task and not self._refresh_task.done():
            self._refresh_task.cancel()
        interval = interval if interval is not None else self.config.refresh_interval

        async def refresh_loop():
            while True:
                await asyncio.sleep(interval)
                if not self.is_authenticated:
                    break
                logger.debug("Auto-refreshing token")
                if not await self.refresh_session():
                    logger.warning("Auto-refresh failed, logging out")
                    if not self.namespace.invalidated:
                        self.namespace.force_logout(DEFAULT_LOGOUT_REASON)
                    break

        self._refresh_task = asyncio.create_task(refresh_loop())
        return self._refresh_task

    async def stop_auto_refresh(self) -> None:
        if self._refresh_task:
            self._refresh_task.cancel()
            try:
                await self._refresh_task
            except asyncio.CancelledError:
                pass
            self._refresh_task = None

    # ==================== Profile ====================

    @property
    def current_profile(self) -> Optional[Profile]:
        stored = self.namespace.get_profile()
        if stored is None:
            return None
        try:
            return self._profile_from_dict(stored)
        except TypeError:
            return None

    @property
    def is_authenticated(self) -> bool:
        return not self.namespace.invalidated and self.namespace.has_session()

    @property
    def is_profile_complete(self) -> bool:
        profile = self.current_profile
        return bool(profile and profile.is_profile_complete())

    async def complete_profile(self, data: Dict[str, Any]) -> bool:
        """Send location (and level) details for the current account"""
        profile = self.current_profile
        if profile is None:
            return False

        response = await self.client.put(Users.complete_profile(profile.id), json=data)
        try:
            updated = handle_api_response(response, "Profile completion failed")
        except APIError as e:
            logger.warning(f"Profile completion failed: {e.message}")
            return False
        if updated is None:
            return False
        if not updated:
            logger.warning("Profile completion returned no user record")
            return False

        if isinstance(profile, Leader):
            new_profile: Profile = Leader.from_auth_user(updated, verified=profile.verified,
                                                         joined_at=profile.joined_at)
            new_profile.department = profile.department
        else:
            new_profile = UserProfile.from_auth_user(updated)

        self.namespace.save_profile(new_profile.to_dict())
        self._publish(new_profile)
        return True

    def update_profile(self, **changes: Any) -> Optional[Profile]:
        """Merge local changes into the cached profile"""
        stored = self.namespace.get_profile()
        if stored is None:
            return None
        stored.update(changes)
        profile = self._profile_from_dict(stored)
        self.namespace.save_profile(profile.to_dict())
        self._publish(profile)
        return profile
