"""
Supabase implementation of the auth gateway.

Translates between the Supabase auth SDK and the session module's own
models and exceptions, so the controller never sees SDK types.
"""

import logging
from typing import Any, Optional

import httpx
from supabase import AsyncClient
from supabase_auth.errors import (
    AuthError,
    AuthRetryableError,
    AuthSessionMissingError as SupabaseSessionMissingError,
)

from .exceptions import (
    AuthServiceUnavailableError,
    AuthSessionMissingError,
    InvalidSessionError,
)
from .interfaces import AuthChangeCallback, IAuthGateway, Unsubscribe
from .models import AuthSession, AuthUser
from .token_cache import TokenCache

logger = logging.getLogger(__name__)

# Error markers the auth service uses when the session is already gone.
_SESSION_MISSING_MARKERS = ("Auth session missing", "session_not_found")


def is_session_missing(exc: Exception) -> bool:
    """Whether an SDK error means there was no session to act on."""
    if isinstance(exc, SupabaseSessionMissingError):
        return True
    if getattr(exc, "code", None) == "session_not_found":
        return True
    text = str(exc)
    return any(marker in text for marker in _SESSION_MISSING_MARKERS)


def to_auth_user(user: Any) -> AuthUser:
    """Map a Supabase user onto AuthUser."""
    return AuthUser(
        id=str(user.id),
        email=getattr(user, "email", None),
        email_confirmed_at=getattr(user, "email_confirmed_at", None),
    )


def to_auth_session(session: Any) -> Optional[AuthSession]:
    """Map a Supabase session onto AuthSession."""
    if session is None:
        return None
    user = getattr(session, "user", None)
    return AuthSession(
        access_token=session.access_token,
        refresh_token=getattr(session, "refresh_token", None),
        expires_at=getattr(session, "expires_at", None),
        user=to_auth_user(user) if user is not None else None,
    )


class SupabaseAuthGateway(IAuthGateway):
    """
    Auth gateway backed by the async Supabase client.

    Network failures surface as AuthServiceUnavailableError, rejected
    credentials as InvalidSessionError.
    """

    def __init__(self, client: AsyncClient, token_cache: Optional[TokenCache] = None):
        self._client = client
        self._token_cache = token_cache

    @property
    def _auth(self) -> Any:
        return self._client.auth

    async def get_current_user(self) -> Optional[AuthUser]:
        try:
            response = await self._auth.get_user()
        except SupabaseSessionMissingError:
            return None
        except (AuthRetryableError, httpx.TransportError) as exc:
            raise AuthServiceUnavailableError(str(exc)) from exc
        except AuthError as exc:
            raise InvalidSessionError(str(exc)) from exc

        if response is None or response.user is None:
            return None
        return to_auth_user(response.user)

    async def get_current_session(self) -> Optional[AuthSession]:
        try:
            session = await self._auth.get_session()
        except (AuthRetryableError, httpx.TransportError) as exc:
            raise AuthServiceUnavailableError(str(exc)) from exc
        except AuthError as exc:
            raise InvalidSessionError(str(exc)) from exc
        return to_auth_session(session)

    async def sign_out(self) -> None:
        try:
            await self._auth.sign_out()
        except (AuthRetryableError, httpx.TransportError) as exc:
            raise AuthServiceUnavailableError(str(exc)) from exc
        except AuthError as exc:
            if is_session_missing(exc):
                raise AuthSessionMissingError(str(exc)) from exc
            raise

    def subscribe(self, callback: AuthChangeCallback) -> Unsubscribe:
        def forward(event: str, session: Any) -> None:
            callback(event, to_auth_session(session))

        subscription = self._auth.on_auth_state_change(forward)
        return subscription.unsubscribe

    async def clear_local_cache(self) -> None:
        if self._token_cache is None:
            logger.debug("No token cache configured, nothing to clear")
            return
        await self._token_cache.clear()
