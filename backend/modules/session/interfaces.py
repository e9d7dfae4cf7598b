"""
Session module interfaces.

The controller depends on these protocols, not on the Supabase SDK.
This enables testing with in-memory fakes and swapping the backend.
"""

from typing import Any, Callable, Optional, Protocol, runtime_checkable

from .models import AuthSession, AuthUser, Profile

AuthChangeCallback = Callable[[str, Optional[AuthSession]], None]
Unsubscribe = Callable[[], None]


@runtime_checkable
class IAuthGateway(Protocol):
    """
    Interface for the hosted authentication service.

    The service owns users and sessions; the controller only reads them
    and listens for changes.
    """

    async def get_current_user(self) -> Optional[AuthUser]:
        """
        Verify the stored credentials with the service and return the user.

        Returns:
            AuthUser if the stored session is valid, None otherwise

        Raises:
            AuthServiceUnavailableError: If the service cannot be reached
            AuthenticationError: If the service rejects the credentials
        """
        ...

    async def get_current_session(self) -> Optional[AuthSession]:
        """
        Return the locally stored session without a round trip when possible.

        Returns:
            AuthSession if one is stored, None otherwise
        """
        ...

    async def sign_out(self) -> None:
        """
        Revoke the current session on the service.

        Raises:
            AuthSessionMissingError: If the service has no session to revoke
        """
        ...

    def subscribe(self, callback: AuthChangeCallback) -> Unsubscribe:
        """
        Register for (event, session) notifications.

        The callback runs synchronously whenever the service reports an
        auth state change.

        Returns:
            Function that releases the subscription
        """
        ...

    async def clear_local_cache(self) -> None:
        """Drop any locally cached tokens."""
        ...


@runtime_checkable
class IProfileStore(Protocol):
    """Interface for reading and writing user profiles."""

    async def get_by_id(self, user_id: str) -> Optional[Profile]:
        """
        Get a profile by user ID.

        Returns:
            Profile if found, None if the user has not created one yet
        """
        ...

    async def update(self, user_id: str, fields: dict[str, Any]) -> Optional[Profile]:
        """
        Apply a partial update to a profile.

        Returns:
            The updated Profile, or None if no profile row matched
        """
        ...
