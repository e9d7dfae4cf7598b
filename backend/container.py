"""
Dependency wiring for the Aqua Farm Ledger backend.

This module provides the "container" that wires together all module
implementations. The session controller only sees its collaborator
interfaces; this file decides that they are backed by Supabase.
"""

from typing import TYPE_CHECKING, Optional

from shared.config import Settings, get_settings

# Type checking imports (avoids importing the Supabase SDK at module load)
if TYPE_CHECKING:
    from supabase import AsyncClient
    from modules.ledger.service import LedgerService
    from modules.session.controller import SessionController
    from modules.session.token_cache import TokenCache


class ServiceContainer:
    """
    Container for all service instances.

    Services are created lazily on first access and cached as singletons
    within the container. Use reset() to clear them for testing.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._token_cache: "TokenCache | None" = None
        self._client: "AsyncClient | None" = None
        self._session: "SessionController | None" = None
        self._ledger: "LedgerService | None" = None
        self._remove_watcher = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def token_cache(self) -> "TokenCache":
        """Token storage shared by the Supabase client and sign-out."""
        if self._token_cache is None:
            from modules.session.token_cache import TokenCache
            self._token_cache = TokenCache()
        return self._token_cache

    async def client(self) -> "AsyncClient":
        """Get the Supabase client."""
        if self._client is None:
            from shared.database import get_supabase_client
            self._client = await get_supabase_client(storage=self.token_cache)
        return self._client

    async def ledger(self) -> "LedgerService":
        """Get the ledger service."""
        if self._ledger is None:
            from modules.ledger.repository import LedgerRepository
            from modules.ledger.service import LedgerService
            self._ledger = LedgerService(
                LedgerRepository(await self.client()),
                cache_ttl=self._settings.ledger_cache_ttl,
                colors=self._settings.category_colors,
            )
        return self._ledger

    async def session(self) -> "SessionController":
        """
        Get the session controller, wired so a change of signed-in user
        clears the ledger cache.

        The controller is not started; call start() on it from the event loop.
        """
        if self._session is None:
            from modules.profiles.repository import ProfileRepository
            from modules.session.controller import SessionController
            from modules.session.gateway import SupabaseAuthGateway
            from modules.session.models import SessionTimeouts
            from modules.session.watchers import UserChangeWatcher

            client = await self.client()
            ledger = await self.ledger()
            self._session = SessionController(
                auth=SupabaseAuthGateway(client, self.token_cache),
                profiles=ProfileRepository(client),
                timeouts=SessionTimeouts.from_settings(self._settings),
            )
            watcher = UserChangeWatcher(lambda previous, current: ledger.clear_cache())
            self._remove_watcher = self._session.add_listener(watcher)
        return self._session

    def reset(self) -> None:
        """
        Close the session controller and drop every cached service.

        This is primarily for testing and for switching configuration.
        """
        if self._remove_watcher is not None:
            self._remove_watcher()
            self._remove_watcher = None
        if self._session is not None:
            self._session.close()
        self._session = None
        self._ledger = None
        self._client = None
        self._token_cache = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    The next call to get_container() creates a fresh container.
    """
    global _container
    if _container is not None:
        _container.reset()
    _container = None
