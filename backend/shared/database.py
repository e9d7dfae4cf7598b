"""
Database client factory for Supabase.

The ledger talks to Supabase as the signed-in user: the client is built
with the anon key so Row Level Security (RLS) scopes every query, and
with an explicit token storage so sign-out can wipe cached credentials.
"""

from typing import Optional
from supabase import AsyncClient, AsyncClientOptions, acreate_client
from supabase_auth import AsyncSupportedStorage

from .config import get_settings

# Module-level client cache
_user_client: Optional[AsyncClient] = None


async def get_supabase_client(
    storage: Optional[AsyncSupportedStorage] = None,
) -> AsyncClient:
    """
    Get the async Supabase client used by the application.

    Args:
        storage: Optional token storage for the auth client. Only used
            when the client is first created.

    Returns:
        Async Supabase client configured with the anon key
    """
    global _user_client

    if _user_client is None:
        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_anon_key:
            raise RuntimeError(
                "Supabase configuration missing. "
                "Set SUPABASE_URL and SUPABASE_ANON_KEY environment variables."
            )
        options = AsyncClientOptions(storage=storage) if storage is not None else AsyncClientOptions()
        _user_client = await acreate_client(
            settings.supabase_url,
            settings.supabase_anon_key,
            options=options,
        )

    return _user_client


def reset_client_cache() -> None:
    """
    Reset the cached database client.

    Useful for testing or when configuration changes.
    """
    global _user_client
    _user_client = None
