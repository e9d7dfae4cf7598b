"""
In-process token storage for the Supabase auth client.

The Supabase client persists the session through a storage object. Owning
that object lets sign-out wipe every cached credential, not just the one
the SDK knows how to remove.
"""

from typing import Optional

from supabase_auth import AsyncSupportedStorage


class TokenCache(AsyncSupportedStorage):
    """Dictionary-backed storage that can be cleared in one call."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    async def clear(self) -> None:
        """Remove every stored item."""
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
