"""
Profile repository for database access.

Reads and writes the profiles table. The `exists` completeness flag is
computed by a database trigger and only ever read here.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from shared.repository import BaseRepository
from modules.session.models import Profile


class ProfileRepository(BaseRepository[Profile]):
    """
    Repository for profile data access.

    Satisfies IProfileStore structurally.

    Row Level Security limits every query to the signed-in user's row,
    so this repository does NOT perform ownership checks.
    """

    TABLE = "profiles"

    async def get_by_id(self, user_id: str) -> Optional[Profile]:
        """
        Get a profile by user ID.

        Returns:
            Profile, or None if the user has not created one yet.
        """
        result = await self._db.table(self.TABLE).select("*").eq("id", user_id).execute()
        if not result.data:
            return None
        return Profile(**result.data[0])

    async def update(self, user_id: str, fields: dict[str, Any]) -> Optional[Profile]:
        """
        Apply a partial update and stamp updated_at.

        Returns:
            Updated Profile, or None if no row matched.
        """
        payload = {**fields, "updated_at": datetime.now(timezone.utc).isoformat()}
        result = await self._db.table(self.TABLE).update(payload).eq("id", user_id).execute()
        if not result.data:
            return None
        return Profile(**result.data[0])
