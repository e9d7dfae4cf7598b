"""
Reactions to session state changes.
"""

import logging
from typing import Callable, Optional

from .models import SessionState

logger = logging.getLogger(__name__)

UserChangeCallback = Callable[[Optional[str], Optional[str]], None]


class UserChangeWatcher:
    """
    Fire a callback whenever the signed-in user id changes.

    Sign-in, sign-out and switching accounts all count as changes. Used to
    drop per-user caches so one user never sees another user's data.

    Example:
        watcher = UserChangeWatcher(lambda old, new: ledger.clear_cache())
        remove = controller.add_listener(watcher)
    """

    def __init__(self, on_change: UserChangeCallback, initial_user_id: Optional[str] = None):
        self._on_change = on_change
        self._user_id = initial_user_id

    @property
    def user_id(self) -> Optional[str]:
        """Last user id seen."""
        return self._user_id

    def __call__(self, state: SessionState) -> None:
        current = state.user.id if state.user is not None else None
        if current == self._user_id:
            return
        previous, self._user_id = self._user_id, current
        logger.debug("Signed-in user changed from %s to %s", previous, current)
        self._on_change(previous, current)
