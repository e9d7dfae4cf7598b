"""
Session module.

Tracks who is signed in and whether their profile is complete, reconciling
the auth service's pushed notifications with the controller's own calls.

Public API:
- SessionController: The session state machine
- IAuthGateway / IProfileStore: Collaborator interfaces
- SessionState: Immutable state snapshot with derived flags
- Session exceptions: NoSessionError, InvalidSessionError, etc.
"""

from .controller import SessionController
from .interfaces import IAuthGateway, IProfileStore
from .models import (
    AuthEvent,
    AuthSession,
    AuthUser,
    ControllerPhase,
    Profile,
    ProfileUpdate,
    Screen,
    SessionState,
    SessionTimeouts,
)
from .exceptions import (
    NoSessionError,
    InvalidSessionError,
    AuthSessionMissingError,
    AuthServiceUnavailableError,
    InvalidProfileUpdateError,
    ProfileNotFoundError,
    ProfileUpdateError,
)
from .watchers import UserChangeWatcher

__all__ = [
    # Controller
    "SessionController",
    "UserChangeWatcher",
    # Interfaces
    "IAuthGateway",
    "IProfileStore",
    # Models
    "AuthEvent",
    "AuthSession",
    "AuthUser",
    "ControllerPhase",
    "Profile",
    "ProfileUpdate",
    "Screen",
    "SessionState",
    "SessionTimeouts",
    # Exceptions
    "NoSessionError",
    "InvalidSessionError",
    "AuthSessionMissingError",
    "AuthServiceUnavailableError",
    "InvalidProfileUpdateError",
    "ProfileNotFoundError",
    "ProfileUpdateError",
]
