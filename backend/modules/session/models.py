"""
Session module data models.

These models define the data structures used by the session controller
and exposed to the rest of the application through its state snapshot.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from shared.config import Settings


class AuthEvent(str, Enum):
    """Auth state change events pushed by the auth service.

    Events not listed here are passed through as plain strings.
    """

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"
    MFA_CHALLENGE_VERIFIED = "MFA_CHALLENGE_VERIFIED"


class ControllerPhase(str, Enum):
    """Lifecycle phase of the session controller."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED_NO_PROFILE = "authenticated_no_profile"
    AUTHENTICATED_INCOMPLETE_PROFILE = "authenticated_incomplete_profile"
    AUTHENTICATED_READY = "authenticated_ready"
    SIGNING_OUT = "signing_out"


class Screen(str, Enum):
    """Which top-level screen the view layer should render."""

    LOADING = "loading"
    SIGN_IN = "sign_in"
    PROFILE_SETUP = "profile_setup"
    MAIN = "main"


class AuthUser(BaseModel):
    """Identity record owned by the auth service."""

    id: str = Field(..., description="User ID (UUID from Supabase)")
    email: Optional[str] = Field(None, description="User's email address")
    email_confirmed_at: Optional[datetime] = Field(
        None, description="When the email address was verified"
    )

    model_config = ConfigDict(frozen=True, extra="ignore")


class AuthSession(BaseModel):
    """
    Read-only copy of a credential grant issued by the auth service.

    The controller never mutates or refreshes it; the auth service
    pushes a new one through its notification stream instead.
    """

    access_token: str = Field(..., description="JWT access token")
    refresh_token: Optional[str] = Field(None, description="Refresh token")
    expires_at: Optional[int] = Field(None, description="Expiry as a unix timestamp")
    user: Optional[AuthUser] = Field(None, description="User the grant belongs to")

    model_config = ConfigDict(frozen=True, extra="ignore")


class Profile(BaseModel):
    """
    Farm owner's profile row from the profiles table.

    `exists` is maintained by the database (set once full_name is filled
    in); the application never derives it.
    """

    id: str = Field(..., description="User ID the profile belongs to")
    email: Optional[EmailStr] = Field(None, description="Contact email")
    full_name: Optional[str] = Field(None, description="Owner's full name")
    phone: Optional[str] = Field(None, description="Contact phone number")
    farm_name: Optional[str] = Field(None, description="Name of the farm")
    location: Optional[str] = Field(None, description="Farm location")
    avatar_url: Optional[str] = Field(None, description="Avatar URL")
    exists: bool = Field(default=False, description="Whether the profile is complete")
    created_at: Optional[datetime] = Field(None, description="Row creation time")
    updated_at: Optional[datetime] = Field(None, description="Last update time")

    model_config = ConfigDict(frozen=True, extra="ignore")


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""

    email: Optional[EmailStr] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    farm_name: Optional[str] = None
    location: Optional[str] = None
    avatar_url: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class SessionTimeouts(BaseModel):
    """Timeouts (seconds) applied to remote calls made by the controller."""

    identity_check: float = Field(default=10.0, gt=0)
    profile_fetch: float = Field(default=5.0, gt=0)
    profile_fetch_ceiling: float = Field(default=10.0, gt=0)
    sign_out: float = Field(default=10.0, gt=0)
    profile_update: float = Field(default=10.0, gt=0)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionTimeouts":
        """Build timeouts from the application settings."""
        return cls(
            identity_check=settings.identity_check_timeout,
            profile_fetch=settings.profile_fetch_timeout,
            profile_fetch_ceiling=settings.profile_fetch_ceiling,
            sign_out=settings.sign_out_timeout,
            profile_update=settings.profile_update_timeout,
        )


class SessionState(BaseModel):
    """
    Immutable snapshot of the controller state.

    The derived flags are properties of the snapshot, so a reader can
    never see them disagree with the fields they are computed from.
    """

    user: Optional[AuthUser] = None
    session: Optional[AuthSession] = None
    profile: Optional[Profile] = None
    loading: bool = True
    fetching_profile: bool = False
    signing_out: bool = False
    started: bool = False
    initialization_complete: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    @property
    def needs_profile(self) -> bool:
        return (
            self.is_authenticated
            and (self.profile is None or not self.profile.exists)
            and not self.loading
            and not self.fetching_profile
            and not self.signing_out
        )

    @property
    def is_fully_ready(self) -> bool:
        return (
            self.is_authenticated
            and self.profile is not None
            and self.profile.exists
        )

    @property
    def phase(self) -> ControllerPhase:
        """Map the flags onto the controller's lifecycle phases."""
        if self.signing_out:
            return ControllerPhase.SIGNING_OUT
        if not self.started:
            return ControllerPhase.UNINITIALIZED
        if not self.initialization_complete:
            return ControllerPhase.INITIALIZING
        if not self.is_authenticated:
            return ControllerPhase.UNAUTHENTICATED
        if self.profile is None:
            return ControllerPhase.AUTHENTICATED_NO_PROFILE
        if not self.profile.exists:
            return ControllerPhase.AUTHENTICATED_INCOMPLETE_PROFILE
        return ControllerPhase.AUTHENTICATED_READY

    @property
    def screen(self) -> Screen:
        """Top-level screen the view layer should show for this snapshot."""
        if self.loading:
            return Screen.LOADING
        if not self.is_authenticated:
            return Screen.SIGN_IN
        if self.needs_profile:
            return Screen.PROFILE_SETUP
        if self.is_fully_ready:
            return Screen.MAIN
        # Authenticated but a profile fetch is still settling.
        return Screen.LOADING
