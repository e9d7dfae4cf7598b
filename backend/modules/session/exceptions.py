"""
Session module exceptions.

Only UpdateProfile surfaces these to its caller; initialization, profile
fetches and sign-out recover from them locally.
"""

from typing import Optional

from shared.exceptions import (
    AuthenticationError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)


class NoSessionError(AuthenticationError):
    """Raised when an operation needs a signed-in user and there is none."""

    def __init__(self, message: str = "No user session"):
        super().__init__(message, code="NO_SESSION")


class InvalidSessionError(AuthenticationError):
    """Raised when the live session no longer belongs to the cached user."""

    def __init__(self, reason: Optional[str] = None):
        super().__init__(
            "Invalid session",
            code="INVALID_SESSION",
            details={"reason": reason} if reason else {},
        )


class AuthSessionMissingError(AuthenticationError):
    """Raised by the auth gateway when the service has no session to act on."""

    def __init__(self, message: str = "Auth session missing"):
        super().__init__(message, code="SESSION_MISSING")


class AuthServiceUnavailableError(ExternalServiceError):
    """Raised by the auth gateway when the auth service cannot be reached."""

    def __init__(self, message: str):
        super().__init__(
            f"Auth service unavailable: {message}",
            service="supabase_auth",
            code="AUTH_UNAVAILABLE",
        )


class ProfileNotFoundError(NotFoundError):
    """Raised when the profile row to update does not exist."""

    def __init__(self, user_id: str):
        super().__init__(
            "Profile not found",
            code="PROFILE_NOT_FOUND",
            details={"user_id": user_id},
        )


class ProfileUpdateError(ExternalServiceError):
    """Raised when the profile store fails to apply an update."""

    def __init__(self, user_id: str, message: str):
        super().__init__(
            f"Failed to update profile: {message}",
            service="profiles",
            code="PROFILE_UPDATE_FAILED",
            details={"user_id": user_id},
        )


class InvalidProfileUpdateError(ValidationError):
    """Raised when a profile update contains unknown or invalid fields."""

    def __init__(self, errors: list[dict]):
        fields = [".".join(str(part) for part in error.get("loc", ())) for error in errors]
        super().__init__(
            "Invalid profile update",
            code="INVALID_PROFILE_UPDATE",
            details={"fields": fields},
        )
