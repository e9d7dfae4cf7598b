"""
Shared test fixtures.

This module provides common test infrastructure used across all test modules.
Fakes and builders live in fakes.py so test modules can import them.
"""

import pytest

from fakes import FakeAuthGateway, FakeProfileStore, make_profile, make_session, make_user
from modules.session.models import AuthSession, AuthUser
from shared.config import get_settings
from shared.database import reset_client_cache


@pytest.fixture(autouse=True)
def reset_caches():
    """Reset cached settings and clients before and after each test."""
    get_settings.cache_clear()
    reset_client_cache()
    yield
    get_settings.cache_clear()
    reset_client_cache()


@pytest.fixture
def user() -> AuthUser:
    """Provide a consistent signed-in user."""
    return make_user()


@pytest.fixture
def session(user: AuthUser) -> AuthSession:
    """Provide a stored session for the test user."""
    return make_session(user)


@pytest.fixture
def auth(user: AuthUser, session: AuthSession) -> FakeAuthGateway:
    """Auth service holding a valid stored session."""
    return FakeAuthGateway(user=user, session=session)


@pytest.fixture
def signed_out_auth() -> FakeAuthGateway:
    """Auth service with nothing stored."""
    return FakeAuthGateway()


@pytest.fixture
def profiles(user: AuthUser) -> FakeProfileStore:
    """Profile store holding a complete profile for the test user."""
    return FakeProfileStore(make_profile(user.id, full_name="Asha", farm_name="Lakeside Farm"))
