"""Tests for the service container."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from container import ServiceContainer, get_container, reset_container
from fakes import make_session
from modules.ledger.service import LedgerService
from modules.session.controller import SessionController
from modules.session.models import AuthEvent
from shared.config import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        supabase_url="https://test.supabase.co",
        supabase_anon_key="test-anon-key",
        profile_fetch_timeout=2.0,
        ledger_cache_ttl=60,
    )


@pytest.fixture
def client():
    with patch(
        "shared.database.get_supabase_client",
        new_callable=AsyncMock,
        return_value=MagicMock(),
    ) as mock_get_client:
        yield mock_get_client


class TestServiceContainer:
    @pytest.mark.asyncio
    async def test_builds_services_once(self, settings, client):
        container = ServiceContainer(settings)

        controller = await container.session()
        ledger = await container.ledger()

        assert isinstance(controller, SessionController)
        assert isinstance(ledger, LedgerService)
        assert await container.session() is controller
        assert await container.ledger() is ledger
        client.assert_awaited_once_with(storage=container.token_cache)

    @pytest.mark.asyncio
    async def test_applies_settings(self, settings, client):
        container = ServiceContainer(settings)

        controller = await container.session()
        ledger = await container.ledger()

        assert controller._timeouts.profile_fetch == 2.0
        assert ledger._cache_ttl == 60

    @pytest.mark.asyncio
    async def test_user_change_clears_ledger_cache(self, settings, client):
        """A different signed-in user must not see the previous user's cached lists."""
        container = ServiceContainer(settings)
        controller = await container.session()
        ledger = await container.ledger()

        with patch.object(ledger, "clear_cache") as mock_clear:
            controller._handle_auth_change(AuthEvent.TOKEN_REFRESHED.value, make_session())

        mock_clear.assert_called_once()

    @pytest.mark.asyncio
    async def test_reset_closes_controller(self, settings, client):
        container = ServiceContainer(settings)
        controller = await container.session()

        container.reset()

        assert controller.closed is True
        assert await container.session() is not controller


class TestGetContainer:
    def test_singleton(self):
        reset_container()
        assert get_container() is get_container()
        reset_container()

    def test_reset_creates_new_container(self):
        first = get_container()
        reset_container()
        assert get_container() is not first
        reset_container()
