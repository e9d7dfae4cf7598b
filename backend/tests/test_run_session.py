"""Tests for the session CLI."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from rich.console import Console

import run_session
from fakes import FAST_TIMEOUTS, FakeProfileStore, make_profile
from modules.session.controller import SessionController
from modules.session.models import SessionState


def rendered(state: SessionState) -> str:
    console = Console(record=True, width=120)
    console.print(run_session.render_state(state))
    return console.export_text()


def container_for(controller: SessionController) -> MagicMock:
    container = MagicMock()
    container.session = AsyncMock(return_value=controller)
    return container


class TestRenderState:
    def test_signed_out(self):
        text = rendered(SessionState(loading=False))
        assert "sign_in" in text
        assert "uninitialized" in text

    def test_ready(self, user, session):
        state = SessionState(
            user=user,
            session=session,
            profile=make_profile(user.id, full_name="Asha", farm_name="Lakeside Farm"),
            loading=False,
            started=True,
            initialization_complete=True,
        )

        text = rendered(state)

        assert "authenticated_ready" in text
        assert "Asha" in text
        assert "Lakeside Farm" in text
        assert user.email in text


class TestRun:
    @pytest.mark.asyncio
    async def test_resolves_and_closes(self, auth, profiles):
        controller = SessionController(auth, profiles, FAST_TIMEOUTS)

        with patch("run_session.get_container", return_value=container_for(controller)):
            await run_session.run(sign_out=False)

        assert controller.closed is True
        assert "sign_out" not in auth.calls

    @pytest.mark.asyncio
    async def test_sign_out(self, auth, profiles):
        controller = SessionController(auth, profiles, FAST_TIMEOUTS)

        with patch("run_session.get_container", return_value=container_for(controller)):
            await run_session.run(sign_out=True)

        assert "sign_out" in auth.calls
        assert auth.cache_cleared == 1

    @pytest.mark.asyncio
    async def test_sign_out_skipped_when_signed_out(self, signed_out_auth):
        controller = SessionController(signed_out_auth, FakeProfileStore(), FAST_TIMEOUTS)

        with patch("run_session.get_container", return_value=container_for(controller)):
            await run_session.run(sign_out=True)

        assert "sign_out" not in signed_out_auth.calls
