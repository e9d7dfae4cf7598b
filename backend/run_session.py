#!/usr/bin/env python
"""
Resolve the stored Supabase session and show what the app would render.

Usage:
    uv run python run_session.py
    uv run python run_session.py --sign-out
"""

import argparse
import asyncio
import logging

from rich.console import Console
from rich.table import Table

from container import get_container
from modules.session.models import SessionState

console = Console()


def render_state(state: SessionState) -> Table:
    """Build a table describing a session snapshot."""
    table = Table(title="Session", show_header=False)
    table.add_column("field", style="dim")
    table.add_column("value")

    profile = state.profile
    table.add_row("Phase", state.phase.value)
    table.add_row("Screen", state.screen.value)
    table.add_row("User", state.user.email or state.user.id if state.user else "-")
    table.add_row("Authenticated", str(state.is_authenticated))
    table.add_row("Needs profile", str(state.needs_profile))
    table.add_row("Fully ready", str(state.is_fully_ready))
    table.add_row("Profile", profile.full_name or "(incomplete)" if profile else "-")
    table.add_row("Farm", profile.farm_name or "-" if profile else "-")
    return table


async def run(sign_out: bool) -> None:
    container = get_container()
    controller = await container.session()
    async with controller:
        state = await controller.wait_until_initialized()
        console.print(render_state(state))

        if sign_out and state.is_authenticated:
            await controller.sign_out()
            console.print("[green]Signed out[/green]")
            console.print(render_state(controller.state))


def main():
    parser = argparse.ArgumentParser(description="Show the resolved Aqua Farm Ledger session")
    parser.add_argument("--sign-out", action="store_true", help="Sign out after resolving")
    parser.add_argument("--log-level", type=str, help="Override LOG_LEVEL")
    args = parser.parse_args()

    settings = get_container().settings
    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        asyncio.run(run(args.sign_out))
    except RuntimeError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
