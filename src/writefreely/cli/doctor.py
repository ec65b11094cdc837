"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from writefreely.adapters.http_client import build_async_client
from writefreely.core.config import AppSettings, get_user_env_file
from writefreely.core.domain.models import User
from writefreely.core.services.client import WriteFreelyClient

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(settings.instance_url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc) or type(exc).__name__


async def _check_session(settings: AppSettings) -> tuple[bool, str]:
    """Validate the stored token against `GET /api/me`."""

    if not settings.access_token:
        return False, "No token stored -> run `writefreely login`"
    client = WriteFreelyClient(settings.instance_url, settings=settings, user=User(token=settings.access_token))
    result = await client.get_user_data()
    if result.ok:
        return True, "Token accepted"
    assert result.error is not None
    return False, f"{result.error.name.lower()} ({result.error.value})"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="writefreely-py Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("Instance", "OK", settings.instance_url)
    table.add_row("User config", "OK" if get_user_env_file().exists() else "MISSING", str(get_user_env_file()))

    # Connectivity (best-effort)
    ok_http, detail_http = asyncio.run(_check_http(settings))
    table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    ok_session, detail_session = asyncio.run(_check_session(settings))
    table.add_row("Session", "OK" if ok_session else "FAIL", detail_session)

    _console.print(table)

    if not ok_session:
        _console.print("\n[yellow]Note:[/yellow] Read-only commands on public blogs still work without a session.")
