"""CLI principal (Typer).

Por qué una CLI:
- Recorre el flujo típico (login → publicar borrador → logout) sin escribir código.
- Guarda el token en el .env del usuario para no repetir el login.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Optional, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler

from writefreely.adapters.json_exporter import export_posts_json
from writefreely.cli import doctor
from writefreely.cli.ui_components import (
    build_collection_panel,
    build_collections_table,
    build_posts_table,
)
from writefreely.core.config import AppSettings, write_user_env_vars
from writefreely.core.domain.errors import Result
from writefreely.core.domain.models import Post, User
from writefreely.core.services.client import WriteFreelyClient

T = TypeVar("T")

app = typer.Typer(no_args_is_help=True, help="Command-line client for WriteFreely instances.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def build_client(settings: AppSettings) -> WriteFreelyClient:
    """Cliente con la sesión guardada (si la hay)."""

    user = User(token=settings.access_token) if settings.access_token else None
    return WriteFreelyClient(settings.instance_url, settings=settings, user=user)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=_err_console, show_path=False)],
        force=True,
    )


def _unwrap(result: Result[T]) -> T:
    if result.error is not None:
        _err_console.print(f"[red]Error:[/red] {result.error.name.lower()} ({result.error.value})")
        if result.detail is not None:
            _err_console.print(f"[dim]{result.detail}[/dim]")
        raise typer.Exit(code=1)
    return result.value  # type: ignore[return-value]


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")) -> None:
    settings = AppSettings()
    _configure_logging("DEBUG" if verbose else settings.log_level)


@app.command()
def login(
    username: str = typer.Option(..., prompt=True, help="Username or email."),
    password: str = typer.Option(..., prompt=True, hide_input=True),
    instance: Optional[str] = typer.Option(None, help="Instance URL (defaults to the configured one)."),
) -> None:
    """Log in and store the access token in the user config."""

    settings = AppSettings()
    if instance:
        settings = settings.model_copy(update={"instance_url": instance})

    client = build_client(settings)
    user = _unwrap(asyncio.run(client.login(username, password)))

    env_path = write_user_env_vars(
        {
            "WRITEFREELY_INSTANCE_URL": settings.instance_url,
            "WRITEFREELY_ACCESS_TOKEN": user.token,
        }
    )
    _console.print(f"[green]Hi there, {user.username or 'anonymous user'}![/green]")
    _console.print(f"[dim]Saved session to: {env_path}[/dim]")


@app.command()
def logout() -> None:
    """Invalidate the stored access token."""

    settings = AppSettings()
    client = build_client(settings)
    _unwrap(asyncio.run(client.logout()))
    write_user_env_vars({"WRITEFREELY_ACCESS_TOKEN": None})
    _console.print("[green]Logged out.[/green]")


@app.command()
def me() -> None:
    """Show the authenticated user's data."""

    client = build_client(AppSettings())
    raw = _unwrap(asyncio.run(client.get_user_data()))
    _console.print_json(raw.decode("utf-8"))


@app.command()
def collections() -> None:
    """List the authenticated user's blogs."""

    client = build_client(AppSettings())
    items = _unwrap(asyncio.run(client.get_user_collections()))
    _console.print(build_collections_table(items))


@app.command()
def collection(alias: str = typer.Argument(..., help="Blog alias.")) -> None:
    """Show a blog's metadata."""

    client = build_client(AppSettings())
    item = _unwrap(asyncio.run(client.get_collection(alias)))
    _console.print(build_collection_panel(item))


@app.command()
def posts(
    collection_alias: Optional[str] = typer.Option(None, "--collection", "-c", help="Blog alias."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Also export posts to this JSON file."),
) -> None:
    """List posts of a blog, or the user's posts when no blog is given."""

    client = build_client(AppSettings())
    items = _unwrap(asyncio.run(client.get_posts(collection_alias)))
    _console.print(build_posts_table(items, title=collection_alias or "My posts"))
    if output is not None:
        path = export_posts_json(posts=items, output_path=output)
        _console.print(f"[green]Exported {len(items)} posts to:[/green] {path}")


@app.command()
def publish(
    source: str = typer.Argument(..., help="Markdown file to publish ('-' reads stdin)."),
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    collection_alias: Optional[str] = typer.Option(None, "--collection", "-c", help="Blog alias; omit for a draft."),
    font: Optional[str] = typer.Option(None, help="Appearance: norm, sans, mono, wrap, code."),
    lang: Optional[str] = typer.Option(None, help="ISO 639-1 language code."),
    rtl: bool = typer.Option(False, "--rtl", help="Right-to-left text."),
) -> None:
    """Publish a post (a draft unless --collection is given)."""

    body = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    draft = Post(body=body, title=title, appearance=font, language=lang, rtl=rtl)

    client = build_client(AppSettings())
    post = _unwrap(asyncio.run(client.create_post(draft, collection_alias)))

    details: dict[str, Any] = {"id": post.id, "slug": post.slug, "token": post.token}
    _console.print("[green]Published![/green]")
    for key, value in details.items():
        if value:
            _console.print(f"  {key}: {value}")


def run() -> None:
    app()
