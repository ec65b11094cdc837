"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from collections.abc import Iterable

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from writefreely.core.domain.models import Collection, Post


def build_posts_table(posts: Iterable[Post], *, title: str = "Posts") -> Table:
    table = Table(title=title)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Slug", style="magenta")
    table.add_column("Blog", style="green")
    table.add_column("Created", style="dim")
    for post in posts:
        table.add_row(
            post.id or "",
            post.title or Text("(untitled)", style="dim"),
            post.slug or "",
            post.collection_alias or "",
            post.created.isoformat() if post.created else "",
        )
    return table


def build_collections_table(collections: Iterable[Collection]) -> Table:
    table = Table(title="Blogs")
    table.add_column("Alias", style="cyan", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Public", style="green")
    table.add_column("Views", style="magenta", justify="right")
    for collection in collections:
        table.add_row(
            collection.alias or "",
            collection.title,
            "yes" if collection.public else "no",
            str(collection.views),
        )
    return table


def build_collection_panel(collection: Collection) -> Panel:
    """Panel con los metadatos de un blog."""

    body = Text()
    body.append(f"{collection.title}\n", style="bold")
    if collection.description:
        body.append(collection.description.strip() + "\n")
    body.append(f"\nPublic: {'yes' if collection.public else 'no'}")
    body.append(f"\nViews: {collection.views}")
    if collection.email:
        body.append(f"\nEmail: {collection.email}", style="dim")

    return Panel(body, title=Text(collection.alias or "", style="bold cyan"), border_style="cyan")
