"""CLI (Typer + Rich): comandos finos sobre `WriteFreelyClient`."""
