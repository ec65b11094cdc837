"""Exportación JSON de posts.

Por qué JSON:
- Permite respaldar posts de un blog o del usuario sin depender del servidor.
- Formato estable (claves ordenadas) para poder versionar los respaldos.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from writefreely.core.domain.models import Post


def export_posts_json(*, posts: Iterable[Post], output_path: Path) -> Path:
    """Exporta `posts` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = [post.model_dump(mode="json") for post in posts]
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
