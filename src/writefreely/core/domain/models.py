"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- El mismo modelo sirve para decodificar la respuesta del servidor y para
  construirlo a mano desde el cliente (p.ej. un `Post` a publicar).

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, model_validator
from pydantic.config import ConfigDict

_ISO_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
_ISO_FORMAT_FRACTIONAL = "%Y-%m-%dT%H:%M:%S.%f%z"
_FRACTION = re.compile(r"\.(\d+)")


def parse_iso8601(value: Any) -> Any:
    """Parsea ISO 8601 con o sin segundos fraccionarios.

    El formato se elige según la presencia del separador `.`; cualquier string
    que no encaje en ninguna de las dos variantes es un error de decodificación.
    """

    if value is None or isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError("expected an ISO 8601 date string")

    if "." in value:
        # strptime solo acepta hasta microsegundos.
        text = _FRACTION.sub(lambda m: "." + m.group(1)[:6], value, count=1)
        fmt = _ISO_FORMAT_FRACTIONAL
    else:
        text = value
        fmt = _ISO_FORMAT

    try:
        return datetime.strptime(text, fmt)
    except ValueError:
        raise ValueError(f"{value!r} is not an ISO 8601 date") from None


def format_iso8601(value: datetime) -> str:
    """Serializa en UTC sin fracción (`2015-02-03T02:41:19Z`)."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


ISODateTime = Annotated[datetime, BeforeValidator(parse_iso8601)]


class User(BaseModel):
    """Sesión autenticada: token opaco + datos básicos del usuario."""

    model_config = ConfigDict(extra="ignore")

    token: str = Field(
        ...,
        description="Access token opaco (se envía tal cual en `Authorization`).",
    )
    username: str | None = Field(default=None, description="Username del usuario.")
    email: str | None = Field(default=None, description="Email asociado a la cuenta.")
    created: ISODateTime | None = Field(
        default=None,
        description="Fecha de creación de la cuenta.",
    )


class Collection(BaseModel):
    """Un blog/publicación: destino de publicación con nombre."""

    model_config = ConfigDict(extra="ignore")

    alias: str | None = Field(
        default=None,
        description="Identificador corto y único; lo asigna el servidor si se omite.",
    )
    title: str = Field(default="", description="Título visible del blog.")
    description: str | None = Field(default=None, description="Descripción del blog.")
    style_sheet: str | None = Field(default=None, description="CSS personalizado.")
    public: bool = Field(default=False, description="Si el blog es público.")
    views: int = Field(default=0, ge=0, description="Número de visitas.")
    email: str | None = Field(
        default=None,
        description="Email de contacto (post-by-email) del blog.",
    )


class Post(BaseModel):
    """Una unidad de contenido.

    Por qué `collection_alias` plano:
    - El servidor a veces anida el blog completo bajo `collection`; aquí solo
      interesa el alias para operaciones posteriores (mover, pin, etc.).
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str | None = Field(default=None, description="ID asignado por el servidor.")
    token: str | None = Field(
        default=None,
        description="Modify-token; necesario para editar un post ajeno a la sesión.",
    )
    body: str = Field(default="", description="Contenido (Markdown).")
    title: str | None = Field(default=None, description="Título opcional.")
    appearance: str | None = Field(
        default=None,
        description="Tag de fuente/apariencia (`norm`, `sans`, `mono`, ...).",
    )
    language: str | None = Field(default=None, description="Código ISO 639-1 del idioma.")
    rtl: bool | None = Field(default=None, description="Texto de derecha a izquierda.")
    created: ISODateTime | None = Field(
        default=None,
        description="Fecha de creación; solo se respeta al crear el post.",
    )
    slug: str | None = Field(default=None, description="Slug dentro del blog.")
    collection_alias: str | None = Field(
        default=None,
        description="Alias del blog al que pertenece el post (si aplica).",
    )
    views: int | None = Field(default=None, description="Visitas (solo lectura).")
    tags: list[str] = Field(default_factory=list, description="Hashtags extraídos.")

    @model_validator(mode="before")
    @classmethod
    def _flatten_collection(cls, data: Any) -> Any:
        if isinstance(data, dict) and "collection" in data:
            data = dict(data)
            collection = data.pop("collection")
            if isinstance(collection, dict):
                data.setdefault("collection_alias", collection.get("alias"))
            elif isinstance(collection, str):
                data.setdefault("collection_alias", collection)
        return data


class ErrorMessage(BaseModel):
    """Cuerpo de error del servidor: `{code, error_msg}`."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    code: int
    message: str = Field(..., alias="error_msg")
