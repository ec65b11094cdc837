"""Decodificación de las envolturas de respuesta del servidor.

El servidor envuelve casi todo en `{code, data: <T>}`; el listado de posts de un
blog anida un nivel más: `{code, data: {posts: [...]}}`. La forma se elige en
cada llamada con `EnvelopeShape`, porque se conoce estáticamente por endpoint.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, TypeAdapter, ValidationError
from pydantic.config import ConfigDict

from writefreely.core.domain.models import ErrorMessage, ISODateTime, Post, User

T = TypeVar("T")


class EnvelopeShape(str, Enum):
    DATA = "data"
    NESTED_POSTS = "nested_posts"


class EnvelopeDecodeError(ValueError):
    """Fallo estructurado: qué campo, dónde (`location`) y por qué."""

    def __init__(self, message: str, *, field: str | None = None, location: tuple[Any, ...] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.location = location

    def __str__(self) -> str:
        where = ".".join(str(part) for part in self.location) or "<root>"
        return f"{where}: {self.message}"


class ServerData(BaseModel, Generic[T]):
    model_config = ConfigDict(extra="ignore")

    code: int
    data: T


class _PostsPage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    posts: list[Post] = Field(default_factory=list)


class _LoginUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    username: str | None = None
    email: str | None = None
    created: ISODateTime | None = None


class _LoginData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str
    user: _LoginUser = Field(default_factory=_LoginUser)


@lru_cache(maxsize=None)
def _envelope_adapter(model: Any) -> TypeAdapter[Any]:
    return TypeAdapter(ServerData[model])


def _to_decode_error(exc: ValidationError) -> EnvelopeDecodeError:
    errors = exc.errors()
    if not errors:
        return EnvelopeDecodeError(str(exc))
    first = errors[0]
    location = tuple(first.get("loc", ()))
    field = next((part for part in reversed(location) if isinstance(part, str)), None)
    return EnvelopeDecodeError(first.get("msg", "invalid value"), field=field, location=location)


def decode_envelope(payload: bytes | str, model: Any, *, shape: EnvelopeShape = EnvelopeShape.DATA) -> Any:
    """Decodifica `payload` y devuelve el contenido de `data` como `model`.

    Con `EnvelopeShape.NESTED_POSTS` se ignora `model` y se devuelve `list[Post]`
    desde `data.posts`.

    Raises:
        EnvelopeDecodeError: JSON inválido o campos que no encajan en el modelo.
    """

    try:
        if shape is EnvelopeShape.NESTED_POSTS:
            return _envelope_adapter(_PostsPage).validate_json(payload).data.posts
        return _envelope_adapter(model).validate_json(payload).data
    except ValidationError as exc:
        raise _to_decode_error(exc) from exc


def decode_login(payload: bytes | str) -> User:
    """Decodifica `{data: {access_token, user: {...}}}` a un `User`."""

    data: _LoginData = decode_envelope(payload, _LoginData)
    return User(
        token=data.access_token,
        username=data.user.username,
        email=data.user.email,
        created=data.user.created,
    )


def decode_error_message(payload: bytes | str) -> ErrorMessage:
    """Decodifica `{code, error_msg}` (sin envoltura)."""

    try:
        return ErrorMessage.model_validate_json(payload)
    except ValidationError as exc:
        raise _to_decode_error(exc) from exc
