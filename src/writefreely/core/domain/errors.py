"""Taxonomía cerrada de errores y el tipo `Result`.

Por qué un `Result` y no excepciones:
- Cada operación pública termina en exactamente un valor: éxito tipado o
  `WFError`. El llamador decide si desenvolver (`unwrap`) o ramificar.
- Las únicas excepciones que cruzan el borde son errores de programación
  (p.ej. `RequestMethodMismatch`).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class WFError(IntEnum):
    """Errores reportados por el servidor (código HTTP) y errores locales (< 0)."""

    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    GONE = 410
    PRECONDITION_FAILED = 412
    TOO_MANY_REQUESTS = 429
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503

    UNKNOWN_ERROR = -1
    COULD_NOT_COMPLETE = -2
    INVALID_RESPONSE = -3
    INVALID_DATA = -4
    MISSING_CREDENTIALS = -5

    @property
    def is_server_error(self) -> bool:
        return self.value > 0

    @classmethod
    def from_server_code(cls, code: int | None) -> "WFError | None":
        """Devuelve el miembro para un código del servidor, o `None` si no es conocido."""

        if code is None or code <= 0:
            return None
        try:
            return cls(code)
        except ValueError:
            return None


class WriteFreelyError(Exception):
    """Excepción para quien prefiere `Result.unwrap()` en vez de ramificar."""

    def __init__(self, error: WFError, detail: Any = None) -> None:
        super().__init__(f"{error.name.lower()} ({error.value})")
        self.error = error
        self.detail = detail


class RequestMethodMismatch(RuntimeError):
    """Un helper de verbo recibió una request con otro método HTTP (bug del llamador)."""


@dataclass(frozen=True)
class Result(Generic[T]):
    """Resultado etiquetado: `value` en éxito, `error` (+ `detail`) en fallo."""

    value: T | None = None
    error: WFError | None = None
    detail: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: WFError, detail: Any = None) -> "Result[T]":
        return cls(error=error, detail=detail)

    def unwrap(self) -> T:
        if self.error is not None:
            raise WriteFreelyError(self.error, self.detail)
        return self.value  # type: ignore[return-value]
