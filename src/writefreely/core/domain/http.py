"""Tipos de valor del borde HTTP.

El Core no conoce httpx: solo describe qué se envía (`TransportRequest`) y qué
vuelve (`TransportResponse`). Los adaptadores traducen desde/hacia la librería.
"""

from __future__ import annotations

from dataclasses import dataclass, field

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


@dataclass
class TransportRequest:
    """Request completamente formada (método, URL, headers, body opcional)."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None


@dataclass(frozen=True)
class TransportError:
    """Fallo a nivel transporte.

    `protocol_error` marca la anomalía de algunos stacks HTTP que reportan un
    204 sin contenido como error de protocolo en vez de respuesta limpia.
    """

    message: str
    protocol_error: bool = False


@dataclass(frozen=True)
class TransportResponse:
    """Exactamente uno de: (`body`, `status`) o `error`."""

    body: bytes | None = None
    status: int | None = None
    error: TransportError | None = None

    @classmethod
    def failed(cls, message: str, *, protocol_error: bool = False) -> "TransportResponse":
        return cls(error=TransportError(message=message, protocol_error=protocol_error))
