"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y logging para todas las llamadas al API.
- Implementa el contrato `Transport`: el Core nunca ve excepciones de httpx.
- Facilita testeo: se puede sustituir por un fake o un `httpx.MockTransport`.
"""

from __future__ import annotations

import logging

import httpx

from writefreely.core.config import AppSettings
from writefreely.core.domain.http import TransportRequest, TransportResponse

logger = logging.getLogger(__name__)


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    Por qué un builder:
    - Centraliza timeouts/headers para que todas las requests se comporten igual.
    - `transport` permite inyectar `httpx.MockTransport` en tests.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


class HttpxTransport:
    """Adaptador de producción del contrato `Transport`.

    Si no se le pasa un cliente, abre uno por request (como el resto de
    adaptadores) para no acoplar el ciclo de vida del cliente al del llamador.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client = client

    async def send(self, request: TransportRequest) -> TransportResponse:
        logger.debug("%s %s", request.method, request.url)
        try:
            if self._client is not None:
                response = await self._request(self._client, request)
            else:
                async with build_async_client(self._settings) as client:
                    response = await self._request(client, request)
        except httpx.RemoteProtocolError as exc:
            # Algunos servidores/proxies rompen el framing del 204 sin cuerpo.
            logger.debug("protocol error on %s %s: %s", request.method, request.url, exc)
            return TransportResponse.failed(str(exc), protocol_error=True)
        except httpx.HTTPError as exc:
            logger.debug("transport error on %s %s: %s", request.method, request.url, exc)
            return TransportResponse.failed(str(exc) or type(exc).__name__)

        return TransportResponse(body=response.content, status=response.status_code)

    @staticmethod
    async def _request(client: httpx.AsyncClient, request: TransportRequest) -> httpx.Response:
        return await client.request(
            request.method,
            request.url,
            headers=request.headers,
            content=request.body,
        )
