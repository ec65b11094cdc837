"""Helpers por verbo HTTP.

Estandarizan "status esperado → bytes, o traducir a `WFError`" para GET, POST y
DELETE. Devuelven bytes crudos: decodificar es trabajo del llamador.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Collection
from typing import Any

from writefreely.core.domain.errors import RequestMethodMismatch, Result, WFError
from writefreely.core.domain.http import TransportRequest, TransportResponse
from writefreely.core.interfaces.transport import Transport
from writefreely.core.services.errors import translate_error

logger = logging.getLogger(__name__)

Confirmation = Callable[[], Awaitable[Result[Any]]]


def interpret_response(response: TransportResponse, expected: int) -> Result[bytes]:
    """Aplica la política común a una respuesta ya recibida."""

    if response.error is not None:
        return Result.failure(WFError.COULD_NOT_COMPLETE, detail=response.error)
    if response.status is None:
        return Result.failure(WFError.INVALID_RESPONSE)

    if response.status != expected:
        translated = translate_error(response.body) if response.body else WFError.UNKNOWN_ERROR
        error = WFError.from_server_code(response.status)
        if error is None and translated.is_server_error:
            error = translated
        return Result.failure(error or WFError.INVALID_RESPONSE, detail=response.status)

    if response.body is None:
        return Result.failure(WFError.INVALID_DATA)
    return Result.success(response.body)


class VerbHelpers:
    """Envoltorios finos sobre `Transport.send`, uno por verbo."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def get(self, request: TransportRequest, expected: int = 200) -> Result[bytes]:
        return await self._send("GET", request, expected)

    async def post(self, request: TransportRequest, expected: int = 200) -> Result[bytes]:
        return await self._send("POST", request, expected)

    async def delete(
        self,
        request: TransportRequest,
        expected: int = 204,
        *,
        confirm: Confirmation | None = None,
        confirm_accepts: Collection[WFError] = (),
    ) -> Result[bytes]:
        """DELETE con verificación opcional de la anomalía "204 como error de protocolo".

        Si el transporte marca `protocol_error` y hay `confirm`, se lanza una única
        request de solo lectura; si falla con un error de `confirm_accepts`, el
        borrado se da por hecho. No es una política de reintentos.
        """

        _require_method("DELETE", request)
        response = await self._transport.send(request)

        if response.error is not None and response.error.protocol_error and confirm is not None:
            logger.info("DELETE %s surfaced a protocol error; confirming deletion", request.url)
            confirmation = await confirm()
            if confirmation.error is not None and confirmation.error in confirm_accepts:
                logger.info("deletion of %s confirmed (%s)", request.url, confirmation.error.name)
                return Result.success(b"")
            return Result.failure(WFError.COULD_NOT_COMPLETE, detail=response.error)

        return interpret_response(response, expected)

    async def _send(self, verb: str, request: TransportRequest, expected: int) -> Result[bytes]:
        _require_method(verb, request)
        response = await self._transport.send(request)
        return interpret_response(response, expected)


def _require_method(verb: str, request: TransportRequest) -> None:
    if request.method.upper() != verb:
        raise RequestMethodMismatch(f"Expected {verb} request, but got {request.method}")
