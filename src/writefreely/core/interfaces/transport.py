"""Contrato del transporte HTTP.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Permite sustituir el adaptador httpx por un fake determinista en tests.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from writefreely.core.domain.http import TransportRequest, TransportResponse


@runtime_checkable
class Transport(Protocol):
    """Contrato mínimo para ejecutar una request.

    Reglas de diseño:
    - `send` es asíncrono porque hace I/O.
    - Nunca lanza por fallos de red: los devuelve en `TransportResponse.error`.
    """

    async def send(self, request: TransportRequest) -> TransportResponse:
        """Ejecuta `request` y devuelve cuerpo+status o un error de transporte."""

        ...
