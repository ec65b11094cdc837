"""Traducción de cuerpos de error del servidor a `WFError`.

Este borde siempre produce un valor: nunca propaga excepciones de decodificación.
"""

from __future__ import annotations

import logging

from writefreely.core.domain.errors import WFError
from writefreely.core.services.envelope import EnvelopeDecodeError, decode_error_message

logger = logging.getLogger(__name__)


def translate_error(payload: bytes | str | None) -> WFError:
    """Mapea `{code, error_msg}` a la taxonomía; cualquier otra cosa es `UNKNOWN_ERROR`."""

    if not payload:
        logger.warning("server returned an empty error body")
        return WFError.UNKNOWN_ERROR

    try:
        message = decode_error_message(payload)
    except (EnvelopeDecodeError, ValueError) as exc:
        logger.warning("undecodable error body from server: %s", exc)
        return WFError.UNKNOWN_ERROR

    logger.warning("server error %s: %s", message.code, message.message)
    return WFError.from_server_code(message.code) or WFError.UNKNOWN_ERROR
