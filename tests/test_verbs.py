"""
Tests for the per-verb helpers: status policy, method preconditions and the
DELETE protocol-error confirmation.
"""

import asyncio
import json

import pytest

from conftest import FakeTransport
from writefreely.core.domain.errors import RequestMethodMismatch, Result, WFError
from writefreely.core.domain.http import TransportError, TransportRequest, TransportResponse
from writefreely.core.services.verbs import VerbHelpers, interpret_response

URL = "https://write.as/api/collections/new-blog"


def _request(method):
    return TransportRequest(method=method, url=URL)


@pytest.fixture
def verbs(transport):
    return VerbHelpers(transport)


# =============================================================================
# Preconditions
# =============================================================================

@pytest.mark.parametrize(
    "verb, method",
    [("get", "POST"), ("post", "GET"), ("delete", "GET"), ("get", "DELETE")],
)
def test_method_mismatch_is_a_programmer_error(verbs, transport, verb, method):
    with pytest.raises(RequestMethodMismatch):
        asyncio.run(getattr(verbs, verb)(_request(method)))
    assert transport.requests == []


# =============================================================================
# Status Policy
# =============================================================================

def test_get_success_returns_raw_bytes(verbs, transport):
    transport.next_body = b'{"code":200,"data":{}}'

    result = asyncio.run(verbs.get(_request("GET")))

    assert result.ok
    assert result.value == b'{"code":200,"data":{}}'


def test_post_honours_explicit_expected_status(verbs, transport):
    transport.next_body = b"{}"
    transport.next_status = 201

    assert asyncio.run(verbs.post(_request("POST"), expected=201)).ok
    assert asyncio.run(verbs.post(_request("POST"))).error is WFError.INVALID_RESPONSE


def test_transport_error_is_could_not_complete(verbs, transport):
    transport.next_error = TransportError("connection refused")

    result = asyncio.run(verbs.get(_request("GET")))

    assert result.error is WFError.COULD_NOT_COMPLETE


@pytest.mark.parametrize("status", [400, 401, 403, 404, 405, 410, 412, 429, 500, 502, 503])
def test_known_status_maps_to_taxonomy(status):
    result = interpret_response(TransportResponse(body=None, status=status), expected=200)
    assert result.error is WFError(status)


def test_unknown_status_without_error_body_is_invalid_response():
    result = interpret_response(TransportResponse(body=b"teapot", status=418), expected=200)
    assert result.error is WFError.INVALID_RESPONSE


def test_unknown_status_with_decodable_error_body_uses_body_code():
    body = json.dumps({"code": 403, "error_msg": "Nope."}).encode()
    result = interpret_response(TransportResponse(body=body, status=418), expected=200)
    assert result.error is WFError.FORBIDDEN


def test_expected_status_without_body_is_invalid_data():
    result = interpret_response(TransportResponse(body=None, status=200), expected=200)
    assert result.error is WFError.INVALID_DATA


def test_empty_204_body_is_success():
    result = interpret_response(TransportResponse(body=b"", status=204), expected=204)
    assert result.ok


# =============================================================================
# DELETE Confirmation
# =============================================================================

def _protocol_error():
    return TransportResponse.failed("Server disconnected", protocol_error=True)


def _confirm_with(error):
    calls = []

    async def confirm():
        calls.append(True)
        return Result.failure(error) if error is not None else Result.success(b"{}")

    return confirm, calls


@pytest.mark.parametrize("error", [WFError.NOT_FOUND, WFError.UNAUTHORIZED])
def test_protocol_error_confirmed_by_accepted_error(verbs, transport, error):
    transport.enqueue(_protocol_error())
    confirm, calls = _confirm_with(error)

    result = asyncio.run(
        verbs.delete(_request("DELETE"), confirm=confirm, confirm_accepts=(WFError.NOT_FOUND, WFError.UNAUTHORIZED))
    )

    assert result.ok
    assert calls == [True]


def test_protocol_error_not_confirmed_when_resource_still_exists(verbs, transport):
    transport.enqueue(_protocol_error())
    confirm, calls = _confirm_with(None)

    result = asyncio.run(verbs.delete(_request("DELETE"), confirm=confirm, confirm_accepts=(WFError.NOT_FOUND,)))

    assert result.error is WFError.COULD_NOT_COMPLETE
    assert calls == [True]


def test_protocol_error_with_unaccepted_confirmation_error(verbs, transport):
    transport.enqueue(_protocol_error())
    confirm, _ = _confirm_with(WFError.INTERNAL_SERVER_ERROR)

    result = asyncio.run(verbs.delete(_request("DELETE"), confirm=confirm, confirm_accepts=(WFError.NOT_FOUND,)))

    assert result.error is WFError.COULD_NOT_COMPLETE


def test_plain_network_failure_skips_confirmation(verbs, transport):
    transport.next_error = TransportError("timed out")
    confirm, calls = _confirm_with(WFError.NOT_FOUND)

    result = asyncio.run(verbs.delete(_request("DELETE"), confirm=confirm, confirm_accepts=(WFError.NOT_FOUND,)))

    assert result.error is WFError.COULD_NOT_COMPLETE
    assert calls == []


def test_protocol_error_without_confirm_is_could_not_complete():
    transport = FakeTransport()
    transport.enqueue(_protocol_error())

    result = asyncio.run(VerbHelpers(transport).delete(_request("DELETE")))

    assert result.error is WFError.COULD_NOT_COMPLETE
