"""Unit tests for parsing received error responses."""

from __future__ import annotations

import json

import pytest

from packages.rest_errors import RestApiErrorParser

_JSON = {"content-type": "application/json"}


def test_parse_json_payload_body() -> None:
    """A JSON error body should be decoded with its camelCase fields."""
    body = json.dumps(
        {
            "id": "e-1",
            "status": 404,
            "error": "Not Found",
            "message": "order missing",
            "errorCode": "ORDER_NOT_FOUND",
            "className": "orders.errors.OrderNotFound",
            "cause": {"message": "row missing"},
            "_type": "ignored",
        }
    ).encode("utf-8")

    payload = RestApiErrorParser().parse(body, _JSON, status_code=404)

    assert payload.id == "e-1"
    assert payload.message == "order missing"
    assert payload.error_code == "ORDER_NOT_FOUND"
    assert payload.class_name == "orders.errors.OrderNotFound"
    assert payload.cause is not None
    assert payload.cause.message == "row missing"


def test_parse_json_fills_missing_status_from_response() -> None:
    """The transport status should fill a payload that lacks one."""
    payload = RestApiErrorParser().parse('{"message": "nope"}', _JSON, status_code=403)

    assert payload.status == 403
    assert payload.error == "Forbidden"


def test_parse_problem_json_content_type() -> None:
    """``application/*+json`` responses should be treated as JSON."""
    payload = RestApiErrorParser().parse(
        b'{"message": "bad"}',
        {"Content-Type": "application/problem+json; charset=utf-8"},
    )

    assert payload.message == "bad"


@pytest.mark.parametrize("body", [b'{"detail": "other shape"}', b"[1, 2]", b"{not json"])
def test_non_payload_json_falls_back_to_headers(body: bytes) -> None:
    """JSON that is not an error payload should become the message text."""
    headers = {**_JSON, "X-ERROR-CODE": "REMOTE_FAILURE"}

    payload = RestApiErrorParser().parse(body, headers, status_code=502)

    assert payload.message == body.decode("utf-8")
    assert payload.error_code == "REMOTE_FAILURE"
    assert payload.status == 502


def test_header_only_response() -> None:
    """An empty body should be rebuilt entirely from headers."""
    headers = {
        "content-type": "text/plain",
        "x-error-id": "e-2",
        "x-error-message": "service down",
    }

    payload = RestApiErrorParser().parse(b"", headers, status_code=503)

    assert payload.id == "e-2"
    assert payload.message == "service down"
    assert payload.status == 503
    assert payload.error == "Service Unavailable"


def test_plain_text_body_uses_declared_charset() -> None:
    """Text bodies should be decoded with the content-type charset."""
    body = "Fehler: Größe".encode("latin-1")

    payload = RestApiErrorParser().parse(body, {"content-type": "text/plain; charset=ISO-8859-1"})

    assert payload.message == "Fehler: Größe"


def test_unknown_charset_falls_back_to_default() -> None:
    """An unknown declared charset should fall back to the parser default."""
    parser = RestApiErrorParser(default_charset="utf-8")

    payload = parser.parse(b"broken", {"content-type": "text/plain; charset=x-unknown"})

    assert parser.default_charset == "utf-8"
    assert payload.message == "broken"
