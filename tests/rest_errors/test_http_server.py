"""Unit tests for FastAPI exception handlers rendering REST error payloads."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Iterator

import pytest
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.testclient import TestClient

from packages.rest_errors import RestApiErrorMapper, bad_request, conflict, payload_from_headers
from packages.rest_errors.config import MapperSettings
from packages.rest_errors.http import (
    create_app,
    install_exception_handlers,
    is_responsible,
    path_matches,
    run_app,
)

_NOW = datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)


def _mapper(api_paths: list[str] | None = None) -> RestApiErrorMapper:
    return RestApiErrorMapper(
        settings=MapperSettings(api_paths=api_paths or []),
        application_name="orders",
        id_factory=lambda: "error-1",
        clock=lambda: _NOW,
    )


def _app(api_paths: list[str] | None = None, **kwargs) -> FastAPI:
    app = FastAPI()
    install_exception_handlers(app, _mapper(api_paths), **kwargs)

    @app.get("/api/orders/{order_id}")
    def get_order(order_id: int) -> dict[str, int]:
        if order_id == 1:
            raise conflict("order is locked", code="ORDER_LOCKED")
        if order_id == 2:
            raise HTTPException(status_code=404, detail="Not Found", headers={"X-Trace": "t-1"})
        if order_id == 3:
            raise RuntimeError("database exploded")
        return {"id": order_id}

    @app.get("/web/page")
    def page() -> dict[str, str]:
        raise HTTPException(status_code=404, detail="page missing")

    return app


def test_service_error_renders_json_payload() -> None:
    """Service errors on API paths should render a JSON error body."""
    client = TestClient(_app(["/api/**"]))

    response = client.get("/api/orders/1", headers={"Accept": "application/json"})

    assert response.status_code == 409
    assert response.headers["content-type"].startswith("application/json")
    body = response.json()
    assert body["status"] == 409
    assert body["error"] == "Conflict"
    assert body["message"] == "order is locked"
    assert body["errorCode"] == "ORDER_LOCKED"
    assert body["errorCodeInherited"] is False
    assert body["application"] == "orders"
    assert body["path"] == "/api/orders/1"
    assert body["className"] == "packages.rest_errors.errors.ServiceError"
    assert "id" not in body


def test_unacceptable_media_type_renders_headers_only() -> None:
    """Clients not accepting JSON should receive an empty body with error headers."""
    client = TestClient(_app())

    response = client.get("/api/orders/1", headers={"Accept": "application/xml"})

    assert response.status_code == 409
    assert response.content == b""
    assert response.headers["X-ERROR-CODE"] == "ORDER_LOCKED"
    assert response.headers["X-ERROR-CODE-INHERITED"] == "false"
    assert response.headers["X-ERROR-MESSAGE"] == "order is locked"
    assert response.headers["X-ERROR-TIMESTAMP"] == "Thu, 02 Jan 2025 03:04:05 GMT"

    payload = payload_from_headers(response.headers, status_code=response.status_code)
    assert payload.error_code == "ORDER_LOCKED"
    assert payload.timestamp == _NOW
    assert payload.status == 409


def test_http_exception_keeps_status_and_headers() -> None:
    """Framework HTTP exceptions should keep their status and extra headers."""
    client = TestClient(_app())

    response = client.get("/api/orders/2", headers={"Accept": "application/json"})

    assert response.status_code == 404
    assert response.headers["X-Trace"] == "t-1"
    assert response.json()["error"] == "Not Found"


def test_validation_error_renders_unprocessable_entity() -> None:
    """Request validation failures should map to 422."""
    client = TestClient(_app())

    response = client.get("/api/orders/abc", headers={"Accept": "application/json"})

    assert response.status_code == 422
    assert response.json()["status"] == 422


def test_unhandled_error_renders_server_error_with_id() -> None:
    """Unexpected exceptions should map to 500 and carry an error id."""
    client = TestClient(_app(), raise_server_exceptions=False)

    response = client.get("/api/orders/3", headers={"Accept": "application/json"})

    assert response.status_code == 500
    body = response.json()
    assert body["id"] == "error-1"
    assert body["message"] == "database exploded"
    assert body["className"] == "builtins.RuntimeError"


def test_id_provider_overrides_generated_id() -> None:
    """A request-scoped id provider should supply the error id."""
    client = TestClient(
        _app(id_provider=lambda request: request.headers.get("x-request-id")),
        raise_server_exceptions=False,
    )

    response = client.get(
        "/api/orders/3",
        headers={"Accept": "application/json", "X-Request-Id": "req-42"},
    )

    assert response.json()["id"] == "req-42"


def test_paths_outside_api_use_stock_handlers() -> None:
    """Errors on paths outside the configured patterns keep framework rendering."""
    client = TestClient(_app(["/api/**"]))

    response = client.get("/web/page", headers={"Accept": "application/json"})

    assert response.status_code == 404
    assert response.json() == {"detail": "page missing"}


def test_create_app_installs_handlers_when_mapper_given() -> None:
    """create_app should wire exception handlers for a supplied mapper."""
    app = create_app(title="orders", version="1.0.0", mapper=_mapper())

    @app.get("/boom")
    def boom() -> None:
        raise conflict("busy")

    response = TestClient(app).get("/boom", headers={"Accept": "*/*"})

    assert app.title == "orders"
    assert response.status_code == 409
    assert response.json()["message"] == "busy"


def _session() -> Iterator[str]:
    yield "session"


def test_service_error_through_yield_dependency_keeps_status() -> None:
    """Errors passing through a generator dependency should keep their status."""
    app = FastAPI()
    install_exception_handlers(app, _mapper())

    @app.post("/api/items")
    def create_item(session: str = Depends(_session)) -> dict[str, str]:
        raise bad_request("bad item")

    response = TestClient(app).post("/api/items", headers={"Accept": "application/json"})

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "bad item"
    assert body["className"] == "packages.rest_errors.errors.ServiceError"


def _tagged_app(api_paths: list[str] | None = None) -> FastAPI:
    app = FastAPI()
    install_exception_handlers(app, _mapper(api_paths))

    @app.middleware("http")
    async def tag(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Tag"] = "seen"
        return response

    @app.get("/api/values")
    def bad_value() -> None:
        raise ValueError("bad value")

    @app.get("/web/values")
    def web_value() -> None:
        raise ValueError("bad value")

    return app


def test_mapped_builtin_error_is_handled_inside_middleware() -> None:
    """Mapped built-in errors should be rendered without escaping the app."""
    client = TestClient(_tagged_app())

    response = client.get("/api/values", headers={"Accept": "application/json"})

    assert response.status_code == 400
    assert response.headers["X-Tag"] == "seen"
    assert response.json()["message"] == "bad value"


def test_mapped_error_outside_api_paths_keeps_server_error_behaviour() -> None:
    """Mapped errors on other paths should still propagate as server errors."""
    with pytest.raises(ValueError, match="bad value"):
        TestClient(_tagged_app(["/api/**"])).get("/web/values")

    response = TestClient(_tagged_app(["/api/**"]), raise_server_exceptions=False).get(
        "/web/values"
    )
    assert response.status_code == 500
    assert response.text == "Internal Server Error"


@pytest.mark.parametrize(
    ("pattern", "path", "expected"),
    [
        ("/api/**", "/api", True),
        ("/api/**", "/api/orders/1", True),
        ("/api/**", "/apix", False),
        ("/api/*", "/api/orders", True),
        ("/api/*", "/api/orders/1", False),
        ("/api/order?", "/api/orders", True),
        ("/api/**/items", "/api/a/b/items", True),
        ("/exact", "/exact", True),
        ("/exact", "/exact/more", False),
    ],
)
def test_path_matches(pattern: str, path: str, expected: bool) -> None:
    """Ant-style patterns should match path segments as expected."""
    assert path_matches(pattern, path) is expected


def test_is_responsible_covers_all_paths_when_unconfigured() -> None:
    """An empty pattern list should cover every path."""
    assert is_responsible([], "/anything") is True
    assert is_responsible(["/api/**"], "/web") is False


def test_run_app_uses_uvicorn(monkeypatch: pytest.MonkeyPatch) -> None:
    """run_app should delegate to uvicorn.run with the given bind settings."""
    captured: dict[str, object] = {}

    def fake_run(app: object, **kwargs: object) -> None:
        captured["app"] = app
        captured.update(kwargs)

    monkeypatch.setattr("packages.rest_errors.http.server.uvicorn.run", fake_run)
    app = create_app()

    run_app(app, host="0.0.0.0", port=9000)

    assert captured == {"app": app, "host": "0.0.0.0", "port": 9000, "log_level": "info"}
