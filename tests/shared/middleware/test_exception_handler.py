# -*- coding: utf-8 -*-
"""
Tests de JSONExceptionMiddleware y RequestLoggingMiddleware.

Cubre:
- Excepción no manejada → 500 JSON con error_code y request_id
- Sin detalles internos en el body
- X-Request-ID propagado desde el request o generado
- RequestLoggingMiddleware registra request_completed y omite /health
"""

import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.shared.middleware import JSONExceptionMiddleware, RequestLoggingMiddleware


@pytest.fixture
def app():
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(JSONExceptionMiddleware)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("relation \"enrollments\" does not exist")

    @app.get("/ok")
    async def ok():
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


def test_unhandled_exception_returns_json_500(client):
    """Error inesperado → JSON estable sin filtrar el mensaje interno."""
    response = client.get("/boom", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    detail = response.json()["detail"]
    assert detail == {
        "error_code": "INTERNAL_SERVER_ERROR",
        "message": "Internal server error",
        "request_id": "req-123",
    }
    assert "enrollments" not in response.text
    assert response.headers["X-Request-ID"] == "req-123"


def test_request_id_generated_when_missing(client):
    """Sin header de correlación se genera un request_id."""
    response = client.get("/ok")

    assert response.status_code == 200
    assert len(response.headers["X-Request-ID"]) == 16


def test_request_logging_skips_health(client, caplog):
    """/health no se registra; el resto sí."""
    with caplog.at_level(logging.INFO, logger="app.shared.middleware.request_logging"):
        client.get("/health")
        client.get("/ok")

    messages = [r.getMessage() for r in caplog.records if "request_completed" in r.getMessage()]
    assert len(messages) == 1
    assert "path=/ok" in messages[0]
    assert "status=200" in messages[0]
