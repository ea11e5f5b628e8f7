# -*- coding: utf-8 -*-
"""
backend/app/shared/middleware/exception_handler.py

Middleware ASGI para capturar excepciones no manejadas y responder JSON.

Garantiza que cualquier error 500 devuelva JSON estructurado en lugar de text/plain,
incluyendo error_code y request_id para trazabilidad. Los detalles internos
(SQL, trazas) solo van al log, nunca al cliente.

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

# Headers de request ID aceptados (proxy, nginx, etc.)
REQUEST_ID_HEADERS = ["x-request-id", "x-correlation-id"]


def get_request_id(request: Request) -> str:
    """Extrae request_id de headers o genera uno nuevo."""
    for header in REQUEST_ID_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return uuid.uuid4().hex[:16]


class JSONExceptionMiddleware(BaseHTTPMiddleware):
    """
    Middleware que captura excepciones no manejadas y devuelve JSON.

    Garantiza:
    - Content-Type: application/json
    - error_code estable para la UI
    - request_id para correlación de logs (también en X-Request-ID)
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = get_request_id(request)
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "unhandled_exception request_id=%s method=%s path=%s error=%r",
                request_id,
                request.method,
                request.url.path,
                e,
            )
            detail = {
                "error_code": "INTERNAL_SERVER_ERROR",
                "message": "Internal server error",
                "request_id": request_id,
            }
            return JSONResponse(
                status_code=500,
                content={"detail": detail},
                headers={"X-Request-ID": request_id},
            )

        response.headers.setdefault("X-Request-ID", request_id)
        return response


__all__ = ["JSONExceptionMiddleware", "get_request_id"]
# Fin del archivo backend/app/shared/middleware/exception_handler.py
