# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/http_exceptions.py

Excepciones HTTP personalizadas para la API IMM.
Estandariza respuestas de error con códigos HTTP apropiados.
`detail` acepta str o dict (cuerpos estructurados {"error", "message", ...}).

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from fastapi import HTTPException, status
from typing import Any, Dict, Optional


class BadRequestException(HTTPException):
    """400 - Solicitud mal formada o parámetros inválidos"""
    def __init__(
        self,
        detail: Any = "Solicitud inválida",
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            headers=headers
        )


class UnauthorizedException(HTTPException):
    """401 - Autenticación requerida o credenciales inválidas"""
    def __init__(
        self,
        detail: Any = "No autorizado - credenciales inválidas o ausentes",
        headers: Optional[Dict[str, Any]] = None
    ):
        if headers is None:
            headers = {"WWW-Authenticate": "Bearer"}
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers=headers
        )


class ForbiddenException(HTTPException):
    """403 - Usuario autenticado pero sin permisos"""
    def __init__(
        self,
        detail: Any = "Acceso prohibido - permisos insuficientes",
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            headers=headers
        )


__all__ = [
    "BadRequestException",
    "UnauthorizedException",
    "ForbiddenException",
]
