# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/__init__.py

Exportación de utilidades comunes.

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from .http_exceptions import (
    BadRequestException,
    UnauthorizedException,
    ForbiddenException,
)

__all__ = [
    "BadRequestException",
    "UnauthorizedException",
    "ForbiddenException",
]
