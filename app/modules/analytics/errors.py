# -*- coding: utf-8 -*-
"""
backend/app/modules/analytics/errors.py

Excepciones de dominio para el módulo de analytics.
Las rutas las traducen a 400 (validación) y 403 (acceso).

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from __future__ import annotations

from typing import Dict, List, Optional


class AnalyticsError(Exception):
    """Base de errores del módulo."""


class AnalyticsValidationError(AnalyticsError):
    """Parámetros inválidos (fechas mal formadas, rango invertido, etc.)."""
    def __init__(self, message: str, field_errors: Optional[Dict[str, List[str]]] = None):
        self.message = message
        self.field_errors = field_errors or {}
        super().__init__(message)


class AnalyticsAccessDenied(AnalyticsError):
    """El usuario no tiene un rol habilitado para analytics."""
    def __init__(self, message: str = "Analytics access denied"):
        self.message = message
        super().__init__(message)


class ProjectOutOfScope(AnalyticsAccessDenied):
    """Se pidió un proyecto fuera del alcance del usuario."""
    def __init__(self, project_id: Optional[str] = None):
        self.project_id = project_id
        super().__init__("Projeto fora do escopo do usuário")


__all__ = [
    "AnalyticsError",
    "AnalyticsValidationError",
    "AnalyticsAccessDenied",
    "ProjectOutOfScope",
]

# Fin del archivo backend/app/modules/analytics/errors.py
