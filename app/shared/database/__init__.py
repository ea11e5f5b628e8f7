# -*- coding: utf-8 -*-
"""
backend/app/shared/database/__init__.py

Re-exporta utilidades comunes de base de datos.

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from __future__ import annotations

from .database import (
    DatabaseManager,
    get_database_manager,
    check_database_health,
    dispose_engine,
)

__all__ = [
    "DatabaseManager",
    "get_database_manager",
    "check_database_health",
    "dispose_engine",
]

# Fin del archivo backend/app/shared/database/__init__.py
