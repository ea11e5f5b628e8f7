# -*- coding: utf-8 -*-
"""
backend/app/shared/config/__init__.py

Punto único de acceso a la configuración:
    from app.shared.config import get_settings

La instancia se resuelve de forma perezosa (no se valida nada al importar),
de modo que los tests pueden fijar PYTHON_ENV antes de la primera lectura.

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from .config_loader import get_settings
from .logging_config import setup_logging
from .settings_base import BaseAppSettings, DEFAULT_CACHE_TTL_SECONDS

__all__ = [
    "get_settings",
    "setup_logging",
    "BaseAppSettings",
    "DEFAULT_CACHE_TTL_SECONDS",
]
# Fin del archivo backend/app/shared/config/__init__.py
