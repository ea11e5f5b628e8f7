# -*- coding: utf-8 -*-
"""
backend/app/modules/analytics/__init__.py

Módulo analytics del backend IMM: KPIs, series, categorías, listas críticas
y exportaciones, con alcance de proyectos por usuario y caché en Redis.
"""

from .errors import AnalyticsAccessDenied, AnalyticsValidationError, ProjectOutOfScope
from .routes import router as analytics_router

__all__ = [
    "AnalyticsAccessDenied",
    "AnalyticsValidationError",
    "ProjectOutOfScope",
    "analytics_router",
]
