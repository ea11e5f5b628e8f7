# -*- coding: utf-8 -*-
"""
backend/app/routes/__init__.py

Ensamblador principal de ruteadores de la API IMM.

Responsabilidades:
- Incluir el router de health (/health).
- Incluir los routers de los módulos (analytics).

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from fastapi import APIRouter

from app.modules.analytics.routes import router as analytics_router

from .health_routes import router as health_router

router = APIRouter()

# Health check sin prefijo adicional
router.include_router(health_router)

router.include_router(analytics_router)

__all__ = ["router"]

# Fin del archivo backend/app/routes/__init__.py
