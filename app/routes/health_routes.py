# -*- coding: utf-8 -*-
"""
backend/app/routes/health_routes.py

Endpoint básico de health check para el backend IMM.
Nunca responde 5xx: colaboradores inalcanzables degradan el status.

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from app.shared.config import get_settings
from app.shared.database.database import check_database_health
from app.shared.redis.client import RedisClientManager

router = APIRouter()


@router.get(
    "/health",
    summary="Health check del backend",
    description=(
        "Devuelve el estado básico del backend IMM, incluyendo "
        "conectividad a la base de datos y al caché Redis."
    ),
)
async def health_check() -> dict:
    """
    Health check básico del backend.

    Returns:
        dict: información mínima de estado de la aplicación.
    """
    settings = get_settings()

    db_ok = await check_database_health(timeout_s=2.0)

    redis_manager = RedisClientManager.get_instance()
    cache_configured = redis_manager.is_configured
    cache_ok = await redis_manager.ping() if cache_configured else False

    healthy = db_ok and (cache_ok or not cache_configured)

    return {
        "status": "ok" if healthy else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "environment": settings.python_env,
        "database": {
            "reachable": db_ok,
        },
        "cache": {
            "configured": cache_configured,
            "reachable": cache_ok,
        },
        "service": {
            "name": settings.app_name,
            "version": settings.app_version,
        },
    }

# Fin del archivo backend/app/routes/health_routes.py
