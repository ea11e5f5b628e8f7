# -*- coding: utf-8 -*-
"""
backend/app/main.py

Punto de entrada principal del backend IMM.

Ajustes clave:
- create_app(): logging, CORS, middleware JSON de excepciones, logging de
  requests, Prometheus (/metrics) y routers (health + analytics)
- Ciclo de vida: al apagar se cierra el pool de la base y el cliente Redis
- Módulo expone `app` para uvicorn (uvicorn app.main:app)

Autor: Equipo IMM
Fecha: 2025-10-24
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

# ---------------------------------------------------------------------------
# Cargar .env ANTES de resolver settings
# En DEV: override=True para que .env mande sobre variables del entorno
# En PROD: override=False para respetar variables del entorno
# ---------------------------------------------------------------------------
from dotenv import load_dotenv

_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
_PYTHON_ENV = os.getenv("PYTHON_ENV", "development").strip().lower()
load_dotenv(dotenv_path=_ENV_PATH, override=_PYTHON_ENV == "development")

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.observability.prom import setup_observability
from app.routes import router as main_router
from app.shared.config import BaseAppSettings, get_settings, setup_logging
from app.shared.database.database import dispose_engine
from app.shared.middleware import JSONExceptionMiddleware, RequestLoggingMiddleware
from app.shared.redis.client import close_async_redis_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ────────── STARTUP ──────────
    settings = get_settings()
    logger.info(
        "🟢 Backend IMM iniciado env=%s version=%s",
        settings.python_env,
        settings.app_version,
    )
    try:
        yield
    finally:
        # ────────── SHUTDOWN ──────────
        logger.info("🔴 Iniciando shutdown ordenado...")
        try:
            await close_async_redis_client()
        except Exception as e:
            logger.warning("⚠️ Error cerrando Redis: %s", e)
        try:
            await dispose_engine()
        except Exception as e:
            logger.warning("⚠️ Error cerrando engine de base de datos: %s", e)
        logger.info("🔴 Backend IMM apagado.")


openapi_tags = [
    {"name": "analytics", "description": "KPIs, séries, categorias, listas e exportações"},
]


def _configure_cors(app_instance: FastAPI, settings: BaseAppSettings) -> None:
    origins = settings.get_cors_origins()
    wildcard = origins == ["*"]
    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Con wildcard los navegadores rechazan credenciales
        allow_credentials=not wildcard,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["Content-Disposition", "X-Request-ID"],
        max_age=600,
    )
    logger.info("🌐 CORS origins=%s credentials=%s", origins, not wildcard)


def create_app(settings: Optional[BaseAppSettings] = None) -> FastAPI:
    """
    Construye la aplicación FastAPI.

    Args:
        settings: settings explícitos (tests); por defecto get_settings().
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title=settings.app_name,
        description="API de analytics do Instituto Move Marias",
        version=settings.app_version,
        lifespan=lifespan,
        openapi_tags=openapi_tags,
    )

    # IMPORTANTE: Starlette ejecuta los middlewares en orden inverso al registro.
    # JSONExceptionMiddleware queda más adentro; CORS, al final, es el más externo.
    app.add_middleware(JSONExceptionMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    if settings.metrics_enabled:
        setup_observability(app)
    _configure_cors(app, settings)

    app.include_router(main_router)

    return app


app = create_app()

# Fin del archivo backend/app/main.py
