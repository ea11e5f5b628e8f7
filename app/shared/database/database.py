# -*- coding: utf-8 -*-
"""
backend/app/shared/database/database.py

SQLAlchemy async + asyncpg para el backend IMM.

Provee:
- DatabaseManager: engine y session factory perezosos (singleton)
- check_database_health()
- dispose_engine() para el lifespan

Notas:
- El engine se crea en el primer uso, no al importar; los tests pueden
  importar módulos sin una base de datos disponible.
- Timeout por consulta vía asyncpg (command_timeout).
- Las consultas de analytics abren una sesión por consulta a partir de
  la session factory; una AsyncSession no admite consultas concurrentes.

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.shared.config import get_settings

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Gestor singleton del engine async.

    - get_engine(): crea el engine con el pool configurado en settings
    - get_session_factory(): async_sessionmaker ligado al engine
    - dispose(): cierra el pool (shutdown)
    """

    _instance: Optional["DatabaseManager"] = None

    def __init__(self, database_url: Optional[str] = None) -> None:
        self._database_url = database_url
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    def get_instance(cls) -> "DatabaseManager":
        """Obtiene instancia singleton del manager."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Resetea el singleton (solo para tests). No cierra el engine."""
        cls._instance = None

    @property
    def database_url(self) -> str:
        return self._database_url or get_settings().database_url

    def get_engine(self) -> AsyncEngine:
        if self._engine is None:
            settings = get_settings()
            self._engine = create_async_engine(
                self.database_url,
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_timeout=settings.db_pool_timeout,
                pool_recycle=settings.db_pool_recycle,
                pool_pre_ping=True,
                echo=settings.db_echo_sql,
                connect_args={"command_timeout": settings.db_command_timeout_s},
            )
            logger.info(
                "[DB] Engine creado → %s:%s/%s (pool_size=%s, echo=%s)",
                settings.db_host,
                settings.db_port,
                settings.db_name,
                settings.db_pool_size,
                settings.db_echo_sql,
            )
        return self._engine

    def get_session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.get_engine(),
                expire_on_commit=False,
                class_=AsyncSession,
                autoflush=False,
            )
        return self._session_factory

    async def dispose(self) -> None:
        """Cierra el pool de conexiones si el engine fue creado."""
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("[DB] Engine cerrado")
        self._engine = None
        self._session_factory = None


def get_database_manager() -> DatabaseManager:
    return DatabaseManager.get_instance()


# ── Health check
async def check_database_health(timeout_s: float = 3.0, sql: str = "SELECT 1") -> bool:
    """
    Verifica conectividad a la base de datos.

    Args:
        timeout_s: Tiempo máximo de espera en segundos
        sql: Query SQL a ejecutar (default: "SELECT 1")

    Returns:
        True si la conexión es exitosa, False en caso contrario
    """
    try:
        async with asyncio.timeout(timeout_s):
            async with get_database_manager().get_engine().connect() as conn:
                await conn.execute(text(sql))
        return True
    except Exception as e:
        logger.warning("[DB] Health check falló: %s", e)
        return False


async def dispose_engine() -> None:
    await get_database_manager().dispose()


__all__ = [
    "DatabaseManager",
    "get_database_manager",
    "check_database_health",
    "dispose_engine",
]
# Fin del archivo backend/app/shared/database/database.py
