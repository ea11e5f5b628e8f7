# -*- coding: utf-8 -*-
"""
backend/app/shared/redis/client.py

Cliente Redis async canónico (singleton) para el backend IMM.
Usado por AnalyticsCache y por el health check.

Características:
- Conexión perezosa (nada bloquea al importar)
- Un único cliente compartido por todos los consumidores
- Best-effort: devuelve None si Redis no está disponible (fail-open)
- Inicialización protegida con asyncio.Lock
- Reintento de conexión tras un periodo de enfriamiento

Autor: Equipo IMM
Fecha: 2025-10-24
"""
from __future__ import annotations

import asyncio
import logging
import os
import time
from typing import Optional

import redis.asyncio as aioredis

from app.shared.config import get_settings

logger = logging.getLogger(__name__)


class RedisClientManager:
    """
    Gestiona un único cliente Redis async compartido.

    Si REDIS_URL no está configurado o la conexión falla, get_client()
    devuelve None y los consumidores operan sin caché.
    """

    _instance: Optional["RedisClientManager"] = None

    @classmethod
    def get_instance(cls) -> "RedisClientManager":
        """Obtiene instancia singleton."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """
        Resetea el singleton (tests).

        No cierra el cliente; usar close_async_redis_client() para cerrarlo.
        """
        cls._instance = None

    def __init__(self, redis_url: Optional[str] = None, retry_cooldown_s: float = 30.0):
        self._redis_url = redis_url if redis_url is not None else get_settings().redis_url
        self._client: Optional[aioredis.Redis] = None
        self._connected: Optional[bool] = None  # None = no intentado
        self._connect_lock: Optional[asyncio.Lock] = None
        self._retry_cooldown_s = retry_cooldown_s
        self._failed_at: Optional[float] = None

        if self._redis_url:
            logger.debug("RedisClientManager: configurado (conexión perezosa) pid=%d", os.getpid())
        else:
            logger.debug("RedisClientManager: REDIS_URL no configurado pid=%d", os.getpid())

    @property
    def is_configured(self) -> bool:
        """True si hay REDIS_URL."""
        return bool(self._redis_url)

    @property
    def is_connected(self) -> bool:
        """True si la conexión a Redis fue exitosa."""
        return self._connected is True

    async def get_client(self) -> Optional[aioredis.Redis]:
        """
        Devuelve el cliente Redis async (conexión perezosa).

        Returns:
            Cliente Redis o None si no está disponible o falló.
        """
        self._maybe_allow_retry()
        if self._connected is not None:
            return self._client if self._connected else None

        if not self.is_configured:
            self._connected = False
            return None

        if self._connect_lock is None:
            self._connect_lock = asyncio.Lock()

        async with self._connect_lock:
            # Doble verificación tras el lock
            if self._connected is not None:
                return self._client if self._connected else None

            try:
                self._client = aioredis.from_url(
                    self._redis_url,
                    decode_responses=True,
                    socket_connect_timeout=2,
                    socket_timeout=2,
                )
                await self._client.ping()

                self._connected = True
                logger.info("RedisClientManager: conectado pid=%d", os.getpid())
                return self._client

            except Exception as e:
                logger.warning("RedisClientManager: conexión fallida: %s", str(e))
                self._connected = False
                self._client = None
                self._failed_at = time.monotonic()
                return None

    def _maybe_allow_retry(self) -> None:
        # Tras un fallo, se reintenta solo cuando vence el enfriamiento
        if self._connected is not False or self._failed_at is None:
            return
        if time.monotonic() - self._failed_at >= self._retry_cooldown_s:
            self._connected = None
            self._failed_at = None

    async def ping(self) -> bool:
        """
        Ejecuta PING.

        Returns:
            True si PING responde, False en caso contrario.
        """
        client = await self.get_client()
        if not client:
            return False

        try:
            await client.ping()
            return True
        except Exception as e:
            logger.warning("RedisClientManager: ping falló: %s", str(e))
            return False

    async def close(self) -> None:
        """Cierra la conexión Redis."""
        if self._client is not None:
            try:
                await self._client.aclose()
            except Exception as e:
                logger.warning("RedisClientManager: error al cerrar: %s", str(e))
            finally:
                self._client = None
                self._connected = None


async def close_async_redis_client() -> None:
    """Cierra la conexión del cliente Redis."""
    await RedisClientManager.get_instance().close()


__all__ = [
    "close_async_redis_client",
    "RedisClientManager",
]
# Fin del archivo backend/app/shared/redis/client.py
