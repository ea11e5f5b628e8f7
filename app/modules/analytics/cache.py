# -*- coding: utf-8 -*-
"""
backend/app/modules/analytics/cache.py

Caché read-through de resultados de analytics sobre Redis.

- Sin backend (no configurado o inalcanzable) → se calcula directamente.
- Hit → se decodifica el JSON con el TypeAdapter del tipo de respuesta.
- Miss → se calcula, se guarda con SET ... EX ttl y se devuelve.
- Errores de get/decode/set se registran y se tratan como miss o se ignoran.
  Los errores del cálculo se propagan y el cálculo nunca se repite.

Carrera aceptada: dos requests en frío pueden calcular y escribir ambas
(gana la última escritura).

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from pydantic import TypeAdapter

from app.shared.config import DEFAULT_CACHE_TTL_SECONDS
from app.shared.redis.client import RedisClientManager

from .metrics import analytics_cache_events_total

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AnalyticsCache:
    def __init__(self, redis_manager: Optional[RedisClientManager], ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS):
        self._redis_manager = redis_manager
        self._ttl_seconds = ttl_seconds if ttl_seconds and ttl_seconds > 0 else DEFAULT_CACHE_TTL_SECONDS

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    async def _get_client(self):
        if self._redis_manager is None:
            return None
        return await self._redis_manager.get_client()

    async def with_cache(
        self,
        key: str,
        factory: Callable[[], Awaitable[T]],
        adapter: TypeAdapter[T],
    ) -> T:
        client = await self._get_client()
        if client is None:
            analytics_cache_events_total.labels("bypass").inc()
            return await factory()

        try:
            raw = await client.get(key)
            if raw is not None:
                value = adapter.validate_json(raw)
                analytics_cache_events_total.labels("hit").inc()
                return value
        except Exception as e:
            analytics_cache_events_total.labels("error").inc()
            logger.warning("analytics_cache_error op=get key=%s error=%s", key, e)

        analytics_cache_events_total.labels("miss").inc()
        result = await factory()

        try:
            await client.set(key, adapter.dump_json(result), ex=self._ttl_seconds)
        except Exception as e:
            analytics_cache_events_total.labels("error").inc()
            logger.warning("analytics_cache_error op=set key=%s error=%s", key, e)

        return result


__all__ = ["AnalyticsCache"]

# Fin del archivo backend/app/modules/analytics/cache.py
