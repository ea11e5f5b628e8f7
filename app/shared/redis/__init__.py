# -*- coding: utf-8 -*-
"""
backend/app/shared/redis/__init__.py

Módulo de cliente Redis del backend IMM.
Provee el singleton canónico del cliente async.
"""

from .client import (
    close_async_redis_client,
    RedisClientManager,
)

__all__ = [
    "close_async_redis_client",
    "RedisClientManager",
]
