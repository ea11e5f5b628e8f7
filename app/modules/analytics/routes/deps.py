# -*- coding: utf-8 -*-
"""
backend/app/modules/analytics/routes/deps.py

Dependencias inyectables del módulo analytics.
Los tests pueden overridear get_analytics_service con stubs.

- parse_query(Model): valida los query params y responde 400 con field_errors
  (en lugar del 422 por defecto de FastAPI); los params desconocidos se ignoran.

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from __future__ import annotations

from typing import Callable, Dict, List, Type, TypeVar

from fastapi import Depends, Request
from pydantic import BaseModel, ValidationError

from app.shared.config import get_settings
from app.shared.database.database import get_database_manager
from app.shared.redis.client import RedisClientManager
from app.shared.utils.http_exceptions import BadRequestException

from ..cache import AnalyticsCache
from ..repositories.analytics_repository import AnalyticsRepository
from ..services.analytics_service import AnalyticsService
from ..services.export_service import AnalyticsExporter

QueryModel = TypeVar("QueryModel", bound=BaseModel)


def field_errors_from(exc: ValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "query"
        errors.setdefault(field, []).append(err.get("msg", "invalid"))
    return errors


def invalid_query(message: str, field_errors: Dict[str, List[str]]) -> BadRequestException:
    return BadRequestException(
        detail={
            "error": "invalid_query",
            "message": message,
            "field_errors": field_errors,
        }
    )


def parse_query(model: Type[QueryModel]) -> Callable[[Request], QueryModel]:
    """Fábrica de dependencias: query string → modelo validado (400 si falla)."""

    def _dependency(request: Request) -> QueryModel:
        try:
            return model.model_validate(dict(request.query_params))
        except ValidationError as e:
            raise invalid_query("Invalid query", field_errors_from(e)) from e

    return _dependency


def get_analytics_cache() -> AnalyticsCache:
    settings = get_settings()
    return AnalyticsCache(RedisClientManager.get_instance(), settings.cache_ttl_seconds)


def get_analytics_repository() -> AnalyticsRepository:
    return AnalyticsRepository(get_database_manager().get_session_factory())


def get_analytics_service(
    repository: AnalyticsRepository = Depends(get_analytics_repository),
    cache: AnalyticsCache = Depends(get_analytics_cache),
) -> AnalyticsService:
    """
    Devuelve el servicio real de analytics.
    Tests pueden overridearlo con un servicio armado sobre repositorio falso.
    """
    return AnalyticsService(repository, cache)


def get_analytics_exporter(
    service: AnalyticsService = Depends(get_analytics_service),
) -> AnalyticsExporter:
    return AnalyticsExporter(service)


__all__ = [
    "field_errors_from",
    "invalid_query",
    "parse_query",
    "get_analytics_cache",
    "get_analytics_repository",
    "get_analytics_service",
    "get_analytics_exporter",
]
# Fin del archivo backend/app/modules/analytics/routes/deps.py
