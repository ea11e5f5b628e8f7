# -*- coding: utf-8 -*-
"""
backend/app/modules/analytics/routes/analytics_routes.py

Endpoints de analytics para el dashboard:
- GET /analytics/overview
- GET /analytics/timeseries
- GET /analytics/export
- GET /analytics/projects/{project_id}

Todos exigen Bearer token y alguno de los permisos analytics:read /
analytics:read:project. El alcance de proyectos se resuelve por request.

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import ValidationError

from app.modules.auth.dependencies import AuthenticatedUser, require_any_permission
from app.shared.utils.http_exceptions import ForbiddenException

from ..errors import AnalyticsAccessDenied, AnalyticsValidationError
from ..filters import Interval, OverviewFilters
from ..schemas.analytics_schemas import (
    ExportQuery,
    OverviewQuery,
    OverviewResponse,
    ProjectPath,
    TimeseriesQuery,
    TimeseriesResponse,
)
from ..scope import AnalyticsScope, resolve_analytics_scope
from ..services.analytics_service import AnalyticsService
from ..services.export_service import AnalyticsExporter
from .deps import (
    field_errors_from,
    get_analytics_exporter,
    get_analytics_service,
    invalid_query,
    parse_query,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])

analytics_guard = require_any_permission("analytics:read", "analytics:read:project")


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════

def _forbidden(message: str) -> ForbiddenException:
    return ForbiddenException(detail={"error": "forbidden", "message": message})


@contextmanager
def _domain_errors() -> Iterator[None]:
    """Traduce errores de dominio a 400/403."""
    try:
        yield
    except AnalyticsValidationError as e:
        raise invalid_query(e.message, e.field_errors) from e
    except AnalyticsAccessDenied as e:
        raise _forbidden(e.message) from e


def _build_filters(
    query: OverviewQuery,
    scope: AnalyticsScope,
    interval: Interval = "day",
    project_id: Optional[str] = None,
) -> OverviewFilters:
    return OverviewFilters(
        from_=query.from_,
        to=query.to,
        project_id=project_id or query.project_id,
        cohort_id=query.cohort_id,
        interval=interval,
        allowed_project_ids=scope.allowed_project_ids,
        scope_key=scope.scope_key,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Endpoints
# ═══════════════════════════════════════════════════════════════════════════════

@router.get(
    "/overview",
    response_model=OverviewResponse,
    summary="Overview de analytics (KPIs, séries, categorias e listas)",
)
async def get_overview(
    user: AuthenticatedUser = Depends(analytics_guard),
    query: OverviewQuery = Depends(parse_query(OverviewQuery)),
    service: AnalyticsService = Depends(get_analytics_service),
) -> OverviewResponse:
    with _domain_errors():
        scope = resolve_analytics_scope(user, query.project_id)
        return await service.get_overview(_build_filters(query, scope))


@router.get(
    "/timeseries",
    response_model=TimeseriesResponse,
    summary="Série temporal de uma métrica",
)
async def get_timeseries(
    user: AuthenticatedUser = Depends(analytics_guard),
    query: TimeseriesQuery = Depends(parse_query(TimeseriesQuery)),
    service: AnalyticsService = Depends(get_analytics_service),
) -> TimeseriesResponse:
    with _domain_errors():
        scope = resolve_analytics_scope(user, query.project_id)
        points = await service.get_timeseries(
            query.metric, _build_filters(query, scope, interval=query.interval)
        )
    return TimeseriesResponse(data=points)


@router.get(
    "/export",
    summary="Exporta o overview em CSV, PDF ou XLSX",
    response_class=Response,
)
async def export_overview(
    user: AuthenticatedUser = Depends(analytics_guard),
    query: ExportQuery = Depends(parse_query(ExportQuery)),
    exporter: AnalyticsExporter = Depends(get_analytics_exporter),
) -> Response:
    with _domain_errors():
        scope = resolve_analytics_scope(user, query.project_id)
        artifact = await exporter.export(_build_filters(query, scope), query.format)

    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


@router.get(
    "/projects/{project_id}",
    response_model=OverviewResponse,
    summary="Overview de analytics de um projeto",
)
async def get_project_analytics(
    project_id: str,
    user: AuthenticatedUser = Depends(analytics_guard),
    query: OverviewQuery = Depends(parse_query(OverviewQuery)),
    service: AnalyticsService = Depends(get_analytics_service),
) -> OverviewResponse:
    try:
        path = ProjectPath(id=project_id)
    except ValidationError as e:
        raise invalid_query("Invalid request", field_errors_from(e)) from e

    # El alcance se resuelve siempre contra el proyecto de la ruta
    if query.project_id and query.project_id.lower() != path.id.lower():
        raise invalid_query(
            "Invalid request", {"projectId": ["must match the path project id"]}
        )

    with _domain_errors():
        scope = resolve_analytics_scope(user, path.id)
        if scope.allowed_project_ids is not None and path.id not in scope.allowed_project_ids:
            logger.info("analytics_project_denied user_id=%s project_id=%s", user.user_id, path.id)
            raise _forbidden("Projeto fora do escopo do usuário")

        return await service.get_project_analytics(
            path.id, _build_filters(query, scope, project_id=path.id)
        )


__all__ = ["router"]

# Fin del archivo backend/app/modules/analytics/routes/analytics_routes.py
