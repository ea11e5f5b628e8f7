# -*- coding: utf-8 -*-
"""
backend/app/modules/analytics/services/analytics_service.py

Servicio de analytics: overview, series temporales y overview por proyecto.

Flujo:
1. Resolver la ventana de fechas (UTC)
2. Armar la llave de caché (incluye scope_key)
3. En miss, lanzar las consultas en paralelo (asyncio.gather) y armar DTOs

Cualquier rama fallida hace fallar el agregado completo.

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, List, Mapping, Optional

from ..cache import AnalyticsCache
from ..date_range import DateRange, resolve_date_range
from ..filters import OverviewFilters
from ..metrics import analytics_compute_seconds
from ..repositories.analytics_repository import AT_RISK_LIMIT, AnalyticsRepository
from ..schemas.analytics_schemas import (
    OVERVIEW_ADAPTER,
    SERIES_ADAPTER,
    ActionPlanStatusCount,
    AgeBucketCount,
    AtRiskEnrollment,
    AttendanceByProject,
    Categorias,
    Kpis,
    Listas,
    NeighborhoodCount,
    OverviewResponse,
    PendingConsent,
    ProjectCapacity,
    Series,
    SeriesPoint,
    VulnerabilityCount,
)

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# Llaves de caché
# ─────────────────────────────────────────────────────────────
def overview_cache_key(window: DateRange, filters: OverviewFilters) -> str:
    return (
        f"analytics:overview:{window.from_iso}:{window.to_iso}:"
        f"{filters.project_id or 'all'}:{filters.cohort_id or 'all'}:{filters.scope_key}"
    )


def timeseries_cache_key(metric: str, window: DateRange, filters: OverviewFilters) -> str:
    return (
        f"analytics:timeseries:{metric}:{filters.interval}:{window.from_iso}:{window.to_iso}:"
        f"{filters.project_id or 'all'}:{filters.cohort_id or 'all'}:{filters.scope_key}"
    )


# ─────────────────────────────────────────────────────────────
# Helpers de mapeo
# ─────────────────────────────────────────────────────────────
def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _iso_day(value: Any, default: str) -> str:
    if value is None:
        return default
    if hasattr(value, "isoformat"):
        return value.isoformat()[:10]
    return str(value)[:10]


def _count_points(rows: Iterable[Mapping[str, Any]]) -> List[SeriesPoint]:
    return [SeriesPoint(t=str(r["bucket_date"]), v=int(r["total"] or 0)) for r in rows]


def _rate_points(rows: Iterable[Mapping[str, Any]]) -> List[SeriesPoint]:
    return [SeriesPoint(t=str(r["bucket_date"]), v=_optional_float(r["rate"])) for r in rows]


def rank_at_risk(rows: Iterable[Mapping[str, Any]], limit: int = AT_RISK_LIMIT) -> List[AtRiskEnrollment]:
    """Las `limit` matrículas con menor asistencia (sin nulos), en orden ascendente."""
    ranked = sorted(
        (r for r in rows if r.get("attendance_rate") is not None),
        key=lambda r: float(r["attendance_rate"]),
    )
    return [
        AtRiskEnrollment(
            beneficiaria=r["full_name"],
            projeto=r["project_name"],
            turma=r.get("cohort_code") or "",
            assiduidade=float(r["attendance_rate"]),
        )
        for r in ranked[:limit]
    ]


class AnalyticsService:
    def __init__(self, repository: AnalyticsRepository, cache: AnalyticsCache):
        self.repository = repository
        self.cache = cache

    # ─────────────────────────────────────────────────────────────
    # API pública
    # ─────────────────────────────────────────────────────────────
    async def get_overview(self, filters: OverviewFilters) -> OverviewResponse:
        """
        Overview completo (kpis, series, categorias, listas) para los filtros.

        Raises:
            AnalyticsValidationError: fechas inválidas o rango invertido.
        """
        window = resolve_date_range(filters.from_, filters.to)
        key = overview_cache_key(window, filters)

        async def compute() -> OverviewResponse:
            with analytics_compute_seconds.labels("overview").time():
                kpis, series, categorias, listas = await asyncio.gather(
                    self._fetch_kpis(window, filters),
                    self._fetch_series(window, filters),
                    self._fetch_categorias(window, filters),
                    self._fetch_listas(window, filters),
                )
            logger.info(
                "analytics_overview_computed from=%s to=%s project=%s cohort=%s scope=%s",
                window.from_iso,
                window.to_iso,
                filters.project_id or "all",
                filters.cohort_id or "all",
                filters.scope_key,
            )
            return OverviewResponse(kpis=kpis, series=series, categorias=categorias, listas=listas)

        return await self.cache.with_cache(key, compute, OVERVIEW_ADAPTER)

    async def get_timeseries(self, metric: str, filters: OverviewFilters) -> List[SeriesPoint]:
        """
        Serie única: beneficiarias | matriculas | cualquier otro valor → asistencia.
        """
        window = resolve_date_range(filters.from_, filters.to)
        key = timeseries_cache_key(metric, window, filters)
        restriction = filters.project_restriction

        async def compute() -> List[SeriesPoint]:
            with analytics_compute_seconds.labels("timeseries").time():
                if metric == "beneficiarias":
                    rows = await self.repository.series_new_beneficiaries(window, filters.interval, restriction)
                    return _count_points(rows)
                if metric == "matriculas":
                    rows = await self.repository.series_new_enrollments(
                        window, filters.interval, restriction, filters.cohort_id
                    )
                    return _count_points(rows)
                rows = await self.repository.series_attendance(
                    window, filters.interval, restriction, filters.cohort_id
                )
                return _rate_points(rows)

        return await self.cache.with_cache(key, compute, SERIES_ADAPTER)

    async def get_project_analytics(self, project_id: str, filters: OverviewFilters) -> OverviewResponse:
        return await self.get_overview(filters.with_project(project_id))

    # ─────────────────────────────────────────────────────────────
    # Secciones
    # ─────────────────────────────────────────────────────────────
    async def _fetch_kpis(self, window: DateRange, filters: OverviewFilters) -> Kpis:
        repo = self.repository
        restriction = filters.project_restriction
        cohort_id = filters.cohort_id
        ativas, novas, matriculas, assiduidade, pendentes = await asyncio.gather(
            repo.count_active_beneficiaries(window, restriction, cohort_id),
            repo.count_new_beneficiaries(window, restriction, cohort_id),
            repo.count_active_enrollments(window, restriction, cohort_id),
            repo.average_attendance(window, restriction, cohort_id),
            repo.count_pending_consents(window, restriction, cohort_id),
        )
        return Kpis(
            beneficiarias_ativas=ativas,
            novas_beneficiarias=novas,
            matriculas_ativas=matriculas,
            assiduidade_media=assiduidade,
            consentimentos_pendentes=pendentes,
        )

    async def _fetch_series(self, window: DateRange, filters: OverviewFilters) -> Series:
        repo = self.repository
        restriction = filters.project_restriction
        beneficiarias, matriculas, assiduidade = await asyncio.gather(
            repo.series_new_beneficiaries(window, filters.interval, restriction),
            repo.series_new_enrollments(window, filters.interval, restriction, filters.cohort_id),
            repo.series_attendance(window, filters.interval, restriction, filters.cohort_id),
        )
        return Series(
            novas_beneficiarias=_count_points(beneficiarias),
            novas_matriculas=_count_points(matriculas),
            assiduidade_media=_rate_points(assiduidade),
        )

    async def _fetch_categorias(self, window: DateRange, filters: OverviewFilters) -> Categorias:
        repo = self.repository
        restriction = filters.project_restriction
        por_projeto, vulnerabilidades, idade, bairros, capacidade, plano = await asyncio.gather(
            repo.attendance_by_project(window, restriction, filters.cohort_id),
            repo.vulnerability_counts(),
            repo.age_distribution(),
            repo.neighborhood_counts(),
            repo.project_capacity(restriction),
            repo.action_plan_status_counts(),
        )
        return Categorias(
            assiduidade_por_projeto=[
                AttendanceByProject(projeto=r["project_name"], valor=_optional_float(r["attendance_rate"]))
                for r in por_projeto
                if r["project_name"]
            ],
            vulnerabilidades=[VulnerabilityCount(tipo=r["slug"], qtd=int(r["total"] or 0)) for r in vulnerabilidades],
            faixa_etaria=[AgeBucketCount(faixa=r["bucket"], qtd=int(r["total"] or 0)) for r in idade],
            bairros=[NeighborhoodCount(bairro=r["neighborhood"], qtd=int(r["total"] or 0)) for r in bairros],
            capacidade_projeto=[
                ProjectCapacity(
                    projeto=r["name"],
                    ocupadas=int(r["ocupadas"] or 0),
                    capacidade=int(r["capacidade"] or 0),
                )
                for r in capacidade
            ],
            plano_acao_status=[ActionPlanStatusCount(status=r["status"], qtd=int(r["total"] or 0)) for r in plano],
        )

    async def _fetch_listas(self, window: DateRange, filters: OverviewFilters) -> Listas:
        repo = self.repository
        restriction = filters.project_restriction
        risco, consentimentos = await asyncio.gather(
            repo.at_risk_enrollments(window, restriction, filters.cohort_id),
            repo.pending_consents(window, restriction, filters.cohort_id),
        )
        return Listas(
            risco_evasao=rank_at_risk(risco),
            consentimentos_pendentes=[
                PendingConsent(
                    beneficiaria=r["full_name"],
                    tipo=r["tipo"] or "lgpd",
                    desde=_iso_day(r["desde"], window.from_iso),
                )
                for r in consentimentos
            ],
        )


__all__ = [
    "AnalyticsService",
    "overview_cache_key",
    "timeseries_cache_key",
    "rank_at_risk",
]

# Fin del archivo backend/app/modules/analytics/services/analytics_service.py
