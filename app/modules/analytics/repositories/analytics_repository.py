# -*- coding: utf-8 -*-
"""
backend/app/modules/analytics/repositories/analytics_repository.py

Acceso a datos de analytics (SQL crudo con sqlalchemy.text()).

El trabajo pesado vive en vistas y funciones de la base:
- imm_series_new_beneficiaries / imm_series_new_enrollments / imm_series_attendance
- imm_attendance_rate_by_cohort / imm_attendance_rate_by_enrollment
- imm_age_distribution()
- view_vulnerabilities_counts / view_neighborhood_counts
- view_project_capacity_utilization / view_action_items_status_counts

Cada consulta abre su propia sesión desde la session factory: el servicio
las lanza en paralelo con asyncio.gather y una AsyncSession no admite
consultas concurrentes.

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..date_range import DateRange
from ..filters import Interval, ProjectRestriction, SqlPredicateBuilder

logger = logging.getLogger(__name__)

AT_RISK_LIMIT = 10


class AnalyticsRepository:
    """
    Consultas de analytics. Devuelve filas (mappings) sin transformar;
    el servicio arma los DTOs.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    # ─────────────────────────────────────────────────────────────
    # Ejecución
    # ─────────────────────────────────────────────────────────────
    async def _fetch_all(self, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Mapping[str, Any]]:
        async with self._session_factory() as session:
            result = await session.execute(text(sql), params or {})
            return list(result.mappings().all())

    async def _fetch_scalar(self, sql: str, params: Optional[Dict[str, Any]] = None) -> Any:
        async with self._session_factory() as session:
            result = await session.execute(text(sql), params or {})
            return result.scalar()

    @staticmethod
    def _active_enrollments(
        window: DateRange,
        restriction: ProjectRestriction,
        cohort_id: Optional[str],
    ) -> SqlPredicateBuilder:
        """Matrícula activa durante la ventana + restricción de proyecto/turma."""
        qb = SqlPredicateBuilder()
        p_from = qb.bind(window.from_)
        p_to = qb.bind(window.to)
        qb.add("e.status = 'active'")
        qb.add(f"e.enrolled_at <= CAST({p_to} AS date)")
        qb.add(f"(e.terminated_at IS NULL OR e.terminated_at >= CAST({p_from} AS date))")
        qb.restrict_projects(restriction, "c.project_id")
        qb.restrict_cohort(cohort_id, "e.cohort_id")
        return qb

    @staticmethod
    def _function_args(
        window: DateRange,
        restriction: ProjectRestriction,
        cohort_id: Optional[str] = None,
        interval: Optional[Interval] = None,
        *,
        with_cohort: bool = True,
    ) -> tuple[str, Dict[str, Any]]:
        """Argumentos posicionales para las funciones imm_* (from, to, [interval], projects, [cohort])."""
        qb = SqlPredicateBuilder()
        args = [
            f"CAST({qb.bind(window.from_)} AS date)",
            f"CAST({qb.bind(window.to)} AS date)",
        ]
        if interval is not None:
            args.append(f"CAST({qb.bind(interval)} AS text)")
        args.append(f"CAST({qb.bind(restriction.as_array())} AS uuid[])")
        if with_cohort:
            args.append(f"CAST({qb.bind(cohort_id)} AS uuid)")
        return ", ".join(args), qb.params

    # ─────────────────────────────────────────────────────────────
    # KPIs
    # ─────────────────────────────────────────────────────────────
    async def count_active_beneficiaries(
        self, window: DateRange, restriction: ProjectRestriction, cohort_id: Optional[str]
    ) -> int:
        qb = self._active_enrollments(window, restriction, cohort_id)
        value = await self._fetch_scalar(
            f"""
            SELECT COUNT(DISTINCT e.beneficiary_id)
              FROM enrollments e
              JOIN cohorts c ON c.id = e.cohort_id
             WHERE {qb.where_sql()}
            """,
            qb.params,
        )
        return int(value or 0)

    async def count_new_beneficiaries(
        self, window: DateRange, restriction: ProjectRestriction, cohort_id: Optional[str]
    ) -> int:
        qb = SqlPredicateBuilder()
        qb.add(
            f"CAST(b.created_at AS date) BETWEEN CAST({qb.bind(window.from_)} AS date) "
            f"AND CAST({qb.bind(window.to)} AS date)"
        )
        qb.restrict_projects(restriction, "c.project_id")
        qb.restrict_cohort(cohort_id, "e.cohort_id")
        value = await self._fetch_scalar(
            f"""
            SELECT COUNT(DISTINCT b.id)
              FROM beneficiaries b
              LEFT JOIN enrollments e ON e.beneficiary_id = b.id
              LEFT JOIN cohorts c ON c.id = e.cohort_id
             WHERE {qb.where_sql()}
            """,
            qb.params,
        )
        return int(value or 0)

    async def count_active_enrollments(
        self, window: DateRange, restriction: ProjectRestriction, cohort_id: Optional[str]
    ) -> int:
        qb = self._active_enrollments(window, restriction, cohort_id)
        value = await self._fetch_scalar(
            f"""
            SELECT COUNT(*)
              FROM enrollments e
              JOIN cohorts c ON c.id = e.cohort_id
             WHERE {qb.where_sql()}
            """,
            qb.params,
        )
        return int(value or 0)

    async def average_attendance(
        self, window: DateRange, restriction: ProjectRestriction, cohort_id: Optional[str]
    ) -> Optional[float]:
        args, params = self._function_args(window, restriction, cohort_id)
        value = await self._fetch_scalar(
            f"SELECT CAST(AVG(attendance_rate) AS float) FROM imm_attendance_rate_by_cohort({args})",
            params,
        )
        return None if value is None else float(value)

    async def count_pending_consents(
        self, window: DateRange, restriction: ProjectRestriction, cohort_id: Optional[str]
    ) -> int:
        qb = self._active_enrollments(window, restriction, cohort_id)
        value = await self._fetch_scalar(
            f"""
            WITH base AS (
                SELECT DISTINCT b.id AS beneficiary_id
                  FROM enrollments e
                  JOIN cohorts c ON c.id = e.cohort_id
                  JOIN beneficiaries b ON b.id = e.beneficiary_id
                 WHERE {qb.where_sql()}
            )
            SELECT COUNT(DISTINCT base.beneficiary_id)
              FROM base
              LEFT JOIN consents cs ON cs.beneficiary_id = base.beneficiary_id AND cs.type = 'lgpd'
             WHERE cs.id IS NULL OR cs.granted = false OR cs.revoked_at IS NOT NULL
            """,
            qb.params,
        )
        return int(value or 0)

    # ─────────────────────────────────────────────────────────────
    # Series
    # ─────────────────────────────────────────────────────────────
    async def series_new_beneficiaries(
        self, window: DateRange, interval: Interval, restriction: ProjectRestriction
    ) -> List[Mapping[str, Any]]:
        args, params = self._function_args(window, restriction, interval=interval, with_cohort=False)
        return await self._fetch_all(
            f"SELECT CAST(bucket_date AS text) AS bucket_date, total FROM imm_series_new_beneficiaries({args})",
            params,
        )

    async def series_new_enrollments(
        self, window: DateRange, interval: Interval, restriction: ProjectRestriction, cohort_id: Optional[str]
    ) -> List[Mapping[str, Any]]:
        args, params = self._function_args(window, restriction, cohort_id, interval)
        return await self._fetch_all(
            f"SELECT CAST(bucket_date AS text) AS bucket_date, total FROM imm_series_new_enrollments({args})",
            params,
        )

    async def series_attendance(
        self, window: DateRange, interval: Interval, restriction: ProjectRestriction, cohort_id: Optional[str]
    ) -> List[Mapping[str, Any]]:
        args, params = self._function_args(window, restriction, cohort_id, interval)
        return await self._fetch_all(
            f"SELECT CAST(bucket_date AS text) AS bucket_date, rate FROM imm_series_attendance({args})",
            params,
        )

    # ─────────────────────────────────────────────────────────────
    # Categorías
    # ─────────────────────────────────────────────────────────────
    async def attendance_by_project(
        self, window: DateRange, restriction: ProjectRestriction, cohort_id: Optional[str]
    ) -> List[Mapping[str, Any]]:
        args, params = self._function_args(window, restriction, cohort_id)
        return await self._fetch_all(
            f"""
            SELECT p.id AS project_id,
                   p.name AS project_name,
                   CAST(AVG(res.attendance_rate) AS float) AS attendance_rate
              FROM imm_attendance_rate_by_cohort({args}) res
              LEFT JOIN projects p ON p.id = res.project_id
             GROUP BY p.id, p.name
            """,
            params,
        )

    async def vulnerability_counts(self) -> List[Mapping[str, Any]]:
        return await self._fetch_all("SELECT slug, label, total FROM view_vulnerabilities_counts")

    async def age_distribution(self) -> List[Mapping[str, Any]]:
        return await self._fetch_all("SELECT bucket, total FROM imm_age_distribution()")

    async def neighborhood_counts(self) -> List[Mapping[str, Any]]:
        return await self._fetch_all("SELECT neighborhood, total FROM view_neighborhood_counts")

    async def project_capacity(self, restriction: ProjectRestriction) -> List[Mapping[str, Any]]:
        qb = SqlPredicateBuilder().restrict_projects(restriction, "project_id")
        return await self._fetch_all(
            f"""
            SELECT project_id, name, ocupadas, capacidade
              FROM view_project_capacity_utilization
             WHERE {qb.where_sql()}
            """,
            qb.params,
        )

    async def action_plan_status_counts(self) -> List[Mapping[str, Any]]:
        return await self._fetch_all("SELECT status, total FROM view_action_items_status_counts")

    # ─────────────────────────────────────────────────────────────
    # Listas
    # ─────────────────────────────────────────────────────────────
    async def at_risk_enrollments(
        self,
        window: DateRange,
        restriction: ProjectRestriction,
        cohort_id: Optional[str],
        limit: int = AT_RISK_LIMIT,
    ) -> List[Mapping[str, Any]]:
        args, params = self._function_args(window, restriction, cohort_id)
        params["limit"] = limit
        return await self._fetch_all(
            f"""
            SELECT sub.enrollment_id,
                   sub.attendance_rate,
                   b.full_name,
                   p.name AS project_name,
                   c.code AS cohort_code
              FROM imm_attendance_rate_by_enrollment({args}) sub
              JOIN enrollments e ON e.id = sub.enrollment_id
              JOIN beneficiaries b ON b.id = e.beneficiary_id
              JOIN cohorts c ON c.id = e.cohort_id
              JOIN projects p ON p.id = c.project_id
             WHERE sub.attendance_rate IS NOT NULL
             ORDER BY sub.attendance_rate ASC
             LIMIT :limit
            """,
            params,
        )

    async def pending_consents(
        self, window: DateRange, restriction: ProjectRestriction, cohort_id: Optional[str]
    ) -> List[Mapping[str, Any]]:
        qb = self._active_enrollments(window, restriction, cohort_id)
        return await self._fetch_all(
            f"""
            WITH base AS (
                SELECT DISTINCT b.id AS beneficiary_id, b.full_name
                  FROM enrollments e
                  JOIN cohorts c ON c.id = e.cohort_id
                  JOIN beneficiaries b ON b.id = e.beneficiary_id
                 WHERE {qb.where_sql()}
            )
            SELECT base.beneficiary_id,
                   base.full_name,
                   'lgpd' AS tipo,
                   CAST(cs.granted_at AS date) AS desde
              FROM base
              LEFT JOIN consents cs ON cs.beneficiary_id = base.beneficiary_id AND cs.type = 'lgpd'
             WHERE cs.id IS NULL OR cs.granted = false OR cs.revoked_at IS NOT NULL
            """,
            qb.params,
        )


__all__ = ["AnalyticsRepository", "AT_RISK_LIMIT"]

# Fin del archivo backend/app/modules/analytics/repositories/analytics_repository.py
