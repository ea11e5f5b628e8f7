# -*- coding: utf-8 -*-
"""
tests/modules/analytics/conftest.py

Dobles de prueba para analytics:
- FakeAnalyticsRepository: filas en memoria, registra llamadas y puede fallar por método
- FakeRedis / FakeRedisManager: cliente Redis en memoria con fallas inyectables
"""

from datetime import date
from typing import Any, Dict, List, Optional

import pytest

PROJECT_A = "11111111-1111-1111-1111-111111111111"
PROJECT_B = "22222222-2222-2222-2222-222222222222"
PROJECT_C = "33333333-3333-3333-3333-333333333333"
COHORT_X = "44444444-4444-4444-4444-444444444444"


class FakeAnalyticsRepository:
    """Repositorio falso con datos deterministas."""

    def __init__(self, fail_on: Optional[set] = None):
        self.fail_on = fail_on or set()
        self.calls: List[tuple] = []
        self.at_risk_rows: List[Dict[str, Any]] = [
            {"full_name": "Ana", "project_name": "Costura", "cohort_code": "T1", "attendance_rate": 0.42},
            {"full_name": "Bia", "project_name": "Costura", "cohort_code": None, "attendance_rate": 0.15},
        ]
        self.pending_rows: List[Dict[str, Any]] = [
            {"beneficiary_id": "b1", "full_name": "Carla", "tipo": "lgpd", "desde": date(2024, 2, 10)},
            {"beneficiary_id": "b2", "full_name": "Duda", "tipo": "lgpd", "desde": None},
        ]

    async def _record(self, name: str, *args):
        self.calls.append((name, args))
        if name in self.fail_on:
            raise RuntimeError(f"{name} failed")

    # KPIs
    async def count_active_beneficiaries(self, window, restriction, cohort_id):
        await self._record("count_active_beneficiaries", window, restriction, cohort_id)
        return 12

    async def count_new_beneficiaries(self, window, restriction, cohort_id):
        await self._record("count_new_beneficiaries", window, restriction, cohort_id)
        return 3

    async def count_active_enrollments(self, window, restriction, cohort_id):
        await self._record("count_active_enrollments", window, restriction, cohort_id)
        return 15

    async def average_attendance(self, window, restriction, cohort_id):
        await self._record("average_attendance", window, restriction, cohort_id)
        return 0.8512

    async def count_pending_consents(self, window, restriction, cohort_id):
        await self._record("count_pending_consents", window, restriction, cohort_id)
        return 2

    # Series
    async def series_new_beneficiaries(self, window, interval, restriction):
        await self._record("series_new_beneficiaries", window, interval, restriction)
        return [{"bucket_date": "2024-03-01", "total": 2}, {"bucket_date": "2024-03-02", "total": 1}]

    async def series_new_enrollments(self, window, interval, restriction, cohort_id):
        await self._record("series_new_enrollments", window, interval, restriction, cohort_id)
        return [{"bucket_date": "2024-03-01", "total": 4}]

    async def series_attendance(self, window, interval, restriction, cohort_id):
        await self._record("series_attendance", window, interval, restriction, cohort_id)
        return [{"bucket_date": "2024-03-01", "rate": 0.5}, {"bucket_date": "2024-03-02", "rate": None}]

    # Categorías
    async def attendance_by_project(self, window, restriction, cohort_id):
        await self._record("attendance_by_project", window, restriction, cohort_id)
        return [
            {"project_id": PROJECT_A, "project_name": "Costura", "attendance_rate": 0.7},
            {"project_id": None, "project_name": None, "attendance_rate": 0.3},
        ]

    async def vulnerability_counts(self):
        await self._record("vulnerability_counts")
        return [{"slug": "renda", "label": "Renda", "total": 5}]

    async def age_distribution(self):
        await self._record("age_distribution")
        return [{"bucket": "18-29", "total": 7}]

    async def neighborhood_counts(self):
        await self._record("neighborhood_counts")
        return [{"neighborhood": "Centro", "total": 9}]

    async def project_capacity(self, restriction):
        await self._record("project_capacity", restriction)
        return [{"project_id": PROJECT_A, "name": "Costura", "ocupadas": 8, "capacidade": None}]

    async def action_plan_status_counts(self):
        await self._record("action_plan_status_counts")
        return [{"status": "pendente", "total": 4}]

    # Listas
    async def at_risk_enrollments(self, window, restriction, cohort_id, limit=10):
        await self._record("at_risk_enrollments", window, restriction, cohort_id)
        return list(self.at_risk_rows)

    async def pending_consents(self, window, restriction, cohort_id):
        await self._record("pending_consents", window, restriction, cohort_id)
        return list(self.pending_rows)

    def called(self, name: str) -> List[tuple]:
        return [args for n, args in self.calls if n == name]


class FakeRedis:
    """Cliente Redis en memoria (get/set con ex)."""

    def __init__(self, fail_get: bool = False, fail_set: bool = False):
        self.store: Dict[str, Any] = {}
        self.ttls: Dict[str, int] = {}
        self.fail_get = fail_get
        self.fail_set = fail_set

    async def get(self, key):
        if self.fail_get:
            raise ConnectionError("redis get down")
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self.fail_set:
            raise ConnectionError("redis set down")
        self.store[key] = value
        self.ttls[key] = ex
        return True


class FakeRedisManager:
    def __init__(self, client: Optional[FakeRedis]):
        self.client = client

    async def get_client(self):
        return self.client


@pytest.fixture
def fake_repository():
    return FakeAnalyticsRepository()


@pytest.fixture
def make_repository():
    """Fábrica: make_repository(fail_on={"metodo"})."""
    return FakeAnalyticsRepository


@pytest.fixture
def make_redis():
    """Fábrica: make_redis(fail_get=True, fail_set=False)."""
    return FakeRedis


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def redis_manager():
    """Fábrica: redis_manager(client) → manager cuyo get_client() devuelve client."""
    return FakeRedisManager
