# -*- coding: utf-8 -*-
"""
backend/app/modules/analytics/schemas/analytics_schemas.py

Esquemas (Pydantic v2) del módulo analytics.

- Respuesta del overview: kpis, series, categorias, listas. Los nombres de
  campo JSON son el contrato con el dashboard y no se traducen.
- Query params de cada endpoint (se validan manualmente en las rutas para
  responder 400 con field_errors en lugar del 422 por defecto de FastAPI).

Autor: Equipo IMM
Fecha: 2025-10-24
"""
from __future__ import annotations

import re
import uuid
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
_DATE_RE = re.compile(DATE_PATTERN)

Metric = Literal["beneficiarias", "matriculas", "assiduidade"]
ExportFormat = Literal["csv", "pdf", "xlsx"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)


# ---------------------------------------------------------------------------
# KPIs
# ---------------------------------------------------------------------------
class Kpis(_Frozen):
    beneficiarias_ativas: int = Field(..., ge=0, description="Beneficiárias distintas com matrícula ativa na janela")
    novas_beneficiarias: int = Field(..., ge=0, description="Beneficiárias cadastradas na janela")
    matriculas_ativas: int = Field(..., ge=0, description="Matrículas ativas na janela")
    assiduidade_media: Optional[float] = Field(None, description="Média da taxa de presença (0..1); null sem dados")
    consentimentos_pendentes: int = Field(..., ge=0, description="Beneficiárias ativas sem consentimento LGPD válido")


# ---------------------------------------------------------------------------
# Series
# ---------------------------------------------------------------------------
class SeriesPoint(_Frozen):
    t: str = Field(..., description="Início do bucket (YYYY-MM-DD)")
    v: Optional[Union[int, float]] = Field(None, description="Valor do bucket")


class Series(_Frozen):
    novas_beneficiarias: List[SeriesPoint] = Field(default_factory=list)
    novas_matriculas: List[SeriesPoint] = Field(default_factory=list)
    assiduidade_media: List[SeriesPoint] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Categorias
# ---------------------------------------------------------------------------
class AttendanceByProject(_Frozen):
    projeto: str
    valor: Optional[float] = None


class VulnerabilityCount(_Frozen):
    tipo: str
    qtd: int


class AgeBucketCount(_Frozen):
    faixa: str
    qtd: int


class NeighborhoodCount(_Frozen):
    bairro: str
    qtd: int


class ProjectCapacity(_Frozen):
    projeto: str
    ocupadas: int
    capacidade: int


class ActionPlanStatusCount(_Frozen):
    status: str
    qtd: int


class Categorias(_Frozen):
    assiduidade_por_projeto: List[AttendanceByProject] = Field(default_factory=list)
    vulnerabilidades: List[VulnerabilityCount] = Field(default_factory=list)
    faixa_etaria: List[AgeBucketCount] = Field(default_factory=list)
    bairros: List[NeighborhoodCount] = Field(default_factory=list)
    capacidade_projeto: List[ProjectCapacity] = Field(default_factory=list)
    plano_acao_status: List[ActionPlanStatusCount] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Listas
# ---------------------------------------------------------------------------
class AtRiskEnrollment(_Frozen):
    beneficiaria: str
    projeto: str
    turma: str = ""
    assiduidade: Optional[float] = None


class PendingConsent(_Frozen):
    beneficiaria: str
    tipo: str = "lgpd"
    desde: str = Field(..., description="Data do consentimento (YYYY-MM-DD) ou início da janela")


class Listas(_Frozen):
    risco_evasao: List[AtRiskEnrollment] = Field(default_factory=list)
    consentimentos_pendentes: List[PendingConsent] = Field(default_factory=list)


class OverviewResponse(_Frozen):
    kpis: Kpis
    series: Series
    categorias: Categorias
    listas: Listas


class TimeseriesResponse(BaseModel):
    data: List[SeriesPoint] = Field(default_factory=list)


# Adaptadores para (de)serializar entradas de caché
OVERVIEW_ADAPTER: TypeAdapter[OverviewResponse] = TypeAdapter(OverviewResponse)
SERIES_ADAPTER: TypeAdapter[List[SeriesPoint]] = TypeAdapter(List[SeriesPoint])


# ---------------------------------------------------------------------------
# Query params
# ---------------------------------------------------------------------------
class OverviewQuery(BaseModel):
    """Parámetros comunes: from/to (YYYY-MM-DD), projectId/cohortId (UUID)."""

    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None
    project_id: Optional[str] = Field(None, alias="projectId")
    cohort_id: Optional[str] = Field(None, alias="cohortId")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("from_", "to")
    @classmethod
    def _check_date(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not _DATE_RE.match(v):
            raise ValueError("Invalid date format. Use YYYY-MM-DD.")
        return v

    @field_validator("project_id", "cohort_id")
    @classmethod
    def _check_uuid(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            try:
                uuid.UUID(v)
            except ValueError as e:
                raise ValueError("Invalid uuid") from e
        return v


class TimeseriesQuery(OverviewQuery):
    metric: Metric
    interval: Literal["day", "week", "month"] = "day"


class ExportQuery(OverviewQuery):
    format: ExportFormat = "csv"


class ProjectPath(BaseModel):
    id: str

    @field_validator("id")
    @classmethod
    def _check_uuid(cls, v: str) -> str:
        try:
            uuid.UUID(v)
        except ValueError as e:
            raise ValueError("Invalid uuid") from e
        return v


__all__ = [
    "DATE_PATTERN",
    "Metric",
    "ExportFormat",
    "Kpis",
    "SeriesPoint",
    "Series",
    "AttendanceByProject",
    "VulnerabilityCount",
    "AgeBucketCount",
    "NeighborhoodCount",
    "ProjectCapacity",
    "ActionPlanStatusCount",
    "Categorias",
    "AtRiskEnrollment",
    "PendingConsent",
    "Listas",
    "OverviewResponse",
    "TimeseriesResponse",
    "OVERVIEW_ADAPTER",
    "SERIES_ADAPTER",
    "OverviewQuery",
    "TimeseriesQuery",
    "ExportQuery",
    "ProjectPath",
]

# Fin del archivo backend/app/modules/analytics/schemas/analytics_schemas.py
