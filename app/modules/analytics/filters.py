# -*- coding: utf-8 -*-
"""
backend/app/modules/analytics/filters.py

Filtros de analytics y composición de predicados SQL.

- OverviewFilters: filtros ya validados + alcance resuelto (inmutable)
- ProjectRestriction: variante explícita de la restricción por proyecto,
  resuelta una sola vez (proyecto explícito > lista permitida > sin restricción)
- SqlPredicateBuilder: acumula cláusulas WHERE y parámetros con nombres
  generados (p0, p1, ...) para usar con sqlalchemy.text()

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Literal, Optional, Tuple

Interval = Literal["day", "week", "month"]


class RestrictionKind(str, enum.Enum):
    SINGLE = "single"
    SCOPED = "scoped"
    UNRESTRICTED = "unrestricted"


@dataclass(frozen=True)
class ProjectRestriction:
    kind: RestrictionKind
    project_ids: Tuple[str, ...] = ()

    @classmethod
    def resolve(
        cls,
        project_id: Optional[str],
        allowed_project_ids: Optional[Tuple[str, ...]],
    ) -> "ProjectRestriction":
        if project_id:
            return cls(RestrictionKind.SINGLE, (project_id,))
        if allowed_project_ids:
            return cls(RestrictionKind.SCOPED, tuple(allowed_project_ids))
        return cls(RestrictionKind.UNRESTRICTED)

    def as_array(self) -> Optional[List[str]]:
        """Argumento uuid[] para las funciones SQL (None = sin restricción)."""
        if self.kind is RestrictionKind.UNRESTRICTED:
            return None
        return list(self.project_ids)


@dataclass(frozen=True)
class OverviewFilters:
    from_: Optional[str] = None
    to: Optional[str] = None
    project_id: Optional[str] = None
    cohort_id: Optional[str] = None
    interval: Interval = "day"
    allowed_project_ids: Optional[Tuple[str, ...]] = None
    scope_key: str = "all"

    def __post_init__(self) -> None:
        # Se normaliza a tupla; una tupla vacía resuelve a UNRESTRICTED en ProjectRestriction.resolve
        if self.allowed_project_ids is not None:
            object.__setattr__(self, "allowed_project_ids", tuple(self.allowed_project_ids))

    @property
    def project_restriction(self) -> ProjectRestriction:
        return ProjectRestriction.resolve(self.project_id, self.allowed_project_ids)

    def with_project(self, project_id: str) -> "OverviewFilters":
        return replace(self, project_id=project_id)


@dataclass
class SqlPredicateBuilder:
    """
    Acumula predicados y parámetros enlazados.

    Los nombres de parámetro se generan en orden, así que cláusula y valor
    nunca se desalinean. Los CAST explícitos evitan el `::tipo` que
    text() confundiría con un bind.
    """

    clauses: List[str] = field(default_factory=list)
    bound: List[Tuple[str, Any]] = field(default_factory=list)

    def bind(self, value: Any) -> str:
        name = f"p{len(self.bound)}"
        self.bound.append((name, value))
        return f":{name}"

    def add(self, clause: str) -> "SqlPredicateBuilder":
        self.clauses.append(clause)
        return self

    def restrict_projects(self, restriction: ProjectRestriction, column: str) -> "SqlPredicateBuilder":
        if restriction.kind is RestrictionKind.SINGLE:
            self.add(f"{column} = CAST({self.bind(restriction.project_ids[0])} AS uuid)")
        elif restriction.kind is RestrictionKind.SCOPED:
            self.add(f"{column} = ANY(CAST({self.bind(list(restriction.project_ids))} AS uuid[]))")
        return self

    def restrict_cohort(self, cohort_id: Optional[str], column: str) -> "SqlPredicateBuilder":
        if cohort_id:
            self.add(f"{column} = CAST({self.bind(cohort_id)} AS uuid)")
        return self

    def where_sql(self) -> str:
        return " AND ".join(self.clauses) if self.clauses else "TRUE"

    @property
    def params(self) -> Dict[str, Any]:
        return dict(self.bound)


__all__ = [
    "Interval",
    "RestrictionKind",
    "ProjectRestriction",
    "OverviewFilters",
    "SqlPredicateBuilder",
]

# Fin del archivo backend/app/modules/analytics/filters.py
