# -*- coding: utf-8 -*-
"""
backend/app/modules/analytics/scope.py

Resolución del alcance de proyectos visible para el usuario.

Reglas:
- Roles habilitados: admin, coordenacao, tecnica, educadora.
- educadora sin proyectos asignados → denegado (sin importar el proyecto pedido).
- Rol elevado o alcance vacío → sin restricción (None, "all"); si además es
  educadora con alcance y pide un proyecto fuera de él → ProjectOutOfScope.
- En otro caso, la lista permitida es el alcance declarado en el token.

scope_key forma parte de la llave de caché: usuarios con alcances distintos
nunca comparten entradas.

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from app.modules.auth.dependencies import AuthenticatedUser

from .errors import AnalyticsAccessDenied, ProjectOutOfScope

ALLOWED_ROLES = frozenset({"admin", "coordenacao", "tecnica", "educadora"})
ELEVATED_ROLES = frozenset({"admin", "coordenacao", "tecnica"})
ALL_PROJECTS_KEY = "all"


@dataclass(frozen=True)
class AnalyticsScope:
    allowed_project_ids: Optional[tuple[str, ...]]
    scope_key: str


def build_scope_key(project_ids: Optional[tuple[str, ...]]) -> str:
    if not project_ids:
        return ALL_PROJECTS_KEY
    return ",".join(sorted(project_ids))


def resolve_analytics_scope(
    user: AuthenticatedUser,
    requested_project_id: Optional[str] = None,
) -> AnalyticsScope:
    """
    Calcula el alcance de analytics para el usuario.

    Raises:
        AnalyticsAccessDenied: sin rol habilitado, o educadora sin alcance.
        ProjectOutOfScope: proyecto pedido fuera del alcance.
    """
    roles = user.roles
    if not roles & ALLOWED_ROLES:
        raise AnalyticsAccessDenied("Analytics access denied")

    scopes = tuple(dict.fromkeys(user.project_scopes))
    is_educadora = "educadora" in roles

    if is_educadora and not scopes:
        raise AnalyticsAccessDenied("Educadora sem escopo de projeto definido")

    if not scopes or roles & ELEVATED_ROLES:
        if is_educadora and scopes and requested_project_id and requested_project_id not in scopes:
            raise ProjectOutOfScope(requested_project_id)
        return AnalyticsScope(allowed_project_ids=None, scope_key=ALL_PROJECTS_KEY)

    if requested_project_id and requested_project_id not in scopes:
        raise ProjectOutOfScope(requested_project_id)

    return AnalyticsScope(allowed_project_ids=scopes, scope_key=build_scope_key(scopes))


__all__ = [
    "ALLOWED_ROLES",
    "ELEVATED_ROLES",
    "AnalyticsScope",
    "build_scope_key",
    "resolve_analytics_scope",
]

# Fin del archivo backend/app/modules/analytics/scope.py
