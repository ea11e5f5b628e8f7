# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/dependencies.py

Dependencias de autenticación JWT para FastAPI.

Provee:
- AuthenticatedUser: identidad + roles + permisos + alcance de proyectos
- validate_jwt_token: valida el token y construye AuthenticatedUser (única fuente de verdad)
- get_current_user: dependencia FastAPI con oauth2_scheme
- require_any_permission: fábrica de dependencias (estrategia "any")

Claims esperados: sub, roles (str u objetos {"slug": ...}), permissions,
project_scopes (se acepta projectScopes como alias).

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional

from fastapi import Depends

from app.shared.utils.http_exceptions import ForbiddenException, UnauthorizedException

from .security import oauth2_scheme, decode_access_token, TokenDecodeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedUser:
    """Usuario autenticado, inmutable durante el request."""

    user_id: str
    roles: frozenset[str] = frozenset()
    permissions: frozenset[str] = frozenset()
    project_scopes: tuple[str, ...] = ()

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def has_any_permission(self, permissions: Iterable[str]) -> bool:
        return any(p in self.permissions for p in permissions)


def _as_str_list(value: Any, *, key: str = "slug") -> list[str]:
    """Normaliza un claim de lista: str u objetos {key: ...}; sin duplicados, orden preservado."""
    if not isinstance(value, (list, tuple)):
        return []
    out: list[str] = []
    for item in value:
        if isinstance(item, dict):
            item = item.get(key)
        if isinstance(item, str) and item and item not in out:
            out.append(item)
    return out


def user_from_claims(payload: Dict[str, Any]) -> AuthenticatedUser:
    scopes = payload.get("project_scopes")
    if scopes is None:
        scopes = payload.get("projectScopes")
    return AuthenticatedUser(
        user_id=str(payload["sub"]),
        roles=frozenset(_as_str_list(payload.get("roles"))),
        permissions=frozenset(_as_str_list(payload.get("permissions"))),
        project_scopes=tuple(_as_str_list(scopes, key="id")),
    )


def _invalid_token(message: str) -> UnauthorizedException:
    return UnauthorizedException(detail={"error": "invalid_token", "message": message})


def validate_jwt_token(token: Optional[str]) -> AuthenticatedUser:
    """
    Valida un JWT y construye el AuthenticatedUser.

    Raises:
        UnauthorizedException 401: token ausente, inválido o expirado.
    """
    if not token:
        raise _invalid_token("Missing bearer token")
    try:
        payload = decode_access_token(token)
    except TokenDecodeError as e:
        logger.debug("jwt_rejected error=%s", e)
        raise _invalid_token(str(e)) from e
    return user_from_claims(payload)


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
) -> AuthenticatedUser:
    """
    Dependencia de autenticación para endpoints protegidos.

    Extrae y valida el JWT del header Authorization: Bearer <token>.
    """
    return validate_jwt_token(token)


def require_any_permission(*permissions: str) -> Callable[..., Any]:
    """
    Fábrica de dependencias: exige al menos uno de los permisos indicados.

    Raises:
        ForbiddenException 403: el usuario no tiene ninguno.
    """
    required = tuple(permissions)

    async def _dependency(
        user: AuthenticatedUser = Depends(get_current_user),
    ) -> AuthenticatedUser:
        if not user.has_any_permission(required):
            logger.info(
                "permission_denied user_id=%s required=%s",
                user.user_id,
                ",".join(required),
            )
            raise ForbiddenException(
                detail={
                    "error": "forbidden",
                    "message": "Missing required permission",
                }
            )
        return user

    return _dependency


__all__ = [
    "AuthenticatedUser",
    "user_from_claims",
    "validate_jwt_token",
    "get_current_user",
    "require_any_permission",
]
# Fin del archivo backend/app/modules/auth/dependencies.py
