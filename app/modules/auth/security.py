# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/security.py

Módulo de seguridad para Auth en IMM:
- Esquema OAuth2 (Bearer)
- Creación / decodificación de JWT (python-jose)
- Configuración leída de settings (JWT_SECRET, JWT_ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES)

Los tokens los emite el servicio de identidad; aquí solo se validan.
create_access_token existe para herramientas internas y tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from app.shared.config import get_settings

# -----------------------------------------------------------------------------
# Esquema OAuth2 para extraer el token de Authorization: Bearer <token>.
# auto_error=False: el 401 lo construye get_current_user con cuerpo estructurado.
# -----------------------------------------------------------------------------
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


class TokenDecodeError(Exception):
    """Error al decodificar/validar un token JWT."""


def _jwt_config() -> tuple[str, str, int]:
    settings = get_settings()
    return (
        settings.jwt_secret_key.get_secret_value(),
        settings.jwt_algorithm,
        settings.access_token_expire_minutes,
    )


def create_access_token(
    subject: Union[str, int],
    expires_delta: Optional[timedelta] = None,
    **claims: Any,
) -> str:
    """
    Crea un JWT con claim 'sub' y claims adicionales (roles, permissions,
    project_scopes, ...).
    """
    secret_key, algorithm, expire_minutes = _jwt_config()
    now = datetime.now(tz=timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=expire_minutes))
    to_encode: Dict[str, Any] = {"sub": str(subject), "iat": int(now.timestamp()), "exp": int(expire.timestamp())}
    if claims:
        to_encode.update(claims)
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decodifica y valida un JWT. Lanza TokenDecodeError si es inválido/expirado.
    """
    secret_key, algorithm, _ = _jwt_config()
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
    except JWTError as e:
        raise TokenDecodeError("Token inválido o expirado") from e

    sub = payload.get("sub")
    if sub is None or not str(sub).strip():
        raise TokenDecodeError("Token sin 'sub'")
    return payload


__all__ = [
    "oauth2_scheme",
    "TokenDecodeError",
    "create_access_token",
    "decode_access_token",
]
# Fin del archivo backend/app/modules/auth/security.py
