# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/__init__.py

API pública de auth: validación de JWT y dependencias FastAPI.
"""

from .dependencies import (
    AuthenticatedUser,
    get_current_user,
    require_any_permission,
    validate_jwt_token,
)
from .security import TokenDecodeError, create_access_token, decode_access_token

__all__ = [
    "AuthenticatedUser",
    "get_current_user",
    "require_any_permission",
    "validate_jwt_token",
    "TokenDecodeError",
    "create_access_token",
    "decode_access_token",
]
# Fin del archivo backend/app/modules/auth/__init__.py
