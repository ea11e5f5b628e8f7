# backend/tests/conftest.py
# -*- coding: utf-8 -*-
"""
Config global de tests para el backend IMM.

- Fuerza PYTHON_ENV=test antes de importar la app (EnvTestingSettings)
- Sin Redis por defecto: el caché opera en modo bypass salvo que el test
  inyecte un cliente falso
- Resetea singletons (settings, DatabaseManager, RedisClientManager) por test
- Fábrica de JWT firmados con la clave de test
"""

import os
import pathlib
import sys

import pytest

os.environ["PYTHON_ENV"] = "test"
os.environ.pop("REDIS_URL", None)
os.environ.pop("DATABASE_URL", None)

# -----------------------------------------------------------------------------
# Asegura .../backend en sys.path
# -----------------------------------------------------------------------------
BACKEND_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


@pytest.fixture(autouse=True)
def reset_singletons():
    """Limpia settings cacheados y singletons de infraestructura."""
    from app.shared.config import get_settings
    from app.shared.database.database import DatabaseManager
    from app.shared.redis.client import RedisClientManager

    get_settings.cache_clear()
    DatabaseManager.reset_instance()
    RedisClientManager.reset_instance()
    yield
    get_settings.cache_clear()
    DatabaseManager.reset_instance()
    RedisClientManager.reset_instance()


@pytest.fixture
def make_token():
    """
    Devuelve una fábrica de JWT de test.

    Uso: make_token(roles=["admin"], permissions=["analytics:read"], project_scopes=[...])
    """
    from app.modules.auth.security import create_access_token

    def _make(
        user_id: str = "user-1",
        roles=("admin",),
        permissions=("analytics:read",),
        project_scopes=(),
        **extra,
    ) -> str:
        return create_access_token(
            user_id,
            roles=list(roles),
            permissions=list(permissions),
            project_scopes=list(project_scopes),
            **extra,
        )

    return _make


@pytest.fixture
def auth_headers(make_token):
    """Headers Bearer para un admin con analytics:read."""
    return {"Authorization": f"Bearer {make_token()}"}

# Fin del archivo backend/tests/conftest.py
