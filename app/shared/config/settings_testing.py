# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_testing.py

Overrides para entorno de PRUEBAS (test) usando Pydantic v2.
Busca ser determinista: logging moderado, base de datos aislada
y caché deshabilitado salvo que el test lo configure.

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from pydantic import SecretStr
from .settings_base import BaseAppSettings
from pydantic_settings import SettingsConfigDict


class EnvTestingSettings(BaseAppSettings):
    # --- Identidad de entorno ---
    python_env: str = "test"

    # --- Logging en test: menos ruido ---
    log_level: str = "WARNING"
    log_format: str = "pretty"

    # --- Base de datos: usar DB separada para pruebas ---
    db_name: str = "imm_test"

    # --- Auth: clave fija para firmar tokens en tests ---
    jwt_secret_key: SecretStr = SecretStr("test-secret-imm-123456789012345678901234567890")

    # --- Métricas: sin middleware Prometheus en tests ---
    metrics_enabled: bool = False

    model_config = SettingsConfigDict(
        env_file=".env.test",
        env_file_encoding="utf-8",
        extra="ignore",
    )


__all__ = ["EnvTestingSettings"]
# Fin del archivo backend/app/shared/config/settings_testing.py
