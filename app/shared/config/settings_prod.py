# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_prod.py

Overrides para entorno de PRODUCCIÓN usando Pydantic v2.
Fuerza lectura solo desde variables de entorno / secret stores
y activa logging estable (INFO en JSON).

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from typing import Literal
from .settings_base import BaseAppSettings
from pydantic_settings import SettingsConfigDict


class ProdSettings(BaseAppSettings):
    # --- Identidad de entorno ---
    python_env: Literal["development", "test", "production"] = "production"

    # --- Logging en prod: nivel estable y formato estructurado ---
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "pretty", "plain"] = "json"

    # Nota: _security_checks exige JWT_SECRET fuerte en producción.

    model_config = SettingsConfigDict(
        env_file=None,  # No leemos .env en producción
        extra="ignore",
    )


__all__ = ["ProdSettings"]
# Fin del archivo backend/app/shared/config/settings_prod.py
