# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_base.py

Base de configuración (Pydantic v2) para el backend IMM.
- Esta clase NO instancia singletons ni resuelve el entorno; eso lo hace config_loader.
- Es la base para settings_dev.py, settings_testing.py y settings_prod.py.

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from typing import Literal, Optional
from pydantic import Field, SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Tipos de entorno soportados
EnvName = Literal["development", "test", "production"]

DEFAULT_CACHE_TTL_SECONDS = 300


class BaseAppSettings(BaseSettings):
    # =========================
    # Núcleo de la aplicación
    # =========================
    python_env: EnvName = Field(default="development", validation_alias="PYTHON_ENV")
    app_name: str = Field(default="IMM Analytics", validation_alias="APP_NAME")
    app_version: str = Field(default="0.1.0", validation_alias="APP_VERSION")
    app_host: str = Field(default="0.0.0.0", validation_alias="APP_HOST")
    app_port: int = Field(default=3333, validation_alias="APP_PORT")

    # =========================
    # Base de datos (PostgreSQL)
    # =========================
    db_user: str = Field(default="postgres", validation_alias="DB_USER")
    db_password: SecretStr = Field(default=SecretStr("postgres"), validation_alias="DB_PASSWORD")
    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=5432, validation_alias="DB_PORT")
    db_name: str = Field(default="imm", validation_alias="DB_NAME")
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")
    db_pool_timeout: int = Field(default=5, validation_alias="DB_POOL_TIMEOUT")
    db_pool_recycle: int = Field(default=1800, validation_alias="DB_POOL_RECYCLE")
    db_echo_sql: bool = Field(default=False, validation_alias="DB_ECHO_SQL")
    db_command_timeout_s: float = Field(default=15.0, validation_alias="DB_COMMAND_TIMEOUT_S")
    db_url: Optional[str] = Field(default=None, validation_alias="DATABASE_URL")

    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        """
        URL de conexión completa para SQLAlchemy + asyncpg.
        Prioriza DATABASE_URL si existe, sino construye desde componentes individuales.
        """
        from urllib.parse import quote_plus

        if self.db_url:
            url = self.db_url
            if url.startswith("postgres://"):
                url = "postgresql+asyncpg://" + url[len("postgres://"):]
            elif url.startswith("postgresql://"):
                url = "postgresql+asyncpg://" + url[len("postgresql://"):]
            return url

        pw = quote_plus(self.db_password.get_secret_value())
        return (
            f"postgresql+asyncpg://{quote_plus(self.db_user)}:{pw}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # =========================
    # Redis / Cache (opcional)
    # =========================
    redis_url: Optional[str] = Field(default=None, validation_alias="REDIS_URL")
    cache_ttl_seconds: int = Field(default=DEFAULT_CACHE_TTL_SECONDS, validation_alias="CACHE_TTL_SECONDS")

    # =========================
    # CORS / Frontend
    # =========================
    allowed_origins: str = Field(default="*", validation_alias="CORS_ORIGINS")

    # =========================
    # Auth / JWT
    # =========================
    jwt_secret_key: SecretStr = Field(default=SecretStr("please-change-me"), validation_alias="JWT_SECRET")
    jwt_algorithm: Literal["HS256", "RS256"] = Field(default="HS256", validation_alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=1440, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # =========================
    # Observabilidad / Logging
    # =========================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: Literal["json", "pretty", "plain"] = Field(default="pretty", validation_alias="LOG_FORMAT")
    metrics_enabled: bool = Field(default=True, validation_alias="METRICS_ENABLED")

    # ===== Helpers de entorno =====
    @computed_field  # type: ignore[misc]
    @property
    def is_dev(self) -> bool:
        return self.python_env == "development"

    @computed_field  # type: ignore[misc]
    @property
    def is_test(self) -> bool:
        return self.python_env == "test"

    @computed_field  # type: ignore[misc]
    @property
    def is_prod(self) -> bool:
        return self.python_env == "production"

    # ===== TTL de caché: inválido o no positivo -> default =====
    @field_validator("cache_ttl_seconds", mode="before")
    @classmethod
    def _normalize_cache_ttl(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_CACHE_TTL_SECONDS
        try:
            ttl = int(v)
        except (TypeError, ValueError):
            return DEFAULT_CACHE_TTL_SECONDS
        return ttl if ttl > 0 else DEFAULT_CACHE_TTL_SECONDS

    # ===== Utilidad para normalizar CORS =====
    def get_cors_origins(self) -> list[str]:
        """Convierte allowed_origins en lista procesable para CORS middleware."""
        if not self.allowed_origins or self.allowed_origins == "*":
            return ["*"]
        # Parsea lista separada por comas, limpia comillas
        return [o.strip().strip('"').strip("'") for o in self.allowed_origins.split(",") if o.strip()]

    def _security_checks(self) -> None:
        """
        Validaciones mínimas de seguridad y coherencia.
        Se invoca desde config_loader tras instanciar el settings.
        """
        import logging
        logger = logging.getLogger(__name__)

        jwt_key = self.jwt_secret_key.get_secret_value()
        weak_jwt = not jwt_key or jwt_key == "please-change-me" or len(jwt_key) < 32

        # JWT en prod: debe ser fuerte
        if self.is_prod and weak_jwt:
            raise ValueError("JWT_SECRET debe tener ≥32 caracteres en producción")

        if self.is_dev and weak_jwt:
            logger.info("JWT_SECRET es débil o usa valor por defecto; considera una clave más segura")

        if not self.redis_url:
            logger.info("REDIS_URL no configurado; caché de analytics deshabilitado")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


__all__ = ["BaseAppSettings", "EnvName", "DEFAULT_CACHE_TTL_SECONDS"]
# Fin del archivo backend/app/shared/config/settings_base.py
