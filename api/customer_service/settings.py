# customer_service/settings.py
"""
Customer Service Settings.
"""
from __future__ import annotations
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, AliasChoices


class Settings(BaseSettings):
    # =========================================================================
    # PostgreSQL Database
    # =========================================================================
    DB_HOST: str = Field(default="localhost", validation_alias="DB_HOST")
    DB_PORT: int = Field(default=5432, validation_alias="DB_PORT")
    DB_NAME: str = Field(default="customer_service", validation_alias="DB_NAME")
    DB_USER: str = Field(default="postgres", validation_alias="DB_USER")
    DB_PASSWORD: str = Field(default="postgres", validation_alias="DB_PASSWORD")

    # Connection pool settings
    DB_POOL_SIZE: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    DB_MAX_OVERFLOW: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")
    DB_ECHO: bool = Field(default=False, validation_alias="DB_ECHO")

    # Full async URL, wins over the DB_* parts (e.g. sqlite+aiosqlite:///./customer.db)
    DATABASE_URL: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "customer_database_url"),
    )
    AUTO_CREATE_SCHEMA: bool = Field(default=False, validation_alias="AUTO_CREATE_SCHEMA")

    # =========================================================================
    # Logging
    # =========================================================================
    LOG_DIR: Path = Field(
        default=(Path(__file__).resolve().parents[2] / "logs"),
        validation_alias=AliasChoices("LOG_DIR", "customer_log_dir"),
    )
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # =========================================================================
    # Auth (tokens are issued by the auth service)
    # =========================================================================
    JWT_SECRET: str = Field(default="change-me", validation_alias="JWT_SECRET")
    JWT_ALGORITHM: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
    # Comma separated, like ALLOWED_ORIGINS
    ADMIN_ROLES: str = Field(default="admin,super_admin,manager", validation_alias="ADMIN_ROLES")
    ALLOWED_ORIGINS: str = Field(
        default="http://localhost:3000,http://localhost:3001",
        validation_alias="ALLOWED_ORIGINS",
    )

    # =========================================================================
    # Back-in-stock notifications
    # =========================================================================
    NOTIFICATION_SERVICE_URL: str = Field(
        default="http://localhost:8006", validation_alias="NOTIFICATION_SERVICE_URL"
    )
    NOTIFICATION_TIMEOUT: float = Field(default=10.0, validation_alias="NOTIFICATION_TIMEOUT")
    RESTOCK_SUBJECT: str = Field(
        default="inventory.product.restocked", validation_alias="RESTOCK_SUBJECT"
    )
    RESTOCK_EVENT_TIMEOUT: float = Field(default=30.0, validation_alias="RESTOCK_EVENT_TIMEOUT")
    BACK_IN_STOCK_CLEANUP_DAYS: int = Field(default=30, validation_alias="BACK_IN_STOCK_CLEANUP_DAYS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def admin_roles(self) -> List[str]:
        return [r.strip().lower() for r in self.ADMIN_ROLES.split(",") if r.strip()]


settings = Settings()
