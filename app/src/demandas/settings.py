from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=(".env", "../.env"), env_file_encoding="utf-8")

    DATABASE_URL: str = "sqlite:///./data/demandas.db"
    ENVIRONMENT: str = "development"
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    BACKUP_DIR: str = "./data/backups"
    BACKUP_INTERVAL_SECONDS: int = 6 * 60 * 60
    BACKUP_CLEANUP_INTERVAL_SECONDS: int = 24 * 60 * 60
    BACKUP_RETENTION: int = 10
    BACKUP_SCHEDULER_ENABLED: bool = True

    TASK_QUEUE_BACKEND: str = "inline"
    REDIS_URL: str = "redis://redis:6379/0"

    BCRYPT_ROUNDS: int = 12
    SEED_USERS_ON_STARTUP: bool = True
    SEED_PASSWORD_FUNCIONARIO: str = "123456"
    SEED_PASSWORD_GESTOR: str = "admin123"
    DEFAULT_GESTOR_ID: int = 99

    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000,http://0.0.0.0:3000"
    LOG_LEVEL: str = "INFO"

    @field_validator("TASK_QUEUE_BACKEND", mode="before")
    @classmethod
    def normalize_backend(cls, v):
        if v is None:
            return "inline"
        return str(v).strip().lower() or "inline"

    @property
    def cors_origins(self) -> list[str]:
        return [item.strip() for item in self.CORS_ORIGINS.split(",") if item.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()
