"""Gestión de configuración de la aplicación"""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def is_sqlite_url(url: str) -> bool:
    return url.startswith("sqlite")


class Settings(BaseSettings):
    """Configuración de la aplicación, cargada desde variables de entorno"""

    # Base de datos (SQLite local por defecto, PostgreSQL en Render)
    DATABASE_URL: str = "sqlite+aiosqlite:///./database.sqlite"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    # Crea las tablas al arrancar si no existen
    INIT_DB: bool = True

    # API
    PROJECT_NAME: str = "As Gastronómico API"
    VERSION: str = "1.0.2"
    HOST: str = "0.0.0.0"
    PORT: int = 3001

    # Logs
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: list[str] = ["*"]

    # SSE: segundos sin eventos antes de enviar un comentario keep-alive
    SSE_PING_INTERVAL: float = 15.0
    # Eventos pendientes por cliente antes de descartar
    SSE_MAX_PENDING: int = 100

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def use_async_driver(cls, v: str) -> str:
        """Fuerza el driver asíncrono (Render entrega postgres://...)"""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+asyncpg://", 1)
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v.startswith("sqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v


settings = Settings()
