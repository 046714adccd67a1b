"""Gestión de sesiones asíncronas de base de datos"""
import logging
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import is_sqlite_url, settings
from app.db.base import Base

logger = logging.getLogger(__name__)


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignora ON DELETE CASCADE / SET NULL salvo con este PRAGMA"""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str = settings.DATABASE_URL) -> AsyncEngine:
    if is_sqlite_url(url):
        engine = create_async_engine(url, echo=settings.DB_ECHO)
        enable_sqlite_foreign_keys(engine)
        return engine

    return create_async_engine(
        url,
        echo=settings.DB_ECHO,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        # Compatibilidad con poolers tipo PgBouncer
        connect_args={"statement_cache_size": 0},
    )


engine = build_engine()

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependencia que entrega una sesión por request.

    La sesión se cierra en cualquier salida, incluso con error; una
    transacción sin commit se descarta al cerrar.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db(target: AsyncEngine = engine) -> None:
    """Crea las tablas que falten (equivalente a CREATE TABLE IF NOT EXISTS)"""
    import app.models  # noqa: F401  registra los modelos en Base.metadata

    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("✅ Base de datos inicializada correctamente")
