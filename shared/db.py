# shared/db.py
import asyncio
import enum
import logging
from typing import AsyncIterator, Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from shared.config import Settings, settings

logger = logging.getLogger(__name__)

Base = declarative_base()


class StorageUnavailableError(RuntimeError):
    """The database could not be reached or prepared."""


class ProviderState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class ConnectionProvider:
    """
    Holds the process-wide connection pool.

    The pool is created on first use. Concurrent first callers queue on a
    lock, so exactly one engine is built and the table check runs once.
    A failed start leaves nothing behind and the next call starts over.
    """

    def __init__(self, config: Settings):
        self.config = config
        self.state = ProviderState.UNINITIALIZED
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker] = None
        self._lock = asyncio.Lock()

    def _create_engine(self) -> AsyncEngine:
        return create_async_engine(
            self.config.database_url,
            pool_size=self.config.db_pool_size,
            max_overflow=0,
            pool_timeout=self.config.db_pool_timeout,
            pool_recycle=self.config.db_pool_recycle,
            pool_pre_ping=True,
        )

    async def acquire(self) -> AsyncEngine:
        if self._engine is not None:
            return self._engine

        async with self._lock:
            # Another caller may have finished while we waited
            if self._engine is not None:
                return self._engine

            self.state = ProviderState.INITIALIZING
            logger.info("Creating new database connection pool")
            engine = None
            try:
                # A bad URL or a missing driver fails here, before any connect
                engine = self._create_engine()
                async with engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
            except (SQLAlchemyError, OSError, ImportError) as e:
                logger.error(f"Database connection failed: {e}")
                self.state = ProviderState.FAILED
                if engine is not None:
                    await engine.dispose()
                raise StorageUnavailableError(str(e)) from e

            self._engine = engine
            self._sessionmaker = async_sessionmaker(engine, expire_on_commit=False)
            self.state = ProviderState.READY
            logger.info("Database connected successfully")
            return engine

    async def sessionmaker(self) -> async_sessionmaker:
        await self.acquire()
        return self._sessionmaker

    async def release(self) -> None:
        async with self._lock:
            if self._engine is None:
                return
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None
            self.state = ProviderState.UNINITIALIZED
            logger.info("Database connection pool closed")


provider = ConnectionProvider(settings)


def get_provider() -> ConnectionProvider:
    return provider


async def get_db(
    connections: ConnectionProvider = Depends(get_provider),
) -> AsyncIterator[AsyncSession]:
    try:
        session_factory = await connections.sessionmaker()
    except StorageUnavailableError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database connection failed"
        )

    async with session_factory() as session:
        yield session
