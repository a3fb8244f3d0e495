# social_api/core/database.py
from typing import Any, AsyncGenerator
from sqlalchemy import text
from sqlalchemy.pool import StaticPool
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker, AsyncSession
from social_api.core.config import settings


class DatabaseHelper:
    def __init__(
            self,
            url: str,
            echo: bool = True,
            pool_size: int = 5,
            max_overflow: int = 10,
    ):
        engine_kwargs: dict[str, Any] = {}
        if url.startswith("sqlite"):
            if ":memory:" in url or url.endswith("://"):
                # SQLite в памяти живет, пока открыто соединение, поэтому оно одно на процесс
                engine_kwargs.update(
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False},
                )
        else:
            engine_kwargs.update(pool_size=pool_size, max_overflow=max_overflow)

        self.engine: AsyncEngine = create_async_engine(url=url, echo=echo, **engine_kwargs)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
        )

    async def ping(self) -> int:
        """Проверка соединения: SELECT 1"""
        async with self.session_factory() as session:
            result = await session.execute(text("SELECT 1"))
            return result.scalar()

    async def dispose(self):
        """Закрывает все соединения с базой данных"""
        await self.engine.dispose()

    async def session_getter(self) -> AsyncGenerator[AsyncSession, None]:
        """Генератор для получения сессии БД в FastAPI зависимостях"""
        async with self.session_factory() as session:
            yield session


db_helper = DatabaseHelper(
    url=settings.db.DATABASE_URL,
    echo=settings.db.DB_ECHO,
    pool_size=settings.db.DB_POOL_SIZE,
    max_overflow=settings.db.DB_MAX_OVERFLOW,
)
