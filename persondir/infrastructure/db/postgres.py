from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional, Callable, Awaitable

import asyncpg
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostgresConfig:
    host: str
    port: int
    database: str
    user: str
    password: str
    min_pool_size: int = 1
    max_pool_size: int = 10


def load_config_from_env() -> PostgresConfig:
    """
    Loads PostgreSQL settings from environment variables (and .env).
    Upper layers never see these: they receive a ready PostgresDatabase.
    """
    return PostgresConfig(
        host=os.getenv("DB_HOST", "localhost"),
        port=int(os.getenv("DB_PORT", "5432")),
        database=os.getenv("DB_NAME", "persondir"),
        user=os.getenv("DB_USER", "app_user"),
        password=os.getenv("DB_PASSWORD", "app_password"),
        min_pool_size=int(os.getenv("DB_POOL_MIN_SIZE", "1")),
        max_pool_size=int(os.getenv("DB_POOL_MAX_SIZE", "10")),
    )


class PostgresDatabase:
    """
    Data source backed by an asyncpg connection pool.

    The pool is safe to share between concurrent lookups; every call
    acquires its own connection and releases it when done.
    """

    def __init__(self, config: PostgresConfig) -> None:
        self._config = config
        self._pool: Optional[asyncpg.Pool] = None

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        if self._pool is not None:
            return

        logger.debug(
            "Opening pool to %s:%s/%s",
            self._config.host,
            self._config.port,
            self._config.database,
        )
        self._pool = await asyncpg.create_pool(
            host=self._config.host,
            port=self._config.port,
            database=self._config.database,
            user=self._config.user,
            password=self._config.password,
            min_size=self._config.min_pool_size,
            max_size=self._config.max_pool_size,
        )

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        """
        Run a SELECT and return all rows.
        """
        if self._pool is None:
            raise RuntimeError("PostgresDatabase is not connected")

        async with self._pool.acquire() as connection:
            rows = await connection.fetch(query, *args)
            return list(rows)

    async def with_connection(
        self,
        func: Callable[[asyncpg.Connection], Awaitable[Any]],
    ) -> Any:
        """
        Hands a raw pooled connection to func, e.g. to prepare statements.
        """
        if self._pool is None:
            raise RuntimeError("PostgresDatabase is not connected")

        async with self._pool.acquire() as connection:
            return await func(connection)
