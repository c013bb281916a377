from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Set, Tuple

from .postgres import PostgresDatabase, load_config_from_env

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> List[Tuple[str, Path]]:
    """
    Sorted (version, path) pairs; 001_create_person_attributes.sql -> "001".
    """
    if not directory.exists():
        raise RuntimeError(f"Migrations directory does not exist: {directory}")

    return [(path.stem.split("_", 1)[0], path) for path in sorted(directory.glob("*.sql"))]


async def _ensure_migrations_table(db: PostgresDatabase) -> None:
    sql = """
    CREATE TABLE IF NOT EXISTS schema_migrations (
        version    TEXT PRIMARY KEY,
        applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    """

    async def _run(conn) -> None:
        await conn.execute(sql)

    await db.with_connection(_run)


async def _get_applied_versions(db: PostgresDatabase) -> Set[str]:
    rows = await db.fetch("SELECT version FROM schema_migrations;")
    return {row["version"] for row in rows}


async def _apply_migration(db: PostgresDatabase, version: str, sql: str) -> None:
    """
    One migration, one transaction: a failing script leaves no trace.
    """
    async def _run(conn) -> None:
        async with conn.transaction():
            await conn.execute(sql)
            await conn.execute(
                "INSERT INTO schema_migrations (version) VALUES ($1);",
                version,
            )

    await db.with_connection(_run)


async def run_migrations(db: PostgresDatabase, directory: Path = MIGRATIONS_DIR) -> List[str]:
    """
    Applies pending migrations in name order; returns the versions applied.
    """
    await _ensure_migrations_table(db)
    applied_versions = await _get_applied_versions(db)

    applied: List[str] = []
    for version, path in discover_migrations(directory):
        if version in applied_versions:
            continue

        logger.info("Applying migration %s from %s", version, path.name)
        await _apply_migration(db, version, path.read_text(encoding="utf-8"))
        applied.append(version)

    logger.info("Migrations completed, %d applied", len(applied))
    return applied


async def _main() -> None:
    db = PostgresDatabase(load_config_from_env())
    await db.connect()
    try:
        await run_migrations(db)
    finally:
        await db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_main())
