from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Dict, FrozenSet, Optional

from persondir.config import build_dao, load_dao_config_from_env
from persondir.infrastructure.db.postgres import PostgresDatabase, load_config_from_env


async def lookup_person_attributes_usecase(
    uid: str,
    single_valued: bool = False,
) -> Optional[Dict[str, Any]]:
    """
    Looks a person up by the default attribute (username by default).
    Returns None when the person does not exist.
    Suitable for both the HTTP endpoint and the CLI.
    """
    dao_config = load_dao_config_from_env()
    db = PostgresDatabase(load_config_from_env())
    await db.connect()

    try:
        dao = build_dao(db, dao_config)
        if single_valued:
            return await dao.get_user_attributes_by_uid(uid)
        return await dao.get_multivalued_user_attributes_by_uid(uid)
    finally:
        await db.close()


async def verify_person_query_usecase() -> None:
    """
    Prepares the configured query on the server once, so a malformed
    template fails at startup instead of on the first lookup.
    """
    dao_config = load_dao_config_from_env()
    db = PostgresDatabase(load_config_from_env())
    await db.connect()

    try:
        dao = build_dao(db, dao_config)
        await dao.query.verify(db)
    finally:
        await db.close()


async def possible_attribute_names_usecase() -> Optional[FrozenSet[str]]:
    """
    Names are known from configuration alone, no connection is opened.
    """
    dao = build_dao(PostgresDatabase(load_config_from_env()), load_dao_config_from_env())
    return dao.get_possible_user_attribute_names()


async def _main_cli(uid: str) -> int:
    attributes = await lookup_person_attributes_usecase(uid)
    if attributes is None:
        print(f"Person not found: {uid}")
        return 1

    print(json.dumps(attributes, ensure_ascii=False, indent=2, default=str))
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: python -m persondir.presentation.usecases.lookup_person_attributes <uid>")
        sys.exit(2)

    logging.basicConfig(level=logging.DEBUG)
    sys.exit(asyncio.run(_main_cli(sys.argv[1])))
