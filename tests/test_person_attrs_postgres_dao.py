"""
Tests for the SQL-backed person attribute DAO.
"""

from __future__ import annotations

import asyncio

import pytest

from persondir.errors import InvalidArgumentError, QueryCompilationError
from persondir.infrastructure.repositories.person_attrs_postgres_dao import (
    PersonAttributesPostgresDao,
)
from persondir.infrastructure.repositories.row_parsers import SingleRowAttributeParser

from .conftest import FakeDatabase


class TestConstruction:
    def test_none_query_attributes_rejected(self, fake_db):
        with pytest.raises(InvalidArgumentError):
            PersonAttributesPostgresDao(
                fake_db, None, "SELECT 1 WHERE x = $1", SingleRowAttributeParser()
            )

    def test_placeholder_count_mismatch_fails_fast(self, fake_db):
        with pytest.raises(QueryCompilationError):
            PersonAttributesPostgresDao(
                fake_db,
                ["username", "domain"],
                "SELECT * FROM person_attributes WHERE username = $1",
                SingleRowAttributeParser(),
            )
        assert fake_db.calls == []

    def test_query_attributes_are_copied(self, fake_db):
        attrs = ["username"]
        dao = PersonAttributesPostgresDao(
            fake_db, attrs, "SELECT * FROM t WHERE username = $1", SingleRowAttributeParser()
        )
        attrs.append("domain")

        assert dao.query_attributes == ("username",)

    def test_empty_query_attributes_fall_back_to_default_attribute(self, fake_db):
        dao = PersonAttributesPostgresDao(
            fake_db,
            [],
            "SELECT * FROM t WHERE uid = $1",
            SingleRowAttributeParser(),
            default_attribute_name="uid",
        )

        assert dao.query_attributes == ("uid",)

    def test_repr_mentions_query_and_attributes(self, username_dao):
        text = repr(username_dao)
        assert "username = $1" in text
        assert "['username']" in text


class TestLookup:
    @pytest.mark.asyncio
    async def test_example_lookup(self):
        db = FakeDatabase(lambda args: [{"username": "alice", "email": "a@x.com"}])
        dao = PersonAttributesPostgresDao(
            db,
            ["username"],
            "SELECT username, email FROM person_attributes WHERE username = $1",
            SingleRowAttributeParser({"email": "email"}),
        )

        result = await dao.get_multivalued_user_attributes({"username": "alice"})

        assert result == {"email": ["a@x.com"]}
        assert db.calls[0][1] == ("alice",)

    @pytest.mark.asyncio
    async def test_missing_required_key_returns_none_without_query(self, username_dao, fake_db):
        result = await username_dao.get_multivalued_user_attributes({"other": "x"})

        assert result is None
        assert fake_db.calls == []

    @pytest.mark.asyncio
    async def test_no_matching_row_returns_none(self, username_dao):
        assert await username_dao.get_multivalued_user_attributes({"username": "ghost"}) is None

    @pytest.mark.asyncio
    async def test_row_without_attributes_returns_empty_map(self, username_dao):
        result = await username_dao.get_multivalued_user_attributes({"username": "bob"})

        assert result == {}
        assert result is not None

    @pytest.mark.asyncio
    async def test_seed_is_not_unioned_into_result(self, username_dao):
        result = await username_dao.get_multivalued_user_attributes(
            {"username": "alice", "phone": "555-1212"}
        )

        assert "phone" not in result
        assert "username" not in result

    @pytest.mark.asyncio
    async def test_none_seed_raises_before_query(self, username_dao, fake_db):
        with pytest.raises(InvalidArgumentError):
            await username_dao.get_multivalued_user_attributes(None)
        with pytest.raises(InvalidArgumentError):
            await username_dao.get_user_attributes(None)

        assert fake_db.calls == []

    @pytest.mark.asyncio
    async def test_binding_follows_configured_order(self):
        db = FakeDatabase(lambda args: [])
        dao = PersonAttributesPostgresDao(
            db,
            ["domain", "username", "tenant"],
            "SELECT * FROM people WHERE domain = $1 AND username = $2 AND tenant = $3",
            SingleRowAttributeParser(),
        )

        await dao.get_multivalued_user_attributes(
            {"tenant": "t1", "username": ["alice"], "extra": "x", "domain": "example.org"}
        )

        assert db.calls[0][1] == ("example.org", "alice", "t1")

    @pytest.mark.asyncio
    async def test_uid_lookup_uses_default_attribute(self, username_dao, fake_db):
        result = await username_dao.get_multivalued_user_attributes_by_uid("alice")

        assert result == {"email": ["a@x.com"], "displayName": ["Alice"]}
        assert fake_db.calls[0][1] == ("alice",)

    @pytest.mark.asyncio
    async def test_single_valued_lookup(self, username_dao):
        assert await username_dao.get_user_attributes({"username": "alice"}) == {
            "email": "a@x.com",
            "displayName": "Alice",
        }
        assert await username_dao.get_user_attributes_by_uid("ghost") is None
        assert await username_dao.get_user_attributes_by_uid("bob") == {}

    @pytest.mark.asyncio
    async def test_database_errors_propagate(self):
        def boom(args):
            raise ConnectionError("pool is gone")

        dao = PersonAttributesPostgresDao(
            FakeDatabase(boom),
            ["username"],
            "SELECT * FROM t WHERE username = $1",
            SingleRowAttributeParser(),
        )

        with pytest.raises(ConnectionError):
            await dao.get_multivalued_user_attributes({"username": "alice"})

    @pytest.mark.asyncio
    async def test_concurrent_lookups_do_not_interfere(self):
        db = FakeDatabase(lambda args: [{"email": f"{args[0]}@x.com"}], delay=0.01)
        dao = PersonAttributesPostgresDao(
            db,
            ["username"],
            "SELECT email FROM t WHERE username = $1",
            SingleRowAttributeParser(),
        )

        results = await asyncio.gather(
            *(dao.get_multivalued_user_attributes({"username": f"user{i}"}) for i in range(10))
        )

        assert results == [{"email": [f"user{i}@x.com"]} for i in range(10)]


class TestPossibleAttributeNames:
    def test_from_parser_mapping(self, username_dao):
        assert username_dao.get_possible_user_attribute_names() == frozenset(
            {"email", "displayName"}
        )

    def test_unknown_without_mapping(self, fake_db):
        dao = PersonAttributesPostgresDao(
            fake_db, ["username"], "SELECT * FROM t WHERE username = $1", SingleRowAttributeParser()
        )
        assert dao.get_possible_user_attribute_names() is None

    def test_explicit_names_win(self, fake_db):
        dao = PersonAttributesPostgresDao(
            fake_db,
            ["username"],
            "SELECT * FROM t WHERE username = $1",
            SingleRowAttributeParser(),
            possible_attribute_names=["mail", "cn"],
        )
        assert dao.get_possible_user_attribute_names() == frozenset({"mail", "cn"})
