"""Tests for table synchronization at startup."""

import sqlite3

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import OperationalError

from app.schemas import Base, init_schema
from app.schemas.init import _is_missing_table
from app.shared.storage.database import DatabaseManager


class TestInitSchema:
    async def test_creates_all_tables(self, database: DatabaseManager):
        async with database.get_engine().connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: sa_inspect(sync_conn).get_table_names())

        assert set(tables) == {"user", "stream", "view", "subscription", "comment"}

    async def test_idempotent(self, database: DatabaseManager):
        assert await init_schema("default") is True
        assert await init_schema("default") is True

    async def test_unreachable_database_does_not_raise(self, database: DatabaseManager, tmp_path):
        database.register("broken", f"sqlite:///{tmp_path / 'missing-dir' / 'live.db'}")
        try:
            assert await init_schema("broken") is False
        finally:
            await database.close_engine("broken")

    def test_metadata_has_active_view_index(self):
        indexes = {ix.name: ix for ix in Base.metadata.tables["view"].indexes}

        assert indexes["uq_view_active_session"].unique


class TestMissingTableDetection:
    def test_sqlite_missing_table(self):
        err = OperationalError("SELECT 1", {}, sqlite3.OperationalError("no such table: user"))

        assert _is_missing_table(err)

    def test_postgres_sqlstate(self):
        class UndefinedTable(Exception):
            sqlstate = "42P01"

        err = OperationalError("SELECT 1", {}, UndefinedTable("relation does not exist"))

        assert _is_missing_table(err)

    def test_other_errors(self):
        err = OperationalError("SELECT 1", {}, sqlite3.OperationalError("disk I/O error"))

        assert not _is_missing_table(err)
        assert not _is_missing_table(ValueError("no such table"))
