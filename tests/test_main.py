"""Tests for the storage lifespan."""

from app.domain.live.storage import Storage
from app.main import lifespan
from app.shared.storage.database import DatabaseManager


class TestLifespan:
    async def test_yields_working_storage(self, database: DatabaseManager):
        async with lifespan("default") as storage:
            assert isinstance(storage, Storage)

            user = await storage.create_user(
                {"username": "alice", "email": "alice@example.com", "password": "pw"}
            )
            assert await storage.get_user_by_id(user.user_id) is not None

    async def test_engines_closed_on_exit(self, database: DatabaseManager):
        async with lifespan("default"):
            database.get_engine("default")
            assert "default" in database._engines

        assert "default" not in database._engines

    async def test_storage_bound_to_label(self, database: DatabaseManager):
        async with lifespan("default") as storage:
            assert storage._users.label == "default"
            assert storage._comments.db is database
