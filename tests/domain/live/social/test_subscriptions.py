"""Tests for the subscription graph."""

import pytest

from app.domain.live.storage import Storage
from app.utils.app_errors import AppErrorCode, DuplicateEntryError, NotFoundError


@pytest.fixture
async def users(make_user) -> dict:
    return {name: await make_user(name) for name in ("alice", "bob", "carol")}


class TestCreateSubscription:
    async def test_create_subscription_success(self, storage: Storage, users):
        alice, bob = users["alice"], users["bob"]

        edge = await storage.create_subscription(alice.user_id, bob.user_id)

        assert edge.subscriber_id == alice.user_id
        assert edge.subscribe_to_id == bob.user_id
        assert edge.created_at is not None

    async def test_duplicate_subscription(self, storage: Storage, users):
        alice, bob = users["alice"], users["bob"]
        await storage.create_subscription(alice.user_id, bob.user_id)

        with pytest.raises(DuplicateEntryError) as exc_info:
            await storage.create_subscription(alice.user_id, bob.user_id)

        assert exc_info.value.errcode == AppErrorCode.E_DUPLICATE_ENTRY.value
        assert exc_info.value.status_code == 409

    async def test_reverse_edge_is_distinct(self, storage: Storage, users):
        alice, bob = users["alice"], users["bob"]
        await storage.create_subscription(alice.user_id, bob.user_id)

        edge = await storage.create_subscription(bob.user_id, alice.user_id)

        assert edge.subscriber_id == bob.user_id

    async def test_self_subscription_rejected(self, storage: Storage, users):
        alice = users["alice"]

        with pytest.raises(NotFoundError):
            await storage.create_subscription(alice.user_id, alice.user_id)

        assert await storage.get_number_of_subscriptions(alice.user_id) == 0

    async def test_missing_target(self, storage: Storage, users):
        with pytest.raises(NotFoundError):
            await storage.create_subscription(users["alice"].user_id, "us_missing")

    async def test_missing_subscriber(self, storage: Storage, users):
        with pytest.raises(NotFoundError):
            await storage.create_subscription("us_missing", users["alice"].user_id)


class TestListSubscriptions:
    @pytest.fixture
    async def graph(self, storage: Storage, users):
        """alice follows carol and bob; carol follows bob."""
        alice, bob, carol = users["alice"], users["bob"], users["carol"]
        await storage.create_subscription(alice.user_id, carol.user_id)
        await storage.create_subscription(alice.user_id, bob.user_id)
        await storage.create_subscription(carol.user_id, bob.user_id)
        return users

    async def test_subscriptions_sorted_by_username(self, storage: Storage, graph):
        result = await storage.get_subscriptions(graph["alice"].user_id)

        assert [u.username for u in result] == ["bob", "carol"]

    async def test_subscribers_sorted_by_username(self, storage: Storage, graph):
        result = await storage.get_subscribers(graph["bob"].user_id)

        assert [u.username for u in result] == ["alice", "carol"]

    async def test_counts(self, storage: Storage, graph):
        assert await storage.get_number_of_subscriptions(graph["alice"].user_id) == 2
        assert await storage.get_number_of_subscribers(graph["alice"].user_id) == 0
        assert await storage.get_number_of_subscribers(graph["bob"].user_id) == 2
        assert await storage.get_number_of_subscriptions(graph["bob"].user_id) == 0

    async def test_missing_user(self, storage: Storage):
        with pytest.raises(NotFoundError):
            await storage.get_subscriptions("us_missing")
        with pytest.raises(NotFoundError):
            await storage.get_subscribers("us_missing")
        with pytest.raises(NotFoundError):
            await storage.get_number_of_subscriptions("us_missing")
        with pytest.raises(NotFoundError):
            await storage.get_number_of_subscribers("us_missing")


class TestDeleteSubscription:
    async def test_delete_existing_edge(self, storage: Storage, users):
        alice, bob = users["alice"], users["bob"]
        await storage.create_subscription(alice.user_id, bob.user_id)

        assert await storage.delete_subscription(alice.user_id, bob.user_id) is True

        assert await storage.get_subscriptions(alice.user_id) == []

    async def test_delete_absent_edge(self, storage: Storage, users):
        assert await storage.delete_subscription(users["alice"].user_id, users["bob"].user_id) is False

    async def test_delete_only_one_direction(self, storage: Storage, users):
        alice, bob = users["alice"], users["bob"]
        await storage.create_subscription(alice.user_id, bob.user_id)
        await storage.create_subscription(bob.user_id, alice.user_id)

        await storage.delete_subscription(alice.user_id, bob.user_id)

        assert [u.username for u in await storage.get_subscriptions(bob.user_id)] == ["alice"]

    async def test_resubscribe_after_delete(self, storage: Storage, users):
        alice, bob = users["alice"], users["bob"]
        await storage.create_subscription(alice.user_id, bob.user_id)
        await storage.delete_subscription(alice.user_id, bob.user_id)

        edge = await storage.create_subscription(alice.user_id, bob.user_id)

        assert edge.subscribe_to_id == bob.user_id

    async def test_delete_with_missing_user(self, storage: Storage, users):
        with pytest.raises(NotFoundError):
            await storage.delete_subscription(users["alice"].user_id, "us_missing")
