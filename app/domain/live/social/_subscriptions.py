"""Subscription graph operations."""

import asyncio

from loguru import logger
from sqlalchemy import ColumnElement, delete, func, select
from sqlalchemy.exc import IntegrityError

from app.schemas import Subscription, User
from app.utils.app_errors import AppErrorCode, DuplicateEntryError, NotFoundError

from .._base import BaseService
from ..user.user_models import UserResponse
from .social_models import SubscriptionResponse


class SubscriptionOperations(BaseService):
    """Directed follow edges between users."""

    async def _resolve_pair(self, subscribe_from: str, subscribe_to: str) -> None:
        subscriber, target = await asyncio.gather(
            self._get_user(subscribe_from),
            self._get_user(subscribe_to),
        )
        if subscriber is None:
            raise self._user_not_found(subscribe_from)
        if target is None:
            raise self._user_not_found(subscribe_to)

    async def _require_user(self, user_id: str) -> None:
        if await self._get_user(user_id) is None:
            raise self._user_not_found(user_id)

    async def create_subscription(
        self,
        subscribe_from: str,
        subscribe_to: str,
    ) -> SubscriptionResponse:
        """
        Make ``subscribe_from`` follow ``subscribe_to``.

        Raises NotFoundError if either user is absent or both are the same
        user, DuplicateEntryError if the edge already exists.
        """
        async with self._storage_errors("creating subscription"):
            if subscribe_from == subscribe_to:
                errmesg = f"User {subscribe_to} cannot be found as a subscription target"
                logger.error(errmesg)
                raise NotFoundError(errmesg, errcode=AppErrorCode.E_USER_NOT_FOUND)

            await self._resolve_pair(subscribe_from, subscribe_to)

            if await self._subscription_exists(subscribe_from, subscribe_to):
                logger.error(f"Duplicate subscription {subscribe_from} -> {subscribe_to}")
                raise DuplicateEntryError("Duplicate Subscription")

            edge = Subscription(subscriber_id=subscribe_from, subscribe_to_id=subscribe_to)
            try:
                async with self.db.transaction(self.label) as session:
                    session.add(edge)
            except IntegrityError as e:
                if await self._subscription_exists(subscribe_from, subscribe_to):
                    logger.error(f"Duplicate subscription {subscribe_from} -> {subscribe_to}")
                    raise DuplicateEntryError("Duplicate Subscription") from e
                raise

        logger.info(f"User {subscribe_from} subscribed to {subscribe_to}")
        return SubscriptionResponse.model_validate(edge)

    async def _related_users(
        self,
        user_id: str,
        join_on: ColumnElement[bool],
        condition: ColumnElement[bool],
        action: str,
    ) -> list[UserResponse]:
        async with self._storage_errors(action):
            await self._require_user(user_id)

            async with self.db.session(self.label) as session:
                users = (
                    await session.scalars(
                        select(User)
                        .join(Subscription, join_on)
                        .where(condition)
                        .order_by(User.username.asc())
                    )
                ).all()

        return [UserResponse.model_validate(user) for user in users]

    async def get_subscriptions(self, user_id: str) -> list[UserResponse]:
        """Users that ``user_id`` follows, ordered by username."""
        return await self._related_users(
            user_id,
            Subscription.subscribe_to_id == User.user_id,
            Subscription.subscriber_id == user_id,
            "fetching subscriptions",
        )

    async def get_subscribers(self, user_id: str) -> list[UserResponse]:
        """Users following ``user_id``, ordered by username."""
        return await self._related_users(
            user_id,
            Subscription.subscriber_id == User.user_id,
            Subscription.subscribe_to_id == user_id,
            "fetching subscribers",
        )

    async def _count_edges(self, user_id: str, condition: ColumnElement[bool], action: str) -> int:
        async with self._storage_errors(action):
            await self._require_user(user_id)

            async with self.db.session(self.label) as session:
                count = await session.scalar(
                    select(func.count()).select_from(Subscription).where(condition)
                )
        return count or 0

    async def get_number_of_subscriptions(self, user_id: str) -> int:
        return await self._count_edges(
            user_id, Subscription.subscriber_id == user_id, "counting subscriptions"
        )

    async def get_number_of_subscribers(self, user_id: str) -> int:
        return await self._count_edges(
            user_id, Subscription.subscribe_to_id == user_id, "counting subscribers"
        )

    async def delete_subscription(self, subscribe_from: str, subscribe_to: str) -> bool:
        """
        Remove the edge ``subscribe_from`` -> ``subscribe_to``.

        Returns True only when exactly one edge was removed.
        Raises NotFoundError if either user is absent.
        """
        async with self._storage_errors("deleting subscription"):
            await self._resolve_pair(subscribe_from, subscribe_to)

            async with self.db.transaction(self.label) as session:
                result = await session.execute(
                    delete(Subscription)
                    .where(
                        Subscription.subscriber_id == subscribe_from,
                        Subscription.subscribe_to_id == subscribe_to,
                    )
                    .execution_options(synchronize_session=False)
                )

        removed = result.rowcount == 1
        logger.info(f"Unsubscribe {subscribe_from} -> {subscribe_to}: {removed}")
        return removed
