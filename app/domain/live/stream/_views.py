"""Viewer presence operations."""

import asyncio
from datetime import datetime

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.schemas import User, View, utc_now

from ...utils.idgen import new_view_id
from .._base import BaseService
from ..update_guard import apply_update
from ..user.user_models import UserResponse
from .stream_models import ViewResponse


class ViewOperations(BaseService):
    """Tracks which users are currently watching which streams."""

    async def create_view(self, user_id: str, stream_id: str) -> ViewResponse:
        """
        Record that a user started watching a stream.

        If the user already has an active view of the stream, that view is
        returned unchanged.

        Raises NotFoundError if the user or the stream does not exist.
        """
        async with self._storage_errors("creating view"):
            user, stream = await asyncio.gather(
                self._get_user(user_id),
                self._get_stream(stream_id),
            )
            if user is None:
                raise self._user_not_found(user_id)
            if stream is None:
                raise self._stream_not_found(stream_id)

            existing = await self._get_active_view(user_id, stream_id)
            if existing is not None:
                logger.debug(f"User {user_id} is already viewing stream {stream_id}")
                return ViewResponse.model_validate(existing)

            view = View(view_id=new_view_id(), user_id=user_id, stream_id=stream_id)
            try:
                async with self.db.transaction(self.label) as session:
                    session.add(view)
            except IntegrityError:
                # Lost the race against a concurrent join of the same viewer
                winner = await self._get_active_view(user_id, stream_id)
                if winner is None:
                    raise
                return ViewResponse.model_validate(winner)

        logger.info(f"User {user_id} started viewing stream {stream_id}")
        return ViewResponse.model_validate(view)

    async def close_view(
        self,
        user_id: str,
        stream_id: str,
        ended_at: datetime | None = None,
    ) -> ViewResponse | None:
        """
        End the user's active view of a stream.

        Returns the closed view, or None when the user is not watching.
        """
        async with self._storage_errors("closing view"):
            async with self.db.transaction(self.label) as session:
                view = await session.scalar(
                    select(View).where(
                        View.user_id == user_id,
                        View.stream_id == stream_id,
                        View.ended_at.is_(None),
                    )
                )
                if view is None:
                    logger.info(f"No active view of stream {stream_id} by user {user_id}")
                    return None

                apply_update(view, {"ended_at": ended_at or utc_now()})

        logger.info(f"User {user_id} stopped viewing stream {stream_id}")
        return ViewResponse.model_validate(view)

    async def get_list_of_users_viewing_stream(self, stream_id: str) -> list[UserResponse]:
        """
        Return users with an active view of the stream, ordered by username.

        Raises NotFoundError if the stream does not exist.
        """
        async with self._storage_errors("fetching viewers of stream"):
            if await self._get_stream(stream_id) is None:
                raise self._stream_not_found(stream_id)

            async with self.db.session(self.label) as session:
                users = (
                    await session.scalars(
                        select(User)
                        .join(View, View.user_id == User.user_id)
                        .where(View.stream_id == stream_id, View.ended_at.is_(None))
                        .order_by(User.username.asc())
                    )
                ).all()

        return [UserResponse.model_validate(user) for user in users]

    async def get_total_number_of_users_viewed_stream(self, stream_id: str) -> int:
        """Count active views of the stream. Unknown streams count as 0."""
        async with self._storage_errors("counting viewers of stream"):
            async with self.db.session(self.label) as session:
                count = await session.scalar(
                    select(func.count())
                    .select_from(View)
                    .where(View.stream_id == stream_id, View.ended_at.is_(None))
                )
        return count or 0
