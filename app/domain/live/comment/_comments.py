"""Comment operations."""

import asyncio
from typing import Any

from loguru import logger
from sqlalchemy import select

from app.schemas import Comment, ensure_utc, utc_now

from ...utils.idgen import new_comment_id
from .._base import BaseService
from .comment_models import CommentCreateParams, CommentResponse


class CommentOperations(BaseService):
    """Per-stream comments. Comments are never edited once posted."""

    async def create_comment(
        self,
        user_id: str,
        stream_id: str,
        comment: CommentCreateParams | dict[str, Any],
    ) -> CommentResponse:
        """
        Post a comment by a user on a stream.

        Raises NotFoundError naming the user if the user is absent, otherwise
        naming the stream if the stream is absent.
        """
        params = self._validate_params(CommentCreateParams, comment)

        async with self._storage_errors("creating comment"):
            user, stream = await asyncio.gather(
                self._get_user(user_id),
                self._get_stream(stream_id),
            )
            if user is None:
                raise self._user_not_found(user_id)
            if stream is None:
                raise self._stream_not_found(stream_id)

            record = Comment(
                comment_id=new_comment_id(),
                content=params.content,
                created_at=ensure_utc(params.created_at) if params.created_at else utc_now(),
                user_id=user_id,
                stream_id=stream_id,
            )
            async with self.db.transaction(self.label) as session:
                session.add(record)

        logger.debug(f"Comment {record.comment_id} posted on stream {stream_id} by {user_id}")
        return CommentResponse.model_validate(record)

    async def get_list_of_comments_for_stream(self, stream_id: str) -> list[CommentResponse]:
        """
        Return the stream's comments, newest first.

        Raises NotFoundError if the stream does not exist.
        """
        async with self._storage_errors("fetching comments"):
            if await self._get_stream(stream_id) is None:
                raise self._stream_not_found(stream_id)

            async with self.db.session(self.label) as session:
                comments = (
                    await session.scalars(
                        select(Comment)
                        .where(Comment.stream_id == stream_id)
                        .order_by(Comment.created_at.desc())
                    )
                ).all()

        return [CommentResponse.model_validate(comment) for comment in comments]
