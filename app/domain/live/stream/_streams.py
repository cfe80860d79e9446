"""Stream operations."""

from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from app.app_config import get_app_environ_config
from app.schemas import Stream, User
from app.utils.app_errors import DuplicateEntryError

from ...utils.idgen import new_room_id, new_stream_id, new_stream_key
from .._base import BaseService
from ..params import ListFilters, map_params
from ..update_guard import apply_update
from .stream_models import StreamCreateParams, StreamResponse


class StreamOperations(BaseService):
    """Stream-related operations."""

    async def create_stream(
        self,
        user_id: str,
        stream_attributes: StreamCreateParams | dict[str, Any] | None = None,
    ) -> StreamResponse:
        """
        Create a stream owned by the given user.

        Owner lookup, insert and ownership link share one transaction, so a
        failure at any step leaves nothing behind.

        Raises NotFoundError if the user does not exist, DuplicateEntryError on
        a stream key conflict.
        """
        params = self._validate_params(StreamCreateParams, stream_attributes or {})
        stream_id = new_stream_id()

        async with self._storage_errors("creating stream"):
            try:
                async with self.db.transaction(self.label) as session:
                    user = await session.get(User, user_id)
                    if user is None:
                        raise self._user_not_found(user_id)

                    stream = Stream(
                        stream_id=stream_id,
                        title=params.title,
                        stream_key=params.stream_key or new_stream_key(),
                        room_id=params.room_id or new_room_id(),
                        live=params.live,
                        streamer_id=user.user_id,
                    )
                    logger.debug(f"Creating stream {stream_id} for user {user_id}")
                    session.add(stream)
            except IntegrityError as e:
                if not self._is_unique_violation(e):
                    raise
                logger.error(f"Error in creating stream for user {user_id}: {e.orig}")
                raise DuplicateEntryError(f"Stream key already in use: {params.stream_key}") from e

        created = await self.get_stream_by_id(stream_id)
        if created is None:
            raise self._stream_not_found(stream_id)
        return created

    async def get_stream_by_id(self, stream_id: str) -> StreamResponse | None:
        """Return the stream joined with its streamer, or None if absent."""
        async with self._storage_errors("retrieving stream"):
            async with self.db.session(self.label) as session:
                stream = await session.scalar(
                    select(Stream)
                    .options(joinedload(Stream.streamer))
                    .where(Stream.stream_id == stream_id)
                )

        if stream is None:
            return None
        return StreamResponse.model_validate(stream)

    async def get_list_of_streams(
        self,
        filters: ListFilters | dict[str, Any] | None = None,
    ) -> list[StreamResponse]:
        """
        Return streams filtered by liveness state and sorted with options.

        When the primary sort key is not the creation time, ties are broken by
        creation time, newest first.
        """
        directives = map_params(filters, default_order=get_app_environ_config().DEFAULT_STREAM_ORDER)  # type: ignore[arg-type]
        column = getattr(Stream, directives.sort_field)

        query = select(Stream).options(joinedload(Stream.streamer))
        if directives.live is not None:
            query = query.where(Stream.live == directives.live)

        order_by = [column.desc() if directives.descending else column.asc()]
        if directives.sort_field != "created_at":
            order_by.append(Stream.created_at.desc())

        async with self._storage_errors("fetching list of streams"):
            async with self.db.session(self.label) as session:
                streams = (await session.scalars(query.order_by(*order_by))).all()

        return [StreamResponse.model_validate(stream) for stream in streams]

    async def update_stream(
        self,
        stream_id: str,
        new_attributes: Mapping[str, Any] | BaseModel,
    ) -> StreamResponse:
        """
        Update only the given fields of a stream.

        Raises NotFoundError if the stream does not exist, InvalidColumnError if
        a field is not a stream column, DuplicateEntryError on a key conflict.
        """
        async with self._storage_errors("updating stream"):
            try:
                async with self.db.transaction(self.label) as session:
                    stream = await session.get(
                        Stream, stream_id, options=[joinedload(Stream.streamer)]
                    )
                    if stream is None:
                        raise self._stream_not_found(stream_id)

                    changed_keys = apply_update(stream, new_attributes)
                    logger.debug(f"Updating stream {stream_id}: {changed_keys}")
            except IntegrityError as e:
                if not self._is_unique_violation(e):
                    raise
                logger.error(f"Error in updating stream {stream_id}: {e.orig}")
                raise DuplicateEntryError(f"Update of stream {stream_id} conflicts with an existing stream") from e

        return StreamResponse.model_validate(stream)
