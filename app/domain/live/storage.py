"""Storage facade - one entry point for users, streams, presence, subscriptions and comments."""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from app.shared.storage.database import DatabaseManager

from .comment._comments import CommentOperations
from .comment.comment_models import CommentCreateParams, CommentResponse
from .params import ListFilters
from .social._subscriptions import SubscriptionOperations
from .social.social_models import SubscriptionResponse
from .stream._streams import StreamOperations
from .stream._views import ViewOperations
from .stream.stream_models import StreamCreateParams, StreamResponse, ViewResponse
from .user._users import UserOperations
from .user.user_models import UserCreateParams, UserResponse

Filters = ListFilters | dict[str, Any] | None


class Storage:
    """Batch-oriented storage service."""

    def __init__(self, label: str | None = None, db: DatabaseManager | None = None):
        self._users = UserOperations(label=label, db=db)
        self._streams = StreamOperations(label=label, db=db)
        self._views = ViewOperations(label=label, db=db)
        self._subscriptions = SubscriptionOperations(label=label, db=db)
        self._comments = CommentOperations(label=label, db=db)

    # ==================== USERS ====================

    async def create_user(self, attributes: UserCreateParams | dict[str, Any]) -> UserResponse:
        """Create a user.

        Raises DuplicateEntryError if username, email or platform identity is taken.
        """
        return await self._users.create_user(attributes=attributes)

    async def get_user_by_email(self, email: str) -> UserResponse | None:
        return await self._users.get_user_by_email(email=email)

    async def get_user_by_id(self, user_id: str) -> UserResponse | None:
        return await self._users.get_user_by_id(user_id=user_id)

    async def get_user_by_platform_id(
        self,
        platform_type: str,
        platform_id: str,
    ) -> UserResponse | None:
        return await self._users.get_user_by_platform_id(
            platform_type=platform_type,
            platform_id=platform_id,
        )

    async def get_user_by_username(self, username: str) -> UserResponse | None:
        return await self._users.get_user_by_username(username=username)

    async def get_user_by_username_password(
        self,
        username: str,
        password: str,
    ) -> UserResponse | None:
        return await self._users.get_user_by_username_password(
            username=username,
            password=password,
        )

    async def delete_user_by_id(self, user_id: str) -> bool:
        """Delete a user and everything they own.

        Returns False if the user does not exist.
        """
        return await self._users.delete_user_by_id(user_id=user_id)

    async def update_user(
        self,
        user_id: str,
        new_attributes: Mapping[str, Any] | BaseModel,
    ) -> UserResponse:
        """Update a user.

        Raises NotFoundError, InvalidColumnError or DuplicateEntryError.
        """
        return await self._users.update_user(user_id=user_id, new_attributes=new_attributes)

    async def get_list_of_users(self, filters: Filters = None) -> list[UserResponse]:
        return await self._users.get_list_of_users(filters=filters)

    async def get_list_of_admins(self, filters: Filters = None) -> list[UserResponse]:
        return await self._users.get_list_of_admins(filters=filters)

    async def get_number_of_users(self) -> int:
        return await self._users.get_number_of_users()

    async def get_number_of_admins(self) -> int:
        return await self._users.get_number_of_admins()

    # ==================== STREAMS ====================

    async def create_stream(
        self,
        user_id: str,
        stream_attributes: StreamCreateParams | dict[str, Any] | None = None,
    ) -> StreamResponse:
        """Create a stream owned by a user.

        Raises NotFoundError if the user does not exist.
        """
        return await self._streams.create_stream(
            user_id=user_id,
            stream_attributes=stream_attributes,
        )

    async def get_stream_by_id(self, stream_id: str) -> StreamResponse | None:
        return await self._streams.get_stream_by_id(stream_id=stream_id)

    async def get_list_of_streams(self, filters: Filters = None) -> list[StreamResponse]:
        return await self._streams.get_list_of_streams(filters=filters)

    async def update_stream(
        self,
        stream_id: str,
        new_attributes: Mapping[str, Any] | BaseModel,
    ) -> StreamResponse:
        """Update a stream.

        Raises NotFoundError, InvalidColumnError or DuplicateEntryError.
        """
        return await self._streams.update_stream(stream_id=stream_id, new_attributes=new_attributes)

    # ==================== VIEWS ====================

    async def create_view(self, user_id: str, stream_id: str) -> ViewResponse:
        """Start (or return the already active) view of a stream by a user.

        Raises NotFoundError if the user or stream does not exist.
        """
        return await self._views.create_view(user_id=user_id, stream_id=stream_id)

    async def close_view(
        self,
        user_id: str,
        stream_id: str,
        ended_at: datetime | None = None,
    ) -> ViewResponse | None:
        return await self._views.close_view(user_id=user_id, stream_id=stream_id, ended_at=ended_at)

    async def get_list_of_users_viewing_stream(self, stream_id: str) -> list[UserResponse]:
        return await self._views.get_list_of_users_viewing_stream(stream_id=stream_id)

    async def get_total_number_of_users_viewed_stream(self, stream_id: str) -> int:
        return await self._views.get_total_number_of_users_viewed_stream(stream_id=stream_id)

    # ==================== SUBSCRIPTIONS ====================

    async def create_subscription(
        self,
        subscribe_from: str,
        subscribe_to: str,
    ) -> SubscriptionResponse:
        """Follow another user.

        Raises NotFoundError or DuplicateEntryError.
        """
        return await self._subscriptions.create_subscription(
            subscribe_from=subscribe_from,
            subscribe_to=subscribe_to,
        )

    async def get_subscriptions(self, user_id: str) -> list[UserResponse]:
        return await self._subscriptions.get_subscriptions(user_id=user_id)

    async def get_subscribers(self, user_id: str) -> list[UserResponse]:
        return await self._subscriptions.get_subscribers(user_id=user_id)

    async def get_number_of_subscriptions(self, user_id: str) -> int:
        return await self._subscriptions.get_number_of_subscriptions(user_id=user_id)

    async def get_number_of_subscribers(self, user_id: str) -> int:
        return await self._subscriptions.get_number_of_subscribers(user_id=user_id)

    async def delete_subscription(self, subscribe_from: str, subscribe_to: str) -> bool:
        return await self._subscriptions.delete_subscription(
            subscribe_from=subscribe_from,
            subscribe_to=subscribe_to,
        )

    # ==================== COMMENTS ====================

    async def create_comment(
        self,
        user_id: str,
        stream_id: str,
        comment: CommentCreateParams | dict[str, Any],
    ) -> CommentResponse:
        """Post a comment on a stream.

        Raises NotFoundError naming the user or the stream.
        """
        return await self._comments.create_comment(
            user_id=user_id,
            stream_id=stream_id,
            comment=comment,
        )

    async def get_list_of_comments_for_stream(self, stream_id: str) -> list[CommentResponse]:
        return await self._comments.get_list_of_comments_for_stream(stream_id=stream_id)


def get_storage(label: str | None = None, db: DatabaseManager | None = None) -> Storage:
    """Storage bound to ``label``, sharing ``db`` (the process-wide manager by default)."""
    return Storage(label=label, db=db)
