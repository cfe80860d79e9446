"""User operations."""

from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import BaseModel
from sqlalchemy import ColumnElement, delete, func, select
from sqlalchemy.exc import IntegrityError

from app.app_config import get_app_environ_config
from app.schemas import User
from app.utils.app_errors import DuplicateEntryError

from ...utils.idgen import new_user_id
from .._base import BaseService
from ..params import ListFilters, map_params
from ..update_guard import apply_update
from .user_models import UserCreateParams, UserResponse

# Users are always listed by username; only the direction is selectable
USER_LIST_TOKENS = ("order",)


class UserOperations(BaseService):
    """User-related operations."""

    async def create_user(
        self,
        attributes: UserCreateParams | dict[str, Any],
    ) -> UserResponse:
        """
        Persist a new user.

        Raises DuplicateEntryError when the username, email or platform identity is taken.
        """
        params = self._validate_params(UserCreateParams, attributes)
        user = User(user_id=new_user_id(), **params.model_dump())

        async with self._storage_errors("creating user"):
            try:
                async with self.db.transaction(self.label) as session:
                    session.add(user)
            except IntegrityError as e:
                if not self._is_unique_violation(e):
                    raise
                logger.error(f"Error in creating user {params.username}: {e.orig}")
                raise DuplicateEntryError(f"User {params.username} already exists") from e

        logger.info(f"Created user {user.user_id} ({user.username})")
        return UserResponse.model_validate(user)

    async def _find_one_user(self, *conditions: ColumnElement[bool]) -> UserResponse | None:
        async with self._storage_errors("retrieving user"):
            async with self.db.session(self.label) as session:
                user = await session.scalar(select(User).where(*conditions))

        if user is None:
            return None
        return UserResponse.model_validate(user)

    async def get_user_by_email(self, email: str) -> UserResponse | None:
        user = await self._find_one_user(User.email == email)
        if user is None:
            logger.info("No such user")
        return user

    async def get_user_by_id(self, user_id: str) -> UserResponse | None:
        async with self._storage_errors("retrieving user"):
            user = await self._get_user(user_id)

        if user is None:
            logger.info(f"No such user: {user_id}")
            return None
        return UserResponse.model_validate(user)

    async def get_user_by_platform_id(
        self,
        platform_type: str,
        platform_id: str,
    ) -> UserResponse | None:
        user = await self._find_one_user(
            User.platform_type == platform_type,
            User.platform_id == platform_id,
        )
        if user is None:
            logger.info(f"No such user at {platform_type} with platform id {platform_id}")
        return user

    async def get_user_by_username(self, username: str) -> UserResponse | None:
        user = await self._find_one_user(User.username == username)
        if user is None:
            logger.info("No user found")
        return user

    async def get_user_by_username_password(
        self,
        username: str,
        password: str,
    ) -> UserResponse | None:
        user = await self._find_one_user(
            User.username == username,
            User.password == password,
        )
        if user is None:
            logger.info("No user found")
        return user

    async def delete_user_by_id(self, user_id: str) -> bool:
        """
        Delete a user; owned streams, views, edges and comments cascade.

        Returns True if deleted, False if not found.
        """
        async with self._storage_errors("deleting user"):
            async with self.db.transaction(self.label) as session:
                result = await session.execute(
                    delete(User)
                    .where(User.user_id == user_id)
                    .execution_options(synchronize_session=False)
                )

        if result.rowcount != 1:
            logger.info(f"No such user: {user_id}")
            return False

        logger.info(f"Deleted user {user_id}")
        return True

    async def update_user(
        self,
        user_id: str,
        new_attributes: Mapping[str, Any] | BaseModel,
    ) -> UserResponse:
        """
        Update only the given fields of a user.

        Raises NotFoundError if the user does not exist, InvalidColumnError if a
        field is not a user column, DuplicateEntryError on a unique conflict.
        """
        async with self._storage_errors("updating user"):
            try:
                async with self.db.transaction(self.label) as session:
                    user = await session.get(User, user_id)
                    if user is None:
                        raise self._user_not_found(user_id)

                    changed_keys = apply_update(user, new_attributes)
                    logger.debug(f"Updating user {user_id}: {changed_keys}")
            except IntegrityError as e:
                if not self._is_unique_violation(e):
                    raise
                logger.error(f"Error in updating user {user_id}: {e.orig}")
                raise DuplicateEntryError(f"Update of user {user_id} conflicts with an existing user") from e

        return UserResponse.model_validate(user)

    async def _list_users(
        self,
        condition: ColumnElement[bool],
        filters: ListFilters | dict[str, Any] | None,
    ) -> list[UserResponse]:
        directives = map_params(
            filters,
            default_order=get_app_environ_config().DEFAULT_USER_ORDER,  # type: ignore[arg-type]
            tokens=USER_LIST_TOKENS,
        )
        order = User.username.desc() if directives.descending else User.username.asc()

        async with self._storage_errors("fetching list of users"):
            async with self.db.session(self.label) as session:
                users = (await session.scalars(select(User).where(condition).order_by(order))).all()

        return [UserResponse.model_validate(user) for user in users]

    async def get_list_of_users(
        self,
        filters: ListFilters | dict[str, Any] | None = None,
    ) -> list[UserResponse]:
        """Ordinary users (no permissions) ordered by username. Accepts only the ``order`` token."""
        return await self._list_users(User.permissions.is_(None), filters)

    async def get_list_of_admins(
        self,
        filters: ListFilters | dict[str, Any] | None = None,
    ) -> list[UserResponse]:
        """Admins (permissions set) ordered by username. Accepts only the ``order`` token."""
        return await self._list_users(User.permissions.is_not(None), filters)

    async def _count_users(self, condition: ColumnElement[bool], action: str) -> int:
        async with self._storage_errors(action):
            async with self.db.session(self.label) as session:
                count = await session.scalar(select(func.count()).select_from(User).where(condition))
        return count or 0

    async def get_number_of_users(self) -> int:
        return await self._count_users(User.permissions.is_(None), "counting users")

    async def get_number_of_admins(self) -> int:
        return await self._count_users(User.permissions.is_not(None), "counting admins")
