"""Base service for storage operations."""

from contextlib import asynccontextmanager
from typing import Any, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.app_config import get_app_environ_config
from app.schemas import Stream, Subscription, User, View
from app.shared.logger import format_error
from app.shared.storage.database import DatabaseManager, get_database_manager
from app.utils.app_errors import (
    AppError,
    AppErrorCode,
    HttpStatusCode,
    InfrastructureError,
    NotFoundError,
)

ParamsT = TypeVar("ParamsT", bound=BaseModel)

_UNIQUE_VIOLATION_SQLSTATE = "23505"


class BaseService:
    """Base service with shared lookup and error-translation helpers."""

    def __init__(self, label: str | None = None, db: DatabaseManager | None = None):
        self.label = label or get_app_environ_config().DB_LABEL
        self.db = db or get_database_manager()

    @asynccontextmanager
    async def _storage_errors(self, action: str):
        """Translate SQLAlchemy failures into InfrastructureError; AppErrors pass through."""
        try:
            yield
        except AppError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error in {action}: {format_error(e)}")
            raise InfrastructureError(f"Error in {action}") from e

    @staticmethod
    def _is_unique_violation(err: IntegrityError) -> bool:
        """True for unique or primary-key conflicts, False for null, foreign-key or check failures."""
        orig = err.orig
        for source in (orig, getattr(orig, "__cause__", None)):
            sqlstate = getattr(source, "sqlstate", None) or getattr(source, "pgcode", None)
            if sqlstate:
                return sqlstate == _UNIQUE_VIOLATION_SQLSTATE
        return "unique constraint failed" in str(orig).lower()

    @staticmethod
    def _validate_params(model: type[ParamsT], data: ParamsT | dict[str, Any]) -> ParamsT:
        if isinstance(data, model):
            return data
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise AppError(
                errcode=AppErrorCode.E_INVALID_REQUEST,
                errmesg=f"Invalid {model.__name__}: {e.errors()}",
                status_code=HttpStatusCode.BAD_REQUEST,
            ) from e

    async def _get_user(self, user_id: str) -> User | None:
        """
        Retrieve a user by user_id on a dedicated session.

        Each lookup opens its own session so that several lookups can be
        awaited concurrently.
        """
        async with self.db.session(self.label) as session:
            return await session.get(User, user_id)

    async def _get_stream(self, stream_id: str) -> Stream | None:
        async with self.db.session(self.label) as session:
            return await session.get(Stream, stream_id)

    async def _get_active_view(self, user_id: str, stream_id: str) -> View | None:
        async with self.db.session(self.label) as session:
            return await session.scalar(
                select(View).where(
                    View.user_id == user_id,
                    View.stream_id == stream_id,
                    View.ended_at.is_(None),
                )
            )

    async def _subscription_exists(self, subscribe_from: str, subscribe_to: str) -> bool:
        async with self.db.session(self.label) as session:
            edge = await session.get(Subscription, (subscribe_from, subscribe_to))
            return edge is not None

    @staticmethod
    def _user_not_found(user_id: str) -> NotFoundError:
        errmesg = f"User {user_id} cannot be found"
        logger.error(errmesg)
        return NotFoundError(errmesg, errcode=AppErrorCode.E_USER_NOT_FOUND)

    @staticmethod
    def _stream_not_found(stream_id: str) -> NotFoundError:
        errmesg = f"Stream {stream_id} cannot be found"
        logger.error(errmesg)
        return NotFoundError(errmesg, errcode=AppErrorCode.E_STREAM_NOT_FOUND)
