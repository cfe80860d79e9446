"""Declarative base and mixins shared across tables."""

from datetime import datetime

from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .schema_utils import UTCDateTime, utc_now


class Base(DeclarativeBase):
    pass


class TimeStamped:
    """Mixin that stores creation/update timestamps in UTC."""

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False, info={"immutable": True}
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now, nullable=False
    )
