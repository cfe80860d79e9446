"""View table: one viewer's watching session of one stream."""

from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base
from .schema_utils import UTCDateTime, utc_now


class View(Base):
    """``ended_at`` is null while the viewer is still watching."""

    __tablename__ = "view"

    view_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("user.user_id", ondelete="CASCADE"), nullable=False,
        info={"immutable": True},
    )
    stream_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("stream.stream_id", ondelete="CASCADE"), nullable=False,
        info={"immutable": True},
    )
    started_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False, info={"immutable": True}
    )
    ended_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        Index("ix_view_stream_active", "stream_id", "ended_at"),
        # At most one active view per viewer per stream
        Index(
            "uq_view_active_session",
            "user_id",
            "stream_id",
            unique=True,
            postgresql_where=text("ended_at IS NULL"),
            sqlite_where=text("ended_at IS NULL"),
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.ended_at is None
