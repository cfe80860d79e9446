"""Comment table. Rows are immutable once written."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base
from .schema_utils import UTCDateTime, utc_now

if TYPE_CHECKING:
    from .stream import Stream
    from .user import User


class Comment(Base):
    __tablename__ = "comment"

    comment_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False, info={"immutable": True}
    )

    user_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("user.user_id", ondelete="CASCADE"), nullable=False,
        info={"immutable": True},
    )
    stream_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("stream.stream_id", ondelete="CASCADE"), nullable=False,
        info={"immutable": True},
    )

    user: Mapped["User"] = relationship(back_populates="comments", lazy="raise")
    stream: Mapped["Stream"] = relationship(back_populates="comments", lazy="raise")

    __table_args__ = (Index("ix_comment_stream_created", "stream_id", "created_at"),)
