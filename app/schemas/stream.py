"""Stream table."""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimeStamped

if TYPE_CHECKING:
    from .comment import Comment
    from .user import User


class Stream(TimeStamped, Base):
    """A broadcast owned by exactly one streaming user."""

    __tablename__ = "stream"

    stream_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    stream_key: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    room_id: Mapped[str] = mapped_column(String(64), nullable=False)
    live: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)

    streamer_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("user.user_id", ondelete="CASCADE"), nullable=False, index=True,
        info={"immutable": True},
    )

    streamer: Mapped["User"] = relationship(back_populates="streams", lazy="raise")
    comments: Mapped[list["Comment"]] = relationship(
        back_populates="stream", lazy="raise", passive_deletes=True
    )
