"""User table."""

from typing import TYPE_CHECKING

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimeStamped

if TYPE_CHECKING:
    from .comment import Comment
    from .stream import Stream


class User(TimeStamped, Base):
    """Platform account. ``permissions`` is null for ordinary users and set for admins."""

    __tablename__ = "user"

    user_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    # Identity on an external platform (e.g. facebook), optional
    platform_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    platform_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    permissions: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    streams: Mapped[list["Stream"]] = relationship(
        back_populates="streamer", lazy="raise", passive_deletes=True
    )
    comments: Mapped[list["Comment"]] = relationship(
        back_populates="user", lazy="raise", passive_deletes=True
    )

    __table_args__ = (
        UniqueConstraint("platform_type", "platform_id", name="uq_user_platform"),
    )

    @property
    def is_admin(self) -> bool:
        return self.permissions is not None
