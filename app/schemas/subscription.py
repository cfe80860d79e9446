"""Subscription table: directed follow edge between two users."""

from sqlalchemy import CheckConstraint, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimeStamped


class Subscription(TimeStamped, Base):
    __tablename__ = "subscription"

    subscriber_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("user.user_id", ondelete="CASCADE"), primary_key=True
    )
    subscribe_to_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("user.user_id", ondelete="CASCADE"), primary_key=True, index=True
    )

    __table_args__ = (
        CheckConstraint("subscriber_id <> subscribe_to_id", name="ck_subscription_no_self"),
    )
