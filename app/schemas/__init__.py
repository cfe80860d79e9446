"""SQLAlchemy declarative tables."""

from .base import Base, TimeStamped
from .comment import Comment
from .init import init_schema
from .schema_utils import UTCDateTime, ensure_utc, utc_now
from .stream import Stream
from .subscription import Subscription
from .user import User
from .view import View

__all__ = [
    "Base",
    "Comment",
    "Stream",
    "Subscription",
    "TimeStamped",
    "UTCDateTime",
    "User",
    "View",
    "ensure_utc",
    "init_schema",
    "utc_now",
]
