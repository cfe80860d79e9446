"""Stream and view domain models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from ..user.user_models import UserResponse


class StreamResponse(BaseModel):
    """Stream response model, joined with its streamer."""

    model_config = ConfigDict(from_attributes=True)

    stream_id: str
    title: str | None = None
    stream_key: str
    room_id: str
    live: bool
    streamer_id: str
    streamer: UserResponse | None = None

    # Timestamps
    created_at: datetime
    updated_at: datetime


class StreamCreateParams(BaseModel):
    """Parameters for creating a stream. Key and room are generated when omitted."""

    title: str | None = None
    stream_key: str | None = None
    room_id: str | None = None
    live: bool = False


class StreamUpdateParams(BaseModel):
    """Parameters for updating a stream. Only explicitly set fields are written."""

    title: str | None = None
    stream_key: str | None = None
    room_id: str | None = None
    live: bool | None = None


class ViewResponse(BaseModel):
    """One viewer's watching session; ``ended_at`` is None while active."""

    model_config = ConfigDict(from_attributes=True)

    view_id: str
    user_id: str
    stream_id: str
    started_at: datetime
    ended_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.ended_at is None
