"""Comment domain models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CommentCreateParams(BaseModel):
    """Parameters for posting a comment. ``created_at`` defaults to now."""

    content: str = Field(min_length=1)
    created_at: datetime | None = None


class CommentResponse(BaseModel):
    """Comment response model."""

    model_config = ConfigDict(from_attributes=True)

    comment_id: str
    content: str
    created_at: datetime
    user_id: str
    stream_id: str
