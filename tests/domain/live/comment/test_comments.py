"""Tests for stream comments."""

from datetime import datetime, timedelta, timezone

import pytest

from app.domain.live.comment.comment_models import CommentCreateParams
from app.domain.live.storage import Storage
from app.utils.app_errors import AppError, AppErrorCode, NotFoundError


@pytest.fixture
async def viewer_and_stream(make_user, make_stream):
    streamer = await make_user("streamer")
    viewer = await make_user("viewer")
    stream = await make_stream(streamer.user_id, title="Chatty")
    return viewer, stream


class TestCreateComment:
    async def test_create_comment_success(self, storage: Storage, viewer_and_stream):
        viewer, stream = viewer_and_stream

        comment = await storage.create_comment(
            viewer.user_id, stream.stream_id, CommentCreateParams(content="First!")
        )

        assert comment.comment_id.startswith("cm_")
        assert comment.content == "First!"
        assert comment.user_id == viewer.user_id
        assert comment.stream_id == stream.stream_id
        assert comment.created_at.tzinfo is not None

    async def test_explicit_created_at_kept(self, storage: Storage, viewer_and_stream):
        viewer, stream = viewer_and_stream
        stamp = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)

        comment = await storage.create_comment(
            viewer.user_id, stream.stream_id, {"content": "back-dated", "created_at": stamp}
        )

        assert comment.created_at == stamp

    async def test_missing_stream_names_stream(self, storage: Storage, viewer_and_stream):
        viewer, _ = viewer_and_stream

        with pytest.raises(NotFoundError) as exc_info:
            await storage.create_comment(viewer.user_id, "st_missing", {"content": "hello?"})

        assert exc_info.value.errcode == AppErrorCode.E_STREAM_NOT_FOUND.value
        assert "st_missing" in exc_info.value.errmesg

    async def test_missing_user_checked_first(self, storage: Storage):
        with pytest.raises(NotFoundError) as exc_info:
            await storage.create_comment("us_missing", "st_missing", {"content": "hello?"})

        assert exc_info.value.errcode == AppErrorCode.E_USER_NOT_FOUND.value
        assert "us_missing" in exc_info.value.errmesg

    async def test_empty_content_rejected(self, storage: Storage, viewer_and_stream):
        viewer, stream = viewer_and_stream

        with pytest.raises(AppError) as exc_info:
            await storage.create_comment(viewer.user_id, stream.stream_id, {"content": ""})

        assert exc_info.value.errcode == AppErrorCode.E_INVALID_REQUEST.value


class TestListComments:
    async def test_newest_first(self, storage: Storage, viewer_and_stream):
        viewer, stream = viewer_and_stream
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for offset, text in enumerate(["one", "two", "three"]):
            await storage.create_comment(
                viewer.user_id,
                stream.stream_id,
                {"content": text, "created_at": base + timedelta(minutes=offset)},
            )

        comments = await storage.get_list_of_comments_for_stream(stream.stream_id)

        assert [c.content for c in comments] == ["three", "two", "one"]

    async def test_only_comments_of_stream(self, storage: Storage, make_stream, viewer_and_stream):
        viewer, stream = viewer_and_stream
        other = await make_stream(viewer.user_id, title="Other")
        await storage.create_comment(viewer.user_id, other.stream_id, {"content": "elsewhere"})

        assert await storage.get_list_of_comments_for_stream(stream.stream_id) == []

    async def test_missing_stream(self, storage: Storage):
        with pytest.raises(NotFoundError):
            await storage.get_list_of_comments_for_stream("st_missing")
