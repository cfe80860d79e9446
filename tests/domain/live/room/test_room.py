"""Tests for chat-room membership."""

import pytest

from app.domain.live.room.room import Room, RoomType
from app.utils.app_errors import AppError, AppErrorCode, NotFoundError


class FakeClient:
    def __init__(self, socket_id: str):
        self.socket_id = socket_id
        self.joined: list[str] = []
        self.left: list[str] = []

    def join_room(self, room: Room) -> None:
        self.joined.append(room.name)

    def leave_room(self, room: Room) -> None:
        self.left.append(room.name)


class TestRoomConstruction:
    def test_create_room(self):
        room = Room("lobby", RoomType.GENERAL)

        assert room.name == "lobby"
        assert room.type is RoomType.GENERAL
        assert room.clients == {}

    def test_type_from_string(self):
        assert Room("st_1", "stream").type is RoomType.STREAM

    def test_name_required(self):
        with pytest.raises(AppError) as exc_info:
            Room("", RoomType.STREAM)

        assert exc_info.value.errcode == AppErrorCode.E_INVALID_REQUEST.value

    def test_type_required(self):
        with pytest.raises(AppError):
            Room("lobby", "")

    def test_unknown_type(self):
        with pytest.raises(AppError) as exc_info:
            Room("lobby", "karaoke")

        assert exc_info.value.status_code == 400


class TestRoomMembership:
    @pytest.fixture
    def room(self) -> Room:
        return Room("st_1", RoomType.STREAM)

    def test_add_client(self, room: Room):
        client = FakeClient("sock-1")

        room.add_client(client)

        assert room.get_client("sock-1") is client
        assert "sock-1" in room
        assert len(room) == 1
        assert client.joined == ["st_1"]

    def test_get_unknown_client(self, room: Room):
        assert room.get_client("sock-unknown") is None

    def test_remove_client(self, room: Room):
        client = FakeClient("sock-1")
        room.add_client(client)

        room.remove_client(client)

        assert room.get_client("sock-1") is None
        assert client.left == ["st_1"]

    def test_remove_non_member(self, room: Room):
        client = FakeClient("sock-2")

        with pytest.raises(NotFoundError) as exc_info:
            room.remove_client(client)

        assert exc_info.value.errcode == AppErrorCode.E_CLIENT_NOT_IN_ROOM.value
        assert client.left == []

    def test_re_adding_replaces_entry(self, room: Room):
        first = FakeClient("sock-1")
        second = FakeClient("sock-1")

        room.add_client(first)
        room.add_client(second)

        assert len(room) == 1
        assert room.get_client("sock-1") is second
