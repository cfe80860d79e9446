"""Chat-room membership keyed by client socket id."""

from enum import Enum
from typing import Protocol

from loguru import logger

from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode, NotFoundError


class RoomType(str, Enum):
    STREAM = "stream"
    GENERAL = "general"


class Client(Protocol):
    """A connected socket client that can be placed into rooms."""

    @property
    def socket_id(self) -> str: ...

    def join_room(self, room: "Room") -> None: ...

    def leave_room(self, room: "Room") -> None: ...


class Room:
    """Set of clients sharing a chat channel."""

    def __init__(self, name: str, room_type: RoomType | str):
        if not name:
            logger.error("Room name is invalid")
            raise AppError(
                errcode=AppErrorCode.E_INVALID_REQUEST,
                errmesg="Room name must be provided",
                status_code=HttpStatusCode.BAD_REQUEST,
            )
        if not room_type:
            logger.error("Room type is invalid")
            raise AppError(
                errcode=AppErrorCode.E_INVALID_REQUEST,
                errmesg="Room type must be provided",
                status_code=HttpStatusCode.BAD_REQUEST,
            )

        try:
            self._type = RoomType(room_type)
        except ValueError as e:
            logger.error(f"Room type is invalid: {room_type}")
            raise AppError(
                errcode=AppErrorCode.E_INVALID_REQUEST,
                errmesg=f"Unknown room type: {room_type}",
                status_code=HttpStatusCode.BAD_REQUEST,
            ) from e

        self._name = name
        self._clients: dict[str, Client] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def type(self) -> RoomType:
        return self._type

    @property
    def clients(self) -> dict[str, Client]:
        return self._clients

    def get_client(self, socket_id: str) -> Client | None:
        return self._clients.get(socket_id)

    def add_client(self, client: Client) -> None:
        self._clients[client.socket_id] = client
        client.join_room(self)
        logger.info(f"{client.socket_id} added to {self._name}")

    def remove_client(self, client: Client) -> None:
        """Raises NotFoundError if the client is not in this room."""
        if client.socket_id not in self._clients:
            errmesg = f"{client.socket_id} doesn't exist in {self._name}"
            logger.error(errmesg)
            raise NotFoundError(errmesg, errcode=AppErrorCode.E_CLIENT_NOT_IN_ROOM)

        del self._clients[client.socket_id]
        client.leave_room(self)
        logger.info(f"{client.socket_id} removed from {self._name}")

    def __contains__(self, socket_id: str) -> bool:
        return socket_id in self._clients

    def __len__(self) -> int:
        return len(self._clients)

    def __repr__(self) -> str:
        return f"Room(name={self._name!r}, type={self._type.value!r}, clients={len(self._clients)})"
