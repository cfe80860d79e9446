"""Application error taxonomy.

Every failure surfaced by the storage layer is an ``AppError``. The closed set
of storage failure kinds is:

- ``NotFoundError``: a referenced user/stream/client is absent
- ``DuplicateEntryError``: an edge or unique column already exists
- ``InvalidColumnError``: an update touches undeclared columns
- ``InfrastructureError``: the database failed underneath us

``InvalidFilterError`` covers caller-supplied filter tokens that the parameter
mapper does not understand.
"""

import inspect
from enum import Enum, IntEnum
from uuid import uuid4


class HttpStatusCode(IntEnum):
    BAD_REQUEST = 400
    NOT_FOUND = 404
    CONFLICT = 409
    INTERNAL_SERVER_ERROR = 500


class AppErrorCode(str, Enum):
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_NOT_FOUND = "E_NOT_FOUND"
    E_USER_NOT_FOUND = "E_USER_NOT_FOUND"
    E_STREAM_NOT_FOUND = "E_STREAM_NOT_FOUND"
    E_CLIENT_NOT_IN_ROOM = "E_CLIENT_NOT_IN_ROOM"
    E_DUPLICATE_ENTRY = "E_DUPLICATE_ENTRY"
    E_INVALID_COLUMN = "E_INVALID_COLUMN"
    E_INVALID_FILTER = "E_INVALID_FILTER"
    E_INFRASTRUCTURE = "E_INFRASTRUCTURE"
    E_INTERNAL_ERROR = "E_INTERNAL_ERROR"


class AppError(Exception):
    """Base error carrying an error code, message and HTTP status hint.

    The caller site is captured when the error is built so that logs point at
    the operation that raised it rather than at the handler that logged it.
    """

    def __init__(
        self,
        errcode: AppErrorCode | str = AppErrorCode.E_INTERNAL_ERROR,
        errmesg: str = "We are sorry, an error occurred.",
        status_code: int = HttpStatusCode.INTERNAL_SERVER_ERROR,
    ):
        super().__init__(errmesg)
        self.errcode = errcode.value if isinstance(errcode, AppErrorCode) else errcode
        self.errmesg = errmesg
        self.status_code = int(status_code)
        self.erresid = uuid4().hex[:10]
        self.caller_info = self._capture_caller()

    @staticmethod
    def _capture_caller() -> str:
        frame = inspect.currentframe()
        # skip _capture_caller and every __init__ in the error class chain
        while frame and (
            frame.f_code.co_name in ("_capture_caller", "__init__")
            and frame.f_globals.get("__name__") == __name__
        ):
            frame = frame.f_back
        if frame is None:
            return "unknown"
        module = frame.f_globals.get("__name__", "")
        return f"{module}:{frame.f_code.co_name}:{frame.f_lineno}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(errcode={self.errcode!r}, errmesg={self.errmesg!r})"


class NotFoundError(AppError):
    def __init__(
        self,
        errmesg: str = "Not found",
        errcode: AppErrorCode | str = AppErrorCode.E_NOT_FOUND,
    ):
        super().__init__(errcode=errcode, errmesg=errmesg, status_code=HttpStatusCode.NOT_FOUND)


class DuplicateEntryError(AppError):
    def __init__(self, errmesg: str = "Duplicate entry"):
        super().__init__(
            errcode=AppErrorCode.E_DUPLICATE_ENTRY,
            errmesg=errmesg,
            status_code=HttpStatusCode.CONFLICT,
        )


class InvalidColumnError(AppError):
    def __init__(self, errmesg: str = "Column name undefined", columns: list[str] | None = None):
        super().__init__(
            errcode=AppErrorCode.E_INVALID_COLUMN,
            errmesg=errmesg,
            status_code=HttpStatusCode.BAD_REQUEST,
        )
        self.columns = columns or []


class InvalidFilterError(AppError):
    def __init__(self, errmesg: str = "Invalid filter"):
        super().__init__(
            errcode=AppErrorCode.E_INVALID_FILTER,
            errmesg=errmesg,
            status_code=HttpStatusCode.BAD_REQUEST,
        )


class InfrastructureError(AppError):
    def __init__(self, errmesg: str = "Storage failure"):
        super().__init__(
            errcode=AppErrorCode.E_INFRASTRUCTURE,
            errmesg=errmesg,
            status_code=HttpStatusCode.INTERNAL_SERVER_ERROR,
        )


__all__ = [
    "AppError",
    "AppErrorCode",
    "DuplicateEntryError",
    "HttpStatusCode",
    "InfrastructureError",
    "InvalidColumnError",
    "InvalidFilterError",
    "NotFoundError",
]
