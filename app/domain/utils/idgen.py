from ulid import ULID


def new_ulid(prefix: str | None = None) -> str:
    value = str(ULID()).lower()
    return f"{prefix}{value}" if prefix else value


def new_user_id() -> str:
    return new_ulid("us_")


def new_stream_id() -> str:
    return new_ulid("st_")


def new_stream_key() -> str:
    return new_ulid("sk_")


def new_view_id() -> str:
    return new_ulid("vi_")


def new_comment_id() -> str:
    return new_ulid("cm_")


def new_room_id() -> str:
    return new_ulid("ro_")
