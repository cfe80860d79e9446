"""Translate caller-facing filter tokens into query directives."""

from collections.abc import Collection
from dataclasses import dataclass
from typing import Any, Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError

from app.utils.app_errors import InvalidFilterError

ORDER_MAP = {
    "asc": "ASC",
    "desc": "DESC",
}

SORT_MAP = {
    "time": "created_at",
    "title": "title",
}

# None means no liveness predicate
STATE_MAP: dict[str, bool | None] = {
    "all": None,
    "live": True,
    "done": False,
}


class ListFilters(BaseModel):
    """Filter tokens accepted from callers. Omitted tokens take defaults."""

    model_config = ConfigDict(extra="forbid")

    order: Literal["asc", "desc"] | None = None
    sort: Literal["time", "title"] = "time"
    state: Literal["all", "live", "done"] = "all"


@dataclass(frozen=True)
class QueryDirectives:
    order: Literal["ASC", "DESC"]
    sort_field: str
    live: bool | None

    @property
    def descending(self) -> bool:
        return self.order == "DESC"


def map_params(
    filters: ListFilters | dict[str, Any] | None = None,
    default_order: Literal["asc", "desc"] = "asc",
    tokens: Collection[str] | None = None,
) -> QueryDirectives:
    """
    Map filter tokens to storage-level directives.

    Args:
        filters: tokens ``order`` (asc/desc), ``sort`` (time/title), ``state`` (all/live/done)
        default_order: direction used when ``order`` is omitted
        tokens: token names the listing understands; all of them when None

    Raises:
        InvalidFilterError: when a token or key is not part of the vocabulary,
            or is not understood by the listing
    """
    if filters is None:
        filters = ListFilters()
    elif not isinstance(filters, ListFilters):
        # Ignore explicit None values the same way as missing keys
        raw = {k: v for k, v in dict(filters).items() if v is not None}
        try:
            filters = ListFilters.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Invalid list filters {raw}: {e.errors()}")
            raise InvalidFilterError(f"Invalid filters: {raw}") from e

    if tokens is not None:
        unsupported = sorted(filters.model_fields_set - set(tokens))
        if unsupported:
            logger.warning(f"Unsupported list filters {unsupported}, accepted: {sorted(tokens)}")
            raise InvalidFilterError(f"Unsupported filters: {', '.join(unsupported)}")

    return QueryDirectives(
        order=ORDER_MAP[filters.order or default_order],  # type: ignore[arg-type]
        sort_field=SORT_MAP[filters.sort],
        live=STATE_MAP[filters.state],
    )
