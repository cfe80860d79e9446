"""Field-restricted updates validated against a table's declared columns."""

from collections.abc import Iterable, Mapping
from typing import Any

from loguru import logger
from pydantic import BaseModel
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper

from app.schemas import Base, utc_now
from app.utils.app_errors import InvalidColumnError

# System-managed bookkeeping column that may always be touched on its own
LAST_MODIFIED_FIELD = "updated_at"


def _mapper(model: type[Base] | Base) -> Mapper:
    return sa_inspect(model if isinstance(model, type) else type(model))


def _model_name(model: type[Base] | Base) -> str:
    return model.__name__ if isinstance(model, type) else type(model).__name__


def declared_fields(model: type[Base] | Base) -> set[str]:
    """Return the column attribute names declared by a mapped class or instance."""
    return {attr.key for attr in _mapper(model).column_attrs}


def immutable_fields(model: type[Base] | Base) -> set[str]:
    """
    Columns fixed once the row exists.

    Primary keys plus every column flagged with ``info={"immutable": True}``
    (ownership links and creation timestamps).
    """
    return {
        attr.key
        for attr in _mapper(model).column_attrs
        if any(col.primary_key or col.info.get("immutable") for col in attr.columns)
    }


def required_fields(model: type[Base] | Base) -> set[str]:
    return {
        attr.key
        for attr in _mapper(model).column_attrs
        if not all(col.nullable for col in attr.columns)
    }


def validate_change_set(model: type[Base] | Base, changes: Mapping[str, Any] | Iterable[str]) -> None:
    """
    Reject a change set the table cannot take as an update.

    A change set made of the last-modified timestamp alone is always accepted.

    Raises:
        InvalidColumnError: when a field is not a declared column, is fixed
            once the row exists, or is set to None on a non-nullable column
    """
    fields = list(changes)
    if fields == [LAST_MODIFIED_FIELD]:
        return

    name = _model_name(model)

    unknown = sorted(set(fields) - declared_fields(model))
    if unknown:
        logger.warning(f"Rejected update on {name}: undefined columns {unknown}")
        raise InvalidColumnError(f"Column name undefined: {', '.join(unknown)}", columns=unknown)

    fixed = sorted(set(fields) & immutable_fields(model))
    if fixed:
        logger.warning(f"Rejected update on {name}: immutable columns {fixed}")
        raise InvalidColumnError(f"Column cannot be updated: {', '.join(fixed)}", columns=fixed)

    if isinstance(changes, Mapping):
        nulled = sorted(f for f in required_fields(model) & set(fields) if changes[f] is None)
        if nulled:
            logger.warning(f"Rejected update on {name}: null for required columns {nulled}")
            raise InvalidColumnError(f"Column cannot be null: {', '.join(nulled)}", columns=nulled)


def as_change_set(changes: Mapping[str, Any] | BaseModel) -> dict[str, Any]:
    if isinstance(changes, BaseModel):
        return changes.model_dump(exclude_unset=True)
    return dict(changes)


def apply_update(record: Base, changes: Mapping[str, Any] | BaseModel) -> list[str]:
    """
    Validate then assign a change set to a loaded record.

    Nothing is assigned when validation fails. ``updated_at`` is refreshed
    when the table has one and the caller did not set it.

    Returns:
        Names of the fields whose value actually changed
    """
    updates = as_change_set(changes)
    validate_change_set(record, updates)

    changed_keys: list[str] = []
    for field, value in updates.items():
        if getattr(record, field, None) != value:
            setattr(record, field, value)
            changed_keys.append(field)

    if LAST_MODIFIED_FIELD not in updates and LAST_MODIFIED_FIELD in declared_fields(record):
        setattr(record, LAST_MODIFIED_FIELD, utc_now())

    return changed_keys
