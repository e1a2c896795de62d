"""Typed field layer on top of the string-only query model.

The codec only ever sees strings. Table and form code, on the other hand,
works with typed fields: integers, booleans, dates, enums. This module
converts typed filter values to their wire strings (and back) and maps
each field type to the criteria a filter input produces:

- String / RichText / Image: ``CONTAIN`` with the text
- Integer / Enum: ``EQUAL`` with the value
- Boolean: ``SPECIFIED`` with ``"true"`` while checked
- Date / DateSec / DateTimeSec: a ``GREATER_THAN_OR_EQUAL`` /
  ``LESS_THAN_OR_EQUAL`` pair for a range
"""

import math
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, Field, model_validator

from .builder import QueryBuilder
from .constants import CriteriaOperation, SortDirection
from .exceptions import InvalidFieldError, MissingFieldError

__all__ = (
    "FieldType",
    "FieldDefinition",
    "default_operation",
    "to_wire",
    "from_wire",
    "apply_filter",
    "apply_date_range",
    "filter_value",
    "boolean_value",
    "toggle_sort",
)

DateLike = Union[datetime, date, int, float, str]


class FieldType(str, Enum):
    STRING = "String"
    INTEGER = "Integer"
    BOOLEAN = "Boolean"
    DATE = "Date"
    DATE_SEC = "DateSec"
    DATE_TIME_SEC = "DateTimeSec"
    ENUM = "Enum"
    IMAGE = "Image"
    RICH_TEXT = "RichText"


_TEXT_TYPES = {FieldType.STRING, FieldType.RICH_TEXT, FieldType.IMAGE}
_DATE_TYPES = {FieldType.DATE, FieldType.DATE_SEC, FieldType.DATE_TIME_SEC}
_EPOCH_TYPES = {FieldType.DATE_SEC, FieldType.DATE_TIME_SEC}


class FieldDefinition(BaseModel):
    """Description of one table column / form field.

    `filterable` and `sortable` are tri-state: only an explicit ``False``
    disables the behaviour.
    """

    name: str = Field(..., description="Field identifier, dotted for nested fields.")
    title: str = Field("", description="Display label.")
    type: FieldType = Field(FieldType.STRING, description="Field type driving conversion.")
    accessor: Optional[str] = Field(None, description="Alternative path used as the criteria key.")
    filterable: Optional[bool] = None
    sortable: Optional[bool] = None
    enum_values: Optional[Dict[str, str]] = Field(None, description="Enum key to label mapping.")
    multi_select: bool = True

    @model_validator(mode="after")
    def check_enum_values(self) -> "FieldDefinition":
        if self.type == FieldType.ENUM and not self.enum_values:
            raise MissingFieldError("Enum field requires enum_values", field=self.name)
        return self

    @property
    def criteria_key(self) -> str:
        return self.accessor or self.name


def default_operation(field_type: FieldType) -> CriteriaOperation:
    """Operation a single filter input produces for a field type.

    Date types return the lower bound of their range.
    """
    field_type = FieldType(field_type)
    if field_type in _TEXT_TYPES:
        return CriteriaOperation.CONTAIN
    if field_type == FieldType.BOOLEAN:
        return CriteriaOperation.SPECIFIED
    if field_type in _DATE_TYPES:
        return CriteriaOperation.GREATER_THAN_OR_EQUAL
    return CriteriaOperation.EQUAL


# -------------------
# Value conversion
# -------------------


def _as_utc(value: DateLike, field: FieldDefinition) -> datetime:
    if isinstance(value, datetime):
        # Naive datetimes are taken as UTC
        return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        try:
            return _as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")), field)
        except ValueError as e:
            raise InvalidFieldError("Not an ISO-8601 date", field=field.name, value=value) from e
    raise InvalidFieldError("Unsupported date value", field=field.name, value=value)


def _iso_millis(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def to_wire(field: FieldDefinition, value: Any) -> str:
    """Convert a typed value to the string sent in ``values{i}``.

    Raises:
        InvalidFieldError: If the value does not fit the field type
    """
    if field.type == FieldType.INTEGER:
        if isinstance(value, bool):
            raise InvalidFieldError("Boolean given for integer field", field=field.name, value=value)
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        try:
            return str(int(value))
        except (TypeError, ValueError) as e:
            raise InvalidFieldError("Not an integer", field=field.name, value=value, expected="int") from e

    if field.type == FieldType.BOOLEAN:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, str) and value in ("true", "false"):
            return value
        raise InvalidFieldError("Not a boolean", field=field.name, value=value, expected="bool")

    if field.type == FieldType.DATE:
        return _iso_millis(_as_utc(value, field))

    if field.type in _EPOCH_TYPES:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(math.floor(value))
        return str(math.floor(_as_utc(value, field).timestamp()))

    if field.type == FieldType.ENUM:
        key = getattr(value, "value", value)
        if key not in (field.enum_values or {}):
            raise InvalidFieldError(
                "Unknown enum value",
                field=field.name,
                value=key,
                expected=sorted(field.enum_values or {}),
            )
        return str(key)

    return str(value)


def from_wire(field: FieldDefinition, raw: str) -> Any:
    """Convert a ``values{i}`` string back to a typed value.

    Dates come back as timezone-aware UTC datetimes.

    Raises:
        InvalidFieldError: If the string does not parse for the field type
    """
    if field.type == FieldType.INTEGER:
        try:
            return int(raw)
        except ValueError as e:
            raise InvalidFieldError("Not an integer", field=field.name, value=raw, expected="int") from e
    if field.type == FieldType.BOOLEAN:
        if raw not in ("true", "false"):
            raise InvalidFieldError("Not a boolean", field=field.name, value=raw, expected="true|false")
        return raw == "true"
    if field.type == FieldType.DATE:
        return _as_utc(raw, field)
    if field.type in _EPOCH_TYPES:
        try:
            return datetime.fromtimestamp(int(raw), tz=timezone.utc)
        except (ValueError, OverflowError, OSError) as e:
            raise InvalidFieldError("Not a Unix timestamp", field=field.name, value=raw) from e
    if field.type == FieldType.ENUM and raw not in (field.enum_values or {}):
        raise InvalidFieldError("Unknown enum value", field=field.name, value=raw)
    return raw


# -------------------
# Builder helpers
# -------------------


def apply_filter(builder: QueryBuilder, field: FieldDefinition, value: Any) -> None:
    """Set or clear the filter for a field from a single input value.

    Empty input (``None``, ``""``, ``False`` for booleans, an empty
    selection for enums) removes every criterion on the field's key.
    Date fields take a ``(start, end)`` pair and delegate to
    `apply_date_range`.
    """
    key = field.criteria_key

    if field.type in _DATE_TYPES:
        start, end = value if value else (None, None)
        apply_date_range(builder, field, start, end)
        return

    if field.type == FieldType.BOOLEAN:
        if value is True or value == "true":
            builder.upsert_criteria(key, CriteriaOperation.SPECIFIED, ["true"])
        else:
            builder.remove_criteria_by_key(key)
        return

    if value is None or value == "":
        builder.remove_criteria_by_key(key)
        return

    if field.type == FieldType.ENUM and isinstance(value, (list, tuple, set)):
        values: List[str] = [to_wire(field, v) for v in value]
        if not values:
            builder.remove_criteria_by_key(key)
            return
        if not field.multi_select:
            values = values[:1]
        builder.upsert_criteria(key, CriteriaOperation.EQUAL, values)
        return

    builder.upsert_criteria(key, default_operation(field.type), [to_wire(field, value)])


def apply_date_range(
    builder: QueryBuilder,
    field: FieldDefinition,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
) -> None:
    """Replace the field's criteria with an inclusive range.

    Each bound is optional; with neither, the field is left unfiltered.
    """
    key = field.criteria_key
    builder.remove_criteria_by_key(key)
    if start is not None:
        builder.add_criteria(key, CriteriaOperation.GREATER_THAN_OR_EQUAL, [to_wire(field, start)])
    if end is not None:
        builder.add_criteria(key, CriteriaOperation.LESS_THAN_OR_EQUAL, [to_wire(field, end)])


def filter_value(builder: QueryBuilder, field: FieldDefinition) -> str:
    """First value filtered on for the field, or ``""``."""
    values: Sequence[str] = builder.get_criteria_values(field.criteria_key)
    return values[0] if values else ""


def boolean_value(builder: QueryBuilder, field: FieldDefinition) -> bool:
    return builder.has_criteria(field.criteria_key, CriteriaOperation.SPECIFIED)


def toggle_sort(builder: QueryBuilder, field: FieldDefinition) -> None:
    """Cycle the single-field sort for a column header click.

    A new column sorts descending; clicking the column already sorted
    descending switches it to ascending.
    """
    if field.sortable is False:
        return
    key = field.criteria_key
    query = builder.query
    current = query.order_by[0] if query.order_by else None
    current_direction = query.order_by_direction[0] if query.order_by_direction else None

    direction = SortDirection.DESC
    if current == key and current_direction == SortDirection.DESC:
        direction = SortDirection.ASC
    builder.set_sort(key, direction)
