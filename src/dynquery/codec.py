"""Query string codec.

Converts a `DynamicQuery` to and from the flat query string parsed by
Spring dynamic query argument resolvers:

    key0=name&operation0=CONTAIN&values0=john&key1=age&operation1=GREATER_THAN&values1=25
    &select0=id&selectAs0=identifier&orderBy0=id&orderByDirection0=desc&page=0&pageSize=20

Encoding is total and canonical: one ``values{i}`` parameter per value,
criteria renumbered densely. Decoding never raises. Fragments that cannot
form a criterion (missing key, operation or values, unknown operation) are
dropped, logged at DEBUG and reported to an optional ``on_drop`` hook.

Typical usage:

- Encode: `encode(query)`
- Decode: `decode("key0=name&operation0=CONTAIN&values0=john")`
"""

import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote_plus, unquote_plus

from pydantic import BaseModel, ConfigDict

from .constants import (
    DIRECTIONS_BY_NAME,
    INDEXED_PARAMS,
    KEY_FIELD,
    LEGACY_VALUES_SEPARATOR,
    OPERATION_FIELD,
    OPERATIONS_BY_NAME,
    ORDER_BY_DIRECTION_FIELD,
    ORDER_BY_FIELD,
    PAGE_FIELD,
    PAGE_SIZE_FIELD,
    SELECT_AS_FIELD,
    SELECT_FIELD,
    VALUES_FIELD,
)
from .logger import get_logger
from .schema import Criterion, DynamicQuery
from .settings import settings
from .types import DropHook, QueryParams

__all__ = (
    "DroppedFragment",
    "QueryStringCodec",
    "query_codec",
    "encode",
    "encode_params",
    "decode",
    "decode_params",
    "split_query_string",
)

logger = get_logger(__name__)

# Leading integer, the way JavaScript's parseInt reads "20", " 3", "-1" or "12px"
_INT_PREFIX = re.compile(r"^\s*([+-]?[0-9]+)")

# (query attribute, wire prefix) in emission order
_LIST_FIELDS = (
    ("select", SELECT_FIELD),
    ("select_as", SELECT_AS_FIELD),
    ("order_by", ORDER_BY_FIELD),
    ("order_by_direction", ORDER_BY_DIRECTION_FIELD),
)


class DroppedFragment(BaseModel):
    """A query-string fragment the decoder discarded.

    Attributes:
        param: Parameter prefix or name (e.g. ``operation``, ``orderByDirection``)
        index: Numeric suffix of the parameter, if it had one
        reason: Why the fragment was dropped
        value: Raw decoded value, when one applies
    """

    model_config = ConfigDict(frozen=True)

    param: str
    index: Optional[int] = None
    reason: str
    value: Optional[str] = None


def _quote(text: str) -> str:
    """Form-urlencode one name or value like a browser's URLSearchParams.

    Unreserved: ``A-Z a-z 0-9 * - . _``; space becomes ``+``.
    """
    return quote_plus(text, safe="*").replace("~", "%7E")


def _wire(value: Any) -> str:
    # Enum members carry their wire literal in .value
    return str(getattr(value, "value", value))


def _parse_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    match = _INT_PREFIX.match(raw)
    if match is None:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        # Longer than the interpreter's integer string limit
        return None


def split_query_string(query_string: str) -> QueryParams:
    """Split a query string into ordered, decoded ``(name, value)`` pairs.

    A leading ``?`` is ignored and empty segments are skipped. A segment
    with no ``=`` that directly follows a raw ``&&`` inside a ``values{i}``
    parameter is re-attached to that value, so the legacy form
    ``values0=a&&b&&c`` reads as the single value ``a&&b&&c``.
    """
    if query_string.startswith("?"):
        query_string = query_string[1:]

    pairs: QueryParams = []
    after_empty = False
    for segment in query_string.split("&"):
        if not segment:
            after_empty = True
            continue
        if (
            after_empty
            and "=" not in segment
            and pairs
            and INDEXED_PARAMS[VALUES_FIELD].match(pairs[-1][0])
        ):
            name, value = pairs[-1]
            pairs[-1] = (name, value + LEGACY_VALUES_SEPARATOR + unquote_plus(segment))
        else:
            raw_name, _, raw_value = segment.partition("=")
            pairs.append((unquote_plus(raw_name), unquote_plus(raw_value)))
        after_empty = False
    return pairs


class QueryStringCodec:
    """Encode and decode `DynamicQuery` values in the Spring query string format.

    Args:
        max_index: Largest gap allowed in a decoded `select`, `selectAs`,
            `orderBy` or `orderByDirection` list. An entry is kept when its
            index is at most `max_index` plus the number of entries given
            for that list (default ``settings.MAX_PARAM_INDEX``)
    """

    def __init__(self, max_index: Optional[int] = None) -> None:
        self.max_index = settings.MAX_PARAM_INDEX if max_index is None else max_index

    # -------------------
    # Encoding
    # -------------------
    def encode_params(self, query: DynamicQuery) -> QueryParams:
        """Return the ordered ``(name, value)`` pairs for a query, unescaped."""
        params: QueryParams = []

        idx = 0
        for criterion in query.criteria:
            if not criterion.values:
                continue
            params.append((f"{KEY_FIELD}{idx}", criterion.key))
            params.append((f"{OPERATION_FIELD}{idx}", _wire(criterion.operation)))
            for value in criterion.values:
                params.append((f"{VALUES_FIELD}{idx}", _wire(value)))
            idx += 1

        for attr, prefix in _LIST_FIELDS:
            entries = getattr(query, attr)
            if not entries:
                continue
            for pos, entry in enumerate(entries):
                if entry is None:
                    continue
                params.append((f"{prefix}{pos}", _wire(entry)))

        if query.page is not None:
            params.append((PAGE_FIELD, str(query.page)))
        if query.page_size is not None:
            params.append((PAGE_SIZE_FIELD, str(query.page_size)))
        return params

    def encode(self, query: DynamicQuery) -> str:
        """Encode a query as a query string (without a leading ``?``)."""
        return "&".join(f"{_quote(name)}={_quote(value)}" for name, value in self.encode_params(query))

    # -------------------
    # Decoding
    # -------------------
    def decode(self, query_string: str, on_drop: Optional[DropHook] = None) -> DynamicQuery:
        """Decode a query string into a new `DynamicQuery`.

        Args:
            query_string: Query string, with or without a leading ``?``
            on_drop: Called with a `DroppedFragment` for every discarded fragment

        Returns:
            The decoded query. Fields whose parameters are absent are ``None``.
        """
        return self.decode_params(split_query_string(query_string or ""), on_drop=on_drop)

    def decode_params(self, params: QueryParams, on_drop: Optional[DropHook] = None) -> DynamicQuery:
        """Decode already split ``(name, value)`` pairs into a `DynamicQuery`."""

        def drop(param: str, reason: str, index: Optional[int] = None, value: Optional[str] = None) -> None:
            fragment = DroppedFragment(param=param, index=index, reason=reason, value=value)
            logger.debug("Dropped query fragment param=%s index=%s reason=%s", param, index, reason)
            if on_drop is not None:
                on_drop(fragment)

        fragments: Dict[int, Dict[str, Any]] = {}
        positional: Dict[str, Dict[int, str]] = {prefix: {} for _, prefix in _LIST_FIELDS}
        scalars: Dict[str, str] = {}

        for name, value in params:
            if name in (PAGE_FIELD, PAGE_SIZE_FIELD):
                # First occurrence wins, as with URLSearchParams.get
                scalars.setdefault(name, value)
                continue

            for prefix, pattern in INDEXED_PARAMS.items():
                match = pattern.match(name)
                if match is None:
                    continue
                idx = _parse_int(match.group(1))
                if idx is None:
                    drop(prefix, "index out of range", value=value)
                    break
                if prefix in positional:
                    positional[prefix][idx] = value
                    break
                fragment = fragments.setdefault(idx, {})
                if prefix == VALUES_FIELD:
                    fragment.setdefault(VALUES_FIELD, []).extend(value.split(LEGACY_VALUES_SEPARATOR))
                else:
                    fragment[prefix] = value
                break

        criteria: List[Criterion] = []
        for idx in sorted(fragments):
            fragment = fragments[idx]
            key = fragment.get(KEY_FIELD)
            operation_name = fragment.get(OPERATION_FIELD)
            values = fragment.get(VALUES_FIELD)
            if not key:
                drop(KEY_FIELD, "missing key", index=idx)
                continue
            if not operation_name:
                drop(OPERATION_FIELD, "missing operation", index=idx)
                continue
            operation = OPERATIONS_BY_NAME.get(operation_name)
            if operation is None:
                drop(OPERATION_FIELD, "unknown operation", index=idx, value=operation_name)
                continue
            if not values:
                drop(VALUES_FIELD, "missing values", index=idx)
                continue
            criteria.append(Criterion(key=key, operation=operation, values=values))

        for _, prefix in _LIST_FIELDS:
            entries = positional[prefix]
            # Gaps are bounded, dense lists of any length are not
            limit = self.max_index + len(entries)
            for idx in sorted(i for i in entries if i > limit):
                drop(prefix, "index out of range", index=idx, value=entries.pop(idx))

        direction_entries = positional[ORDER_BY_DIRECTION_FIELD]
        for idx in sorted(direction_entries):
            raw = direction_entries[idx]
            if raw not in DIRECTIONS_BY_NAME:
                drop(ORDER_BY_DIRECTION_FIELD, "unknown direction", index=idx, value=raw)
                del direction_entries[idx]

        lists = {attr: self._with_holes(positional[prefix]) for attr, prefix in _LIST_FIELDS}
        if lists["order_by_direction"] is not None:
            lists["order_by_direction"] = [
                DIRECTIONS_BY_NAME[d] if d is not None else None for d in lists["order_by_direction"]
            ]

        page = self._scalar(scalars, PAGE_FIELD, drop)
        page_size = self._scalar(scalars, PAGE_SIZE_FIELD, drop)

        return DynamicQuery(criteria=criteria, page=page, page_size=page_size, **lists)

    @staticmethod
    def _with_holes(entries: Dict[int, str]) -> Optional[List[Optional[str]]]:
        """Place entries at their index; unset positions below the highest index are ``None``."""
        if not entries:
            return None
        result: List[Optional[str]] = [None] * (max(entries) + 1)
        for idx, value in entries.items():
            result[idx] = value
        return result

    @staticmethod
    def _scalar(scalars: Dict[str, str], name: str, drop) -> Optional[int]:
        if name not in scalars:
            return None
        parsed = _parse_int(scalars[name])
        if parsed is None:
            drop(name, "not an integer", value=scalars[name])
        return parsed


query_codec = QueryStringCodec()


def encode(query: DynamicQuery) -> str:
    """Encode a `DynamicQuery` as a query string using the default codec."""
    return query_codec.encode(query)


def encode_params(query: DynamicQuery) -> QueryParams:
    return query_codec.encode_params(query)


def decode(query_string: str, on_drop: Optional[DropHook] = None) -> DynamicQuery:
    """Decode a query string into a `DynamicQuery` using the default codec."""
    return query_codec.decode(query_string, on_drop=on_drop)


def decode_params(params: QueryParams, on_drop: Optional[DropHook] = None) -> DynamicQuery:
    return query_codec.decode_params(params, on_drop=on_drop)
