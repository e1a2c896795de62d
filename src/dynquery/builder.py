"""Stateful editing of one owned `DynamicQuery`.

`QueryBuilder` wraps a single query and edits it in place. It never
validates: a negative page or an unknown sort field is stored as given,
and the backend decides what it means.

Typical usage:

    builder = QueryBuilder()
    builder.upsert_criteria("name", CriteriaOperation.CONTAIN, ["john"])
    builder.set_sort("createDate", "desc")
    url = f"/api/gifts?{builder.to_query_string()}"
"""

from typing import List, Optional

from .codec import QueryStringCodec, query_codec
from .constants import CriteriaOperation, SortDirection
from .logger import Logger
from .schema import Criterion, DynamicQuery
from .settings import settings
from .types import CriteriaValues, Direction, DropHook, Operation

__all__ = (
    "QueryBuilder",
    "create_query_builder",
    "parse_query_string",
    "to_query_string",
)


class QueryBuilder:
    """Owner of one `DynamicQuery` with convenience edits.

    The initial query is deep-copied so the builder never shares state
    with its caller.

    Attributes:
        default_page_size: Page size used by `clear()` and for a fresh query
        codec: Codec used by `to_query_string` / `from_query_string`
    """

    def __init__(
        self,
        initial_query: Optional[DynamicQuery] = None,
        default_page_size: Optional[int] = None,
        codec: Optional[QueryStringCodec] = None,
    ) -> None:
        self.default_page_size = settings.DEFAULT_PAGE_SIZE if default_page_size is None else default_page_size
        self.codec = codec or query_codec
        self.logger = Logger(self.__class__.__name__)
        if initial_query is None:
            self._query = DynamicQuery.empty(self.default_page_size)
        else:
            self._query = initial_query.model_copy(deep=True)

    def __repr__(self) -> str:
        return f"<QueryBuilder: {self.to_query_string()}>"

    @property
    def query(self) -> DynamicQuery:
        """The owned query."""
        return self._query

    @query.setter
    def query(self, query: DynamicQuery) -> None:
        self._query = query

    # -------------------
    # Codec
    # -------------------
    def to_query_string(self) -> str:
        return self.codec.encode(self._query)

    def from_query_string(self, query_string: str, on_drop: Optional[DropHook] = None) -> DynamicQuery:
        """Replace the owned query with the one decoded from `query_string`."""
        self._query = self.codec.decode(query_string, on_drop=on_drop)
        self.logger.message("Parsed query criteria=%d", len(self._query.criteria))
        return self._query

    # -------------------
    # Criteria
    # -------------------
    def add_criteria(self, key: str, operation: Operation, values: CriteriaValues) -> None:
        """Append a criterion. Existing criteria for the same key are kept."""
        values = [values] if isinstance(values, str) else list(values)
        self._query.criteria.append(Criterion(key=key, operation=operation, values=values))

    def remove_criteria(self, key: str, operation: Optional[Operation] = None) -> None:
        """Remove criteria for `key`, restricted to `operation` when one is given.

        A criterion survives when its key differs or, with an operation
        given, when its operation differs.
        """
        op = CriteriaOperation(operation) if operation else None
        self._query.criteria = [c for c in self._query.criteria if c.key != key or (op and c.operation != op)]

    def remove_criteria_by_key(self, key: str) -> None:
        self._query.criteria = [c for c in self._query.criteria if c.key != key]

    def upsert_criteria(self, key: str, operation: Operation, values: CriteriaValues) -> None:
        """Replace the criteria matching `(key, operation)` with one carrying `values`.

        Criteria on the same key with another operation are left in place;
        the new criterion goes to the end of the list.
        """
        self.remove_criteria(key, operation)
        self.add_criteria(key, operation, values)

    def get_criteria_values(self, key: str, operation: Optional[Operation] = None) -> List[str]:
        """Values of all matching criteria, flattened in criteria order."""
        op = CriteriaOperation(operation) if operation else None
        return [value for c in self._query.criteria if c.matches(key, op) for value in c.values]

    def has_criteria(self, key: str, operation: Optional[Operation] = None) -> bool:
        op = CriteriaOperation(operation) if operation else None
        return any(c.matches(key, op) for c in self._query.criteria)

    def clear_criteria(self) -> None:
        self._query.criteria = []

    # -------------------
    # Paging and sorting
    # -------------------
    def set_page(self, page: int) -> None:
        self._query.page = page

    def set_page_size(self, page_size: int) -> None:
        self._query.page_size = page_size

    def set_sort(self, field: str, direction: Direction) -> None:
        """Sort by a single field, replacing any previous sort."""
        self._query.order_by = [field]
        self._query.order_by_direction = [SortDirection(direction)]

    def clear_sort(self) -> None:
        self._query.order_by = None
        self._query.order_by_direction = None

    def clear(self) -> None:
        """Reset to an empty query on the first page."""
        self._query = DynamicQuery.empty(self.default_page_size)
        self.logger.message("Cleared query page_size=%d", self.default_page_size)


def create_query_builder(initial_query: Optional[DynamicQuery] = None) -> QueryBuilder:
    return QueryBuilder(initial_query)


def parse_query_string(query_string: str, on_drop: Optional[DropHook] = None) -> DynamicQuery:
    """Decode a query string into a new `DynamicQuery`."""
    return QueryBuilder().from_query_string(query_string, on_drop=on_drop)


def to_query_string(query: DynamicQuery) -> str:
    """Encode a `DynamicQuery` without taking ownership of it."""
    return QueryBuilder(query).to_query_string()
