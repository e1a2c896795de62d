"""In-memory evaluation of a `DynamicQuery`.

Applies criteria, sort, projection and paging to a list of dict rows and
returns the result in Spring's ``Page`` JSON shape. This is the behaviour
a Spring dynamic query backend exposes, reduced to plain Python so the
codec's output can be exercised end to end without a server (test
fixtures, demos, mock endpoints).

Operation semantics:

- ``CONTAIN`` / ``DOES_NOT_CONTAIN`` / ``START_WITH`` / ``END_WITH``:
  case-insensitive text match against ``values[0]``
- ``EQUAL`` / ``NOT_EQUAL``: string equality against any of ``values``
- ``GREATER_THAN`` ... ``LESS_THAN_OR_EQUAL``: numeric when both sides are
  numbers, string comparison otherwise
- ``SPECIFIED``: field present and not ``None``; ``"false"`` inverts it
"""

import math
from functools import cmp_to_key
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .constants import CriteriaOperation, SortDirection
from .exceptions import EvaluationError, InvalidConfigError
from .logger import get_logger
from .schema import Criterion, DynamicQuery, SortSpec
from .settings import settings
from .types import ProjectedRow, Row, Rows

__all__ = (
    "SortInfo",
    "Pageable",
    "Page",
    "matches",
    "filter_rows",
    "sort_rows",
    "project_row",
    "evaluate",
)

logger = get_logger(__name__)

_MISSING = object()


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class SortInfo(_CamelModel):
    sorted: bool = False
    unsorted: bool = True
    empty: bool = True

    @classmethod
    def of(cls, is_sorted: bool) -> "SortInfo":
        return cls(sorted=is_sorted, unsorted=not is_sorted, empty=not is_sorted)


class Pageable(_CamelModel):
    page_number: int = Field(0, alias="pageNumber")
    page_size: int = Field(..., alias="pageSize")
    sort: SortInfo = Field(default_factory=SortInfo)
    offset: int = 0
    paged: bool = True
    unpaged: bool = False


class Page(_CamelModel):
    """One page of results, serialized like Spring Data's ``Page``."""

    content: List[Dict[str, Any]] = Field(default_factory=list)
    pageable: Pageable
    total_pages: int = Field(0, alias="totalPages")
    total_elements: int = Field(0, alias="totalElements")
    last: bool = True
    size: int = 0
    number: int = 0
    sort: SortInfo = Field(default_factory=SortInfo)
    number_of_elements: int = Field(0, alias="numberOfElements")
    first: bool = True
    empty: bool = True


# -------------------
# Filtering
# -------------------


def _lookup(row: Row, key: str) -> Any:
    """Read a possibly dotted key (``user.name``) from a row."""
    if key in row:
        return row[key]
    current: Any = row
    for part in key.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        number = float(str(value))
    except ValueError:
        return None
    return None if math.isnan(number) else number


def _compare(left: Any, right: str) -> int:
    """Three-way compare a row value with a criterion value."""
    left_num, right_num = _as_number(left), _as_number(right)
    if left_num is not None and right_num is not None:
        a: Any = left_num
        b: Any = right_num
    else:
        a, b = _as_text(left), right
    return (a > b) - (a < b)


_COMPARISONS: Dict[CriteriaOperation, Callable[[int], bool]] = {
    CriteriaOperation.GREATER_THAN: lambda c: c > 0,
    CriteriaOperation.GREATER_THAN_OR_EQUAL: lambda c: c >= 0,
    CriteriaOperation.LESS_THAN: lambda c: c < 0,
    CriteriaOperation.LESS_THAN_OR_EQUAL: lambda c: c <= 0,
}


def matches(row: Row, criterion: Criterion) -> bool:
    """True when `row` satisfies `criterion`.

    Raises:
        EvaluationError: If the criterion has no values
    """
    if not criterion.values:
        raise EvaluationError("Criterion has no values", key=criterion.key, operation=str(criterion.operation))

    value = _lookup(row, criterion.key)
    present = value is not _MISSING and value is not None
    op = criterion.operation
    first = criterion.values[0]

    if op == CriteriaOperation.SPECIFIED:
        return present if first != "false" else not present
    if op == CriteriaOperation.EQUAL:
        return present and _as_text(value) in criterion.values
    if op == CriteriaOperation.NOT_EQUAL:
        return not present or _as_text(value) not in criterion.values
    if op == CriteriaOperation.DOES_NOT_CONTAIN:
        return not present or first.lower() not in _as_text(value).lower()
    if not present:
        return False

    text = _as_text(value).lower()
    if op == CriteriaOperation.CONTAIN:
        return first.lower() in text
    if op == CriteriaOperation.START_WITH:
        return text.startswith(first.lower())
    if op == CriteriaOperation.END_WITH:
        return text.endswith(first.lower())
    return _COMPARISONS[op](_compare(value, first))


def filter_rows(rows: Rows, criteria: List[Criterion]) -> List[Row]:
    """Rows matching every criterion. Criteria without values are ignored."""
    active = [c for c in criteria if c.values]
    return [row for row in rows if all(matches(row, c) for c in active)]


# -------------------
# Sorting and projection
# -------------------


def _sort_key(value: Any) -> Tuple[int, Any]:
    # Missing and None sort first ascending, numbers before text
    if value is _MISSING or value is None:
        return (0, 0)
    number = _as_number(value)
    if number is not None:
        return (1, number)
    return (2, _as_text(value))


def sort_rows(rows: List[Row], sort: List[SortSpec]) -> List[Row]:
    """Stable multi-field sort; the first `SortSpec` is the primary key."""

    def cmp(a: Row, b: Row) -> int:
        for spec in sort:
            ka, kb = _sort_key(_lookup(a, spec.field)), _sort_key(_lookup(b, spec.field))
            if ka[0] != kb[0]:
                result = (ka[0] > kb[0]) - (ka[0] < kb[0])
            else:
                result = (ka[1] > kb[1]) - (ka[1] < kb[1])
            if result:
                return -result if spec.direction == SortDirection.DESC else result
        return 0

    if not sort:
        return list(rows)
    return sorted(rows, key=cmp_to_key(cmp))


def project_row(row: Row, projection: List[Tuple[str, str]]) -> ProjectedRow:
    """Keep only the selected fields, renamed to their aliases."""
    if not projection:
        return dict(row)
    result: ProjectedRow = {}
    for field, alias in projection:
        value = _lookup(row, field)
        if value is not _MISSING:
            result[alias] = value
    return result


# -------------------
# Paging
# -------------------


def evaluate(query: DynamicQuery, rows: Rows, default_page_size: Optional[int] = None) -> Page:
    """Run `query` over `rows` and return the requested page.

    Args:
        query: Query to apply
        rows: Source rows (mappings)
        default_page_size: Page size when the query has none (default from settings)

    Raises:
        InvalidConfigError: If the effective page size is not positive
    """
    page_size = query.page_size
    if page_size is None:
        page_size = settings.DEFAULT_PAGE_SIZE if default_page_size is None else default_page_size
    if page_size <= 0:
        raise InvalidConfigError("Page size must be positive", config_key="pageSize", value=page_size, expected=">0")
    page = max(query.page or 0, 0)

    filtered = filter_rows(rows, query.criteria)
    sort = query.sort
    ordered = sort_rows(filtered, sort)

    start = page * page_size
    end = start + page_size
    projection = query.projection()
    content = [project_row(row, projection) for row in ordered[start:end]]
    total = len(ordered)
    sort_info = SortInfo.of(bool(sort))

    logger.debug("Evaluated query total=%d page=%d size=%d", total, page, page_size)
    return Page(
        content=content,
        pageable=Pageable(page_number=page, page_size=page_size, sort=sort_info, offset=start),
        total_pages=math.ceil(total / page_size),
        total_elements=total,
        last=end >= total,
        size=page_size,
        number=page,
        sort=sort_info,
        number_of_elements=len(content),
        first=page == 0,
        empty=not content,
    )
