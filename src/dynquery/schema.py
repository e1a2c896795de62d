"""Pydantic models for dynamic queries."""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .constants import CriteriaOperation, SortDirection
from .settings import settings


class Criterion(BaseModel):
    """One filter condition: a field key, an operator and its string values.

    `values` keeps its order; single-value operators read `values[0]`.
    A criterion with no values is never written to a query string.
    """

    key: str = Field(..., description="Field key the condition applies to.")
    operation: CriteriaOperation = Field(..., description="Filter operator.")
    values: List[str] = Field(default_factory=list, description="Operand values as opaque strings.")

    def matches(self, key: str, operation: Optional[CriteriaOperation] = None) -> bool:
        """True when the key matches and, if given, the operation matches too."""
        return self.key == key and (not operation or self.operation == operation)


class SortSpec(BaseModel):
    field: str
    direction: SortDirection = SortDirection.ASC


class DynamicQuery(BaseModel):
    """Criteria, projection, sort and paging describing one query.

    Sort and projection are stored as the parallel arrays the wire format
    uses. ``None`` entries inside those arrays are holes left by sparse
    indices in a decoded query string; they keep their position.
    Optional fields set to ``None`` are left out of the query string.
    """

    model_config = ConfigDict(populate_by_name=True)

    criteria: List[Criterion] = Field(default_factory=list)
    select: Optional[List[Optional[str]]] = None
    select_as: Optional[List[Optional[str]]] = Field(None, alias="selectAs")
    order_by: Optional[List[Optional[str]]] = Field(None, alias="orderBy")
    order_by_direction: Optional[List[Optional[SortDirection]]] = Field(None, alias="orderByDirection")
    page: Optional[int] = None
    page_size: Optional[int] = Field(None, alias="pageSize")

    @classmethod
    def empty(cls, page_size: Optional[int] = None) -> "DynamicQuery":
        """Return a query with no criteria on the first page.

        Args:
            page_size: Page size to start with (default from settings)
        """
        if page_size is None:
            page_size = settings.DEFAULT_PAGE_SIZE
        return cls(criteria=[], page=0, page_size=page_size)

    @property
    def sort(self) -> List[SortSpec]:
        """Pair `order_by` with `order_by_direction` by position.

        A field without a direction at its index gets
        ``settings.DEFAULT_SORT_DIRECTION``. Directions past the end of
        `order_by`, and holes in `order_by`, produce no pair.
        """
        fields = self.order_by or []
        directions = self.order_by_direction or []
        pairs: List[SortSpec] = []
        for idx, field in enumerate(fields):
            if field is None:
                continue
            direction = directions[idx] if idx < len(directions) else None
            if direction is None:
                direction = SortDirection(settings.DEFAULT_SORT_DIRECTION)
            pairs.append(SortSpec(field=field, direction=direction))
        return pairs

    def projection(self) -> List[Tuple[str, str]]:
        """Pair `select` with `select_as` by position as ``(field, alias)``.

        A missing alias falls back to the field name itself.
        """
        aliases = self.select_as or []
        result: List[Tuple[str, str]] = []
        for idx, field in enumerate(self.select or []):
            if field is None:
                continue
            alias = aliases[idx] if idx < len(aliases) else None
            result.append((field, alias or field))
        return result

    def to_wire_dict(self) -> dict:
        """Return the JSON shape used by the browser client (camelCase keys, no nulls)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
