"""Type aliases for dynquery package.

Reusable type definitions shared by the codec, the builder and the evaluator.
"""

from typing import Any, Callable, Dict, List, Mapping, Sequence, Tuple, Union

from .constants import CriteriaOperation, SortDirection

# An operation given either as the enum member or its wire literal
Operation = Union[CriteriaOperation, str]
Direction = Union[SortDirection, str]

# Ordered (name, value) pairs as they appear in a query string
QueryParams = List[Tuple[str, str]]

# Filter values given to the builder
CriteriaValues = Sequence[str]

# Row shape consumed by the in-memory evaluator
Row = Mapping[str, Any]
Rows = Sequence[Row]
ProjectedRow = Dict[str, Any]

# Callback invoked by the decoder for every dropped fragment
DropHook = Callable[[Any], None]
