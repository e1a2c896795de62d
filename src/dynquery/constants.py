"""
Wire-format constants for the Spring dynamic query string.
"""

import re
from enum import Enum


class CriteriaOperation(str, Enum):
    """Filter operators understood by the Spring dynamic query resolver."""

    CONTAIN = "CONTAIN"
    DOES_NOT_CONTAIN = "DOES_NOT_CONTAIN"
    END_WITH = "END_WITH"
    START_WITH = "START_WITH"
    SPECIFIED = "SPECIFIED"
    EQUAL = "EQUAL"
    NOT_EQUAL = "NOT_EQUAL"
    GREATER_THAN = "GREATER_THAN"
    GREATER_THAN_OR_EQUAL = "GREATER_THAN_OR_EQUAL"
    LESS_THAN = "LESS_THAN"
    LESS_THAN_OR_EQUAL = "LESS_THAN_OR_EQUAL"

    def __str__(self) -> str:
        return self.value


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def __str__(self) -> str:
        return self.value


# Criterion parameters, suffixed with the criterion index
KEY_FIELD = "key"
OPERATION_FIELD = "operation"
VALUES_FIELD = "values"

# Projection and sort parameters, suffixed with the position index
SELECT_FIELD = "select"
SELECT_AS_FIELD = "selectAs"
ORDER_BY_FIELD = "orderBy"
ORDER_BY_DIRECTION_FIELD = "orderByDirection"

PAGE_FIELD = "page"
PAGE_SIZE_FIELD = "pageSize"

# Legacy separator for several values packed into one values{i} parameter
LEGACY_VALUES_SEPARATOR = "&&"

# Regex anchored per prefix; the trailing digits are the index
INDEXED_PARAMS = {
    name: re.compile(rf"^{name}([0-9]+)$")
    for name in (
        KEY_FIELD,
        OPERATION_FIELD,
        VALUES_FIELD,
        SELECT_FIELD,
        SELECT_AS_FIELD,
        ORDER_BY_FIELD,
        ORDER_BY_DIRECTION_FIELD,
    )
}

OPERATIONS_BY_NAME = {op.value: op for op in CriteriaOperation}
DIRECTIONS_BY_NAME = {d.value: d for d in SortDirection}
