"""
dynquery: encode and decode Spring dynamic query strings.

Exposes the query model, the codec and the `QueryBuilder` for easy access.
"""

from .builder import QueryBuilder, create_query_builder, parse_query_string, to_query_string
from .codec import DroppedFragment, QueryStringCodec, decode, encode
from .constants import CriteriaOperation, SortDirection
from .schema import Criterion, DynamicQuery, SortSpec

__version__ = "0.1.0"

__all__ = [
    "CriteriaOperation",
    "SortDirection",
    "Criterion",
    "SortSpec",
    "DynamicQuery",
    "DroppedFragment",
    "QueryStringCodec",
    "encode",
    "decode",
    "QueryBuilder",
    "create_query_builder",
    "parse_query_string",
    "to_query_string",
]
