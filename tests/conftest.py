"""Pytest configuration and fixtures for dynquery tests."""

from typing import Any, Dict, List

import pytest
from dotenv import load_dotenv

from dynquery.builder import QueryBuilder
from dynquery.constants import CriteriaOperation, SortDirection
from dynquery.schema import Criterion, DynamicQuery

# Load environment variables
load_dotenv()


@pytest.fixture
def builder() -> QueryBuilder:
    """Fresh builder with the default page size."""
    return QueryBuilder(default_page_size=20)


@pytest.fixture
def full_query() -> DynamicQuery:
    """Query using every part of the wire format."""
    return DynamicQuery(
        criteria=[
            Criterion(key="name", operation=CriteriaOperation.CONTAIN, values=["john"]),
            Criterion(key="age", operation=CriteriaOperation.GREATER_THAN_OR_EQUAL, values=["18"]),
            Criterion(key="age", operation=CriteriaOperation.LESS_THAN_OR_EQUAL, values=["30"]),
            Criterion(key="status", operation=CriteriaOperation.EQUAL, values=["ACTIVE", "PENDING"]),
        ],
        select=["id", "name"],
        select_as=["identifier", "fullName"],
        order_by=["createDate", "id"],
        order_by_direction=[SortDirection.DESC, SortDirection.ASC],
        page=2,
        page_size=50,
    )


@pytest.fixture(scope="session")
def gift_rows() -> List[Dict[str, Any]]:
    """Gift card rows shaped like the demo backend's data."""
    return [
        {
            "id": i + 1,
            "discountCode": f"GIFT{i + 1:03d}",
            "showName": f"Gift Card {i + 1}",
            "reason": ["Bulk Creation", "Manual", "Import"][i % 3],
            "codeType": ["NORMAL", "SECOND_ITEM_PERCENTAGE", "ADD_X_ITEM_PERCENTAGE"][i % 3],
            "minimumBasketItemCount": 2 if i % 2 == 0 else 5,
            "active": i % 3 != 0,
            "note": None if i % 4 == 0 else f"note {i}",
            "owner": {"country": ["TURKEY", "UNITED_KINGDOM"][i % 2]},
        }
        for i in range(30)
    ]
