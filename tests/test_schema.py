"""Tests for the query model."""

from unittest.mock import patch

import pytest
from pydantic import ValidationError as PydanticValidationError

from dynquery.constants import CriteriaOperation, SortDirection
from dynquery.schema import Criterion, DynamicQuery, SortSpec
from dynquery.settings import settings


class TestCriterion:
    """Tests for Criterion."""

    def test_operation_from_literal(self):
        """Test the operation is coerced from its wire name."""
        c = Criterion(key="age", operation="EQUAL", values=["1"])
        assert c.operation is CriteriaOperation.EQUAL

    def test_unknown_operation_rejected(self):
        """Test an unknown operation name is rejected."""
        with pytest.raises(PydanticValidationError):
            Criterion(key="age", operation="LIKE", values=["1"])

    def test_values_default_empty(self):
        """Test values default to an empty list."""
        assert Criterion(key="a", operation=CriteriaOperation.EQUAL).values == []

    def test_matches(self):
        """Test matching by key and optional operation."""
        c = Criterion(key="age", operation=CriteriaOperation.EQUAL, values=["1"])
        assert c.matches("age")
        assert c.matches("age", CriteriaOperation.EQUAL)
        assert not c.matches("age", CriteriaOperation.NOT_EQUAL)
        assert not c.matches("size")

    def test_operation_str_is_wire_literal(self):
        """Test enum str() gives the wire literal."""
        assert str(CriteriaOperation.GREATER_THAN_OR_EQUAL) == "GREATER_THAN_OR_EQUAL"
        assert str(SortDirection.DESC) == "desc"


class TestDynamicQuery:
    """Tests for DynamicQuery construction and serialization."""

    def test_defaults(self):
        """Test a bare query has no parts set."""
        q = DynamicQuery()
        assert q.criteria == []
        assert q.select is None
        assert q.page is None
        assert q.page_size is None

    def test_populate_by_alias(self):
        """Test fields can be populated by their camelCase aliases."""
        q = DynamicQuery(selectAs=["x"], orderBy=["id"], orderByDirection=["desc"], pageSize=10)
        assert q.select_as == ["x"]
        assert q.order_by == ["id"]
        assert q.order_by_direction == [SortDirection.DESC]
        assert q.page_size == 10

    def test_empty_uses_settings_default(self):
        """Test empty() uses the configured page size."""
        q = DynamicQuery.empty()
        assert q.page == 0
        assert q.page_size == settings.DEFAULT_PAGE_SIZE

    def test_empty_with_page_size(self):
        """Test empty() with an explicit page size."""
        assert DynamicQuery.empty(page_size=5).page_size == 5

    def test_to_wire_dict(self):
        """Test to_wire_dict uses camelCase names and skips unset parts."""
        q = DynamicQuery(
            criteria=[Criterion(key="a", operation=CriteriaOperation.EQUAL, values=["1"])],
            order_by=["id"],
            order_by_direction=[SortDirection.ASC],
            page=0,
        )
        assert q.to_wire_dict() == {
            "criteria": [{"key": "a", "operation": "EQUAL", "values": ["1"]}],
            "orderBy": ["id"],
            "orderByDirection": ["asc"],
            "page": 0,
        }

    def test_from_wire_dict(self):
        """Test validating a camelCase dict."""
        data = {"criteria": [{"key": "a", "operation": "CONTAIN", "values": ["x"]}], "pageSize": 20}
        q = DynamicQuery.model_validate(data)
        assert q.criteria[0].operation is CriteriaOperation.CONTAIN
        assert q.page_size == 20


class TestSortPairs:
    """Tests for pairing order_by with order_by_direction."""

    def test_pairs(self):
        """Test fields are paired with directions by index."""
        q = DynamicQuery(order_by=["a", "b"], order_by_direction=["desc", "asc"])
        assert q.sort == [SortSpec(field="a", direction="desc"), SortSpec(field="b", direction="asc")]

    def test_missing_direction_uses_default(self):
        """Test a field without a direction gets the default."""
        q = DynamicQuery(order_by=["a", "b"], order_by_direction=["desc"])
        assert [(s.field, s.direction) for s in q.sort] == [("a", SortDirection.DESC), ("b", SortDirection.ASC)]

    def test_default_direction_from_settings(self):
        """Test the default direction comes from settings."""
        q = DynamicQuery(order_by=["a"])
        with patch.object(settings, "DEFAULT_SORT_DIRECTION", "desc"):
            assert q.sort[0].direction is SortDirection.DESC

    def test_surplus_directions_ignored(self):
        """Test directions without a field yield no pair."""
        q = DynamicQuery(order_by=["a"], order_by_direction=["desc", "asc", "asc"])
        assert len(q.sort) == 1

    def test_hole_in_direction_uses_default(self):
        """Test a direction hole gets the default."""
        q = DynamicQuery(order_by=["a", "b"], order_by_direction=[None, "desc"])
        assert [s.direction for s in q.sort] == [SortDirection.ASC, SortDirection.DESC]

    def test_hole_in_fields_skipped(self):
        """Test a field hole yields no pair."""
        q = DynamicQuery(order_by=[None, "b"], order_by_direction=["asc", "desc"])
        assert [(s.field, s.direction) for s in q.sort] == [("b", SortDirection.DESC)]

    def test_arrays_not_rewritten(self):
        """Test reading the pairs leaves the stored lists alone."""
        q = DynamicQuery(order_by=["a", "b"], order_by_direction=["desc"])
        _ = q.sort
        assert q.order_by_direction == [SortDirection.DESC]

    def test_no_sort(self):
        """Test a query without sort has no pairs."""
        assert DynamicQuery().sort == []


class TestProjection:
    """Tests for pairing select with select_as."""

    def test_aliases(self):
        """Test select entries are paired with their aliases."""
        q = DynamicQuery(select=["id", "name"], select_as=["identifier"])
        assert q.projection() == [("id", "identifier"), ("name", "name")]

    def test_holes(self):
        """Test select holes are skipped."""
        q = DynamicQuery(select=[None, "name"], select_as=["x", None])
        assert q.projection() == [("name", "name")]

    def test_none(self):
        """Test a query without select projects nothing."""
        assert DynamicQuery().projection() == []
