"""
Tests for the query engine.
"""

import pytest
from pydantic import ValidationError

from crxq_catalog.models.base import ResourceType
from crxq_catalog.models.filters import ResourceFilters
from crxq_catalog.models.resource import ResourceItem
from crxq_catalog.query import apply_filters, matches_search


def ids(items):
    return [item.id for item in items]


class TestResourceFilters:
    """Test filter model validation."""

    def test_scalars_widen_to_lists(self):
        filters = ResourceFilters(program="TMM", type="Protocols", tags="sync")
        assert filters.program == ["tmm"]
        assert filters.type == ["Protocols"]
        assert filters.tags == ["sync"]

    def test_camel_case_aliases(self):
        filters = ResourceFilters.model_validate({"sortBy": "lastUpdated", "sortOrder": "desc"})
        assert filters.sort_by == "lastUpdated"
        assert filters.sort_order == "desc"

    def test_unknown_program_rejected(self):
        with pytest.raises(ValidationError):
            ResourceFilters(program="cardiology")

    def test_negative_pagination_rejected(self):
        with pytest.raises(ValidationError):
            ResourceFilters(offset=-1)
        with pytest.raises(ValidationError):
            ResourceFilters(limit=-5)

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            ResourceFilters.model_validate({"color": "red"})


class TestApplyFilters:
    """Test filtering, sorting and pagination."""

    def test_no_filters_sorts_by_name(self, sample_items):
        assert ids(apply_filters(sample_items)) == ["r2", "r1", "r5", "r4", "r3"]

    def test_program_filter_with_descending_name(self, sample_items):
        result = apply_filters(
            sample_items, {"program": ["tmm", "oc"], "sortBy": "name", "sortOrder": "desc"}
        )
        assert ids(result) == ["r3", "r4", "r2"]
        assert {item.program for item in result} <= {"tmm", "oc"}

    def test_general_program(self, sample_items):
        assert ids(apply_filters(sample_items, {"program": "general"})) == ["r1"]

    def test_type_filter(self, sample_items):
        result = apply_filters(sample_items, {"type": [ResourceType.DOCUMENTATION_FORMS]})
        assert ids(result) == ["r2", "r5", "r4"]

    def test_category_exact_match(self, sample_items):
        assert ids(apply_filters(sample_items, {"category": "Intake"})) == ["r4"]
        assert apply_filters(sample_items, {"category": "intake"}) == []

    def test_tags_require_every_tag(self, sample_items):
        assert ids(apply_filters(sample_items, {"tags": ["sync"]})) == ["r2", "r4"]
        assert ids(apply_filters(sample_items, {"tags": ["sync", "intake"]})) == ["r4"]
        assert apply_filters(sample_items, {"tags": ["sync", "cmr"]}) == []

    @pytest.mark.parametrize(
        "query,expected",
        [
            ("worksheet", ["r5"]),  # name
            ("CARDIO", ["r1"]),  # category, case-insensitive
            ("handout", ["r1"]),  # tags
            ("sync", ["r2", "r4", "r3"]),
            ("nothing-matches", []),
        ],
    )
    def test_search(self, sample_items, query, expected):
        assert ids(apply_filters(sample_items, {"search": query})) == expected

    def test_search_does_not_span_fields(self):
        item = ResourceItem(id="x", name="Blood", type=ResourceType.PROTOCOLS, category="Pressure")
        assert matches_search(item, "blood")
        assert not matches_search(item, "bloodpressure")

    def test_filters_combine_with_and(self, sample_items):
        result = apply_filters(
            sample_items,
            {"program": ["tmm", "oc"], "type": "Documentation Forms", "tags": ["sync"]},
        )
        assert ids(result) == ["r2", "r4"]

    @pytest.mark.parametrize(
        "sort_by,expected",
        [
            ("lastUpdated", ["r4", "r3", "r1", "r2", "r5"]),
            ("downloadCount", ["r3", "r4", "r1", "r2", "r5"]),
            ("category", ["r3", "r1", "r5", "r4", "r2"]),
        ],
    )
    def test_sort_fields_with_missing_values_first(self, sample_items, sort_by, expected):
        assert ids(apply_filters(sample_items, {"sortBy": sort_by})) == expected

    def test_sort_is_stable_in_both_directions(self):
        items = [
            ResourceItem(id=str(i), name="Same", type=ResourceType.PROTOCOLS) for i in range(5)
        ]
        assert ids(apply_filters(items, {"sortOrder": "asc"})) == ["0", "1", "2", "3", "4"]
        assert ids(apply_filters(items, {"sortOrder": "desc"})) == ["0", "1", "2", "3", "4"]

    def test_pagination_after_sort(self, sample_items):
        assert ids(apply_filters(sample_items, {"offset": 1, "limit": 2})) == ["r1", "r5"]
        assert ids(apply_filters(sample_items, {"offset": 3})) == ["r4", "r3"]
        assert apply_filters(sample_items, {"offset": 10}) == []
        assert ids(apply_filters(sample_items, {"limit": 0})) == ids(apply_filters(sample_items))
        assert ids(apply_filters(sample_items, {"offset": 3, "limit": 0})) == ["r4", "r3"]

    def test_input_not_mutated_and_idempotent(self, sample_items):
        original = list(sample_items)
        filters = ResourceFilters(program=["tmm", "oc"], sort_order="desc")

        once = apply_filters(sample_items, filters)
        twice = apply_filters(once, filters)

        assert sample_items == original
        assert once == twice

    def test_filter_output_is_subset(self, sample_items):
        result = apply_filters(sample_items, {"search": "s"})
        assert all(item in sample_items for item in result)
