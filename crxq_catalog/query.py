"""
Query engine: filter, search, sort and paginate an in-memory resource list.

``apply_filters`` is pure. It never mutates its input and always returns a
new list.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from .models.base import GENERAL_PROGRAM, ResourceType, SortField, SortOrder
from .models.filters import ResourceFilters
from .models.resource import ResourceItem

FiltersLike = Union[ResourceFilters, Mapping[str, Any], None]


def _sort_key(sort_by: str) -> Callable[[ResourceItem], Any]:
    # Missing values sort as empty string / zero
    keys: Dict[str, Callable[[ResourceItem], Any]] = {
        SortField.NAME.value: lambda item: item.name or "",
        SortField.LAST_UPDATED.value: lambda item: item.last_updated or "",
        SortField.DOWNLOAD_COUNT.value: lambda item: item.download_count or 0,
        SortField.CATEGORY.value: lambda item: item.category or "",
    }
    return keys.get(sort_by, keys[SortField.NAME.value])


def matches_search(item: ResourceItem, query: str) -> bool:
    """Case-insensitive substring match on name, category or joined tags."""
    q = query.lower()
    fields = (item.name or "", item.category or "", " ".join(item.tags or ()))
    return any(q in field.lower() for field in fields)


def coerce_filters(filters: FiltersLike) -> ResourceFilters:
    if filters is None:
        return ResourceFilters()
    if isinstance(filters, ResourceFilters):
        return filters
    return ResourceFilters.model_validate(dict(filters))


def apply_filters(items: Sequence[ResourceItem], filters: FiltersLike = None) -> List[ResourceItem]:
    """
    Apply filters, then sort, then offset/limit.

    Filter kinds combine with AND. ``tags`` requires every listed tag.
    Sorting is stable in both directions. A ``limit`` of None or 0 means "the rest".

    Raises:
        pydantic.ValidationError: If ``filters`` is a mapping with invalid values
    """
    f = coerce_filters(filters)
    out = list(items)

    if f.program:
        programs = set(f.program)
        out = [item for item in out if (item.program or GENERAL_PROGRAM) in programs]

    if f.type:
        types = {ResourceType(t).value for t in f.type}
        out = [item for item in out if ResourceType(item.type).value in types]

    if f.category:
        out = [item for item in out if item.category == f.category]

    if f.tags:
        required = f.tags
        out = [item for item in out if all(tag in (item.tags or ()) for tag in required)]

    if f.search:
        out = [item for item in out if matches_search(item, f.search)]

    out = sorted(
        out,
        key=_sort_key(SortField(f.sort_by).value),
        reverse=SortOrder(f.sort_order) is SortOrder.DESC,
    )

    start = f.offset
    end: Optional[int] = start + f.limit if f.limit else None
    return out[start:end]


__all__ = ["apply_filters", "coerce_filters", "matches_search", "FiltersLike"]
