"""
Query filter model consumed by the query engine.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import ConfigDict, Field, field_validator

from .base import GENERAL_PROGRAM, BaseConfig, ProgramSlug, ResourceType, SortField, SortOrder

_KNOWN_PROGRAMS = {slug.value for slug in ProgramSlug} | {GENERAL_PROGRAM}


def _listify(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (str, ProgramSlug, ResourceType)):
        return [value]
    return list(value)


class ResourceFilters(BaseConfig):
    """
    Optional, independently combinable filters plus sort and pagination.

    Scalar ``program``/``type`` values are accepted and widened to lists.
    Field aliases match the portal's camelCase names (``sortBy``,
    ``sortOrder``); snake_case names work too.
    """

    model_config = ConfigDict(
        use_enum_values=True,
        validate_assignment=True,
        extra="forbid",
        populate_by_name=True,
    )

    program: Optional[List[str]] = Field(default=None, description="Program slugs to include")
    type: Optional[List[ResourceType]] = Field(default=None, description="Resource types to include")
    category: Optional[str] = Field(default=None, description="Exact category match")
    tags: Optional[List[str]] = Field(default=None, description="Tags an item must all carry")
    search: Optional[str] = Field(default=None, description="Case-insensitive substring")

    sort_by: SortField = Field(default=SortField.NAME, alias="sortBy")
    sort_order: SortOrder = Field(default=SortOrder.ASC, alias="sortOrder")
    offset: int = Field(default=0, ge=0)
    limit: Optional[int] = Field(default=None, ge=0)

    @field_validator("program", mode="before")
    @classmethod
    def normalize_programs(cls, v: Any) -> Any:
        values = _listify(v)
        if values is None:
            return None
        programs = []
        for value in values:
            slug = str(getattr(value, "value", value)).strip().lower()
            if slug not in _KNOWN_PROGRAMS:
                raise ValueError(f"Unknown program: {value!r}")
            programs.append(slug)
        return programs

    @field_validator("type", "tags", mode="before")
    @classmethod
    def widen_scalars(cls, v: Any) -> Any:
        return _listify(v)


__all__ = ["ResourceFilters"]
