"""
Record models for the resource catalog.

Raw rows produced by the acquisition strategies, the canonical
``ResourceItem`` they are normalized into, and the derived
``ClinicalProgram`` summary. All records are immutable dataclasses.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from .base import GENERAL_PROGRAM, ResourceType


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    """Return the first non-empty value among alternative spellings of a key."""
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return value
    return None


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def _as_text(value: Any) -> Optional[str]:
    if value in (None, ""):
        return None
    return str(value)


def _as_tags(value: Any) -> Optional[Tuple[str, ...]]:
    if value is None:
        return None
    if isinstance(value, str):
        return (value,)
    try:
        return tuple(str(tag) for tag in value if tag not in (None, ""))
    except TypeError:
        return None


@dataclass(frozen=True)
class StorageMetadata:
    """Sidecar metadata attached to a stored object."""

    size: Optional[int] = None
    mime_type: Optional[str] = None
    last_modified: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    # explicit program label, when the uploader tagged one
    program: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "StorageMetadata":
        """Build metadata from any of the key spellings the backends emit."""
        if not isinstance(data, Mapping):
            return cls()
        program = _first(data, "program", "Program")
        return cls(
            size=_as_int(_first(data, "size", "Size", "file_size")),
            mime_type=_as_text(_first(data, "mimetype", "mimeType", "mime_type", "contentType")),
            last_modified=_as_text(_first(data, "lastModified", "last_modified")),
            created_at=_as_text(_first(data, "created_at", "createdAt")),
            updated_at=_as_text(_first(data, "updated_at", "updatedAt")),
            program=_as_text(program),
        )

    @property
    def is_empty(self) -> bool:
        return self == StorageMetadata()


@dataclass(frozen=True)
class RawStorageEntry:
    """
    One file as reported by an acquisition strategy.

    Only ``path``, ``name`` and ``id`` are guaranteed; the cheaper strategies
    cannot supply the enriched catalog columns.
    """

    path: str
    name: str
    id: str
    file_url: Optional[str] = None
    metadata: StorageMetadata = field(default_factory=StorageMetadata)
    program_name: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    tags: Optional[Tuple[str, ...]] = None

    @property
    def tokens(self) -> Tuple[str, ...]:
        """Path split into non-empty ``/`` segments."""
        return tuple(segment for segment in (self.path or "").split("/") if segment)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RawStorageEntry":
        """
        Build an entry from a listing row (``{path, name, id, metadata?}``).

        Missing names fall back to the last path segment and missing ids to
        the path itself.
        """
        path = str(data.get("path") or "").lstrip("/")
        name = str(data.get("name") or path.rsplit("/", 1)[-1] or "Resource")
        return cls(
            path=path,
            name=name,
            id=str(data.get("id") or path),
            file_url=_as_text(data.get("file_url")),
            metadata=StorageMetadata.from_mapping(data.get("metadata")),
            program_name=_as_text(data.get("program_name")),
            category=_as_text(data.get("category")),
            subcategory=_as_text(data.get("subcategory")),
            tags=_as_tags(data.get("tags")),
        )


@dataclass(frozen=True)
class ResourceItem:
    """Canonical normalized record for one downloadable asset."""

    id: str
    name: str
    type: ResourceType
    program: str = GENERAL_PROGRAM
    category: Optional[str] = None
    tags: Optional[Tuple[str, ...]] = None
    file_url: Optional[str] = None
    size_mb: Optional[float] = None
    last_updated: Optional[str] = None
    download_count: Optional[int] = None
    bookmarked: bool = False

    def with_bookmark(self, bookmarked: bool) -> "ResourceItem":
        """Return a copy carrying the given bookmark flag."""
        if bookmarked == self.bookmarked:
            return self
        return replace(self, bookmarked=bookmarked)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the portal's camelCase keys; unset fields are omitted."""
        data = {
            "id": self.id,
            "name": self.name,
            "program": self.program,
            "type": ResourceType(self.type).value,
            "category": self.category,
            "tags": list(self.tags) if self.tags is not None else None,
            "fileUrl": self.file_url,
            "sizeMB": self.size_mb,
            "lastUpdatedISO": self.last_updated,
            "downloadCount": self.download_count,
            "bookmarked": self.bookmarked,
        }
        return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class ClinicalProgram:
    """Program summary derived by counting resources per slug."""

    slug: str
    name: str
    description: str
    icon: str
    resource_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["resourceCount"] = data.pop("resource_count")
        return data


__all__ = [
    "StorageMetadata",
    "RawStorageEntry",
    "ResourceItem",
    "ClinicalProgram",
]
