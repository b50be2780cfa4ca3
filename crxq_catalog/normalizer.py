"""
Record normalizer: merge a raw storage row with its path classification.

``to_resource_item`` is total: any ``RawStorageEntry`` produces a valid
``ResourceItem``; missing fields fall back to defaults instead of raising.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import quote

from .classifier import classify, prettify_token
from .models.base import ProgramSlug
from .models.resource import RawStorageEntry, ResourceItem

BYTES_PER_MB = 1024 * 1024

# Characters left unescaped when encoding an object path (mirrors encodeURI)
_URI_SAFE = "/;,?:@&=+$-_.!~*'()#"

_DISPLAY_EXTENSION_RE = re.compile(
    r"\.(pdf|mp4|pptx(?:\.mp4)?|png|jpg|jpeg|docx)$", re.IGNORECASE
)


def program_name_to_slug(name: Optional[str]) -> str:
    """
    Map a catalog program label to its slug with case-insensitive substring rules.

    Unrecognized labels map to the first rule's slug (``tmm``).
    """
    n = str(name or "").lower()
    if "timemymeds" in n:
        return ProgramSlug.TMM.value
    if "mtm the future today" in n:
        return ProgramSlug.MTMTFT.value
    if "test and treat" in n:
        return ProgramSlug.TNT.value
    if "hb" in n and "a1c" in n:
        return ProgramSlug.A1C.value
    if "oral" in n and "contracept" in n:
        return ProgramSlug.OC.value
    return ProgramSlug.TMM.value


def display_name(name: str) -> str:
    """Strip one known file extension from a file name."""
    return _DISPLAY_EXTENSION_RE.sub("", name)


def size_in_mb(size: Optional[int]) -> Optional[float]:
    """Convert a byte count to megabytes (2 decimals); ``None`` for zero/absent."""
    if not size:
        return None
    return round(size / BYTES_PER_MB, 2)


def public_url(endpoint: str, public_prefix: str, bucket: str, path: str) -> str:
    """Build the public download URL of an object."""
    clean_path = (path or "").lstrip("/")
    return "/".join(
        [
            endpoint.rstrip("/"),
            public_prefix.strip("/"),
            bucket,
            quote(clean_path, safe=_URI_SAFE),
        ]
    )


class RecordNormalizer:
    """
    Converts raw storage rows into ``ResourceItem`` records.

    The normalizer needs the storage endpoint and bucket only to build public
    URLs for rows that do not carry a direct one.
    """

    def __init__(
        self,
        endpoint: str,
        bucket: str,
        public_prefix: str = "storage/v1/object/public",
    ) -> None:
        self.endpoint = endpoint
        self.bucket = bucket
        self.public_prefix = public_prefix

    def public_url(self, path: str) -> str:
        return public_url(self.endpoint, self.public_prefix, self.bucket, path)

    def to_resource_item(self, row: RawStorageEntry) -> ResourceItem:
        """Normalize one row."""
        tokens = row.tokens
        classification = classify(tokens, row.metadata)

        # Catalog-provided program labels win over the path-derived program
        if row.program_name:
            program = program_name_to_slug(row.program_name)
        else:
            program = classification.program

        category = (
            prettify_token(row.subcategory) if row.subcategory else classification.category
        )

        metadata = row.metadata
        raw_name = row.name or (tokens[-1] if tokens else "") or "Resource"

        return ResourceItem(
            id=row.id or row.path,
            name=display_name(raw_name),
            program=program,
            type=classification.type,
            category=category,
            tags=tuple(row.tags) if row.tags else None,
            file_url=row.file_url or self.public_url(row.path),
            size_mb=size_in_mb(metadata.size),
            last_updated=metadata.last_modified or metadata.updated_at or metadata.created_at,
            download_count=None,
            bookmarked=False,
        )


__all__ = [
    "RecordNormalizer",
    "program_name_to_slug",
    "display_name",
    "size_in_mb",
    "public_url",
]
