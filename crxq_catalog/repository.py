"""
Resource repository: normalized resource set and derived program summaries.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple

from .exceptions import TransportError
from .loader import CatalogLoader
from .models.base import GENERAL_PROGRAM, ProgramSlug
from .models.resource import ClinicalProgram, ResourceItem
from .normalizer import RecordNormalizer
from .strategies import StorageBackend, catalog_row_to_entry

logger = logging.getLogger(__name__)


# Display metadata per program slug
PROGRAM_META: Dict[str, Dict[str, str]] = {
    ProgramSlug.TMM.value: {
        "name": "MedSync: TimeMyMeds",
        "description": "Create predictable appointment schedules to enable clinical service delivery.",
        "icon": "CalendarCheck",
    },
    ProgramSlug.MTMTFT.value: {
        "name": "MTM The Future Today",
        "description": "Team-based MTM with CMR forms, flowsheets, and protocols.",
        "icon": "Pill",
    },
    ProgramSlug.TNT.value: {
        "name": "Test and Treat: Strep, Flu, COVID",
        "description": "Point-of-care testing and treatment protocols for infectious diseases.",
        "icon": "TestTube2",
    },
    ProgramSlug.A1C.value: {
        "name": "HbA1C Testing",
        "description": "In-pharmacy glycemic control testing with counseling and billing support.",
        "icon": "ActivitySquare",
    },
    ProgramSlug.OC.value: {
        "name": "Oral Contraceptives",
        "description": "Pharmacist-prescribed contraceptive services and embedded forms.",
        "icon": "Stethoscope",
    },
}

DEFAULT_PROGRAM_ICON = "Layers"


def program_summary(slug: str, count: int) -> ClinicalProgram:
    meta = PROGRAM_META.get(slug, {})
    return ClinicalProgram(
        slug=slug,
        name=meta.get("name", slug.upper()),
        description=meta.get("description", ""),
        icon=meta.get("icon", DEFAULT_PROGRAM_ICON),
        resource_count=count,
    )


class ResourceRepository:
    """
    Loads and normalizes the resource set.

    Every call to ``get_all_resources`` runs the loader again unless a
    ``cache_ttl`` is given, in which case the normalized set is memoized for
    that many seconds. Bookmark flags are applied per call and never cached.
    """

    def __init__(
        self,
        loader: CatalogLoader,
        normalizer: RecordNormalizer,
        backend: Optional[StorageBackend] = None,
        search_rpc: str = "search_content",
        cache_ttl: Optional[float] = None,
    ) -> None:
        self.loader = loader
        self.normalizer = normalizer
        self.backend = backend
        self.search_rpc = search_rpc
        self.cache_ttl = cache_ttl
        self._cache: Optional[Tuple[float, List[ResourceItem]]] = None
        self._lock: Optional[asyncio.Lock] = None

    def invalidate(self) -> None:
        """Drop the memoized resource set, if any."""
        self._cache = None

    async def _load(self) -> List[ResourceItem]:
        rows = await self.loader.load()
        return [self.normalizer.to_resource_item(row) for row in rows]

    async def _cached_or_load(self) -> List[ResourceItem]:
        if self.cache_ttl is None:
            return await self._load()

        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if self._cache is not None:
                loaded_at, items = self._cache
                if time.monotonic() - loaded_at < self.cache_ttl:
                    return items
            items = await self._load()
            self._cache = (time.monotonic(), items)
            return items

    async def get_all_resources(self, bookmarks: Optional[Iterable[str]] = None) -> List[ResourceItem]:
        """
        Return every normalized resource.

        Args:
            bookmarks: Resource ids to flag as bookmarked

        Raises:
            ConfigurationError: If storage settings are incomplete
            TransportError: If no strategy could load the catalog
        """
        items = await self._cached_or_load()
        marked = set(bookmarks or ())
        if not marked:
            return list(items)
        return [item.with_bookmark(item.id in marked) for item in items]

    async def derive_programs(self) -> List[ClinicalProgram]:
        """Program summaries for every slug with at least one resource, by slug."""
        items = await self.get_all_resources()
        counts = Counter(item.program for item in items if item.program != GENERAL_PROGRAM)
        return [program_summary(slug, counts[slug]) for slug in sorted(counts)]

    async def search_catalog(self, term: str) -> List[ResourceItem]:
        """
        Server-side search through the catalog search function.

        Fails soft: a missing function, a blocked call or a malformed reply
        yields an empty list so callers can fall back to local search.
        """
        if self.backend is None or not term or not term.strip():
            return []

        try:
            data = await self.backend.rpc(self.search_rpc, {"search_term": term})
        except TransportError as e:
            logger.info(f"Catalog search unavailable, using local search: {e}")
            return []

        if not isinstance(data, list):
            return []
        return [
            self.normalizer.to_resource_item(catalog_row_to_entry(row))
            for row in data
            if isinstance(row, dict)
        ]


__all__ = ["ResourceRepository", "PROGRAM_META", "program_summary"]
