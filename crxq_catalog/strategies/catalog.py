"""
Catalog query strategy: one bulk read of the pre-built index table.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping

from ..config.models import CatalogSettings, StrategyName
from ..models.resource import RawStorageEntry, StorageMetadata, _as_tags, _as_text
from .base import AcquisitionStrategy, StorageBackend, strategy_registry

logger = logging.getLogger(__name__)


def catalog_row_to_entry(row: Mapping[str, Any]) -> RawStorageEntry:
    """Map a catalog (or catalog search) row onto the common entry shape."""
    path = str(row.get("file_path") or "").lstrip("/")
    name = row.get("file_name") or path.rsplit("/", 1)[-1] or "Resource"
    return RawStorageEntry(
        path=path,
        name=str(name),
        id=str(row.get("id") or path),
        file_url=_as_text(row.get("file_url")),
        metadata=StorageMetadata.from_mapping(
            {
                "size": row.get("file_size"),
                "mimetype": row.get("mime_type"),
                "lastModified": row.get("last_modified"),
                "created_at": row.get("created_at"),
                "updated_at": row.get("updated_at"),
            }
        ),
        program_name=_as_text(row.get("program_name")),
        category=_as_text(row.get("category")),
        subcategory=_as_text(row.get("subcategory")),
        tags=_as_tags(row.get("tags")),
    )


class CatalogQueryStrategy(AcquisitionStrategy):
    """Reads every catalog row and keeps those belonging to the configured bucket."""

    name = StrategyName.CATALOG
    fall_through_on_empty = True

    def __init__(self, backend: StorageBackend, table: str = "storage_files_catalog") -> None:
        super().__init__(backend)
        self.table = table

    async def fetch_rows(self) -> List[RawStorageEntry]:
        data = await self.backend.select(self.table)
        if not isinstance(data, list):
            return []

        bucket = self.backend.bucket
        rows = [
            catalog_row_to_entry(row)
            for row in data
            if isinstance(row, Mapping) and row.get("bucket_name") == bucket
        ]
        skipped = len(data) - len(rows)
        if skipped:
            logger.debug(f"Ignored {skipped} catalog rows from other buckets")
        return rows


def _create_catalog_strategy(backend: StorageBackend, settings: CatalogSettings) -> CatalogQueryStrategy:
    return CatalogQueryStrategy(backend, table=settings.storage.catalog_table)


strategy_registry.register(StrategyName.CATALOG, _create_catalog_strategy)


__all__ = ["CatalogQueryStrategy", "catalog_row_to_entry"]
