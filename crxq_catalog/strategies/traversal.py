"""
Recursive storage traversal strategy.

The bucket is walked one directory level at a time with a worklist of
prefixes served by a bounded pool of workers. Each directory is listed page
by page until a short page comes back. Results are merged and sorted by path
so the output order does not depend on completion order.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Dict, List, Mapping, Set

from ..config.models import CatalogSettings, StrategyName
from ..models.resource import RawStorageEntry, StorageMetadata
from .base import AcquisitionStrategy, StorageBackend, strategy_registry

logger = logging.getLogger(__name__)

_FILE_NAME_RE = re.compile(r"\.[a-z0-9]{2,6}$", re.IGNORECASE)


def is_folder_entry(entry: Mapping[str, Any]) -> bool:
    """
    Best-effort folder detection for a listing entry.

    Numeric size or a MIME type in the metadata marks a file, as does a name
    ending in a short extension. Anything else is treated as a folder.
    """
    metadata = entry.get("metadata")
    if isinstance(metadata, Mapping):
        size = metadata.get("size")
        if isinstance(size, (int, float)) and not isinstance(size, bool):
            return False
        if metadata.get("mimetype"):
            return False
    if _FILE_NAME_RE.search(str(entry.get("name") or "")):
        return False
    return True


def _entry_metadata(entry: Mapping[str, Any]) -> StorageMetadata:
    merged: Dict[str, Any] = {
        key: entry[key] for key in ("created_at", "updated_at") if entry.get(key)
    }
    metadata = entry.get("metadata")
    if isinstance(metadata, Mapping):
        merged.update(metadata)
    return StorageMetadata.from_mapping(merged)


class RecursiveTraversalStrategy(AcquisitionStrategy):
    """Enumerates the bucket by listing every directory level."""

    name = StrategyName.TRAVERSAL

    def __init__(self, backend: StorageBackend, max_workers: int = 4, page_size: int = 1000) -> None:
        super().__init__(backend)
        self.max_workers = max(1, max_workers)
        self.page_size = max(1, page_size)

    async def list_directory(self, prefix: str) -> List[Dict[str, Any]]:
        """All entries of one directory level, across as many pages as needed."""
        entries: List[Dict[str, Any]] = []
        offset = 0
        while True:
            page = await self.backend.list_objects(prefix, limit=self.page_size, offset=offset)
            entries.extend(page)
            if len(page) < self.page_size:
                break
            offset += self.page_size

        logger.debug(f"Listed '{prefix or '/'}': {len(entries)} entries")
        return entries

    async def fetch_rows(self) -> List[RawStorageEntry]:
        queue: "asyncio.Queue[str]" = asyncio.Queue()
        seen: Set[str] = {""}
        rows: List[RawStorageEntry] = []
        errors: List[BaseException] = []

        queue.put_nowait("")

        async def worker() -> None:
            while True:
                prefix = await queue.get()
                try:
                    if errors:
                        continue
                    for entry in await self.list_directory(prefix):
                        entry_name = str(entry.get("name") or "")
                        if not entry_name:
                            continue
                        path = f"{prefix}/{entry_name}" if prefix else entry_name
                        if is_folder_entry(entry):
                            if path not in seen:
                                seen.add(path)
                                queue.put_nowait(path)
                        else:
                            rows.append(
                                RawStorageEntry(
                                    path=path,
                                    name=entry_name,
                                    id=str(entry.get("id") or path),
                                    metadata=_entry_metadata(entry),
                                )
                            )
                except Exception as e:
                    # First failure stops further listings; it is re-raised below
                    errors.append(e)
                finally:
                    queue.task_done()

        workers = [asyncio.ensure_future(worker()) for _ in range(self.max_workers)]
        try:
            await queue.join()
        finally:
            for task in workers:
                task.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        if errors:
            raise errors[0]

        rows.sort(key=lambda row: row.path)
        logger.debug(f"Traversal found {len(rows)} files in {len(seen)} directories")
        return rows


def _create_traversal_strategy(
    backend: StorageBackend, settings: CatalogSettings
) -> RecursiveTraversalStrategy:
    return RecursiveTraversalStrategy(
        backend,
        max_workers=settings.traversal.max_workers,
        page_size=settings.traversal.page_size,
    )


strategy_registry.register(StrategyName.TRAVERSAL, _create_traversal_strategy)


__all__ = ["RecursiveTraversalStrategy", "is_folder_entry"]
