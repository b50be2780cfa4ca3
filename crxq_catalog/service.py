"""
Consumer-facing catalog service.

Wires the storage client, strategy chain, normalizer and repository together
and exposes the query contract used by the portal pages and the CLI.

Example::

    async with CatalogService.from_config() as service:
        forms = await service.get_resources({"program": "mtmtft", "sortBy": "name"})
        programs = await service.get_programs()
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Union

from .config.loader import load_settings
from .config.models import CatalogSettings
from .exceptions import NotFoundError
from .loader import CatalogLoader
from .models.base import ResourceType
from .models.resource import ClinicalProgram, ResourceItem
from .normalizer import RecordNormalizer
from .query import FiltersLike, apply_filters, coerce_filters
from .repository import ResourceRepository
from .storage.client import StorageClient
from .strategies import StorageBackend

logger = logging.getLogger(__name__)

BookmarkProvider = Callable[[], Iterable[str]]


class CatalogService:
    """Resource catalog queries over the configured storage backend."""

    def __init__(
        self,
        settings: Optional[CatalogSettings] = None,
        backend: Optional[StorageBackend] = None,
        bookmark_provider: Optional[BookmarkProvider] = None,
        cache_ttl: Optional[float] = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            settings: Catalog settings; defaults are used when omitted
            backend: Storage backend; a ``StorageClient`` is built when omitted
            bookmark_provider: Returns the current user's bookmarked ids
            cache_ttl: Seconds to memoize the resource set (off when None)
        """
        self.settings = settings or CatalogSettings()
        storage = self.settings.storage

        self.backend = backend or StorageClient(
            storage, http=self.settings.http, retry=self.settings.retry
        )
        self.bookmark_provider = bookmark_provider
        self.normalizer = RecordNormalizer(
            endpoint=storage.endpoint or "",
            bucket=storage.bucket,
            public_prefix=storage.public_prefix,
        )
        self.loader = CatalogLoader.from_settings(self.backend, self.settings)
        self.repository = ResourceRepository(
            self.loader,
            self.normalizer,
            backend=self.backend,
            search_rpc=storage.search_rpc,
            cache_ttl=cache_ttl,
        )

    @classmethod
    def from_config(
        cls, config_file: Optional[Union[str, Path]] = None, **kwargs: Any
    ) -> "CatalogService":
        """Build a service from a config file and ``CRXQ_*`` environment variables."""
        return cls(load_settings(config_file), **kwargs)

    async def __aenter__(self) -> "CatalogService":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        close = getattr(self.backend, "close", None)
        if close is not None:
            await close()

    def is_configured(self) -> bool:
        """True when both the storage endpoint and credential are set."""
        return self.settings.storage.is_configured

    def _bookmarks(self) -> List[str]:
        if self.bookmark_provider is None:
            return []
        return list(self.bookmark_provider() or ())

    async def get_resources(self, filters: FiltersLike = None) -> List[ResourceItem]:
        """
        Filtered, sorted, paginated resources.

        Raises:
            ConfigurationError: If storage settings are incomplete
            TransportError: If every acquisition strategy failed
        """
        query = coerce_filters(filters)
        items = await self.repository.get_all_resources(bookmarks=self._bookmarks())
        return apply_filters(items, query)

    async def get_programs(self) -> List[ClinicalProgram]:
        return await self.repository.derive_programs()

    async def get_resource_by_id(self, resource_id: str) -> ResourceItem:
        """
        Look up one resource.

        Raises:
            NotFoundError: If no resource carries ``resource_id``
        """
        items = await self.repository.get_all_resources(bookmarks=self._bookmarks())
        for item in items:
            if item.id == resource_id:
                return item
        raise NotFoundError(f"Resource not found: {resource_id}", resource_id=resource_id)

    async def get_program_resources(self, slug: str) -> List[ResourceItem]:
        """Documentation forms belonging to one program."""
        return await self.get_resources(
            {"program": slug, "type": ResourceType.DOCUMENTATION_FORMS}
        )

    async def get_bookmarked_resources(self) -> List[ResourceItem]:
        marked = set(self._bookmarks())
        if not marked:
            return []
        items = await self.repository.get_all_resources(bookmarks=marked)
        return [item for item in items if item.bookmarked]

    async def search_resources(self, term: str, filters: FiltersLike = None) -> List[ResourceItem]:
        """
        Search the catalog server-side, falling back to local substring search.

        ``filters`` other than ``search`` are applied to either result.
        """
        query = coerce_filters(filters)
        if not term or not term.strip():
            return await self.get_resources(query)

        self.settings.storage.ensure_configured()
        found = await self.repository.search_catalog(term)
        if found:
            marked = set(self._bookmarks())
            found = [item.with_bookmark(item.id in marked) for item in found]
            return apply_filters(found, query.model_copy(update={"search": None}))

        logger.debug(f"Catalog search returned nothing for '{term}'; searching locally")
        return await self.get_resources(query.model_copy(update={"search": term}))


__all__ = ["CatalogService", "BookmarkProvider"]
