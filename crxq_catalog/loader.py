"""
Catalog loader: runs the acquisition strategies as a fallback chain.

Rules, in chain order:

* a failed strategy hands over to the next one;
* a strategy flagged ``fall_through_on_empty`` (the catalog query) hands
  over when it succeeds with zero rows;
* any other success, empty or not, ends the chain;
* when every strategy fails, the last failure is raised.

Missing configuration is checked once, before any strategy runs.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

from .config.models import CatalogSettings, StorageConfig
from .exceptions import TimeoutError as CatalogTimeoutError
from .exceptions import TransportError
from .models.resource import RawStorageEntry
from .strategies import AcquisitionStrategy, StorageBackend, StrategyRegistry, StrategyResult
from .strategies import strategy_registry as default_registry

logger = logging.getLogger(__name__)


class CatalogLoader:
    """Produces the flat row set from the first strategy that can deliver it."""

    def __init__(
        self,
        strategies: Sequence[AcquisitionStrategy],
        storage: Optional[StorageConfig] = None,
        load_timeout: Optional[float] = None,
    ) -> None:
        if not strategies:
            raise ValueError("At least one acquisition strategy is required")
        self.strategies = list(strategies)
        self.storage = storage
        self.load_timeout = load_timeout
        self.last_results: List[StrategyResult] = []

    @classmethod
    def from_settings(
        cls,
        backend: StorageBackend,
        settings: CatalogSettings,
        registry: Optional[StrategyRegistry] = None,
    ) -> "CatalogLoader":
        """Build the chain named by ``settings.loader.strategies``."""
        registry = registry or default_registry
        strategies = [
            registry.create(name, backend, settings) for name in settings.loader.strategies
        ]
        return cls(strategies, storage=settings.storage, load_timeout=settings.loader.load_timeout)

    async def load(self) -> List[RawStorageEntry]:
        """
        Run the chain once.

        Raises:
            ConfigurationError: If storage settings are incomplete
            TransportError: If every strategy failed, or the load timed out
        """
        if self.storage is not None:
            self.storage.ensure_configured()

        if self.load_timeout is None:
            return await self._run_chain()

        try:
            return await asyncio.wait_for(self._run_chain(), timeout=self.load_timeout)
        except asyncio.TimeoutError as e:
            raise CatalogTimeoutError(
                f"Catalog load exceeded {self.load_timeout}s",
                timeout_value=self.load_timeout,
            ) from e

    async def _run_chain(self) -> List[RawStorageEntry]:
        results: List[StrategyResult] = []
        self.last_results = results
        last_error: Optional[TransportError] = None
        final_index = len(self.strategies) - 1

        for index, strategy in enumerate(self.strategies):
            result = await strategy.acquire()
            results.append(result)

            if result.is_success:
                if result.rows or not strategy.fall_through_on_empty or index == final_index:
                    logger.info(
                        f"Loaded {len(result.rows)} rows via {result.strategy} "
                        f"in {result.elapsed:.2f}s"
                    )
                    return result.rows
                logger.info(f"{result.strategy} returned no rows; trying next strategy")
                continue

            last_error = result.error
            if index < final_index:
                logger.warning(f"{result.strategy} strategy failed, falling through: {result.error}")

        logger.error(f"All acquisition strategies failed; last error: {last_error}")
        if last_error is not None:
            raise last_error
        raise TransportError("No acquisition strategy produced a result")


__all__ = ["CatalogLoader"]
