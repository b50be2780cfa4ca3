"""
Acquisition strategy interface, tagged result and strategy registry.

Every strategy produces the same flat ``RawStorageEntry`` rows. Strategies do
not raise transport failures; ``acquire`` folds them into a failed
``StrategyResult`` so the loader's fallback rules are explicit branches.
Configuration errors are not folded: they abort the whole load.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from ..config.models import CatalogSettings, StrategyName
from ..exceptions import TransportError
from ..models.resource import RawStorageEntry

logger = logging.getLogger(__name__)


class StorageBackend(Protocol):
    """The storage calls strategies rely on (implemented by ``StorageClient``)."""

    @property
    def bucket(self) -> str: ...

    async def select(self, table: str, select: str = "*") -> Any: ...

    async def rpc(self, name: str, payload: Optional[Dict[str, Any]] = None) -> Any: ...

    async def list_objects(
        self, prefix: str = "", limit: int = 1000, offset: int = 0
    ) -> List[Dict[str, Any]]: ...


@dataclass
class StrategyResult:
    """Outcome of one strategy run: rows on success, the error on failure."""

    strategy: str
    rows: List[RawStorageEntry] = field(default_factory=list)
    error: Optional[TransportError] = None
    elapsed: float = 0.0

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_empty(self) -> bool:
        return self.is_success and not self.rows

    @classmethod
    def success(cls, strategy: str, rows: List[RawStorageEntry], elapsed: float = 0.0) -> "StrategyResult":
        return cls(strategy=strategy, rows=list(rows), elapsed=elapsed)

    @classmethod
    def failure(cls, strategy: str, error: TransportError, elapsed: float = 0.0) -> "StrategyResult":
        return cls(strategy=strategy, error=error, elapsed=elapsed)


class AcquisitionStrategy(ABC):
    """Abstract base for catalog acquisition strategies."""

    name: StrategyName

    # An empty successful result lets the chain continue instead of stopping
    fall_through_on_empty: bool = False

    def __init__(self, backend: StorageBackend) -> None:
        self.backend = backend

    @abstractmethod
    async def fetch_rows(self) -> List[RawStorageEntry]:
        """Produce every row this strategy can see; may raise TransportError."""
        raise NotImplementedError

    async def acquire(self) -> StrategyResult:
        """Run the strategy and capture transport failures as a failed result."""
        start = time.monotonic()
        label = StrategyName(self.name).value
        try:
            rows = await self.fetch_rows()
        except TransportError as e:
            return StrategyResult.failure(label, e, time.monotonic() - start)
        elapsed = time.monotonic() - start
        logger.debug(f"Strategy {label} produced {len(rows)} rows in {elapsed:.2f}s")
        return StrategyResult.success(label, rows, elapsed)


class StrategyFactory(Protocol):
    """Callable that constructs an AcquisitionStrategy."""

    def __call__(self, backend: StorageBackend, settings: CatalogSettings) -> AcquisitionStrategy: ...


class StrategyRegistry:
    """Registry of strategy factories keyed by strategy name."""

    def __init__(self) -> None:
        self._factories: Dict[StrategyName, StrategyFactory] = {}

    def register(self, name: StrategyName, factory: StrategyFactory) -> None:
        self._factories[StrategyName(name)] = factory

    def unregister(self, name: StrategyName) -> None:
        self._factories.pop(StrategyName(name), None)

    def create(
        self, name: StrategyName, backend: StorageBackend, settings: CatalogSettings
    ) -> AcquisitionStrategy:
        name = StrategyName(name)
        if name not in self._factories:
            raise ValueError(f"No strategy registered for: {name.value}")
        return self._factories[name](backend, settings)

    def available(self) -> Dict[StrategyName, StrategyFactory]:
        return dict(self._factories)


# Global default registry instance
strategy_registry = StrategyRegistry()


__all__ = [
    "StorageBackend",
    "StrategyResult",
    "AcquisitionStrategy",
    "StrategyFactory",
    "StrategyRegistry",
    "strategy_registry",
]
