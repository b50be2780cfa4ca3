"""
Remote procedure listing strategy.
"""

from __future__ import annotations

from typing import List, Mapping

from ..config.models import CatalogSettings, StrategyName
from ..models.resource import RawStorageEntry
from .base import AcquisitionStrategy, StorageBackend, strategy_registry


class RemoteProcedureStrategy(AcquisitionStrategy):
    """Calls the server-side enumeration function for the whole bucket."""

    name = StrategyName.RPC

    def __init__(self, backend: StorageBackend, function: str = "list_all_files") -> None:
        super().__init__(backend)
        self.function = function

    async def fetch_rows(self) -> List[RawStorageEntry]:
        data = await self.backend.rpc(self.function, {"bucket_name": self.backend.bucket})
        if not isinstance(data, list):
            return []
        return [RawStorageEntry.from_mapping(row) for row in data if isinstance(row, Mapping)]


def _create_rpc_strategy(backend: StorageBackend, settings: CatalogSettings) -> RemoteProcedureStrategy:
    return RemoteProcedureStrategy(backend, function=settings.storage.list_rpc)


strategy_registry.register(StrategyName.RPC, _create_rpc_strategy)


__all__ = ["RemoteProcedureStrategy"]
