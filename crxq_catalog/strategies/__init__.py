"""
Acquisition strategies for crxq_catalog.

Importing this package registers the built-in strategies with
``strategy_registry``.
"""

from .base import (
    AcquisitionStrategy,
    StorageBackend,
    StrategyFactory,
    StrategyRegistry,
    StrategyResult,
    strategy_registry,
)
from .catalog import CatalogQueryStrategy, catalog_row_to_entry
from .rpc import RemoteProcedureStrategy
from .traversal import RecursiveTraversalStrategy, is_folder_entry

__all__ = [
    "AcquisitionStrategy",
    "StorageBackend",
    "StrategyFactory",
    "StrategyRegistry",
    "StrategyResult",
    "strategy_registry",
    "CatalogQueryStrategy",
    "catalog_row_to_entry",
    "RemoteProcedureStrategy",
    "RecursiveTraversalStrategy",
    "is_folder_entry",
]
