"""
Resource catalog resolution and normalization for the ClinicalRxQ member portal.

This package discovers every file in the portal's storage bucket, classifies
each one into a resource record (program, type, category, tags) and serves
filtered, sorted views of the resulting set.

Features:
- Catalog table, remote procedure and recursive listing acquisition with fallback
- Path-grammar classification of programs, resource types and categories
- Filter, search, sort and pagination over the normalized set
- Rate-limit aware async HTTP access with aiohttp
- Pydantic configuration from YAML/JSON files and CRXQ_* environment variables
"""

from .classifier import Classification, classify, classify_path
from .config import CatalogSettings, ConfigLoader, StorageConfig, load_settings
from .exceptions import (
    AuthenticationError,
    CatalogError,
    ConfigurationError,
    ConnectionError,
    ContentError,
    HTTPError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ServerError,
    TimeoutError,
    TransportError,
)
from .loader import CatalogLoader
from .models import (
    GENERAL_PROGRAM,
    ClinicalProgram,
    ProgramSlug,
    RawStorageEntry,
    ResourceFilters,
    ResourceItem,
    ResourceType,
    SortField,
    SortOrder,
    StorageMetadata,
)
from .normalizer import RecordNormalizer
from .query import apply_filters
from .repository import ResourceRepository
from .service import CatalogService
from .storage import StorageClient
from .strategies import (
    AcquisitionStrategy,
    CatalogQueryStrategy,
    RecursiveTraversalStrategy,
    RemoteProcedureStrategy,
    StrategyResult,
)

__version__ = "0.1.0"
__author__ = "ClinicalRxQ Team"

__all__ = [
    # Main classes
    "CatalogService",
    "CatalogLoader",
    "ResourceRepository",
    "RecordNormalizer",
    "StorageClient",
    # Strategies
    "AcquisitionStrategy",
    "CatalogQueryStrategy",
    "RemoteProcedureStrategy",
    "RecursiveTraversalStrategy",
    "StrategyResult",
    # Functions
    "apply_filters",
    "classify",
    "classify_path",
    "load_settings",
    # Models
    "Classification",
    "ClinicalProgram",
    "ProgramSlug",
    "GENERAL_PROGRAM",
    "RawStorageEntry",
    "ResourceFilters",
    "ResourceItem",
    "ResourceType",
    "SortField",
    "SortOrder",
    "StorageMetadata",
    # Configuration
    "CatalogSettings",
    "ConfigLoader",
    "StorageConfig",
    # Exceptions
    "CatalogError",
    "ConfigurationError",
    "NotFoundError",
    "TransportError",
    "NetworkError",
    "TimeoutError",
    "ConnectionError",
    "ContentError",
    "HTTPError",
    "RateLimitError",
    "AuthenticationError",
    "ServerError",
]
