"""
Data models for the crxq_catalog library.

This package contains the closed vocabularies, raw and normalized resource
records, and the query filter model.
"""

from .base import *
from .filters import *
from .resource import *

__all__ = [
    # Vocabularies
    "ProgramSlug",
    "GENERAL_PROGRAM",
    "ResourceType",
    "SortField",
    "SortOrder",
    "BaseConfig",
    # Records
    "StorageMetadata",
    "RawStorageEntry",
    "ResourceItem",
    "ClinicalProgram",
    # Queries
    "ResourceFilters",
]
