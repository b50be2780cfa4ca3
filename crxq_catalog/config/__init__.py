"""
Configuration management for crxq_catalog.

This module provides configuration models and loading from files and
environment variables.
"""

from .loader import ConfigLoader, load_settings
from .models import (
    CatalogSettings,
    HttpConfig,
    LoaderConfig,
    LoggingConfig,
    LogLevel,
    RetryPolicy,
    StorageConfig,
    StrategyName,
    TraversalConfig,
)

__all__ = [
    "ConfigLoader",
    "load_settings",
    "CatalogSettings",
    "StorageConfig",
    "RetryPolicy",
    "TraversalConfig",
    "LoaderConfig",
    "HttpConfig",
    "LoggingConfig",
    "LogLevel",
    "StrategyName",
]
