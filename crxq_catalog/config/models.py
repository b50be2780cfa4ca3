"""
Configuration models for crxq_catalog.

This module defines all configuration data models with validation and defaults.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from ..exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StrategyName(str, Enum):
    """Acquisition strategies, in their default fallback order."""

    CATALOG = "catalog"
    RPC = "rpc"
    TRAVERSAL = "traversal"


class StorageConfig(BaseModel):
    """Object storage and catalog backend settings."""

    endpoint: Optional[str] = Field(default=None, description="Storage/REST base URL")
    bucket: str = Field(default="clinicalrxqfiles", min_length=1, description="Bucket name")
    credential: Optional[SecretStr] = Field(default=None, description="API key sent with every call")

    public_prefix: str = Field(
        default="storage/v1/object/public", description="Path prefix for public object URLs"
    )
    catalog_table: str = Field(default="storage_files_catalog", description="Pre-built index table")
    list_rpc: str = Field(default="list_all_files", description="Server-side enumeration function")
    search_rpc: str = Field(default="search_content", description="Server-side search function")

    @field_validator("endpoint", mode="before")
    @classmethod
    def strip_endpoint(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip().rstrip("/")
        return v or None

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint and self.credential and self.credential.get_secret_value())

    def ensure_configured(self) -> None:
        """Raise ConfigurationError when the endpoint or credential is absent."""
        missing = []
        if not self.endpoint:
            missing.append("endpoint")
        if not self.credential or not self.credential.get_secret_value():
            missing.append("credential")
        if missing:
            raise ConfigurationError(
                f"Storage is not configured: missing {', '.join(missing)}. "
                "Set CRXQ_STORAGE_ENDPOINT and CRXQ_STORAGE_CREDENTIAL.",
                missing=missing,
            )


class RetryPolicy(BaseModel):
    """Backoff policy for rate-limited (429) calls."""

    max_attempts: int = Field(default=3, ge=1, le=10, description="Maximum attempts per call")
    initial_delay: float = Field(default=1.0, ge=0.0, description="Initial retry delay in seconds")
    max_delay: float = Field(default=30.0, ge=0.0, description="Maximum retry delay in seconds")
    exponential_base: float = Field(default=2.0, ge=1.0, description="Exponential backoff base")
    jitter: bool = Field(default=True, description="Add random jitter to delays")


class TraversalConfig(BaseModel):
    """Recursive storage traversal settings."""

    max_workers: int = Field(default=4, ge=1, le=64, description="Concurrent directory listings")
    page_size: int = Field(default=1000, ge=1, description="Entries requested per listing call")


class LoaderConfig(BaseModel):
    """Strategy chain settings."""

    strategies: List[StrategyName] = Field(
        default_factory=lambda: list(StrategyName),
        min_length=1,
        description="Enabled strategies in fallback order",
    )
    load_timeout: Optional[float] = Field(
        default=None, gt=0, description="Timeout for one whole load in seconds"
    )

    @field_validator("strategies", mode="before")
    @classmethod
    def split_strategies(cls, v):
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v


class HttpConfig(BaseModel):
    """HTTP session settings."""

    total_timeout: float = Field(default=60.0, gt=0, description="Total request timeout in seconds")
    connect_timeout: float = Field(default=10.0, gt=0, description="Connection timeout in seconds")
    read_timeout: float = Field(default=30.0, gt=0, description="Read timeout in seconds")
    max_connections: int = Field(default=10, ge=1, description="Maximum connections per host")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    user_agent: str = Field(default="crxq-catalog/0.1.0", description="User-Agent header")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(default=LogLevel.INFO, description="Default logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    file_path: Optional[Path] = Field(default=None, description="Log file path")
    max_file_size: int = Field(
        default=10 * 1024 * 1024, description="Max log file size in bytes"
    )
    backup_count: int = Field(default=5, description="Number of backup log files")
    enable_console: bool = Field(default=True, description="Enable console logging")
    enable_file: bool = Field(default=False, description="Enable file logging")
    enable_structured: bool = Field(
        default=False, description="Enable structured JSON logging"
    )

    # Component-specific log levels
    component_levels: Dict[str, LogLevel] = Field(
        default_factory=dict, description="Per-component log levels"
    )


class CatalogSettings(BaseModel):
    """Top-level configuration container."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    traversal: TraversalConfig = Field(default_factory=TraversalConfig)
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
    )


__all__ = [
    "LogLevel",
    "StrategyName",
    "StorageConfig",
    "RetryPolicy",
    "TraversalConfig",
    "LoaderConfig",
    "HttpConfig",
    "LoggingConfig",
    "CatalogSettings",
]
