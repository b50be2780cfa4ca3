"""
Storage backend access for crxq_catalog.
"""

from .client import StorageClient
from .retry import RetryHandler

__all__ = ["StorageClient", "RetryHandler"]
