"""
crxq-catalog CLI package.

This package provides the command-line interface for browsing the resource
catalog with rich table or JSON output.
"""

from .main import main, run

__all__ = ["main", "run"]
