"""
Custom logging filters for crxq_catalog.

This module provides credential masking and component-specific filtering.
"""

import logging
import re
from typing import List, Pattern, Tuple


class SensitiveDataFilter(logging.Filter):
    """Filter to mask storage credentials in log messages."""

    def __init__(self) -> None:
        """Initialize sensitive data filter."""
        super().__init__()

        self.rules: List[Tuple[Pattern[str], str]] = [
            # apikey headers, api_key/token/secret/credential assignments
            (
                re.compile(
                    r'(api[_-]?key|apikey|token|secret|credential)(["\']?\s*[:=]\s*["\']?)([A-Za-z0-9._\-+/=]{8,})',
                    re.IGNORECASE,
                ),
                r"\1\2***MASKED***",
            ),
            # Bearer tokens
            (
                re.compile(r"(bearer\s+)([A-Za-z0-9._\-+/=]{8,})", re.IGNORECASE),
                r"\1***MASKED***",
            ),
            # Bare JWTs (header.payload.signature)
            (
                re.compile(r"\beyJ[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+"),
                "***MASKED***",
            ),
            # URLs with credentials
            (re.compile(r"(https?://[^:/\s]+):([^@\s]+)@", re.IGNORECASE), r"\1:***MASKED***@"),
        ]

    def mask(self, message: str) -> str:
        for pattern, replacement in self.rules:
            message = pattern.sub(replacement, message)
        return message

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter log record to mask sensitive data."""
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # Malformed format args; let the handler report it
            return True

        masked = self.mask(message)
        if masked != message:
            record.msg = masked
            record.args = ()
        return True


class ComponentFilter(logging.Filter):
    """Filter records to those emitted by one component's logger tree."""

    def __init__(self, component: str):
        """
        Initialize component filter.

        Args:
            component: Logger name prefix, e.g. ``crxq_catalog.strategies``
        """
        super().__init__()
        self.component = component

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name == self.component or record.name.startswith(
            self.component + "."
        )
