"""
Async REST client for the storage backend.

Wraps one aiohttp session and exposes the three read calls the acquisition
strategies need: a catalog table select, a remote procedure call and a
single-level object listing. Transport failures surface as
``TransportError`` subclasses; 429 responses are retried with backoff first.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import aiohttp
from aiohttp import ClientSession, ClientTimeout, TCPConnector

from ..config.models import HttpConfig, RetryPolicy, StorageConfig
from ..exceptions import CatalogError, ContentError, ErrorHandler
from ..normalizer import public_url
from .retry import RetryHandler

logger = logging.getLogger(__name__)


class StorageClient:
    """
    Read-only client for the catalog table, RPC and storage listing endpoints.

    Use as an async context manager::

        async with StorageClient(settings.storage) as client:
            rows = await client.select("storage_files_catalog")
    """

    def __init__(
        self,
        storage: StorageConfig,
        http: Optional[HttpConfig] = None,
        retry: Optional[RetryPolicy] = None,
        retry_handler: Optional[RetryHandler] = None,
    ) -> None:
        self.storage = storage
        self.http = http or HttpConfig()
        self.retry_handler = retry_handler or RetryHandler(retry)
        self._session: Optional[ClientSession] = None

    async def __aenter__(self) -> "StorageClient":
        await self._create_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @property
    def endpoint(self) -> str:
        return self.storage.endpoint or ""

    @property
    def bucket(self) -> str:
        return self.storage.bucket

    def _default_headers(self) -> Dict[str, str]:
        credential = self.storage.credential.get_secret_value() if self.storage.credential else ""
        return {
            "apikey": credential,
            "Authorization": f"Bearer {credential}",
            "Accept": "application/json",
            "User-Agent": self.http.user_agent,
        }

    async def _create_session(self) -> None:
        """
        Create the aiohttp session; idempotent.

        Raises:
            ConfigurationError: If the endpoint or credential is missing
        """
        if self._session is not None:
            return

        self.storage.ensure_configured()

        timeout = ClientTimeout(
            total=self.http.total_timeout,
            connect=self.http.connect_timeout,
            sock_read=self.http.read_timeout,
        )
        connector = TCPConnector(
            limit_per_host=self.http.max_connections,
            ssl=self.http.verify_ssl,
            enable_cleanup_closed=True,
        )
        self._session = ClientSession(
            timeout=timeout,
            connector=connector,
            headers=self._default_headers(),
            raise_for_status=False,  # statuses are mapped to typed errors below
        )

    async def close(self) -> None:
        """Close the session and cleanup resources."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def _request_once(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, str]] = None,
        payload: Optional[Any] = None,
    ) -> Any:
        if self._session is None:
            await self._create_session()

        try:
            async with self._session.request(
                method, url, params=params, json=payload
            ) as response:
                text = await response.text()
                if response.status >= 400:
                    raise ErrorHandler.handle_http_status_error(
                        response.status,
                        text[:200] or (response.reason or ""),
                        url,
                        dict(response.headers),
                        text,
                    )
        except CatalogError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ErrorHandler.handle_aiohttp_error(e, url) from e

        if not text.strip():
            return None
        try:
            return json.loads(text)
        except ValueError as e:
            raise ContentError(f"Response is not valid JSON: {e}", url=url) from e

    async def request_json(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, str]] = None,
        payload: Optional[Any] = None,
        operation_name: Optional[str] = None,
    ) -> Any:
        """Issue one call (retried while rate limited) and decode its JSON body."""
        return await self.retry_handler.execute_with_retry(
            self._request_once,
            method,
            url,
            params=params,
            payload=payload,
            operation_name=operation_name or f"{method} {url}",
        )

    async def select(self, table: str, select: str = "*") -> Any:
        """Bulk read of a REST table."""
        url = f"{self.endpoint}/rest/v1/{quote(table)}"
        return await self.request_json(
            "GET", url, params={"select": select}, operation_name=f"select {table}"
        )

    async def rpc(self, name: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """Call a server-side function."""
        url = f"{self.endpoint}/rest/v1/rpc/{quote(name)}"
        return await self.request_json(
            "POST", url, payload=payload or {}, operation_name=f"rpc {name}"
        )

    async def list_objects(
        self, prefix: str = "", limit: int = 1000, offset: int = 0
    ) -> List[Dict[str, Any]]:
        """
        List one directory level of the bucket.

        Returns at most ``limit`` entries; a non-list body is treated as empty.

        Raises:
            TransportError: If the listing call fails
        """
        url = f"{self.endpoint}/storage/v1/object/list/{quote(self.bucket, safe='')}"
        body = {
            "prefix": prefix,
            "limit": limit,
            "offset": offset,
            "sortBy": {"column": "name", "order": "asc"},
        }
        data = await self.request_json(
            "POST", url, payload=body, operation_name=f"list '{prefix}'"
        )
        if not isinstance(data, list):
            if data is not None:
                logger.warning(f"Unexpected listing payload for prefix '{prefix}': {type(data).__name__}")
            return []
        return [entry for entry in data if isinstance(entry, dict)]

    def public_url(self, path: str) -> str:
        return public_url(self.endpoint, self.storage.public_prefix, self.bucket, path)


__all__ = ["StorageClient"]
