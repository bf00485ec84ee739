#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Async client for the npm registry:
  HEAD {base}/{name}                      existence probe (200 / 404 / other)
  GET  {base}/{name}                      package document (owner, latest version)
  GET  {base}/-/v1/search?text=q&size=20  free-text search

- One pooled aiohttp session shared by every worker (keep-alive, connector limit)
- Per-request timeout, reported separately from transport failures
- No retries: callers record a failed probe as the item's final outcome

Install:
  pip install aiohttp
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import aiohttp

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
DEFAULT_TIMEOUT_S = 5.0
DEFAULT_MAX_CONNECTIONS = 150
KEEPALIVE_TIMEOUT_S = 30.0
SEARCH_SIZE = 20
DEFAULT_USER_AGENT = "npm-namecheck/1.0"


class RegistryError(RuntimeError):
    pass


class RegistryTimeout(RegistryError):
    pass


class RegistryTransportError(RegistryError):
    pass


@dataclass(frozen=True)
class ExistsResult:
    exists: Optional[bool]  # None = indeterminate
    status_code: int


def interpret_status(status: int) -> Optional[bool]:
    if status == 200:
        return True
    if status == 404:
        return False
    return None


class RegistryClient:
    """
    Use as an async context manager so the pooled session is closed:

        async with RegistryClient(concurrency=150) as client:
            r = await client.check_exists("left-pad")
    """

    def __init__(
        self,
        base_url: str = DEFAULT_REGISTRY_URL,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        max_connections: int = DEFAULT_MAX_CONNECTIONS,
        user_agent: str = DEFAULT_USER_AGENT,
        logger: Optional[logging.Logger] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.max_connections = max_connections
        self.user_agent = user_agent
        self.log = logger or logging.getLogger(__name__)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "RegistryClient":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def open(self) -> None:
        if self._session is not None:
            return
        connector = aiohttp.TCPConnector(
            limit=self.max_connections,
            keepalive_timeout=KEEPALIVE_TIMEOUT_S,
        )
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }
        # per-request timeout is passed explicitly on each call
        self._session = aiohttp.ClientSession(
            connector=connector,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=None),
        )

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RegistryError("RegistryClient is not open; use 'async with RegistryClient(...)'")
        return self._session

    def package_url(self, name: str) -> str:
        return f"{self.base_url}/{quote(name, safe='@')}"

    def _timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.timeout_s)

    # ---------------------------
    # Endpoints
    # ---------------------------

    async def check_exists(self, name: str) -> ExistsResult:
        url = self.package_url(name)
        try:
            async with self.session.head(url, timeout=self._timeout(), allow_redirects=False) as resp:
                status = resp.status
        except asyncio.TimeoutError as e:
            raise RegistryTimeout("request timeout") from e
        except aiohttp.ClientError as e:
            raise RegistryTransportError(f"{type(e).__name__}: {e}") from e

        self.log.debug("HEAD %s -> %s", url, status)
        return ExistsResult(exists=interpret_status(status), status_code=status)

    async def fetch_metadata(self, name: str) -> Optional[Dict[str, Any]]:
        """Package document, or None when the registry has no such package."""
        url = self.package_url(name)
        try:
            async with self.session.get(url, timeout=self._timeout()) as resp:
                if resp.status == 404:
                    return None
                if resp.status != 200:
                    raise RegistryError(f"unexpected status {resp.status} for {url}")
                return await resp.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise RegistryTimeout("request timeout") from e
        except aiohttp.ClientError as e:
            raise RegistryTransportError(f"{type(e).__name__}: {e}") from e

    async def search(self, text: str, size: int = SEARCH_SIZE) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/-/v1/search"
        params = {"text": text, "size": str(size)}
        try:
            async with self.session.get(url, params=params, timeout=self._timeout()) as resp:
                if resp.status != 200:
                    raise RegistryError(f"search for '{text}' failed: HTTP {resp.status}")
                payload = await resp.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise RegistryTimeout("request timeout") from e
        except aiohttp.ClientError as e:
            raise RegistryTransportError(f"{type(e).__name__}: {e}") from e

        objects = payload.get("objects") if isinstance(payload, dict) else None
        return list(objects or [])


def package_identifier(obj: Dict[str, Any]) -> Optional[str]:
    pkg = obj.get("package") or {}
    name = pkg.get("name")
    return name if isinstance(name, str) and name else None


def summarize_metadata(doc: Dict[str, Any]) -> Dict[str, str]:
    maintainers = doc.get("maintainers") or []
    owner = None
    if maintainers and isinstance(maintainers[0], dict):
        owner = maintainers[0].get("name")
    latest = (doc.get("dist-tags") or {}).get("latest")
    return {
        "owner": owner or "unknown",
        "version": latest or "unknown",
    }
