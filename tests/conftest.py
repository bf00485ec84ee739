"""
Shared fixtures: a local stub of the npm registry served by aiohttp.

The stub answers
  HEAD/GET /{name}      status from `stub.status` (default 404), JSON doc on GET 200
  GET /-/v1/search      {"objects": [{"package": {"name": ...}}, ...]}
and records how many package requests are in flight at once.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Dict, List, Set, Tuple

import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

# Make the root-level modules importable without installing the project
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from registry_client import RegistryClient


class StubRegistry:
    def __init__(self) -> None:
        self.status: Dict[str, int] = {}
        self.documents: Dict[str, dict] = {}
        self.search_results: Dict[str, List[str]] = {}
        self.search_status = 200
        self.hang: Set[str] = set()
        self.delay = 0.0
        self.requests: List[Tuple[str, str]] = []
        self.search_queries: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.release = asyncio.Event()
        self.base_url = ""

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_route("GET", "/-/v1/search", self.handle_search)
        app.router.add_route("*", "/{name}", self.handle_package)
        return app

    async def handle_search(self, request: web.Request) -> web.Response:
        q = request.query.get("text", "")
        self.search_queries.append(q)
        if self.search_status != 200:
            return web.Response(status=self.search_status)
        names = self.search_results.get(q, [])
        return web.json_response({
            "objects": [{"package": {"name": n}} for n in names],
            "total": len(names),
        })

    async def handle_package(self, request: web.Request) -> web.StreamResponse:
        name = request.match_info["name"]
        self.requests.append((request.method, name))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if name in self.hang:
                await self.release.wait()
            if self.delay:
                await asyncio.sleep(self.delay)
            status = self.status.get(name, 404)
            if request.method == "GET" and status == 200:
                return web.json_response(self.documents.get(name, {"name": name}))
            return web.Response(status=status)
        finally:
            self.in_flight -= 1


@pytest_asyncio.fixture
async def registry():
    stub = StubRegistry()
    server = TestServer(stub.app())
    await server.start_server()
    stub.base_url = f"http://{server.host}:{server.port}"
    try:
        yield stub
    finally:
        stub.release.set()
        await server.close()


@pytest_asyncio.fixture
async def client(registry):
    async with RegistryClient(registry.base_url, timeout_s=0.5, max_connections=20) as c:
        yield c
