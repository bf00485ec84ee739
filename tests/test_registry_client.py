from __future__ import annotations

import socket

import pytest

from registry_client import (
    ExistsResult,
    RegistryClient,
    RegistryError,
    RegistryTimeout,
    RegistryTransportError,
    interpret_status,
    package_identifier,
    summarize_metadata,
)


def _unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def test_interpret_status():
    assert interpret_status(200) is True
    assert interpret_status(404) is False
    assert interpret_status(500) is None
    assert interpret_status(301) is None


@pytest.mark.asyncio
async def test_existing_package(registry, client):
    registry.status["left-pad"] = 200
    assert await client.check_exists("left-pad") == ExistsResult(exists=True, status_code=200)
    assert registry.requests == [("HEAD", "left-pad")]


@pytest.mark.asyncio
async def test_missing_package(registry, client):
    assert await client.check_exists("totally-unique-xyz-987") == ExistsResult(exists=False, status_code=404)


@pytest.mark.asyncio
async def test_unexpected_status_is_indeterminate(registry, client):
    registry.status["flaky"] = 503
    r = await client.check_exists("flaky")
    assert r.exists is None
    assert r.status_code == 503


@pytest.mark.asyncio
async def test_timeout_is_distinct_from_transport_error(registry, client):
    registry.hang.add("slow")
    with pytest.raises(RegistryTimeout, match="request timeout"):
        await client.check_exists("slow")


@pytest.mark.asyncio
async def test_connection_refused_is_transport_error():
    async with RegistryClient(f"http://127.0.0.1:{_unused_port()}", timeout_s=1.0) as c:
        with pytest.raises(RegistryTransportError):
            await c.check_exists("anything")


@pytest.mark.asyncio
async def test_client_must_be_opened():
    c = RegistryClient("http://127.0.0.1:1")
    with pytest.raises(RegistryError):
        await c.check_exists("x")


@pytest.mark.asyncio
async def test_search_returns_objects(registry, client):
    registry.search_results["mypkg"] = ["mypkg-cli", "@scope/mypkg"]
    objects = await client.search("mypkg")
    assert [package_identifier(o) for o in objects] == ["mypkg-cli", "@scope/mypkg"]
    assert registry.search_queries == ["mypkg"]


@pytest.mark.asyncio
async def test_fetch_metadata(registry, client):
    registry.status["left-pad"] = 200
    registry.documents["left-pad"] = {
        "maintainers": [{"name": "stevemao"}],
        "dist-tags": {"latest": "1.3.0"},
    }
    doc = await client.fetch_metadata("left-pad")
    assert summarize_metadata(doc) == {"owner": "stevemao", "version": "1.3.0"}
    assert await client.fetch_metadata("not-there") is None


def test_summarize_metadata_defaults():
    assert summarize_metadata({}) == {"owner": "unknown", "version": "unknown"}


def test_package_identifier_ignores_malformed_entries():
    assert package_identifier({}) is None
    assert package_identifier({"package": {"name": ""}}) is None
    assert package_identifier({"package": {"name": "ok"}}) == "ok"


def test_package_url_keeps_scope_marker():
    c = RegistryClient("https://registry.example.org/")
    assert c.package_url("left-pad") == "https://registry.example.org/left-pad"
    assert c.package_url("@scope/pkg") == "https://registry.example.org/@scope%2Fpkg"
