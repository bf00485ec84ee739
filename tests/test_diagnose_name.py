from __future__ import annotations

import pytest

from diagnose_name import build_arg_parser, format_report, main_async, run_diagnosis
from outcomes import ConflictReport, ConflictStatus


@pytest.mark.asyncio
async def test_invalid_name_stops_before_network(registry, client):
    lines = await run_diagnosis(client, "My Pkg")
    assert "Status: Invalid" in lines
    assert "Reason: cannot contain spaces" in lines
    assert registry.requests == []


@pytest.mark.asyncio
async def test_taken_name_reports_owner_and_version(registry, client):
    registry.status["left-pad"] = 200
    registry.documents["left-pad"] = {
        "maintainers": [{"name": "stevemao"}],
        "dist-tags": {"latest": "1.3.0"},
    }
    lines = await run_diagnosis(client, "left-pad")
    assert lines[-3:] == ["Status: taken", "Owner: stevemao", "Version: 1.3.0"]
    assert registry.search_queries == []


@pytest.mark.asyncio
async def test_indeterminate_direct_check(registry, client):
    registry.status["flaky"] = 502
    lines = await run_diagnosis(client, "flaky")
    assert lines[-1] == "Status: unknown (status: 502)"


@pytest.mark.asyncio
async def test_blocked_by_search(registry, client):
    registry.search_results["my-pkg"] = ["mypkg"]
    lines = await run_diagnosis(client, "my-pkg")
    assert "Registry: not found" in lines
    assert "Status: blocked" in lines
    assert "  - mypkg" in lines
    assert lines[-1] == '"my-pkg" and "mypkg" both normalize to "mypkg"'


@pytest.mark.asyncio
async def test_available_name(registry, client):
    lines = await run_diagnosis(client, "zzq-unclaimed")
    assert lines[-1] == "Status: available"


def test_format_likely_available_with_unchecked():
    report = ConflictReport(
        name="mypkg",
        status=ConflictStatus.LIKELY_AVAILABLE,
        related=["mypkgjs"],
        unchecked=["node-mypkg"],
    )
    assert format_report(report) == [
        "Status: likely available",
        "",
        "Similar packages exist:",
        "  - mypkgjs",
        "",
        "Could not verify 1 variants:",
        "  - node-mypkg",
    ]


@pytest.mark.asyncio
async def test_cli_prints_diagnosis(registry, capsys):
    args = build_arg_parser().parse_args(["zzq-unclaimed", "--registry-url", registry.base_url, "--timeout-s", "0.5"])
    assert await main_async(args) == 0
    out = capsys.readouterr().out
    assert "Package Diagnosis" in out
    assert "Status: available" in out


@pytest.mark.asyncio
async def test_cli_reports_registry_failure(registry, capsys):
    registry.hang.add("stuck-name")
    args = build_arg_parser().parse_args(["stuck-name", "--registry-url", registry.base_url, "--timeout-s", "0.3"])
    assert await main_async(args) == 1
    assert "Error: request timeout" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_cli_exits_one_when_search_fails(registry, capsys):
    registry.search_status = 500
    args = build_arg_parser().parse_args(["zzq-unclaimed", "--registry-url", registry.base_url, "--timeout-s", "0.5"])

    assert await main_async(args) == 1
    err = capsys.readouterr().err
    assert "Error: search for 'zzq-unclaimed' failed: HTTP 500" in err
