#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Explain whether a single npm package name can be claimed.

Steps (stop at the first decisive one):
  1. local validation            -> Invalid (reason)
  2. HEAD {base}/{name}          -> taken (owner, latest version)
  3. search + variant probes     -> blocked / likely available / available

Run:
  python diagnose_name.py my-package
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional

from conflict_detector import DEFAULT_PROBE_CONCURRENCY, diagnose
from name_rules import normalize, validate
from outcomes import ConflictReport, ConflictStatus
from registry_client import (
    DEFAULT_REGISTRY_URL,
    DEFAULT_TIMEOUT_S,
    DEFAULT_USER_AGENT,
    RegistryClient,
    RegistryError,
    summarize_metadata,
)
from runtime_env import (
    ENV_REGISTRY_URL,
    ENV_TIMEOUT_S,
    SetupError,
    configure_logging,
    env_float,
    env_str,
    load_env,
)


def format_report(report: ConflictReport) -> List[str]:
    lines: List[str] = []
    if report.status is ConflictStatus.BLOCKED:
        lines.append("Status: blocked")
        lines.append("Reason: too similar to existing package")
        lines.append("")
        lines.append("Conflicting packages:")
        lines.extend(f"  - {c}" for c in report.conflicts)
        lines.append("")
        lines.append("NPM blocks names that normalize to the same string.")
        lines.append(f'"{report.name}" and "{report.conflicts[0]}" both normalize to "{normalize(report.name)}"')
    elif report.status is ConflictStatus.LIKELY_AVAILABLE:
        lines.append("Status: likely available")
        lines.append("")
        lines.append("Similar packages exist:")
        lines.extend(f"  - {r}" for r in report.related)
    else:
        lines.append("Status: available")

    if report.unchecked:
        lines.append("")
        lines.append(f"Could not verify {len(report.unchecked)} variants:")
        lines.extend(f"  - {u}" for u in report.unchecked)
    return lines


async def run_diagnosis(
    client: RegistryClient,
    name: str,
    probe_concurrency: int = DEFAULT_PROBE_CONCURRENCY,
) -> List[str]:
    lines = [f"Name: {name}", ""]

    v = validate(name)
    if not v.valid:
        lines.append("Status: Invalid")
        lines.append(f"Reason: {v.reason}")
        return lines
    lines.append("Validation: passed")

    r = await client.check_exists(name)
    if r.exists:
        doc = await client.fetch_metadata(name) or {}
        info = summarize_metadata(doc)
        lines.append("Status: taken")
        lines.append(f"Owner: {info['owner']}")
        lines.append(f"Version: {info['version']}")
        return lines
    if r.exists is None:
        lines.append(f"Status: unknown (status: {r.status_code})")
        return lines
    lines.append("Registry: not found")

    report = await diagnose(client, name, probe_concurrency=probe_concurrency)
    lines.extend(format_report(report))
    return lines


async def main_async(args: argparse.Namespace) -> int:
    log = configure_logging(args.verbose, "diagnose_name")

    try:
        load_env(args.dotenv, log)
        registry_url = args.registry_url or env_str(ENV_REGISTRY_URL, DEFAULT_REGISTRY_URL)
        timeout_s = args.timeout_s if args.timeout_s is not None else env_float(ENV_TIMEOUT_S, DEFAULT_TIMEOUT_S)
        if args.probe_concurrency < 1:
            raise SetupError("--probe-concurrency must be >= 1")
    except SetupError as e:
        log.error("%s", e)
        return 1

    print("\nPackage Diagnosis\n")
    try:
        async with RegistryClient(
            registry_url,
            timeout_s=timeout_s,
            max_connections=args.probe_concurrency,
            user_agent=args.user_agent,
            logger=log,
        ) as client:
            lines = await run_diagnosis(client, args.name, args.probe_concurrency)
    except RegistryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("\n".join(lines))
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser("diagnose_name.py", description="Diagnose why an npm package name is or is not claimable.")
    p.add_argument("name", help="Package name to diagnose")
    p.add_argument("--registry-url", default=None, help=f"Registry base URL (env {ENV_REGISTRY_URL}, default: {DEFAULT_REGISTRY_URL})")
    p.add_argument("--timeout-s", type=float, default=None, help=f"Per-request timeout (env {ENV_TIMEOUT_S}, default: {DEFAULT_TIMEOUT_S})")
    p.add_argument("--probe-concurrency", type=int, default=DEFAULT_PROBE_CONCURRENCY,
                   help=f"Concurrent variant probes (default: {DEFAULT_PROBE_CONCURRENCY})")
    p.add_argument("--user-agent", default=DEFAULT_USER_AGENT)
    p.add_argument("--dotenv", default=None, help="Path to .env file (default: ./.env if present)")
    p.add_argument("-v", "--verbose", action="count", default=0)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    return asyncio.run(main_async(args))


def cli() -> None:
    try:
        raise SystemExit(main())
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        raise SystemExit(130)


if __name__ == "__main__":
    cli()
