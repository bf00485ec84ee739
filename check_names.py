#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Bulk npm package name availability checker.

Reads candidate names (one per line, blank and '#' lines ignored), validates
each one locally, then probes the registry with HEAD {base}/{name}:
  200 -> TAKEN, 404 -> AVAILABLE, other -> UNKNOWN (status: N)

Features:
- Async HTTP with aiohttp, one pooled session for every worker
- Hard concurrency ceiling (default 150 in-flight requests)
- Per-request timeout; a failed request marks only that name as ERROR
- Results kept in input order; available names written once at the end
- Output modes: default (available names -> file), --all, --banned

Install:
  pip install aiohttp python-dotenv tqdm

Run:
  python check_names.py --input data/word.txt --output data/available.txt
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
import time
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from bounded_executor import BoundedExecutor, ProgressEvent, make_work_items
from name_rules import validate
from outcomes import CheckOutcome, OutcomeStatus, WorkItem
from progress_sink import LoggingSink, ProgressSink, TerminalSink
from registry_client import (
    DEFAULT_MAX_CONNECTIONS,
    DEFAULT_REGISTRY_URL,
    DEFAULT_TIMEOUT_S,
    DEFAULT_USER_AGENT,
    RegistryClient,
)
from runtime_env import (
    ENV_CONCURRENCY,
    ENV_REGISTRY_URL,
    ENV_TIMEOUT_S,
    SetupError,
    configure_logging,
    env_float,
    env_int,
    env_str,
    load_env,
)

DEFAULT_INPUT = "data/word.txt"
DEFAULT_OUTPUT = "data/available.txt"

MODE_DEFAULT = "default"
MODE_ALL = "all"
MODE_BANNED = "banned"


# ---------------------------
# Input / output
# ---------------------------

def iter_input_names(path: Path) -> Iterator[str]:
    # One name per line, allow blank/comment lines
    for line in path.read_text(encoding="utf-8").splitlines():
        s = line.strip()
        if not s or s.startswith("#"):
            continue
        yield s


def read_names(path: Path) -> List[str]:
    try:
        return list(iter_input_names(path))
    except (OSError, UnicodeDecodeError) as e:
        raise SetupError(f"cannot read input file {path}: {e}") from e


def ensure_writable(path: Path) -> None:
    parent = path.parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SetupError(f"cannot create output directory {parent}: {e}") from e
    if path.is_dir():
        raise SetupError(f"output path is a directory: {path}")
    if path.exists() and not os.access(path, os.W_OK):
        raise SetupError(f"output file is not writable: {path}")
    if not os.access(parent, os.W_OK):
        raise SetupError(f"output directory is not writable: {parent}")


def write_available(path: Path, results: List[CheckOutcome]) -> List[str]:
    """Replace `path` with the available names in input order. No-op when there are none."""
    available = [r.name for r in results if r.is_available]
    if not available:
        return available
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_text("\n".join(available) + "\n", encoding="utf-8")
        tmp.replace(path)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise SetupError(f"cannot write output file {path}: {e}") from e
    return available


# ---------------------------
# Per-item check + display
# ---------------------------

async def check_name(client: RegistryClient, item: WorkItem) -> CheckOutcome:
    v = validate(item.name)
    if not v.valid:
        return CheckOutcome.invalid(item.name, v.reason or "invalid")
    r = await client.check_exists(item.name)
    if r.exists is None:
        return CheckOutcome.indeterminate(item.name, r.status_code)
    return CheckOutcome.taken(item.name) if r.exists else CheckOutcome.available(item.name)


def result_line(outcome: CheckOutcome, mode: str) -> Optional[str]:
    if mode == MODE_ALL:
        return f"{outcome.name} {outcome.label()}"
    if mode == MODE_BANNED:
        return outcome.name if outcome.status is OutcomeStatus.INVALID else None
    if outcome.is_available:
        return f"✓ {outcome.name} - AVAILABLE"
    return None


def progress_relay(
    sink: ProgressSink,
    mode: str,
    on_completed: Optional[Callable[[int], None]] = None,
):
    def relay(ev: ProgressEvent) -> None:
        if ev.outcome is None:
            sink.on_progress(f"Checking {ev.item.name} ({ev.completed + 1}/{ev.total})")
            return
        if on_completed is not None:
            on_completed(ev.completed)
        line = result_line(ev.outcome, mode)
        if line is not None:
            sink.on_result(line)
    return relay


async def check_all(
    client: RegistryClient,
    names: List[str],
    concurrency: int,
    sink: ProgressSink,
    mode: str = MODE_DEFAULT,
    log: Optional[logging.Logger] = None,
    on_completed: Optional[Callable[[int], None]] = None,
) -> List[CheckOutcome]:
    relay = progress_relay(sink, mode, on_completed)
    executor = BoundedExecutor(concurrency, on_progress=relay, logger=log)

    async def per_item(item: WorkItem) -> CheckOutcome:
        return await check_name(client, item)

    return await executor.run(make_work_items(names), per_item)


def count_by_status(results: List[CheckOutcome]) -> dict:
    counts = {s.value: 0 for s in OutcomeStatus}
    for r in results:
        counts[r.status.value] += 1
    return counts


# ---------------------------
# CLI
# ---------------------------

def resolve_settings(args: argparse.Namespace) -> None:
    if args.registry_url is None:
        args.registry_url = env_str(ENV_REGISTRY_URL, DEFAULT_REGISTRY_URL)
    if args.concurrency is None:
        args.concurrency = env_int(ENV_CONCURRENCY, DEFAULT_MAX_CONNECTIONS)
    if args.timeout_s is None:
        args.timeout_s = env_float(ENV_TIMEOUT_S, DEFAULT_TIMEOUT_S)

    if args.concurrency < 1:
        raise SetupError("--concurrency must be >= 1")
    if args.timeout_s <= 0:
        raise SetupError("--timeout-s must be > 0")


async def main_async(args: argparse.Namespace) -> int:
    log = configure_logging(args.verbose, "check_names")
    start_time = time.monotonic()

    try:
        load_env(args.dotenv, log)
        resolve_settings(args)
        names = read_names(Path(args.input))
        out_path = Path(args.output)
        if args.mode == MODE_DEFAULT:
            ensure_writable(out_path)
    except SetupError as e:
        log.error("%s", e)
        return 1

    log.info("Loaded %s names from %s (concurrency=%s timeout=%.1fs registry=%s)",
             len(names), args.input, args.concurrency, args.timeout_s, args.registry_url)

    terminal: Optional[TerminalSink] = None
    if args.plain or not sys.stdout.isatty():
        sink: ProgressSink = LoggingSink(log)
    else:
        terminal = TerminalSink(len(names))
        sink = terminal

    client = RegistryClient(
        args.registry_url,
        timeout_s=args.timeout_s,
        max_connections=args.concurrency,
        user_agent=args.user_agent,
        logger=log,
    )
    try:
        async with client:
            results = await check_all(
                client, names, args.concurrency, sink, args.mode, log,
                on_completed=terminal.set_completed if terminal is not None else None,
            )

        if args.mode == MODE_DEFAULT:
            try:
                available = write_available(out_path, results)
            except SetupError as e:
                log.error("%s", e)
                return 1
            if available:
                summary = f"✓ Found {len(available)} available packages saved to {out_path}"
            else:
                summary = "• No available packages found"
            if terminal is not None:
                terminal.summary(summary)
            else:
                log.info("%s", summary)
    finally:
        if terminal is not None:
            terminal.close()

    log.info("Outcomes: %s", count_by_status(results))
    log.info("Completed in %.1fs", time.monotonic() - start_time)
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser("check_names.py", description="Check npm package name availability in bulk.")
    p.add_argument("--input", default=DEFAULT_INPUT, help=f"Names file, one per line (default: {DEFAULT_INPUT})")
    p.add_argument("--output", default=DEFAULT_OUTPUT, help=f"Available names file (default: {DEFAULT_OUTPUT})")

    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--all", "-all", dest="mode", action="store_const", const=MODE_ALL,
                      help="Show every outcome; no output file")
    mode.add_argument("--banned", "-ban", dest="mode", action="store_const", const=MODE_BANNED,
                      help="Show only invalid names; no output file")
    p.set_defaults(mode=MODE_DEFAULT)

    p.add_argument("--registry-url", default=None, help=f"Registry base URL (env {ENV_REGISTRY_URL}, default: {DEFAULT_REGISTRY_URL})")
    p.add_argument("--concurrency", type=int, default=None,
                   help=f"Concurrent requests (env {ENV_CONCURRENCY}, default: {DEFAULT_MAX_CONNECTIONS})")
    p.add_argument("--timeout-s", type=float, default=None,
                   help=f"Per-request timeout (env {ENV_TIMEOUT_S}, default: {DEFAULT_TIMEOUT_S})")
    p.add_argument("--user-agent", default=DEFAULT_USER_AGENT)
    p.add_argument("--dotenv", default=None, help="Path to .env file (default: ./.env if present)")
    p.add_argument("--plain", action="store_true", help="Log progress instead of showing a progress bar")
    p.add_argument("-v", "--verbose", action="count", default=1)
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
