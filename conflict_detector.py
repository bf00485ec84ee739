#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Look-alike detection for a name that is valid and not registered itself.

npm refuses a new name whose normalized form (lowercase, '-' and '_' removed)
equals an existing package's. Checks run cheapest and most precise first:

  1. free-text search for the name and two spellings of it;
     any unscoped hit that normalizes to the same string -> BLOCKED
  2. existence probes for a fixed set of spelling variants;
     a hit that normalizes to the same string -> BLOCKED,
     any other hit -> LIKELY_AVAILABLE, no hits -> AVAILABLE

The variant set is a heuristic; it does not cover every collision the
registry would enforce.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from bounded_executor import BoundedExecutor, make_work_items
from name_rules import collides, dedupe, normalize, probe_variants, search_queries
from outcomes import CheckOutcome, ConflictReport, ConflictStatus, OutcomeStatus, WorkItem
from registry_client import RegistryClient, package_identifier

DEFAULT_PROBE_CONCURRENCY = 10

log = logging.getLogger(__name__)


def find_conflicts(name: str, identifiers: Sequence[str]) -> List[str]:
    return [ident for ident in identifiers if not ident.startswith("@") and collides(name, ident)]


async def search_similar(client: RegistryClient, name: str) -> List[str]:
    """Unscoped identifiers from all search queries, deduplicated in first-seen order."""
    found: List[str] = []
    for query in search_queries(name):
        objects: List[Dict[str, Any]] = await client.search(query)
        for obj in objects:
            ident = package_identifier(obj)
            if ident is None or ident.startswith("@"):
                continue
            found.append(ident)
    return dedupe(found)


async def probe_existing(
    client: RegistryClient,
    variants: Sequence[str],
    concurrency: int = DEFAULT_PROBE_CONCURRENCY,
) -> List[CheckOutcome]:
    async def probe(item: WorkItem) -> CheckOutcome:
        r = await client.check_exists(item.name)
        if r.exists is None:
            return CheckOutcome.indeterminate(item.name, r.status_code)
        return CheckOutcome.taken(item.name) if r.exists else CheckOutcome.available(item.name)

    return await BoundedExecutor(concurrency, logger=log).run(make_work_items(variants), probe)


async def diagnose(
    client: RegistryClient,
    name: str,
    *,
    probe_concurrency: int = DEFAULT_PROBE_CONCURRENCY,
    variants: Optional[Sequence[str]] = None,
) -> ConflictReport:
    """
    Caller must have validated `name` and confirmed the registry does not
    have it. Search failures propagate; probe failures end up in `unchecked`.
    """
    similar = await search_similar(client, name)
    conflicts = find_conflicts(name, similar)
    if conflicts:
        log.debug("search found %s collisions for %s", len(conflicts), name)
        return ConflictReport(name=name, status=ConflictStatus.BLOCKED, conflicts=conflicts)

    if variants is None:
        variants = probe_variants(name)
    outcomes = await probe_existing(client, variants, probe_concurrency)

    taken = [o.name for o in outcomes if o.status is OutcomeStatus.TAKEN]
    unchecked = [
        o.name for o in outcomes
        if o.status in (OutcomeStatus.FAILED, OutcomeStatus.INDETERMINATE)
    ]
    if unchecked:
        log.warning("%s of %s variant probes unresolved for %s", len(unchecked), len(outcomes), name)

    target = normalize(name)
    blocking = [t for t in taken if normalize(t) == target]
    if blocking:
        return ConflictReport(name=name, status=ConflictStatus.BLOCKED, conflicts=blocking, unchecked=unchecked)
    if taken:
        return ConflictReport(name=name, status=ConflictStatus.LIKELY_AVAILABLE, related=taken, unchecked=unchecked)
    return ConflictReport(name=name, status=ConflictStatus.AVAILABLE, unchecked=unchecked)
