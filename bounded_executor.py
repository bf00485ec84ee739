#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Bounded concurrent executor for per-name checks.

- Fixed number of asyncio worker tasks: min(concurrency, len(items))
- Workers claim items from one shared cursor; each index is processed once
- Results land at the item's original index (input order is preserved)
- Any exception from the per-item coroutine becomes a FAILED outcome for
  that item only; the batch always runs to completion
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence

from outcomes import CheckOutcome, WorkItem

PerItem = Callable[[WorkItem], Awaitable[CheckOutcome]]


@dataclass(frozen=True)
class ProgressEvent:
    item: WorkItem
    completed: int
    total: int
    outcome: Optional[CheckOutcome] = None  # None when the item was just claimed


ProgressCallback = Callable[[ProgressEvent], None]


def make_work_items(names: Sequence[str]) -> List[WorkItem]:
    return [WorkItem(index=i, name=n) for i, n in enumerate(names)]


class BoundedExecutor:
    def __init__(
        self,
        concurrency: int,
        *,
        on_progress: Optional[ProgressCallback] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.concurrency = concurrency
        self.on_progress = on_progress
        self.log = logger or logging.getLogger(__name__)

    async def run(self, items: Sequence[WorkItem], per_item: PerItem) -> List[CheckOutcome]:
        total = len(items)
        results: List[Optional[CheckOutcome]] = [None] * total
        # cursor and completed are only touched between awaits (single event loop)
        cursor = 0
        completed = 0

        def claim() -> Optional[WorkItem]:
            nonlocal cursor
            if cursor >= total:
                return None
            item = items[cursor]
            cursor += 1
            return item

        def notify(item: WorkItem, outcome: Optional[CheckOutcome]) -> None:
            if self.on_progress is None:
                return
            try:
                self.on_progress(ProgressEvent(item, completed, total, outcome))
            except Exception:
                self.log.exception("progress callback failed for %s", item.name)

        async def worker_loop(wid: int) -> None:
            nonlocal completed
            while True:
                item = claim()
                if item is None:
                    return
                notify(item, None)
                try:
                    outcome = await per_item(item)
                except Exception as e:
                    self.log.debug("w%s: %s failed: %s: %s", wid, item.name, type(e).__name__, e)
                    outcome = CheckOutcome.failed(item.name, str(e) or type(e).__name__)
                results[item.index] = outcome
                completed += 1
                notify(item, outcome)

        n_workers = min(self.concurrency, total)
        self.log.debug("Starting %s workers for %s items", n_workers, total)
        await asyncio.gather(*(worker_loop(w) for w in range(n_workers)))

        missing = [i for i, r in enumerate(results) if r is None]
        if missing:
            raise RuntimeError(f"executor finished with unpopulated slots: {missing[:10]}")
        return results  # type: ignore[return-value]


async def run(
    items: Sequence[WorkItem],
    per_item: PerItem,
    concurrency: int,
    on_progress: Optional[ProgressCallback] = None,
) -> List[CheckOutcome]:
    return await BoundedExecutor(concurrency, on_progress=on_progress).run(items, per_item)
