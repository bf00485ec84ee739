#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Progress sinks: consumers of transient status lines and finalized result lines.

  on_progress(text)  replaceable status line ("Checking foo (12/300)")
  on_result(text)    appended to the scrolling result log

Sinks:
  NullSink      discards everything (tests)
  LoggingSink   status at DEBUG, results at INFO
  TerminalSink  tqdm bar; status as postfix, results printed above the bar

Install:
  pip install tqdm
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, TextIO

from tqdm import tqdm


class ProgressSink(Protocol):
    def on_progress(self, text: str) -> None: ...

    def on_result(self, text: str) -> None: ...


class NullSink:
    def on_progress(self, text: str) -> None:
        pass

    def on_result(self, text: str) -> None:
        pass


class LoggingSink:
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.log = logger or logging.getLogger(__name__)

    def on_progress(self, text: str) -> None:
        self.log.debug("%s", text)

    def on_result(self, text: str) -> None:
        self.log.info("%s", text)


class TerminalSink:
    def __init__(self, total: int, desc: str = "Checking packages", file: Optional[TextIO] = None):
        self.file = file
        self.results: List[str] = []
        self.bar = tqdm(total=total, desc=desc, unit="pkg", file=file, dynamic_ncols=True)

    def on_progress(self, text: str) -> None:
        self.bar.set_postfix_str(text)

    def on_result(self, text: str) -> None:
        self.results.append(text)
        tqdm.write(text, file=self.file)

    def set_completed(self, completed: int) -> None:
        # bar counts finished items; results are only a filtered subset of them
        self.bar.update(completed - self.bar.n)

    def summary(self, text: str) -> None:
        tqdm.write(text, file=self.file)

    def close(self) -> None:
        self.bar.close()
