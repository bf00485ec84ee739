#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Data model shared by the checker and the diagnosis tool.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class OutcomeStatus(Enum):
    AVAILABLE = "available"
    TAKEN = "taken"
    INVALID = "invalid"
    INDETERMINATE = "indeterminate"
    FAILED = "failed"


class ConflictStatus(Enum):
    BLOCKED = "blocked"
    LIKELY_AVAILABLE = "likely available"
    AVAILABLE = "available"


@dataclass(frozen=True)
class WorkItem:
    index: int
    name: str


@dataclass(frozen=True)
class CheckOutcome:
    """Terminal classification of one name. Only the field matching `status` is set."""

    name: str
    status: OutcomeStatus
    reason: Optional[str] = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def available(cls, name: str) -> "CheckOutcome":
        return cls(name, OutcomeStatus.AVAILABLE)

    @classmethod
    def taken(cls, name: str) -> "CheckOutcome":
        return cls(name, OutcomeStatus.TAKEN)

    @classmethod
    def invalid(cls, name: str, reason: str) -> "CheckOutcome":
        return cls(name, OutcomeStatus.INVALID, reason=reason)

    @classmethod
    def indeterminate(cls, name: str, status_code: int) -> "CheckOutcome":
        return cls(name, OutcomeStatus.INDETERMINATE, status_code=status_code)

    @classmethod
    def failed(cls, name: str, error: str) -> "CheckOutcome":
        return cls(name, OutcomeStatus.FAILED, error=error)

    @property
    def is_available(self) -> bool:
        return self.status is OutcomeStatus.AVAILABLE

    def label(self) -> str:
        if self.status is OutcomeStatus.AVAILABLE:
            return "AVAILABLE"
        if self.status is OutcomeStatus.TAKEN:
            return "TAKEN"
        if self.status is OutcomeStatus.INVALID:
            return f"INVALID ({self.reason})"
        if self.status is OutcomeStatus.INDETERMINATE:
            return f"UNKNOWN (status: {self.status_code})"
        return f"ERROR: {self.error}"


@dataclass
class ConflictReport:
    name: str
    status: ConflictStatus
    conflicts: List[str] = field(default_factory=list)
    # existing variants that do not normalize to the same string
    related: List[str] = field(default_factory=list)
    # variants whose probe timed out, failed or was indeterminate
    unchecked: List[str] = field(default_factory=list)
