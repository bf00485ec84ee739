#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
npm package name rules.

- validate(): syntactic eligibility of a candidate name (pure, no network)
- normalize(): the form npm compares when it blocks look-alike names
- search / probe variant generators used by the conflict detector

Usage:
  python name_rules.py some-name another_name
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence

MAX_NAME_LENGTH = 214

VALID_PATTERN = re.compile(r"^[a-z0-9][a-z0-9\-_]*$")

BANNED_NAMES = frozenset({
    "node_modules", "favicon.ico", "package.json", "readme", "readme.md",
    "changelog", "changelog.md", "license", "license.md", "makefile",
    "npm", "yarn", "pnpm", "bower", "grunt", "gulp", "webpack",
})

BANNED_PATTERNS = [
    re.compile(r"^\d+$"),       # purely numeric
    re.compile(r"^[a-z]{1,2}$"),  # one or two letters
]

CHUNK_WIDTH = 4


# ---------------------------
# Validation
# ---------------------------

@dataclass(frozen=True)
class ValidationOutcome:
    valid: bool
    reason: Optional[str] = None


def is_banned(name: str) -> bool:
    if name in BANNED_NAMES:
        return True
    return any(p.match(name) for p in BANNED_PATTERNS)


def validate(name: str) -> ValidationOutcome:
    """
    First failing rule wins:
      empty -> too long -> leading . or _ -> spaces -> case -> charset -> deny list
    """
    if not name:
        return ValidationOutcome(False, "empty name")
    if len(name) > MAX_NAME_LENGTH:
        return ValidationOutcome(False, "too long")
    if name.startswith((".", "_")):
        return ValidationOutcome(False, "cannot start with . or _")
    if " " in name:
        return ValidationOutcome(False, "cannot contain spaces")
    if name.lower() != name:
        return ValidationOutcome(False, "must be lowercase")
    if not VALID_PATTERN.match(name):
        return ValidationOutcome(False, "invalid characters")
    if is_banned(name):
        return ValidationOutcome(False, "banned pattern")
    return ValidationOutcome(True)


# ---------------------------
# Normalization + variants
# ---------------------------

def normalize(name: str) -> str:
    return name.lower().replace("-", "").replace("_", "")


def collides(a: str, b: str) -> bool:
    return a != b and normalize(a) == normalize(b)


def dedupe(names: Sequence[str]) -> List[str]:
    # first-seen order
    return list(dict.fromkeys(names))


def camel_to_hyphen(name: str) -> str:
    return re.sub(r"([a-z])([A-Z])", r"\1-\2", name).lower()


def chunk_hyphenate(name: str, width: int = CHUNK_WIDTH) -> str:
    """'abcdefghij' -> 'abcd-efgh-ij'"""
    return "-".join(name[i:i + width] for i in range(0, len(name), width))


def hyphen_insertions(name: str) -> List[str]:
    return [name[:i] + "-" + name[i:] for i in range(1, len(name))]


def search_queries(name: str) -> List[str]:
    return dedupe([name, camel_to_hyphen(name), chunk_hyphenate(name)])


def probe_variants(name: str) -> List[str]:
    stripped = name.replace("-", "")
    candidates = [
        stripped,
        name.replace("_", ""),
        name + "js",
        name + "-js",
        "node-" + name,
    ]
    candidates.extend(hyphen_insertions(stripped))
    return [v for v in dedupe(candidates) if v != name]


def main(argv: Optional[List[str]] = None) -> int:
    names = sys.argv[1:] if argv is None else argv
    if not names:
        print("Usage: python name_rules.py <name> [<name> ...]", file=sys.stderr)
        return 1
    for name in names:
        outcome = validate(name)
        if outcome.valid:
            print(f"{name}: valid (normalized: {normalize(name)})")
        else:
            print(f"{name}: invalid ({outcome.reason})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
