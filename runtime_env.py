#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Process setup shared by the CLIs: logging, .env loading, env-backed defaults.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import load_dotenv

ENV_REGISTRY_URL = "NPM_REGISTRY_URL"
ENV_CONCURRENCY = "NAMECHECK_CONCURRENCY"
ENV_TIMEOUT_S = "NAMECHECK_TIMEOUT_S"


class SetupError(RuntimeError):
    """Fatal before any name is checked: bad input file, unwritable output, bad flags."""


def configure_logging(verbosity: int, name: str = "npm_namecheck") -> logging.Logger:
    level = logging.INFO
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 0:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger(name)


def load_env(dotenv_path: Optional[str], log: logging.Logger) -> None:
    if dotenv_path and not os.path.exists(dotenv_path):
        raise SetupError(f".env not found: {dotenv_path}")
    loaded = load_dotenv(dotenv_path=dotenv_path, override=False)
    if loaded:
        log.debug("Loaded environment from %s", dotenv_path or ".env")


def env_str(var: str, default: str) -> str:
    v = os.getenv(var, "").strip()
    return v or default


def env_int(var: str, default: int) -> int:
    v = os.getenv(var, "").strip()
    if not v:
        return default
    try:
        return int(v)
    except ValueError:
        raise SetupError(f"{var} must be an integer, got {v!r}")


def env_float(var: str, default: float) -> float:
    v = os.getenv(var, "").strip()
    if not v:
        return default
    try:
        return float(v)
    except ValueError:
        raise SetupError(f"{var} must be a number, got {v!r}")
