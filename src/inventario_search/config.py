"""Centralized configuration for the inventory consultation service.

All settings live here so they can be overridden by environment variables or a
``.env`` file without touching source code.

**Profile system:** Set ``INV_PROFILE=dev`` (default) or ``INV_PROFILE=prod``
to get sensible defaults for each environment.  Any individual ``INV_*`` var
still overrides the profile value.

Usage::

    from inventario_search.config import DATA_DIR, SEED_MODE
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

LOGGER = logging.getLogger(__name__)

# ── Profile ──────────────────────────────────────────────────────────────────
# "dev" = seed data + open CORS, "prod" = real snapshots only.

PROFILE: str = os.getenv("INV_PROFILE", "dev").lower().strip()

_PROFILE_DEFAULTS: dict[str, dict[str, str]] = {
    "dev": {
        "INV_SEED_MODE": "1",
        "INV_CORS_ORIGINS": "*",
        "INV_ROWS_PER_PAGE": "10",
    },
    "prod": {
        "INV_SEED_MODE": "0",
        "INV_CORS_ORIGINS": "",  # empty → must be explicitly set
        "INV_ROWS_PER_PAGE": "10",
    },
}

if PROFILE not in _PROFILE_DEFAULTS:
    LOGGER.warning("Unknown INV_PROFILE=%r, falling back to 'dev'.", PROFILE)
    PROFILE = "dev"

_defaults = _PROFILE_DEFAULTS[PROFILE]


def _env(key: str, fallback: str = "") -> str:
    """Read an env var, falling back to profile default then *fallback*."""
    return os.getenv(key, _defaults.get(key, fallback))


# ── Directories ──────────────────────────────────────────────────────────────
# DATA_DIR holds the exported snapshots (inea.json, itea.json, tlaxcala.json,
# resguardos.json).  SEED_DIR is used when a snapshot is missing and seed mode
# is on.
DATA_DIR: Path = Path(_env("INV_DATA_DIR", "cache"))
SEED_DIR: Path = Path(_env("INV_SEED_DIR", "mocks/dev"))

# ── Mode flags ───────────────────────────────────────────────────────────────
SEED_MODE: bool = _env("INV_SEED_MODE") == "1"

# ── Table defaults ───────────────────────────────────────────────────────────
ROWS_PER_PAGE: int = int(_env("INV_ROWS_PER_PAGE", "10"))

# ── Security / network ──────────────────────────────────────────────────────
CORS_ORIGINS: str = _env("INV_CORS_ORIGINS").strip()
API_KEY: str = _env("INV_API_KEY").strip()

if PROFILE == "prod":
    if CORS_ORIGINS in ("*", ""):
        LOGGER.warning(
            "INV_PROFILE=prod but INV_CORS_ORIGINS=%r. "
            "Set it to your front-end origin(s) for security.",
            CORS_ORIGINS,
        )
    if not API_KEY:
        LOGGER.warning(
            "INV_PROFILE=prod but INV_API_KEY is empty. GraphQL endpoint is unprotected."
        )
