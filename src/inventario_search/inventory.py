"""Unified inventory: INEA, ITEA and TLAXCALA merged into one record set.

Each source is an exported JSON snapshot (``inea.json``, ``itea.json``,
``tlaxcala.json``) of its table.  Sources load in parallel and finish in any
order, but the merged list is always INEA, then ITEA, then TLAXCALA, so the
table and suggestion order stay deterministic.

A source that fails to load does not take the others down: its error is
logged and reported on :class:`UnifiedInventory` (first error by source
priority), and the remaining items are still served.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

from . import config as cfg
from .models import InventoryItem, Origin

LOGGER = logging.getLogger(__name__)

SOURCE_ORDER: tuple[Origin, ...] = (Origin.INEA, Origin.ITEA, Origin.TLAXCALA)


@dataclass
class UnifiedInventory:
    items: list[InventoryItem] = field(default_factory=list)
    counts: dict[Origin, int] = field(default_factory=dict)
    error: str | None = None

    @property
    def loading_failed(self) -> bool:
        return self.error is not None


def source_filename(origin: Origin) -> str:
    return f"{origin.value.lower()}.json"


def read_snapshot(
    filename: str,
    *,
    data_dir: Path | None = None,
    seed_dir: Path | None = None,
    seed_fallback: bool = False,
) -> list[dict]:
    """Read a list-shaped JSON snapshot from the data dir, else the seed dir.

    Returns ``[]`` (with a warning) when neither file exists.  Unreadable or
    malformed files, including rows that are not objects, raise.
    """
    data_dir = data_dir if data_dir is not None else cfg.DATA_DIR
    seed_dir = seed_dir if seed_dir is not None else cfg.SEED_DIR

    path = data_dir / filename
    if not path.exists() and seed_fallback:
        seed_path = seed_dir / filename
        if seed_path.exists():
            LOGGER.info("Loading seed data from %s (no snapshot found)", seed_path)
            path = seed_path
    if not path.exists():
        LOGGER.warning("No snapshot for %s in %s", filename, data_dir)
        return []

    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a JSON list, got {type(raw).__name__}")
    for i, row in enumerate(raw):
        if not isinstance(row, dict):
            raise ValueError(f"{path}: row {i} is {type(row).__name__}, expected an object")
    return raw


def load_source(
    origin: Origin,
    *,
    data_dir: Path | None = None,
    seed_dir: Path | None = None,
    seed_fallback: bool = False,
) -> list[InventoryItem]:
    """Load one source table and tag every item with its origin."""
    rows = read_snapshot(
        source_filename(origin),
        data_dir=data_dir,
        seed_dir=seed_dir,
        seed_fallback=seed_fallback,
    )
    return [InventoryItem.from_dict(row, origin) for row in rows]


def load_unified_inventory(
    *,
    data_dir: Path | None = None,
    seed_dir: Path | None = None,
    seed_fallback: bool | None = None,
    max_workers: int = 3,
) -> UnifiedInventory:
    """Load all three sources concurrently and merge them in source order."""
    if seed_fallback is None:
        seed_fallback = cfg.SEED_MODE

    loaded: dict[Origin, list[InventoryItem]] = {}
    errors: dict[Origin, str] = {}

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        future_to_origin = {
            pool.submit(
                load_source,
                origin,
                data_dir=data_dir,
                seed_dir=seed_dir,
                seed_fallback=seed_fallback,
            ): origin
            for origin in SOURCE_ORDER
        }
        for future in as_completed(future_to_origin):
            origin = future_to_origin[future]
            try:
                loaded[origin] = future.result()
                LOGGER.info("Loaded %d %s items", len(loaded[origin]), origin.value)
            except (OSError, ValueError) as exc:
                # json.JSONDecodeError is a ValueError
                LOGGER.error("Failed to load %s inventory: %s", origin.value, exc)
                errors[origin] = f"Error al cargar {origin.value}: {exc}"

    result = UnifiedInventory()
    for origin in SOURCE_ORDER:
        items = loaded.get(origin, [])
        result.items.extend(items)
        result.counts[origin] = len(items)
    result.error = next((errors[o] for o in SOURCE_ORDER if o in errors), None)
    return result
