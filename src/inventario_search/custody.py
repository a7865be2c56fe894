"""Custody records (resguardos): raw rows grouped into one record per folio."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .inventory import read_snapshot
from .models import CustodyRecord, CustodyRow

LOGGER = logging.getLogger(__name__)

CUSTODY_FILENAME = "resguardos.json"


def load_custody_rows(
    *,
    data_dir: Path | None = None,
    seed_dir: Path | None = None,
    seed_fallback: bool = False,
) -> list[CustodyRow]:
    rows = read_snapshot(
        CUSTODY_FILENAME,
        data_dir=data_dir,
        seed_dir=seed_dir,
        seed_fallback=seed_fallback,
    )
    return [CustodyRow.from_dict(r) for r in rows]


@dataclass
class _FolioGroup:
    first: CustodyRow
    resguardantes: dict[str, None] = field(default_factory=dict)  # ordered set
    count: int = 0


def group_custody_rows(rows: list[CustodyRow]) -> list[CustodyRecord]:
    """Collapse article rows into one record per folio.

    Rows without a folio are dropped.  Folios keep first-seen order.  Date,
    director and area come from the first row; custodians are de-duplicated
    in first-seen order and joined with ``", "``.
    """
    groups: dict[str, _FolioGroup] = {}
    skipped = 0
    for row in rows:
        if not row.folio:
            skipped += 1
            continue
        group = groups.get(row.folio)
        if group is None:
            group = groups[row.folio] = _FolioGroup(first=row)
        group.count += 1
        if row.resguardante:
            group.resguardantes.setdefault(row.resguardante, None)

    records = [
        CustodyRecord(
            folio=folio,
            fecha=g.first.f_resguardo,
            director=g.first.director,
            area=g.first.area,
            resguardantes=", ".join(g.resguardantes),
            articulos_count=g.count,
        )
        for folio, g in groups.items()
    ]
    if skipped:
        LOGGER.warning("Skipped %d custody rows without folio", skipped)
    LOGGER.debug("Grouped %d custody rows into %d folios", len(rows), len(records))
    return records


def unique_values(rows: list[CustodyRow]) -> tuple[list[str], list[str]]:
    """Sorted distinct directors and custodians (for filter dropdowns)."""
    directores = sorted({r.director for r in rows if r.director})
    resguardantes = sorted({r.resguardante for r in rows if r.resguardante})
    return directores, resguardantes
