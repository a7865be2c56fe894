#!/usr/bin/env python3
"""Search the on-disk inventory / custody snapshots from the terminal.

Runs the same engine as the API: prints the detected match type, the
autocomplete dropdown, and the filtered table.

Usage::

    python scripts/search_inventory.py silla
    python scripts/search_inventory.py silla --filter area=ADMINISTRACIÓN
    python scripts/search_inventory.py --filter area=dirección --filter usufinal=maría --sort id_inv
    python scripts/search_inventory.py --view custody lopez --sort fecha --desc
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))

from inventario_search import config as cfg  # noqa: E402
from inventario_search.controller import SearchController  # noqa: E402
from inventario_search.custody import group_custody_rows, load_custody_rows  # noqa: E402
from inventario_search.inventory import load_unified_inventory  # noqa: E402
from inventario_search.models import ActiveFilter, SortDirection  # noqa: E402
from inventario_search.normalize import field_text  # noqa: E402
from inventario_search.profiles import CUSTODY_PROFILE, INVENTORY_PROFILE  # noqa: E402

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s %(levelname)-8s %(message)s",
    datefmt="%H:%M:%S",
)

console = Console()

_COLUMNS = {
    "inventory": ["id_inv", "descripcion", "area", "usufinal", "resguardante", "estado", "origen"],
    "custody": ["folio", "fecha", "director", "resguardantes", "articulos_count"],
}


def _parse_filter(raw: str) -> ActiveFilter:
    """``area=LEGAL`` → typed chip, bare ``LEGAL`` → unspecified chip."""
    if "=" in raw:
        field_type, term = raw.split("=", 1)
        return ActiveFilter(term=term, type=field_type.strip() or None)
    return ActiveFilter(term=raw)


def main() -> int:
    parser = argparse.ArgumentParser(description="Search inventory or custody records.")
    parser.add_argument("query", nargs="?", default="", help="Free-text search.")
    parser.add_argument(
        "--view",
        choices=sorted(_COLUMNS),
        default="inventory",
        help="Which record set to search (default: inventory).",
    )
    parser.add_argument(
        "--filter",
        "-f",
        action="append",
        default=[],
        metavar="TYPE=TERM",
        help="Active filter chip; repeatable.",
    )
    parser.add_argument("--sort", default=None, help="Field to sort by.")
    parser.add_argument("--desc", action="store_true", help="Sort descending.")
    parser.add_argument(
        "--limit",
        "-n",
        type=int,
        default=cfg.ROWS_PER_PAGE,
        help=f"Rows to show (default: {cfg.ROWS_PER_PAGE}; 0 = all).",
    )
    args = parser.parse_args()

    if args.view == "inventory":
        unified = load_unified_inventory()
        if unified.error:
            console.print(f"[red]{unified.error}[/]")
        controller = SearchController(INVENTORY_PROFILE, unified.items)
    else:
        rows = load_custody_rows(seed_fallback=cfg.SEED_MODE)
        controller = SearchController(CUSTODY_PROFILE, group_custody_rows(rows))

    for raw in args.filter:
        controller.add_filter(_parse_filter(raw))
    controller.set_query(args.query)
    if args.sort:
        controller.sort_field = args.sort
        controller.sort_direction = SortDirection.DESC if args.desc else SortDirection.ASC

    match = controller.match_type
    chips = ", ".join(f"{f.type or '*'}:{f.term}" for f in controller.active_filters) or "-"
    console.print(
        Panel(
            f"[bold]query[/] {args.query!r}   [bold]match[/] {match.value if match else '-'}\n"
            f"[bold]filters[/] {chips}",
            title=f"{args.view} ({len(controller.records)} records)",
            border_style="cyan",
        )
    )

    suggestions = controller.suggestions
    if suggestions:
        console.print("[bold cyan]Suggestions[/]")
        for i, s in enumerate(suggestions):
            marker = "▸" if i == controller.highlighted_index else " "
            console.print(f" {marker} {s.value} [dim]({s.type.value})[/]")

    visible = controller.visible_records()
    shown = visible[: args.limit] if args.limit > 0 else visible
    table = Table(title=f"{len(visible)} match(es)", show_lines=False)
    for col in _COLUMNS[args.view]:
        table.add_column(col)
    for record in shown:
        table.add_row(*[field_text(record, col) or "" for col in _COLUMNS[args.view]])
    console.print(table)

    if args.view == "inventory" and controller.custom_pdf_enabled:
        console.print("[green]Custom custody report available for this area/director.[/]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
