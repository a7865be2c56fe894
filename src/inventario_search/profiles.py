"""Per-view field layouts for the search engine.

The engine in :mod:`inventario_search.search` is generic; everything that
differs between the inventory view and the custody-record view (which fields
are indexed, the classifier's tier cascade and score bands, which attribute a
filter chip targets) lives in a :class:`SearchProfile`.
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import CustodyField, InventoryField


@dataclass(frozen=True)
class Tier:
    """One step of the classifier cascade.

    The tier matches a record when any of *attrs* contains the query; it is
    exact when any of them equals the query.
    """

    match_type: str
    attrs: tuple[str, ...]
    exact_score: int
    substring_score: int


@dataclass(frozen=True)
class SearchProfile:
    name: str
    # (field type, record attribute), in suggestion priority order
    index_fields: tuple[tuple[str, str], ...]
    tiers: tuple[Tier, ...]
    # (field type, record attribute), checked only when no tier matched
    fallback_fields: tuple[tuple[str, str], ...]
    # field type -> record attribute, used by active filters
    filter_fields: dict[str, str]
    free_text_attrs: tuple[str, ...]

    @property
    def max_score(self) -> int:
        return max((t.exact_score for t in self.tiers), default=0)

    def attr_for(self, field_type: str | None) -> str | None:
        if field_type is None:
            return None
        return self.filter_fields.get(field_type)


# ── Inventory (unified INEA / ITEA / TLAXCALA) ───────────────────────────────

_INV = InventoryField

INVENTORY_PROFILE = SearchProfile(
    name="inventory",
    index_fields=(
        (_INV.ID, "id_inv"),
        (_INV.AREA, "area"),
        (_INV.USUFINAL, "usufinal"),
        (_INV.RESGUARDANTE, "resguardante"),
        (_INV.DESCRIPCION, "descripcion"),
        (_INV.RUBRO, "rubro"),
        (_INV.ESTADO, "estado"),
        (_INV.ESTATUS, "estatus"),
    ),
    tiers=(
        Tier(_INV.ID, ("id_inv",), exact_score=6, substring_score=4),
        Tier(_INV.AREA, ("area",), exact_score=5, substring_score=3),
        # Director and custodian share one badge.
        Tier(_INV.USUFINAL, ("usufinal", "resguardante"), exact_score=4, substring_score=2),
    ),
    fallback_fields=(
        (_INV.DESCRIPCION, "descripcion"),
        (_INV.RUBRO, "rubro"),
        (_INV.ESTADO, "estado"),
        (_INV.ESTATUS, "estatus"),
    ),
    filter_fields={
        _INV.ID: "id_inv",
        _INV.DESCRIPCION: "descripcion",
        _INV.RUBRO: "rubro",
        _INV.ESTADO: "estado",
        _INV.ESTATUS: "estatus",
        _INV.AREA: "area",
        _INV.USUFINAL: "usufinal",
        _INV.RESGUARDANTE: "resguardante",
    },
    free_text_attrs=(
        "id_inv",
        "descripcion",
        "area",
        "usufinal",
        "resguardante",
        "rubro",
        "estado",
        "estatus",
    ),
)

# ── Custody records (resguardos grouped by folio) ────────────────────────────

_CUS = CustodyField

CUSTODY_PROFILE = SearchProfile(
    name="custody",
    index_fields=(
        (_CUS.FOLIO, "folio"),
        (_CUS.DIRECTOR, "director"),
        (_CUS.RESGUARDANTE, "resguardantes"),
        (_CUS.FECHA, "fecha"),
    ),
    tiers=(
        Tier(_CUS.DIRECTOR, ("director",), exact_score=6, substring_score=5),
        Tier(_CUS.FOLIO, ("folio",), exact_score=5, substring_score=4),
        Tier(_CUS.RESGUARDANTE, ("resguardantes",), exact_score=4, substring_score=3),
        Tier(_CUS.FECHA, ("fecha",), exact_score=3, substring_score=2),
    ),
    fallback_fields=(),
    filter_fields={
        _CUS.FOLIO: "folio",
        _CUS.DIRECTOR: "director",
        _CUS.RESGUARDANTE: "resguardantes",
        _CUS.FECHA: "fecha",
    },
    free_text_attrs=("folio", "director", "resguardantes", "fecha"),
)
