from __future__ import annotations

from enum import Enum

import strawberry

from .models import ActiveFilter
from .models import CustodyField as CustodyFieldModel
from .models import CustodyRecord as CustodyRecordModel
from .models import InventoryField as InventoryFieldModel
from .models import InventoryItem as InventoryItemModel
from .models import SortDirection
from .models import Suggestion as SuggestionModel

# ── Enums ─────────────────────────────────────────────────────────────────────

InventoryField = strawberry.enum(
    InventoryFieldModel,
    name="InventoryField",
    description="Field an inventory filter chip or suggestion refers to.",
)

CustodyField = strawberry.enum(
    CustodyFieldModel,
    name="CustodyField",
    description="Field a custody-record filter chip or suggestion refers to.",
)


@strawberry.enum
class InventorySortField(Enum):
    ID_INV = "id_inv"
    DESCRIPCION = "descripcion"
    AREA = "area"
    USUFINAL = "usufinal"
    RESGUARDANTE = "resguardante"
    RUBRO = "rubro"
    ESTADO = "estado"
    ESTATUS = "estatus"
    VALOR = "valor"
    F_ADQ = "f_adq"
    ORIGEN = "origen"


@strawberry.enum
class CustodySortField(Enum):
    FOLIO = "folio"
    FECHA = "fecha"
    DIRECTOR = "director"
    RESGUARDANTES = "resguardantes"


@strawberry.enum
class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"


def to_direction(order: SortOrder | None) -> SortDirection:
    return SortDirection.DESC if order == SortOrder.DESC else SortDirection.ASC


def enum_value(value: object) -> str | None:
    """Enum members → their value, so they serialize as bare strings."""
    if value is None:
        return None
    return str(getattr(value, "value", value))


# ── Inputs ────────────────────────────────────────────────────────────────────


@strawberry.input
class InventoryFilterInput:
    term: str
    type: InventoryField | None = None

    def to_model(self) -> ActiveFilter:
        return ActiveFilter(term=self.term, type=self.type)


@strawberry.input
class CustodyFilterInput:
    term: str
    type: CustodyField | None = None

    def to_model(self) -> ActiveFilter:
        return ActiveFilter(term=self.term, type=self.type)


# ── Pagination ────────────────────────────────────────────────────────────────


@strawberry.type
class PageInfo:
    """Pagination metadata returned with every paginated query."""

    total_count: int = strawberry.field(
        description="Total number of items matching the query (before pagination).",
    )
    has_next_page: bool = strawberry.field(
        description="True when more items exist beyond the current page.",
    )
    has_previous_page: bool = strawberry.field(
        description="True when items exist before the current page.",
    )


def paginate(items: list, offset: int, limit: int) -> tuple[list, PageInfo]:
    """Apply offset/limit pagination and build PageInfo.

    When *limit* is 0 the full list is returned (no cap).
    """
    total = len(items)
    if limit > 0:
        page = items[offset : offset + limit]
    else:
        page = items[offset:]
    has_next = limit > 0 and (offset + limit) < total
    has_prev = offset > 0
    return page, PageInfo(
        total_count=total,
        has_next_page=has_next,
        has_previous_page=has_prev,
    )


# ── Records ───────────────────────────────────────────────────────────────────


@strawberry.type
class InventoryItemType:
    id: str
    id_inv: str
    origen: str
    rubro: str | None = None
    descripcion: str | None = None
    valor: str | None = None
    f_adq: str | None = None
    formadq: str | None = None
    proveedor: str | None = None
    factura: str | None = None
    ubicacion_es: str | None = None
    ubicacion_mu: str | None = None
    ubicacion_no: str | None = None
    estado: str | None = None
    estatus: str | None = None
    area: str | None = None
    usufinal: str | None = None
    fechabaja: str | None = None
    causadebaja: str | None = None
    resguardante: str | None = None
    image_path: str | None = None

    @classmethod
    def from_model(cls, m: InventoryItemModel) -> InventoryItemType:
        return cls(
            id=m.id,
            id_inv=m.id_inv,
            origen=enum_value(m.origen) or "",
            rubro=m.rubro,
            descripcion=m.descripcion,
            valor=None if m.valor is None else str(m.valor),
            f_adq=m.f_adq,
            formadq=m.formadq,
            proveedor=m.proveedor,
            factura=m.factura,
            ubicacion_es=m.ubicacion_es,
            ubicacion_mu=m.ubicacion_mu,
            ubicacion_no=m.ubicacion_no,
            estado=m.estado,
            estatus=m.estatus,
            area=m.area,
            usufinal=m.usufinal,
            fechabaja=m.fechabaja,
            causadebaja=m.causadebaja,
            resguardante=m.resguardante,
            image_path=m.image_path,
        )


@strawberry.type
class CustodyRecordType:
    folio: str
    fecha: str
    director: str
    area: str
    resguardantes: str = strawberry.field(
        description="Comma-separated custodians holding articles under this folio.",
    )
    articulos_count: int

    @classmethod
    def from_model(cls, r: CustodyRecordModel) -> CustodyRecordType:
        return cls(
            folio=r.folio,
            fecha=r.fecha,
            director=r.director,
            area=r.area,
            resguardantes=r.resguardantes,
            articulos_count=r.articulos_count,
        )


@strawberry.type
class SuggestionType:
    """One autocomplete entry for the search box."""

    value: str
    type: str = strawberry.field(description="Field the value was drawn from.")

    @classmethod
    def from_model(cls, s: SuggestionModel) -> SuggestionType:
        return cls(value=s.value, type=enum_value(s.type) or "")


# ── Connections ───────────────────────────────────────────────────────────────


@strawberry.type
class InventoryConnection:
    """Filtered, sorted and paginated inventory plus search-box state."""

    items: list[InventoryItemType]
    page_info: PageInfo
    match_type: str | None = strawberry.field(
        default=None,
        description="Field the free-text search most likely targets (badge label).",
    )
    suggestions: list[SuggestionType] = strawberry.field(default_factory=list)
    custom_pdf_enabled: bool = strawberry.field(
        default=False,
        description="True when area + director chips name an existing area and director.",
    )


@strawberry.type
class CustodyConnection:
    """Filtered, sorted and paginated custody records plus search-box state."""

    items: list[CustodyRecordType]
    page_info: PageInfo
    match_type: str | None = None
    suggestions: list[SuggestionType] = strawberry.field(default_factory=list)


@strawberry.type
class CustodyDirectoryType:
    """Distinct directors and custodians appearing in custody records."""

    directores: list[str]
    resguardantes: list[str]
