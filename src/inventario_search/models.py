from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any

from .normalize import parse_amount


class Origin(str, Enum):
    """Upstream table an inventory item was indexed from."""

    INEA = "INEA"
    ITEA = "ITEA"
    TLAXCALA = "TLAXCALA"  # "no listado" table


class InventoryField(str, Enum):
    ID = "id"  # id_inv
    DESCRIPCION = "descripcion"
    AREA = "area"
    USUFINAL = "usufinal"
    RESGUARDANTE = "resguardante"
    RUBRO = "rubro"
    ESTADO = "estado"
    ESTATUS = "estatus"


class CustodyField(str, Enum):
    FOLIO = "folio"
    DIRECTOR = "director"
    RESGUARDANTE = "resguardante"  # resguardantes
    FECHA = "fecha"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass
class InventoryItem:
    id: str  # UUID
    id_inv: str
    origen: Origin
    rubro: str | None = None
    descripcion: str | None = None
    valor: float | None = None
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
    def from_dict(cls, raw: dict[str, Any], origen: Origin) -> InventoryItem:
        """Build an item from one exported row, ignoring unknown columns.

        The row's own ``origen`` (if any) is overwritten by the table it came from.
        ``valor`` is coerced to a number so the column sorts consistently.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in raw.items() if k in known and k != "origen"}
        kwargs.setdefault("id", str(raw.get("id_inv", "")))
        kwargs.setdefault("id_inv", "")
        kwargs["valor"] = parse_amount(kwargs.get("valor"))
        return cls(origen=origen, **kwargs)


@dataclass
class CustodyRow:
    """One row of the resguardos table (one article under one folio)."""

    folio: str = ""  # blank rows are skipped when grouping
    f_resguardo: str = ""  # e.g. "2025-03-14"
    director: str = ""  # directorio.nombre
    id_mueble: str = ""
    origen: str = ""
    puesto: str = ""
    area: str = ""
    puesto_resguardo: str = ""
    resguardante: str = ""
    created_by: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> CustodyRow:
        known = {f.name for f in fields(cls)}
        kwargs = {k: ("" if v is None else v) for k, v in raw.items() if k in known}
        return cls(**kwargs)


@dataclass
class CustodyRecord:
    """A resguardo grouped by folio."""

    folio: str
    fecha: str
    director: str
    area: str = ""
    resguardantes: str = ""  # comma-separated
    articulos_count: int = 0


@dataclass(frozen=True)
class ActiveFilter:
    """A committed (field type, term) constraint shown as a removable chip.

    ``type`` of ``None`` means the field is unspecified.
    """

    term: str
    type: str | None = None


@dataclass(frozen=True)
class Suggestion:
    value: str
    type: str
