from __future__ import annotations

import json
from pathlib import Path

import pytest

from inventario_search.models import CustodyRecord, CustodyRow, InventoryItem, Origin

# ── Inventory fixtures ────────────────────────────────────────────────────────


@pytest.fixture
def silla_inea() -> InventoryItem:
    return InventoryItem(
        id="a1",
        id_inv="INEA-0001",
        origen=Origin.INEA,
        rubro="MOBILIARIO",
        descripcion="SILLA SECRETARIAL GIRATORIA",
        valor=1850.0,
        estado="BUENO",
        estatus="ACTIVO",
        area="DIRECCIÓN GENERAL",
        usufinal="MARÍA LÓPEZ HERNÁNDEZ",
        resguardante="JUAN PÉREZ",
    )


@pytest.fixture
def laptop_inea() -> InventoryItem:
    return InventoryItem(
        id="a2",
        id_inv="INEA-0002",
        origen=Origin.INEA,
        rubro="EQUIPO DE COMPUTO",
        descripcion="LAPTOP 14 PULGADAS",
        valor=15400.5,
        estado="REGULAR",
        estatus="ACTIVO",
        area="PLANEACIÓN",
        usufinal="ROBERTO SÁNCHEZ",
        resguardante="ANA TORRES",
    )


@pytest.fixture
def silla_itea() -> InventoryItem:
    return InventoryItem(
        id="b1",
        id_inv="ITEA-1002",
        origen=Origin.ITEA,
        rubro="MOBILIARIO",
        descripcion="SILLA DE VISITA",
        estado="BUENO",
        estatus="ACTIVO",
        area="ADMINISTRACIÓN",
        usufinal="LAURA GÓMEZ",
        resguardante=None,
    )


@pytest.fixture
def camioneta_tlaxcala() -> InventoryItem:
    """An item from the 'no listado' table with no custodian."""
    return InventoryItem(
        id="c1",
        id_inv="TLX-501",
        origen=Origin.TLAXCALA,
        rubro="VEHICULOS",
        descripcion="CAMIONETA PICK UP",
        estado="REGULAR",
        estatus="BAJA",
        area="COORDINACIÓN DE ZONA APIZACO",
        usufinal="JORGE MÉNDEZ",
    )


@pytest.fixture
def inventory(
    silla_inea: InventoryItem,
    laptop_inea: InventoryItem,
    silla_itea: InventoryItem,
    camioneta_tlaxcala: InventoryItem,
) -> list[InventoryItem]:
    return [silla_inea, laptop_inea, silla_itea, camioneta_tlaxcala]


# ── Custody fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def custody_rows() -> list[CustodyRow]:
    return [
        CustodyRow(
            folio="RES-0001",
            f_resguardo="2025-01-15",
            director="MARÍA LÓPEZ HERNÁNDEZ",
            area="DIRECCIÓN GENERAL",
            resguardante="JUAN PÉREZ",
        ),
        CustodyRow(
            folio="RES-0002",
            f_resguardo="2025-02-03",
            director="LAURA GÓMEZ",
            area="ADMINISTRACIÓN",
            resguardante="PEDRO RAMÍREZ",
        ),
        CustodyRow(
            folio="RES-0001",
            f_resguardo="2025-01-15",
            director="MARÍA LÓPEZ HERNÁNDEZ",
            area="DIRECCIÓN GENERAL",
            resguardante="ANA TORRES",
        ),
        CustodyRow(
            folio="RES-0001",
            f_resguardo="2025-01-15",
            director="MARÍA LÓPEZ HERNÁNDEZ",
            area="DIRECCIÓN GENERAL",
            resguardante="JUAN PÉREZ",
        ),
    ]


@pytest.fixture
def custody_records() -> list[CustodyRecord]:
    return [
        CustodyRecord(
            folio="RES-0001",
            fecha="2025-01-15",
            director="MARÍA LÓPEZ",
            resguardantes="JUAN PÉREZ, ANA TORRES",
            articulos_count=3,
        ),
        CustodyRecord(
            folio="RES-0002",
            fecha="2025-02-03",
            director="LAURA GÓMEZ",
            resguardantes="PEDRO RAMÍREZ",
            articulos_count=1,
        ),
        CustodyRecord(
            folio="RES-0010",
            fecha="2025-03-01",
            director="JUAN RES",
            resguardantes="",
            articulos_count=2,
        ),
    ]


# ── Snapshot directories ──────────────────────────────────────────────────────


def _write_snapshot(directory: Path, filename: str, rows: object) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_text(json.dumps(rows, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def snapshot_dir(tmp_path: Path) -> Path:
    """A data dir with one row per inventory source plus custody rows."""
    data = tmp_path / "cache"
    _write_snapshot(data, "inea.json", [{"id": "i1", "id_inv": "INEA-1", "area": "LEGAL"}])
    _write_snapshot(data, "itea.json", [{"id": "t1", "id_inv": "ITEA-1", "area": "HR"}])
    _write_snapshot(
        data,
        "tlaxcala.json",
        [{"id": "x1", "id_inv": "TLX-1", "area": "LEGAL", "origen": "INEA"}],
    )
    _write_snapshot(
        data,
        "resguardos.json",
        [
            {"folio": "RES-1", "f_resguardo": "2025-01-01", "director": "ANA", "resguardante": "LUIS"},
            {"folio": "RES-1", "f_resguardo": "2025-01-01", "director": "ANA", "resguardante": None},
        ],
    )
    return data
