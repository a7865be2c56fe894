"""Integration tests for the FastAPI / GraphQL API.

Uses FastAPI's TestClient (backed by httpx) to exercise the health endpoint,
CORS headers, API key auth, and GraphQL queries against real schema resolution.

These tests do NOT start the lifespan (no snapshot loading).  State is empty
unless a test fills it directly through ``main.state``.
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from inventario_search.models import CustodyRow, InventoryItem

# ── Helpers ───────────────────────────────────────────────────────────────────


def _make_client(**env_overrides: str) -> TestClient:
    """Build a fresh TestClient, optionally with env var overrides.

    We reimport ``config`` then ``main`` each time to pick up changed
    env vars for API_KEY, CORS_ORIGINS, etc.  We skip the lifespan so
    there is no real startup.
    """
    with patch.dict(os.environ, env_overrides):
        import importlib

        import inventario_search.config as _cfg_mod
        import inventario_search.main as _main_mod

        importlib.reload(_cfg_mod)
        importlib.reload(_main_mod)
        return TestClient(_main_mod.app, raise_server_exceptions=False)


def _state():  # type: ignore[no-untyped-def]
    import inventario_search.main as _main_mod

    return _main_mod.state


@pytest.fixture()
def client() -> TestClient:
    """TestClient with default env (no API key required)."""
    return _make_client(INV_API_KEY="", INV_PROFILE="dev", INV_CORS_ORIGINS="*")


@pytest.fixture()
def loaded_client(
    client: TestClient, inventory: list[InventoryItem], custody_rows: list[CustodyRow]
) -> TestClient:
    state = _state()
    state.set_inventory(inventory)
    state.set_custody_rows(custody_rows)
    return client


def _gql(client: TestClient, query: str) -> dict:
    resp = client.post("/graphql", json={"query": query})
    assert resp.status_code == 200
    body = resp.json()
    assert "errors" not in body, body.get("errors")
    return body["data"]


# ── Health endpoint ───────────────────────────────────────────────────────────


class TestHealthEndpoint:
    def test_returns_ok(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["inventory"] == 0
        assert body["custody_records"] == 0
        assert body["inventory_error"] is None

    def test_ready_is_false_when_empty(self, client: TestClient) -> None:
        assert client.get("/health").json()["ready"] is False

    def test_counts_after_load(self, loaded_client: TestClient) -> None:
        body = loaded_client.get("/health").json()
        assert body["ready"] is True
        assert body["inventory"] == 4
        assert body["custody_records"] == 2


# ── CORS headers ──────────────────────────────────────────────────────────────


class TestCORS:
    def test_cors_headers_present(self, client: TestClient) -> None:
        resp = client.options(
            "/graphql",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert "access-control-allow-origin" in resp.headers


# ── API key authentication ────────────────────────────────────────────────────


class TestAPIKeyAuth:
    def test_graphql_accessible_without_key(self, client: TestClient) -> None:
        resp = client.post("/graphql", json={"query": "{ __typename }"})
        assert resp.status_code == 200

    def test_rejects_without_key(self) -> None:
        secured = _make_client(INV_API_KEY="secret-key-123")
        resp = secured.post("/graphql", json={"query": "{ __typename }"})
        assert resp.status_code == 401
        assert "Invalid or missing API key" in resp.json()["detail"]

    def test_accepts_correct_key(self) -> None:
        secured = _make_client(INV_API_KEY="secret-key-123")
        resp = secured.post(
            "/graphql",
            json={"query": "{ __typename }"},
            headers={"X-API-Key": "secret-key-123"},
        )
        assert resp.status_code == 200

    def test_health_exempt(self) -> None:
        secured = _make_client(INV_API_KEY="secret-key-123")
        assert secured.get("/health").status_code == 200

    def test_reindex_protected(self) -> None:
        secured = _make_client(INV_API_KEY="secret-key-123")
        assert secured.post("/reindex").status_code == 401


# ── GraphQL: inventory ────────────────────────────────────────────────────────


class TestInventoryQuery:
    def test_search_box_state(self, loaded_client: TestClient) -> None:
        data = _gql(
            loaded_client,
            '{ inventory(search: "silla") {'
            " items { idInv origen } pageInfo { totalCount }"
            " matchType suggestions { value type } } }",
        )["inventory"]
        assert [i["idInv"] for i in data["items"]] == ["INEA-0001", "ITEA-1002"]
        assert data["pageInfo"]["totalCount"] == 2
        assert data["matchType"] == "descripcion"
        assert data["suggestions"][0] == {
            "value": "SILLA SECRETARIAL GIRATORIA",
            "type": "descripcion",
        }

    def test_filters_and_custom_pdf(self, loaded_client: TestClient) -> None:
        data = _gql(
            loaded_client,
            "{ inventory(filters: ["
            '{term: "direccion general", type: AREA},'
            '{term: "maria lopez hernandez", type: USUFINAL}'
            "]) { items { idInv } customPdfEnabled } }",
        )["inventory"]
        # substring filters are accent-sensitive; only the report check folds accents
        assert data["items"] == []
        assert data["customPdfEnabled"] is True

    def test_sort_and_paginate(self, loaded_client: TestClient) -> None:
        data = _gql(
            loaded_client,
            "{ inventory(sortBy: ID_INV, sortOrder: DESC, offset: 0, limit: 2) {"
            " items { idInv } pageInfo { hasNextPage } } }",
        )["inventory"]
        assert [i["idInv"] for i in data["items"]] == ["TLX-501", "ITEA-1002"]
        assert data["pageInfo"]["hasNextPage"] is True

    def test_item_lookup(self, loaded_client: TestClient) -> None:
        data = _gql(loaded_client, '{ inventoryItem(idInv: "INEA-0002") { descripcion valor } }')
        assert data["inventoryItem"] == {"descripcion": "LAPTOP 14 PULGADAS", "valor": "15400.5"}

    def test_item_lookup_missing(self, loaded_client: TestClient) -> None:
        data = _gql(loaded_client, '{ inventoryItem(idInv: "NOPE") { id } }')
        assert data["inventoryItem"] is None


# ── GraphQL: custody records ──────────────────────────────────────────────────


class TestCustodyQuery:
    def test_grouped_records(self, loaded_client: TestClient) -> None:
        data = _gql(
            loaded_client,
            "{ custodyRecords { items { folio resguardantes articulosCount } } }",
        )["custodyRecords"]
        assert data["items"][0] == {
            "folio": "RES-0001",
            "resguardantes": "JUAN PÉREZ, ANA TORRES",
            "articulosCount": 3,
        }

    def test_resguardante_filter(self, loaded_client: TestClient) -> None:
        data = _gql(
            loaded_client,
            '{ custodyRecords(filters: [{term: "pedro", type: RESGUARDANTE}]) {'
            " items { folio } } }",
        )["custodyRecords"]
        assert data["items"] == [{"folio": "RES-0002"}]

    def test_match_type(self, loaded_client: TestClient) -> None:
        data = _gql(loaded_client, '{ custodyRecords(search: "laura") { matchType } }')
        assert data["custodyRecords"]["matchType"] == "director"

    def test_record_lookup(self, loaded_client: TestClient) -> None:
        data = _gql(loaded_client, '{ custodyRecord(folio: "RES-0002") { director } }')
        assert data["custodyRecord"] == {"director": "LAURA GÓMEZ"}

    def test_directory(self, loaded_client: TestClient) -> None:
        data = _gql(loaded_client, "{ custodyDirectory { directores resguardantes } }")
        assert data["custodyDirectory"]["directores"] == ["LAURA GÓMEZ", "MARÍA LÓPEZ HERNÁNDEZ"]


# ── Reindex ───────────────────────────────────────────────────────────────────


class TestReindex:
    def test_reloads_from_data_dir(self, snapshot_dir: Path) -> None:
        client = _make_client(
            INV_API_KEY="", INV_DATA_DIR=str(snapshot_dir), INV_SEED_MODE="0"
        )
        resp = client.post("/reindex")
        assert resp.status_code == 200
        body = resp.json()
        assert body["inventory"] == 3
        assert body["custody_records"] == 1
        assert body["inventory_error"] is None
        assert client.get("/health").json()["ready"] is True

    def test_survives_malformed_rows(self, snapshot_dir: Path) -> None:
        (snapshot_dir / "itea.json").write_text('["oops"]', encoding="utf-8")
        (snapshot_dir / "resguardos.json").write_text(
            '[{"director": "SIN FOLIO"}, {"folio": "RES-2", "director": "ANA"}]',
            encoding="utf-8",
        )
        client = _make_client(
            INV_API_KEY="", INV_DATA_DIR=str(snapshot_dir), INV_SEED_MODE="0"
        )
        resp = client.post("/reindex")
        assert resp.status_code == 200
        body = resp.json()
        assert body["inventory"] == 2
        assert body["custody_records"] == 1
        assert body["inventory_error"].startswith("Error al cargar ITEA")

    def test_runs_in_threadpool(self) -> None:
        import inspect

        import inventario_search.main as _main_mod

        assert not inspect.iscoroutinefunction(_main_mod.reindex)


# ── GraphQL: seed data ────────────────────────────────────────────────────────


class TestSeedInventoryQuery:
    def test_sort_by_valor(self) -> None:
        seed = Path(__file__).resolve().parent.parent / "mocks" / "dev"
        client = _make_client(
            INV_API_KEY="",
            INV_DATA_DIR=str(seed / "missing"),
            INV_SEED_DIR=str(seed),
            INV_SEED_MODE="1",
        )
        assert client.post("/reindex").status_code == 200

        data = _gql(
            client,
            "{ inventory(sortBy: VALOR, sortOrder: DESC) { items { idInv valor } } }",
        )["inventory"]
        assert [i["idInv"] for i in data["items"]] == [
            "TLX-501",
            "INEA-0002",
            "ITEA-1001",
            "INEA-0003",
            "INEA-0001",
            "ITEA-1002",
        ]
        assert data["items"][2]["valor"] == "4890.0"
