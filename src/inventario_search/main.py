from __future__ import annotations

import logging
import sys
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import strawberry
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from strawberry.fastapi import GraphQLRouter

from . import config as cfg
from .controller import custom_pdf_enabled
from .custody import group_custody_rows, load_custody_rows, unique_values
from .inventory import load_unified_inventory
from .models import CustodyRecord, CustodyRow, InventoryItem
from .profiles import CUSTODY_PROFILE, INVENTORY_PROFILE
from .schema import (
    CustodyConnection,
    CustodyDirectoryType,
    CustodyFilterInput,
    CustodyRecordType,
    CustodySortField,
    InventoryConnection,
    InventoryFilterInput,
    InventoryItemType,
    InventorySortField,
    SortOrder,
    SuggestionType,
    enum_value,
    paginate,
    to_direction,
)
from .search import SearchableIndex, build_index, classify, filter_records, sort_records, suggest

# ── Configure logging ────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:     %(message)s",
    stream=sys.stderr,
    force=True,
)
LOGGER = logging.getLogger(__name__)


# ── App state container ──────────────────────────────────────────────────────


class AppState:
    def __init__(self) -> None:
        self.inventory: list[InventoryItem] = []
        self.inventory_lookup: dict[str, InventoryItem] = {}
        self.inventory_index: SearchableIndex = build_index([], INVENTORY_PROFILE)
        self.inventory_error: str | None = None
        self.custody_rows: list[CustodyRow] = []
        self.custody_records: list[CustodyRecord] = []
        self.custody_lookup: dict[str, CustodyRecord] = {}
        self.custody_index: SearchableIndex = build_index([], CUSTODY_PROFILE)

    def set_inventory(self, items: list[InventoryItem]) -> None:
        self.inventory = items
        self.inventory_lookup = {i.id_inv: i for i in items if i.id_inv}
        self.inventory_index = build_index(items, INVENTORY_PROFILE)

    def set_custody_rows(self, rows: list[CustodyRow]) -> None:
        self.custody_rows = rows
        self.custody_records = group_custody_rows(rows)
        self.custody_lookup = {r.folio: r for r in self.custody_records}
        self.custody_index = build_index(self.custody_records, CUSTODY_PROFILE)


state = AppState()


def reload_state(target: AppState) -> None:
    """Load every snapshot from disk and rebuild both search indexes."""
    t0 = time.perf_counter()

    unified = load_unified_inventory(
        data_dir=cfg.DATA_DIR,
        seed_dir=cfg.SEED_DIR,
        seed_fallback=cfg.SEED_MODE,
    )
    target.set_inventory(unified.items)
    target.inventory_error = unified.error

    try:
        rows = load_custody_rows(
            data_dir=cfg.DATA_DIR,
            seed_dir=cfg.SEED_DIR,
            seed_fallback=cfg.SEED_MODE,
        )
    except (OSError, ValueError) as exc:
        LOGGER.error("Failed to load custody records: %s", exc)
        rows = []
    target.set_custody_rows(rows)

    LOGGER.info(
        "Indexed %d inventory items (%s) and %d custody folios in %.2fs",
        len(target.inventory),
        ", ".join(f"{o.value}={n}" for o, n in unified.counts.items()),
        len(target.custody_records),
        time.perf_counter() - t0,
    )


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    if cfg.SEED_MODE:
        LOGGER.warning("⚠️ SEED MODE: missing snapshots fall back to %s", cfg.SEED_DIR)
    reload_state(state)
    yield


# ── GraphQL schema ───────────────────────────────────────────────────────────


@strawberry.type
class Query:
    @strawberry.field(
        description=(
            "Unified inventory (INEA + ITEA + TLAXCALA) filtered by chips and free text,"
            " with the search box's match type and suggestions."
        ),
    )
    def inventory(
        self,
        search: str = "",
        filters: list[InventoryFilterInput] | None = None,
        sort_by: InventorySortField | None = None,
        sort_order: SortOrder | None = None,
        offset: int = 0,
        limit: int = 0,
    ) -> InventoryConnection:
        active = [f.to_model() for f in filters or []]
        result = filter_records(state.inventory, active, search, INVENTORY_PROFILE)
        if sort_by is not None:
            result = sort_records(result, sort_by.value, to_direction(sort_order))

        page, page_info = paginate(result, offset, limit)
        return InventoryConnection(
            items=[InventoryItemType.from_model(i) for i in page],
            page_info=page_info,
            match_type=enum_value(classify(search, state.inventory, INVENTORY_PROFILE)),
            suggestions=[
                SuggestionType.from_model(s)
                for s in suggest(search, state.inventory_index, INVENTORY_PROFILE)
            ],
            custom_pdf_enabled=custom_pdf_enabled(state.inventory, active),
        )

    @strawberry.field(description="Look up a single inventory item by inventory number.")
    def inventory_item(self, id_inv: str) -> InventoryItemType | None:
        model = state.inventory_lookup.get(id_inv)
        return InventoryItemType.from_model(model) if model else None

    @strawberry.field(
        description="Custody records grouped by folio, filtered by chips and free text.",
    )
    def custody_records(
        self,
        search: str = "",
        filters: list[CustodyFilterInput] | None = None,
        sort_by: CustodySortField | None = None,
        sort_order: SortOrder | None = None,
        offset: int = 0,
        limit: int = 0,
    ) -> CustodyConnection:
        active = [f.to_model() for f in filters or []]
        result = filter_records(state.custody_records, active, search, CUSTODY_PROFILE)
        if sort_by is not None:
            result = sort_records(result, sort_by.value, to_direction(sort_order))

        page, page_info = paginate(result, offset, limit)
        return CustodyConnection(
            items=[CustodyRecordType.from_model(r) for r in page],
            page_info=page_info,
            match_type=enum_value(classify(search, state.custody_records, CUSTODY_PROFILE)),
            suggestions=[
                SuggestionType.from_model(s)
                for s in suggest(search, state.custody_index, CUSTODY_PROFILE)
            ],
        )

    @strawberry.field(description="Look up a single custody record by folio.")
    def custody_record(self, folio: str) -> CustodyRecordType | None:
        model = state.custody_lookup.get(folio)
        return CustodyRecordType.from_model(model) if model else None

    @strawberry.field(description="Distinct directors and custodians for filter dropdowns.")
    def custody_directory(self) -> CustodyDirectoryType:
        directores, resguardantes = unique_values(state.custody_rows)
        return CustodyDirectoryType(directores=directores, resguardantes=resguardantes)


from strawberry.extensions import QueryDepthLimiter  # noqa: E402

schema = strawberry.Schema(
    query=Query,
    extensions=[lambda: QueryDepthLimiter(max_depth=10)],
)
graphql_app = GraphQLRouter(schema)

app = FastAPI(title="Inventario Search", lifespan=lifespan)

# ── CORS middleware ──────────────────────────────────────────────────────────
_cors_origins = [o.strip() for o in cfg.CORS_ORIGINS.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API key authentication middleware ────────────────────────────────────────
@app.middleware("http")
async def _api_key_middleware(request: Request, call_next) -> Response:  # type: ignore[no-untyped-def]
    """Require ``X-API-Key`` header when ``INV_API_KEY`` env var is set.

    Skips auth for the health endpoint and for OPTIONS (CORS preflight).
    """
    if cfg.API_KEY:
        exempt = {"/health", "/docs", "/openapi.json", "/redoc"}
        if request.url.path not in exempt and request.method != "OPTIONS":
            provided = request.headers.get("X-API-Key", "")
            if provided != cfg.API_KEY:
                return JSONResponse(
                    status_code=401,
                    content={"detail": "Invalid or missing API key"},
                )
    return await call_next(request)


# ── Request logging middleware ───────────────────────────────────────────────
@app.middleware("http")
async def _request_logging_middleware(request: Request, call_next) -> Response:  # type: ignore[no-untyped-def]
    """Log every request with method, path, and response time."""
    t0 = time.perf_counter()
    response: Response = await call_next(request)
    elapsed_ms = (time.perf_counter() - t0) * 1000
    LOGGER.info(
        "%s %s %d (%.1fms)",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


# ── Health / maintenance endpoints ───────────────────────────────────────────
@app.get("/health")
async def health() -> dict:
    """Service health check with data counts."""
    return {
        "status": "ok",
        "ready": len(state.inventory) > 0,
        "inventory": len(state.inventory),
        "custody_records": len(state.custody_records),
        "inventory_error": state.inventory_error,
    }


@app.post("/reindex")
def reindex() -> dict:
    """Reload every source snapshot and rebuild the search indexes."""
    reload_state(state)
    return {
        "status": "ok",
        "inventory": len(state.inventory),
        "custody_records": len(state.custody_records),
        "inventory_error": state.inventory_error,
    }


app.include_router(graphql_app, prefix="/graphql")
