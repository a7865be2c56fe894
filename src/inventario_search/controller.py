"""Search box + filter chips + table state for one consultation view.

:class:`SearchController` owns the mutable state a view needs (records, free
text, committed filters, sort, dropdown highlight) and recomputes the derived
pieces on demand through the pure functions in :mod:`.search`.

Derived state is lazy: ``set_query`` only marks it stale, and the next read
recomputes it for the latest query.  Bursts of keystrokes therefore cost one
recomputation, not one per call.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Any

from .models import ActiveFilter, InventoryField, SortDirection, Suggestion
from .normalize import field_text, fold
from .profiles import SearchProfile
from .search import SearchableIndex, build_index, classify, filter_records, sort_records, suggest

LOGGER = logging.getLogger(__name__)


class SearchController:
    def __init__(
        self,
        profile: SearchProfile,
        records: Sequence[Any] = (),
        *,
        sort_field: str | None = None,
        sort_direction: SortDirection = SortDirection.ASC,
    ) -> None:
        self.profile = profile
        self._records: list[Any] = list(records)
        self._index: SearchableIndex = build_index(self._records, profile)
        self._query = ""
        self._filters: list[ActiveFilter] = []
        self.sort_field = sort_field
        self.sort_direction = sort_direction

        self._stale = True
        self._match_type: str | None = None
        self._suggestions: list[Suggestion] = []
        self.show_suggestions = False
        self.highlighted_index = -1

    # ── Records ───────────────────────────────────────────────────────────

    @property
    def records(self) -> list[Any]:
        return self._records

    @property
    def index(self) -> SearchableIndex:
        return self._index

    def set_records(self, records: Sequence[Any]) -> bool:
        """Replace the record snapshot.  Returns True when the index was rebuilt."""
        new_records = list(records)
        if new_records == self._records:
            return False
        self._records = new_records
        self._index = build_index(new_records, self.profile)
        self._stale = True
        LOGGER.debug(
            "%s index rebuilt for %d records", self.profile.name, len(new_records)
        )
        return True

    # ── Free text ─────────────────────────────────────────────────────────

    @property
    def query(self) -> str:
        return self._query

    def set_query(self, text: str) -> None:
        if text != self._query:
            self._query = text
            self._stale = True

    def _refresh(self) -> None:
        if not self._stale:
            return
        self._stale = False
        self._match_type = classify(self._query, self._records, self.profile)
        self._suggestions = suggest(self._query, self._index, self.profile)
        self.show_suggestions = bool(self._suggestions)
        self.highlighted_index = 0 if self._suggestions else -1

    @property
    def match_type(self) -> str | None:
        self._refresh()
        return self._match_type

    @property
    def suggestions(self) -> list[Suggestion]:
        self._refresh()
        return list(self._suggestions)

    def _clear_query(self) -> None:
        self._query = ""
        self._match_type = None
        self._suggestions = []
        self.show_suggestions = False
        self.highlighted_index = -1
        self._stale = False

    # ── Active filters ────────────────────────────────────────────────────

    @property
    def active_filters(self) -> list[ActiveFilter]:
        return list(self._filters)

    def add_filter(self, flt: ActiveFilter) -> None:
        self._filters.append(flt)

    def remove_filter(self, index: int) -> None:
        """Drop the chip at *index*; out-of-range positions are ignored."""
        if 0 <= index < len(self._filters):
            del self._filters[index]

    def clear_filters(self) -> None:
        self._filters = []

    def commit_suggestion(self, index: int) -> bool:
        """Pin suggestion *index* as a filter and clear the search box."""
        suggestions = self.suggestions
        if not 0 <= index < len(suggestions):
            return False
        chosen = suggestions[index]
        self._filters.append(ActiveFilter(term=chosen.value, type=chosen.type))
        self._clear_query()
        return True

    def save_current_filter(self) -> bool:
        """Pin the typed text under the detected match type, if there is one."""
        match_type = self.match_type
        if not self._query or match_type is None:
            return False
        self._filters.append(ActiveFilter(term=self._query, type=match_type))
        self._clear_query()
        return True

    # ── Keyboard / focus ──────────────────────────────────────────────────

    def handle_key(self, key: str) -> bool:
        """Dropdown navigation.  Returns True when the key was consumed."""
        suggestions = self.suggestions
        if not self.show_suggestions or not suggestions:
            return False

        count = len(suggestions)
        if key == "ArrowDown":
            self.highlighted_index = (self.highlighted_index + 1) % count
        elif key == "ArrowUp":
            self.highlighted_index = (self.highlighted_index - 1 + count) % count
        elif key == "Enter":
            if 0 <= self.highlighted_index < count:
                self.commit_suggestion(self.highlighted_index)
        elif key == "Escape":
            self.show_suggestions = False
        else:
            return False
        return True

    def blur(self) -> None:
        self._refresh()
        self.show_suggestions = False

    # ── Table ─────────────────────────────────────────────────────────────

    def set_sort(self, field: str) -> None:
        """Same column flips the direction; a new column starts ascending."""
        if field == self.sort_field:
            self.sort_direction = (
                SortDirection.DESC
                if self.sort_direction == SortDirection.ASC
                else SortDirection.ASC
            )
        else:
            self.sort_field = field
            self.sort_direction = SortDirection.ASC

    def visible_records(self) -> list[Any]:
        filtered = filter_records(self._records, self._filters, self._query, self.profile)
        return sort_records(filtered, self.sort_field, self.sort_direction)

    def page(self, number: int, rows_per_page: int) -> tuple[list[Any], int]:
        """1-based page of the visible records plus the total page count."""
        rows = self.visible_records()
        if rows_per_page <= 0:
            return rows, 1
        total_pages = max(1, math.ceil(len(rows) / rows_per_page))
        start = (max(number, 1) - 1) * rows_per_page
        return rows[start : start + rows_per_page], total_pages

    @property
    def custom_pdf_enabled(self) -> bool:
        return custom_pdf_enabled(self._records, self._filters)


def custom_pdf_enabled(records: Sequence[Any], active_filters: Sequence[ActiveFilter]) -> bool:
    """Whether the per-director custody report can be produced.

    Needs both an ``area`` and a ``usufinal`` chip whose terms name an existing
    area and director exactly, ignoring case and accents.
    """
    area_filter = next((f for f in active_filters if f.type == InventoryField.AREA), None)
    director_filter = next(
        (f for f in active_filters if f.type == InventoryField.USUFINAL), None
    )
    if area_filter is None or director_filter is None:
        return False

    areas = {fold(field_text(r, "area")) for r in records if field_text(r, "area")}
    directors = {fold(field_text(r, "usufinal")) for r in records if field_text(r, "usufinal")}
    return fold(area_filter.term) in areas and fold(director_filter.term) in directors
