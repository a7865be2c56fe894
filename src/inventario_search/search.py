"""Unified in-memory search for the inventory and custody-record views.

Four pure stages, all driven by a :class:`~.profiles.SearchProfile`:

* :func:`build_index` flattens the record set into per-field value lists.
* :func:`classify` guesses which field a free-text query targets, using tiered
  score bands (labels the search box).
* :func:`suggest` produces the autocomplete dropdown from the index.
* :func:`filter_records` / :func:`sort_records` derive the visible table.

No external dependencies.  The record volume (a few thousand items per
source) is well within linear-scan territory.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, TypeVar

from .models import ActiveFilter, SortDirection, Suggestion
from .normalize import contains, field_text, field_value
from .profiles import SearchProfile

R = TypeVar("R")

SearchableIndex = dict[str, list[str]]

# ── Suggestion limits ────────────────────────────────────────────────────────

MIN_SUGGESTION_CHARS = 2
MAX_COLLECTED = 10  # raw candidates gathered before ranking
MAX_SUGGESTIONS = 7  # shown in the dropdown


# ── Index ────────────────────────────────────────────────────────────────────


def build_index(records: Sequence[Any], profile: SearchProfile) -> SearchableIndex:
    """Per-field value lists in record order (no dedup, absent values skipped)."""
    index: SearchableIndex = {field_type: [] for field_type, _ in profile.index_fields}
    for record in records:
        for field_type, attr in profile.index_fields:
            text = field_text(record, attr)
            if text is not None:
                index[field_type].append(text)
    return index


# ── Match-type classification ────────────────────────────────────────────────


def classify(query: str, records: Sequence[Any], profile: SearchProfile) -> str | None:
    """Return the field type the query most likely targets, or ``None``.

    Each record is checked against the profile's tier cascade; only the first
    matching tier counts for that record.  Score bands overlap across tiers on
    purpose, so a lower tier's exact hit can outrank a higher tier's substring
    hit.  When no tier matches at all, the fallback fields are scanned and the
    first hit wins outright (record by record, fields in order).
    """
    if not query or not query.strip() or not records:
        return None

    term = query.lower().strip()
    best_type: str | None = None
    best_score = 0
    max_score = profile.max_score

    for record in records:
        for tier in profile.tiers:
            values = [field_text(record, attr) for attr in tier.attrs]
            if not any(contains(v, term) for v in values):
                continue
            exact = any(v is not None and v.lower() == term for v in values)
            score = tier.exact_score if exact else tier.substring_score
            if score > best_score:
                best_type, best_score = tier.match_type, score
            break  # elif cascade: lower tiers are not checked for this record

        if best_score >= max_score:
            break

    if best_type is not None:
        return best_type

    for record in records:
        for field_type, attr in profile.fallback_fields:
            if contains(field_text(record, attr), term):
                return field_type

    return None


# ── Suggestions ──────────────────────────────────────────────────────────────


def suggest(
    query: str,
    index: SearchableIndex | None,
    profile: SearchProfile,
) -> list[Suggestion]:
    """Autocomplete entries for *query*.

    Candidates are collected field by field in priority order until
    ``MAX_COLLECTED`` is reached, then stably re-ordered so prefix hits come
    first, then cut to ``MAX_SUGGESTIONS``.  Because the cut happens after the
    collection cap, a better prefix hit in a later field can be missed.
    """
    if not query or index is None:
        return []

    term = query.lower().strip()
    if len(term) < MIN_SUGGESTION_CHARS:
        return []

    seen: set[tuple[str, str]] = set()
    collected: list[Suggestion] = []

    for field_type, _attr in profile.index_fields:
        if len(collected) >= MAX_COLLECTED:
            break
        for value in index.get(field_type, ()):
            value_lower = value.lower()
            if term not in value_lower:
                continue
            key = (field_type, value_lower)
            if key in seen:
                continue
            seen.add(key)
            collected.append(Suggestion(value=value, type=field_type))
            if len(collected) >= MAX_COLLECTED:
                break

    collected.sort(key=lambda s: not s.value.lower().startswith(term))
    return collected[:MAX_SUGGESTIONS]


# ── Filtering ────────────────────────────────────────────────────────────────


def _passes_filter(record: Any, flt: ActiveFilter, profile: SearchProfile) -> bool:
    term = flt.term.lower()
    if not term:
        return True
    attr = profile.attr_for(flt.type)
    if attr is None:
        return True
    return term in (field_text(record, attr) or "").lower()


def filter_records(
    records: list[R],
    active_filters: Sequence[ActiveFilter],
    free_text: str,
    profile: SearchProfile,
) -> list[R]:
    """Records passing every active filter and, if given, the free-text search.

    Filters are AND-combined; the free text matches when any of the profile's
    free-text fields contains it.  With neither, *records* is returned as-is.
    """
    term = (free_text or "").lower().strip()
    if not active_filters and not term:
        return records

    result: list[R] = []
    for record in records:
        if not all(_passes_filter(record, f, profile) for f in active_filters):
            continue
        if term and not any(
            contains(field_text(record, attr), term) for attr in profile.free_text_attrs
        ):
            continue
        result.append(record)
    return result


# ── Sorting ──────────────────────────────────────────────────────────────────


def _sort_key(value: Any) -> tuple[int, Any]:
    # numbers before text, so a mixed column never compares int with str
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value)
    return (1, str(getattr(value, "value", value)))


def sort_records(
    records: Sequence[R],
    field: str | None,
    direction: SortDirection = SortDirection.ASC,
) -> list[R]:
    """Stable sort by *field*; ``None`` values go last in both directions."""
    if not field:
        return list(records)

    present = [r for r in records if field_value(r, field) is not None]
    missing = [r for r in records if field_value(r, field) is None]
    present.sort(
        key=lambda r: _sort_key(field_value(r, field)),
        reverse=direction == SortDirection.DESC,
    )
    return present + missing
