"""Shared value normalization for matching and comparison.

**Field access:** records may be dataclasses or plain dicts (raw rows from a
snapshot).  :func:`field_text` reads either and returns the searchable string
form, or ``None`` when the value is absent.

**Accent folding:** :func:`fold` strips diacritics so ``"Dirección"`` and
``"DIRECCION"`` compare equal, the way the custom-report check expects.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Mapping
from typing import Any


def field_value(record: Any, attr: str) -> Any:
    """Return ``record[attr]`` for mappings, ``record.attr`` otherwise (``None`` if missing)."""
    if isinstance(record, Mapping):
        return record.get(attr)
    return getattr(record, attr, None)


def field_text(record: Any, attr: str) -> str | None:
    """Searchable text of one field.

    ``None`` and ``""`` are absent.  Whitespace is kept as-is so that a value of
    ``" "`` still counts as present.  Enums contribute their value, other
    scalars their ``str()`` form.
    """
    value = field_value(record, attr)
    if value is None:
        return None
    if isinstance(value, str):
        # str-based enums (Origin) are str instances; use the raw value
        text = getattr(value, "value", value)
    else:
        text = str(value)
    return text or None


def contains(value: str | None, term_lower: str) -> bool:
    """Case-insensitive substring test; absent values never match."""
    return bool(value) and term_lower in value.lower()


def parse_amount(value: Any) -> float | None:
    """Coerce an exported amount to ``float``; blank or unparseable → ``None``.

    Tables export ``valor`` as a number or as text such as ``"4890.00"`` or
    ``"$1,200.50"``.

        >>> parse_amount("$1,200.50")
        1200.5
        >>> parse_amount("N/D") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).replace("$", "").replace(",", "").strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def fold(value: str | None) -> str:
    """Accent-fold, lower-case and trim.

    Examples::

        >>> fold("  Dirección General ")
        'direccion general'
        >>> fold(None)
        ''
    """
    decomposed = unicodedata.normalize("NFKD", value or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower().strip()
