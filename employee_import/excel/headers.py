from __future__ import annotations

import re
from functools import lru_cache

from unidecode import unidecode

from employee_import.models.config_models import DEFAULT_HEADER_ALIASES, HeaderAliasTable

"""Header normalization: spreadsheet column titles -> canonical field keys.

A header is cleaned (trim, whitespace runs -> ``_``, lowercase, drop anything
but ``[a-z0-9_]`` and accented vowels/ñ) and then compared, accent-insensitively,
with every alias of the table. Unmatched headers pass through cleaned so
unknown columns survive in the row values.
"""

__all__ = [
    "clean_header",
    "fold",
    "normalize_header",
]

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9_áéíóúñ]")


def clean_header(raw: str) -> str:
    key = _WHITESPACE.sub("_", raw.strip())
    return _DISALLOWED.sub("", key.lower())


def fold(value: str) -> str:
    """Case- and accent-insensitive comparison key."""
    return unidecode(value).strip().lower()


@lru_cache(maxsize=8)
def _alias_index(table: HeaderAliasTable) -> dict[str, str]:
    # folded alias -> canonical; earlier table entries win on collisions
    index: dict[str, str] = {}
    for canonical, aliases in table.entries:
        for alias in (canonical, *aliases):
            index.setdefault(fold(clean_header(alias)), canonical)
    return index


def normalize_header(raw: object, aliases: HeaderAliasTable = DEFAULT_HEADER_ALIASES) -> str:
    """Map a raw header cell to its canonical key (or its cleaned form)."""
    key = clean_header("" if raw is None else str(raw))
    return _alias_index(aliases).get(fold(key), key)
