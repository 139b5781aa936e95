from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

"""Row-level models for the employee importer.

ImportRow is what the tabular reader emits; ResolvedRow is what the catalog
resolver hands to the upsert transaction. Both live for a single row only.
"""

__all__ = [
    "ImportRow",
    "ResolvedRow",
    "StageFailure",
]


@dataclass(frozen=True)
class ImportRow:
    """One data row after header normalization.

    ``row_number`` is the 1-based row in the source file (header = row 1, so the
    first data row is 2). ``values`` maps canonical key -> trimmed raw string.
    """
    row_number: int
    values: dict[str, str]

    def get(self, key: str) -> str:
        return self.values.get(key, "")


@dataclass(frozen=True)
class ResolvedRow:
    """Catalog references of an ImportRow resolved to identifiers."""
    hire_date: date | None = None
    sede_id: int | None = None
    campaign_id: int | None = None
    area_id: int | None = None
    position_id: int | None = None
    schedule_id: int | None = None
    employee_status_id: int | None = None
    hire_type_id: int | None = None
    manager_id: int | None = None
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class StageFailure:
    """Typed failure of a pipeline stage: the attribute that blocked the row and why."""
    attribute: str
    errors: list[str]
