from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

"""Batch result models: per-row failures/warnings and the aggregate report."""

EMPTY_FILE_MESSAGE = "El archivo no contiene filas de datos."


@dataclass(frozen=True)
class Failure:
    """A row that could not be committed.

    ``attribute`` names the blocking field (``nombre_completo``, a catalog
    field, ``exception`` for transaction errors or ``file`` for the empty batch).
    """
    row: int
    attribute: str
    errors: list[str]
    values: dict[str, str]


@dataclass(frozen=True)
class RowWarning:
    """A row committed despite a soft-resolution gap."""
    row: int
    message: str


@dataclass
class ImportReport:
    """Aggregate outcome of one batch.

    Every input row ends up either counted in ``processed`` or listed once in
    ``failures``.
    """
    processed: int = 0
    created: int = 0
    updated: int = 0
    failures: list[Failure] = field(default_factory=list)
    warnings: list[RowWarning] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @classmethod
    def empty_file(cls) -> ImportReport:
        return cls(failures=[Failure(row=0, attribute="file", errors=[EMPTY_FILE_MESSAGE], values={})])

    @property
    def failed_rows(self) -> int:
        return len({f.row for f in self.failures if f.row > 0})

    def record_success(self, created: bool) -> None:
        self.processed += 1
        if created:
            self.created += 1
        else:
            self.updated += 1

    def to_dict(self) -> dict[str, Any]:
        """Public output shape: processed/created/updated/failures/warnings."""
        return {
            "processed": self.processed,
            "created": self.created,
            "updated": self.updated,
            "failures": [asdict(f) for f in self.failures],
            "warnings": [asdict(w) for w in self.warnings],
        }
