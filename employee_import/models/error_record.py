from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

One record per failed row (or per batch-level problem, using row 0 when the
failure is not tied to a data row, and row -1 when the file could not be read).
"""

__all__ = [
    "ErrorRecord",
    "error_type_for",
]

# Failure.attribute -> error_type classification
_SPECIAL_TYPES = {
    "nombre_completo": "VALIDATION_ERROR",
    "exception": "TRANSACTION_ERROR",
    "file": "EMPTY_FILE",
}


def error_type_for(attribute: str) -> str:
    """Classify a failure attribute in UPPER_SNAKE_CASE."""
    return _SPECIAL_TYPES.get(attribute, "RESOLUTION_ERROR")


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: source filename being imported
        row: source row number (1-based); 0 for batch-level, -1 when unknown
        attribute: field that blocked the row
        error_type: classification in UPPER_SNAKE_CASE format
        message: error messages joined with '; '
    """
    timestamp: str
    file: str
    row: int
    attribute: str
    error_type: str
    message: str

    @staticmethod
    def create(file: str, row: int, attribute: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            attribute=attribute,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # dataclass -> dict keeps the key set fixed
        return json.dumps(asdict(self), ensure_ascii=False)
