from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from employee_import.models.error_record import ErrorRecord, error_type_for
from employee_import.models.processing_result import Failure

"""Error log generation & buffering.

- JSON Lines with a fixed key set
- one ``errors-YYYYMMDD-HHMMSS.log`` (UTC) per run, created on first flush
- records are buffered and written once at the end of the batch
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush writes JSON Lines.

    Not thread safe; the importer is single-threaded.
    """
    def __init__(self, directory: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._directory = directory or LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._directory.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._directory / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def append_failure(self, file: str, failure: Failure) -> None:
        self.append(
            ErrorRecord.create(
                file=file,
                row=failure.row,
                attribute=failure.attribute,
                error_type=error_type_for(failure.attribute),
                message="; ".join(failure.errors),
            )
        )

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Append buffered records to the log file; no file is created when empty."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
