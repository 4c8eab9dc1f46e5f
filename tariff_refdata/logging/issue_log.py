from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.import_issue import ImportIssue

"""Import issue log: buffered ImportIssue records flushed as JSON Lines.

- fixed key set per line (see ImportIssue)
- one file per process run: ``<logs_dir>/import-issues-YYYYMMDD-HHMMSS.log`` (UTC)
- the file and its directory are only created on the first non-empty flush
"""

__all__ = [
    "ImportIssueLog",
]

TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ImportIssueLog:
    """In-memory buffer of issues; ``flush`` appends them to the log file.

    Not thread safe; imports run serially.
    """

    def __init__(self, logs_dir: str | Path = "logs") -> None:
        self.logs_dir = Path(logs_dir)
        self._records: list[ImportIssue] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self.logs_dir / f"import-issues-{stamp}.log"
        return self._file_path

    def append(self, issue: ImportIssue) -> None:
        self._records.append(issue)

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered issues; returns the file path, or None if nothing was buffered."""
        if not self._records:
            return None
        fp = self.file_path
        fp.parent.mkdir(parents=True, exist_ok=True)
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
