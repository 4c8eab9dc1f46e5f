from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ImportIssue model for the import-issue log.

One ImportIssue is written per warning or error raised during an import.
Sheet-level issues (format, mapping, persistence) use row=-1 since no single
row is responsible.
"""

__all__ = [
    "ImportIssue",
    "SEVERITY_WARNING",
    "SEVERITY_ERROR",
]

SEVERITY_WARNING = "warning"
SEVERITY_ERROR = "error"


@dataclass(frozen=True)
class ImportIssue:
    """Structured issue record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        kind: Dataset kind value (tec / voc / tarifport)
        source: Name of the imported file (or '<rows>' for in-memory sheets)
        row: Spreadsheet row number (header = 1). -1 for sheet-level issues
        severity: 'warning' or 'error'
        issue_type: Classification in UPPER_SNAKE_CASE (e.g. ROW_VALIDATION)
        message: Human readable message, identical to the ImportResult entry
    """
    timestamp: str
    kind: str
    source: str
    row: int
    severity: str
    issue_type: str
    message: str

    @staticmethod
    def create(
        kind: str, source: str, row: int, severity: str, issue_type: str, message: str
    ) -> ImportIssue:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ImportIssue(
            timestamp=ts,
            kind=kind,
            source=source,
            row=row,
            severity=severity,
            issue_type=issue_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to one JSON line (fixed key set)."""
        return json.dumps(asdict(self), ensure_ascii=False)
