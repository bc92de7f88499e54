from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

One record per row that failed to resolve or per validation rule that did
not pass. ``row`` is the row id for row errors, the rule id for failed
rules, and "-" for workbook-level errors.
"""

__all__ = [
    "WORKBOOK_LEVEL",
    "ErrorRecord",
]

WORKBOOK_LEVEL = "-"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: workbook file name
        sheet: statement (resolution pass) name
        row: row id, rule id, or "-" for workbook-level errors
        error_type: UPPER_SNAKE_CASE classification
        message: human readable description
    """
    timestamp: str
    source: str
    sheet: str
    row: str
    error_type: str
    message: str

    @staticmethod
    def create(source: str, sheet: str, row: str, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # fixed key set: dataclass -> dict -> json
        return json.dumps(asdict(self), ensure_ascii=False)
