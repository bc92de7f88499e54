from __future__ import annotations

import json

from statement_engine.models.error_record import WORKBOOK_LEVEL, ErrorRecord

"""Unit tests for the ErrorRecord model."""


def test_error_record_workbook_level_marker():
    """Workbook-level errors carry '-' for both sheet and row."""
    rec = ErrorRecord.create(
        source="broken.xlsx",
        sheet=WORKBOOK_LEVEL,
        row=WORKBOOK_LEVEL,
        error_type="WORKBOOK_ERROR",
        message="cannot open workbook broken.xlsx",
    )

    data = json.loads(rec.to_json_line())
    assert data["sheet"] == "-"
    assert data["row"] == "-"
    assert data["source"] == "broken.xlsx"
    assert data["timestamp"].endswith("Z")
    assert set(data.keys()) == {"timestamp", "source", "sheet", "row", "error_type", "message"}


def test_error_record_row_error():
    rec = ErrorRecord.create("q1.xlsx", "balance_sheet", "C4", "VALUE_ERROR", "row 'C4': not a number")

    assert rec.row == "C4"
    data = json.loads(rec.to_json_line())
    assert data["error_type"] == "VALUE_ERROR"
    assert data["message"] == "row 'C4': not a number"


def test_error_record_keeps_unicode():
    rec = ErrorRecord.create("q1.xlsx", "balance_sheet", "BS-V1", "VALIDATION_MISMATCH", "A ≠ B")

    assert "≠" in rec.to_json_line()
