from __future__ import annotations

import json
import re

from statement_engine.config.loader import ReportConfig
from statement_engine.services.orchestrator import process_all

"""Error log lines: one JSON object per line with a fixed key set."""

KEYS = {"timestamp", "source", "sheet", "row", "error_type", "message"}
ERROR_TYPES = {
    "VALUE_ERROR",
    "REFERENCE_ERROR",
    "CYCLE_ERROR",
    "DEPENDENCY_ERROR",
    "VALIDATION_MISMATCH",
    "UNRESOLVED",
    "WORKBOOK_ERROR",
}
TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$")
LOG_NAME = re.compile(r"^errors-\d{8}-\d{6}\.log$")


def test_error_log_lines(temp_workdir, make_workbook, book, passing_report_values):
    passing_report_values["balance_sheet"]["C18"] = "abc"
    make_workbook("q1.xlsx", passing_report_values)
    (temp_workdir / "data" / "q2.xlsx").write_bytes(b"")

    cfg = ReportConfig(source_directory="data", error_log_dir="logs")
    process_all(cfg, book)

    (log_file,) = (temp_workdir / "logs").iterdir()
    assert LOG_NAME.match(log_file.name)
    records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert records
    for rec in records:
        assert set(rec) == KEYS
        assert TIMESTAMP.match(rec["timestamp"])
        assert rec["error_type"] in ERROR_TYPES
        assert isinstance(rec["row"], str)
    sources = {rec["source"] for rec in records}
    assert sources == {"q1.xlsx", "q2.xlsx"}
    assert {"source": "q2.xlsx", "sheet": "-", "row": "-"}.items() <= next(
        r for r in records if r["source"] == "q2.xlsx"
    ).items()
