from __future__ import annotations

import re

from statement_engine.cli import main as cli_main

"""SUMMARY line format contract."""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY files=([0-9]+)/(\1) passed=([0-9]+) failed=([0-9]+) rows=([0-9]+) "
    r"row_errors=([0-9]+) rules_failed=([0-9]+) skipped_sheets=([0-9]+) "
    r"elapsed_sec=([0-9]+(\.[0-9]+)?)$"
)


def test_summary_pattern_example_line():
    line = (
        "SUMMARY files=2/2 passed=1 failed=1 rows=278 row_errors=0 "
        "rules_failed=1 skipped_sheets=0 elapsed_sec=0.84"
    )
    assert SUMMARY_PATTERN.match(line)


def test_cli_summary_matches_pattern(temp_workdir, write_config, make_workbook, passing_report_values, capsys):
    make_workbook("q1.xlsx", passing_report_values)
    cli_main([])
    lines = [l for l in capsys.readouterr().out.splitlines() if l.startswith("SUMMARY")]
    assert len(lines) == 1
    m = SUMMARY_PATTERN.match(lines[0])
    assert m, lines[0]
    files, _, passed, failed, rows = (int(m.group(i)) for i in range(1, 6))
    assert (files, passed, failed) == (1, 1, 0)
    assert rows == 919
