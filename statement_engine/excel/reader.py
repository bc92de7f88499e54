from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any
from zipfile import BadZipFile

import pandas as pd

from ..exceptions import WorkbookError

"""Report workbook reader.

One worksheet per statement pass, named after the sheet or alias
(``balance_sheet``, ``income_statement_ytd``, ...). Layout per worksheet:

- row 1: free title (ignored)
- row 2: header; must contain ``id`` and ``value`` (other columns ignored)
- row 3+: one row per statement line

Values stay as read. Numeric coercion and its per-row errors belong to the
resolver, so a stray ``"tbd"`` shows up as a row error there instead of
failing the whole workbook here. Cells pandas reads as NA (blank,
``"N/A"``, ``"NULL"``...) count as not supplied.
"""

__all__ = [
    "REQUIRED_COLUMNS",
    "read_report_workbook",
    "normalize_values",
]

REQUIRED_COLUMNS = ("id", "value")


def normalize_values(df: pd.DataFrame, sheet_name: str) -> dict[str, Any]:
    """Turn a raw header-less DataFrame into ``{row_id: raw value}``.

    Raises:
        WorkbookError: header row missing, required columns missing, or
            the same row id listed twice
    """
    if df.shape[0] < 2:
        raise WorkbookError(
            f"sheet '{sheet_name}' lacks second row header", {"sheet": sheet_name}
        )
    columns = [str(c).strip().lower() for c in df.iloc[1].tolist()]
    missing = [c for c in REQUIRED_COLUMNS if c not in columns]
    if missing:
        raise WorkbookError(
            f"sheet '{sheet_name}' missing columns: {missing}", {"sheet": sheet_name}
        )
    id_pos = columns.index("id")
    value_pos = columns.index("value")

    values: dict[str, Any] = {}
    for _, raw in df.iloc[2:].iterrows():
        if raw.isna().all():
            continue
        row_id = raw.iloc[id_pos]
        if pd.isna(row_id) or str(row_id).strip() == "":
            continue
        row_id = str(row_id).strip()
        value = raw.iloc[value_pos]
        if pd.isna(value):
            continue
        if isinstance(value, str) and value.strip() == "":
            continue
        if row_id in values:
            raise WorkbookError(
                f"sheet '{sheet_name}' lists row '{row_id}' twice",
                {"sheet": sheet_name, "row_id": row_id},
            )
        values[row_id] = value
    return values


def read_report_workbook(path: Path, sheet_names: Iterable[str]) -> dict[str, dict[str, Any]]:
    """Read raw values for the requested passes from an ``.xlsx`` workbook.

    Worksheets not named in ``sheet_names`` are ignored; requested names
    without a worksheet are simply absent from the result.

    Raises:
        WorkbookError: the file cannot be opened or a worksheet is malformed
    """
    wanted = set(sheet_names)
    try:
        xls = pd.ExcelFile(path)
    except (BadZipFile, OSError, ValueError) as e:
        raise WorkbookError(f"cannot open workbook {path.name}: {e}", {"file": str(path)}) from e

    result: dict[str, dict[str, Any]] = {}
    with xls:
        for name in xls.sheet_names:
            if str(name) not in wanted:
                continue
            df = xls.parse(name, header=None)
            result[str(name)] = normalize_values(df, str(name))
    return result
