# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from statement_engine.config.loader import load_definitions
from statement_engine.logging.init import reset_logging

WorkbookFactory = Callable[..., Path]


@pytest.fixture(autouse=True)
def _fresh_logging():
    # handlers bind sys.stdout at creation; capsys swaps it per test
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
currency: TZS
tolerance: 0.01
error_log_dir: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "report.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture(scope="session")
def book():
    """Bundled MSP2 definitions."""
    return load_definitions()


def _write_workbook(path: Path, sheets: dict[str, dict[str, Any]]) -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, values in sheets.items():
            rows: list[list[Any]] = [[f"{sheet_name} return"], ["id", "label", "value"]]
            rows.extend([row_id, "", value] for row_id, value in values.items())
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


@pytest.fixture()
def make_workbook(temp_workdir: Path) -> WorkbookFactory:
    """Write ``{sheet: {row_id: value}}`` as a report workbook under data/."""

    def _make(name: str, sheets: dict[str, dict[str, Any]]) -> Path:
        return _write_workbook(temp_workdir / "data" / name, sheets)

    return _make


@pytest.fixture()
def passing_report_values() -> dict[str, dict[str, Any]]:
    """One reporting period whose statements agree with each other."""
    balance_sheet = {
        "C2": 1_500_000, "C4": 20_000_000, "C5": 10_000_000, "C6": 3_000_000, "C7": 800_000,
        "C18": 100_000_000, "C19": 2_000_000, "C21": 1_000_000, "C22": 3_000_000,
        "C24": 10_000_000, "C25": 2_000_000,
        "C37": 50_000_000, "C49": 3_300_000,
        "C52": 80_000_000, "C59": 10_000_000,
    }
    income = {"C2": 30_000_000, "C8": 5_000_000, "C24": 11_000_000, "C41": 4_000_000}
    interest_rates = {
        "C1": 400, "D1": 40_000_000, "E1": 20, "H1": 18,
        "C2": 120, "D2": 48_000_000, "E2": 15, "H2": 14,
        "C11": 50, "D11": 5_000_000, "E11": 12, "H11": 11,
        "C12": 90, "D12": 10_000_000, "E12": 18, "H12": 17,
    }
    liquid_assets = {
        "C2": 1_500_000, "C3": 30_000_000, "C4": 3_000_000, "C5": 800_000,
        "C10": 143_300_000, "C11": 7_165_000,
    }
    loan_portfolio = {
        "C45": 500, "E45": 100_000_000,
        "C46": 160, "F46": 3_000_000,
        "D69": 3_000_000,
    }
    complaint_report = {
        "C1": 5, "E1": 2, "F1": 3,
        "C2": 4, "G2": 4,
        "C3": 3, "E3": 1, "G3": 2,
    }
    deposits_borrowings = {
        "C1": 20_000_000, "C2": 10_000_000, "F1": 50_000_000,
        "C32": 3_000_000,
        "C48": 800_000,
    }
    agent_banking = {"C1": 6_000_000, "C20": 4_000_000}
    return {
        "balance_sheet": balance_sheet,
        "income_statement": dict(income),
        "income_statement_ytd": dict(income),
        "loan_portfolio": loan_portfolio,
        "interest_rates": interest_rates,
        "liquid_assets": liquid_assets,
        "complaint_report": complaint_report,
        "deposits_borrowings": deposits_borrowings,
        "agent_banking": agent_banking,
    }
