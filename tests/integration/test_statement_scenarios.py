from __future__ import annotations

import math

from statement_engine import (
    Row,
    RowKind,
    RowRef,
    Sheet,
    ValidationRule,
    resolve,
    resolve_book,
    run_validations,
)

"""End-to-end statement scenarios over the bundled MSP2 definitions."""


def test_cash_rollup_with_flat_components():
    sheet = Sheet(
        "cash",
        (
            Row("C1", kind=RowKind.COMPUTED, formula="C2+C3+C6+C7"),
            Row("C2"), Row("C3"), Row("C6"), Row("C7"),
        ),
    )
    res = resolve(sheet, {"C2": 1_500_000, "C3": 30_000_000, "C6": 3_000_000, "C7": 800_000})
    assert res.values["C1"] == 35_300_000


def test_cash_rollup_on_balance_sheet(book):
    raw = {"C2": 1_500_000, "C4": 18_000_000, "C5": 12_000_000, "C6": 3_000_000, "C7": 800_000}
    res = resolve(book.sheets["balance_sheet"], raw)
    assert res.values["C3"] == 30_000_000
    assert res.values["C1"] == 35_300_000


def test_loans_net(book):
    raw = {"C18": 100, "C19": 20, "C20": 5, "C21": 2, "C22": 10}
    res = resolve(book.sheets["balance_sheet"], raw)
    assert res.values["C17"] == 117
    assert res.values["C33"] == 117


def test_balance_invariant(book, passing_report_values):
    sheet = book.sheets["balance_sheet"]
    rule = next(r for r in book.rules if r.id == "BS-V1")
    raw = passing_report_values["balance_sheet"]

    resolved = {"balance_sheet": resolve(sheet, raw)}
    (result,) = run_validations([rule], resolved)
    assert result.passed
    assert result.error == ""
    assert resolved["balance_sheet"].values["C33"] == 143_300_000

    raw["C24"] += 1
    (result,) = run_validations([rule], {"balance_sheet": resolve(sheet, raw)})
    assert not result.passed
    assert "TSh 143,300,001.00" in result.error
    assert "TSh 143,300,000.00" in result.error


def test_hierarchical_rate_rollup(book):
    raw = {"E11": 12, "D11": 5_000_000, "E12": 18, "D12": 15_000_000}
    res = resolve(book.sheets["interest_rates"], raw)
    assert math.isclose(res.values["E10"], 16.5)
    assert res.values["F10"] == 0  # sub-lines carried no nominal range
    assert res.values["D10"] == 20_000_000
    # the salaried line is the only top-level line with an amount
    assert math.isclose(res.values["E15"], 16.5)
    assert math.isclose(res.values["F15"], 16.5)
    assert res.values["D15"] == 20_000_000


def test_total_rates_span_top_level_lines(book, passing_report_values):
    res = resolve(book.sheets["interest_rates"], passing_report_values["interest_rates"])
    # salaried: (12*5M + 18*10M) / 15M
    assert math.isclose(res.values["E10"], 16.0)
    assert math.isclose(res.values["E15"], (20 * 40 + 15 * 48 + 16 * 15) / 103)
    assert res.values["F15"] == 15
    assert res.values["G15"] == 20
    assert res.values["C15"] == 400 + 120 + 50 + 90


def test_ytd_pass_is_independent_of_monthly_pass(book):
    resolved = resolve_book(
        book,
        {"income_statement": {"C2": 10, "C41": 1}, "income_statement_ytd": {"C2": 100, "C41": 10}},
    )
    assert resolved["income_statement"].values["C42"] == 9
    assert resolved["income_statement_ytd"].values["C42"] == 90


def test_cross_statement_rule_against_ytd(book):
    resolved = resolve_book(
        book,
        {"income_statement_ytd": {"C2": 100, "C41": 10}, "balance_sheet": {"C59": 90}},
    )
    rule = next(r for r in book.rules if r.id == "IS-V1")
    (result,) = run_validations([rule], resolved)
    assert result.passed


def test_user_defined_rule_across_sheets(book, passing_report_values):
    resolved = resolve_book(book, passing_report_values)
    rule = ValidationRule(
        id="X1",
        description="liquid cash matches balance sheet cash line",
        actual=RowRef("liquid_assets", "C2"),
        expected=RowRef("balance_sheet", "C2"),
    )
    assert run_validations([rule], resolved)[0].passed
    assert all(r.passed for r in run_validations(book.rules, resolved))


def _rules(book, *ids):
    by_id = {r.id: r for r in book.rules}
    return [by_id[i] for i in ids]


def test_loan_portfolio_borrowers_agree_both_ways(book, passing_report_values):
    resolved = resolve_book(book, passing_report_values)
    assert resolved["loan_portfolio"].values["C67"] == 660
    assert resolved["loan_portfolio"].values["D67"] == 103_000_000
    results = run_validations(_rules(book, "LP-V1", "LP-V2", "LP-V3", "IR-V2"), resolved)
    assert all(r.passed for r in results)

    passing_report_values["loan_portfolio"]["C46"] = 161
    resolved = resolve_book(book, passing_report_values)
    lp, ir = run_validations(_rules(book, "LP-V1", "IR-V2"), resolved)
    assert lp.error == "Mismatch: C67 Total borrowers (661) ≠ MSP2_04.C15 (660)"
    assert ir.error == "Mismatch: C15 Total borrowers (660) ≠ MSP2_03.C67 (661)"


def test_sector_outstanding_sums_classifications(book):
    raw = {"E45": 70, "F45": 10, "G45": 8, "H45": 7, "I45": 5, "J45": 99}
    res = resolve(book.sheets["loan_portfolio"], raw)
    # written-off amounts sit outside the outstanding total
    assert res.values["D45"] == 100
    assert res.values["J67"] == 99


def test_deposits_total_in_tanzania_against_cash_lines(book, passing_report_values):
    resolved = resolve_book(book, passing_report_values)
    deposits = resolved["deposits_borrowings"].values
    assert deposits["E30"] == 30_000_000
    assert deposits["E57"] == 33_800_000
    assert deposits["H66"] == 50_000_000
    assert all(r.passed for r in run_validations(_rules(book, "DB-V1", "DB-V2", "DB-V3"), resolved))

    passing_report_values["deposits_borrowings"]["D48"] = 50_000
    (result,) = run_validations(_rules(book, "DB-V3"), resolve_book(book, passing_report_values))
    assert not result.passed
    assert result.error == (
        "Mismatch: Total TZ (TSh 33,850,000.00) ≠ MSP2_01.C3+C6+C7 (TSh 33,800,000.00)"
    )


def test_agent_balance_off_fails_against_balance_sheet(book, passing_report_values):
    passing_report_values["agent_banking"]["C20"] = 3_900_000
    resolved = resolve_book(book, passing_report_values)
    (result,) = run_validations(_rules(book, "AB-V1"), resolved)
    assert not result.passed
    assert "MSP2_01.C5 (TSh 10,000,000.00)" in result.error
    assert result.actual == 9_900_000


def test_complaint_counts_by_nature(book, passing_report_values):
    resolved = resolve_book(book, passing_report_values)
    complaints = resolved["complaint_report"].values
    assert complaints["C5"] == 5 + 4 - 3
    assert complaints["K5"] == complaints["C5"]
    assert all(r.passed for r in run_validations(_rules(book, "CR-V1", "CR-V2", "CR-V3", "CR-V4"), resolved))

    passing_report_values["complaint_report"]["H2"] = 1
    results = run_validations(_rules(book, "CR-V1", "CR-V2"), resolve_book(book, passing_report_values))
    assert [r.passed for r in results] == [True, False]
    assert results[1].error == "Mismatch: Row 2 Number (4) ≠ sum of natures (5)"
