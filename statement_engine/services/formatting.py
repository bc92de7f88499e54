from __future__ import annotations

"""Display formatting shared by mismatch messages and the report output.

Amounts print as ``<symbol> <#,###.##>`` (``TSh 1,500,000.00``); unknown
currency codes fall back to ``<#,###.##> <code>``.
"""

__all__ = [
    "DEFAULT_CURRENCY",
    "CURRENCY_SYMBOLS",
    "format_amount",
    "format_count",
    "format_rate",
]

DEFAULT_CURRENCY = "TZS"

CURRENCY_SYMBOLS = {
    "TZS": "TSh",
    "KES": "KSh",
    "UGX": "USh",
    "RWF": "FRw",
    "BIF": "FBu",
    "USD": "$",
}


def format_amount(value: float, currency: str = DEFAULT_CURRENCY) -> str:
    # avoid "-0.00"
    if round(value, 2) == 0:
        value = 0.0
    symbol = CURRENCY_SYMBOLS.get(currency)
    if symbol is None:
        return f"{value:,.2f} {currency}"
    return f"{symbol} {value:,.2f}"


def format_count(value: float) -> str:
    if value == int(value):
        return f"{int(value):,}"
    return f"{value:,.2f}"


def format_rate(value: float) -> str:
    return f"{value:.2f}%"
