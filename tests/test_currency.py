from __future__ import annotations

from decimal import Decimal

from pdf_invoicer.core.currency import fmt_money, fmt_qty, fmt_rate, round_money_dec


def test_round_half_away_from_zero() -> None:
    assert round_money_dec(2.675) == Decimal("2.68")
    assert round_money_dec(-2.675) == Decimal("-2.68")
    assert round_money_dec(0.125) == Decimal("0.13")
    assert round_money_dec(Decimal("1.005")) == Decimal("1.01")


def test_fmt_money() -> None:
    assert fmt_money(605) == "605.00 EUR"
    assert fmt_money(0.1 + 0.2, "USD") == "0.30 USD"
    assert fmt_money(-0.001) == "0.00 EUR"
    assert fmt_money(5, "", width=8) == "    5.00"


def test_fmt_qty_and_rate() -> None:
    assert fmt_qty(10) == "10"
    assert fmt_qty(1.5) == "1.5"
    assert fmt_qty(0.3333) == "0.333"
    assert fmt_rate(0.21) == "21%"
    assert fmt_rate(0.105) == "10.5%"
    assert fmt_rate(0) == "0%"
