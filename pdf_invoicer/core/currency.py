from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Optional


CENT = Decimal("0.01")


def to_decimal(x: object) -> Decimal:
	"""Best-effort conversion to Decimal via str to avoid binary float artifacts."""
	try:
		return Decimal(str(x))
	except (InvalidOperation, ValueError, TypeError):
		return Decimal("0")


def round_money_dec(x: float | Decimal) -> Decimal:
	"""Round to 2 decimals, ties away from zero (2.675 -> 2.68, -2.675 -> -2.68).

	Only used at the display boundary; stored amounts keep full precision.
	"""
	return to_decimal(x).quantize(CENT, rounding=ROUND_HALF_UP)


def fmt_amount(x: float | Decimal) -> str:
	"""Two-decimal representation of an amount without currency suffix."""
	q = round_money_dec(x)
	if q == 0:
		# avoid "-0.00"
		q = abs(q)
	return f"{q:.2f}"


def fmt_money(x: float | Decimal, currency: str = "EUR", width: Optional[int] = None) -> str:
	"""
	Format monetary value with two decimals and a currency suffix, e.g. ``605.00 EUR``.
	If width is provided, return a right-aligned string.
	"""
	s = fmt_amount(x)
	if currency:
		s = f"{s} {currency}"
	return s.rjust(width) if isinstance(width, int) and width > 0 else s


def fmt_qty(qty: float) -> str:
	"""Format quantity with up to 3 decimals, no trailing zeros."""
	q = to_decimal(qty).quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)
	s = f"{q:.3f}".rstrip("0").rstrip(".")
	return s if s and s != "-0" else "0"


def fmt_rate(rate: float) -> str:
	"""Format a VAT fraction as a percentage: 0.21 -> ``21%``, 0.105 -> ``10.5%``."""
	pct = (to_decimal(rate) * 100).quantize(CENT, rounding=ROUND_HALF_UP)
	s = f"{pct:.2f}".rstrip("0").rstrip(".")
	return f"{s}%"
