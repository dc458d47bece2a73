from __future__ import annotations

from typing import List

from pdf_invoicer.data.models import Address


SEPARATOR = ", "


def format_address(address: Address) -> List[str]:
	"""Return the display lines for a postal address.

	Line 1: street and number, then stairs / floor / door when present.
	Line 2: zip code and city, then state when present.
	Line 3: country.

	Optional parts are comma separated; empty ones leave no trace.
	"""
	first = _join(f"{address.street} {address.street_number}", address.stairs, address.floor, address.door)
	second = _join(f"{address.zip_code} {address.city}", address.state)
	lines = [first, second, address.country.strip()]
	return [ln for ln in lines if ln]


def _join(head: str, *optional: str) -> str:
	parts = [head.strip()]
	parts.extend(p.strip() for p in optional if p and p.strip())
	return SEPARATOR.join(p for p in parts if p)
