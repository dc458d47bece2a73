from __future__ import annotations

import math
from typing import Iterable, NamedTuple, TYPE_CHECKING

from pdf_invoicer.data.validation import check_amounts

if TYPE_CHECKING:
	from pdf_invoicer.data.models import LineItem


class LineAmounts(NamedTuple):
	vat_amount: float
	total: float


class Totals(NamedTuple):
	net: float
	vat: float
	gross: float


def compute_line(quantity: float, unit_price: float, vat_rate: float) -> LineAmounts:
	"""VAT amount and VAT-inclusive total of one line. No rounding happens here."""
	check_amounts(quantity, unit_price, vat_rate)
	net = quantity * unit_price
	vat = net * vat_rate
	return LineAmounts(vat_amount=vat, total=net + vat)


def aggregate_totals(items: Iterable["LineItem"]) -> Totals:
	"""Net, VAT and gross totals of a sequence of items.

	math.fsum is exactly rounded, so the result does not depend on item order.
	"""
	nets = []
	vats = []
	for item in items:
		nets.append(item.net_amount)
		vats.append(item.vat_amount)
	net = math.fsum(nets)
	vat = math.fsum(vats)
	return Totals(net=net, vat=vat, gross=net + vat)
