"""
Structural checks run before any computation or rendering.

Every check is fail-fast: it raises ValidationError for the first violated
constraint and returns None otherwise. The invoice-level order is fixed:
addresses, party identity, item fields, date ordering, item presence.
"""
from __future__ import annotations

from datetime import date, datetime
import math
from numbers import Real
from typing import Any, Optional, TYPE_CHECKING

from pdf_invoicer.core.errors import ValidationError

if TYPE_CHECKING:
	from pdf_invoicer.data.models import Address, Client, Invoice, Issuer, LineItem

ADDRESS_FIELDS = (
	("street", "street"),
	("street_number", "street number"),
	("zip_code", "zip code"),
	("city", "city"),
	("country", "country"),
)


def _blank(value: Any) -> bool:
	return not isinstance(value, str) or not value.strip()


def _path(prefix: str, name: str) -> str:
	return f"{prefix}.{name}" if prefix else name


def check_address(address: "Address", prefix: str = "address") -> None:
	for attr, label in ADDRESS_FIELDS:
		if _blank(getattr(address, attr, None)):
			raise ValidationError(_path(prefix, attr), f"Address {label} is mandatory")


def check_identity(party: "Issuer | Client", prefix: str) -> None:
	role = prefix.capitalize() if prefix else "Party"
	if _blank(getattr(party, "name", None)):
		raise ValidationError(_path(prefix, "name"), f"{role} name is mandatory")
	if _blank(getattr(party, "tax_id", None)):
		raise ValidationError(_path(prefix, "tax_id"), f"{role} tax id is mandatory")


def check_party(party: "Issuer | Client", prefix: str) -> None:
	"""Address first, then name and tax id."""
	check_address(party.address, _path(prefix, "address"))
	check_identity(party, prefix)


def check_amounts(quantity: Any, unit_price: Any, vat_rate: Any, prefix: str = "") -> None:
	for name, label, value in (
		("quantity", "quantity", quantity),
		("unit_price", "unit price", unit_price),
		("vat_rate", "VAT rate", vat_rate),
	):
		if isinstance(value, bool) or not isinstance(value, Real):
			raise ValidationError(_path(prefix, name), f"Item {label} must be a number")
		# `not >=` also rejects NaN
		if not value >= 0:
			raise ValidationError(_path(prefix, name), f"Item {label} must not be negative")
		if not _finite(value):
			raise ValidationError(_path(prefix, name), f"Item {label} must be finite")
	# finite inputs can still overflow once multiplied
	if not _finite(float(quantity) * float(unit_price) * (1 + float(vat_rate))):
		raise ValidationError(_path(prefix, "total"), "Item total is too large")


def _finite(value: Any) -> bool:
	try:
		return math.isfinite(value)
	except OverflowError:
		return False


def check_item_fields(description: Any, quantity: Any, unit_price: Any, vat_rate: Any, prefix: str = "") -> None:
	if _blank(description):
		raise ValidationError(_path(prefix, "description"), "Item description is mandatory")
	check_amounts(quantity, unit_price, vat_rate, prefix)


def check_item(item: "LineItem", prefix: str = "item") -> None:
	check_item_fields(item.description, item.quantity, item.unit_price, item.vat_rate, prefix)


def check_dates(emit_date: Any, op_date: Any, due_date: Any) -> None:
	for name, value in (("emit_date", emit_date), ("op_date", op_date), ("due_date", due_date)):
		if not isinstance(value, date):
			raise ValidationError(name, "Invoice dates are mandatory")
		# datetime subclasses date but does not compare with it
		if isinstance(value, datetime):
			raise ValidationError(name, "Invoice dates must be calendar dates, not timestamps")
	if op_date < emit_date:
		raise ValidationError("op_date", "Operation date must not be before emission date")
	if due_date < op_date:
		raise ValidationError("due_date", "Due date must not be before operation date")


def check_invoice(invoice: "Invoice") -> None:
	"""Run the full gate on an invoice. Raises ValidationError on the first problem."""
	check_address(invoice.issuer.address, "issuer.address")
	check_address(invoice.client.address, "client.address")

	check_identity(invoice.issuer, "issuer")
	check_identity(invoice.client, "client")
	if _blank(invoice.number):
		raise ValidationError("number", "Invoice number is mandatory")

	for i, item in enumerate(invoice.items):
		check_item(item, f"items[{i}]")

	check_dates(invoice.emit_date, invoice.op_date, invoice.due_date)

	if not invoice.items:
		raise ValidationError("items", "Invoice must have at least one item")


def first_violation(invoice: "Invoice") -> Optional[ValidationError]:
	"""Like check_invoice, but return the error instead of raising it."""
	try:
		check_invoice(invoice)
	except ValidationError as exc:
		return exc
	return None
