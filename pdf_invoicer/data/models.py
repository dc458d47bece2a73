from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional

from pdf_invoicer.data.calc import Totals, aggregate_totals, compute_line
from pdf_invoicer.data.validation import (
	check_address,
	check_invoice,
	check_item,
	check_item_fields,
	check_party,
)

# Bumped whenever a field is added, renamed or changes representation.
SCHEMA_VERSION = 1


@dataclass(frozen=True)
class Address:
	street: str
	street_number: str
	zip_code: str
	city: str
	country: str
	stairs: str = ""
	floor: str = ""
	door: str = ""
	state: str = ""


@dataclass(frozen=True)
class Issuer:
	name: str
	address: Address
	tax_id: str
	iban: str = ""
	email: str = ""
	phone: str = ""


@dataclass(frozen=True)
class Client:
	name: str
	address: Address
	tax_id: str
	email: str = ""


@dataclass(frozen=True)
class LineItem:
	"""One billed line. VAT amount and total are always derived from the inputs."""

	description: str
	quantity: float
	unit_price: float
	vat_rate: float

	def __post_init__(self) -> None:
		check_item_fields(self.description, self.quantity, self.unit_price, self.vat_rate)

	@property
	def net_amount(self) -> float:
		return self.quantity * self.unit_price

	@property
	def vat_amount(self) -> float:
		return compute_line(self.quantity, self.unit_price, self.vat_rate).vat_amount

	@property
	def total(self) -> float:
		return compute_line(self.quantity, self.unit_price, self.vat_rate).total


@dataclass
class Invoice:
	number: str
	emit_date: date
	op_date: date
	due_date: date
	issuer: Issuer
	client: Client
	items: List[LineItem] = field(default_factory=list)
	payment_method: str = ""
	notes: str = ""
	reference: str = ""
	paid: bool = False
	logo_path: Optional[str] = None

	def add_item(self, item: LineItem) -> None:
		check_item(item, f"items[{len(self.items)}]")
		self.items.append(item)

	@property
	def totals(self) -> Totals:
		return aggregate_totals(self.items)

	@property
	def net_total(self) -> float:
		return self.totals.net

	@property
	def vat_total(self) -> float:
		return self.totals.vat

	@property
	def gross_total(self) -> float:
		return self.totals.gross


# ===== Validating constructors =====
def new_address(
	street: str,
	street_number: str,
	zip_code: str,
	city: str,
	country: str,
	stairs: str = "",
	floor: str = "",
	door: str = "",
	state: str = "",
) -> Address:
	address = Address(street, street_number, zip_code, city, country, stairs, floor, door, state)
	check_address(address)
	return address


def new_issuer(name: str, address: Address, tax_id: str, iban: str = "", email: str = "", phone: str = "") -> Issuer:
	issuer = Issuer(name, address, tax_id, iban, email, phone)
	check_party(issuer, "issuer")
	return issuer


def new_client(name: str, address: Address, tax_id: str, email: str = "") -> Client:
	client = Client(name, address, tax_id, email)
	check_party(client, "client")
	return client


def new_item(description: str, quantity: float, unit_price: float, vat_rate: float) -> LineItem:
	return LineItem(description, quantity, unit_price, vat_rate)


def new_invoice(
	number: str,
	emit_date: date,
	op_date: date,
	due_date: date,
	issuer: Issuer,
	client: Client,
	items: Iterable[LineItem],
	payment_method: str = "",
	notes: str = "",
	reference: str = "",
	logo_path: Optional[str] = None,
) -> Invoice:
	"""Build an unpaid invoice and run the full validation gate on it."""
	invoice = Invoice(
		number=number,
		emit_date=emit_date,
		op_date=op_date,
		due_date=due_date,
		issuer=issuer,
		client=client,
		items=list(items),
		payment_method=payment_method,
		notes=notes,
		reference=reference,
		logo_path=logo_path,
	)
	check_invoice(invoice)
	return invoice
