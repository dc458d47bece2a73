from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

import pytest

from pdf_invoicer.core.errors import ValidationError
from pdf_invoicer.data.models import LineItem, new_address, new_client, new_invoice, new_item
from pdf_invoicer.data.validation import check_invoice, first_violation


def _field(invoice) -> str:
    err = first_violation(invoice)
    assert err is not None
    return err.field


def test_valid_invoice_passes(make_invoice) -> None:
    assert first_violation(make_invoice()) is None
    check_invoice(make_invoice())


@pytest.mark.parametrize("missing", ["street", "street_number", "zip_code", "city", "country"])
def test_address_mandatory_fields(address, missing) -> None:
    kwargs = dict(street="Main", street_number="12", zip_code="08001", city="Barcelona", country="Spain")
    kwargs[missing] = "  "
    with pytest.raises(ValidationError) as exc:
        new_address(**kwargs)
    assert exc.value.field == f"address.{missing}"


def test_party_address_checked_before_identity(address) -> None:
    broken = replace(address, city="")
    with pytest.raises(ValidationError) as exc:
        new_client("", broken, "")
    assert exc.value.field == "client.address.city"


@pytest.mark.parametrize(
    "description, qty, price, rate, field",
    [
        ("", 1, 1.0, 0.21, "description"),
        ("X", -1, 1.0, 0.21, "quantity"),
        ("X", 1, -1.0, 0.21, "unit_price"),
        ("X", 1, 1.0, -0.1, "vat_rate"),
        ("", -1, -1.0, -0.1, "description"),
    ],
)
def test_item_construction_fails_fast(description, qty, price, rate, field) -> None:
    with pytest.raises(ValidationError) as exc:
        new_item(description, qty, price, rate)
    assert exc.value.field == field


def test_addresses_reported_before_party_identity(make_invoice, issuer, client) -> None:
    invoice = make_invoice(
        issuer=replace(issuer, name=""),
        client=replace(client, address=replace(client.address, zip_code="")),
    )
    assert _field(invoice) == "client.address.zip_code"


def test_identity_reported_before_dates(make_invoice, issuer) -> None:
    invoice = make_invoice(issuer=replace(issuer, tax_id=""), op_date=date(2024, 2, 1), items=[])
    assert _field(invoice) == "issuer.tax_id"


def test_missing_invoice_number(make_invoice) -> None:
    assert _field(make_invoice(number="")) == "number"


def test_operation_date_before_emission(make_invoice) -> None:
    invoice = make_invoice(op_date=date(2024, 2, 28))
    assert _field(invoice) == "op_date"


def test_due_date_before_operation(make_invoice) -> None:
    invoice = make_invoice(op_date=date(2024, 3, 10), due_date=date(2024, 3, 5))
    assert _field(invoice) == "due_date"


def test_dates_reported_before_empty_items(make_invoice) -> None:
    invoice = make_invoice(due_date=date(2024, 1, 1), items=[])
    assert _field(invoice) == "due_date"


def test_empty_item_sequence(make_invoice) -> None:
    assert _field(make_invoice(items=[])) == "items"


def test_new_invoice_runs_the_gate(issuer, client) -> None:
    with pytest.raises(ValidationError) as exc:
        new_invoice("INV-1", date(2024, 1, 2), date(2024, 1, 1), date(2024, 1, 3), issuer, client, [LineItem("A", 1, 1.0, 0.0)])
    assert exc.value.field == "op_date"
    assert "op_date" in str(exc.value)


def test_equal_dates_are_allowed(issuer, client) -> None:
    d = date(2024, 5, 5)
    invoice = new_invoice("INV-2", d, d, d, issuer, client, [LineItem("A", 0, 0.0, 0.0)])
    assert invoice.gross_total == 0.0
    assert invoice.paid is False


@pytest.mark.parametrize("name", ["emit_date", "op_date", "due_date"])
def test_timestamps_are_not_invoice_dates(make_invoice, name) -> None:
    invoice = make_invoice(**{name: datetime(2024, 3, 1, 9, 0)})
    assert _field(invoice) == name
