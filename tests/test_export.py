from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path

import pytest

from pdf_invoicer.core.errors import ValidationError
from pdf_invoicer.data.export import dump_invoice_json, invoice_from_dict, invoice_to_dict, load_invoice_json
from pdf_invoicer.data.validation import first_violation


def test_dump_and_load(tmp_path: Path, make_invoice) -> None:
    invoice = make_invoice(notes="n", reference="r", paid=True)
    path = dump_invoice_json(invoice, tmp_path / "inv.json")

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["schema_version"] == 1
    assert raw["emit_date"] == "2024-03-01"
    assert raw["gross_total"] == pytest.approx(605.0)
    assert raw["items"][0]["vat_amount"] == pytest.approx(105.0)

    loaded = load_invoice_json(path)
    assert loaded == invoice
    assert not (tmp_path / "inv.json.tmp").exists()


def test_derived_amounts_are_recomputed_on_load(make_invoice) -> None:
    data = invoice_to_dict(make_invoice())
    data["items"][0]["total"] = 1.0
    data["gross_total"] = 1.0
    assert invoice_from_dict(data).gross_total == pytest.approx(605.0)


def test_missing_keys_are_left_to_the_gate(make_invoice) -> None:
    data = invoice_to_dict(make_invoice())
    del data["client"]["address"]["city"]
    invoice = invoice_from_dict(data)
    err = first_violation(invoice)
    assert err is not None and err.field == "client.address.city"


def test_bad_item_names_its_position(make_invoice) -> None:
    data = invoice_to_dict(make_invoice())
    data["items"].append({"description": "Refund", "quantity": 1, "unit_price": -5, "vat_rate": 0.21})
    with pytest.raises(ValidationError) as exc:
        invoice_from_dict(data)
    assert exc.value.field == "items[1].unit_price"


def test_bad_date_and_version(make_invoice) -> None:
    data = invoice_to_dict(make_invoice())
    with pytest.raises(ValidationError) as exc:
        invoice_from_dict({**data, "due_date": "31/03/2024"})
    assert exc.value.field == "due_date"
    with pytest.raises(ValidationError) as exc:
        invoice_from_dict({**data, "schema_version": 99})
    assert exc.value.field == "schema_version"


def test_timestamps_load_as_dates(make_invoice) -> None:
    data = invoice_to_dict(make_invoice())
    invoice = invoice_from_dict({**data, "emit_date": datetime(2024, 3, 1, 9, 30)})
    assert type(invoice.emit_date) is date
    assert invoice.emit_date == date(2024, 3, 1)
    assert first_violation(invoice) is None
