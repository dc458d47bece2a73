"""
Versioned JSON interchange for invoices.

Dates travel as ISO strings; derived amounts are written for the reader's
convenience but ignored on load, where they are always recomputed.
"""
from __future__ import annotations

from dataclasses import asdict
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Union
import json
import logging

from pdf_invoicer.core.errors import OutputError, ValidationError
from pdf_invoicer.data.models import SCHEMA_VERSION, Address, Client, Invoice, Issuer, LineItem

logger = logging.getLogger(__name__)


def invoice_to_dict(invoice: Invoice) -> Dict[str, Any]:
	totals = invoice.totals
	return {
		"schema_version": SCHEMA_VERSION,
		"number": invoice.number,
		"emit_date": invoice.emit_date.isoformat(),
		"op_date": invoice.op_date.isoformat(),
		"due_date": invoice.due_date.isoformat(),
		"issuer": asdict(invoice.issuer),
		"client": asdict(invoice.client),
		"items": [
			{
				"description": it.description,
				"quantity": it.quantity,
				"unit_price": it.unit_price,
				"vat_rate": it.vat_rate,
				"vat_amount": it.vat_amount,
				"total": it.total,
			}
			for it in invoice.items
		],
		"net_total": totals.net,
		"vat_total": totals.vat,
		"gross_total": totals.gross,
		"payment_method": invoice.payment_method,
		"notes": invoice.notes,
		"reference": invoice.reference,
		"paid": invoice.paid,
		"logo_path": invoice.logo_path,
	}


def _date(data: Dict[str, Any], key: str) -> date:
	raw = data.get(key)
	if isinstance(raw, datetime):
		return raw.date()
	if isinstance(raw, date):
		return raw
	try:
		return date.fromisoformat(str(raw))
	except (TypeError, ValueError):
		raise ValidationError(key, f"Invalid date: {raw!r}") from None


def _fields(cls, data: Any, skip: tuple = ()) -> Dict[str, str]:
	# Absent keys become empty strings so that check_invoice names the exact field
	data = data if isinstance(data, dict) else {}
	return {k: str(data.get(k) or "") for k in cls.__dataclass_fields__ if k not in skip}


def _party(cls, data: Any):
	raw_address = data.get("address") if isinstance(data, dict) else None
	return cls(address=Address(**_fields(Address, raw_address)), **_fields(cls, data, skip=("address",)))


def invoice_from_dict(data: Dict[str, Any]) -> Invoice:
	"""Rebuild an Invoice. Structural problems are left for check_invoice to report."""
	version = data.get("schema_version", SCHEMA_VERSION)
	if version != SCHEMA_VERSION:
		raise ValidationError("schema_version", f"Unsupported schema version: {version}")

	items = []
	for i, raw in enumerate(data.get("items") or []):
		raw = raw if isinstance(raw, dict) else {}
		try:
			items.append(LineItem(raw.get("description", ""), raw.get("quantity"), raw.get("unit_price"), raw.get("vat_rate")))
		except ValidationError as exc:
			raise ValidationError(f"items[{i}].{exc.field}", exc.message) from None

	return Invoice(
		number=str(data.get("number") or ""),
		emit_date=_date(data, "emit_date"),
		op_date=_date(data, "op_date"),
		due_date=_date(data, "due_date"),
		issuer=_party(Issuer, data.get("issuer")),
		client=_party(Client, data.get("client")),
		items=items,
		payment_method=str(data.get("payment_method") or ""),
		notes=str(data.get("notes") or ""),
		reference=str(data.get("reference") or ""),
		paid=bool(data.get("paid", False)),
		logo_path=data.get("logo_path") or None,
	)


def dump_invoice_json(invoice: Invoice, path: Union[str, Path]) -> Path:
	"""Write the invoice as pretty UTF-8 JSON, atomically."""
	p = Path(path)
	tmp = p.with_suffix(p.suffix + ".tmp")
	try:
		p.parent.mkdir(parents=True, exist_ok=True)
		with tmp.open("w", encoding="utf-8", newline="\n") as f:
			json.dump(invoice_to_dict(invoice), f, indent=2, ensure_ascii=False)
			f.write("\n")
		tmp.replace(p)
	except OSError as exc:
		tmp.unlink(missing_ok=True)
		raise OutputError(p, f"Could not write invoice JSON: {exc}") from exc
	logger.info("Exported invoice %s to %s", invoice.number, p)
	return p


def load_invoice_json(path: Union[str, Path]) -> Invoice:
	p = Path(path)
	with p.open("r", encoding="utf-8") as f:
		raw = json.load(f)
	if not isinstance(raw, dict):
		raise ValidationError("invoice", "Invoice JSON must be an object")
	return invoice_from_dict(raw)
