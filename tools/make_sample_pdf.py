from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path
import logging
import sys

# Ensure we can import the package when running this script directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pdf_invoicer.data.export import dump_invoice_json
from pdf_invoicer.data.models import new_address, new_client, new_invoice, new_issuer, new_item
from pdf_invoicer.pdf.pdf_draw import build_invoice_pdf


def _items() -> list:
    rows = [
        ("Consulting", 10, 50.0, 0.21),
        ("Website maintenance, including monthly security updates, uptime monitoring "
         "and two hours of content changes", 3, 120.0, 0.21),
        ("Domain renewal", 1, 15.99, 0.21),
        ("Printed manuals", 25, 4.5, 0.04),
        ("Training session (reduced rate)", 2, 180.0, 0.10),
    ]
    return [new_item(*r) for r in rows]


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    today = date.today()
    issuer = new_issuer(
        "Sample Studio SL",
        new_address("Carrer de Mallorca", "401", "08013", "Barcelona", "Spain", floor="3", door="2"),
        "B12345678",
        iban="ES91 2100 0418 4502 0005 1332",
        email="billing@sample.example",
        phone="+34 600 000 000",
    )
    client = new_client("Client Corp", new_address("Main", "12", "08001", "Barcelona", "Spain"), "A87654321")
    invoice = new_invoice(
        "SAMPLE-0001",
        today,
        today,
        today + timedelta(days=30),
        issuer,
        client,
        _items(),
        payment_method="Bank transfer",
        notes="Payment within 30 days. Thank you for your business!",
        reference="PO-2024-17",
    )

    out_dir = ROOT / "assets" / "samples"
    out_dir.mkdir(parents=True, exist_ok=True)
    doc = build_invoice_pdf(out_dir / "SAMPLE.pdf", invoice)
    dump_invoice_json(invoice, out_dir / "SAMPLE.json")
    print(f"Wrote sample to: {out_dir / 'SAMPLE.pdf'} ({doc.page_count} page(s))")


if __name__ == "__main__":
    main()
