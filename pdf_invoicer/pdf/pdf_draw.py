from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass, field
from datetime import date
from itertools import zip_longest
from pathlib import Path
from typing import List, Optional, Sequence
import logging

from reportlab.lib.units import mm

from pdf_invoicer.core.address import format_address
from pdf_invoicer.core.currency import fmt_money, fmt_qty, fmt_rate
from pdf_invoicer.core.errors import OutputError
from pdf_invoicer.core.paths import resource_path
from pdf_invoicer.core.settings import Settings
from pdf_invoicer.data.models import Invoice, LineItem
from pdf_invoicer.data.validation import check_invoice
from pdf_invoicer.pdf.canvas import PageCanvas, register_fonts
from pdf_invoicer.pdf.table_layout import (
    Column,
    RowPlacement,
    TableLayout,
    draw_block_rows,
    item_columns,
)

logger = logging.getLogger(__name__)


# ===== Layout constants (tweak here) =====
TITLE_FONT_SIZE = 16
HEADING_FONT_SIZE = 12
NAME_FONT_SIZE = 12
TEXT_FONT_SIZE = 10

TITLE_H = 10 * mm
LABEL_H = 7 * mm
ADDRESS_LINE_H = 5 * mm
SUMMARY_W = 65 * mm
NOTES_LINE_H = 5 * mm

BLOCK_GAP = 10 * mm
NOTES_GAP = 20 * mm
REFERENCE_GAP = 5 * mm

LOGO_W = 30 * mm
LOGO_H = 15 * mm


@dataclass
class RenderedDocument:
    """A finished PDF held in memory, plus where each item row was placed."""
    data: bytes
    page_count: int
    rows: List[RowPlacement] = field(default_factory=list)


# ===== Helpers =====
def _fmt_date(val: date, fmt: str) -> str:
    return val.strftime(fmt)


def item_cells(item: LineItem, currency: str) -> List[str]:
    """Display strings for one item row, in item_columns() order."""
    return [
        item.description,
        fmt_qty(item.quantity),
        fmt_money(item.unit_price, currency),
        fmt_rate(item.vat_rate),
        fmt_money(item.vat_amount, currency),
        fmt_money(item.total, currency),
    ]


def summary_lines(invoice: Invoice, settings: Settings) -> List[str]:
    """Rows of the metadata block. The operation date is left out when it equals the emission date."""
    fmt = settings.date_format
    lines = [
        f"Invoice Number: {invoice.number}",
        f"Emission Date: {_fmt_date(invoice.emit_date, fmt)}",
    ]
    if invoice.op_date != invoice.emit_date:
        lines.append(f"Operation Date: {_fmt_date(invoice.op_date, fmt)}")
    lines.append(f"Due Date: {_fmt_date(invoice.due_date, fmt)}")
    lines.append(f"Total Amount: {fmt_money(invoice.gross_total, settings.currency)}")
    if invoice.paid:
        lines.append("Status: PAID")
    return lines


def _resolve_logo(logo_path: Optional[str]) -> Optional[Path]:
    if not logo_path:
        return None
    p = Path(logo_path)
    if not p.exists():
        p = resource_path(logo_path)
    if p.exists():
        return p
    logger.warning("Logo not found: %s", logo_path)
    return None


# ===== Blocks =====
def _draw_title(pdf: PageCanvas, invoice: Invoice) -> None:
    y = pdf.get_y()
    logo = _resolve_logo(invoice.logo_path)
    if logo is not None:
        pdf.image(logo, pdf.l_margin, y, LOGO_W, LOGO_H)
    pdf.set_font(style="B", size=TITLE_FONT_SIZE)
    pdf.cell(0, TITLE_H, f"INVOICE - {invoice.number}", ln=1, align="C")
    bottom = max(y + TITLE_H, y + LOGO_H) if logo is not None else y + TITLE_H
    pdf.set_y(bottom)
    pdf.ln(BLOCK_GAP)


def _draw_parties(pdf: PageCanvas, invoice: Invoice) -> None:
    half = pdf.content_width / 2
    cols = [Column("From", half, align="L"), Column("To", half, align="R")]
    issuer, client = invoice.issuer, invoice.client

    pdf.set_font(style="", size=TEXT_FONT_SIZE)
    draw_block_rows(pdf, cols, [["From:", "To:"]], height=LABEL_H)
    pdf.set_font(size=NAME_FONT_SIZE)
    draw_block_rows(pdf, cols, [[issuer.name, client.name]], height=LABEL_H)

    pdf.set_font(size=TEXT_FONT_SIZE)
    addresses = zip_longest(format_address(issuer.address), format_address(client.address), fillvalue="")
    draw_block_rows(pdf, cols, [list(pair) for pair in addresses], height=ADDRESS_LINE_H)
    draw_block_rows(pdf, cols, [[f"NIF: {issuer.tax_id}", f"NIF: {client.tax_id}"]], height=LABEL_H)

    contact = " / ".join(v for v in (issuer.email, issuer.phone) if v)
    if contact or client.email:
        draw_block_rows(pdf, cols, [[contact, client.email]], height=ADDRESS_LINE_H)
    pdf.ln(BLOCK_GAP)


def _draw_summary(pdf: PageCanvas, invoice: Invoice, settings: Settings) -> None:
    lines = summary_lines(invoice, settings)
    if pdf.will_overflow(LABEL_H * (len(lines) + 1)):
        pdf.add_page()
    pdf.set_font(style="B", size=HEADING_FONT_SIZE)
    pdf.cell(0, LABEL_H, "Invoice Summary", ln=1, align="C")
    pdf.ln(2 * mm)
    pdf.set_font(style="", size=TEXT_FONT_SIZE)
    draw_block_rows(pdf, [Column("", SUMMARY_W, align="L")], [[ln] for ln in lines],
                    height=LABEL_H, striped=True, highlight_first=True)
    pdf.ln(BLOCK_GAP)


def _draw_items(pdf: PageCanvas, invoice: Invoice, settings: Settings) -> List[RowPlacement]:
    table = TableLayout(
        pdf,
        item_columns(pdf.content_width),
        line_height=settings.line_height_mm * mm,
        header_height=LABEL_H,
    )
    pdf.set_font(style="", size=TEXT_FONT_SIZE)
    rows: Sequence[List[str]] = [item_cells(it, settings.currency) for it in invoice.items]
    placements = table.draw_rows(rows)
    logger.debug("Laid out %d item rows over %d page(s)", len(placements), pdf.page_no)
    pdf.ln(BLOCK_GAP)
    return placements


def _draw_totals(pdf: PageCanvas, invoice: Invoice, settings: Settings) -> None:
    totals = invoice.totals
    lines = [
        (f"Taxable Base: {fmt_money(totals.net, settings.currency)}", "", TEXT_FONT_SIZE),
        (f"VAT: {fmt_money(totals.vat, settings.currency)}", "", TEXT_FONT_SIZE),
        (f"Total Amount: {fmt_money(totals.gross, settings.currency)}", "B", HEADING_FONT_SIZE),
    ]
    # keep the block on one page
    if pdf.will_overflow(LABEL_H * len(lines)):
        pdf.add_page()
    for text, style, size in lines:
        pdf.set_font(style=style, size=size)
        pdf.cell(0, LABEL_H, text, ln=1, align="R")

    payment = []
    if invoice.payment_method:
        payment.append(f"Payment Method: {invoice.payment_method}")
    if invoice.issuer.iban:
        payment.append(f"IBAN: {invoice.issuer.iban}")
    if payment:
        pdf.set_font(style="", size=TEXT_FONT_SIZE)
        pdf.cell(0, LABEL_H, "    ".join(payment), ln=1, align="L")


def _draw_notes(pdf: PageCanvas, invoice: Invoice) -> None:
    if not invoice.notes.strip():
        return
    pdf.ln(NOTES_GAP)
    pdf.set_font(style="", size=TEXT_FONT_SIZE)
    pdf.multi_cell(0, NOTES_LINE_H, invoice.notes, align="L")


def _draw_reference(pdf: PageCanvas, invoice: Invoice) -> None:
    if not invoice.reference.strip():
        return
    pdf.ln(REFERENCE_GAP)
    pdf.set_font(style="", size=TEXT_FONT_SIZE)
    pdf.cell(0, LABEL_H, f"Reference: {invoice.reference}", ln=1, align="L")


# ===== Public API =====
def render_invoice(invoice: Invoice, settings: Optional[Settings] = None) -> RenderedDocument:
    """Validate and lay out an invoice, returning the PDF bytes.

    Nothing is written anywhere; the invoice is only read.
    Raises ValidationError before any drawing, MeasurementError if layout fails.
    """
    settings = settings or Settings()
    check_invoice(invoice)
    logger.info("Generating PDF for invoice %s (%d items)", invoice.number, len(invoice.items))

    if settings.font_family == "NotoSans":
        register_fonts()
    pdf = PageCanvas(
        pagesize=settings.pagesize(),
        margin=settings.margin_mm * mm,
        bottom_margin=settings.bottom_margin_mm * mm,
        title=f"Invoice {invoice.number}",
        author=settings.author,
    )
    pdf.set_font(settings.font_family, "", TEXT_FONT_SIZE)
    pdf.add_page()

    _draw_title(pdf, invoice)
    _draw_parties(pdf, invoice)
    _draw_summary(pdf, invoice, settings)
    rows = _draw_items(pdf, invoice, settings)
    _draw_totals(pdf, invoice, settings)
    _draw_notes(pdf, invoice)
    _draw_reference(pdf, invoice)

    pages = pdf.page_no
    data = pdf.output()
    return RenderedDocument(data=data, page_count=pages, rows=rows)


def write_document(data: bytes, out_path: Path | str) -> Path:
    """Write bytes via a temporary sibling file; on failure nothing is left behind."""
    out = Path(out_path)
    tmp = out.with_name(out.name + ".tmp")
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_bytes(data)
        tmp.replace(out)
    except OSError as exc:
        with suppress(OSError):
            tmp.unlink(missing_ok=True)
        raise OutputError(out, f"Could not write document: {exc.strerror or exc}") from exc
    return out


def build_invoice_pdf(out_path: Path | str, invoice: Invoice, settings: Optional[Settings] = None) -> RenderedDocument:
    """Render an invoice and write it to `out_path` (A4 by default)."""
    doc = render_invoice(invoice, settings)
    out = write_document(doc.data, out_path)
    logger.info("PDF built: %s (%d page(s))", out, doc.page_count)
    return doc
