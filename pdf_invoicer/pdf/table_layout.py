# pdf_invoicer/pdf/table_layout.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence
import logging

from reportlab.lib import colors
from reportlab.lib.units import mm

from pdf_invoicer.core.errors import MeasurementError
from pdf_invoicer.pdf.canvas import CELL_MARGIN, PageCanvas

logger = logging.getLogger(__name__)

# Column widths for the item table; Description absorbs the remainder
COL_W_QTY = 20 * mm
COL_W_PRICE = 30 * mm
COL_W_RATE = 20 * mm
COL_W_VAT = 30 * mm
COL_W_TOTAL = 30 * mm
MIN_DESC_W = 40 * mm

# Single-line height used by header, block and (one-line) item rows
ROW_H = 7 * mm

BRAND = colors.HexColor("#1B1464")
SHADE = colors.HexColor("#C8C8C8")
HEADER_FILL = colors.HexColor("#E6E6F0")

BODY_FONT_SIZE = 10
HEADER_FONT_SIZE = 10


@dataclass(frozen=True)
class Column:
    title: str
    width: float
    align: str = "R"          # L, C or R for body cells
    header_align: str = "C"
    wrap: bool = False        # only wrapping columns can grow a row


@dataclass(frozen=True)
class RowPlacement:
    """Where an item row ended up: page number, top y and height (points)."""
    index: int
    page: int
    y: float
    height: float


def item_columns(content_width: float) -> List[Column]:
    fixed = COL_W_QTY + COL_W_PRICE + COL_W_RATE + COL_W_VAT + COL_W_TOTAL
    desc = max(MIN_DESC_W, content_width - fixed)
    return [
        Column("Description", desc, align="L", wrap=True),
        Column("Qty", COL_W_QTY, align="C"),
        Column("Unit Price", COL_W_PRICE, align="R"),
        Column("VAT Rate", COL_W_RATE, align="C"),
        Column("VAT Amount", COL_W_VAT, align="R"),
        Column("Total", COL_W_TOTAL, align="R"),
    ]


class TableLayout:
    """
    Fixed column grid whose rows grow to fit their wrapped text.

    For every row the wrapped height of the wrapping column(s) is measured
    first and used as the height of every cell in the row. When that height
    does not fit above the bottom margin the page is broken before the first
    cell is drawn, so a row always sits on a single page. The canvas' own
    per-cell page break is switched off while a row is drawn.
    """

    def __init__(
        self,
        pdf: PageCanvas,
        columns: Sequence[Column],
        line_height: float = ROW_H,
        header_height: float = ROW_H,
        repeat_header: bool = True,
        x: Optional[float] = None,
    ) -> None:
        if not columns:
            raise ValueError("A table needs at least one column")
        self.pdf = pdf
        self.columns = list(columns)
        self.line_height = line_height
        self.header_height = header_height
        self.repeat_header = repeat_header
        self.x = pdf.l_margin if x is None else x
        self.placements: List[RowPlacement] = []

    @property
    def width(self) -> float:
        return sum(col.width for col in self.columns)

    def _offsets(self) -> List[float]:
        xs = []
        x = self.x
        for col in self.columns:
            xs.append(x)
            x += col.width
        return xs

    # ===== Header =====
    def draw_header(self) -> None:
        pdf = self.pdf
        if pdf.will_overflow(self.header_height):
            pdf.add_page()
        y = pdf.get_y()
        style, size = pdf.font_style, pdf.font_size
        pdf.set_font(style="B", size=HEADER_FONT_SIZE)
        for col, x in zip(self.columns, self._offsets()):
            pdf.set_xy(x, y)
            pdf.cell(col.width, self.header_height, col.title, border=1, align=col.header_align,
                     fill=True, fill_color=HEADER_FILL)
        pdf.set_font(style=style, size=size)
        pdf.set_y(y + self.header_height)

    # ===== Body =====
    def row_height(self, cells: Sequence[str]) -> float:
        """Uniform height of a row: the tallest wrapped cell, at least one line.

        Single-line cells never wrap, so text wider than its column is an error.
        """
        self._check_arity(cells)
        height = self.line_height
        for col, text in zip(self.columns, cells):
            if col.wrap:
                height = max(height, self.pdf.measure_multi_cell(col.width, self.line_height, text))
            elif self.pdf.string_width(text) > col.width - 2 * CELL_MARGIN:
                raise MeasurementError(f"{col.title} value {text!r} is wider than its column")
        return height

    def draw_row(self, cells: Sequence[str], index: Optional[int] = None) -> RowPlacement:
        idx = len(self.placements) if index is None else index
        try:
            return self._draw_row(cells, idx)
        except MeasurementError as exc:
            if exc.row is not None:
                raise
            raise MeasurementError(exc.message, row=idx) from exc

    def _draw_row(self, cells: Sequence[str], index: int) -> RowPlacement:
        pdf = self.pdf
        height = self.row_height(cells)

        room = pdf.usable_height - (self.header_height if self.repeat_header else 0.0)
        if height > room:
            raise MeasurementError(
                f"row needs {height / mm:.1f} mm but a page holds {room / mm:.1f} mm", row=index
            )
        if pdf.will_overflow(height):
            logger.debug("Row %d (%.1f mm) does not fit; breaking page %d", index, height / mm, pdf.page_no)
            pdf.add_page()
            if self.repeat_header:
                self.draw_header()

        y = pdf.get_y()
        auto = pdf.auto_page_break
        pdf.auto_page_break = False
        try:
            for col, x, text in zip(self.columns, self._offsets(), cells):
                pdf.set_xy(x, y)
                if col.wrap:
                    pdf.multi_cell(col.width, self.line_height, text, border=0, align=col.align)
                    # frame at the full row height so row boundaries stay level
                    pdf.set_xy(x, y)
                    pdf.cell(col.width, height, "", border=1)
                else:
                    pdf.cell(col.width, height, text, border=1, align=col.align)
        finally:
            pdf.auto_page_break = auto
        pdf.set_y(y + height)

        placement = RowPlacement(index=index, page=pdf.page_no, y=y, height=height)
        self.placements.append(placement)
        return placement

    def draw_rows(self, rows: Sequence[Sequence[str]]) -> List[RowPlacement]:
        """Header followed by every row. The header never ends a page without a row under it."""
        if rows:
            try:
                first = self.row_height(rows[0])
            except MeasurementError as exc:
                raise MeasurementError(exc.message, row=0) from exc
            if self.pdf.will_overflow(self.header_height + first):
                self.pdf.add_page()
        self.draw_header()
        return [self.draw_row(cells, i) for i, cells in enumerate(rows)]

    def _check_arity(self, cells: Sequence[str]) -> None:
        if len(cells) != len(self.columns):
            raise ValueError(f"Expected {len(self.columns)} cells, got {len(cells)}")


def draw_block_rows(
    pdf: PageCanvas,
    columns: Sequence[Column],
    rows: Sequence[Sequence[str]],
    height: float = ROW_H,
    striped: bool = False,
    highlight_first: bool = False,
) -> None:
    """
    Fixed-height, borderless rows on the same column grid (party and summary blocks).

    With `striped`, even rows are shaded and odd rows left blank; with
    `highlight_first`, the first row uses the brand colour with white text.
    Shading is purely visual. A page break happens only between rows.
    """
    x0 = pdf.l_margin
    for i, cells in enumerate(rows):
        if pdf.will_overflow(height):
            pdf.add_page()
        y = pdf.get_y()
        x = x0
        if highlight_first and i == 0:
            fill, fill_color = True, BRAND
            pdf.set_text_color(colors.white)
        else:
            fill, fill_color = striped and i % 2 == 0, SHADE
        for col, text in zip(columns, cells):
            pdf.set_xy(x, y)
            pdf.cell(col.width, height, text, border=0, align=col.align, fill=fill, fill_color=fill_color)
            x += col.width
        pdf.set_text_color(colors.black)
        pdf.set_y(y + height)
