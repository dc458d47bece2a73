"""
Cursor-based page canvas on top of ReportLab.

Coordinates are measured in points from the top-left corner of the page (use
`reportlab.lib.units.mm` to scale). The cursor moves as cells are drawn, and a
cell that would cross the bottom margin starts a new page on its own. That
automatic break works per cell only; callers that must keep several cells
together check `will_overflow` first and call `add_page` themselves.
"""
from __future__ import annotations

from contextlib import contextmanager
from io import BytesIO
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union
import logging

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen.canvas import Canvas

from pdf_invoicer.core.errors import MeasurementError
from pdf_invoicer.core.paths import resource_path

logger = logging.getLogger(__name__)

Color = Union[str, colors.Color]

# family -> style -> registered font name
FONT_FAMILIES: Dict[str, Dict[str, str]] = {
    "Helvetica": {"": "Helvetica", "B": "Helvetica-Bold", "I": "Helvetica-Oblique", "BI": "Helvetica-BoldOblique"},
    "Times": {"": "Times-Roman", "B": "Times-Bold", "I": "Times-Italic", "BI": "Times-BoldItalic"},
    "Courier": {"": "Courier", "B": "Courier-Bold", "I": "Courier-Oblique", "BI": "Courier-BoldOblique"},
}

# Horizontal padding inside a cell
CELL_MARGIN = 1 * mm
LINE_WIDTH = 0.5


def register_fonts() -> None:
    """Register NotoSans from assets/fonts when the TTF files are available."""
    if "NotoSans" in FONT_FAMILIES:
        return
    reg = resource_path("assets/fonts/NotoSans-Regular.ttf")
    bld = resource_path("assets/fonts/NotoSans-Bold.ttf")
    if not reg.exists():
        logger.debug("NotoSans not found under %s; only standard fonts available", reg.parent)
        return
    pdfmetrics.registerFont(TTFont("NotoSans", str(reg)))
    bold = "NotoSans"
    if bld.exists():
        pdfmetrics.registerFont(TTFont("NotoSans-Bold", str(bld)))
        bold = "NotoSans-Bold"
    else:
        logger.warning("NotoSans-Bold.ttf missing; bold text falls back to regular")
    FONT_FAMILIES["NotoSans"] = {"": "NotoSans", "B": bold, "I": "NotoSans", "BI": bold}


def _to_color(value: Color) -> colors.Color:
    return colors.HexColor(value) if isinstance(value, str) else value


@contextmanager
def drawing_errors(action: str) -> Iterator[None]:
    """Re-raise low-level ReportLab failures as MeasurementError."""
    try:
        yield
    except MeasurementError:
        raise
    except (KeyError, ValueError, TypeError, AttributeError, IndexError, OSError) as exc:
        raise MeasurementError(f"Could not {action}: {exc}") from exc


class PageCanvas:
    """One document's drawing context: its pages, cursor, font and colours.

    Instances are never shared; every document gets its own.
    """

    def __init__(
        self,
        pagesize: Tuple[float, float] = A4,
        margin: float = 10 * mm,
        bottom_margin: float = 10 * mm,
        title: str = "",
        author: str = "",
    ) -> None:
        self.page_width, self.page_height = pagesize
        self.l_margin = self.r_margin = self.t_margin = margin
        self.b_margin = bottom_margin
        self.auto_page_break = True
        self.page_no = 0

        self._buffer = BytesIO()
        # invariant=1 keeps timestamps and document ids out of the file,
        # so identical input produces identical bytes.
        self._canvas = Canvas(self._buffer, pagesize=pagesize, invariant=1)
        if title:
            self._canvas.setTitle(title)
        if author:
            self._canvas.setAuthor(author)
        self._closed = False

        self._x = self.l_margin
        self._y = self.t_margin
        self._family = "Helvetica"
        self._style = ""
        self._size = 10.0
        self._text_color: colors.Color = colors.black
        self._fill_color: colors.Color = colors.HexColor("#C8C8C8")
        self._draw_color: colors.Color = colors.black

    # ===== Geometry =====
    @property
    def content_width(self) -> float:
        return self.page_width - self.l_margin - self.r_margin

    @property
    def page_break_trigger(self) -> float:
        return self.page_height - self.b_margin

    @property
    def usable_height(self) -> float:
        return self.page_break_trigger - self.t_margin

    def will_overflow(self, height: float) -> bool:
        """True when a block of `height` starting at the cursor crosses the bottom margin."""
        return self._y + height > self.page_break_trigger

    def get_x(self) -> float:
        return self._x

    def get_y(self) -> float:
        return self._y

    def set_x(self, x: float) -> None:
        self._x = x

    def set_y(self, y: float) -> None:
        """Move to `y` and back to the left margin."""
        self._x = self.l_margin
        self._y = y

    def set_xy(self, x: float, y: float) -> None:
        self._x = x
        self._y = y

    def ln(self, h: float) -> None:
        self._x = self.l_margin
        self._y += h

    # ===== Pages =====
    def add_page(self) -> None:
        with drawing_errors("start a new page"):
            if self.page_no > 0:
                self._canvas.showPage()
            self.page_no += 1
            # ReportLab resets the graphics state on each page
            self._canvas.setLineWidth(LINE_WIDTH)
            self._canvas.setStrokeColor(self._draw_color)
            self._apply_font()
        self._x = self.l_margin
        self._y = self.t_margin
        logger.debug("Page %d started", self.page_no)

    # ===== Fonts & colours =====
    def set_font(self, family: Optional[str] = None, style: str = "", size: Optional[float] = None) -> None:
        family = family or self._family
        style = "".join(sorted(style.upper().replace("U", ""))) if style else ""
        if family not in FONT_FAMILIES:
            raise MeasurementError(f"Unknown font family: {family}")
        if style not in FONT_FAMILIES[family]:
            raise MeasurementError(f"Unsupported font style {style!r} for {family}")
        self._family = family
        self._style = style
        if size is not None:
            self._size = float(size)
        if self.page_no > 0:
            self._apply_font()

    @property
    def font_name(self) -> str:
        return FONT_FAMILIES[self._family][self._style]

    @property
    def font_style(self) -> str:
        return self._style

    @property
    def font_size(self) -> float:
        return self._size

    def _apply_font(self) -> None:
        with drawing_errors(f"select font {self.font_name}"):
            self._canvas.setFont(self.font_name, self._size)

    def set_text_color(self, color: Color) -> None:
        self._text_color = _to_color(color)

    def set_fill_color(self, color: Color) -> None:
        self._fill_color = _to_color(color)

    def set_draw_color(self, color: Color) -> None:
        self._draw_color = _to_color(color)
        self._canvas.setStrokeColor(self._draw_color)

    # ===== Measuring =====
    def string_width(self, text: str) -> float:
        with drawing_errors(f"measure text in {self.font_name}"):
            return pdfmetrics.stringWidth(text, self.font_name, self._size)

    def split_lines(self, text: str, width: float) -> List[str]:
        """Break `text` into lines that fit `width` (cell padding included).

        Explicit newlines are kept; words wider than the cell are cut by character.
        """
        max_w = max(width - 2 * CELL_MARGIN, 0.0)
        text = (text or "").replace("\r", "")
        lines: List[str] = []
        for paragraph in text.split("\n"):
            line: List[str] = []
            for word in paragraph.split():
                trial = " ".join(line + [word])
                if self.string_width(trial) <= max_w:
                    line.append(word)
                    continue
                if line:
                    lines.append(" ".join(line))
                    line = []
                # single word wider than the cell: hard-break it
                while self.string_width(word) > max_w and len(word) > 1:
                    cut = len(word) - 1
                    while cut > 1 and self.string_width(word[:cut]) > max_w:
                        cut -= 1
                    lines.append(word[:cut])
                    word = word[cut:]
                line = [word]
            lines.append(" ".join(line))
        return lines or [""]

    def measure_multi_cell(self, w: float, line_height: float, text: str) -> float:
        """Height `multi_cell(w, line_height, text)` would take, without drawing."""
        return len(self.split_lines(text, w)) * line_height

    # ===== Drawing =====
    def _rl_y(self, y: float) -> float:
        return self.page_height - y

    def _require_page(self) -> None:
        if self._closed:
            raise MeasurementError("Document already finalized")
        if self.page_no == 0:
            self.add_page()

    def _draw_border(self, x: float, y: float, w: float, h: float, border: Union[bool, int, str]) -> None:
        if not border:
            return
        sides = "LTRB" if border is True or border == 1 else str(border).upper()
        c = self._canvas
        top, bottom = self._rl_y(y), self._rl_y(y + h)
        if "L" in sides:
            c.line(x, top, x, bottom)
        if "T" in sides:
            c.line(x, top, x + w, top)
        if "R" in sides:
            c.line(x + w, top, x + w, bottom)
        if "B" in sides:
            c.line(x, bottom, x + w, bottom)

    def cell(
        self,
        w: float,
        h: float,
        text: str = "",
        border: Union[bool, int, str] = 0,
        ln: int = 0,
        align: str = "L",
        fill: bool = False,
        fill_color: Optional[Color] = None,
    ) -> None:
        """Draw a single-line cell at the cursor.

        ln: 0 moves right, 1 moves to the start of the next line, 2 moves below.
        """
        self._require_page()
        if w == 0:
            w = self.page_width - self.r_margin - self._x
        if self.auto_page_break and self.will_overflow(h) and self._y > self.t_margin:
            x = self._x
            self.add_page()
            self._x = x

        x, y = self._x, self._y
        c = self._canvas
        with drawing_errors("draw cell"):
            if fill:
                c.setFillColor(_to_color(fill_color) if fill_color is not None else self._fill_color)
                c.rect(x, self._rl_y(y + h), w, h, stroke=0, fill=1)
            self._draw_border(x, y, w, h, border)
            if text:
                c.setFillColor(self._text_color)
                baseline = self._rl_y(y + 0.5 * h + 0.3 * self._size)
                a = align.upper()
                if a == "R":
                    c.drawRightString(x + w - CELL_MARGIN, baseline, text)
                elif a == "C":
                    c.drawCentredString(x + w / 2, baseline, text)
                else:
                    c.drawString(x + CELL_MARGIN, baseline, text)

        if ln == 1:
            self._x = self.l_margin
            self._y = y + h
        elif ln == 2:
            self._y = y + h
        else:
            self._x = x + w

    def multi_cell(
        self,
        w: float,
        h: float,
        text: str,
        border: Union[bool, int, str] = 0,
        align: str = "L",
        fill: bool = False,
        fill_color: Optional[Color] = None,
    ) -> float:
        """Draw wrapped text, `h` per line. Returns the height used.

        The cursor ends below the block at the left margin.
        """
        self._require_page()
        if w == 0:
            w = self.page_width - self.r_margin - self._x
        lines = self.split_lines(text, w)
        x = self._x
        sides = "LTRB" if border is True or border == 1 else str(border or "").upper()
        used = 0.0
        for i, line in enumerate(lines):
            line_border = "".join(
                s for s in sides
                if s in "LR" or (s == "T" and i == 0) or (s == "B" and i == len(lines) - 1)
            )
            self._x = x
            self.cell(w, h, line, border=line_border, ln=2, align=align, fill=fill, fill_color=fill_color)
            used += h
        self._x = self.l_margin
        return used

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self._require_page()
        with drawing_errors("draw line"):
            self._canvas.line(x1, self._rl_y(y1), x2, self._rl_y(y2))

    def image(self, path: Union[str, Path], x: float, y: float, w: float, h: float) -> None:
        """Draw an image with its top-left corner at (x, y), keeping its aspect ratio."""
        self._require_page()
        with drawing_errors(f"draw image {path}"):
            self._canvas.drawImage(
                str(path),
                x,
                self._rl_y(y + h),
                width=w,
                height=h,
                preserveAspectRatio=True,
                anchor="nw",
                mask="auto",
            )

    # ===== Output =====
    def output(self) -> bytes:
        """Finalize the document and return its bytes. The canvas is unusable afterwards."""
        self._require_page()
        with drawing_errors("finalize document"):
            self._canvas.save()
        self._closed = True
        return self._buffer.getvalue()
