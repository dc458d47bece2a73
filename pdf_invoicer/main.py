from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pdf_invoicer.core.errors import InvoiceError, ValidationError
from pdf_invoicer.core.settings import Settings, load_settings
from pdf_invoicer.data.export import dump_invoice_json, load_invoice_json
from pdf_invoicer.pdf.pdf_draw import build_invoice_pdf

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_INVALID = 2


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pdf-invoicer", description="Render an invoice JSON file to PDF.")
    p.add_argument("input", type=Path, help="invoice JSON document")
    p.add_argument("-o", "--output", type=Path, help="PDF destination (default: <input>.pdf)")
    p.add_argument("--settings", type=Path, help="settings JSON (created with defaults if missing)")
    p.add_argument("--export-json", type=Path, help="also write the normalised invoice JSON here")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return p


def _configure_logging(settings: Settings, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = _parser().parse_args(argv)
    settings = load_settings(args.settings) if args.settings else Settings()
    _configure_logging(settings, args.verbose)

    out = args.output or args.input.with_suffix(".pdf")
    try:
        invoice = load_invoice_json(args.input)
        build_invoice_pdf(out, invoice, settings)
        if args.export_json:
            dump_invoice_json(invoice, args.export_json)
    except ValidationError as e:
        logger.error("Invalid invoice: %s", e)
        return EXIT_INVALID
    except InvoiceError as e:
        logger.error("Could not build invoice: %s", e)
        return EXIT_FAILURE
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Could not read %s: %s", args.input, e)
        return EXIT_FAILURE
    return 0


if __name__ == "__main__":
    sys.exit(main())
