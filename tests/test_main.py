from __future__ import annotations

from pathlib import Path

from pypdf import PdfReader

from pdf_invoicer.data.export import dump_invoice_json, invoice_to_dict
from pdf_invoicer.main import EXIT_FAILURE, EXIT_INVALID, main


def test_renders_pdf_from_json(tmp_path: Path, make_invoice) -> None:
    src = dump_invoice_json(make_invoice(), tmp_path / "inv.json")
    exported = tmp_path / "copy.json"

    assert main([str(src), "--export-json", str(exported)]) == 0

    out = tmp_path / "inv.pdf"
    assert out.exists()
    assert len(PdfReader(str(out)).pages) == 1
    assert exported.read_text(encoding="utf-8") == src.read_text(encoding="utf-8")


def test_invalid_invoice_exit_code(tmp_path: Path, make_invoice) -> None:
    import json

    data = invoice_to_dict(make_invoice())
    data["items"] = []
    src = tmp_path / "inv.json"
    src.write_text(json.dumps(data), encoding="utf-8")

    assert main([str(src), "-o", str(tmp_path / "out.pdf")]) == EXIT_INVALID
    assert not (tmp_path / "out.pdf").exists()


def test_missing_input(tmp_path: Path) -> None:
    assert main([str(tmp_path / "nope.json")]) == EXIT_FAILURE


def test_settings_file_is_used(tmp_path: Path, make_invoice) -> None:
    src = dump_invoice_json(make_invoice(), tmp_path / "inv.json")
    cfg = tmp_path / "settings.json"
    cfg.write_text('{"currency": "GBP"}', encoding="utf-8")
    out = tmp_path / "gbp.pdf"

    assert main([str(src), "-o", str(out), "--settings", str(cfg)]) == 0
    text = PdfReader(str(out)).pages[0].extract_text() or ""
    assert "605.00 GBP" in text


def test_infinite_amount_is_an_invalid_invoice(tmp_path: Path, make_invoice) -> None:
    import json

    data = invoice_to_dict(make_invoice())
    data["items"][0]["quantity"] = float("inf")
    src = tmp_path / "inv.json"
    src.write_text(json.dumps(data), encoding="utf-8")
    assert "Infinity" in src.read_text(encoding="utf-8")

    assert main([str(src), "-o", str(tmp_path / "out.pdf")]) == EXIT_INVALID
    assert not (tmp_path / "out.pdf").exists()
