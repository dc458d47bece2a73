from __future__ import annotations

import json
from pathlib import Path

from reportlab.lib.pagesizes import A4, LETTER

from pdf_invoicer.core.settings import Settings, load_settings, save_settings


def test_missing_file_writes_defaults(tmp_path: Path) -> None:
    p = tmp_path / "cfg" / "settings.json"
    settings = load_settings(p)
    assert settings == Settings()
    assert json.loads(p.read_text(encoding="utf-8"))["currency"] == "EUR"


def test_unknown_keys_ignored_and_values_merged(tmp_path: Path) -> None:
    p = tmp_path / "settings.json"
    p.write_text(json.dumps({"currency": "USD", "bogus": 1}), encoding="utf-8")
    settings = load_settings(p)
    assert settings.currency == "USD"
    assert settings.date_format == Settings().date_format


def test_corrupt_file_falls_back_without_overwriting(tmp_path: Path) -> None:
    p = tmp_path / "settings.json"
    p.write_text("{not json", encoding="utf-8")
    assert load_settings(p) == Settings()
    assert p.read_text(encoding="utf-8") == "{not json"


def test_save_round_trip(tmp_path: Path) -> None:
    p = tmp_path / "settings.json"
    save_settings(Settings(page_size="LETTER", margin_mm=15), p)
    assert load_settings(p).margin_mm == 15


def test_pagesize_orientation() -> None:
    assert Settings().pagesize() == A4
    w, h = Settings(page_size="letter", orientation="L").pagesize()
    assert (w, h) == (LETTER[1], LETTER[0])
