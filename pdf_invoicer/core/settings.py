from __future__ import annotations

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json
import logging

from reportlab.lib.pagesizes import A4, LETTER, landscape, portrait

from pdf_invoicer.core.paths import settings_path

logger = logging.getLogger(__name__)

PAGE_SIZES = {"A4": A4, "LETTER": LETTER}


@dataclass
class Settings:
	# Currency suffix printed after every amount
	currency: str = "EUR"
	date_format: str = "%d/%m/%Y"
	page_size: str = "A4"
	# "P" portrait or "L" landscape
	orientation: str = "P"
	font_family: str = "Helvetica"
	margin_mm: float = 10.0
	# Distance from the page bottom at which a page break is triggered
	bottom_margin_mm: float = 10.0
	# Height of one wrapped line inside a table cell
	line_height_mm: float = 7.0
	author: str = "pdf-invoicer"
	log_level: str = "INFO"

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "Settings":
		# Merge provided values over defaults, ignore unknown keys
		defaults = asdict(cls())
		merged: Dict[str, Any] = {**defaults, **{k: v for k, v in data.items() if k in defaults}}
		return cls(**merged)

	def to_dict(self) -> Dict[str, Any]:
		return asdict(self)

	def pagesize(self) -> tuple[float, float]:
		"""Page size in points, oriented."""
		size = PAGE_SIZES.get(self.page_size.upper(), A4)
		return landscape(size) if self.orientation.upper() == "L" else portrait(size)


def _coerce_path(path: Optional[Union[str, Path]]) -> Path:
	return Path(path) if path is not None else settings_path()


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
	"""
	Load settings from JSON (UTF-8). If the file is missing, write defaults and return them.
	"""
	p = _coerce_path(path)
	if not p.exists():
		settings = Settings()
		save_settings(settings, p)
		return settings

	try:
		with p.open("r", encoding="utf-8") as f:
			raw: Dict[str, Any] = json.load(f)
	except (json.JSONDecodeError, OSError):
		# If unreadable/corrupt, fall back to defaults (do not overwrite automatically)
		logger.warning("Settings file %s is unreadable; using defaults", p)
		return Settings()

	return Settings.from_dict(raw if isinstance(raw, dict) else {})


def save_settings(settings: Settings, path: Optional[Union[str, Path]] = None) -> None:
	"""Save settings to JSON (UTF-8), creating parent dirs if needed."""
	p = _coerce_path(path)
	p.parent.mkdir(parents=True, exist_ok=True)
	# Pretty JSON, keep Unicode
	tmp = p.with_suffix(p.suffix + ".tmp")
	with tmp.open("w", encoding="utf-8", newline="\n") as f:
		json.dump(settings.to_dict(), f, indent=2, ensure_ascii=False)
		f.write("\n")
	tmp.replace(p)
