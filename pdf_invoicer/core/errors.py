from __future__ import annotations

from pathlib import Path
from typing import Optional


class InvoiceError(Exception):
	"""Base class for every failure raised while building an invoice document."""


class ValidationError(InvoiceError, ValueError):
	"""A mandatory field is missing, a number is negative or dates are out of order.

	`field` is the dotted path of the first violated constraint, e.g.
	``client.address.zip_code`` or ``items[2].quantity``.
	"""

	def __init__(self, field: str, message: str) -> None:
		super().__init__(message)
		self.field = field
		self.message = message

	def __str__(self) -> str:
		return f"{self.field}: {self.message}"


class MeasurementError(InvoiceError):
	"""The canvas could not measure or draw something (unknown font, bad geometry...)."""

	def __init__(self, message: str, row: Optional[int] = None) -> None:
		super().__init__(message)
		self.message = message
		self.row = row

	def __str__(self) -> str:
		if self.row is None:
			return self.message
		return f"item row {self.row}: {self.message}"


class OutputError(InvoiceError):
	"""The finished document could not be written to its destination."""

	def __init__(self, path: Path | str, message: str) -> None:
		super().__init__(message)
		self.path = Path(path)
		self.message = message

	def __str__(self) -> str:
		return f"{self.path}: {self.message}"
