from __future__ import annotations

import os
from pathlib import Path


SETTINGS_ENV = "PDF_INVOICER_SETTINGS"


def base_path() -> Path:
    """Return the project root (…/pdf-invoicer), where bundled assets live."""
    return Path(__file__).resolve().parents[2]


def resource_path(rel: str | Path) -> Path:
    """Resolve a resource path (e.g., 'assets/fonts/NotoSans-Regular.ttf')."""
    rel = Path(rel)
    return base_path() / rel


def user_writable_dir() -> Path:
    """Directory suitable for user-writable files (like settings.json).

    Uses the current working directory so that a project-local config wins.
    """
    return Path.cwd()


def settings_path() -> Path:
    """Location for the settings JSON; PDF_INVOICER_SETTINGS overrides it."""
    override = os.environ.get(SETTINGS_ENV)
    if override:
        return Path(override)
    return user_writable_dir() / "pdf_invoicer.json"
