"""Helpers and utilities."""

import html
import re
from datetime import datetime
from typing import Optional

import bleach
from pytz import UTC
from unidecode import unidecode

WHITESPACE = re.compile(r'\s+')
NOT_SLUG = re.compile(r'[^a-z0-9]+')


def get_tzaware_utc_now() -> datetime:
    """Generate a datetime for the current moment in UTC."""
    return datetime.now(UTC)


def clean_text(value: Optional[str]) -> Optional[str]:
    """Strip markup and surrounding whitespace from user-provided text."""
    if value is None:
        return None
    cleaned = bleach.clean(value, tags=set(), strip=True)
    return html.unescape(cleaned).strip()


def normalize_name(*parts: object) -> str:
    """
    Normalize a name for duplicate detection.

    Transliterates to ASCII, lower-cases, and collapses whitespace, so that
    ``"  José  Abreu"`` and ``"jose abreu"`` compare equal.
    """
    phrase = ' '.join(str(part) for part in parts if part is not None)
    return WHITESPACE.sub(' ', unidecode(phrase).lower()).strip()


def slugify(*parts: object) -> str:
    """Generate a URL slug, e.g. ``"2025 Topps Chrome"`` -> ``2025-topps-chrome``."""
    phrase = normalize_name(*parts).replace('&', ' and ').replace("'", '')
    return NOT_SLUG.sub('-', phrase).strip('-')
