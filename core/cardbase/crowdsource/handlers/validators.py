"""Reusable validators for proposed fields."""

import re
from datetime import date, datetime
from typing import Any, Iterable, List, Optional

from dateutil.parser import isoparse

from ..exceptions import ValidationError
from ..domain.util import clean_text

HEX_COLOR = re.compile(r'^#[0-9A-Fa-f]{6}$')


def text(name: str, value: Any, min_length: int = 0,
         max_length: Optional[int] = None) -> str:
    """
    Clean a free-text value and verify its length.

    Parameters
    ----------
    name : str
        Name of the field, for error messages.
    value : object
    min_length : int
    max_length : int

    Returns
    -------
    str
        The value, with markup and surrounding whitespace removed.

    Raises
    ------
    :class:`.ValidationError`
        Raised if the value is not a string, or is too short or too long.

    """
    if not isinstance(value, str):
        raise ValidationError('Must be a string', name)
    value = clean_text(value)
    if len(value) < min_length:
        if min_length == 1:
            raise ValidationError('Is required', name)
        raise ValidationError(f'Must be at least {min_length} characters',
                              name)
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f'Must be at most {max_length} characters',
                              name)
    return value


def integer(name: str, value: Any, min_value: Optional[int] = None,
            max_value: Optional[int] = None) -> int:
    """Verify that ``value`` is an integer within bounds."""
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    # bool is a subclass of int, but True is not a card count.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError('Must be an integer', name)
    if min_value is not None and value < min_value:
        raise ValidationError(f'Must be at least {min_value}', name)
    if max_value is not None and value > max_value:
        raise ValidationError(f'Must be at most {max_value}', name)
    return value


def boolean(name: str, value: Any) -> bool:
    """Verify that ``value`` is a boolean."""
    if not isinstance(value, bool):
        raise ValidationError('Must be true or false', name)
    return value


def iso_date(name: str, value: Any) -> date:
    """Parse an ISO-8601 date (``YYYY-MM-DD``)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError('Must be an ISO-8601 date', name)
    try:
        return isoparse(value.strip()).date()
    except ValueError as e:
        raise ValidationError('Must be an ISO-8601 date', name) from e


def integer_list(name: str, value: Any, min_value: int = 1) -> List[int]:
    """Verify that ``value`` is a list of integers, and drop repeats."""
    if not isinstance(value, (list, tuple)):
        raise ValidationError('Must be a list of integers', name)
    values: List[int] = []
    for item in value:
        item = integer(name, item, min_value=min_value)
        if item not in values:
            values.append(item)
    return values


def one_of(name: str, value: Any, choices: Iterable[str]) -> str:
    """Verify that ``value`` is one of the allowed ``choices``."""
    choices = list(choices)
    if value not in choices:
        raise ValidationError(f'Must be one of {", ".join(choices)}', name)
    return value


def hex_color(name: str, value: Any) -> str:
    """Verify that ``value`` is a hex color, like ``#0C2340``."""
    if not isinstance(value, str) or not HEX_COLOR.match(value.strip()):
        raise ValidationError('Invalid hex color format', name)
    return value.strip()
