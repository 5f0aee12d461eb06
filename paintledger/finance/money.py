# paintledger/finance/money.py
"""Numeric coercion, validation and rounding helpers.

Every figure is carried as a float at full precision through a calculation
and only rounded (``round_money``) when it leaves the core, so rounding error
never compounds.
"""

from __future__ import annotations

import math

from .errors import ValidationError

MONEY_PLACES = 2


def to_number(value, field: str, default: float | None = None) -> float:
    """Coerce ``value`` to a finite float or raise ``ValidationError``.

    ``None`` (and the empty string) fall back to ``default`` when one is given.
    Booleans are rejected: ``True`` is never a quantity.
    """
    if value is None or value == '':
        if default is None:
            raise ValidationError(field, 'is required')
        return float(default)
    if isinstance(value, bool):
        raise ValidationError(field, 'must be a number')
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(field, f'must be a number, got {value!r}') from None
    if not math.isfinite(number):
        raise ValidationError(field, 'must be a finite number')
    return number


def non_negative(value, field: str, default: float | None = None) -> float:
    number = to_number(value, field, default)
    if number < 0:
        raise ValidationError(field, f'must be >= 0, got {number:g}')
    return number


def percentage(value, field: str, default: float | None = None) -> float:
    """A percentage in the closed range [0, 100]."""
    number = to_number(value, field, default)
    if number < 0 or number > 100:
        raise ValidationError(field, f'must be between 0 and 100, got {number:g}')
    return number


def safe_pct(part: float, whole: float) -> float:
    """``part`` as a percentage of ``whole``; 0 when ``whole`` is not positive."""
    if whole <= 0:
        return 0.0
    return part * 100 / whole


def round_money(value: float | None) -> float | None:
    if value is None:
        return None
    # normalise -0.0 so serialised output never shows "-0.0"
    return round(value, MONEY_PLACES) + 0.0


def to_id(value, field: str) -> int:
    """A positive integer record id, as sent in a request body or query string."""
    if isinstance(value, bool):
        raise ValidationError(field, 'must be an id')
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        if not (text.isascii() and text.isdigit()):
            raise ValidationError(field, f'must be an id, got {value!r}')
        number = int(text)
    if number < 1:
        raise ValidationError(field, f'must be an id, got {value!r}')
    return number
