# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

"""Coercion of opaque CRM field values into the types helpers work with."""

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any, List

_DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
)


def is_empty(value: Any) -> bool:
    """True for None and whitespace-only strings."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def to_float(value: Any) -> float:
    """Convert a field value to float.

    Raises:
        ValueError: If the value is not numeric or not finite (inf, nan).
    """
    if isinstance(value, bool):
        raise ValueError(f"cannot convert boolean {value} to a number")
    try:
        if isinstance(value, (int, float, Decimal)):
            result = float(value)
        elif isinstance(value, str):
            result = float(value.strip().replace(",", ""))
        else:
            raise ValueError(f"cannot convert {type(value).__name__} to a number")
    except OverflowError:
        raise ValueError(f"number is out of range: {value}") from None
    if not math.isfinite(result):
        raise ValueError(f"cannot convert '{value}' to a finite number")
    return result


def to_string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [as_text(item) for item in value]


def parse_date(value: Any) -> datetime:
    """Parse a date-like field value.

    Accepts datetime/date objects, ISO 8601 strings (including a trailing "Z")
    and a handful of common US and long-form layouts.

    Raises:
        ValueError: If no known layout matches.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    text = as_text(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ValueError(f"unrecognized date format: {text}")


def format_number(value: float, decimal_places: int = 2) -> str:
    """Render integral values without decimals, others with fixed places."""
    if not math.isfinite(value):
        raise ValueError(f"cannot format non-finite value {value}")
    if value == math.trunc(value):
        return str(int(value))
    return f"{value:.{decimal_places}f}"


def round_half_away(value: float, decimal_places: int) -> float:
    """Round half away from zero (as CRMs and spreadsheets do).

    Values whose scaled magnitude is past float precision already carry no
    digits beyond ``decimal_places`` and come back unchanged.
    """
    if not math.isfinite(value):
        raise ValueError(f"cannot round non-finite value {value}")
    try:
        factor = 10.0**decimal_places
        scaled = abs(value) * factor
    except OverflowError:
        return value
    if not math.isfinite(scaled) or scaled >= 2**52:
        return value
    return math.copysign(math.floor(scaled + 0.5) / factor, value)
