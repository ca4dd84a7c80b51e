"""
Value coercion for raw export cells.

Keep these pure (input -> output), so they're easy to test. Every helper is
total: malformed input yields a neutral value (``None`` or zero) instead of
raising, because row-level problems never fail an ingest call.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional, Sequence

from dateutil import parser as date_parser

_WS = re.compile(r"\s+")
_CURRENCY_NOISE = re.compile(r"[₹$€£,]")
_PARENS_NEGATIVE = re.compile(r"^\(.*\)$")
_DIGITS_ONLY = re.compile(r"^\d{6}$|^\d{8}$")
_US_SLASH_DATE = re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$")

# Two-digit years at or below the pivot belong to the 2000s.
YEAR_PIVOT = 50

# Distinct in year, month and day; see _parse_free_form.
_DEFAULT_A = datetime(2000, 1, 1)
_DEFAULT_B = datetime(2001, 2, 2)


def strip_or_none(x: Any) -> Optional[str]:
    if x is None:
        return None
    s = str(x).strip()
    return s if s else None


def is_blank(x: Any) -> bool:
    return strip_or_none(x) is None


def first_present(row: Mapping[str, Any], keys: Sequence[str]) -> Optional[str]:
    """Return the first non-blank value among ``keys``, stripped."""
    for key in keys:
        value = strip_or_none(row.get(key))
        if value is not None:
            return value
    return None


def safe_int(x: Any) -> Optional[int]:
    s = strip_or_none(x)
    if s is None:
        return None
    try:
        return int(Decimal(s.replace(",", "")))
    except (InvalidOperation, ValueError):
        return None


def to_amount(x: Any) -> Decimal:
    """
    Coerce a money cell to Decimal.

    Handles:
    - "1,234.50" -> 1234.50
    - "₹ 999" -> 999
    - "(250.00)" -> -250.00 (accounting negative)
    - "", None, "n/a" -> 0
    """
    if x is None:
        return Decimal("0")
    if isinstance(x, Decimal):
        return x
    if isinstance(x, (int, float)):
        return Decimal(str(x))

    s = _WS.sub("", _CURRENCY_NOISE.sub("", str(x).strip()))
    if not s:
        return Decimal("0")

    negative = bool(_PARENS_NEGATIVE.match(s))
    s = s.replace("(", "").replace(")", "")
    try:
        value = Decimal(s)
    except InvalidOperation:
        return Decimal("0")
    if not value.is_finite():
        return Decimal("0")
    return -value if negative else value


def parse_timestamp(x: Any) -> Optional[datetime]:
    """
    Best-effort timestamp parsing. Returns an aware UTC datetime or None.

    Supported, in order:
    - MMDDYYYY and MMDDYY (two-digit years pivot at 50)
    - ISO 8601 with or without time / offset ("2025-08-01", "2025-08-01T10:00:00Z")
    - MM/DD/YYYY
    - anything dateutil understands that names a full date
      ("Aug 1, 2025 10:00:00 AM PDT"); bare times and partial dates ("10:30",
      "Aug 1") are None, never dated from the clock
    """
    if isinstance(x, datetime):
        return _as_utc(x)

    s = strip_or_none(x)
    if not s:
        return None

    # Compact digit dates are month-first; check them before ISO, which would
    # read eight digits as YYYYMMDD.
    if _DIGITS_ONLY.match(s):
        return _parse_compact_date(s)

    try:
        return _as_utc(datetime.fromisoformat(s.replace("Z", "+00:00")))
    except ValueError:
        pass

    if _US_SLASH_DATE.match(s):
        try:
            return _as_utc(datetime.strptime(s, "%m/%d/%Y"))
        except ValueError:
            return None

    return _parse_free_form(s)


def _parse_free_form(s: str) -> Optional[datetime]:
    # dateutil fills missing date parts from its default (today unless given).
    # Parsing against two different defaults exposes any part that was
    # filled in, and such values are rejected.
    try:
        first = date_parser.parse(s, default=_DEFAULT_A)
        second = date_parser.parse(s, default=_DEFAULT_B)
    except (ValueError, OverflowError):
        return None
    if first.date() != second.date():
        return None
    return _as_utc(first)


def _parse_compact_date(s: str) -> Optional[datetime]:
    month, day, year = s[0:2], s[2:4], s[4:]
    if len(year) == 2:
        century = "20" if int(year) <= YEAR_PIVOT else "19"
        year = century + year
    try:
        return datetime(int(year), int(month), int(day), tzinfo=timezone.utc)
    except ValueError:
        return None


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
