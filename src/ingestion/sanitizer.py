"""
PII sanitizer.

Every parsed row passes through ``sanitize_pii`` before it lands in a bucket:
buyer/recipient identity and address columns are removed outright, and any
column whose name mentions "email" is masked down to its first character and
domain.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Optional

DEFAULT_MASK = "****"

PII_COLUMNS: frozenset[str] = frozenset(
    {
        "buyer-name",
        "recipient-name",
        "ship-name",
        "ship-address-1",
        "ship-address-2",
        "ship-address-3",
        "ship-city",
        "ship-state",
        "ship-postal-code",
        "ship-phone-number",
        "buyer-phone-number",
        "address",
        "name",
        "phone",
    }
)

_EMAIL = re.compile(r"^(.).+(@.+)$", re.DOTALL)


def mask_email(value: Any, mask: str = DEFAULT_MASK) -> Optional[str]:
    """
    Mask the local part of an email address.

    "jane.doe@example.com" -> "j****@example.com". Values that do not look like
    an address (no "@" or a one-character local part) are returned unchanged;
    empty values become None.
    """
    if value is None:
        return None
    s = str(value)
    if not s:
        return None
    return _EMAIL.sub(lambda m: m.group(1) + mask + m.group(2), s)


def sanitize_pii(row: Mapping[str, Any], mask: str = DEFAULT_MASK) -> Dict[str, Any]:
    """Return a sanitized copy of ``row``; the input is never mutated."""
    clean: Dict[str, Any] = {}
    for key, value in row.items():
        if key in PII_COLUMNS:
            continue
        if "email" in key.lower():
            value = mask_email(value, mask)
        clean[key] = value
    return clean
