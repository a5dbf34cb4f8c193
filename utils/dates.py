"""
utils/dates.py
--------------
Date parsing helpers for values coming from the backend, CSV files and
user commands.
"""

import re
from datetime import date
from typing import Optional

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_optional_date(value) -> Optional[date]:
    """
    Parse 'YYYY-MM-DD' (or an ISO timestamp starting with it) into a date.

    Returns None for empty values. Raises ValueError for anything else that
    is not a valid calendar date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def is_iso_date(text: str) -> bool:
    """True if text is exactly 'YYYY-MM-DD' and names a real calendar day."""
    if not ISO_DATE_RE.match(text):
        return False
    try:
        date.fromisoformat(text)
    except ValueError:
        return False
    return True
