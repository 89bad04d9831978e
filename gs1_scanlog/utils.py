"""
Utility helpers for the scan log UI and exports.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union

from dateutil.relativedelta import relativedelta


VALID = "Valid"
NEAR_EXPIRY = "Near Expiry"
EXPIRED = "Expired"
UNKNOWN = "Unknown"


def parse_ddmmyyyy(value: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.strptime(value[:10], "%d/%m/%Y")
    except ValueError:
        return None


def expiry_status(
    expiry_date: Union[str, date, None],
    near_months: int,
    today: Optional[date] = None,
) -> str:
    """
    Returns: Valid, Near Expiry, Expired, Unknown

    ``expiry_date`` is a date or a DD/MM/YYYY string (a trailing marker
    such as " (EXPIRED)" is ignored).
    """
    if isinstance(expiry_date, datetime):
        expiry = expiry_date.date()
    elif isinstance(expiry_date, date):
        expiry = expiry_date
    else:
        dt = parse_ddmmyyyy(expiry_date or "")
        if not dt:
            return UNKNOWN
        expiry = dt.date()

    today = today or date.today()
    if expiry < today:
        return EXPIRED
    threshold = today + relativedelta(months=near_months)
    if expiry <= threshold:
        return NEAR_EXPIRY
    return VALID


def timestamp_slug(now: Optional[datetime] = None) -> str:
    """Timestamp for export file names."""
    return (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
