"""Read-time derived statuses: courier license validity and delivery deadlines.

Nothing here is persisted; callers recompute on every read so the values never
drift from the stored dates.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timezone
from typing import Optional

from ..models.domain import DeadlineStatus, DeliveryStatus, LicenseStatus


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def license_status(expiry: date | datetime, now: Optional[datetime] = None) -> LicenseStatus:
    """Expired iff the expiry instant is strictly before ``now``."""

    current = _as_datetime(now or datetime.now(timezone.utc))
    if _as_datetime(expiry) < current:
        return LicenseStatus.EXPIRED
    return LicenseStatus.VALID


def days_between(start: date, end: date) -> int:
    """Whole days from ``start`` to ``end``, rounded up."""

    seconds = (_as_datetime(end) - _as_datetime(start)).total_seconds()
    return math.ceil(seconds / 86400)


def deadline_status(
    promised_date: date,
    status: str,
    final_delivery_date: Optional[date] = None,
    today: Optional[date] = None,
) -> DeadlineStatus:
    reference_day = today or date.today()
    if status == DeliveryStatus.DELIVERED:
        delivered_on = final_delivery_date or reference_day
        if delivered_on <= promised_date:
            return DeadlineStatus.DELIVERED_ON_TIME
        return DeadlineStatus.DELIVERED_LATE
    if reference_day <= promised_date:
        return DeadlineStatus.ON_TIME
    return DeadlineStatus.LATE


def deadline_window(
    order_date: date,
    promised_date: date,
    final_delivery_date: Optional[date] = None,
    today: Optional[date] = None,
) -> tuple[int, int]:
    """Return (max_days, elapsed_days) for a delivery."""

    reference_day = final_delivery_date or today or date.today()
    return days_between(order_date, promised_date), days_between(order_date, reference_day)
