"""Courier collection with read-time license status."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from ..db.store import COURIERS_TABLE, DataStore
from ..models.domain import Courier, LicenseStatus
from ..notifications import NotificationCenter
from ..services.deadlines import license_status
from .base import CachedRepository, clean_str, parse_date, parse_datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def courier_from_row(row: Mapping[str, Any], now: datetime) -> Courier:
    expiry = parse_date(row["license_expiry"])
    if expiry is None:
        raise ValueError("license_expiry is empty")
    return Courier(
        id=str(row["id"]),
        created_at=parse_datetime(row.get("created_at")),
        name=(row.get("name") or "").strip(),
        phone=(row.get("phone") or "").strip(),
        email=(row.get("email") or "").strip(),
        vehicle_model=(row.get("vehicle_model") or "").strip(),
        vehicle_plate=(row.get("vehicle_plate") or "").strip(),
        license_number=(row.get("license_number") or "").strip(),
        license_expiry=expiry,
        license_status=license_status(expiry, now),
        user_id=clean_str(row.get("user_id")),
        note=clean_str(row.get("note")),
        registered_on=parse_date(row.get("registered_on")),
    )


class CourierRepository(CachedRepository[Courier]):
    table = COURIERS_TABLE
    label = "courier"

    def __init__(
        self,
        store: DataStore,
        notifier: NotificationCenter,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        super().__init__(store, notifier)
        self._clock = clock

    def _from_row(self, row: Mapping[str, Any]) -> Courier:
        return courier_from_row(row, self._clock())

    def available(self) -> tuple[Courier, ...]:
        """Couriers whose license is within validity, eligible for assignment."""
        return tuple(courier for courier in self.items if courier.license_status == LicenseStatus.VALID)
