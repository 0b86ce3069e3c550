"""Delivery collection joined with customer and courier labels."""

from __future__ import annotations

import dataclasses
from datetime import date
from typing import Any, Callable, Mapping

from ..db.store import DELIVERIES_TABLE, DELIVERY_DETAIL_COLUMNS, DataStore
from ..models.domain import Delivery, DeliveryStatus
from ..notifications import NotificationCenter
from ..services.deadlines import deadline_status, deadline_window
from .base import CachedRepository, clean_str, coerce_float, parse_date, parse_datetime


def _embedded(row: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = row.get(key)
    # PostgREST returns a list when the relationship is ambiguous.
    if isinstance(value, list):
        value = value[0] if value else None
    return value if isinstance(value, Mapping) else {}


def delivery_from_row(row: Mapping[str, Any], today: date) -> Delivery:
    order_date = parse_date(row["order_date"])
    promised_date = parse_date(row["promised_date"])
    if order_date is None or promised_date is None:
        raise ValueError("order_date and promised_date are required")
    status = str(row.get("status") or DeliveryStatus.ORDER_CONFIRMED.value)
    final_delivery_date = parse_date(row.get("final_delivery_date"))
    max_days, elapsed_days = deadline_window(order_date, promised_date, final_delivery_date, today)
    customer = _embedded(row, "customer")
    courier = _embedded(row, "courier")
    return Delivery(
        id=str(row["id"]),
        created_at=parse_datetime(row.get("created_at")),
        order_number=int(row.get("order_number") or 0),
        order_date=order_date,
        promised_date=promised_date,
        customer_id=clean_str(row.get("customer_id")),
        courier_id=clean_str(row.get("courier_id")),
        description=(row.get("description") or "").strip(),
        value=coerce_float(row.get("value")) or 0.0,
        status=status,
        final_delivery_date=final_delivery_date,
        origin=clean_str(row.get("origin")),
        destination=clean_str(row.get("destination")),
        destination_lat=coerce_float(row.get("destination_lat")),
        destination_lng=coerce_float(row.get("destination_lng")),
        tracking_enabled=bool(row.get("tracking_enabled")),
        tracking_code=clean_str(row.get("tracking_code")),
        note=clean_str(row.get("note")),
        user_id=clean_str(row.get("user_id")),
        customer_name=clean_str(customer.get("name")),
        customer_state=clean_str(customer.get("state")),
        customer_postal_code=clean_str(customer.get("postal_code")),
        courier_name=clean_str(courier.get("name")),
        deadline_status=deadline_status(promised_date, status, final_delivery_date, today),
        max_days=max_days,
        elapsed_days=elapsed_days,
    )


class DeliveryRepository(CachedRepository[Delivery]):
    table = DELIVERIES_TABLE
    label = "delivery"
    columns = DELIVERY_DETAIL_COLUMNS

    def __init__(
        self,
        store: DataStore,
        notifier: NotificationCenter,
        today: Callable[[], date] = date.today,
    ) -> None:
        super().__init__(store, notifier)
        self._today = today
        self._server_items: tuple[Delivery, ...] = ()

    def _from_row(self, row: Mapping[str, Any]) -> Delivery:
        return delivery_from_row(row, self._today())

    def _after_refresh(self) -> None:
        self._server_items = self.items

    @property
    def server_items(self) -> tuple[Delivery, ...]:
        """The list as last fetched from the store, without local edits."""
        return self._server_items

    def apply_local(self, delivery_id: str, **changes: Any) -> Delivery:
        """Replace one cached delivery with an edited copy; returns the previous value."""
        previous = self.get(delivery_id)
        updated = dataclasses.replace(previous, **changes)
        updated.deadline_status = deadline_status(
            updated.promised_date, updated.status, updated.final_delivery_date, self._today()
        )
        self.items = tuple(updated if item.id == delivery_id else item for item in self.items)
        return previous

    def restore_server_items(self) -> None:
        self.items = self._server_items

    def search(self, term: str) -> tuple[Delivery, ...]:
        """Match order number substring or customer name, case-insensitively."""
        needle = term.strip()
        if not needle:
            return ()
        lowered = needle.lower()
        return tuple(
            delivery
            for delivery in self.items
            if needle in str(delivery.order_number) or lowered in (delivery.customer_name or "").lower()
        )

    def realized_total(self) -> float:
        return sum(item.value for item in self.items if item.status == DeliveryStatus.DELIVERED)
