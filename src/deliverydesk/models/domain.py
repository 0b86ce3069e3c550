"""Domain models for customers, couriers, deliveries and tracking pings."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional


class DeliveryStatus(str, Enum):
    ORDER_CONFIRMED = "order_confirmed"
    READY_TO_SHIP = "ready_to_ship"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    DELIVERY_FAILED = "delivery_failed"
    RETURNED_TO_SENDER = "returned_to_sender"
    DAMAGED = "damaged"
    LOST = "lost"


PROBLEM_STATUSES: frozenset[str] = frozenset(
    {
        DeliveryStatus.DELIVERY_FAILED.value,
        DeliveryStatus.RETURNED_TO_SENDER.value,
        DeliveryStatus.DAMAGED.value,
        DeliveryStatus.LOST.value,
    }
)

STATUS_LABELS: dict[str, str] = {
    DeliveryStatus.ORDER_CONFIRMED.value: "Order Confirmed",
    DeliveryStatus.READY_TO_SHIP.value: "Ready to Ship",
    DeliveryStatus.SHIPPED.value: "Shipped",
    DeliveryStatus.DELIVERED.value: "Delivered",
    DeliveryStatus.DELIVERY_FAILED.value: "Delivery Failed",
    DeliveryStatus.RETURNED_TO_SENDER.value: "Returned to Sender",
    DeliveryStatus.DAMAGED.value: "Damaged",
    DeliveryStatus.LOST.value: "Lost",
}


class DeadlineStatus(str, Enum):
    ON_TIME = "on_time"
    LATE = "late"
    DELIVERED_ON_TIME = "delivered_on_time"
    DELIVERED_LATE = "delivered_late"


class LicenseStatus(str, Enum):
    VALID = "valid"
    EXPIRED = "expired"


@dataclass(slots=True)
class Customer:
    """A customer account, either an individual (CPF) or a company (CNPJ)."""

    id: str
    created_at: Optional[datetime]
    name: str
    phone: str
    email: str
    address: str
    city: str
    state: str
    postal_code: str
    user_id: Optional[str] = None
    cpf: Optional[str] = None
    cnpj: Optional[str] = None
    complement: Optional[str] = None
    note: Optional[str] = None
    registered_on: Optional[date] = None


@dataclass(slots=True)
class Courier:
    """A driver and vehicle eligible for delivery assignment."""

    id: str
    created_at: Optional[datetime]
    name: str
    phone: str
    email: str
    vehicle_model: str
    vehicle_plate: str
    license_number: str
    license_expiry: date
    license_status: LicenseStatus = LicenseStatus.VALID
    user_id: Optional[str] = None
    note: Optional[str] = None
    registered_on: Optional[date] = None


@dataclass(slots=True)
class Delivery:
    """An order in transit, joined with its customer and courier labels.

    ``status`` is kept as the raw stored string so that unknown values survive a
    round trip; compare it against ``DeliveryStatus`` members.
    """

    id: str
    created_at: Optional[datetime]
    order_number: int
    order_date: date
    promised_date: date
    customer_id: Optional[str]
    courier_id: Optional[str]
    description: str
    value: float
    status: str
    final_delivery_date: Optional[date] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    destination_lat: Optional[float] = None
    destination_lng: Optional[float] = None
    tracking_enabled: bool = False
    tracking_code: Optional[str] = None
    note: Optional[str] = None
    user_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_state: Optional[str] = None
    customer_postal_code: Optional[str] = None
    courier_name: Optional[str] = None
    deadline_status: Optional[DeadlineStatus] = None
    max_days: Optional[int] = None
    elapsed_days: Optional[int] = None


@dataclass(slots=True)
class TrackingPing:
    """A single timestamped courier position sample."""

    delivery_id: str
    latitude: float
    longitude: float
    timestamp: Optional[datetime] = None
