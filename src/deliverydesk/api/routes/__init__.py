"""Route group exports."""

from . import auth, board, couriers, customers, dashboard, deliveries, health, notifications, postal_codes, tracking

__all__ = [
    "auth",
    "board",
    "couriers",
    "customers",
    "dashboard",
    "deliveries",
    "health",
    "notifications",
    "postal_codes",
    "tracking",
]
