"""Cached entity repositories."""

from .couriers_repository import CourierRepository
from .customers_repository import CustomerRepository
from .deliveries_repository import DeliveryRepository

__all__ = ["CustomerRepository", "CourierRepository", "DeliveryRepository"]
