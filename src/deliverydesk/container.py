"""Composition root: one place that wires the store, repositories and services."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .config import settings
from .data import CourierRepository, CustomerRepository, DeliveryRepository
from .db.store import ChangeFeed, DataStore, SupabaseChangeFeed, SupabaseStore
from .db.supabase import get_async_supabase_client, get_supabase_client
from .notifications import NotificationCenter
from .services.board import StatusBoard
from .services.postal_code import PostalCodeClient
from .services.tracking import Geocoder, OSRMClient, TrackingService

logger = logging.getLogger(__name__)


@dataclass
class Workspace:
    store: DataStore
    notifier: NotificationCenter
    customers: CustomerRepository
    couriers: CourierRepository
    deliveries: DeliveryRepository
    board: StatusBoard
    tracking: TrackingService
    postal_codes: PostalCodeClient


def build_workspace(
    store: DataStore,
    feed: ChangeFeed,
    *,
    notifier: Optional[NotificationCenter] = None,
    geocoder: Optional[Geocoder] = None,
    router: Optional[OSRMClient] = None,
    postal_codes: Optional[PostalCodeClient] = None,
    geocoder_delay: Optional[float] = None,
) -> Workspace:
    notifier = notifier or NotificationCenter(history=settings.notification_history)
    deliveries = DeliveryRepository(store, notifier)
    return Workspace(
        store=store,
        notifier=notifier,
        customers=CustomerRepository(store, notifier),
        couriers=CourierRepository(store, notifier),
        deliveries=deliveries,
        board=StatusBoard(deliveries, notifier),
        tracking=TrackingService(
            store,
            feed,
            geocoder or Geocoder(),
            router or OSRMClient(),
            delay_seconds=geocoder_delay,
        ),
        postal_codes=postal_codes or PostalCodeClient(),
    )


async def build_supabase_workspace() -> Workspace:
    """Workspace backed by Supabase.

    Raises:
        MissingConfigurationError: if the Supabase URL or key is not set.
    """
    store = SupabaseStore(get_supabase_client())
    feed = SupabaseChangeFeed(await get_async_supabase_client())
    logger.info("Supabase workspace initialised")
    return build_workspace(store, feed)
