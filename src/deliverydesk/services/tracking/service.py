"""Live tracking of shipped, tracking-enabled deliveries."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from datetime import date
from typing import Any, Awaitable, Callable, Mapping, Optional

import httpx
from fastapi.concurrency import run_in_threadpool

from ...config import settings
from ...data.base import coerce_float, parse_datetime
from ...data.deliveries_repository import delivery_from_row
from ...db.store import (
    COURIERS_TABLE,
    DELIVERIES_TABLE,
    DELIVERY_DETAIL_COLUMNS,
    TRACKING_TABLE,
    ChangeEvent,
    ChangeFeed,
    DataStore,
    Subscription,
)
from ...errors import RemoteStoreError
from ...models.domain import Delivery, DeliveryStatus, TrackingPing
from .geocoding import Coordinates, Geocoder
from .map_state import RouteOverlay, RouteRequest, TrackingMap
from .osrm_client import OSRMClient

logger = logging.getLogger(__name__)


def ping_from_row(row: Mapping[str, Any]) -> TrackingPing:
    latitude = coerce_float(row.get("courier_lat"))
    longitude = coerce_float(row.get("courier_lng"))
    if row.get("delivery_id") is None or latitude is None or longitude is None:
        raise ValueError(f"Incomplete tracking row: {dict(row)}")
    return TrackingPing(
        delivery_id=str(row["delivery_id"]),
        latitude=latitude,
        longitude=longitude,
        timestamp=parse_datetime(row.get("timestamp")),
    )


class TrackingService:
    """Keeps the tracking map in sync with the store and its change feed.

    Every change on the deliveries table re-runs the full load. Tracking inserts
    only move the matching courier marker. Loads are not sequenced, so a slow
    load may overwrite a position pushed while it was running.
    """

    def __init__(
        self,
        store: DataStore,
        feed: ChangeFeed,
        geocoder: Geocoder,
        router: OSRMClient,
        delay_seconds: float | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._feed = feed
        self._geocoder = geocoder
        self._router = router
        self._delay = delay_seconds if delay_seconds is not None else settings.geocoder_delay_seconds
        self._sleep = sleep
        self._today = today

        self.deliveries: tuple[Delivery, ...] = ()
        self.couriers: tuple[dict, ...] = ()
        self.positions: dict[str, TrackingPing] = {}
        self.geocoded: dict[str, Coordinates] = {}
        self.courier_filter: Optional[str] = None
        self.map = TrackingMap()
        self.loading = False

        self._subscriptions: list[Subscription] = []
        self._tasks: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return bool(self._subscriptions)

    def visible_deliveries(self) -> list[Delivery]:
        if self.courier_filter is None:
            return list(self.deliveries)
        return [d for d in self.deliveries if d.courier_id == self.courier_filter]

    def active_couriers(self) -> list[dict]:
        """Couriers with at least one tracked delivery, with their counts."""

        counts = Counter(d.courier_id for d in self.deliveries if d.courier_id)
        return [
            {"id": courier["id"], "name": courier["name"], "active": counts[courier["id"]]}
            for courier in self.couriers
            if counts[courier["id"]] > 0
        ]

    async def refresh(self) -> None:
        """Reload tracked deliveries, their last positions and missing coordinates."""

        self.loading = True
        try:
            await self._load()
        finally:
            self.loading = False

    async def _load(self) -> None:
        try:
            rows = await run_in_threadpool(
                self._store.select,
                DELIVERIES_TABLE,
                DELIVERY_DETAIL_COLUMNS,
                {"tracking_enabled": True, "status": DeliveryStatus.SHIPPED.value},
            )
            courier_rows = await run_in_threadpool(self._store.select, COURIERS_TABLE, "id, name", None, "name")
        except RemoteStoreError as exc:
            logger.error(f"Tracking load failed: {exc}")
            return

        today = self._today()
        deliveries = []
        for row in rows:
            try:
                deliveries.append(delivery_from_row(row, today))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning(f"Skipping malformed tracked delivery {row.get('id')}: {exc}")
        self.deliveries = tuple(deliveries)
        self.couriers = tuple(
            {"id": str(row["id"]), "name": row.get("name") or ""} for row in courier_rows if row.get("id") is not None
        )
        logger.info(f"Loaded {len(deliveries)} tracked deliveries")
        tracked = {delivery.id for delivery in deliveries}
        self.positions = {key: ping for key, ping in self.positions.items() if key in tracked}

        for delivery in deliveries:
            await self._load_last_position(delivery.id)
            if delivery.origin:
                await self._ensure_geocoded(delivery.origin)
            if delivery.destination and (delivery.destination_lat is None or delivery.destination_lng is None):
                await self._ensure_geocoded(delivery.destination)

        await self.render()

    async def _load_last_position(self, delivery_id: str) -> None:
        try:
            rows = await run_in_threadpool(
                self._store.select,
                TRACKING_TABLE,
                "*",
                {"delivery_id": delivery_id},
                "timestamp",
                True,
                1,
            )
        except RemoteStoreError as exc:
            logger.warning(f"Could not load last position for delivery {delivery_id}: {exc}")
            return
        if rows:
            try:
                self.positions[delivery_id] = ping_from_row(rows[0])
            except ValueError as exc:
                logger.warning(str(exc))

    async def _ensure_geocoded(self, address: str) -> None:
        if address in self.geocoded:
            return
        coordinates = await run_in_threadpool(self._geocoder.geocode, address)
        if coordinates is not None:
            self.geocoded[address] = coordinates
        else:
            logger.warning(f"Could not geocode '{address}', marker skipped")
        await self._sleep(self._delay)

    async def render(self) -> None:
        pending = self.map.sync(self.visible_deliveries(), self.positions, self.geocoded)
        for request in pending:
            overlay = await self._fetch_route(request)
            if overlay is not None:
                self.map.attach_route(overlay)

    async def _fetch_route(self, request: RouteRequest) -> Optional[RouteOverlay]:
        try:
            path = await run_in_threadpool(
                self._router.route,
                (request.origin.lat, request.origin.lng),
                (request.destination.lat, request.destination.lng),
            )
        except (httpx.HTTPError, ConnectionError, ValueError) as exc:
            logger.warning(f"Route unavailable for delivery {request.delivery_id}: {exc}")
            return None
        return RouteOverlay(
            delivery_id=request.delivery_id,
            coordinates=path.coordinates,
            distance_m=path.distance_m,
            duration_s=path.duration_s,
        )

    async def handle_ping(self, event: ChangeEvent) -> None:
        ping = ping_from_row(event.record)
        self.positions[ping.delivery_id] = ping
        await self.render()

    async def handle_delivery_change(self, event: ChangeEvent) -> None:
        logger.debug(f"Delivery {event.type} received, reloading tracking")
        await self.refresh()

    async def set_courier_filter(self, courier_id: Optional[str]) -> None:
        self.courier_filter = courier_id or None
        await self.render()

    async def _consume(self, subscription: Subscription, handler: Callable[[ChangeEvent], Awaitable[None]]) -> None:
        async for event in subscription:
            try:
                await handler(event)
            except Exception as exc:
                logger.exception(f"Failed to apply {subscription.table} change: {exc}")

    async def start(self) -> None:
        """Subscribe to the change feed, then load in the background."""

        if self.running:
            return
        pings = await self._feed.subscribe(TRACKING_TABLE, "INSERT")
        changes = await self._feed.subscribe(DELIVERIES_TABLE, "*")
        self._subscriptions = [pings, changes]
        self._tasks = [
            asyncio.create_task(self._consume(pings, self.handle_ping)),
            asyncio.create_task(self._consume(changes, self.handle_delivery_change)),
            asyncio.create_task(self.refresh()),
        ]
        logger.info("Tracking service started")

    async def stop(self) -> None:
        for subscription in self._subscriptions:
            await subscription.close()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._subscriptions = []
        self._tasks = []
        logger.info("Tracking service stopped")

    def snapshot(self) -> dict:
        visible = self.visible_deliveries()
        return {
            "courier_filter": self.courier_filter,
            "loading": self.loading,
            "deliveries": visible,
            "couriers": self.active_couriers(),
            "positions": [self.positions[d.id] for d in visible if d.id in self.positions],
            "markers": self.map.all_markers(),
            "routes": list(self.map.routes.values()),
            "bounds": self.map.bounds,
        }
