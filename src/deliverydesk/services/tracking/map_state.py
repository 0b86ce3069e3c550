"""Marker, route and viewport state of the live tracking map."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Optional, Sequence

from shapely.geometry import MultiPoint

from ...models.domain import Delivery, TrackingPing
from .geocoding import Coordinates

logger = logging.getLogger(__name__)

ORIGIN = "origin"
DRIVER = "driver"
DESTINATION = "destination"

BOUNDS_PADDING = 0.1


def format_distance(meters: float) -> str:
    return f"{meters / 1000:.1f} km"


def format_duration(seconds: float) -> str:
    minutes = round(seconds / 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}min"
    return f"{minutes}min"


@dataclass(slots=True)
class Marker:
    kind: str
    delivery_id: str
    lat: float
    lng: float
    label: str
    updated_at: Optional[datetime] = None


@dataclass(slots=True)
class RouteOverlay:
    delivery_id: str
    coordinates: list[tuple[float, float]]
    distance_m: float
    duration_s: float

    @property
    def distance_label(self) -> str:
        return format_distance(self.distance_m)

    @property
    def duration_label(self) -> str:
        return format_duration(self.duration_s)


@dataclass(frozen=True, slots=True)
class RouteRequest:
    delivery_id: str
    origin: Coordinates
    destination: Coordinates


@dataclass(frozen=True, slots=True)
class Bounds:
    south: float
    west: float
    north: float
    east: float


def fit_bounds(points: Sequence[tuple[float, float]], padding: float = BOUNDS_PADDING) -> Optional[Bounds]:
    """Bounding box of (lat, lng) points, grown by ``padding`` of its size on each side."""

    if not points:
        return None
    # shapely works in (x, y) = (lng, lat)
    west, south, east, north = MultiPoint([(lng, lat) for lat, lng in points]).bounds
    lat_pad = (north - south) * padding
    lng_pad = (east - west) * padding
    return Bounds(south=south - lat_pad, west=west - lng_pad, north=north + lat_pad, east=east + lng_pad)


@dataclass
class TrackingMap:
    """Per-delivery markers keyed by kind, plus at most one route per delivery.

    Driver markers are moved in place. Routes are computed once per delivery and
    never redrawn while the delivery stays on the map.
    """

    markers: dict[str, dict[str, Marker]] = field(default_factory=dict)
    routes: dict[str, RouteOverlay] = field(default_factory=dict)
    bounds: Optional[Bounds] = None

    def _marker_keys(self) -> set[tuple[str, str]]:
        return {(delivery_id, kind) for delivery_id, slots in self.markers.items() for kind in slots}

    def all_markers(self) -> list[Marker]:
        return [marker for slots in self.markers.values() for marker in slots.values()]

    def sync(
        self,
        deliveries: Sequence[Delivery],
        positions: Mapping[str, TrackingPing],
        geocoded: Mapping[str, Coordinates],
    ) -> list[RouteRequest]:
        """Reconcile markers with the visible deliveries.

        Returns the routes that still need to be fetched.
        """

        before = self._marker_keys()
        visible = {delivery.id for delivery in deliveries}
        for delivery_id in [key for key in self.markers if key not in visible]:
            del self.markers[delivery_id]
        for delivery_id in [key for key in self.routes if key not in visible]:
            del self.routes[delivery_id]

        pending: list[RouteRequest] = []
        for delivery in deliveries:
            slots = self.markers.setdefault(delivery.id, {})
            ping = positions.get(delivery.id)
            origin = self._origin(delivery, ping, geocoded)
            destination = self._destination(delivery, geocoded)

            if ping is None:
                if origin is not None and ORIGIN not in slots:
                    slots[ORIGIN] = Marker(
                        kind=ORIGIN,
                        delivery_id=delivery.id,
                        lat=origin.lat,
                        lng=origin.lng,
                        label=f"Origin: {delivery.origin}",
                    )
            else:
                slots.pop(ORIGIN, None)
                driver = slots.get(DRIVER)
                if driver is None:
                    slots[DRIVER] = Marker(
                        kind=DRIVER,
                        delivery_id=delivery.id,
                        lat=ping.latitude,
                        lng=ping.longitude,
                        label=f"{delivery.courier_name or 'Courier'} | Order {delivery.order_number}",
                        updated_at=ping.timestamp,
                    )
                else:
                    driver.lat = ping.latitude
                    driver.lng = ping.longitude
                    driver.updated_at = ping.timestamp

            if destination is not None and DESTINATION not in slots:
                slots[DESTINATION] = Marker(
                    kind=DESTINATION,
                    delivery_id=delivery.id,
                    lat=destination.lat,
                    lng=destination.lng,
                    label=f"Destination: {delivery.destination or ''}",
                )

            if not slots:
                del self.markers[delivery.id]

            if origin is not None and destination is not None and delivery.id not in self.routes:
                pending.append(RouteRequest(delivery_id=delivery.id, origin=origin, destination=destination))

        if self._marker_keys() != before:
            self.bounds = fit_bounds([(marker.lat, marker.lng) for marker in self.all_markers()])
        return pending

    def attach_route(self, overlay: RouteOverlay) -> bool:
        """Store a fetched route unless the delivery left the map or already has one."""

        if overlay.delivery_id not in self.markers or overlay.delivery_id in self.routes:
            return False
        self.routes[overlay.delivery_id] = overlay
        return True

    @staticmethod
    def _origin(
        delivery: Delivery, ping: Optional[TrackingPing], geocoded: Mapping[str, Coordinates]
    ) -> Optional[Coordinates]:
        if ping is not None:
            return Coordinates(lat=ping.latitude, lng=ping.longitude)
        if delivery.origin:
            return geocoded.get(delivery.origin)
        return None

    @staticmethod
    def _destination(delivery: Delivery, geocoded: Mapping[str, Coordinates]) -> Optional[Coordinates]:
        if delivery.destination_lat is not None and delivery.destination_lng is not None:
            return Coordinates(lat=delivery.destination_lat, lng=delivery.destination_lng)
        if delivery.destination:
            return geocoded.get(delivery.destination)
        return None
