from datetime import date, datetime, timezone

import pytest

from src.deliverydesk.models.domain import Delivery, TrackingPing
from src.deliverydesk.services.tracking.geocoding import Coordinates
from src.deliverydesk.services.tracking.map_state import (
    RouteOverlay,
    TrackingMap,
    fit_bounds,
    format_distance,
    format_duration,
)


def _delivery(did: str, courier_id: str = "c1", **overrides) -> Delivery:
    fields = dict(
        id=did,
        created_at=None,
        order_number=1,
        order_date=date(2024, 1, 1),
        promised_date=date(2024, 1, 5),
        customer_id="cust",
        courier_id=courier_id,
        description="Parcel",
        value=10.0,
        status="shipped",
        origin="Depot, Campinas",
        destination="Rua Augusta, Sao Paulo",
        tracking_enabled=True,
    )
    fields.update(overrides)
    return Delivery(**fields)


GEOCODED = {
    "Depot, Campinas": Coordinates(lat=-22.9, lng=-47.0),
    "Rua Augusta, Sao Paulo": Coordinates(lat=-23.5, lng=-46.6),
}


def test_route_labels() -> None:
    assert format_distance(12345) == "12.3 km"
    assert format_duration(3900) == "1h 5min"
    assert format_duration(2700) == "45min"


def test_fit_bounds_pads_ten_percent() -> None:
    bounds = fit_bounds([(-23.0, -47.0), (-22.0, -46.0)])

    assert bounds.south == pytest.approx(-23.1)
    assert bounds.north == pytest.approx(-21.9)
    assert bounds.west == pytest.approx(-47.1)
    assert bounds.east == pytest.approx(-45.9)
    assert fit_bounds([]) is None


def test_origin_marker_only_without_live_position() -> None:
    tracking_map = TrackingMap()
    delivery = _delivery("d1")

    pending = tracking_map.sync([delivery], {}, GEOCODED)

    assert set(tracking_map.markers["d1"]) == {"origin", "destination"}
    assert len(pending) == 1

    ping = TrackingPing(delivery_id="d1", latitude=-23.0, longitude=-46.9)
    tracking_map.sync([delivery], {"d1": ping}, GEOCODED)

    assert set(tracking_map.markers["d1"]) == {"driver", "destination"}


def test_driver_marker_moves_in_place() -> None:
    tracking_map = TrackingMap()
    delivery = _delivery("d1")
    first = TrackingPing(delivery_id="d1", latitude=-23.0, longitude=-46.9)
    tracking_map.sync([delivery], {"d1": first}, GEOCODED)
    marker = tracking_map.markers["d1"]["driver"]
    bounds = tracking_map.bounds

    moved_at = datetime(2024, 1, 2, tzinfo=timezone.utc)
    second = TrackingPing(delivery_id="d1", latitude=-23.2, longitude=-46.7, timestamp=moved_at)
    tracking_map.sync([delivery], {"d1": second}, GEOCODED)

    assert tracking_map.markers["d1"]["driver"] is marker
    assert (marker.lat, marker.lng, marker.updated_at) == (-23.2, -46.7, moved_at)
    # Same marker set, so the viewport is kept.
    assert tracking_map.bounds is bounds


def test_route_is_attached_once_and_not_recomputed() -> None:
    tracking_map = TrackingMap()
    delivery = _delivery("d1")
    (request,) = tracking_map.sync([delivery], {}, GEOCODED)

    overlay = RouteOverlay(delivery_id="d1", coordinates=[(-22.9, -47.0), (-23.5, -46.6)], distance_m=1, duration_s=1)
    assert tracking_map.attach_route(overlay)
    assert not tracking_map.attach_route(overlay)

    ping = TrackingPing(delivery_id="d1", latitude=-23.0, longitude=-46.9)
    assert tracking_map.sync([delivery], {"d1": ping}, GEOCODED) == []
    assert request.origin == GEOCODED["Depot, Campinas"]


def test_filtered_out_deliveries_are_removed() -> None:
    tracking_map = TrackingMap()
    first = _delivery("d1", courier_id="c1")
    second = _delivery("d2", courier_id="c2")
    tracking_map.sync([first, second], {}, GEOCODED)

    tracking_map.sync([first], {}, GEOCODED)

    assert set(tracking_map.markers) == {"d1"}


def test_stored_destination_coordinates_win_over_geocoding() -> None:
    tracking_map = TrackingMap()
    delivery = _delivery("d1", origin=None, destination_lat=-10.0, destination_lng=-40.0)

    pending = tracking_map.sync([delivery], {}, {})

    destination = tracking_map.markers["d1"]["destination"]
    assert (destination.lat, destination.lng) == (-10.0, -40.0)
    assert pending == []
    assert tracking_map.bounds is not None
