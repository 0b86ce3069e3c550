import asyncio

import pytest

from src.deliverydesk.db.store import DELIVERIES_TABLE, TRACKING_TABLE, ChangeEvent
from src.deliverydesk.services.tracking.geocoding import Coordinates
from src.deliverydesk.services.tracking.service import TrackingService, ping_from_row

DEPOT = "Depot, Campinas"
CUSTOMER_ADDRESS = "Rua Augusta, Sao Paulo"


async def _until(predicate, attempts: int = 200) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0.01)
    raise AssertionError("condition not reached")


@pytest.fixture
def tracked(store, geocoder):
    geocoder.known.update(
        {
            DEPOT: Coordinates(lat=-22.9, lng=-47.0),
            CUSTOMER_ADDRESS: Coordinates(lat=-23.5, lng=-46.6),
        }
    )
    customer = store.add_customer()
    courier = store.add_courier(name="Joao")
    other_courier = store.add_courier(name="Ana")
    live = store.add_delivery(
        customer, courier, status="shipped", tracking_enabled=True, origin=DEPOT, destination=CUSTOMER_ADDRESS
    )
    waiting = store.add_delivery(
        customer, other_courier, status="shipped", tracking_enabled=True, origin=DEPOT, destination=CUSTOMER_ADDRESS
    )
    store.add_delivery(customer, courier, status="shipped", tracking_enabled=False, origin=DEPOT)
    store.add_delivery(customer, courier, status="delivered", tracking_enabled=True, origin=DEPOT)
    store.add_ping(live["id"], -22.95, -46.9, "2024-01-01T10:00:00+00:00")
    store.add_ping(live["id"], -23.1, -46.8, "2024-01-01T11:00:00+00:00")
    return {"live": live, "waiting": waiting, "courier": courier, "other_courier": other_courier, "customer": customer}


@pytest.fixture
def sleeps() -> list:
    return []


@pytest.fixture
def service(store, feed, geocoder, router, sleeps) -> TrackingService:
    async def _sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return TrackingService(store, feed, geocoder, router, delay_seconds=1.0, sleep=_sleep)


def test_refresh_loads_only_shipped_tracked_deliveries(service, tracked) -> None:
    asyncio.run(service.refresh())

    assert {d.id for d in service.deliveries} == {tracked["live"]["id"], tracked["waiting"]["id"]}
    assert service.positions[tracked["live"]["id"]].latitude == -23.1
    assert tracked["waiting"]["id"] not in service.positions


def test_geocoding_is_memoized_and_throttled(service, tracked, geocoder, sleeps) -> None:
    asyncio.run(service.refresh())
    asyncio.run(service.refresh())

    assert geocoder.calls == [DEPOT, CUSTOMER_ADDRESS]
    assert sleeps == [1.0, 1.0]


def test_failed_geocode_skips_marker_and_is_retried(service, store, tracked, geocoder, sleeps) -> None:
    del geocoder.known[CUSTOMER_ADDRESS]

    asyncio.run(service.refresh())
    asyncio.run(service.refresh())

    assert "destination" not in service.map.markers[tracked["waiting"]["id"]]
    # Misses are not memoized, so both deliveries retry it on every load.
    assert geocoder.calls.count(CUSTOMER_ADDRESS) == 4
    assert len(sleeps) == 5


def test_markers_and_routes_after_load(service, tracked, router) -> None:
    asyncio.run(service.refresh())

    live_id, waiting_id = tracked["live"]["id"], tracked["waiting"]["id"]
    assert set(service.map.markers[live_id]) == {"driver", "destination"}
    assert set(service.map.markers[waiting_id]) == {"origin", "destination"}
    assert set(service.map.routes) == {live_id, waiting_id}
    assert ((-23.1, -46.8), (-23.5, -46.6)) in router.calls
    assert service.map.routes[live_id].distance_label == "12.3 km"


def test_courier_filter_changes_only_what_is_shown(service, tracked) -> None:
    async def scenario() -> None:
        await service.refresh()
        await service.set_courier_filter(tracked["other_courier"]["id"])

    asyncio.run(scenario())

    assert set(service.map.markers) == {tracked["waiting"]["id"]}
    assert len(service.deliveries) == 2
    snapshot = service.snapshot()
    assert [d.id for d in snapshot["deliveries"]] == [tracked["waiting"]["id"]]
    assert {c["name"]: c["active"] for c in snapshot["couriers"]} == {"Joao": 1, "Ana": 1}


def test_realtime_ping_moves_driver_marker(service, feed, tracked) -> None:
    live_id = tracked["live"]["id"]

    async def scenario():
        await service.start()
        await _until(lambda: live_id in service.map.markers)
        marker = service.map.markers[live_id]["driver"]
        feed.emit(
            TRACKING_TABLE,
            "INSERT",
            {"delivery_id": live_id, "courier_lat": -23.3, "courier_lng": -46.7, "timestamp": "2024-01-01T12:00:00Z"},
        )
        await _until(lambda: service.positions[live_id].latitude == -23.3)
        await service.stop()
        return marker

    marker = asyncio.run(scenario())

    assert service.map.markers[live_id]["driver"] is marker
    assert (marker.lat, marker.lng) == (-23.3, -46.7)


def test_delivery_change_reruns_full_load(service, store, feed, tracked) -> None:
    async def scenario():
        await service.start()
        await _until(lambda: len(service.deliveries) == 2)
        added = store.add_delivery(
            tracked["customer"],
            tracked["courier"],
            status="shipped",
            tracking_enabled=True,
            destination_lat=-23.0,
            destination_lng=-46.0,
        )
        feed.emit(DELIVERIES_TABLE, "INSERT", added)
        await _until(lambda: len(service.deliveries) == 3)
        await service.stop()

    asyncio.run(scenario())

    assert [(table, event) for table, event, _ in feed.subscriptions] == [
        (TRACKING_TABLE, "INSERT"),
        (DELIVERIES_TABLE, "*"),
    ]
    assert all(subscription.closed for _, _, subscription in feed.subscriptions)
    assert not service.running


def test_ping_row_requires_coordinates() -> None:
    with pytest.raises(ValueError):
        ping_from_row({"delivery_id": "d1", "courier_lat": None, "courier_lng": -46.0})


class _BrokenRouter:
    def route(self, origin, destination):
        raise RuntimeError("router exploded")


def test_delivery_feed_survives_failing_handler(store, feed, geocoder, tracked) -> None:
    service = TrackingService(store, feed, geocoder, _BrokenRouter(), delay_seconds=0.0)

    def _add_tracked():
        return store.add_delivery(
            tracked["customer"],
            tracked["courier"],
            status="shipped",
            tracking_enabled=True,
            destination_lat=-23.0,
            destination_lng=-46.0,
        )

    async def scenario():
        await service.start()
        await _until(lambda: len(service.deliveries) == 2 and not service.loading)
        feed.emit(DELIVERIES_TABLE, "INSERT", _add_tracked())
        await _until(lambda: len(service.deliveries) == 3)
        feed.emit(DELIVERIES_TABLE, "INSERT", _add_tracked())
        await _until(lambda: len(service.deliveries) == 4)
        await service.stop()

    asyncio.run(scenario())

    assert service.map.routes == {}


def test_refresh_drops_positions_of_untracked_deliveries(service, store, tracked) -> None:
    live_id = tracked["live"]["id"]

    async def scenario():
        await service.refresh()
        await service.handle_ping(
            ChangeEvent(
                table=TRACKING_TABLE,
                type="INSERT",
                record={"delivery_id": "not-tracked", "courier_lat": -23.0, "courier_lng": -46.0},
            )
        )
        assert "not-tracked" in service.positions
        next(row for row in store.tables[DELIVERIES_TABLE] if row["id"] == live_id)["status"] = "delivered"
        await service.refresh()

    asyncio.run(scenario())

    assert set(service.positions) == set()
    assert live_id not in service.map.markers
