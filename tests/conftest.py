from __future__ import annotations

import itertools
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping

import pytest
from fastapi.testclient import TestClient

from src.deliverydesk.container import Workspace, build_workspace
from src.deliverydesk.db.store import (
    COURIERS_TABLE,
    CUSTOMERS_TABLE,
    DELIVERIES_TABLE,
    TRACKING_TABLE,
    AuthUser,
    ChangeEvent,
    ChangeFeed,
    DataStore,
    Session,
    Subscription,
)
from src.deliverydesk.errors import RemoteStoreError
from src.deliverydesk.main import create_app
from src.deliverydesk.notifications import NotificationCenter
from src.deliverydesk.services.postal_code import PostalAddress
from src.deliverydesk.services.tracking.geocoding import Coordinates
from src.deliverydesk.services.tracking.osrm_client import RoutePath

TEST_TOKEN = "test-token"
TEST_USER = AuthUser(id="user-1", email="ops@example.com", full_name="Ops User")

_BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeStore(DataStore):
    """In-memory DataStore that mimics the embedded customer/courier join."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict]] = {
            CUSTOMERS_TABLE: [],
            COURIERS_TABLE: [],
            DELIVERIES_TABLE: [],
            TRACKING_TABLE: [],
        }
        self.calls: list[tuple] = []
        self.fail_on: set[str] = set()
        self.on_update: Callable[[str, str, Mapping[str, Any]], None] | None = None
        self.tokens: dict[str, AuthUser] = {TEST_TOKEN: TEST_USER}
        self.passwords: dict[str, str] = {TEST_USER.email: "secret123"}
        self._clock = itertools.count(1)
        self._order_numbers = itertools.count(1001)

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise RemoteStoreError(f"simulated {operation} failure")

    def _stamp(self) -> str:
        return (_BASE_TIME + timedelta(seconds=next(self._clock))).isoformat()

    def _with_embeds(self, table: str, row: dict, columns: str) -> dict:
        row = dict(row)
        if table == DELIVERIES_TABLE and "customer:" in columns:
            customer = next((c for c in self.tables[CUSTOMERS_TABLE] if c["id"] == row.get("customer_id")), None)
            courier = next((c for c in self.tables[COURIERS_TABLE] if c["id"] == row.get("courier_id")), None)
            row["customer"] = (
                {"name": customer["name"], "state": customer.get("state"), "postal_code": customer.get("postal_code")}
                if customer
                else None
            )
            row["courier"] = {"name": courier["name"]} if courier else None
        return row

    def select(self, table, columns="*", filters=None, order=None, descending=False, limit=None):
        self.calls.append(("select", table, dict(filters or {})))
        self._check("select")
        rows = [
            row
            for row in self.tables[table]
            if all(row.get(column) == value for column, value in (filters or {}).items())
        ]
        if order:
            rows = sorted(rows, key=lambda row: row.get(order) or "", reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return [self._with_embeds(table, row, columns) for row in rows]

    def insert(self, table, row):
        self.calls.append(("insert", table, dict(row)))
        self._check("insert")
        stored = {"id": str(uuid.uuid4()), "created_at": self._stamp(), **row}
        if table == DELIVERIES_TABLE:
            stored.setdefault("order_number", next(self._order_numbers))
        self.tables[table].append(stored)
        return dict(stored)

    def update(self, table, row_id, changes):
        self.calls.append(("update", table, row_id, dict(changes)))
        if self.on_update is not None:
            self.on_update(table, row_id, changes)
        self._check("update")
        for row in self.tables[table]:
            if row["id"] == row_id:
                row.update(changes)

    def delete(self, table, row_id):
        self.calls.append(("delete", table, row_id))
        self._check("delete")
        self.tables[table] = [row for row in self.tables[table] if row["id"] != row_id]

    def sign_in(self, email, password):
        self._check("sign_in")
        if self.passwords.get(email) != password:
            raise RemoteStoreError("Invalid login credentials")
        user = next((u for u in self.tokens.values() if u.email == email), None)
        if user is None:
            raise RemoteStoreError("Invalid login credentials")
        return Session(access_token=TEST_TOKEN, refresh_token="refresh", user=user)

    def sign_up(self, email, password, full_name):
        self._check("sign_up")
        if email in self.passwords:
            raise RemoteStoreError("User already registered")
        self.passwords[email] = password
        return AuthUser(id=str(uuid.uuid4()), email=email, full_name=full_name)

    def get_user(self, access_token):
        return self.tokens.get(access_token)

    def mutations(self) -> list[tuple]:
        return [call for call in self.calls if call[0] in {"insert", "update", "delete"}]

    # Seeding helpers write rows directly, without recording calls.

    def add_customer(self, **overrides: Any) -> dict:
        row = {
            "id": str(uuid.uuid4()),
            "created_at": self._stamp(),
            "name": "Maria Silva",
            "cpf": "52998224725",
            "phone": "11987654321",
            "email": "maria@example.com",
            "postal_code": "01310100",
            "address": "Avenida Paulista, 1000",
            "city": "Sao Paulo",
            "state": "SP",
            **overrides,
        }
        self.tables[CUSTOMERS_TABLE].append(row)
        return row

    def add_courier(self, **overrides: Any) -> dict:
        row = {
            "id": str(uuid.uuid4()),
            "created_at": self._stamp(),
            "name": "Joao Souza",
            "phone": "11912345678",
            "email": "joao@example.com",
            "vehicle_model": "Fiorino",
            "vehicle_plate": "ABC1D23",
            "license_number": "123456789",
            "license_expiry": "2099-12-31",
            **overrides,
        }
        self.tables[COURIERS_TABLE].append(row)
        return row

    def add_delivery(self, customer: Mapping[str, Any], courier: Mapping[str, Any], **overrides: Any) -> dict:
        row = {
            "id": str(uuid.uuid4()),
            "created_at": self._stamp(),
            "order_number": next(self._order_numbers),
            "order_date": "2024-03-01",
            "promised_date": "2099-03-10",
            "customer_id": customer["id"],
            "courier_id": courier["id"],
            "description": "Box of books",
            "value": 100.0,
            "status": "order_confirmed",
            "tracking_enabled": False,
            **overrides,
        }
        self.tables[DELIVERIES_TABLE].append(row)
        return row

    def add_ping(self, delivery_id: str, lat: float, lng: float, timestamp: str) -> dict:
        row = {
            "id": str(uuid.uuid4()),
            "delivery_id": delivery_id,
            "courier_lat": lat,
            "courier_lng": lng,
            "timestamp": timestamp,
        }
        self.tables[TRACKING_TABLE].append(row)
        return row


class FakeChangeFeed(ChangeFeed):
    def __init__(self) -> None:
        self.subscriptions: list[tuple[str, str, Subscription]] = []

    async def subscribe(self, table: str, event: str = "*") -> Subscription:
        subscription = Subscription(table)
        self.subscriptions.append((table, event, subscription))
        return subscription

    def emit(self, table: str, event_type: str, record: dict) -> None:
        for subscribed_table, event, subscription in self.subscriptions:
            if subscribed_table == table and event in ("*", event_type):
                subscription.push(ChangeEvent(table=table, type=event_type, record=record))


class StubGeocoder:
    def __init__(self, known: Mapping[str, Coordinates] | None = None) -> None:
        self.known = dict(known or {})
        self.calls: list[str] = []

    def geocode(self, address: str) -> Coordinates | None:
        self.calls.append(address)
        return self.known.get(address)


class StubRouter:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def route(self, origin, destination) -> RoutePath:
        self.calls.append((origin, destination))
        return RoutePath(coordinates=[origin, destination], distance_m=12345.0, duration_s=3900.0)


class StubPostalCodes:
    def lookup(self, code: str) -> PostalAddress:
        return PostalAddress(
            street="Avenida Paulista",
            district="Bela Vista",
            city="Sao Paulo",
            state="SP",
            postal_code="01310-100",
        )


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def feed() -> FakeChangeFeed:
    return FakeChangeFeed()


@pytest.fixture
def notifier() -> NotificationCenter:
    return NotificationCenter()


@pytest.fixture
def geocoder() -> StubGeocoder:
    return StubGeocoder()


@pytest.fixture
def router() -> StubRouter:
    return StubRouter()


@pytest.fixture
def workspace(
    store: FakeStore,
    feed: FakeChangeFeed,
    notifier: NotificationCenter,
    geocoder: StubGeocoder,
    router: StubRouter,
) -> Workspace:
    return build_workspace(
        store,
        feed,
        notifier=notifier,
        geocoder=geocoder,
        router=router,
        postal_codes=StubPostalCodes(),
        geocoder_delay=0.0,
    )


@pytest.fixture
def api_client(workspace: Workspace) -> TestClient:
    client = TestClient(create_app(workspace))
    client.headers["Authorization"] = f"Bearer {TEST_TOKEN}"
    return client


@pytest.fixture
def current_user() -> AuthUser:
    return TEST_USER
