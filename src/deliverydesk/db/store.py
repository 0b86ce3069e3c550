"""Remote data store and change feed contracts, with Supabase implementations."""

from __future__ import annotations

import asyncio
import itertools
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional

from supabase import AsyncClient, Client

from ..errors import RemoteStoreError

logger = logging.getLogger(__name__)

CUSTOMERS_TABLE = "customers"
COURIERS_TABLE = "couriers"
DELIVERIES_TABLE = "deliveries"
TRACKING_TABLE = "delivery_tracking"

DELIVERY_DETAIL_COLUMNS = "*, customer:customers(name,state,postal_code), courier:couriers(name)"


@dataclass(slots=True)
class AuthUser:
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None


@dataclass(slots=True)
class Session:
    access_token: str
    refresh_token: Optional[str]
    user: AuthUser


@dataclass(slots=True)
class ChangeEvent:
    """A row change pushed by the realtime channel."""

    table: str
    type: str
    record: dict = field(default_factory=dict)
    old_record: dict = field(default_factory=dict)


class DataStore(ABC):
    """Row-level access to the hosted database plus session auth."""

    @abstractmethod
    def select(
        self,
        table: str,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        raise NotImplementedError

    @abstractmethod
    def insert(self, table: str, row: Mapping[str, Any]) -> dict:
        raise NotImplementedError

    @abstractmethod
    def update(self, table: str, row_id: str, changes: Mapping[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, table: str, row_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def sign_in(self, email: str, password: str) -> Session:
        raise NotImplementedError

    @abstractmethod
    def sign_up(self, email: str, password: str, full_name: str) -> AuthUser:
        raise NotImplementedError

    @abstractmethod
    def get_user(self, access_token: str) -> AuthUser | None:
        raise NotImplementedError


class Subscription:
    """Async stream of change events for one table.

    Iteration ends once :meth:`close` has been awaited.
    """

    def __init__(self, table: str, on_close: Callable[[], Awaitable[None]] | None = None) -> None:
        self.table = table
        self._queue: asyncio.Queue[ChangeEvent | None] = asyncio.Queue()
        self._on_close = on_close
        self.closed = False

    def push(self, event: ChangeEvent) -> None:
        if not self.closed:
            self._queue.put_nowait(event)

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._queue.put_nowait(None)
        if self._on_close is not None:
            await self._on_close()

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> ChangeEvent:
        event = await self._queue.get()
        if event is None:
            raise StopAsyncIteration
        return event


class ChangeFeed(ABC):
    """Per-table change notifications."""

    @abstractmethod
    async def subscribe(self, table: str, event: str = "*") -> Subscription:
        raise NotImplementedError


def _user_from_response(user: Any) -> AuthUser:
    metadata = getattr(user, "user_metadata", None) or {}
    return AuthUser(id=str(user.id), email=getattr(user, "email", None), full_name=metadata.get("full_name"))


class SupabaseStore(DataStore):
    """DataStore backed by the Supabase PostgREST and GoTrue APIs."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def select(
        self,
        table: str,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        try:
            query = self._client.table(table).select(columns)
            for column, value in (filters or {}).items():
                query = query.eq(column, value)
            if order:
                query = query.order(order, desc=descending)
            if limit is not None:
                query = query.limit(limit)
            response = query.execute()
        except Exception as exc:
            raise RemoteStoreError(f"Failed to read '{table}': {exc}") from exc
        return list(response.data or [])

    def insert(self, table: str, row: Mapping[str, Any]) -> dict:
        try:
            response = self._client.table(table).insert(dict(row)).execute()
        except Exception as exc:
            raise RemoteStoreError(f"Failed to insert into '{table}': {exc}") from exc
        if not response.data:
            raise RemoteStoreError(f"Insert into '{table}' returned no row.")
        return response.data[0]

    def update(self, table: str, row_id: str, changes: Mapping[str, Any]) -> None:
        try:
            self._client.table(table).update(dict(changes)).eq("id", row_id).execute()
        except Exception as exc:
            raise RemoteStoreError(f"Failed to update '{table}' row {row_id}: {exc}") from exc

    def delete(self, table: str, row_id: str) -> None:
        try:
            self._client.table(table).delete().eq("id", row_id).execute()
        except Exception as exc:
            raise RemoteStoreError(f"Failed to delete '{table}' row {row_id}: {exc}") from exc

    def sign_in(self, email: str, password: str) -> Session:
        try:
            response = self._client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as exc:
            raise RemoteStoreError(f"Sign-in failed: {exc}") from exc
        if response.session is None or response.user is None:
            raise RemoteStoreError("Sign-in returned no session.")
        return Session(
            access_token=response.session.access_token,
            refresh_token=response.session.refresh_token,
            user=_user_from_response(response.user),
        )

    def sign_up(self, email: str, password: str, full_name: str) -> AuthUser:
        try:
            response = self._client.auth.sign_up(
                {"email": email, "password": password, "options": {"data": {"full_name": full_name}}}
            )
        except Exception as exc:
            raise RemoteStoreError(f"Sign-up failed: {exc}") from exc
        if response.user is None:
            raise RemoteStoreError("Sign-up returned no user.")
        return _user_from_response(response.user)

    def get_user(self, access_token: str) -> AuthUser | None:
        try:
            response = self._client.auth.get_user(access_token)
        except Exception as exc:
            logger.debug(f"Session lookup rejected: {exc}")
            return None
        if response is None or response.user is None:
            return None
        return _user_from_response(response.user)


def _event_from_payload(table: str, payload: Mapping[str, Any]) -> ChangeEvent:
    data = payload.get("data", payload)
    return ChangeEvent(
        table=data.get("table", table),
        type=str(data.get("type") or data.get("eventType") or "").upper(),
        record=dict(data.get("record") or data.get("new") or {}),
        old_record=dict(data.get("old_record") or data.get("old") or {}),
    )


class SupabaseChangeFeed(ChangeFeed):
    """ChangeFeed backed by Supabase Realtime postgres changes."""

    _counter = itertools.count(1)

    def __init__(self, client: AsyncClient, schema: str = "public") -> None:
        self._client = client
        self._schema = schema

    async def subscribe(self, table: str, event: str = "*") -> Subscription:
        channel = self._client.channel(f"{table}-changes-{next(self._counter)}")

        async def _remove_channel() -> None:
            await self._client.remove_channel(channel)

        subscription = Subscription(table, on_close=_remove_channel)

        def _on_change(payload: dict) -> None:
            subscription.push(_event_from_payload(table, payload))

        await channel.on_postgres_changes(event, schema=self._schema, table=table, callback=_on_change).subscribe()
        logger.info(f"Subscribed to {event} changes on '{table}'")
        return subscription
