"""Shared behaviour for the cached entity repositories."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Generic, Mapping, Optional, TypeVar

from ..db.store import AuthUser, DataStore
from ..errors import AuthorizationError, NotFoundError, RemoteStoreError
from ..notifications import NotificationCenter

logger = logging.getLogger(__name__)

T = TypeVar("T")


def parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def coerce_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Unable to parse float from value '{value}'") from exc


def clean_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class CachedRepository(Generic[T]):
    """Server-ordered cache of one table with refetch-after-mutation semantics.

    Every successful mutation is followed by a full refetch. A failed mutation
    leaves ``items`` untouched, posts an error notification and re-raises.
    """

    table: str = ""
    label: str = "record"
    columns: str = "*"

    def __init__(self, store: DataStore, notifier: NotificationCenter) -> None:
        self._store = store
        self._notifier = notifier
        self.items: tuple[T, ...] = ()
        self.loading = False

    def _from_row(self, row: Mapping[str, Any]) -> T:
        raise NotImplementedError

    def _after_refresh(self) -> None:
        """Hook for subclasses that keep extra state per fetch."""

    def refresh(self) -> tuple[T, ...]:
        self.loading = True
        try:
            rows = self._store.select(self.table, columns=self.columns, order="created_at", descending=True)
            items: list[T] = []
            for row in rows:
                try:
                    items.append(self._from_row(row))
                except (KeyError, ValueError, TypeError) as e:
                    logger.warning(f"Skipping invalid {self.label} row {row.get('id')}: {e}")
            self.items = tuple(items)
            self._after_refresh()
            logger.info(f"Loaded {len(self.items)} {self.label} records")
        except RemoteStoreError as exc:
            self._notifier.error(f"Failed to load {self.label} records: {exc}")
        finally:
            self.loading = False
        return self.items

    def filter(self, **criteria: Any) -> tuple[T, ...]:
        """Cached items whose attributes equal every given criterion."""
        return tuple(
            item for item in self.items if all(getattr(item, name) == value for name, value in criteria.items())
        )

    def get(self, record_id: str) -> T:
        for item in self.items:
            if getattr(item, "id") == record_id:
                return item
        raise NotFoundError(f"{self.label.capitalize()} {record_id} not found")

    def create(self, row: Mapping[str, Any], actor: AuthUser | None) -> T:
        if actor is None:
            self._notifier.error(f"You must be signed in to create a {self.label}.")
            raise AuthorizationError(f"Creating a {self.label} requires an authenticated user")

        payload = {**row, "user_id": actor.id}
        try:
            created = self._store.insert(self.table, payload)
        except RemoteStoreError as exc:
            self._notifier.error(f"Failed to create {self.label}: {exc}")
            raise
        self._notifier.success(f"{self.label.capitalize()} created successfully.")
        self.refresh()
        try:
            return self.get(str(created["id"]))
        except NotFoundError:
            return self._from_row(created)

    def update(self, record_id: str, changes: Mapping[str, Any], notify_errors: bool = True) -> T | None:
        """Write ``changes`` and refetch.

        Callers that report failures themselves pass ``notify_errors=False``.
        """
        try:
            self._store.update(self.table, record_id, changes)
        except RemoteStoreError as exc:
            if notify_errors:
                self._notifier.error(f"Failed to update {self.label}: {exc}")
            raise
        self._notifier.success(f"{self.label.capitalize()} updated successfully.")
        self.refresh()
        try:
            return self.get(record_id)
        except NotFoundError:
            # Removed by a concurrent change between the write and the refetch.
            return None

    def delete(self, record_id: str) -> None:
        try:
            self._store.delete(self.table, record_id)
        except RemoteStoreError as exc:
            self._notifier.error(f"Failed to delete {self.label}: {exc}")
            raise
        self._notifier.success(f"{self.label.capitalize()} deleted successfully.")
        self.refresh()
