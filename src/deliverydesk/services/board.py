"""Kanban status board: column grouping and drag-and-drop status transitions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence

from ..data.deliveries_repository import DeliveryRepository
from ..errors import BoardMoveError, RemoteStoreError
from ..models.domain import PROBLEM_STATUSES, Delivery, DeliveryStatus
from ..notifications import NotificationCenter

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BoardColumn:
    key: str
    title: str
    status: DeliveryStatus


COLUMNS: tuple[BoardColumn, ...] = (
    BoardColumn("confirmed", "Confirmed", DeliveryStatus.ORDER_CONFIRMED),
    BoardColumn("ready", "Ready", DeliveryStatus.READY_TO_SHIP),
    BoardColumn("shipped", "Shipped", DeliveryStatus.SHIPPED),
    BoardColumn("delivered", "Delivered", DeliveryStatus.DELIVERED),
    BoardColumn("problem", "Problem", DeliveryStatus.DELIVERY_FAILED),
)
COLUMN_KEYS: tuple[str, ...] = tuple(column.key for column in COLUMNS)
COLUMN_STATUS: dict[str, DeliveryStatus] = {column.key: column.status for column in COLUMNS}
PROBLEM_COLUMN = "problem"
FALLBACK_COLUMN = "confirmed"


def column_for_status(status: str) -> str:
    """Problem statuses share one column; unknown statuses land in Confirmed."""
    if status in PROBLEM_STATUSES:
        return PROBLEM_COLUMN
    for column in COLUMNS:
        if column.key != PROBLEM_COLUMN and status == column.status:
            return column.key
    return FALLBACK_COLUMN


def group_deliveries(deliveries: Iterable[Delivery]) -> dict[str, list[Delivery]]:
    grouped: dict[str, list[Delivery]] = {key: [] for key in COLUMN_KEYS}
    for delivery in deliveries:
        grouped[column_for_status(delivery.status)].append(delivery)
    return grouped


def find_column(grouped: dict[str, Sequence[Delivery]], delivery_id: str) -> Optional[str]:
    for key, items in grouped.items():
        if any(item.id == delivery_id for item in items):
            return key
    return None


def resolve_drop_column(grouped: dict[str, Sequence[Delivery]], over_id: Optional[str]) -> Optional[str]:
    """Resolve the drop target: a column, another card, or an id naming a column."""
    if not over_id:
        return None
    if over_id in grouped:
        return over_id
    card_column = find_column(grouped, over_id)
    if card_column is not None:
        return card_column
    for key in COLUMN_KEYS:
        if key in over_id:
            return key
    return None


class SyncState(str, Enum):
    SYNCED = "synced"
    PENDING_WRITE = "pending_write"
    REVERTING = "reverting"


@dataclass(slots=True)
class EntrySync:
    state: SyncState = SyncState.SYNCED
    previous_status: Optional[str] = None


@dataclass(slots=True)
class MoveResult:
    moved: bool
    source_column: Optional[str] = None
    destination_column: Optional[str] = None
    status: Optional[str] = None


class StatusBoard:
    """Optimistic status changes on top of the delivery repository.

    The local list is edited before the store write is issued. A failed write
    restores the last server-fetched list and raises :class:`BoardMoveError`.
    """

    def __init__(self, deliveries: DeliveryRepository, notifier: NotificationCenter) -> None:
        self._deliveries = deliveries
        self._notifier = notifier
        self._sync: dict[str, EntrySync] = {}

    def columns(self) -> dict[str, list[Delivery]]:
        return group_deliveries(self._deliveries.items)

    def sync_state(self, delivery_id: str) -> SyncState:
        return self._sync.get(delivery_id, EntrySync()).state

    def move(self, active_id: str, over_id: Optional[str]) -> MoveResult:
        grouped = self.columns()
        source = find_column(grouped, active_id)
        destination = resolve_drop_column(grouped, over_id)
        if source is None or destination is None or source == destination:
            return MoveResult(moved=False, source_column=source, destination_column=destination)

        new_status = COLUMN_STATUS[destination].value
        previous = self._deliveries.apply_local(active_id, status=new_status)
        self._sync[active_id] = EntrySync(SyncState.PENDING_WRITE, previous.status)
        logger.info(f"Moving delivery {active_id} from '{source}' to '{destination}'")

        try:
            self._deliveries.update(active_id, {"status": new_status}, notify_errors=False)
        except RemoteStoreError as exc:
            self._sync[active_id] = EntrySync(SyncState.REVERTING, previous.status)
            self._deliveries.restore_server_items()
            self._sync.pop(active_id, None)
            self._notifier.error(f"Could not move delivery #{previous.order_number}; change reverted.")
            raise BoardMoveError(f"Failed to move delivery {active_id}: {exc}") from exc

        self._sync.pop(active_id, None)
        return MoveResult(moved=True, source_column=source, destination_column=destination, status=new_status)
