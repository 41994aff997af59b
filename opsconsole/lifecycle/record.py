from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Optional

from ..data.models import Order, RefundDestination


class ActionKind(str, Enum):
    """Kinds of order-mutating actions. At most one of each kind runs per record."""
    ACCEPT = "accept"
    REJECT = "reject"
    UPDATE_STATUS = "update_status"
    REFUND = "refund"


class OrderRecord:
    """Canonical in-memory copy of the viewed order.

    Writes land in two phases: ``apply_optimistic`` with whatever the write
    answered, then ``reconcile`` with a full re-read. The re-read always wins.
    A detached record belongs to a view that is gone; writes to it are
    harmless and never reach the new view.
    """

    def __init__(self, order: Optional[Order] = None) -> None:
        self.order = order
        self.in_flight: set[ActionKind] = set()
        self.updating_status: Optional[str] = None
        self.refunding_to: Optional[RefundDestination] = None
        self.refetches = 0
        self.detached = False
        self.mutation_lock = asyncio.Lock()

    @property
    def refreshing(self) -> bool:
        """True while any consistency re-fetch of this record is in flight."""
        return self.refetches > 0

    @property
    def order_id(self) -> Optional[str]:
        return self.order.id if self.order else None

    def apply_optimistic(self, payload: Optional[dict[str, Any]]) -> Optional[Order]:
        """Overlay the write response on the current order.

        Responses may omit populated relations, so fields the payload does
        not carry are kept from the current order.
        """
        if not payload:
            return self.order
        if self.order is None:
            self.order = Order.model_validate(payload)
            return self.order
        merged = self.order.model_dump(by_alias=True)
        merged.update(payload)
        self.order = Order.model_validate(merged)
        return self.order

    def reconcile(self, fresh: Order) -> Order:
        """Replace the local order with a fresh read from the backend."""
        self.order = fresh
        return fresh

    def begin(self, kind: ActionKind) -> bool:
        """Mark ``kind`` as running. False when one is already in flight."""
        if kind in self.in_flight:
            return False
        self.in_flight.add(kind)
        return True

    def end(self, kind: ActionKind) -> None:
        self.in_flight.discard(kind)
        if kind == ActionKind.UPDATE_STATUS:
            self.updating_status = None
        elif kind == ActionKind.REFUND:
            self.refunding_to = None

    def is_busy(self, kind: ActionKind) -> bool:
        return kind in self.in_flight
