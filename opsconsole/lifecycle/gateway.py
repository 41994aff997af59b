"""
Order-mutating actions against the order backend.

Every action is one write followed by a mandatory consistency re-fetch:
write answers may omit populated relations (or, for refunds, carry no order
at all), so the full read-by-id is what the view ends up showing. Transport
failures and ``success: false`` answers are turned into one error
notification here and never propagate further.
"""

from __future__ import annotations

from contextlib import nullcontext
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from ..data.interface import OrderApi
from ..data.models import (
    AcceptOrderRequest,
    Order,
    OrderResponse,
    RefundDestination,
    RefundRequest,
    RejectOrderRequest,
    UpdateStatusRequest,
)
from ..errors import ApplicationError, TransportError
from ..logging import get_logger
from .catalog import StatusCatalog, default_catalog
from .notifications import NotificationLevel, Notifier
from .record import ActionKind, OrderRecord


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of one gateway action."""
    action: ActionKind
    ok: bool
    message: Optional[str] = None
    order: Optional[Order] = None
    reconciled: bool = False
    skipped: bool = False


class TransitionGateway:
    """Performs accept, reject, manual status update and refund.

    Preconditions on the order status are the caller's job; the gateway
    only enforces single-flight per action kind on the given record.
    """

    def __init__(
        self,
        api: OrderApi,
        notifier: Notifier,
        catalog: Optional[StatusCatalog] = None,
        serialize_actions: bool = False,
    ) -> None:
        self.api = api
        self.notifier = notifier
        self.catalog = catalog or default_catalog()
        self.serialize_actions = serialize_actions
        self.logger = get_logger(__name__)

    # ---------- two-phase write helpers ----------

    def _lock(self, record: OrderRecord):
        return record.mutation_lock if self.serialize_actions else nullcontext()

    def _apply(self, record: OrderRecord, response: OrderResponse) -> None:
        try:
            record.apply_optimistic(response.data)
        except ValidationError as e:
            # The re-fetch below still brings the record up to date.
            self.logger.warning(f"Ignoring malformed write payload for order {record.order_id}: {e}")

    async def _read(self, order_id: str) -> Order:
        response = await self.api.get_order(order_id)
        if not response.success or not response.data:
            raise ApplicationError(response.message or "Failed to fetch order details")
        try:
            return Order.model_validate(response.data)
        except ValidationError as e:
            raise TransportError(f"Malformed order payload for {order_id}") from e

    def _notify(self, record: OrderRecord, level: NotificationLevel, message: str) -> None:
        # A detached record belongs to a view that is gone.
        if record.detached:
            self.logger.debug(f"Dropping notification for detached order {record.order_id}: {message}")
            return
        self.notifier.notify(level, message)

    async def resync(self, record: OrderRecord, order_id: str, after_write: bool = True) -> bool:
        """Consistency re-fetch: overwrite the record with a full read.

        Returns False (after telling the user) when the read fails; the record
        then keeps what it had. After a write the failure is a warning since
        the write itself went through; a plain refresh reports it as an error.
        """
        record.refetches += 1
        try:
            fresh = await self._read(order_id)
        except (TransportError, ApplicationError) as e:
            self.logger.warning(f"Re-fetch of order {order_id} failed: {e}")
            if after_write:
                self._notify(record, NotificationLevel.WARNING, f"Order saved but could not be refreshed: {e}")
            else:
                self._notify(record, NotificationLevel.ERROR, e.message or "Failed to fetch order details")
            return False
        finally:
            record.refetches -= 1
        record.reconcile(fresh)
        self.logger.debug(f"Order {order_id} reconciled at status {fresh.status}")
        return True

    def _fail(self, record: OrderRecord, kind: ActionKind, error: Exception, fallback: str) -> TransitionResult:
        message = getattr(error, "message", None) or fallback
        if isinstance(error, TransportError):
            self.logger.error(f"{kind.value} on order {record.order_id} failed in transport: {message}")
        else:
            self.logger.warning(f"{kind.value} on order {record.order_id} rejected: {message}")
        self._notify(record, NotificationLevel.ERROR, message)
        return TransitionResult(action=kind, ok=False, message=message, order=record.order)

    def _skip(self, record: OrderRecord, kind: ActionKind) -> TransitionResult:
        self.logger.debug(f"{kind.value} already in flight for order {record.order_id}")
        return TransitionResult(action=kind, ok=False, order=record.order, skipped=True)

    # ---------- actions ----------

    async def accept_order(self, record: OrderRecord) -> TransitionResult:
        return await self._decide(record, ActionKind.ACCEPT)

    async def reject_order(self, record: OrderRecord) -> TransitionResult:
        return await self._decide(record, ActionKind.REJECT)

    async def _decide(self, record: OrderRecord, kind: ActionKind) -> TransitionResult:
        order = record.order
        if order is None or not record.begin(kind):
            return self._skip(record, kind)

        if kind == ActionKind.ACCEPT:
            request, call = AcceptOrderRequest(order_id=order.id, store_id=order.store_ref_id), self.api.accept_order
            success_text, failure_text = "Order accepted successfully", "Failed to accept order"
        else:
            request, call = RejectOrderRequest(order_id=order.id, store_id=order.store_ref_id), self.api.reject_order
            success_text, failure_text = "Order rejected successfully", "Failed to reject order"

        self.logger.info(f"{kind.value} order {order.id}")
        try:
            async with self._lock(record):
                response = await call(request)
                if not response.success:
                    raise ApplicationError(response.message or failure_text)
                self._apply(record, response)
                reconciled = await self.resync(record, order.id)
        except (TransportError, ApplicationError) as e:
            return self._fail(record, kind, e, failure_text)
        finally:
            record.end(kind)

        message = response.message or success_text
        self._notify(record, NotificationLevel.SUCCESS, message)
        self.logger.info(f"{kind.value} order {order.id} done, status {record.order.status}")
        return TransitionResult(action=kind, ok=True, message=message, order=record.order, reconciled=reconciled)

    async def update_status(self, record: OrderRecord, target_status: str) -> TransitionResult:
        kind = ActionKind.UPDATE_STATUS
        order = record.order
        if order is None:
            return self._skip(record, kind)
        request = UpdateStatusRequest(order_id=order.id, store_id=order.store_ref_id, status=target_status)
        if not record.begin(kind):
            return self._skip(record, kind)
        record.updating_status = target_status

        failure_text = "Failed to update order status"
        self.logger.info(f"update order {order.id} from {order.status} to {target_status}")
        try:
            async with self._lock(record):
                response = await self.api.update_status(request)
                if not response.success:
                    raise ApplicationError(response.message or failure_text)
                # Tell the user before the re-fetch so they are not kept waiting.
                message = response.message or f"Order status updated to {self.catalog.label_of(target_status)}"
                self._notify(record, NotificationLevel.SUCCESS, message)
                self._apply(record, response)
                reconciled = await self.resync(record, order.id)
        except (TransportError, ApplicationError) as e:
            return self._fail(record, kind, e, failure_text)
        finally:
            record.end(kind)

        self.logger.info(f"update order {order.id} done, status {record.order.status}")
        return TransitionResult(action=kind, ok=True, message=message, order=record.order, reconciled=reconciled)

    async def process_refund(self, record: OrderRecord, destination: RefundDestination | str) -> TransitionResult:
        kind = ActionKind.REFUND
        destination = RefundDestination(destination)
        order = record.order
        if order is None or not record.begin(kind):
            return self._skip(record, kind)
        record.refunding_to = destination

        failure_text = "Failed to process refund"
        request = RefundRequest(order_id=order.id, refund_type=destination)
        self.logger.info(f"refund order {order.id} to {destination.value}")
        try:
            async with self._lock(record):
                response = await self.api.process_refund(request)
                if not response.success:
                    raise ApplicationError(response.message or failure_text)
                message = response.message or f"Refund processed to {destination.value}"
                self._notify(record, NotificationLevel.SUCCESS, message)
                # No order payload here: the re-fetch is the only post-refund state.
                reconciled = await self.resync(record, order.id)
        except (TransportError, ApplicationError) as e:
            return self._fail(record, kind, e, failure_text)
        finally:
            record.end(kind)

        self.logger.info(f"refund order {order.id} done, status {record.order.status}")
        return TransitionResult(action=kind, ok=True, message=message, order=record.order, reconciled=reconciled)
