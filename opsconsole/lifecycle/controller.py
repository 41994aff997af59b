from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import ValidationError

from ..config import get_config
from ..data.interface import OrderApi
from ..data.models import Order, OrderStatus, RefundDestination
from ..errors import ApplicationError, InvalidTransitionError, TransportError
from ..logging import get_logger
from .catalog import Severity, StatusCatalog, default_catalog
from .gateway import TransitionGateway, TransitionResult
from .notifications import NotificationCenter
from .record import ActionKind, OrderRecord
from .timeline import Timeline, TimelineBuilder


class ViewState(str, Enum):
    """State of the order view, not of the order."""
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class OrderLifecycleController:
    """Owns the viewed order and wires actions back into it.

    The presentation layer reads ``order``, ``timeline`` and the gate/busy
    properties, and calls the action coroutines. Action failures are
    reported through ``notifications`` and leave the view ``ready`` with the
    last known order; only ``load`` can put the view into ``error``.
    """

    def __init__(
        self,
        api: OrderApi,
        catalog: Optional[StatusCatalog] = None,
        notifications: Optional[NotificationCenter] = None,
        serialize_actions: Optional[bool] = None,
    ) -> None:
        if serialize_actions is None:
            serialize_actions = get_config().serialize_order_actions
        self.api = api
        self.catalog = catalog or default_catalog()
        self.notifications = notifications or NotificationCenter()
        self.timeline_builder = TimelineBuilder(self.catalog)
        self.gateway = TransitionGateway(api, self.notifications, self.catalog, serialize_actions)
        self.record = OrderRecord()
        self.view_state = ViewState.IDLE
        self.error: Optional[str] = None
        self.editing_status = False
        self.logger = get_logger(__name__)

    # ---------- read side ----------

    @property
    def order(self) -> Optional[Order]:
        return self.record.order

    @property
    def timeline(self) -> Optional[Timeline]:
        if self.order is None:
            return None
        return self.timeline_builder.build(self.order)

    @property
    def status_label(self) -> str:
        return self.catalog.label_of(self.order.status) if self.order else ""

    @property
    def status_severity(self) -> Severity:
        return self.catalog.severity_of(self.order.status if self.order else None)

    @property
    def payment_severity(self) -> Severity:
        payment = self.order.payment if self.order else None
        return self.catalog.payment_severity_of(payment.status if payment else None)

    @property
    def refreshing(self) -> bool:
        return self.record.refreshing

    async def load(self, order_id: str) -> Optional[Order]:
        """Read an order into a fresh view; the previous record is detached."""
        self._detach()
        self.view_state = ViewState.LOADING
        self.error = None
        record = self.record
        self.logger.info(f"Loading order {order_id}")
        try:
            response = await self.api.get_order(order_id)
            if not response.success or not response.data:
                raise ApplicationError(response.message or "Failed to fetch order details")
            order = Order.model_validate(response.data)
        except (TransportError, ApplicationError) as e:
            if record is self.record:
                self.error = getattr(e, "message", None) or "Failed to fetch order details"
                self.view_state = ViewState.ERROR
                self.logger.warning(f"Loading order {order_id} failed: {self.error}")
            return None
        except ValidationError as e:
            if record is self.record:
                self.error = "Failed to fetch order details"
                self.view_state = ViewState.ERROR
                self.logger.error(f"Order {order_id} payload is malformed: {e}")
            return None

        if record is not self.record:
            # The view moved on while this read was in flight.
            return None
        record.reconcile(order)
        self.view_state = ViewState.READY
        return order

    async def refresh(self) -> bool:
        """Re-read the current order without a write."""
        if self.order is None:
            return False
        return await self.gateway.resync(self.record, self.order.id, after_write=False)

    def unmount(self) -> None:
        """Leave the view. In-flight actions complete against a detached record."""
        self._detach()
        self.view_state = ViewState.IDLE
        self.error = None

    def _detach(self) -> None:
        self.record.detached = True
        self.record = OrderRecord()
        self.editing_status = False

    # ---------- gates ----------

    def _status_is(self, status: OrderStatus) -> bool:
        return self.order is not None and self.order.status == status.value

    @property
    def can_accept(self) -> bool:
        return self._status_is(OrderStatus.PENDING)

    @property
    def can_reject(self) -> bool:
        return self._status_is(OrderStatus.PENDING)

    @property
    def can_refund(self) -> bool:
        return self._status_is(OrderStatus.RETURNED)

    @property
    def editable_statuses(self) -> tuple[str, ...]:
        return tuple(self.catalog.editable) if self.order is not None else ()

    def is_busy(self, kind: ActionKind) -> bool:
        return self.record.is_busy(kind)

    def control_disabled(self, kind: ActionKind) -> bool:
        """Whether the control triggering ``kind`` should be disabled.

        Accept and reject share one control group.
        """
        if kind in (ActionKind.ACCEPT, ActionKind.REJECT):
            return self.is_busy(ActionKind.ACCEPT) or self.is_busy(ActionKind.REJECT)
        return self.is_busy(kind)

    @property
    def updating_status(self) -> Optional[str]:
        return self.record.updating_status

    @property
    def refunding_to(self) -> Optional[RefundDestination]:
        return self.record.refunding_to

    # ---------- status edit UI ----------

    def begin_status_edit(self) -> None:
        self.editing_status = self.order is not None

    def cancel_status_edit(self) -> None:
        self.editing_status = False

    def toggle_status_edit(self) -> None:
        if self.editing_status:
            self.cancel_status_edit()
        else:
            self.begin_status_edit()

    # ---------- actions ----------

    async def accept(self) -> TransitionResult:
        if not self.can_accept:
            raise InvalidTransitionError("accept", self.order.status if self.order else None, "order is not pending")
        if self.control_disabled(ActionKind.ACCEPT):
            return TransitionResult(action=ActionKind.ACCEPT, ok=False, order=self.order, skipped=True)
        return await self.gateway.accept_order(self.record)

    async def reject(self) -> TransitionResult:
        if not self.can_reject:
            raise InvalidTransitionError("reject", self.order.status if self.order else None, "order is not pending")
        if self.control_disabled(ActionKind.REJECT):
            return TransitionResult(action=ActionKind.REJECT, ok=False, order=self.order, skipped=True)
        return await self.gateway.reject_order(self.record)

    async def update_status(self, target_status: str) -> TransitionResult:
        if self.order is None:
            raise InvalidTransitionError("update", None, "no order loaded")
        if not self.catalog.is_editable(target_status):
            raise InvalidTransitionError(
                "update", self.order.status, f"{target_status!r} is not offered for manual override"
            )
        record = self.record
        result = await self.gateway.update_status(record, target_status)
        # The edit selector stays open for a retry unless the update went through.
        if result.ok and record is self.record:
            self.editing_status = False
        return result

    async def refund(self, destination: RefundDestination | str) -> TransitionResult:
        if not self.can_refund:
            raise InvalidTransitionError("refund", self.order.status if self.order else None, "order is not returned")
        return await self.gateway.process_refund(self.record, destination)
