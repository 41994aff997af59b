import asyncio
import copy
from typing import Callable, Optional

import pytest

from opsconsole.config import set_config_for_test
from opsconsole.data.models import (
    AcceptOrderRequest,
    ApiResponse,
    Order,
    OrderFilters,
    OrderPage,
    OrderResponse,
    RefundRequest,
    RejectOrderRequest,
    UpdateStatusRequest,
)
from opsconsole.errors import TransportError

STORE = {"_id": "store-1", "name": "Marina Fresh Catch"}


def make_payload(status="pending", **extra):
    payload = {
        "_id": "order-1",
        "invoiceNumber": "INV-0001",
        "status": status,
        "deliveryType": "express",
        "store": dict(STORE),
        "payment": {"method": "card", "status": "paid"},
        "createdAt": "2025-11-29T10:30:00+00:00",
        "updatedAt": "2025-11-29T10:30:00+00:00",
    }
    payload.update(extra)
    return payload


class FakeOrderApi:
    """In-memory order backend that records every call.

    Writes answer with a partial order (id and status only). Set one of the
    ``*_response`` attributes to script an answer, put an exception in
    ``fail_with[method]`` to simulate a transport failure, or set ``gate`` to
    hold writes until the event is set.
    """

    def __init__(self, *payloads):
        self.orders = {p["_id"]: copy.deepcopy(p) for p in payloads}
        self.calls = []
        self.fail_with = {}
        self.accept_response: Optional[OrderResponse] = None
        self.reject_response: Optional[OrderResponse] = None
        self.update_response: Optional[OrderResponse] = None
        self.refund_response: Optional[ApiResponse] = None
        self.read_response: Optional[OrderResponse] = None
        self.on_get: Optional[Callable[[str], None]] = None
        self.gate: Optional[asyncio.Event] = None

    async def _enter(self, method, arg):
        self.calls.append((method, arg))
        if self.gate is not None and method != "get_order":
            await self.gate.wait()
        if method in self.fail_with:
            raise self.fail_with[method]

    def writes(self):
        return [name for name, _ in self.calls if name != "get_order"]

    async def get_order(self, order_id):
        await self._enter("get_order", order_id)
        if self.on_get is not None:
            self.on_get(order_id)
        if self.read_response is not None:
            return self.read_response
        if order_id not in self.orders:
            return OrderResponse(success=False, message=f"Order not found: {order_id}")
        return OrderResponse(success=True, data=copy.deepcopy(self.orders[order_id]))

    async def list_orders(self, filters: OrderFilters):
        await self._enter("list_orders", filters)
        data = [Order.model_validate(p) for p in self.orders.values()]
        return OrderPage(success=True, data=data)

    def _move(self, order_id, status):
        self.orders[order_id]["status"] = status
        return {"_id": order_id, "status": status}

    async def accept_order(self, request: AcceptOrderRequest):
        await self._enter("accept_order", request)
        if self.accept_response is not None:
            return self.accept_response
        return OrderResponse(success=True, message="Order accepted", data=self._move(request.order_id, "accepted"))

    async def reject_order(self, request: RejectOrderRequest):
        await self._enter("reject_order", request)
        if self.reject_response is not None:
            return self.reject_response
        return OrderResponse(success=True, message="Order rejected", data=self._move(request.order_id, "rejected"))

    async def update_status(self, request: UpdateStatusRequest):
        await self._enter("update_status", request)
        if self.update_response is not None:
            return self.update_response
        return OrderResponse(success=True, data=self._move(request.order_id, request.status))

    async def process_refund(self, request: RefundRequest):
        await self._enter("process_refund", request)
        if self.refund_response is not None:
            return self.refund_response
        self._move(request.order_id, "refunded")
        return ApiResponse(success=True)


@pytest.fixture(autouse=True)
def quiet_config():
    set_config_for_test(log_level="WARNING", serialize_order_actions=False)
    yield


@pytest.fixture
def transport_error():
    return TransportError("Connection refused")
