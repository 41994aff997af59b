# opsconsole/data/interface.py
from __future__ import annotations

from typing import Protocol

from .models import (
    # Filter classes
    OrderFilters,
    # Request models
    AcceptOrderRequest,
    RejectOrderRequest,
    UpdateStatusRequest,
    RefundRequest,
    # Response models
    ApiResponse,
    OrderResponse,
    OrderPage,
)


# ---- Order backend protocol ----

class OrderApi(Protocol):
    """
    Backend-agnostic contract for the order console.

    The backend is the source of truth for every order. Implementations:
    - MUST raise TransportError when a request never reached the backend or
      came back without an application envelope.
    - MUST return the envelope (``success`` flag plus optional message) for
      every answered request, including ``success: false`` rejections.
    - MUST NOT cache reads: each call goes back to the source.
    """

    # Reads

    async def get_order(self, order_id: str) -> OrderResponse:
        """Read the full order record by id."""
        ...

    async def list_orders(self, filters: OrderFilters) -> OrderPage:
        """List one page of orders."""
        ...

    # Writes

    async def accept_order(self, request: AcceptOrderRequest) -> OrderResponse:
        """Accept a pending order. The payload may be a partial order."""
        ...

    async def reject_order(self, request: RejectOrderRequest) -> OrderResponse:
        """Reject a pending order. The payload may be a partial order."""
        ...

    async def update_status(self, request: UpdateStatusRequest) -> OrderResponse:
        """Override the order status. The payload may be a partial order."""
        ...

    async def process_refund(self, request: RefundRequest) -> ApiResponse:
        """Refund a returned order. Carries a message only, no order payload."""
        ...
