from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .orders import RefundDestination


class TransitionRequest(BaseModel):
    """Body shared by every order-mutating request."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    order_id: str = Field(alias="orderId", description="Order being transitioned")

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class AcceptOrderRequest(TransitionRequest):
    """Accept a pending order."""
    store_id: Optional[str] = Field(default=None, alias="storeId")


class RejectOrderRequest(TransitionRequest):
    """Reject a pending order."""
    store_id: Optional[str] = Field(default=None, alias="storeId")


class UpdateStatusRequest(TransitionRequest):
    """Manually override the order status."""
    store_id: Optional[str] = Field(default=None, alias="storeId")
    status: str = Field(min_length=1, description="Target status")


class RefundRequest(TransitionRequest):
    """Refund a returned order."""
    refund_type: RefundDestination = Field(alias="refundType")
