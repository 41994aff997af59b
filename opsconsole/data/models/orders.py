from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OrderStatus(str, Enum):
    """Status values known to this console build."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    READY_TO_PICKUP = "ready_to_pickup"
    ACCEPTED_BY_DELIVERY_PARTNER = "accepted_by_delivery_partner"
    PICKED_UP = "picked_up"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"
    REFUNDED = "refunded"
    REJECTED = "rejected"


class RefundDestination(str, Enum):
    """Where a refund is paid out."""
    WALLET = "wallet"
    ACCOUNT = "account"


class Payment(BaseModel):
    """Payment sub-record; its status moves independently from the order status."""
    method: Optional[str] = Field(default=None, description="Payment method used")
    status: Optional[str] = Field(default=None, description="Payment status")


class StoreRef(BaseModel):
    """Store reference as populated by the order backend."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(alias="_id", description="Store identifier")
    name: Optional[str] = Field(default=None, description="Store display name")


class Order(BaseModel):
    """Order record as held by the console.

    Relational fields the console does not model are kept as extra fields so
    a refreshed order is never narrower than what the backend sent.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(alias="_id", description="Opaque order identifier")
    invoice_number: Optional[str] = Field(default=None, alias="invoiceNumber", description="Human readable invoice number")
    status: str = Field(min_length=1, description="Lifecycle status")
    delivery_type: Optional[str] = Field(default=None, alias="deliveryType", description="express, next-day or other")
    payment: Optional[Payment] = Field(default=None, description="Payment method and status")
    store: Optional[Union[StoreRef, str]] = Field(default=None, description="Nested store or bare store id")
    store_id: Optional[str] = Field(default=None, alias="storeId", description="Store id when no store is populated")
    user: Optional[Any] = Field(default=None, description="Customer reference")
    shipping_address: Optional[dict[str, Any]] = Field(default=None, alias="shippingAddress")
    items: list[dict[str, Any]] = Field(default_factory=list, description="Order lines")
    pricing: Optional[dict[str, Any]] = Field(default=None, description="Pricing summary")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt", description="Creation time")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt", description="Last update time")

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _blank_or_invalid_to_none(cls, value: Any) -> Any:
        if value is None or isinstance(value, datetime):
            return value
        if isinstance(value, str):
            if not value.strip():
                return None
            try:
                return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
            except ValueError:
                return None
        return value

    @property
    def store_ref_id(self) -> Optional[str]:
        """Store id taken from the nested store, a bare id, or ``storeId``."""
        if isinstance(self.store, StoreRef):
            return self.store.id
        if isinstance(self.store, str) and self.store:
            return self.store
        return self.store_id
