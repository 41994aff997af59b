from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from .orders import Order


class ApiResponse(BaseModel):
    """Envelope carried by every order backend response."""
    success: bool = Field(description="False marks an application-level rejection")
    message: Optional[str] = Field(default=None, description="Server message, if any")


class OrderResponse(ApiResponse):
    """Envelope whose payload is a full or partial order record."""
    data: Optional[dict[str, Any]] = Field(default=None, description="Order fields as sent by the server")


class Pagination(BaseModel):
    """Paging block of a list response."""
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1)
    total: int = Field(default=0, ge=0)
    pages: int = Field(default=1, ge=0)


class OrderPage(ApiResponse):
    """One page of the order list."""
    data: list[Order] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)
