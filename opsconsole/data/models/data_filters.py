from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class OrderFilters(BaseModel):
    """Filters for the order list."""
    page: int = Field(default=1, ge=1, description="1-based page number")
    limit: int = Field(default=20, ge=1, description="Page size")
    search: Optional[str] = Field(default=None, description="Free text over order id, invoice number and customer")
    status: Optional[str] = Field(default=None, description="Status filter")
    delivery_type: Optional[str] = Field(default=None, description="Delivery type filter")
