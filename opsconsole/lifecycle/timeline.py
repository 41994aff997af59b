from __future__ import annotations

from datetime import datetime
from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..data.models import Order, OrderStatus
from .catalog import StatusCatalog, default_catalog


class TimelineStep(BaseModel):
    """One derived progress step. Never persisted."""
    model_config = ConfigDict(frozen=True)

    status: str = Field(description="Status this step represents")
    display_label: str = Field(description="Label from the status catalog")
    timestamp: Optional[datetime] = Field(default=None, description="Only the first step carries a time")
    completed: bool = False
    current: bool = False


class Timeline:
    """Finite, restartable sequence of steps derived from one order.

    Steps are computed on iteration; iterating twice yields equal steps.
    """

    def __init__(self, order: Order, catalog: StatusCatalog) -> None:
        self._order = order
        self._catalog = catalog
        self._flow = catalog.display_flow_for(order.delivery_type)

    def __len__(self) -> int:
        return len(self._flow)

    def __iter__(self) -> Iterator[TimelineStep]:
        status = self._order.status
        current_index = self._catalog.flow_index(status, self._order.delivery_type)
        # A pending order has not been acted on yet: nothing is done.
        suppress = status == OrderStatus.PENDING.value

        for i, step_status in enumerate(self._flow):
            yield TimelineStep(
                status=step_status,
                display_label=self._catalog.label_of(step_status),
                timestamp=self._order.created_at if i == 0 else None,
                completed=current_index >= i and not suppress,
                current=step_status == status,
            )

    def __getitem__(self, index: int) -> TimelineStep:
        return list(self)[index]


class TimelineBuilder:
    """Derives the progress timeline of an order from its status."""

    def __init__(self, catalog: Optional[StatusCatalog] = None) -> None:
        self.catalog = catalog or default_catalog()

    def build(self, order: Order) -> Timeline:
        return Timeline(order, self.catalog)
