"""
Status registry for the order lifecycle.

Maps raw status values to display labels and badge severities and defines
the two fixed orderings the console uses: the display flow that drives the
progress timeline and the editable set offered for manual overrides.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from ..data.models import OrderStatus


class Severity(str, Enum):
    """Visual classification of a status badge."""
    POSITIVE = "positive"
    WARNING = "warning"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


DEFAULT_LABELS: Mapping[str, str] = MappingProxyType({
    OrderStatus.PENDING.value: "Order Placed",
    OrderStatus.ACCEPTED.value: "Order Accepted",
    OrderStatus.READY_TO_PICKUP.value: "Ready for Pickup",
    OrderStatus.ACCEPTED_BY_DELIVERY_PARTNER.value: "Accepted by Delivery Agent",
    OrderStatus.PICKED_UP.value: "Order Pickup",
    OrderStatus.OUT_FOR_DELIVERY.value: "Out for Delivery",
    OrderStatus.DELIVERED.value: "Delivered",
    OrderStatus.CANCELLED.value: "Cancelled",
    OrderStatus.RETURNED.value: "Returned",
    OrderStatus.REFUNDED.value: "Refunded",
    OrderStatus.REJECTED.value: "Rejected",
})

# Same sequence for every delivery type.
DEFAULT_DISPLAY_FLOW: tuple[str, ...] = (
    OrderStatus.PENDING.value,
    OrderStatus.ACCEPTED.value,
    OrderStatus.READY_TO_PICKUP.value,
    OrderStatus.ACCEPTED_BY_DELIVERY_PARTNER.value,
    OrderStatus.PICKED_UP.value,
    OrderStatus.OUT_FOR_DELIVERY.value,
    OrderStatus.DELIVERED.value,
)

# `rejected` is not offered for manual override.
DEFAULT_EDITABLE: tuple[str, ...] = DEFAULT_DISPLAY_FLOW + (
    OrderStatus.CANCELLED.value,
    OrderStatus.RETURNED.value,
    OrderStatus.REFUNDED.value,
)

DEFAULT_SEVERITIES: Mapping[str, Severity] = MappingProxyType({
    "pending": Severity.WARNING,
    "accepted": Severity.POSITIVE,
    "confirmed": Severity.POSITIVE,
    "delivered": Severity.POSITIVE,
    "returned": Severity.WARNING,
    "rejected": Severity.NEGATIVE,
    "cancelled": Severity.NEGATIVE,
    "canceled": Severity.NEGATIVE,
})

DEFAULT_PAYMENT_SEVERITIES: Mapping[str, Severity] = MappingProxyType({
    "pending": Severity.WARNING,
    "completed": Severity.POSITIVE,
    "paid": Severity.POSITIVE,
    "failed": Severity.NEGATIVE,
})


def _normalize(status: Optional[str]) -> str:
    return (status or "").strip().lower().replace("-", "_").replace(" ", "_")


@dataclass(frozen=True)
class StatusCatalog:
    """Immutable status configuration.

    Inject an alternate instance to change labels, flows or severities
    without touching module state.
    """
    labels: Mapping[str, str] = field(default_factory=lambda: DEFAULT_LABELS)
    display_flow: Sequence[str] = DEFAULT_DISPLAY_FLOW
    editable: Sequence[str] = DEFAULT_EDITABLE
    severities: Mapping[str, Severity] = field(default_factory=lambda: DEFAULT_SEVERITIES)
    payment_severities: Mapping[str, Severity] = field(default_factory=lambda: DEFAULT_PAYMENT_SEVERITIES)

    def __post_init__(self) -> None:
        # Freeze whatever the caller handed in.
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))
        object.__setattr__(self, "display_flow", tuple(self.display_flow))
        object.__setattr__(self, "editable", tuple(self.editable))
        object.__setattr__(
            self, "severities", MappingProxyType({_normalize(k): v for k, v in self.severities.items()})
        )
        object.__setattr__(
            self,
            "payment_severities",
            MappingProxyType({_normalize(k): v for k, v in self.payment_severities.items()}),
        )

    def label_of(self, status: str) -> str:
        """Display label, or the raw value for statuses this build does not know."""
        return self.labels.get(status, status)

    def severity_of(self, status: Optional[str]) -> Severity:
        """Badge severity, matched case-insensitively; neutral when unknown."""
        return self.severities.get(_normalize(status), Severity.NEUTRAL)

    def payment_severity_of(self, status: Optional[str]) -> Severity:
        return self.payment_severities.get(_normalize(status), Severity.NEUTRAL)

    def flow_index(self, status: Optional[str], delivery_type: Optional[str] = None) -> int:
        """Position of ``status`` in the display flow, -1 when absent."""
        try:
            return self.display_flow_for(delivery_type).index(status)
        except ValueError:
            return -1

    def is_editable(self, status: str) -> bool:
        return status in self.editable

    def display_flow_for(self, delivery_type: Optional[str] = None) -> tuple[str, ...]:
        """Display flow for an order's delivery type.

        Every delivery type currently resolves to the same flow.
        """
        return tuple(self.display_flow)


_default_catalog: Optional[StatusCatalog] = None


def default_catalog() -> StatusCatalog:
    """Return the shared default StatusCatalog."""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = StatusCatalog()
    return _default_catalog
