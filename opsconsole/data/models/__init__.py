from .data_filters import OrderFilters

from .orders import (
    Order,
    OrderStatus,
    Payment,
    RefundDestination,
    StoreRef,
)
from .requests import (
    AcceptOrderRequest,
    RefundRequest,
    RejectOrderRequest,
    TransitionRequest,
    UpdateStatusRequest,
)
from .responses import (
    ApiResponse,
    OrderPage,
    OrderResponse,
    Pagination,
)

__all__ = [
    # Filter classes
    "OrderFilters",
    # Order models
    "Order",
    "OrderStatus",
    "Payment",
    "RefundDestination",
    "StoreRef",
    # Request models
    "AcceptOrderRequest",
    "RefundRequest",
    "RejectOrderRequest",
    "TransitionRequest",
    "UpdateStatusRequest",
    # Response models
    "ApiResponse",
    "OrderPage",
    "OrderResponse",
    "Pagination",
]
