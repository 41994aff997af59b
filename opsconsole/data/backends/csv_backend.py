from __future__ import annotations

from datetime import datetime, timezone
from math import ceil
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from ..interface import OrderApi
from ..models import (
    OrderFilters, AcceptOrderRequest, RejectOrderRequest, UpdateStatusRequest, RefundRequest,
    ApiResponse, OrderResponse, OrderPage, Order, OrderStatus, Pagination,
)
from ...config import get_config
from ...logging import get_logger

REQUIRED_COLUMNS = [
    "order_id", "invoice_number", "store_id", "store_name", "customer_name", "status",
    "delivery_type", "payment_method", "payment_status", "grand_total", "created_at", "updated_at",
]

KNOWN_STATUSES = {s.value for s in OrderStatus}


class CsvOrderApi(OrderApi):
    """
    CSV-backed order backend for local development.
    - Loads ``orders.csv`` from `data_dir` once at construction.
    - Applies transitions to the in-memory frame with the same preconditions
      the real backend enforces, answering ``success: false`` otherwise.
    - Write answers carry a partial order (no populated store), so callers
      must re-read the order to see the full record.
    """

    def __init__(self, data_dir: str | Path = None) -> None:
        if data_dir is None:
            config = get_config()
            data_dir = config.data_dir

        self.data_dir = Path(data_dir)

        # If the path is relative, make it relative to the repository root
        if not self.data_dir.is_absolute():
            current = Path.cwd()
            repo_root = None

            # Look up the directory tree for pyproject.toml
            for parent in [current] + list(current.parents):
                if (parent / "pyproject.toml").exists():
                    repo_root = parent
                    break

            self.data_dir = (repo_root or current) / self.data_dir

        self.logger = get_logger(__name__)
        self._orders = self._load_orders(self.data_dir)

    # ---------- loading helpers ----------

    @staticmethod
    def _load_orders(data_dir: Path) -> pd.DataFrame:
        path = data_dir / "orders.csv"
        if not path.exists():
            raise FileNotFoundError(
                f"Orders file not found: {path}\n"
                f"Please either:\n"
                f"  1. Generate sample data: python -m opsconsole.backend.seed_data\n"
                f"  2. Set DATA_DIR environment variable to point to your data directory\n"
                f"  3. Create a .env file with DATA_DIR=/path/to/your/data"
            )

        try:
            orders = pd.read_csv(path, dtype=str, keep_default_na=False)
        except Exception as e:
            raise RuntimeError(
                f"Error reading {path}: {e}\n"
                f"Please check that the CSV file is valid and readable."
            ) from e

        missing = [c for c in REQUIRED_COLUMNS if c not in orders.columns]
        if missing:
            raise RuntimeError(
                f"Orders file {path} is missing columns: {', '.join(missing)}\n"
                f"  Expected columns: {', '.join(REQUIRED_COLUMNS)}"
            )

        return orders.set_index("order_id", drop=False)

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat(timespec="seconds")

    @staticmethod
    def _full_record(row: pd.Series) -> dict[str, Any]:
        return {
            "_id": row["order_id"],
            "invoiceNumber": row["invoice_number"] or None,
            "status": row["status"],
            "deliveryType": row["delivery_type"] or None,
            "store": {"_id": row["store_id"], "name": row["store_name"]},
            "user": {"name": row["customer_name"]},
            "payment": {"method": row["payment_method"] or None, "status": row["payment_status"] or None},
            "pricing": {"grandTotal": row["grand_total"]},
            "createdAt": row["created_at"] or None,
            "updatedAt": row["updated_at"] or None,
        }

    @staticmethod
    def _partial_record(row: pd.Series) -> dict[str, Any]:
        return {
            "_id": row["order_id"],
            "status": row["status"],
            "store": row["store_id"],
            "updatedAt": row["updated_at"] or None,
        }

    def _row(self, order_id: str) -> Optional[pd.Series]:
        if order_id not in self._orders.index:
            return None
        return self._orders.loc[order_id]

    def _set_status(self, order_id: str, status: str, payment_status: Optional[str] = None) -> pd.Series:
        self._orders.loc[order_id, "status"] = status
        if payment_status is not None:
            self._orders.loc[order_id, "payment_status"] = payment_status
        self._orders.loc[order_id, "updated_at"] = self._now()
        return self._orders.loc[order_id]

    def _check_store(self, row: pd.Series, store_id: Optional[str]) -> Optional[str]:
        if store_id and store_id != row["store_id"]:
            return f"Order {row['order_id']} does not belong to store {store_id}"
        return None

    # ---------- interface implementation ----------

    async def get_order(self, order_id: str) -> OrderResponse:
        row = self._row(order_id)
        if row is None:
            return OrderResponse(success=False, message=f"Order not found: {order_id}")
        return OrderResponse(success=True, data=self._full_record(row))

    async def list_orders(self, filters: OrderFilters) -> OrderPage:
        df = self._orders

        mask = pd.Series(True, index=df.index)
        if filters.status:
            mask &= df["status"] == filters.status
        if filters.delivery_type:
            mask &= df["delivery_type"].str.lower() == filters.delivery_type.lower()
        if filters.search and filters.search.strip():
            s = filters.search.strip().lower()
            mask &= (
                df["order_id"].str.lower().str.contains(s, regex=False)
                | df["invoice_number"].str.lower().str.contains(s, regex=False)
                | df["customer_name"].str.lower().str.contains(s, regex=False)
            )

        matched = df.loc[mask].sort_values("created_at", ascending=False)
        total = len(matched)
        start = (filters.page - 1) * filters.limit
        page_rows = matched.iloc[start:start + filters.limit]

        return OrderPage(
            success=True,
            data=[Order.model_validate(self._full_record(row)) for _, row in page_rows.iterrows()],
            pagination=Pagination(
                page=filters.page,
                limit=filters.limit,
                total=total,
                pages=max(1, ceil(total / filters.limit)),
            ),
        )

    async def accept_order(self, request: AcceptOrderRequest) -> OrderResponse:
        row = self._row(request.order_id)
        if row is None:
            return OrderResponse(success=False, message=f"Order not found: {request.order_id}")
        problem = self._check_store(row, request.store_id)
        if problem:
            return OrderResponse(success=False, message=problem)
        if row["status"] != OrderStatus.PENDING.value:
            return OrderResponse(success=False, message=f"Only pending orders can be accepted (status is {row['status']})")
        row = self._set_status(request.order_id, OrderStatus.ACCEPTED.value)
        self.logger.info(f"Order {request.order_id} accepted")
        return OrderResponse(success=True, message="Order accepted successfully", data=self._partial_record(row))

    async def reject_order(self, request: RejectOrderRequest) -> OrderResponse:
        row = self._row(request.order_id)
        if row is None:
            return OrderResponse(success=False, message=f"Order not found: {request.order_id}")
        problem = self._check_store(row, request.store_id)
        if problem:
            return OrderResponse(success=False, message=problem)
        if row["status"] != OrderStatus.PENDING.value:
            return OrderResponse(success=False, message=f"Only pending orders can be rejected (status is {row['status']})")
        row = self._set_status(request.order_id, OrderStatus.REJECTED.value)
        self.logger.info(f"Order {request.order_id} rejected")
        return OrderResponse(success=True, message="Order rejected successfully", data=self._partial_record(row))

    async def update_status(self, request: UpdateStatusRequest) -> OrderResponse:
        row = self._row(request.order_id)
        if row is None:
            return OrderResponse(success=False, message=f"Order not found: {request.order_id}")
        problem = self._check_store(row, request.store_id)
        if problem:
            return OrderResponse(success=False, message=problem)
        if request.status not in KNOWN_STATUSES:
            return OrderResponse(success=False, message=f"Unknown order status: {request.status}")
        row = self._set_status(request.order_id, request.status)
        self.logger.info(f"Order {request.order_id} moved to {request.status}")
        return OrderResponse(success=True, data=self._partial_record(row))

    async def process_refund(self, request: RefundRequest) -> ApiResponse:
        row = self._row(request.order_id)
        if row is None:
            return ApiResponse(success=False, message=f"Order not found: {request.order_id}")
        if row["status"] != OrderStatus.RETURNED.value:
            return ApiResponse(success=False, message=f"Only returned orders can be refunded (status is {row['status']})")
        self._set_status(request.order_id, OrderStatus.REFUNDED.value, payment_status="refunded")
        destination = request.refund_type.value
        self.logger.info(f"Order {request.order_id} refunded to {destination}")
        return ApiResponse(success=True, message=f"Refund processed to {destination}")
