from __future__ import annotations

from typing import Literal, Optional

from .interface import OrderApi
from ..config import get_config


def get_order_api(kind: Optional[Literal["csv", "http"]] = None) -> OrderApi:
    """Build the order backend selected by ``kind`` or by ``order_api_backend``."""
    config = get_config()
    kind = kind or config.order_api_backend
    if kind == "csv":
        from .backends.csv_backend import CsvOrderApi
        # Reads from configured CSV folder
        return CsvOrderApi(data_dir=config.data_dir)
    if kind == "http":
        from .backends.http_backend import HttpOrderApi
        return HttpOrderApi()
    raise ValueError(f"Unknown order api kind: {kind}")
