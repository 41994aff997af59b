from __future__ import annotations

from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import ValidationError

from ..interface import OrderApi
from ..models import (
    OrderFilters, AcceptOrderRequest, RejectOrderRequest, UpdateStatusRequest, RefundRequest,
    ApiResponse, OrderResponse, OrderPage,
)
from ...config import get_config
from ...errors import ConfigurationError, TransportError
from ...logging import get_logger

EnvelopeT = TypeVar("EnvelopeT", bound=ApiResponse)


class HttpOrderApi(OrderApi):
    """
    REST implementation against the order backend.
    - Opens a fresh AsyncClient per request so an instance can be reused
      across event loops (Streamlit runs every action in its own loop).
    - Answers carrying a ``success`` key are returned as envelopes, even on
      non-2xx status codes; anything else is a TransportError.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        path_prefix: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        config = get_config()
        self.base_url = (base_url or config.api_base_url or "").rstrip("/")
        if not self.base_url:
            raise ConfigurationError("api_base_url", "required by the http order backend")
        self.token = token if token is not None else config.api_token
        self.timeout = timeout if timeout is not None else config.api_timeout_seconds
        self.path_prefix = "/" + (path_prefix or config.orders_path_prefix).strip("/")
        self._transport = transport
        self.logger = get_logger(__name__)

    # ---------- request helpers ----------

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, path: str) -> str:
        return f"{self.path_prefix}/{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        envelope: Type[EnvelopeT],
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> EnvelopeT:
        url = self._url(path)
        self.logger.debug(f"{method} {url}")
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self._headers(),
                transport=self._transport,
            ) as client:
                resp = await client.request(method, url, json=json, params=params)
        except httpx.HTTPError as e:
            self.logger.error(f"{method} {url} failed: {e}")
            raise TransportError(str(e) or "Request failed") from e

        data = self._decode(resp)
        if isinstance(data, dict) and "success" in data:
            try:
                return envelope.model_validate(data)
            except ValidationError as e:
                self.logger.error(f"{method} {url} returned a malformed envelope: {e}")
                raise TransportError(f"Malformed response from {url}", status_code=resp.status_code) from e

        if resp.is_success:
            raise TransportError(
                f"Unexpected response from {url}: no success flag", status_code=resp.status_code
            )

        message = None
        if isinstance(data, dict):
            message = data.get("message") or data.get("error")
        raise TransportError(message or resp.reason_phrase or "Request failed", status_code=resp.status_code)

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            # non-JSON response
            return None

    # ---------- interface implementation ----------

    async def get_order(self, order_id: str) -> OrderResponse:
        return await self._request("GET", f"order-by-id/{order_id}", OrderResponse)

    async def list_orders(self, filters: OrderFilters) -> OrderPage:
        params: dict[str, Any] = {"page": filters.page, "limit": filters.limit}
        if filters.search and filters.search.strip():
            params["search"] = filters.search.strip()
        if filters.status:
            params["status"] = filters.status
        if filters.delivery_type:
            params["deliveryType"] = filters.delivery_type
        return await self._request("GET", "all-orders", OrderPage, params=params)

    async def accept_order(self, request: AcceptOrderRequest) -> OrderResponse:
        return await self._request("POST", "accept-order", OrderResponse, json=request.to_body())

    async def reject_order(self, request: RejectOrderRequest) -> OrderResponse:
        return await self._request("POST", "reject-order", OrderResponse, json=request.to_body())

    async def update_status(self, request: UpdateStatusRequest) -> OrderResponse:
        return await self._request("POST", "status-update", OrderResponse, json=request.to_body())

    async def process_refund(self, request: RefundRequest) -> ApiResponse:
        return await self._request("POST", "process-refund", ApiResponse, json=request.to_body())
