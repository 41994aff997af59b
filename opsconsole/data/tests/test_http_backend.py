import json

import httpx
import pytest

from opsconsole.config import set_config_for_test
from opsconsole.data.backends.http_backend import HttpOrderApi
from opsconsole.data.models import (
    AcceptOrderRequest,
    OrderFilters,
    RefundDestination,
    RefundRequest,
    RejectOrderRequest,
    UpdateStatusRequest,
)
from opsconsole.errors import ConfigurationError, TransportError

ORDER = {"_id": "o1", "status": "pending", "store": {"_id": "s1", "name": "Marina"}}


class Recorder:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, response=None, raise_exc=None):
        self.requests = []
        self.response = response or httpx.Response(200, json={"success": True, "data": ORDER})
        self.raise_exc = raise_exc

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_exc is not None:
            raise self.raise_exc(request)
        return self.response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def api_with(recorder, **kwargs):
    return HttpOrderApi(transport=httpx.MockTransport(recorder), **kwargs)


def test_missing_base_url_is_a_configuration_error():
    set_config_for_test(log_level="WARNING", api_base_url=None)
    with pytest.raises(ConfigurationError):
        HttpOrderApi()


@pytest.mark.asyncio
async def test_get_order_url_and_auth_header():
    recorder = Recorder()
    api = api_with(recorder, token="secret")

    response = await api.get_order("o1")

    assert response.success
    assert response.data == ORDER
    assert recorder.last.method == "GET"
    assert str(recorder.last.url) == "https://orders.test/api/bulk-order/order-by-id/o1"
    assert recorder.last.headers["Authorization"] == "Bearer secret"


@pytest.mark.asyncio
async def test_no_auth_header_without_token():
    recorder = Recorder()
    await api_with(recorder).get_order("o1")
    assert "Authorization" not in recorder.last.headers


@pytest.mark.asyncio
async def test_base_url_path_and_custom_prefix_are_kept():
    recorder = Recorder()
    api = api_with(recorder, base_url="https://gw.test/v2/", path_prefix="orders/")
    await api.get_order("o1")
    assert str(recorder.last.url) == "https://gw.test/v2/orders/order-by-id/o1"


@pytest.mark.asyncio
async def test_list_orders_query_params():
    recorder = Recorder(
        httpx.Response(
            200,
            json={
                "success": True,
                "data": [ORDER],
                "pagination": {"page": 2, "limit": 10, "total": 11, "pages": 2},
            },
        )
    )
    page = await api_with(recorder).list_orders(
        OrderFilters(page=2, limit=10, search="  rajesh ", status="pending", delivery_type="express")
    )

    assert page.pagination.total == 11
    assert page.data[0].id == "o1"
    params = recorder.last.url.params
    assert recorder.last.url.path == "/api/bulk-order/all-orders"
    assert dict(params) == {
        "page": "2",
        "limit": "10",
        "search": "rajesh",
        "status": "pending",
        "deliveryType": "express",
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "call, request_obj, path, body",
    [
        ("accept_order", AcceptOrderRequest(order_id="o1", store_id="s1"), "accept-order", {"orderId": "o1", "storeId": "s1"}),
        ("reject_order", RejectOrderRequest(order_id="o1", store_id="s1"), "reject-order", {"orderId": "o1", "storeId": "s1"}),
        (
            "update_status",
            UpdateStatusRequest(order_id="o1", store_id="s1", status="delivered"),
            "status-update",
            {"orderId": "o1", "storeId": "s1", "status": "delivered"},
        ),
        (
            "process_refund",
            RefundRequest(order_id="o1", refund_type=RefundDestination.WALLET),
            "process-refund",
            {"orderId": "o1", "refundType": "wallet"},
        ),
    ],
)
async def test_writes_post_camel_case_bodies(call, request_obj, path, body):
    recorder = Recorder(httpx.Response(200, json={"success": True, "message": "ok"}))

    response = await getattr(api_with(recorder), call)(request_obj)

    assert response.success and response.message == "ok"
    assert recorder.last.method == "POST"
    assert recorder.last.url.path == f"/api/bulk-order/{path}"
    assert json.loads(recorder.last.content) == body


@pytest.mark.asyncio
async def test_success_false_is_an_envelope_not_an_exception():
    recorder = Recorder(httpx.Response(200, json={"success": False, "message": "stock mismatch"}))
    response = await api_with(recorder).update_status(
        UpdateStatusRequest(order_id="o1", store_id="s1", status="delivered")
    )
    assert not response.success
    assert response.message == "stock mismatch"


@pytest.mark.asyncio
async def test_error_status_with_envelope_is_returned():
    recorder = Recorder(httpx.Response(409, json={"success": False, "message": "Order is not pending"}))
    response = await api_with(recorder).accept_order(AcceptOrderRequest(order_id="o1"))
    assert not response.success
    assert response.message == "Order is not pending"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response, message, status_code",
    [
        (httpx.Response(404, json={"message": "Not here"}), "Not here", 404),
        (httpx.Response(401, json={"error": "Token expired"}), "Token expired", 401),
        (httpx.Response(502, text="<html>bad gateway</html>"), "Bad Gateway", 502),
        (httpx.Response(500), "Internal Server Error", 500),
    ],
)
async def test_error_status_without_envelope_is_transport_error(response, message, status_code):
    with pytest.raises(TransportError) as exc:
        await api_with(Recorder(response)).get_order("o1")
    assert exc.value.message == message
    assert exc.value.status_code == status_code


@pytest.mark.asyncio
async def test_success_status_without_envelope_is_transport_error():
    with pytest.raises(TransportError):
        await api_with(Recorder(httpx.Response(200, json=ORDER))).get_order("o1")


@pytest.mark.asyncio
async def test_malformed_envelope_is_transport_error():
    recorder = Recorder(httpx.Response(200, json={"success": True, "data": [{"_id": "o1"}]}))
    with pytest.raises(TransportError):
        await api_with(recorder).list_orders(OrderFilters())


@pytest.mark.asyncio
async def test_network_failure_is_transport_error():
    def refuse(request):
        return httpx.ConnectError("Connection refused", request=request)

    with pytest.raises(TransportError) as exc:
        await api_with(Recorder(raise_exc=refuse)).get_order("o1")
    assert exc.value.status_code is None
    assert "Connection refused" in exc.value.message
