"""Tests for the sales backend client."""

import base64
import json

import httpx
import pytest

from sales_mcp_server.backend_client import BackendClient
from sales_mcp_server.config import BackendAuthConfig, BackendConfig
from sales_mcp_server.errors import BackendError
from sales_mcp_server.sales_models import Period, SalesReportRequest, SortSpec


def make_client(handler, **overrides) -> BackendClient:
    config = BackendConfig(base_url="http://backend.example.com/", **overrides)
    return BackendClient(config, transport=httpx.MockTransport(handler))


class Recorder:
    """MockTransport handler recording requests and returning a canned reply."""

    def __init__(self, status_code=200, body=None, content=None):
        self.requests = []
        self.status_code = status_code
        self.body = body
        self.content = content

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.body)


@pytest.mark.asyncio
async def test_resolve_customer_success():
    recorder = Recorder(body={"candidates": [{"id": "C1", "label": "Acme Corp", "city": "Kazan", "archived": False}]})
    client = make_client(recorder)

    response = await client.resolve_customer("Acme", 3)
    await client.close()

    assert response.candidates[0].id == "C1"
    assert response.candidates[0].city == "Kazan"

    request = recorder.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "http://backend.example.com/mcp/resolve/customer"
    assert json.loads(request.content) == {"query": "Acme", "limit": 3}
    assert request.headers["Accept"] == "application/json"
    assert request.headers["Content-Type"] == "application/json"
    assert "Authorization" not in request.headers


@pytest.mark.asyncio
async def test_resolve_warehouse_path():
    recorder = Recorder(body={"candidates": []})
    client = make_client(recorder)

    response = await client.resolve_warehouse("Main", 10)

    assert response.candidates == []
    assert recorder.requests[0].url.path == "/mcp/resolve/warehouse"


@pytest.mark.asyncio
async def test_sales_report_body():
    recorder = Recorder(body={"columns": [{"name": "amount", "type": "number"}], "rows": [[10]], "totals": {"amount": 10}})
    client = make_client(recorder)

    request = SalesReportRequest(
        period=Period.model_validate({"from": "2024-01-01", "to": "2024-01-31"}),
        measures=["amount"],
        top=50,
        sort=[SortSpec(field="amount", dir="desc")]
    )
    response = await client.sales_report(request)

    assert response.totals == {"amount": 10}
    sent = recorder.requests[0]
    assert sent.url.path == "/mcp/reports/sales"
    assert json.loads(sent.content) == {
        "period": {"from": "2024-01-01", "to": "2024-01-31"},
        "filters": {},
        "measures": ["amount"],
        "top": 50,
        "sort": [{"field": "amount", "dir": "desc"}]
    }


@pytest.mark.asyncio
async def test_basic_auth_and_tenant_header():
    recorder = Recorder(body={"candidates": []})
    client = make_client(
        recorder,
        auth=BackendAuthConfig(type="basic", username="svc", password="pw"),
        tenant_header="X-Tenant",
        default_tenant="acme"
    )

    await client.resolve_customer("Acme", 1)

    headers = recorder.requests[0].headers
    assert headers["Authorization"] == "Basic " + base64.b64encode(b"svc:pw").decode()
    assert headers["X-Tenant"] == "acme"


@pytest.mark.asyncio
async def test_bearer_auth():
    recorder = Recorder(body={"candidates": []})
    client = make_client(recorder, auth=BackendAuthConfig(type="bearer", password="tok"))

    await client.resolve_customer("Acme", 1)

    assert recorder.requests[0].headers["Authorization"] == "Bearer tok"


@pytest.mark.asyncio
async def test_tenant_header_needs_both_values():
    recorder = Recorder(body={"candidates": []})
    client = make_client(recorder, tenant_header="X-Tenant")

    await client.resolve_customer("Acme", 1)

    assert "X-Tenant" not in recorder.requests[0].headers


@pytest.mark.asyncio
async def test_non_success_status():
    client = make_client(Recorder(status_code=500, content=b"boom"))

    with pytest.raises(BackendError) as exc_info:
        await client.resolve_customer("Acme", 1)

    assert exc_info.value.status_code == 500
    assert exc_info.value.body == "boom"
    assert str(exc_info.value) == "backend returned status 500: boom"


@pytest.mark.asyncio
async def test_undecodable_body():
    client = make_client(Recorder(content=b"<html>not json</html>"))

    with pytest.raises(BackendError, match="failed to decode response"):
        await client.resolve_warehouse("Main", 1)


@pytest.mark.asyncio
async def test_wrongly_shaped_body():
    client = make_client(Recorder(body={"candidates": "none"}))

    with pytest.raises(BackendError, match="failed to decode response"):
        await client.resolve_customer("Acme", 1)


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [
    b'{"columns":[],"rows":[[NaN]]}',
    b'{"columns":[],"rows":[[Infinity]]}',
    b'{"columns":[],"rows":[[1e400]]}',
])
async def test_non_finite_number_in_body(content):
    client = make_client(Recorder(content=content))

    with pytest.raises(BackendError, match="failed to decode response"):
        await client.sales_report(SalesReportRequest(period=Period.model_validate({"from": "a", "to": "b"})))


@pytest.mark.asyncio
async def test_null_collections_in_body():
    client = make_client(Recorder(content=b'{"candidates":null}'))
    assert (await client.resolve_customer("Acme", 1)).candidates == []

    client = make_client(Recorder(content=b'{"columns":null,"rows":null}'))
    report = await client.sales_report(SalesReportRequest(period=Period.model_validate({"from": "a", "to": "b"})))
    assert report.columns == []
    assert report.rows == []


@pytest.mark.asyncio
async def test_transport_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)

    with pytest.raises(BackendError, match="request failed"):
        await client.sales_report(SalesReportRequest(period=Period.model_validate({"from": "a", "to": "b"})))


@pytest.mark.asyncio
async def test_timeout_is_backend_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client = make_client(handler)

    with pytest.raises(BackendError, match="request failed"):
        await client.resolve_customer("Acme", 1)


def test_mask_sensitive_data():
    client = make_client(Recorder())
    masked = client._mask_sensitive_data({"query": "x", "password": "pw", "nested": [{"token": "t"}]})
    assert masked == {"query": "x", "password": "***MASKED***", "nested": [{"token": "***MASKED***"}]}
