"""Pytest configuration and shared fixtures."""

from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from sales_mcp_server.config import APIConfig, Config, LimitsConfig, MCPConfig
from sales_mcp_server.errors import BackendError
from sales_mcp_server.sales_models import (
    CustomerCandidate, ResolveCustomerResponse, ResolveWarehouseResponse,
    SalesReportRequest, SalesReportResponse, WarehouseCandidate
)
from sales_mcp_server.server import create_app


class StubBackend:
    """Backend stand-in that records every call."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.customers = ResolveCustomerResponse(
            candidates=[CustomerCandidate(id="C1", label="Acme Corp", archived=False)]
        )
        self.warehouses = ResolveWarehouseResponse(
            candidates=[WarehouseCandidate(id="W1", label="Main", code="MSK-01", archived=False)]
        )
        self.report = SalesReportResponse.model_validate({
            "columns": [{"name": "customer", "type": "string"}, {"name": "amount", "type": "number"}],
            "rows": [["Acme Corp", 1200.5]],
            "totals": {"amount": 1200.5}
        })
        self.error: Optional[BackendError] = None
        self.closed = False

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def resolve_customer(self, query: str, limit: int) -> ResolveCustomerResponse:
        self.calls.append(("resolve_customer", query, limit))
        if self.error:
            raise self.error
        return self.customers

    async def resolve_warehouse(self, query: str, limit: int) -> ResolveWarehouseResponse:
        self.calls.append(("resolve_warehouse", query, limit))
        if self.error:
            raise self.error
        return self.warehouses

    async def sales_report(self, request: SalesReportRequest) -> SalesReportResponse:
        self.calls.append(("sales_report", request))
        if self.error:
            raise self.error
        return self.report

    async def close(self):
        self.closed = True


@pytest.fixture
def stub_backend():
    return StubBackend()


@pytest.fixture
def config():
    """Configuration with no auth and default limits."""
    return Config(limits=LimitsConfig(resolve_limit=10, max_rows=5000))


@pytest.fixture
def client(config, stub_backend):
    """Test client backed by the stub backend."""
    return TestClient(create_app(config=config, backend_client=stub_backend))


@pytest.fixture
def secured_client(stub_backend):
    """Test client with bearer tokens on both surfaces."""
    config = Config(
        mcp=MCPConfig(bearer_token="mcp-secret"),
        api=APIConfig(bearer_token="api-secret")
    )
    return TestClient(create_app(config=config, backend_client=stub_backend))


def rpc(method, params=None, request_id=1):
    """Build a JSON-RPC request body."""
    body = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        body["params"] = params
    return body


def tool_call(name, arguments, request_id=1):
    return rpc("tools/call", {"name": name, "arguments": arguments}, request_id)
