"""Sales backend HTTP client for resolve and reporting operations."""

import json
import logging
import time
from typing import Any, Dict, Optional, Type, TypeVar
import httpx
from pydantic import BaseModel, ValidationError

from .config import BackendConfig
from .errors import BackendError
from .models import loads_strict
from .sales_models import (
    ResolveRequest, ResolveCustomerResponse, ResolveWarehouseResponse,
    SalesReportRequest, SalesReportResponse
)

ResponseModel = TypeVar("ResponseModel", bound=BaseModel)

RESOLVE_CUSTOMER_PATH = "/mcp/resolve/customer"
RESOLVE_WAREHOUSE_PATH = "/mcp/resolve/warehouse"
SALES_REPORT_PATH = "/mcp/reports/sales"


class BackendClient:
    """Client for the sales backend.

    Holds immutable configuration and a single reusable httpx client. Every
    failure (transport, non-2xx status, undecodable body) surfaces as
    BackendError; nothing is retried.
    """

    def __init__(self, config: BackendConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self.logger = logging.getLogger("backend_client")

        self.logger.info(f"BackendClient initialized for {self.base_url} (timeout={config.timeout}s, auth={config.auth.type or 'none'})")

    def _mask_sensitive_data(self, data: Any) -> Any:
        """Mask sensitive data in requests for logging."""
        if isinstance(data, dict):
            masked_data = {}
            for key, value in data.items():
                if key.lower() in ['password', 'token', 'authorization']:
                    masked_data[key] = "***MASKED***"
                else:
                    masked_data[key] = self._mask_sensitive_data(value)
            return masked_data
        if isinstance(data, list):
            return [self._mask_sensitive_data(item) for item in data]
        return data

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.config.tenant_header and self.config.default_tenant:
            headers[self.config.tenant_header] = self.config.default_tenant
        return headers

    def _auth(self) -> Optional[httpx.Auth]:
        auth = self.config.auth
        if auth.type == "basic":
            return httpx.BasicAuth(auth.username, auth.password)
        return None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            headers = self._headers()
            if self.config.auth.type == "bearer":
                headers["Authorization"] = f"Bearer {self.config.auth.password}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.config.timeout,
                headers=headers,
                auth=self._auth(),
                transport=self._transport
            )
        return self._client

    async def close(self):
        """Close the HTTP client connection."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _post(self, path: str, payload: Dict[str, Any], response_model: Type[ResponseModel]) -> ResponseModel:
        """POST a JSON body and decode the response into response_model."""
        start_time = time.time()
        self.logger.debug(f"Backend request: POST {path}")
        self.logger.debug(f"Request Data: {json.dumps(self._mask_sensitive_data(payload), ensure_ascii=False)}")

        client = await self._get_client()
        try:
            response = await client.post(path, json=payload)
        except httpx.HTTPError as e:
            duration = time.time() - start_time
            self.logger.error(f"Backend request failed: POST {path} - Duration: {duration:.3f}s - Error: {e!r}")
            raise BackendError(f"request failed: {e}") from e

        duration = time.time() - start_time
        self.logger.debug(f"Backend response: POST {path} - Duration: {duration:.3f}s - Status: {response.status_code}")

        if not response.is_success:
            body = response.text
            self.logger.error(f"Backend error response: POST {path} - Status: {response.status_code} - Body: {body}")
            raise BackendError(
                f"backend returned status {response.status_code}: {body}",
                status_code=response.status_code,
                body=body
            )

        try:
            return response_model.model_validate(loads_strict(response.content))
        except (ValueError, ValidationError) as e:
            self.logger.error(f"Backend response decode failed: POST {path} - Error: {e}")
            raise BackendError(f"failed to decode response: {e}", status_code=response.status_code, body=response.text) from e

    async def resolve_customer(self, query: str, limit: int) -> ResolveCustomerResponse:
        """Search customers matching query.

        Args:
            query: Free-text search (name, phone, tax id)
            limit: Maximum number of candidates, already clamped by the caller

        Returns:
            Matching customer candidates
        """
        request = ResolveRequest(query=query, limit=limit)
        return await self._post(RESOLVE_CUSTOMER_PATH, request.model_dump(), ResolveCustomerResponse)

    async def resolve_warehouse(self, query: str, limit: int) -> ResolveWarehouseResponse:
        """Search warehouses by name or code."""
        request = ResolveRequest(query=query, limit=limit)
        return await self._post(RESOLVE_WAREHOUSE_PATH, request.model_dump(), ResolveWarehouseResponse)

    async def sales_report(self, request: SalesReportRequest) -> SalesReportResponse:
        """Run a sales report."""
        return await self._post(SALES_REPORT_PATH, request.to_wire(), SalesReportResponse)
