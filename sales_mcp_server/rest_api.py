"""REST surface over the sales backend."""

import logging
from typing import Callable, List

from fastapi import APIRouter, Depends, Request, status

from .backend_client import BackendClient
from .config import Config
from .dispatcher import check_bearer
from .errors import BackendError, InvalidArgumentsError, LimitExceededError
from .sales_models import (
    HealthResponse, ResolveArguments, ResolveCustomerResponse,
    ResolveWarehouseResponse, SalesReportArguments, SalesReportResponse
)
from .translator import (
    build_sales_report_request, check_row_limit, effective_limit,
    validate_query, validate_sales_report
)

logger = logging.getLogger("rest_api")


class APIError(Exception):
    """Rendered as {"error": ..., "message": ...} with the given status."""

    def __init__(self, status_code: int, error: str, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.message = message


def bearer_auth(token: str) -> Callable:
    """Dependency that requires "Authorization: Bearer <token>"."""

    async def require_bearer(request: Request) -> None:
        if not check_bearer(request.headers.get("Authorization"), token):
            logger.warning(f"Unauthorized request to {request.url.path}")
            raise APIError(status.HTTP_401_UNAUTHORIZED, "unauthorized", "Invalid or missing Bearer token")

    return require_bearer


def _validation_error(exc: InvalidArgumentsError) -> APIError:
    return APIError(status.HTTP_400_BAD_REQUEST, "validation_error", str(exc))


def create_rest_router(config: Config, get_backend: Callable[[], BackendClient]) -> APIRouter:
    """Build the REST routes.

    Authentication is decided here, once: with no api.bearer_token the
    endpoints are open.
    """
    router = APIRouter()
    limits = config.limits

    @router.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health() -> HealthResponse:
        return HealthResponse()

    dependencies: List = []
    if config.api.bearer_token:
        dependencies.append(Depends(bearer_auth(config.api.bearer_token)))
    else:
        logger.warning("No API bearer token configured; REST endpoints are unauthenticated")

    protected = APIRouter(dependencies=dependencies, tags=["Sales"])

    @protected.post("/resolve/customer")
    async def resolve_customer(payload: ResolveArguments, backend: BackendClient = Depends(get_backend)):
        try:
            validate_query(payload.query)
        except InvalidArgumentsError as e:
            raise _validation_error(e)

        limit = effective_limit(payload.limit, limits.resolve_limit)
        try:
            response: ResolveCustomerResponse = await backend.resolve_customer(payload.query, limit)
        except BackendError as e:
            logger.error(f"Failed to resolve customer '{payload.query}': {e}")
            raise APIError(status.HTTP_502_BAD_GATEWAY, "backend_error", "Failed to resolve customer from backend")

        return response.model_dump(exclude_none=True)

    @protected.post("/resolve/warehouse")
    async def resolve_warehouse(payload: ResolveArguments, backend: BackendClient = Depends(get_backend)):
        try:
            validate_query(payload.query)
        except InvalidArgumentsError as e:
            raise _validation_error(e)

        limit = effective_limit(payload.limit, limits.resolve_limit)
        try:
            response: ResolveWarehouseResponse = await backend.resolve_warehouse(payload.query, limit)
        except BackendError as e:
            logger.error(f"Failed to resolve warehouse '{payload.query}': {e}")
            raise APIError(status.HTTP_502_BAD_GATEWAY, "backend_error", "Failed to resolve warehouse from backend")

        return response.model_dump(exclude_none=True)

    @protected.post("/reports/sales")
    async def sales_report(payload: SalesReportArguments, backend: BackendClient = Depends(get_backend)):
        try:
            validate_sales_report(payload)
        except InvalidArgumentsError as e:
            raise _validation_error(e)

        request = build_sales_report_request(payload, limits.max_rows)
        try:
            response: SalesReportResponse = await backend.sales_report(request)
        except BackendError as e:
            logger.error(f"Failed to get sales report: {e}")
            raise APIError(status.HTTP_502_BAD_GATEWAY, "backend_error", "Failed to get sales report from backend")

        try:
            check_row_limit(response, limits.max_rows)
        except LimitExceededError as e:
            raise APIError(status.HTTP_400_BAD_REQUEST, "limit_exceeded", str(e))

        return response.to_wire()

    router.include_router(protected)
    return router
