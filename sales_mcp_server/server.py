"""FastAPI application exposing the MCP tool endpoint and the REST API."""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .backend_client import BackendClient
from .config import Config, load_config
from .dispatcher import SERVER_VERSION, JSONRPCDispatcher
from .logging_config import setup_gateway_logging
from .rest_api import APIError, create_rest_router
from .sales_models import ErrorResponse
from .translator import RequestTranslator

REQUEST_ID_HEADER = "X-Request-ID"


def _error_body(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, message=message).model_dump()
    )


class MCPServer:
    """Sales gateway server."""

    def __init__(self, config_path: Optional[str] = None, config: Optional[Config] = None,
                 backend_client: Optional[BackendClient] = None):
        self.config = config if config is not None else load_config(config_path)

        setup_gateway_logging(self.config.to_dict())
        self.logger = logging.getLogger("mcp_server")

        self.backend = backend_client or BackendClient(self.config.backend)
        self.translator = RequestTranslator(self.backend, self.config.limits)
        self.dispatcher = JSONRPCDispatcher(self.translator, self.config.mcp.bearer_token)

        self.app = FastAPI(title="Sales MCP Server", version=SERVER_VERSION, lifespan=self._lifespan)
        self.setup_middleware()
        self.setup_exception_handlers()
        self.setup_routes()
        self.logger.info("MCP Server initialized successfully")

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        yield
        await self.backend.close()

    def get_backend(self) -> BackendClient:
        return self.backend

    def setup_middleware(self):
        """Request id propagation and access logging."""
        http_logger = logging.getLogger("http")

        @self.app.middleware("http")
        async def log_requests(request: Request, call_next):
            request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
            start_time = time.time()
            response = await call_next(request)
            duration_ms = (time.time() - start_time) * 1000
            response.headers[REQUEST_ID_HEADER] = request_id
            http_logger.info(
                f"HTTP {request.method} {request.url.path} - Status: {response.status_code} "
                f"- Duration: {duration_ms:.1f}ms - Request ID: {request_id}"
            )
            return response

    def setup_exception_handlers(self):
        """Render every REST failure as {"error", "message"}."""

        @self.app.exception_handler(APIError)
        async def handle_api_error(request: Request, exc: APIError):
            return _error_body(exc.status_code, exc.error, exc.message)

        @self.app.exception_handler(RequestValidationError)
        async def handle_validation_error(request: Request, exc: RequestValidationError):
            return _error_body(400, "invalid_request", "Failed to parse request body")

        @self.app.exception_handler(StarletteHTTPException)
        async def handle_http_error(request: Request, exc: StarletteHTTPException):
            if exc.status_code == 404:
                return _error_body(404, "not_found", "Endpoint not found")
            if exc.status_code == 405:
                return _error_body(405, "method_not_allowed", "Method not allowed")
            return _error_body(exc.status_code, "http_error", str(exc.detail))

        @self.app.exception_handler(Exception)
        async def handle_unexpected_error(request: Request, exc: Exception):
            self.logger.exception(f"Unhandled error on {request.method} {request.url.path}")
            return _error_body(500, "internal_error", "Internal server error")

    def setup_routes(self):
        """Setup FastAPI routes."""
        self.app.include_router(create_rest_router(self.config, self.get_backend))

        if not self.config.mcp.enabled:
            self.logger.info("MCP endpoint disabled")
            return

        if not self.config.mcp.bearer_token:
            self.logger.warning("No MCP bearer token configured; /mcp is unauthenticated")

        @self.app.post("/mcp")
        async def handle_mcp_request(request: Request):
            """Handle MCP JSON-RPC requests."""
            payload = await request.body()
            response = await self.dispatcher.handle(payload, request.headers.get("Authorization"))
            return JSONResponse(content=response.to_wire())

        self.logger.info("MCP endpoint enabled")


def create_app(config_path: Optional[str] = None, config: Optional[Config] = None,
               backend_client: Optional[BackendClient] = None) -> FastAPI:
    """Create and return the FastAPI app."""
    server = MCPServer(config_path, config=config, backend_client=backend_client)
    return server.app
