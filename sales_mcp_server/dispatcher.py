"""JSON-RPC dispatcher for the MCP tool endpoint."""

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import ValidationError

from .errors import (
    ProtocolError, internal_error, invalid_params, invalid_request,
    method_not_found, parse_error, unauthorized
)
from .models import (
    JSONRPC_VERSION, PROTOCOL_VERSION, CallToolParams, InitializeParams,
    InitializeResult, JSONRPCError, JSONRPCRequest, JSONRPCResponse,
    ListToolsResult, ServerInfo, loads_strict
)
from .tools import get_tools
from .translator import RequestTranslator

SERVER_NAME = "sales-mcp-server"
SERVER_VERSION = "1.0.0"


class Method(str, Enum):
    INITIALIZE = "initialize"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"


def check_bearer(authorization: Optional[str], token: str) -> bool:
    """True when authorization is "Bearer <token>" (scheme case-insensitive)."""
    if not authorization:
        return False
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return False
    return parts[1] == token


def success_response(request_id: Any, result: Dict[str, Any]) -> JSONRPCResponse:
    return JSONRPCResponse(id=request_id, result=result)


def error_response(request_id: Any, error: ProtocolError) -> JSONRPCResponse:
    return JSONRPCResponse(
        id=request_id,
        error=JSONRPCError(code=int(error.code), message=error.message, data=error.data)
    )


def _salvage_id(body: Any) -> Any:
    if isinstance(body, dict):
        request_id = body.get("id")
        if isinstance(request_id, (str, int, float)) and not isinstance(request_id, bool):
            return request_id
    return None


class JSONRPCDispatcher:
    """Turns a raw request payload into a JSON-RPC response envelope.

    handle() never raises. Authentication, when a token is configured, is
    checked before the payload is even parsed.
    """

    def __init__(self, translator: RequestTranslator, bearer_token: str = ""):
        self.translator = translator
        self.bearer_token = bearer_token
        self.logger = logging.getLogger("mcp_server")
        self._methods: Dict[Method, Callable[[JSONRPCRequest], Awaitable[Dict[str, Any]]]] = {
            Method.INITIALIZE: self._handle_initialize,
            Method.TOOLS_LIST: self._handle_list_tools,
            Method.TOOLS_CALL: self._handle_call_tool,
        }

    async def handle(self, payload: bytes, authorization: Optional[str] = None) -> JSONRPCResponse:
        request_id = None
        try:
            if self.bearer_token and not check_bearer(authorization, self.bearer_token):
                self.logger.warning("Unauthorized MCP request")
                raise unauthorized()

            try:
                body = loads_strict(payload)
            except (ValueError, UnicodeDecodeError):
                raise parse_error()

            request_id = _salvage_id(body)
            request = self._parse_envelope(body)
            request_id = request.id

            try:
                method = Method(request.method)
            except ValueError:
                raise method_not_found(request.method)

            self.logger.info(f"MCP request: method={method.value} id={request_id}")
            result = await self._methods[method](request)
            return success_response(request_id, result)

        except ProtocolError as e:
            return error_response(request_id, e)
        except Exception as e:
            self.logger.exception(f"Unhandled error while dispatching MCP request id={request_id}")
            return error_response(request_id, internal_error(str(e)))

    def _parse_envelope(self, body: Any) -> JSONRPCRequest:
        if not isinstance(body, dict):
            # batches are not supported
            raise invalid_request("request must be a JSON object")

        try:
            request = JSONRPCRequest.model_validate(body)
        except ValidationError as e:
            raise invalid_request(f"malformed request: {e.error_count()} invalid field(s)")

        if request.jsonrpc != JSONRPC_VERSION:
            raise invalid_request()
        return request

    async def _handle_initialize(self, request: JSONRPCRequest) -> Dict[str, Any]:
        """Handle initialize method."""
        if isinstance(request.params, dict):
            try:
                params = InitializeParams.model_validate(request.params)
                self.logger.info(
                    f"Client initialize: {params.clientInfo.name or 'unknown'} "
                    f"{params.clientInfo.version} (protocol {params.protocolVersion or 'unspecified'})"
                )
            except ValidationError:
                self.logger.debug("Ignoring malformed initialize params")

        result = InitializeResult(
            protocolVersion=PROTOCOL_VERSION,
            serverInfo=ServerInfo(name=SERVER_NAME, version=SERVER_VERSION),
            capabilities={"tools": {}}
        )
        return result.model_dump()

    async def _handle_list_tools(self, request: JSONRPCRequest) -> Dict[str, Any]:
        """Handle tools/list method."""
        return ListToolsResult(tools=get_tools()).model_dump()

    async def _handle_call_tool(self, request: JSONRPCRequest) -> Dict[str, Any]:
        """Handle tools/call method."""
        try:
            params = CallToolParams.model_validate(request.params)
        except ValidationError:
            raise invalid_params("failed to parse params")

        result = await self.translator.call_tool(params.name, params.arguments)
        if result.isError:
            self.logger.warning(f"Tool {params.name} returned an error result")
        return result.to_wire()
