"""Error types for the JSON-RPC layer, argument validation and backend calls."""

from enum import IntEnum
from typing import Any, Optional


class ErrorCode(IntEnum):
    """JSON-RPC 2.0 error codes used by the tool endpoint."""
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Implementation-defined server error range
    UNAUTHORIZED = -32000


ERROR_MESSAGES = {
    ErrorCode.PARSE_ERROR: "Parse error",
    ErrorCode.INVALID_REQUEST: "Invalid Request",
    ErrorCode.METHOD_NOT_FOUND: "Method not found",
    ErrorCode.INVALID_PARAMS: "Invalid params",
    ErrorCode.INTERNAL_ERROR: "Internal error",
    ErrorCode.UNAUTHORIZED: "Unauthorized",
}


class ProtocolError(Exception):
    """A failure reported as a JSON-RPC error object.

    Raised when the call as a whole is rejected: malformed envelope, unknown
    method or tool, failed authentication, or arguments that do not decode.
    """

    def __init__(self, code: ErrorCode, data: Optional[Any] = None, message: Optional[str] = None):
        self.code = ErrorCode(code)
        self.message = message or ERROR_MESSAGES[self.code]
        self.data = data
        super().__init__(self.message if data is None else f"{self.message}: {data}")


def parse_error() -> ProtocolError:
    return ProtocolError(ErrorCode.PARSE_ERROR)


def invalid_request(details: Optional[str] = None) -> ProtocolError:
    return ProtocolError(ErrorCode.INVALID_REQUEST, details)


def method_not_found(method: str) -> ProtocolError:
    return ProtocolError(ErrorCode.METHOD_NOT_FOUND, method)


def invalid_params(details: str) -> ProtocolError:
    return ProtocolError(ErrorCode.INVALID_PARAMS, details)


def internal_error(details: str) -> ProtocolError:
    return ProtocolError(ErrorCode.INTERNAL_ERROR, details)


def unauthorized() -> ProtocolError:
    return ProtocolError(ErrorCode.UNAUTHORIZED)


class InvalidArgumentsError(ValueError):
    """Tool or REST arguments failed a validation rule."""
    pass


class LimitExceededError(Exception):
    """The backend returned more rows than the configured cap."""
    pass


class BackendError(Exception):
    """Any failure talking to the sales backend."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
