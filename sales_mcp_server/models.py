"""MCP protocol models."""

import json
import math
from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr, model_validator

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"

RequestId = Optional[Union[StrictInt, StrictFloat, StrictStr]]


def _reject_constant(name: str):
    raise ValueError(f"non-finite number {name} is not valid JSON")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number {text} is out of range")
    return value


def loads_strict(data: Union[str, bytes]) -> Any:
    """json.loads that refuses NaN, Infinity and overflowing numbers."""
    return json.loads(data, parse_constant=_reject_constant, parse_float=_finite_float)


class JSONRPCRequest(BaseModel):
    """JSON-RPC request envelope."""
    jsonrpc: Optional[StrictStr] = None
    id: RequestId = None
    method: StrictStr = ""
    params: Optional[Any] = None


class JSONRPCError(BaseModel):
    """JSON-RPC error object."""
    code: int
    message: str
    data: Optional[Any] = None


class JSONRPCResponse(BaseModel):
    """JSON-RPC response envelope. Exactly one of result and error is set."""
    jsonrpc: str = JSONRPC_VERSION
    id: RequestId = None
    result: Optional[Any] = None
    error: Optional[JSONRPCError] = None

    @model_validator(mode="after")
    def _result_xor_error(self):
        if (self.result is None) == (self.error is None):
            raise ValueError("Response must carry exactly one of result or error")
        return self

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with id always present and only the populated member."""
        body: Dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            body["error"] = self.error.model_dump(exclude_none=True)
        else:
            body["result"] = self.result
        return body


class ClientInfo(BaseModel):
    """Client identification sent with initialize."""
    name: str = ""
    version: str = ""


class InitializeParams(BaseModel):
    """Initialize method params."""
    protocolVersion: str = ""
    clientInfo: ClientInfo = Field(default_factory=ClientInfo)
    capabilities: Optional[Any] = None


class ServerInfo(BaseModel):
    """Server information model."""
    name: str
    version: str


class InitializeResult(BaseModel):
    """Initialize method result."""
    protocolVersion: str
    serverInfo: ServerInfo
    capabilities: Dict[str, Any]


class Tool(BaseModel):
    """Tool definition model."""
    model_config = {"frozen": True}

    name: str
    description: str
    inputSchema: Dict[str, Any]


class ListToolsResult(BaseModel):
    """List tools result."""
    tools: List[Tool]


class CallToolParams(BaseModel):
    """Call tool params."""
    name: StrictStr
    arguments: Optional[Dict[str, Any]] = None


class ContentBlock(BaseModel):
    """Content block. Only the text variant exists."""
    type: Literal["text"] = "text"
    text: str


def text_content(text: str) -> ContentBlock:
    return ContentBlock(text=text)


class CallToolResult(BaseModel):
    """Call tool result."""
    content: List[ContentBlock]
    isError: Optional[bool] = None

    def to_wire(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"content": [block.model_dump() for block in self.content]}
        if self.isError:
            result["isError"] = True
        return result
