"""Translate tool calls into backend operations and back into tool results."""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .backend_client import BackendClient
from .config import LimitsConfig
from .errors import (
    BackendError, InvalidArgumentsError, LimitExceededError, invalid_params
)
from .models import CallToolResult, text_content
from .sales_models import (
    ResolveArguments, SalesReportArguments, SalesReportRequest, SalesReportResponse
)
from .tools import ToolName, VALID_GROUP_BY, VALID_MEASURES

ArgumentsModel = TypeVar("ArgumentsModel", bound=BaseModel)


def effective_limit(requested: Optional[int], configured_max: int) -> int:
    """Return requested if 0 < requested <= configured_max, else configured_max."""
    if requested is not None and 0 < requested <= configured_max:
        return requested
    return configured_max


# top/max_rows follows the same law as limit/resolve_limit
effective_top = effective_limit


def validate_query(query: str) -> None:
    if not query:
        raise InvalidArgumentsError("Query is required")


def validate_sales_report(args: SalesReportArguments) -> None:
    """Check period, measures and group_by before anything is sent to the backend."""
    if not args.period.from_ or not args.period.to:
        raise InvalidArgumentsError("Period from and to are required")

    for measure in args.measures:
        if measure not in VALID_MEASURES:
            raise InvalidArgumentsError(
                f"Invalid measure: {measure}. Supported: {', '.join(VALID_MEASURES)}"
            )

    for group in args.group_by:
        if group not in VALID_GROUP_BY:
            raise InvalidArgumentsError(
                f"Invalid group_by: {group}. Supported: {', '.join(VALID_GROUP_BY)}"
            )


def check_row_limit(response: SalesReportResponse, max_rows: int) -> None:
    # The backend is asked for at most max_rows but is not trusted to honor it
    if len(response.rows) > max_rows:
        raise LimitExceededError("Result exceeds max_rows limit")


def build_sales_report_request(args: SalesReportArguments, max_rows: int) -> SalesReportRequest:
    return SalesReportRequest(
        period=args.period,
        filters=args.filters,
        group_by=args.group_by,
        measures=args.measures,
        top=effective_top(args.top, max_rows),
        sort=args.sort
    )


def decode_arguments(model: Type[ArgumentsModel], arguments: Optional[Dict[str, Any]]) -> ArgumentsModel:
    """Decode an untyped argument bag; shape errors become invalid params."""
    try:
        return model.model_validate(arguments or {})
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'arguments'}: {err['msg']}"
            for err in e.errors()
        )
        raise invalid_params(f"invalid arguments: {errors}") from e


def tool_error(message: str) -> CallToolResult:
    return CallToolResult(content=[text_content(message)], isError=True)


class RequestTranslator:
    """Bridges tools/call arguments to BackendClient operations.

    Protocol-level failures (undecodable or invalid arguments) are raised as
    ProtocolError before the backend is contacted. Backend failures and the
    row-limit post-check come back as a CallToolResult with isError set.
    """

    def __init__(self, backend: BackendClient, limits: LimitsConfig):
        self.backend = backend
        self.limits = limits
        self.logger = logging.getLogger("mcp_server")
        self._handlers: Dict[ToolName, Callable[[Optional[Dict[str, Any]]], Awaitable[CallToolResult]]] = {
            ToolName.RESOLVE_CUSTOMER: self.resolve_customer,
            ToolName.RESOLVE_WAREHOUSE: self.resolve_warehouse,
            ToolName.SALES_REPORT: self.sales_report,
        }

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> CallToolResult:
        try:
            tool = ToolName(name)
        except ValueError:
            raise invalid_params(f"unknown tool: {name}")

        return await self._handlers[tool](arguments)

    def _decode_resolve(self, arguments: Optional[Dict[str, Any]]) -> ResolveArguments:
        args = decode_arguments(ResolveArguments, arguments)
        try:
            validate_query(args.query)
        except InvalidArgumentsError as e:
            raise invalid_params(str(e))
        return args

    async def resolve_customer(self, arguments: Optional[Dict[str, Any]]) -> CallToolResult:
        args = self._decode_resolve(arguments)
        limit = effective_limit(args.limit, self.limits.resolve_limit)

        try:
            response = await self.backend.resolve_customer(args.query, limit)
        except BackendError as e:
            self.logger.error(f"Tool call failed: {ToolName.RESOLVE_CUSTOMER.value} - Error: {e}")
            return tool_error(str(e))

        return CallToolResult(content=[text_content(response.model_dump_json(exclude_none=True))])

    async def resolve_warehouse(self, arguments: Optional[Dict[str, Any]]) -> CallToolResult:
        args = self._decode_resolve(arguments)
        limit = effective_limit(args.limit, self.limits.resolve_limit)

        try:
            response = await self.backend.resolve_warehouse(args.query, limit)
        except BackendError as e:
            self.logger.error(f"Tool call failed: {ToolName.RESOLVE_WAREHOUSE.value} - Error: {e}")
            return tool_error(str(e))

        return CallToolResult(content=[text_content(response.model_dump_json(exclude_none=True))])

    async def sales_report(self, arguments: Optional[Dict[str, Any]]) -> CallToolResult:
        args = decode_arguments(SalesReportArguments, arguments)
        try:
            validate_sales_report(args)
        except InvalidArgumentsError as e:
            self.logger.warning(f"Tool call rejected: {ToolName.SALES_REPORT.value} - Error: {e}")
            return tool_error(str(e))

        request = build_sales_report_request(args, self.limits.max_rows)

        try:
            response = await self.backend.sales_report(request)
            check_row_limit(response, self.limits.max_rows)
        except (BackendError, LimitExceededError) as e:
            self.logger.error(f"Tool call failed: {ToolName.SALES_REPORT.value} - Error: {e}")
            return tool_error(str(e))

        text = json.dumps(response.to_wire(), ensure_ascii=False, separators=(",", ":"))
        return CallToolResult(content=[text_content(text)])
