"""Tool registry exposed through tools/list."""

from enum import Enum
from typing import List, Tuple

from .models import Tool


class ToolName(str, Enum):
    RESOLVE_CUSTOMER = "resolve_customer"
    RESOLVE_WAREHOUSE = "resolve_warehouse"
    SALES_REPORT = "sales_report"


VALID_MEASURES = ("amount", "qty")
VALID_GROUP_BY = ("customer", "warehouse")


def _resolve_schema(query_description: str) -> dict:
    return {
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": query_description
            },
            "limit": {
                "type": "integer",
                "description": "Maximum number of results to return (default: 10)"
            }
        },
        "required": ["query"]
    }


TOOLS: Tuple[Tool, ...] = (
    Tool(
        name=ToolName.RESOLVE_CUSTOMER.value,
        description="Search customers by name, phone, or other identifying information. Returns a list of matching candidates for disambiguation.",
        inputSchema=_resolve_schema("Search query (name, phone, etc.)")
    ),
    Tool(
        name=ToolName.RESOLVE_WAREHOUSE.value,
        description="Search warehouses by name or code. Returns a list of matching candidates for disambiguation.",
        inputSchema=_resolve_schema("Search query (warehouse name or code)")
    ),
    Tool(
        name=ToolName.SALES_REPORT.value,
        description="Get sales report for a specified period with optional filters by customer and warehouse. Supports grouping and sorting.",
        inputSchema={
            "type": "object",
            "properties": {
                "period": {
                    "type": "object",
                    "description": "Report period",
                    "properties": {
                        "from": {
                            "type": "string",
                            "format": "date",
                            "description": "Start date (YYYY-MM-DD)"
                        },
                        "to": {
                            "type": "string",
                            "format": "date",
                            "description": "End date (YYYY-MM-DD)"
                        }
                    },
                    "required": ["from", "to"]
                },
                "filters": {
                    "type": "object",
                    "description": "Optional filters",
                    "properties": {
                        "customer_ids": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Filter by customer IDs (from resolve_customer)"
                        },
                        "warehouse_ids": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Filter by warehouse IDs (from resolve_warehouse)"
                        }
                    }
                },
                "group_by": {
                    "type": "array",
                    "items": {"type": "string", "enum": list(VALID_GROUP_BY)},
                    "description": "Group results by dimensions"
                },
                "measures": {
                    "type": "array",
                    "items": {"type": "string", "enum": list(VALID_MEASURES)},
                    "description": "Measures to include (default: amount, qty)"
                },
                "top": {
                    "type": "integer",
                    "description": "Limit number of rows returned"
                },
                "sort": {
                    "type": "array",
                    "description": "Sort order",
                    "items": {
                        "type": "object",
                        "properties": {
                            "field": {"type": "string"},
                            "dir": {"type": "string", "enum": ["asc", "desc"]}
                        }
                    }
                }
            },
            "required": ["period"]
        }
    ),
)


def get_tools() -> List[Tool]:
    """Return the registered tools in their fixed order."""
    return list(TOOLS)
