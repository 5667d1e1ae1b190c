"""Sales backend data models and the argument shapes shared by both surfaces."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator


class ResolveRequest(BaseModel):
    """Body sent to the backend resolve endpoints."""
    query: str
    limit: int = 0


class _NullAsDefault(BaseModel):
    """Base that reads an explicit null as the field default.

    Required fields keep the null so validation still rejects it.
    """

    @field_validator("*", mode="before")
    @classmethod
    def _null_is_missing(cls, value, info):
        if value is None:
            field = cls.model_fields[info.field_name]
            if field.is_required():
                return value
            return field.get_default(call_default_factory=True)
        return value


class CustomerCandidate(_NullAsDefault):
    """Customer match returned by the backend."""
    id: str
    label: str
    inn: Optional[str] = None
    city: Optional[str] = None
    archived: bool = False


class ResolveCustomerResponse(_NullAsDefault):
    candidates: List[CustomerCandidate] = Field(default_factory=list)


class WarehouseCandidate(_NullAsDefault):
    """Warehouse match returned by the backend."""
    id: str
    label: str
    code: Optional[str] = None
    archived: bool = False


class ResolveWarehouseResponse(_NullAsDefault):
    candidates: List[WarehouseCandidate] = Field(default_factory=list)


class _Arguments(_NullAsDefault):
    """Base for decoded call arguments.

    Unknown fields are ignored and explicit nulls fall back to the field
    default, so a missing field and a null field behave the same.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Period(_Arguments):
    from_: StrictStr = Field("", alias="from")
    to: StrictStr = ""


class SalesFilters(_Arguments):
    customer_ids: List[StrictStr] = Field(default_factory=list)
    warehouse_ids: List[StrictStr] = Field(default_factory=list)


class SortSpec(_Arguments):
    field: StrictStr = ""
    dir: StrictStr = ""


class SalesReportRequest(BaseModel):
    """Body sent to the backend sales report endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    period: Period
    filters: SalesFilters = Field(default_factory=SalesFilters)
    group_by: List[str] = Field(default_factory=list)
    measures: List[str] = Field(default_factory=list)
    top: int = 0
    sort: List[SortSpec] = Field(default_factory=list)

    def to_wire(self) -> Dict[str, Any]:
        """JSON body with empty optional members left out."""
        body: Dict[str, Any] = {
            "period": {"from": self.period.from_, "to": self.period.to},
        }
        filters: Dict[str, Any] = {}
        if self.filters.customer_ids:
            filters["customer_ids"] = list(self.filters.customer_ids)
        if self.filters.warehouse_ids:
            filters["warehouse_ids"] = list(self.filters.warehouse_ids)
        body["filters"] = filters
        if self.group_by:
            body["group_by"] = list(self.group_by)
        if self.measures:
            body["measures"] = list(self.measures)
        if self.top:
            body["top"] = self.top
        if self.sort:
            body["sort"] = [{"field": s.field, "dir": s.dir} for s in self.sort]
        return body


class Column(_NullAsDefault):
    name: str
    type: str


class SalesReportResponse(_NullAsDefault):
    """Tabular sales report: columns, aligned rows and optional totals."""
    columns: List[Column] = Field(default_factory=list)
    rows: List[List[Any]] = Field(default_factory=list)
    totals: Optional[Dict[str, Any]] = None

    def to_wire(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "columns": [c.model_dump() for c in self.columns],
            "rows": self.rows,
        }
        if self.totals:
            body["totals"] = self.totals
        return body


class ResolveArguments(_Arguments):
    """Arguments of resolve_customer / resolve_warehouse."""
    query: StrictStr = ""
    limit: StrictInt = 0


class SalesReportArguments(_Arguments):
    """Arguments of sales_report."""
    period: Period = Field(default_factory=Period)
    filters: SalesFilters = Field(default_factory=SalesFilters)
    group_by: List[StrictStr] = Field(default_factory=list)
    measures: List[StrictStr] = Field(default_factory=list)
    top: StrictInt = 0
    sort: List[SortSpec] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    """Uniform REST error body."""
    error: str
    message: str
