from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union


class ValidationSourceType(str, Enum):
    CHART = "chart"
    DASHBOARD = "dashboard"
    TABLE = "table"


class ValidationErrorType(str, Enum):
    CHART = "chart"
    SORTING = "sorting"
    FILTER = "filter"
    METRIC = "metric"
    MODEL = "model"
    DIMENSION = "dimension"
    CUSTOM_METRIC = "custom metric"


class ChartKind(str, Enum):
    LINE = "line"
    HORIZONTAL_BAR = "horizontal_bar"
    VERTICAL_BAR = "vertical_bar"
    SCATTER = "scatter"
    AREA = "area"
    MIXED = "mixed"
    PIE = "pie"
    TABLE = "table"
    BIG_NUMBER = "big_number"
    FUNNEL = "funnel"
    CUSTOM = "custom"


CHART_NOT_FOUND_NAME = "Chart does not exist"
DASHBOARD_NOT_FOUND_NAME = "Dashboard does not exist"


# ---------------------------------------------------------------------------
# Records handed to the store by a validation run
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CreateTableValidation:
    """
    A model/explore that could not be compiled.

    Tables are not saved content, so the stored ``model_name`` is the only
    identity the report can show for them.
    """

    project_uuid: str
    error: str
    error_type: ValidationErrorType
    model_name: str
    source: ValidationSourceType = field(default=ValidationSourceType.TABLE, init=False)


@dataclass(frozen=True)
class CreateChartValidation:
    """
    A saved chart referencing a field that no longer exists.

    ``chart_name`` is a snapshot taken at validation time and is used as the
    display name when the chart has since been deleted.
    """

    project_uuid: str
    error: str
    error_type: ValidationErrorType
    chart_uuid: str
    field_name: str
    chart_name: Optional[str] = None
    source: ValidationSourceType = field(default=ValidationSourceType.CHART, init=False)


@dataclass(frozen=True)
class CreateDashboardValidation:
    """
    A dashboard whose filters or tiles reference missing fields or charts.

    ``name`` is the dashboard name at validation time, or ``None`` when the
    run could not resolve it. It is persisted in the ``model_name`` column.
    """

    project_uuid: str
    error: str
    error_type: ValidationErrorType
    dashboard_uuid: str
    name: Optional[str]
    field_name: Optional[str] = None
    chart_name: Optional[str] = None
    source: ValidationSourceType = field(default=ValidationSourceType.DASHBOARD, init=False)


CreateValidation = Union[CreateTableValidation, CreateChartValidation, CreateDashboardValidation]


# ---------------------------------------------------------------------------
# Report entries
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationReference:
    validation_id: int
    project_uuid: str

    def as_dict(self) -> Dict[str, Any]:
        return {"validationId": self.validation_id, "projectUuid": self.project_uuid}


@dataclass(frozen=True)
class ValidationErrorTableResponse:
    validation_id: int
    project_uuid: str
    created_at: datetime
    error: str
    error_type: Union[ValidationErrorType, str]
    name: Optional[str] = None
    source: ValidationSourceType = field(default=ValidationSourceType.TABLE, init=False)

    def as_dict(self) -> Dict[str, Any]:
        return _serialize(self)


@dataclass(frozen=True)
class ValidationErrorChartResponse:
    validation_id: int
    project_uuid: str
    created_at: datetime
    error: str
    error_type: Union[ValidationErrorType, str]
    name: str
    chart_uuid: str
    chart_views: int = 0
    chart_type: ChartKind = ChartKind.VERTICAL_BAR
    last_updated_by: Optional[str] = None
    last_updated_at: Optional[datetime] = None
    space_uuid: Optional[str] = None
    field_name: Optional[str] = None
    source: ValidationSourceType = field(default=ValidationSourceType.CHART, init=False)

    def as_dict(self) -> Dict[str, Any]:
        return _serialize(self)


@dataclass(frozen=True)
class ValidationErrorDashboardResponse:
    validation_id: int
    project_uuid: str
    created_at: datetime
    error: str
    error_type: Union[ValidationErrorType, str]
    name: str
    dashboard_uuid: str
    dashboard_views: int = 0
    last_updated_by: Optional[str] = None
    last_updated_at: Optional[datetime] = None
    space_uuid: Optional[str] = None
    field_name: Optional[str] = None
    chart_name: Optional[str] = None
    source: ValidationSourceType = field(default=ValidationSourceType.DASHBOARD, init=False)

    def as_dict(self) -> Dict[str, Any]:
        return _serialize(self)


ValidationResponse = Union[
    ValidationErrorTableResponse,
    ValidationErrorChartResponse,
    ValidationErrorDashboardResponse,
]


def _camel_case(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.capitalize() for part in tail)


def _serialize(entry: Any) -> Dict[str, Any]:
    """
    Convert a report entry into the JSON shape the frontend consumes.

    Keys are camelCased, enums collapse to their values and datetimes to ISO
    strings. ``None`` values are kept so every kind has a stable key set.
    """

    def _value(obj: Any) -> Any:
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, datetime):
            return obj.isoformat()
        return obj

    return {
        _camel_case(item.name): _value(getattr(entry, item.name))
        for item in fields(entry)
    }
