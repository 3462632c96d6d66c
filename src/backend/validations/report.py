from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from sqlalchemy import and_, func, select
from sqlalchemy.engine import Connection, RowMapping
from sqlalchemy.sql.expression import Select

from .models import (
    CHART_NOT_FOUND_NAME,
    DASHBOARD_NOT_FOUND_NAME,
    ChartKind,
    ValidationErrorChartResponse,
    ValidationErrorDashboardResponse,
    ValidationErrorTableResponse,
    ValidationErrorType,
    ValidationResponse,
    ValidationSourceType,
)
from .tables import (
    analytics_chart_views,
    analytics_dashboard_views,
    dashboard_versions,
    dashboards,
    saved_queries,
    spaces,
    users,
    validations,
)

logger = logging.getLogger(__name__)

DedupKey = Tuple[Hashable, ...]


@dataclass(frozen=True)
class ReportPipeline:
    """
    One section of the validation report.

    Every source kind follows the same shape: run an ordered query, keep the
    first row for each dedup key, then map the survivors into report entries.
    Only the join graph, the key and the mapping differ between kinds.
    """

    source: ValidationSourceType
    build_query: Callable[[str, Optional[str]], Select]
    dedup_key: Callable[[RowMapping], DedupKey]
    to_response: Callable[[RowMapping], ValidationResponse]

    def run(self, connection: Connection, project_uuid: str, job_id: Optional[str] = None) -> List[ValidationResponse]:
        rows = connection.execute(self.build_query(project_uuid, job_id)).mappings().all()
        survivors = dedupe_rows(rows, self.dedup_key)
        logger.debug(
            "Validation report section %s: %d rows, %d after dedup (project=%s, job=%s)",
            self.source.value,
            len(rows),
            len(survivors),
            project_uuid,
            job_id,
        )
        return [self.to_response(row) for row in survivors]


def dedupe_rows(rows: Iterable[Mapping[str, Any]], key: Callable[[Any], DedupKey]) -> List[Any]:
    """
    Keep the first row seen for each key, preserving the input order.

    Equivalent to ``DISTINCT ON`` over an already ordered result: ``None`` key
    parts compare equal to each other.
    """

    seen = set()
    survivors = []
    for row in rows:
        row_key = key(row)
        if row_key in seen:
            continue
        seen.add(row_key)
        survivors.append(row)
    return survivors


def parse_view_count(value: Any) -> int:
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Unparseable view count %r, defaulting to 0", value)
        return 0


def _full_name(row: Mapping[str, Any]) -> Optional[str]:
    if not row["first_name"]:
        return None
    return f"{row['first_name']} {row['last_name']}"


def _chart_kind(value: Optional[str]) -> ChartKind:
    try:
        return ChartKind(value)
    except ValueError:
        return ChartKind.VERTICAL_BAR


def _error_type(value: str) -> Union[ValidationErrorType, str]:
    # Rows written outside ``create`` may carry types this release does not know.
    try:
        return ValidationErrorType(value)
    except ValueError:
        logger.warning("Unknown validation error type %r, reporting it verbatim", value)
        return value


def _scoped(statement: Select, project_uuid: str, job_id: Optional[str], source: ValidationSourceType) -> Select:
    # No job id means the latest ad-hoc run, which is stored without one.
    job_clause = validations.c.job_id == job_id if job_id else validations.c.job_id.is_(None)
    return statement.where(
        validations.c.project_uuid == project_uuid,
        job_clause,
        validations.c.source == source.value,
    )


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


def _table_query(project_uuid: str, job_id: Optional[str]) -> Select:
    statement = select(validations).order_by(
        validations.c.error.asc(),
        validations.c.created_at.desc(),
        validations.c.validation_id.desc(),
    )
    return _scoped(statement, project_uuid, job_id, ValidationSourceType.TABLE)


def _table_response(row: RowMapping) -> ValidationErrorTableResponse:
    return ValidationErrorTableResponse(
        validation_id=row["validation_id"],
        project_uuid=row["project_uuid"],
        created_at=row["created_at"],
        error=row["error"],
        error_type=_error_type(row["error_type"]),
        name=row["model_name"],
    )


# ---------------------------------------------------------------------------
# Charts
# ---------------------------------------------------------------------------


def _chart_query(project_uuid: str, job_id: Optional[str]) -> Select:
    views = (
        select(func.count(analytics_chart_views.c.chart_uuid))
        .where(analytics_chart_views.c.chart_uuid == saved_queries.c.saved_query_uuid)
        .correlate(saved_queries)
        .scalar_subquery()
    )
    joined = (
        validations.outerjoin(saved_queries, saved_queries.c.saved_query_uuid == validations.c.saved_chart_uuid)
        .outerjoin(spaces, spaces.c.space_id == saved_queries.c.space_id)
        .outerjoin(users, users.c.user_uuid == saved_queries.c.last_version_updated_by_user_uuid)
    )
    statement = (
        select(
            validations,
            saved_queries.c.name.label("name"),
            saved_queries.c.saved_query_id.label("entity_id"),
            saved_queries.c.last_version_updated_at.label("last_updated_at"),
            saved_queries.c.last_version_chart_kind.label("chart_kind"),
            users.c.first_name,
            users.c.last_name,
            spaces.c.space_uuid,
            views.label("views"),
        )
        .select_from(joined)
        .order_by(
            saved_queries.c.name.asc().nulls_last(),
            saved_queries.c.saved_query_id.desc().nulls_first(),
            validations.c.error.asc(),
            validations.c.created_at.desc(),
            validations.c.validation_id.desc(),
        )
    )
    return _scoped(statement, project_uuid, job_id, ValidationSourceType.CHART)


def _chart_response(row: RowMapping) -> ValidationErrorChartResponse:
    return ValidationErrorChartResponse(
        validation_id=row["validation_id"],
        project_uuid=row["project_uuid"],
        created_at=row["created_at"],
        error=row["error"],
        error_type=_error_type(row["error_type"]),
        name=row["name"] or row["chart_name"] or CHART_NOT_FOUND_NAME,
        chart_uuid=row["saved_chart_uuid"],
        chart_views=parse_view_count(row["views"]),
        chart_type=_chart_kind(row["chart_kind"]),
        last_updated_by=_full_name(row),
        last_updated_at=row["last_updated_at"],
        space_uuid=row["space_uuid"],
        field_name=row["field_name"],
    )


# ---------------------------------------------------------------------------
# Dashboards
# ---------------------------------------------------------------------------


def _dashboard_query(project_uuid: str, job_id: Optional[str]) -> Select:
    views = (
        select(func.count(analytics_dashboard_views.c.dashboard_uuid))
        .where(analytics_dashboard_views.c.dashboard_uuid == dashboards.c.dashboard_uuid)
        .correlate(dashboards)
        .scalar_subquery()
    )
    newer = dashboard_versions.alias("newer_versions")
    latest_version_id = (
        select(func.max(newer.c.dashboard_version_id))
        .where(newer.c.dashboard_id == dashboards.c.dashboard_id)
        .correlate(dashboards)
        .scalar_subquery()
    )
    # Only the latest version is joined, so each validation yields one row.
    joined = (
        validations.outerjoin(dashboards, dashboards.c.dashboard_uuid == validations.c.dashboard_uuid)
        .outerjoin(spaces, dashboards.c.space_id == spaces.c.space_id)
        .outerjoin(
            dashboard_versions,
            and_(
                dashboard_versions.c.dashboard_id == dashboards.c.dashboard_id,
                dashboard_versions.c.dashboard_version_id == latest_version_id,
            ),
        )
        .outerjoin(users, users.c.user_uuid == dashboard_versions.c.updated_by_user_uuid)
    )
    statement = (
        select(
            validations,
            dashboards.c.name.label("name"),
            dashboard_versions.c.dashboard_id.label("entity_id"),
            dashboard_versions.c.created_at.label("last_updated_at"),
            users.c.first_name,
            users.c.last_name,
            spaces.c.space_uuid,
            views.label("views"),
        )
        .select_from(joined)
        .order_by(
            dashboards.c.name.asc().nulls_last(),
            dashboard_versions.c.dashboard_id.desc().nulls_first(),
            validations.c.error.asc(),
            validations.c.created_at.desc(),
            validations.c.validation_id.desc(),
        )
    )
    return _scoped(statement, project_uuid, job_id, ValidationSourceType.DASHBOARD)


def _dashboard_response(row: RowMapping) -> ValidationErrorDashboardResponse:
    return ValidationErrorDashboardResponse(
        validation_id=row["validation_id"],
        project_uuid=row["project_uuid"],
        created_at=row["created_at"],
        error=row["error"],
        error_type=_error_type(row["error_type"]),
        name=row["name"] or row["model_name"] or DASHBOARD_NOT_FOUND_NAME,
        dashboard_uuid=row["dashboard_uuid"],
        dashboard_views=parse_view_count(row["views"]),
        last_updated_by=_full_name(row),
        last_updated_at=row["last_updated_at"],
        space_uuid=row["space_uuid"],
        field_name=row["field_name"],
        chart_name=row["chart_name"],
    )


def _entity_error_key(row: RowMapping) -> DedupKey:
    return (row["name"], row["entity_id"], row["error"])


TABLE_PIPELINE = ReportPipeline(
    source=ValidationSourceType.TABLE,
    build_query=_table_query,
    # Tables have no saved entity behind them, so the message is the identity.
    dedup_key=lambda row: (row["error"],),
    to_response=_table_response,
)

CHART_PIPELINE = ReportPipeline(
    source=ValidationSourceType.CHART,
    build_query=_chart_query,
    dedup_key=_entity_error_key,
    to_response=_chart_response,
)

DASHBOARD_PIPELINE = ReportPipeline(
    source=ValidationSourceType.DASHBOARD,
    build_query=_dashboard_query,
    dedup_key=_entity_error_key,
    to_response=_dashboard_response,
)

# Report sections are concatenated in this order, never sorted across kinds.
REPORT_PIPELINES: Sequence[ReportPipeline] = (TABLE_PIPELINE, CHART_PIPELINE, DASHBOARD_PIPELINE)
