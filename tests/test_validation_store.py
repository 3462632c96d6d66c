from __future__ import annotations

import pytest
from sqlalchemy import inspect, select
from sqlalchemy.exc import IntegrityError

from backend.validations.errors import NotFoundError
from backend.validations.models import (
    CreateChartValidation,
    CreateDashboardValidation,
    CreateTableValidation,
    ValidationErrorType,
    ValidationReference,
)
from backend.validations.tables import validations

PROJECT = "3675b69e-8324-4110-bdca-059031aa8da3"
OTHER_PROJECT = "a2b9c3a5-3f6e-4c8e-9a7a-1f2d2b8f6c11"


def _stored_rows(engine):
    with engine.connect() as connection:
        return connection.execute(select(validations).order_by(validations.c.validation_id)).mappings().all()


def _chart_error(project_uuid=PROJECT, error="Field 'orders_total' no longer exists", chart_uuid="chart-1"):
    return CreateChartValidation(
        project_uuid=project_uuid,
        error=error,
        error_type=ValidationErrorType.CHART,
        chart_uuid=chart_uuid,
        field_name="orders_total",
        chart_name="Revenue by month",
    )


def test_schema_created(engine):
    table_names = set(inspect(engine).get_table_names())
    expected = {
        "validations",
        "saved_queries",
        "spaces",
        "users",
        "dashboards",
        "dashboard_versions",
        "analytics_chart_views",
        "analytics_dashboard_views",
    }
    assert expected.issubset(table_names)


def test_create_maps_each_source_to_flat_row(repo, engine):
    repo.create(
        [
            CreateTableValidation(
                project_uuid=PROJECT,
                error="Model 'orders' failed to compile",
                error_type=ValidationErrorType.MODEL,
                model_name="orders",
            ),
            _chart_error(),
            CreateDashboardValidation(
                project_uuid=PROJECT,
                error="Filter 'status' no longer exists",
                error_type=ValidationErrorType.FILTER,
                dashboard_uuid="dash-1",
                name="Sales overview",
                field_name="status",
            ),
        ],
        job_id="job-1",
    )

    table_row, chart_row, dashboard_row = _stored_rows(engine)

    assert table_row["source"] == "table"
    assert table_row["model_name"] == "orders"
    assert table_row["saved_chart_uuid"] is None
    assert table_row["dashboard_uuid"] is None
    assert table_row["field_name"] is None

    assert chart_row["source"] == "chart"
    assert chart_row["saved_chart_uuid"] == "chart-1"
    assert chart_row["field_name"] == "orders_total"
    assert chart_row["chart_name"] == "Revenue by month"
    assert chart_row["dashboard_uuid"] is None
    assert chart_row["model_name"] is None

    assert dashboard_row["source"] == "dashboard"
    assert dashboard_row["dashboard_uuid"] == "dash-1"
    assert dashboard_row["model_name"] == "Sales overview"
    assert dashboard_row["saved_chart_uuid"] is None
    assert dashboard_row["chart_name"] is None

    assert {row["job_id"] for row in (table_row, chart_row, dashboard_row)} == {"job-1"}
    assert all(row["created_at"] is not None for row in (table_row, chart_row, dashboard_row))


def test_create_without_job_stores_null_job_id(repo, engine):
    repo.create([_chart_error()])
    (row,) = _stored_rows(engine)
    assert row["job_id"] is None


def test_create_is_all_or_nothing(repo, engine):
    broken = CreateChartValidation(
        project_uuid=PROJECT,
        error=None,
        error_type=ValidationErrorType.CHART,
        chart_uuid="chart-2",
        field_name="orders_total",
    )
    with pytest.raises(IntegrityError):
        repo.create([_chart_error(), broken])
    assert _stored_rows(engine) == []


def test_create_rejects_unknown_record_type(repo, engine):
    with pytest.raises(TypeError):
        repo.create([_chart_error(), {"project_uuid": PROJECT, "error": "boom"}])
    assert _stored_rows(engine) == []


def test_create_empty_batch_is_noop(repo, engine):
    repo.create([])
    assert _stored_rows(engine) == []


def test_get_by_validation_id(repo, engine):
    repo.create([_chart_error()])
    (row,) = _stored_rows(engine)

    reference = repo.get_by_validation_id(row["validation_id"])

    assert reference == ValidationReference(validation_id=row["validation_id"], project_uuid=PROJECT)
    assert reference.as_dict() == {"validationId": row["validation_id"], "projectUuid": PROJECT}


def test_get_by_validation_id_missing(repo):
    with pytest.raises(NotFoundError) as excinfo:
        repo.get_by_validation_id(9999)
    assert "9999" in str(excinfo.value)
    assert excinfo.value.status_code == 404


def test_delete_validation_removes_only_that_row(repo, engine):
    repo.create(
        [
            _chart_error(error="first"),
            _chart_error(error="second"),
            _chart_error(error="third"),
        ]
    )
    rows = _stored_rows(engine)
    target = rows[1]["validation_id"]

    repo.delete_validation(target)

    remaining = _stored_rows(engine)
    assert [row["error"] for row in remaining] == ["first", "third"]
    with pytest.raises(NotFoundError):
        repo.get_by_validation_id(target)


def test_delete_project_removes_all_rows_for_that_project(repo, engine):
    repo.create([_chart_error(), _chart_error(error="other")])
    repo.create([_chart_error(error="scoped")], job_id="job-1")
    repo.create([_chart_error(project_uuid=OTHER_PROJECT)])

    repo.delete(PROJECT)

    assert repo.get(PROJECT) == []
    assert repo.get(PROJECT, "job-1") == []
    remaining = _stored_rows(engine)
    assert [row["project_uuid"] for row in remaining] == [OTHER_PROJECT]
