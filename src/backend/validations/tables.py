"""
SQLAlchemy Core definitions for the validation store and the tables it reads.

Only ``validations`` is written by this package. The remaining tables belong
to the chart, dashboard, space, user and analytics subsystems; they are
declared here so the report queries can reference their columns and so tests
and local databases can be created from one ``MetaData``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, MetaData, String, Table, Text

metadata = MetaData()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


validations = Table(
    "validations",
    metadata,
    Column("validation_id", Integer, primary_key=True, autoincrement=True),
    Column("project_uuid", String(36), nullable=False, index=True),
    Column("job_id", String(255), nullable=True, index=True),
    Column("created_at", DateTime(timezone=True), nullable=False, default=_utcnow),
    Column("error", Text, nullable=False),
    Column("error_type", String(64), nullable=False),
    Column("source", String(32), nullable=True),
    Column("model_name", Text, nullable=True),
    Column("saved_chart_uuid", String(36), nullable=True),
    Column("dashboard_uuid", String(36), nullable=True),
    Column("field_name", Text, nullable=True),
    Column("chart_name", Text, nullable=True),
)

spaces = Table(
    "spaces",
    metadata,
    Column("space_id", Integer, primary_key=True, autoincrement=True),
    Column("space_uuid", String(36), nullable=False, unique=True),
    Column("name", Text, nullable=False),
)

users = Table(
    "users",
    metadata,
    Column("user_id", Integer, primary_key=True, autoincrement=True),
    Column("user_uuid", String(36), nullable=False, unique=True),
    Column("first_name", Text, nullable=True),
    Column("last_name", Text, nullable=True),
)

saved_queries = Table(
    "saved_queries",
    metadata,
    Column("saved_query_id", Integer, primary_key=True, autoincrement=True),
    Column("saved_query_uuid", String(36), nullable=False, unique=True),
    Column("name", Text, nullable=False),
    Column("space_id", ForeignKey("spaces.space_id", ondelete="CASCADE"), nullable=True),
    Column("last_version_chart_kind", String(32), nullable=True),
    Column("last_version_updated_at", DateTime(timezone=True), nullable=True),
    Column("last_version_updated_by_user_uuid", String(36), nullable=True),
)

dashboards = Table(
    "dashboards",
    metadata,
    Column("dashboard_id", Integer, primary_key=True, autoincrement=True),
    Column("dashboard_uuid", String(36), nullable=False, unique=True),
    Column("name", Text, nullable=False),
    Column("space_id", ForeignKey("spaces.space_id", ondelete="CASCADE"), nullable=True),
)

dashboard_versions = Table(
    "dashboard_versions",
    metadata,
    Column("dashboard_version_id", Integer, primary_key=True, autoincrement=True),
    Column("dashboard_id", ForeignKey("dashboards.dashboard_id", ondelete="CASCADE"), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False, default=_utcnow),
    Column("updated_by_user_uuid", String(36), nullable=True),
)

analytics_chart_views = Table(
    "analytics_chart_views",
    metadata,
    Column("chart_uuid", String(36), nullable=False, index=True),
    Column("user_uuid", String(36), nullable=True),
    Column("timestamp", DateTime(timezone=True), nullable=False, default=_utcnow),
)

analytics_dashboard_views = Table(
    "analytics_dashboard_views",
    metadata,
    Column("dashboard_uuid", String(36), nullable=False, index=True),
    Column("user_uuid", String(36), nullable=True),
    Column("timestamp", DateTime(timezone=True), nullable=False, default=_utcnow),
)
