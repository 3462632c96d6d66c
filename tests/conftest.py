from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import pytest
from sqlalchemy import delete, insert
from sqlalchemy.engine import Engine

from backend.validations.config import RepositoryConfig, build_engine
from backend.validations.repository import SQLValidationRepository
from backend.validations.tables import (
    analytics_chart_views,
    analytics_dashboard_views,
    dashboard_versions,
    dashboards,
    metadata,
    saved_queries,
    spaces,
    users,
)


class ContentSeeder:
    """Writes the chart/dashboard/space/user rows the report joins against."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def _insert(self, table, **values) -> int:
        with self.engine.begin() as connection:
            result = connection.execute(insert(table).values(**values))
        return result.inserted_primary_key[0]

    def add_space(self, name: str = "Shared") -> tuple[int, str]:
        space_uuid = str(uuid.uuid4())
        space_id = self._insert(spaces, space_uuid=space_uuid, name=name)
        return space_id, space_uuid

    def add_user(self, first_name: Optional[str], last_name: Optional[str]) -> str:
        user_uuid = str(uuid.uuid4())
        self._insert(users, user_uuid=user_uuid, first_name=first_name, last_name=last_name)
        return user_uuid

    def add_chart(
        self,
        name: str,
        *,
        space_id: Optional[int] = None,
        chart_kind: Optional[str] = None,
        updated_by: Optional[str] = None,
        updated_at: Optional[datetime] = None,
        chart_uuid: Optional[str] = None,
    ) -> tuple[int, str]:
        chart_uuid = chart_uuid or str(uuid.uuid4())
        chart_id = self._insert(
            saved_queries,
            saved_query_uuid=chart_uuid,
            name=name,
            space_id=space_id,
            last_version_chart_kind=chart_kind,
            last_version_updated_at=updated_at,
            last_version_updated_by_user_uuid=updated_by,
        )
        return chart_id, chart_uuid

    def add_dashboard(self, name: str, *, space_id: Optional[int] = None) -> tuple[int, str]:
        dashboard_uuid = str(uuid.uuid4())
        dashboard_id = self._insert(dashboards, dashboard_uuid=dashboard_uuid, name=name, space_id=space_id)
        return dashboard_id, dashboard_uuid

    def add_dashboard_version(
        self,
        dashboard_id: int,
        *,
        created_at: datetime,
        updated_by: Optional[str] = None,
    ) -> int:
        return self._insert(
            dashboard_versions,
            dashboard_id=dashboard_id,
            created_at=created_at,
            updated_by_user_uuid=updated_by,
        )

    def delete_dashboard(self, dashboard_id: int) -> None:
        with self.engine.begin() as connection:
            connection.execute(delete(dashboard_versions).where(dashboard_versions.c.dashboard_id == dashboard_id))
            connection.execute(delete(dashboards).where(dashboards.c.dashboard_id == dashboard_id))

    def delete_chart(self, chart_id: int) -> None:
        with self.engine.begin() as connection:
            connection.execute(delete(saved_queries).where(saved_queries.c.saved_query_id == chart_id))

    def add_chart_views(self, chart_uuid: str, count: int) -> None:
        with self.engine.begin() as connection:
            for _ in range(count):
                connection.execute(insert(analytics_chart_views).values(chart_uuid=chart_uuid))

    def add_dashboard_views(self, dashboard_uuid: str, count: int) -> None:
        with self.engine.begin() as connection:
            for _ in range(count):
                connection.execute(insert(analytics_dashboard_views).values(dashboard_uuid=dashboard_uuid))


@pytest.fixture
def engine(tmp_path):
    db_path = tmp_path / "validations.db"
    engine = build_engine(RepositoryConfig(database_url=f"sqlite:///{db_path}"))
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repo(engine):
    return SQLValidationRepository(engine)


@pytest.fixture
def seeder(engine):
    return ContentSeeder(engine)
