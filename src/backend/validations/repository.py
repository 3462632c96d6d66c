from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete, insert, select
from sqlalchemy.engine import Engine

from .config import RepositoryConfig, build_engine, load_repository_config
from .errors import NotFoundError
from .models import (
    CreateChartValidation,
    CreateDashboardValidation,
    CreateTableValidation,
    CreateValidation,
    ValidationErrorType,
    ValidationReference,
    ValidationResponse,
)
from .report import REPORT_PIPELINES, ReportPipeline
from .tables import metadata, validations

logger = logging.getLogger(__name__)


class ValidationRepository:
    """
    Interface for the validation store.

    Rows are created in batches by a validation run and are never updated;
    they are removed per project or one at a time.
    """

    def create(self, records: Sequence[CreateValidation], job_id: Optional[str] = None) -> None:
        raise NotImplementedError

    def delete(self, project_uuid: str) -> None:
        raise NotImplementedError

    def delete_validation(self, validation_id: int) -> None:
        raise NotImplementedError

    def get_by_validation_id(self, validation_id: int) -> ValidationReference:
        raise NotImplementedError

    def get_section(
        self,
        pipeline: ReportPipeline,
        project_uuid: str,
        job_id: Optional[str] = None,
    ) -> List[ValidationResponse]:
        raise NotImplementedError

    def get(self, project_uuid: str, job_id: Optional[str] = None) -> List[ValidationResponse]:
        report: List[ValidationResponse] = []
        for pipeline in REPORT_PIPELINES:
            report.extend(self.get_section(pipeline, project_uuid, job_id))
        return report


class SQLValidationRepository(ValidationRepository):
    """
    Validation store backed by the ``validations`` table.

    Report sections left-join against the chart, dashboard, space, user and
    analytics tables declared in ``tables.py``.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def create(self, records: Sequence[CreateValidation], job_id: Optional[str] = None) -> None:
        if not records:
            return
        rows = [self._record_to_row(record, job_id) for record in records]
        # One transaction for the whole batch: any failed insert rolls back every row.
        with self.engine.begin() as connection:
            connection.execute(insert(validations), rows)
        logger.info(
            "Stored %d validation errors for project %s (job=%s)",
            len(rows),
            rows[0]["project_uuid"],
            job_id,
        )

    def delete(self, project_uuid: str) -> None:
        with self.engine.begin() as connection:
            result = connection.execute(delete(validations).where(validations.c.project_uuid == project_uuid))
        logger.info("Deleted %d validation errors for project %s", result.rowcount, project_uuid)

    def delete_validation(self, validation_id: int) -> None:
        with self.engine.begin() as connection:
            connection.execute(delete(validations).where(validations.c.validation_id == validation_id))
        logger.info("Deleted validation %s", validation_id)

    def get_by_validation_id(self, validation_id: int) -> ValidationReference:
        query = select(validations.c.validation_id, validations.c.project_uuid).where(
            validations.c.validation_id == validation_id
        )
        with self.engine.connect() as connection:
            row = connection.execute(query).first()
        if row is None:
            raise NotFoundError(f"Validation with id {validation_id} not found")
        return ValidationReference(validation_id=row.validation_id, project_uuid=row.project_uuid)

    def get_section(
        self,
        pipeline: ReportPipeline,
        project_uuid: str,
        job_id: Optional[str] = None,
    ) -> List[ValidationResponse]:
        with self.engine.connect() as connection:
            return pipeline.run(connection, project_uuid, job_id)

    @staticmethod
    def _record_to_row(record: CreateValidation, job_id: Optional[str]) -> Dict[str, Any]:
        match record:
            case CreateTableValidation():
                columns = {"model_name": record.model_name}
            case CreateChartValidation():
                columns = {
                    "saved_chart_uuid": record.chart_uuid,
                    "field_name": record.field_name,
                    "chart_name": record.chart_name,
                }
            case CreateDashboardValidation():
                columns = {
                    "dashboard_uuid": record.dashboard_uuid,
                    "field_name": record.field_name,
                    "chart_name": record.chart_name,
                    "model_name": record.name,
                }
            case _:
                raise TypeError(f"Unsupported validation record: {type(record).__name__}")
        row: Dict[str, Any] = {
            "project_uuid": record.project_uuid,
            "job_id": job_id or None,
            "error": record.error,
            "error_type": ValidationErrorType(record.error_type).value,
            "source": record.source.value,
            "model_name": None,
            "saved_chart_uuid": None,
            "dashboard_uuid": None,
            "field_name": None,
            "chart_name": None,
        }
        row.update(columns)
        return row


def build_repository_from_env(config: Optional[RepositoryConfig] = None) -> Optional[ValidationRepository]:
    cfg = config or load_repository_config()
    if not cfg.database_url:
        return None
    engine = build_engine(cfg)
    if cfg.create_schema:
        metadata.create_all(engine, checkfirst=True)
    return SQLValidationRepository(engine)
