from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

from .errors import ForbiddenError
from .jobs import JobDispatcher, JobPayload, UploadGsheetOptions, UploadGsheetPayload, ValidateProjectPayload
from .models import CreateValidation, ValidationReference, ValidationResponse
from .permissions import PermissionSubject, SessionUser
from .report import REPORT_PIPELINES
from .repository import ValidationRepository

logger = logging.getLogger(__name__)


class ValidationService:
    """
    Asynchronous entry point to the validation store.

    The repository is synchronous SQLAlchemy; every call runs in a worker
    thread so request handlers never block the event loop. Store errors
    propagate unchanged and nothing is retried here.
    """

    def __init__(self, repository: ValidationRepository, dispatcher: Optional[JobDispatcher] = None) -> None:
        self.repository = repository
        self.dispatcher = dispatcher

    async def create(self, validations: Sequence[CreateValidation], job_id: Optional[str] = None) -> None:
        await asyncio.to_thread(self.repository.create, list(validations), job_id)

    async def delete(self, project_uuid: str) -> None:
        await asyncio.to_thread(self.repository.delete, project_uuid)

    async def delete_validation(self, validation_id: int) -> None:
        await asyncio.to_thread(self.repository.delete_validation, validation_id)

    async def get_by_validation_id(self, validation_id: int) -> ValidationReference:
        return await asyncio.to_thread(self.repository.get_by_validation_id, validation_id)

    async def get(self, project_uuid: str, job_id: Optional[str] = None) -> List[ValidationResponse]:
        """
        Build the validation report for a project.

        The table, chart and dashboard sections are independent read-only
        queries and run concurrently; they are concatenated in that fixed
        order once all of them have finished.
        """

        sections = await asyncio.gather(
            *(
                asyncio.to_thread(self.repository.get_section, pipeline, project_uuid, job_id)
                for pipeline in REPORT_PIPELINES
            )
        )
        return [entry for section in sections for entry in section]

    # ------------------------------------------------------------------
    # Permission-guarded workflows
    # ------------------------------------------------------------------

    async def get_for_user(
        self,
        user: SessionUser,
        project_uuid: str,
        job_id: Optional[str] = None,
    ) -> List[ValidationResponse]:
        self._require(user, "manage", "Validation", project_uuid)
        return await self.get(project_uuid, job_id)

    async def delete_validation_for_user(self, user: SessionUser, validation_id: int) -> None:
        reference = await self.get_by_validation_id(validation_id)
        self._require(user, "manage", "Validation", reference.project_uuid)
        await self.delete_validation(reference.validation_id)

    async def schedule_validation(self, user: SessionUser, project_uuid: str) -> str:
        self._require(user, "manage", "Validation", project_uuid)
        payload = ValidateProjectPayload(
            project_uuid=project_uuid,
            user_uuid=user.user_uuid,
            organization_uuid=user.organization_uuid,
        )
        return await self._enqueue(payload)

    async def schedule_upload_gsheet(self, user: SessionUser, options: UploadGsheetOptions) -> str:
        self._require(user, "manage", "ExportCsv", options.project_uuid)
        payload = UploadGsheetPayload(
            options=options,
            user_uuid=user.user_uuid,
            organization_uuid=user.organization_uuid,
        )
        return await self._enqueue(payload)

    async def _enqueue(self, payload: JobPayload) -> str:
        if self.dispatcher is None:
            raise RuntimeError("A job dispatcher is required to schedule background jobs.")
        job_id = await self.dispatcher.enqueue(payload)
        logger.info("Scheduled %s job %s", payload.task, job_id)
        return job_id

    @staticmethod
    def _require(user: SessionUser, action: str, kind: str, project_uuid: str) -> None:
        subject = PermissionSubject(kind=kind, organization_uuid=user.organization_uuid, project_uuid=project_uuid)
        if user.ability.cannot(action, subject):
            logger.info("User %s denied %s on %s for project %s", user.user_uuid, action, kind, project_uuid)
            raise ForbiddenError()
