"""
Typed payloads handed to the background job dispatcher.

The dispatcher itself (queue transport, workers, retries) lives outside this
package; it only has to accept one of these payloads and return a job id.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Protocol, Union


@dataclass(frozen=True)
class ValidateProjectPayload:
    task: ClassVar[str] = "validateProject"

    project_uuid: str
    user_uuid: str
    organization_uuid: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "projectUuid": self.project_uuid,
            "userUuid": self.user_uuid,
            "organizationUuid": self.organization_uuid,
        }


@dataclass(frozen=True)
class UploadGsheetOptions:
    """What the caller wants exported to Google Sheets."""

    project_uuid: str
    explore_id: str
    metric_query: Dict[str, Any] = field(default_factory=dict)
    column_order: List[str] = field(default_factory=list)
    show_table_names: bool = False
    custom_labels: Optional[Dict[str, str]] = None
    hidden_fields: Optional[List[str]] = None


@dataclass(frozen=True)
class UploadGsheetPayload:
    task: ClassVar[str] = "uploadGsheetFromQuery"

    options: UploadGsheetOptions
    user_uuid: str
    organization_uuid: str

    def as_dict(self) -> Dict[str, Any]:
        options = asdict(self.options)
        return {
            "projectUuid": options["project_uuid"],
            "exploreId": options["explore_id"],
            "metricQuery": options["metric_query"],
            "columnOrder": options["column_order"],
            "showTableNames": options["show_table_names"],
            "customLabels": options["custom_labels"],
            "hiddenFields": options["hidden_fields"],
            "userUuid": self.user_uuid,
            "organizationUuid": self.organization_uuid,
        }


JobPayload = Union[ValidateProjectPayload, UploadGsheetPayload]


class JobDispatcher(Protocol):
    async def enqueue(self, payload: JobPayload) -> str:
        """Schedule ``payload`` and return the id of the created job."""
        ...
