"""
Backend validation store and report.

Validation runs record charts, dashboards and tables that reference fields or
models which no longer exist. This package persists those findings and
assembles the deduplicated, enriched report shown on the project settings
page.
"""

from .errors import ForbiddenError, NotFoundError, ValidationsError  # noqa: F401
from .jobs import (  # noqa: F401
    JobDispatcher,
    UploadGsheetOptions,
    UploadGsheetPayload,
    ValidateProjectPayload,
)
from .models import (  # noqa: F401
    ChartKind,
    CreateChartValidation,
    CreateDashboardValidation,
    CreateTableValidation,
    CreateValidation,
    ValidationErrorChartResponse,
    ValidationErrorDashboardResponse,
    ValidationErrorTableResponse,
    ValidationErrorType,
    ValidationReference,
    ValidationResponse,
    ValidationSourceType,
)
from .permissions import PermissionChecker, PermissionSubject, SessionUser  # noqa: F401
from .repository import (  # noqa: F401
    SQLValidationRepository,
    ValidationRepository,
    build_repository_from_env,
)
from .config import RepositoryConfig, load_repository_config  # noqa: F401
from .service import ValidationService  # noqa: F401
