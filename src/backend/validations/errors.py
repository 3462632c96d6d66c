from __future__ import annotations

from typing import Optional


class ValidationsError(Exception):
    """Base class for errors surfaced to callers of the validations package."""

    status_code = 500
    default_message = "Unexpected validations error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class NotFoundError(ValidationsError):
    status_code = 404
    default_message = "Resource not found"


class ForbiddenError(ValidationsError):
    status_code = 403
    default_message = "You don't have access to this resource or action"
