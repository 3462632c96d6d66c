from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class PermissionSubject:
    kind: str
    organization_uuid: str
    project_uuid: Optional[str] = None


class PermissionChecker(Protocol):
    """Ability checks resolved by the application's authorization layer."""

    def cannot(self, action: str, subject: PermissionSubject) -> bool:
        ...


@dataclass(frozen=True)
class SessionUser:
    user_uuid: str
    organization_uuid: str
    ability: PermissionChecker
