"""
Python-side configuration for the validation store.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

from pydantic import BaseModel
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine


class RepositoryConfig(BaseModel):
    database_url: Optional[str] = None
    echo: bool = False
    create_schema: bool = False
    """Create the validation and collaborator tables on startup (local development only)."""


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def load_repository_config(overrides: Optional[Dict[str, Any]] = None) -> RepositoryConfig:
    cfg = RepositoryConfig()
    overrides = overrides or {}
    return RepositoryConfig(
        database_url=os.getenv("VALIDATIONS_DATABASE_URL", overrides.get("database_url", cfg.database_url)),
        echo=_env_bool("VALIDATIONS_DATABASE_ECHO", overrides.get("echo", cfg.echo)),
        create_schema=_env_bool("VALIDATIONS_CREATE_SCHEMA", overrides.get("create_schema", cfg.create_schema)),
    )


def build_engine(config: RepositoryConfig) -> Engine:
    if not config.database_url:
        raise ValueError("A database URL is required to build the validation store engine.")
    connect_args: Dict[str, Any] = {}
    if config.database_url.startswith("sqlite"):
        # Report sections are read from worker threads.
        connect_args["check_same_thread"] = False
    return create_engine(config.database_url, echo=config.echo, future=True, connect_args=connect_args)
