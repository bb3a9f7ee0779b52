"""Environment-driven settings for branch tools.

There is no configuration file; every setting comes from a
``BRANCHTOOLS_*`` environment variable and is validated with Pydantic.

Example:
    >>> ToolConfig().git_path
    'git'
"""

from __future__ import annotations

import os
from typing import Mapping

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import ValidationFailedError

ENV_GIT_PATH = "BRANCHTOOLS_GIT_PATH"
ENV_MAX_WORKERS = "BRANCHTOOLS_MAX_WORKERS"


class ToolConfig(BaseModel):
    """Runtime settings shared by all utilities.

    Attributes:
        git_path: Git executable path (default ``git``).
        max_workers: Fan-out width for per-branch metadata queries; ``None``
            means one worker per CPU.

    Example:
        >>> ToolConfig(git_path="  ", max_workers="4")
        ToolConfig(git_path='git', max_workers=4)
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    git_path: str = "git"
    max_workers: int | None = None

    @field_validator("git_path", mode="before")
    @classmethod
    def normalize_git_path(cls, value: object) -> object:
        if value is None:
            return "git"
        if isinstance(value, str):
            normalized = value.strip()
            return normalized or "git"
        return value

    @field_validator("max_workers", mode="before")
    @classmethod
    def normalize_max_workers(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip() or None
        return value

    @field_validator("max_workers")
    @classmethod
    def check_max_workers(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            raise ValueError("must be a positive integer")
        return value

    def worker_limit(self) -> int:
        """Return the effective upper bound on concurrent metadata queries."""
        if self.max_workers is not None:
            return self.max_workers
        return os.cpu_count() or 1


def load_config(environ: Mapping[str, str] | None = None) -> ToolConfig:
    """Build settings from environment variables.

    Args:
        environ: Mapping to read instead of ``os.environ``.

    Returns:
        Validated ``ToolConfig``.

    Raises:
        ValidationFailedError: A variable holds an invalid value.
    """
    env = os.environ if environ is None else environ
    payload = {
        "git_path": env.get(ENV_GIT_PATH),
        "max_workers": env.get(ENV_MAX_WORKERS),
    }
    try:
        return ToolConfig.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailedError(f"invalid environment configuration: {exc}") from exc
