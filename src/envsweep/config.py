"""Configuration for envsweep.

Settings are read from ``config.json`` in the user configuration directory
and then overridden by ``ENVSWEEP_<FIELD>`` environment variables. Both
sources are validated with Pydantic.

Example:
    >>> SweepConfig().terminus_path
    'terminus'
"""

import json
import os
from pathlib import Path
from typing import Mapping

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from . import paths
from .services.errors import ValidationFailedError

ENV_PREFIX = "ENVSWEEP_"


class SweepConfig(BaseModel):
    """Executable paths and network call limits.

    Attributes:
        terminus_path: Hosting-platform CLI executable.
        git_path: Git executable.
        gh_path: GitHub CLI executable.
        glab_path: GitLab CLI executable.
        command_timeout_seconds: Timeout for each external command.
        provider_retry_attempts: Attempts for pull request status queries.
        provider_retry_backoff_seconds: Linear backoff between attempts.
    """

    model_config = ConfigDict(extra="ignore")

    terminus_path: str = "terminus"
    git_path: str = "git"
    gh_path: str = "gh"
    glab_path: str = "glab"
    command_timeout_seconds: float = Field(default=120.0, gt=0)
    provider_retry_attempts: int = Field(default=2, ge=1)
    provider_retry_backoff_seconds: float = Field(default=0.4, ge=0)

    @field_validator("terminus_path", "git_path", "gh_path", "glab_path", mode="before")
    @classmethod
    def normalize_executable(cls, value: object, info: ValidationInfo) -> object:
        if isinstance(value, str):
            normalized = value.strip()
            if normalized:
                return normalized
            return cls.model_fields[info.field_name].default
        return value


def _env_overrides(environ: Mapping[str, str]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for name in SweepConfig.model_fields:
        key = f"{ENV_PREFIX}{name.upper()}"
        value = environ.get(key)
        if value is not None and value.strip():
            overrides[name] = value.strip()
    return overrides


def _read_config_file(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ValidationFailedError(f"failed to read config {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValidationFailedError(f"config {path} must contain a JSON object")
    return payload


def load_config(
    path: Path | None = None, *, environ: Mapping[str, str] | None = None
) -> SweepConfig:
    """Load configuration from ``path`` (default user config) and the environment."""
    config_file = path if path is not None else paths.config_path()
    payload = _read_config_file(config_file)
    payload.update(_env_overrides(os.environ if environ is None else environ))
    try:
        return SweepConfig.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailedError(
            f"invalid envsweep configuration: {exc}",
            recovery_hint=f"check {config_file} and ENVSWEEP_* environment variables",
        ) from exc
