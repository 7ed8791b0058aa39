"""Pydantic models for hosted environments and command options."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


def parse_created(value: object) -> object:
    """Coerce hosting-platform creation timestamps to aware UTC datetimes.

    Accepts epoch seconds (int, float or digit strings), ISO-8601 strings and
    ``YYYY-MM-DD HH:MM:SS`` strings. Other values are returned unchanged for
    pydantic to reject.

    Example:
        >>> parse_created(0)
        datetime.datetime(1970, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)
        >>> parse_created("2024-05-01 10:00:00").isoformat()
        '2024-05-01T10:00:00+00:00'
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        raw = value.strip()
        if raw.isdigit():
            return datetime.fromtimestamp(int(raw), tz=timezone.utc)
        if raw.endswith("Z"):
            raw = f"{raw[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return value
    else:
        return value
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class Environment(BaseModel):
    """A hosted environment as returned by the environment lister.

    Attributes:
        id: Environment name (e.g. ``ci-123`` or ``pr-42``).
        created_at: Creation time in UTC.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    id: str
    created_at: datetime = Field(alias="created")

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("created_at", mode="before")
    @classmethod
    def normalize_created(cls, value: object) -> object:
        return parse_created(value)


class BuildMetadata(BaseModel):
    """Subset of ``build-metadata.json`` written by the build step."""

    model_config = ConfigDict(extra="allow")

    url: str | None = None
    ref: str | None = None
    sha: str | None = None

    @field_validator("url", mode="before")
    @classmethod
    def normalize_url(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip() or None
        return value


class DeleteOptions(BaseModel):
    """Confirmation flags shared by every delete entry point.

    Attributes:
        dry_run: Only report what would be deleted.
        yes: Skip the interactive confirmation.
    """

    model_config = ConfigDict(frozen=True)

    dry_run: bool = False
    yes: bool = False


class DeletePROptions(DeleteOptions):
    """Options for deleting pull-request environments."""


class DeleteCIOptions(DeleteOptions):
    """Options for deleting transient CI environments.

    Attributes:
        keep: Number of newest environments to keep.

    Example:
        >>> DeleteCIOptions(keep=2).keep
        2
    """

    keep: int = Field(default=0, ge=0)
