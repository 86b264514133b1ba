"""Plan models — Pydantic schemas for specs, phases and verification issues."""

from __future__ import annotations

import datetime
import uuid
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SpecStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    OUTDATED = "outdated"


class PhaseStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class VerificationPriority(str, Enum):
    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"
    OUTDATED = "outdated"


def generate_id() -> str:
    """Short random identifier used for specs, phases and issues."""
    return uuid.uuid4().hex[:8]


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _clean_items(values: list[str]) -> list[str]:
    return [v.strip() for v in values if v and v.strip()]


class Phase(BaseModel):
    """Advisory breakdown of a spec into ordered chunks of work."""

    id: str = Field(default_factory=generate_id)
    title: str = Field(default="New Phase", min_length=1)
    description: str = ""
    status: PhaseStatus = PhaseStatus.PENDING
    tasks: list[str] = Field(default_factory=list)

    @field_validator("tasks")
    @classmethod
    def strip_tasks(cls, v: list[str]) -> list[str]:
        return _clean_items(v)


class Spec(BaseModel):
    """A stored plan that working-tree changes are audited against.

    ``file_boundaries`` and ``out_of_scope`` are case-sensitive substrings
    matched against file paths; ``in_scope`` entries are matched
    case-insensitively. None of them are globs or regexes.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str = Field(..., min_length=1, max_length=500)
    description: str = ""
    status: SpecStatus = SpecStatus.DRAFT
    goal: str = ""
    in_scope: list[str] = Field(default_factory=list)
    out_of_scope: list[str] = Field(default_factory=list)
    acceptance_criteria: list[str] = Field(default_factory=list)
    file_boundaries: list[str] = Field(default_factory=list)
    phases: list[Phase] = Field(default_factory=list)
    created_at: datetime.datetime = Field(default_factory=utcnow)
    updated_at: datetime.datetime = Field(default_factory=utcnow)


class SpecCreate(BaseModel):
    """Input for creating a spec, from the CLI or the HTTP API."""

    title: str = Field(default="Untitled Plan", min_length=1, max_length=500)
    description: str = ""
    goal: str = ""
    in_scope: list[str] = Field(default_factory=list)
    out_of_scope: list[str] = Field(default_factory=list)
    acceptance_criteria: list[str] = Field(default_factory=list)
    file_boundaries: list[str] = Field(default_factory=list)
    phases: list[Phase] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v

    @field_validator("in_scope", "out_of_scope", "acceptance_criteria", "file_boundaries")
    @classmethod
    def strip_items(cls, v: list[str]) -> list[str]:
        return _clean_items(v)


class SpecUpdate(BaseModel):
    """Partial update; fields left as ``None`` are not touched."""

    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    status: SpecStatus | None = None
    goal: str | None = None
    in_scope: list[str] | None = None
    out_of_scope: list[str] | None = None
    acceptance_criteria: list[str] | None = None
    file_boundaries: list[str] | None = None
    phases: list[Phase] | None = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: str | None) -> str | None:
        return v.strip() if isinstance(v, str) else v

    # A blank entry is a substring of every path.
    @field_validator("in_scope", "out_of_scope", "acceptance_criteria", "file_boundaries")
    @classmethod
    def strip_items(cls, v: list[str] | None) -> list[str] | None:
        return _clean_items(v) if v is not None else None


class VerificationIssue(BaseModel):
    """A concrete problem reported by an issue detector."""

    id: str = Field(default_factory=generate_id)
    spec_id: str
    priority: VerificationPriority
    category: str = "incomplete"
    description: str
    file: str | None = None
    line: int | None = None
    suggestion: str | None = None
    resolved: bool = False
    created_at: datetime.datetime = Field(default_factory=utcnow)
