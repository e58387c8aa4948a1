"""Typed projections of SSC resources."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
import re
from typing import Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

PENDING_APPROVAL_STATUSES = frozenset({"REQUIRE_AUTH", "Requires Approval"})

_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")

T = TypeVar("T")


def _none_as_empty(value: Any) -> Any:
    return "" if value is None else value


def _none_as_zero(value: Any) -> Any:
    return 0 if value is None else value


def _scalar_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# SSC sends null for unset text fields
Text = Annotated[str, BeforeValidator(_none_as_empty)]


class ApprovalState(str, Enum):
    PENDING_APPROVAL = "pending_approval"
    OTHER = "other"


class _Resource(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Project(_Resource):
    id: int
    name: Text
    description: Text = ""


class ProjectVersion(_Resource):
    id: int
    name: Text
    project: Project | None = None

    @property
    def display_label(self) -> str:
        project_name = self.project.name if self.project is not None else ""
        return f"{project_name} - {self.name}"


class Message(_Resource):
    """One structured processing message: ``{"code": ..., "message": ...}``."""

    code: str | None = None
    message: str = ""

    @field_validator("code", mode="before")
    @classmethod
    def _coerce_code(cls, value: Any) -> str | None:
        return _scalar_text(value)

    @field_validator("message", mode="before")
    @classmethod
    def _coerce_message(cls, value: Any) -> str:
        return _scalar_text(value) or ""

    def render(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class Artifact(_Resource):
    """An uploaded scan result.

    ``messages`` is resolved at decode time into one of three shapes: ``None``
    (absent, null or anything unrecognised), a plain ``str``, or a list of
    ``Message``. ``project_version_name`` has no wire alias; only the approval
    scan fills it in.
    """

    id: int
    file_name: Text = Field(default="", alias="fileName")
    file_size: Annotated[int, BeforeValidator(_none_as_zero)] = Field(default=0, ge=0, alias="fileSize")
    status: Text = ""
    upload_date: datetime | None = Field(default=None, alias="uploadDate")
    upload_ip: Text = Field(default="", alias="uploadIP")
    user_name: Text = Field(default="", alias="userName")
    artifact_type: Text = Field(default="", alias="artifactType")
    messages: str | list[Message] | None = None
    processing_messages: Text = Field(default="", alias="processingMessages")
    approval_required: bool = Field(default=False, alias="approvalRequired")
    approval_comment: Text = Field(default="", alias="approvalComment")
    project_version_id: int | None = Field(default=None, alias="projectVersionId")
    project_version_name: str | None = None

    @field_validator("messages", mode="before")
    @classmethod
    def _resolve_messages(cls, value: Any) -> str | list | None:
        if isinstance(value, str):
            return value
        if isinstance(value, list):
            return [entry for entry in value if isinstance(entry, (dict, Message))]
        return None

    @field_validator("approval_required", mode="before")
    @classmethod
    def _null_flag(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("upload_date", mode="before")
    @classmethod
    def _normalize_offset(cls, value: Any) -> Any:
        # SSC emits offsets as +0000; pydantic wants +00:00
        if isinstance(value, str):
            if not value:
                return None
            return _COMPACT_OFFSET.sub(r"\1:\2", value)
        return value

    @property
    def approval_state(self) -> ApprovalState:
        if self.status in PENDING_APPROVAL_STATUSES:
            return ApprovalState.PENDING_APPROVAL
        return ApprovalState.OTHER

    @property
    def requires_approval(self) -> bool:
        return self.approval_state is ApprovalState.PENDING_APPROVAL


class ListEnvelope(BaseModel, Generic[T]):
    """Collection response: ``{"data": [...], "count": n, "totalCount": m}``."""

    model_config = ConfigDict(populate_by_name=True)

    data: list[T]
    count: int = 0
    total_count: int = Field(default=0, alias="totalCount")

    @property
    def truncated(self) -> bool:
        return self.total_count > len(self.data)
