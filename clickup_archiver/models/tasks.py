from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from clickup_archiver.models.common import CamelModel


class TaskStatus(CamelModel):
    status: str = "Unknown"
    color: str | None = None


class Assignee(CamelModel):
    id: int | str | None = None
    username: str | None = None
    email: str | None = None


class Tag(CamelModel):
    name: str
    tag_fg: str | None = None
    tag_bg: str | None = None


class CanonicalTask(CamelModel):
    """A ClickUp task normalized for display and archival.

    Unknown keys sent back by callers are kept so that the archived copy is
    never narrower than what the caller had.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    task_id: str = Field(min_length=1)
    name: str = ""
    description: str = ""
    status: TaskStatus = Field(default_factory=TaskStatus)
    date_created: datetime | None = None
    date_updated: datetime | None = None
    date_closed: datetime | None = None
    due_date: datetime | None = None
    assignees: list[Assignee] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)
    custom_fields: Any = Field(default_factory=list)
    url: str = ""
    list_id: str = ""
    list_name: str = "Unknown List"
    priority: Any = None
    raw_data: dict[str, Any] = Field(default_factory=dict)


# --- Status updates ---


class StatusBatchUpdateRequest(CamelModel):
    task_ids: list[str] = Field(min_length=1)
    status: str = Field(min_length=1)


class StatusUpdateRequest(CamelModel):
    task_id: str = Field(min_length=1)
    status: str = Field(min_length=1)


class StatusUpdateResult(CamelModel):
    task_id: str
    success: bool
    message: str


class StatusBatchUpdateResponse(CamelModel):
    results: list[StatusUpdateResult]


# --- Status reads ---


class TaskStatusReadRequest(CamelModel):
    task_ids: list[str] = Field(min_length=1)


class ListRef(CamelModel):
    id: str
    name: str | None = None


class TaskStatusRead(CamelModel):
    task_id: str
    success: bool
    name: str | None = None
    status: TaskStatus | None = None
    url: str | None = None
    list: ListRef | None = None
    message: str | None = None


class TaskStatusReadResponse(CamelModel):
    results: list[TaskStatusRead]
