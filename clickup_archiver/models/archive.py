from datetime import datetime

from pydantic import Field

from clickup_archiver.models.common import CamelModel
from clickup_archiver.models.tasks import CanonicalTask


class ArchiveRecord(CanonicalTask):
    archived_at: datetime
    original_task_id: str = Field(alias="_originalTaskId")


class BatchResult(CamelModel):
    task_id: str
    name: str
    saved_to_mongo: bool = False
    deleted_from_click_up: bool = False
    success: bool = False
    message: str = ""


class ArchiveBatchRequest(CamelModel):
    tasks: list[CanonicalTask]


class ArchiveBatchResponse(CamelModel):
    success: bool
    processed: int
    successful: int
    failed: int
    results: list[BatchResult]
