from clickup_archiver.models.common import CamelModel
from clickup_archiver.models.tasks import CanonicalTask


class ListTasksResponse(CamelModel):
    success: bool = True
    list_id: str | None = None
    view_id: str | None = None
    page: int
    task_count: int
    total_found: int
    has_more: bool
    timed_out: bool = False
    tasks: list[CanonicalTask]


class ListStatsResponse(CamelModel):
    success: bool = True
    list_id: str
    list_name: str
    task_count: int
    is_partial_count: bool
    archived_count: int
    default_list_id: str | None = None
