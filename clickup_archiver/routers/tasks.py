from fastapi import APIRouter, Header

from clickup_archiver.models.tasks import (
    StatusBatchUpdateRequest,
    StatusBatchUpdateResponse,
    StatusUpdateRequest,
    StatusUpdateResult,
    TaskStatusReadRequest,
    TaskStatusReadResponse,
)
from clickup_archiver.services import task_status as status_service
from clickup_archiver.services.clickup import configured_api_key, header_api_key

router = APIRouter(prefix="/api", tags=["tasks"])


@router.post("/updateTasks")
async def update_tasks(
    request: StatusBatchUpdateRequest,
    authorization: str | None = Header(default=None),
) -> StatusBatchUpdateResponse:
    api_key = header_api_key(authorization)
    results = await status_service.update_statuses(request.task_ids, request.status, api_key)
    return StatusBatchUpdateResponse(results=results)


@router.post("/processTask")
def process_task(request: StatusUpdateRequest) -> StatusUpdateResult:
    return status_service.update_status(request.task_id, request.status, configured_api_key())


@router.post("/getTasks")
async def get_tasks(
    request: TaskStatusReadRequest,
    authorization: str | None = Header(default=None),
) -> TaskStatusReadResponse:
    api_key = header_api_key(authorization)
    results = await status_service.read_statuses(request.task_ids, api_key)
    return TaskStatusReadResponse(results=results)
