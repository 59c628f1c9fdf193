"""Combined endpoint kept for clients of the original single-URL proxy."""

from fastapi import APIRouter, Header, Query

from clickup_archiver.exceptions import ValidationError
from clickup_archiver.models.tasks import StatusBatchUpdateRequest, StatusBatchUpdateResponse
from clickup_archiver.services import lists as lists_service
from clickup_archiver.services import task_status as status_service
from clickup_archiver.services.clickup import header_api_key

router = APIRouter(prefix="/api", tags=["clickup"])


@router.get("/clickup")
def get_list(
    list_id: str | None = Query(default=None, alias="listId"),
    authorization: str | None = Header(default=None),
) -> dict:
    api_key = header_api_key(authorization)
    if not list_id:
        raise ValidationError("List ID is required")
    return lists_service.get_list(list_id, api_key)


@router.post("/clickup")
async def update_tasks(
    request: StatusBatchUpdateRequest,
    authorization: str | None = Header(default=None),
) -> StatusBatchUpdateResponse:
    api_key = header_api_key(authorization)
    results = await status_service.update_statuses(request.task_ids, request.status, api_key)
    return StatusBatchUpdateResponse(results=results)
