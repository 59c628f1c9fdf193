from fastapi import APIRouter, Header, Query

from clickup_archiver.archive_store import get_archive_store
from clickup_archiver.config import get_settings
from clickup_archiver.exceptions import ValidationError
from clickup_archiver.models.lists import ListStatsResponse, ListTasksResponse
from clickup_archiver.services import lists as lists_service
from clickup_archiver.services.clickup import configured_api_key, header_api_key

router = APIRouter(prefix="/api", tags=["lists"])


@router.get("/getList")
def get_list(
    list_id: str | None = Query(default=None, alias="listId"),
    authorization: str | None = Header(default=None),
) -> dict:
    api_key = header_api_key(authorization)
    if not list_id:
        raise ValidationError("List ID is required")
    return lists_service.get_list(list_id, api_key)


@router.get("/fetchListTasks")
async def fetch_list_tasks(
    list_id: str | None = Query(default=None, alias="listId"),
    view_id: str | None = Query(default=None, alias="viewId"),
    page: int = Query(default=0, ge=0),
    limit: int = 100,
    closed_only: bool = Query(default=False, alias="closedOnly"),
) -> ListTasksResponse:
    api_key = configured_api_key()
    if not list_id and not view_id:
        raise ValidationError("listId or viewId query parameter is required")
    return await lists_service.fetch_tasks(
        api_key, list_id=list_id, view_id=view_id, page=page, limit=limit, closed_only=closed_only,
    )


@router.get("/getListStats")
async def get_list_stats(list_id: str | None = Query(default=None, alias="listId")) -> ListStatsResponse:
    api_key = configured_api_key()
    list_id = list_id or get_settings().clickup_list_id
    if not list_id:
        raise ValidationError("List ID is required (provide listId query param or set CLICKUP_LIST_ID env var)")
    return await lists_service.get_list_stats(list_id, api_key, get_archive_store())
