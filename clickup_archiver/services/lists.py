import asyncio
import logging

from clickup_archiver.archive_store import ArchiveStore
from clickup_archiver.config import get_settings
from clickup_archiver.exceptions import PersistenceError, ValidationError
from clickup_archiver.models.lists import ListStatsResponse, ListTasksResponse
from clickup_archiver.services import clickup
from clickup_archiver.services.clickup import PAGE_SIZE
from clickup_archiver.services.collector import CollectOptions, TaskSource, collect
from clickup_archiver.services.selector import select_oldest

logger = logging.getLogger(__name__)


def get_list(list_id: str, api_key: str) -> dict:
    """Return ClickUp's list payload unchanged."""
    return clickup.get_list(list_id, api_key, timeout=get_settings().page_timeout_seconds)


async def fetch_tasks(
    api_key: str,
    list_id: str | None = None,
    view_id: str | None = None,
    page: int = 0,
    limit: int = PAGE_SIZE,
    closed_only: bool = False,
) -> ListTasksResponse:
    """Collect tasks for archiving.

    A closed-only list scan is ordered oldest closed first before truncation.
    View results keep the view's own order.
    """
    if page < 0:
        raise ValidationError("page must be 0 or greater")
    limit = min(limit, PAGE_SIZE) if limit > 0 else PAGE_SIZE
    source = TaskSource(list_id=list_id, view_id=view_id)
    options = CollectOptions.from_settings(closed_only=closed_only, limit=limit, page=page)
    result = await collect(source, api_key, options)

    if closed_only and list_id:
        tasks = select_oldest(result.tasks, limit)
    else:
        tasks = result.tasks[:limit]

    return ListTasksResponse(
        list_id=list_id,
        view_id=view_id,
        page=page,
        task_count=len(tasks),
        total_found=len(result.tasks),
        has_more=result.has_more or len(result.tasks) > limit,
        timed_out=result.timed_out,
        tasks=tasks,
    )


async def _archived_count(store: ArchiveStore, list_id: str) -> int:
    try:
        return await asyncio.to_thread(store.count_by_list, list_id)
    except PersistenceError as e:
        logger.error("Archive count for list %s failed, reporting 0: %s", list_id, e)
        return 0


async def get_list_stats(list_id: str, api_key: str, store: ArchiveStore) -> ListStatsResponse:
    """List name, first-page task count and archived count, fetched concurrently."""
    settings = get_settings()
    list_data, first_page, archived = await asyncio.gather(
        asyncio.to_thread(clickup.get_list, list_id, api_key, settings.page_timeout_seconds),
        asyncio.to_thread(clickup.get_list_tasks_page, list_id, 0, api_key, settings.single_page_timeout_seconds),
        _archived_count(store, list_id),
    )
    task_count = len(first_page.get("tasks") or [])
    return ListStatsResponse(
        list_id=list_id,
        list_name=list_data.get("name") or "Unknown List",
        task_count=task_count,
        is_partial_count=task_count >= PAGE_SIZE,
        archived_count=archived,
        default_list_id=settings.clickup_list_id or None,
    )
