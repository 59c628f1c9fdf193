"""Status reads and updates for batches of ClickUp tasks.

Task ids are handled in small concurrent groups with a pause between groups
to stay under ClickUp's rate limit.
"""

import asyncio
import logging

from clickup_archiver.config import get_settings
from clickup_archiver.models.tasks import ListRef, StatusUpdateResult, TaskStatus, TaskStatusRead
from clickup_archiver.services import clickup
from clickup_archiver.services.clickup import UPSTREAM_ERRORS

logger = logging.getLogger(__name__)


async def _in_groups(items: list[str], worker) -> list:
    settings = get_settings()
    size = max(settings.status_batch_size, 1)
    results = []
    for start in range(0, len(items), size):
        group = items[start:start + size]
        logger.info("Processing group %d, tasks: %s", start // size + 1, ", ".join(group))
        results.extend(await asyncio.gather(*(worker(task_id) for task_id in group)))
        if start + size < len(items):
            await asyncio.sleep(settings.status_batch_delay_seconds)
    return results


def update_status(task_id: str, status: str, api_key: str) -> StatusUpdateResult:
    """Set one task's status. ClickUp failures are reported, not raised."""
    try:
        clickup.update_task_status(task_id, status, api_key, get_settings().status_timeout_seconds)
    except UPSTREAM_ERRORS as e:
        logger.error("Error updating task %s: %s", task_id, e)
        return StatusUpdateResult(task_id=task_id, success=False, message=f"Failed: {e}")
    return StatusUpdateResult(task_id=task_id, success=True, message="Status updated successfully")


async def update_statuses(task_ids: list[str], status: str, api_key: str) -> list[StatusUpdateResult]:
    async def worker(task_id: str) -> StatusUpdateResult:
        return await asyncio.to_thread(update_status, task_id, status, api_key)

    return await _in_groups(task_ids, worker)


def read_status(task_id: str, api_key: str) -> TaskStatusRead:
    try:
        task = clickup.get_task(task_id, api_key, get_settings().status_timeout_seconds)
    except UPSTREAM_ERRORS as e:
        logger.error("Error fetching task %s: %s", task_id, e)
        return TaskStatusRead(task_id=task_id, success=False, message=f"Failed: {e}")

    status = task.get("status") or {}
    parent = task.get("list") or task.get("parent")
    parent_id = parent.get("id") if isinstance(parent, dict) else None
    return TaskStatusRead(
        task_id=task.get("id", task_id),
        name=task.get("name"),
        status=TaskStatus(status=status.get("status") or "Unknown", color=status.get("color")),
        url=task.get("url"),
        list=ListRef(id=str(parent_id), name=parent.get("name")) if parent_id else None,
        success=True,
    )


async def read_statuses(task_ids: list[str], api_key: str) -> list[TaskStatusRead]:
    async def worker(task_id: str) -> TaskStatusRead:
        return await asyncio.to_thread(read_status, task_id, api_key)

    return await _in_groups(task_ids, worker)
