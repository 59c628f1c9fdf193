"""Archive-then-delete workflow.

Each task is written to the archive store before it is deleted from ClickUp,
one task at a time. A task whose archive write failed is never deleted.
"""

import asyncio
import logging
from datetime import datetime, timezone

from clickup_archiver.archive_store import ArchiveStore
from clickup_archiver.config import get_settings
from clickup_archiver.exceptions import ArchiveAbortedError, PersistenceError, ValidationError
from clickup_archiver.models.archive import ArchiveRecord, BatchResult
from clickup_archiver.models.tasks import CanonicalTask
from clickup_archiver.services import clickup
from clickup_archiver.services.clickup import UPSTREAM_ERRORS

logger = logging.getLogger(__name__)


def build_record(task: CanonicalTask, archived_at: datetime | None = None) -> ArchiveRecord:
    data = task.model_dump(by_alias=True)
    data["archivedAt"] = archived_at or datetime.now(timezone.utc)
    data["_originalTaskId"] = task.task_id
    return ArchiveRecord.model_validate(data)


async def _archive_one(task: CanonicalTask, store: ArchiveStore, api_key: str, delete_timeout: float) -> BatchResult:
    result = BatchResult(task_id=task.task_id, name=task.name)

    try:
        await asyncio.to_thread(store.upsert, build_record(task))
    except PersistenceError as e:
        logger.error("Failed to save task %s: %s", task.task_id, e)
        result.message = f"Failed to save to archive: {e}"
        return result
    except Exception as e:
        logger.exception("Unexpected error saving task %s", task.task_id)
        result.message = f"Failed to save to archive: {e}"
        return result
    result.saved_to_mongo = True
    logger.info("Saved task %s to archive", task.task_id)

    try:
        await asyncio.to_thread(clickup.delete_task, task.task_id, api_key, delete_timeout)
    except UPSTREAM_ERRORS as e:
        # Archived but still present in ClickUp; needs manual cleanup.
        logger.error("Failed to delete task %s: %s", task.task_id, e)
        result.message = f"Saved to archive but failed to delete from ClickUp: {e}"
        return result
    except Exception as e:
        logger.exception("Unexpected error deleting task %s", task.task_id)
        result.message = f"Saved to archive but failed to delete from ClickUp: {e}"
        return result
    result.deleted_from_click_up = True
    result.success = True
    result.message = "Archived successfully"
    logger.info("Deleted task %s from ClickUp", task.task_id)
    return result


async def archive_batch(
    tasks: list[CanonicalTask],
    store: ArchiveStore,
    api_key: str,
    max_batch: int | None = None,
    delay: float | None = None,
    delete_timeout: float | None = None,
) -> list[BatchResult]:
    """Archive then delete each task in order, returning one result per task.

    Individual failures are recorded in the results and never stop the batch.
    Raises ValidationError for an empty or oversized batch before touching the
    store or ClickUp, and ArchiveAbortedError if the store cannot be reached.
    """
    settings = get_settings()
    max_batch = settings.archive_max_batch if max_batch is None else max_batch
    delay = settings.archive_delay_seconds if delay is None else delay
    delete_timeout = settings.delete_timeout_seconds if delete_timeout is None else delete_timeout

    if not tasks:
        raise ValidationError("tasks array is required")
    if len(tasks) > max_batch:
        raise ValidationError(f"Maximum {max_batch} tasks per batch to prevent timeouts")

    results: list[BatchResult] = []
    try:
        await asyncio.to_thread(store.connect)
    except PersistenceError as e:
        raise ArchiveAbortedError(str(e), results) from e

    for index, task in enumerate(tasks):
        results.append(await _archive_one(task, store, api_key, delete_timeout))
        if index < len(tasks) - 1:
            await asyncio.sleep(delay)
    return results
