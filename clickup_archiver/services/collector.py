"""Paginated task collection from ClickUp lists and views.

Closed-only scans of a list fetch pages in concurrent rounds until the list
ends, enough closed candidates were found, or the wall-clock budget runs out.
Pages that fail are logged and treated as empty so one bad page does not
sacrifice the rest of a long scan.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from clickup_archiver.config import get_settings
from clickup_archiver.exceptions import ValidationError
from clickup_archiver.models.tasks import Assignee, CanonicalTask, Tag, TaskStatus
from clickup_archiver.services import clickup
from clickup_archiver.services.clickup import PAGE_SIZE, UPSTREAM_ERRORS

logger = logging.getLogger(__name__)


class TaskSource(BaseModel):
    list_id: str | None = None
    view_id: str | None = None

    def validate_one(self) -> "TaskSource":
        if bool(self.list_id) == bool(self.view_id):
            raise ValidationError("Provide exactly one of listId or viewId")
        return self


class CollectOptions(BaseModel):
    closed_only: bool = False
    limit: int = PAGE_SIZE
    page: int = 0
    budget_seconds: float = 25
    parallelism: int = Field(default=3, ge=1)
    early_stop_multiplier: int = Field(default=2, ge=1)
    page_timeout: float = 8
    single_page_timeout: float = 30

    @classmethod
    def from_settings(cls, **overrides) -> "CollectOptions":
        settings = get_settings()
        values = {
            "budget_seconds": settings.scan_budget_seconds,
            "parallelism": settings.scan_parallelism,
            "early_stop_multiplier": settings.early_stop_multiplier,
            "page_timeout": settings.page_timeout_seconds,
            "single_page_timeout": settings.single_page_timeout_seconds,
        }
        values.update(overrides)
        return cls(**values)


class CollectResult(BaseModel):
    tasks: list[CanonicalTask]
    pages_fetched: int = 0
    failed_pages: list[int] = Field(default_factory=list)
    has_more: bool = False
    timed_out: bool = False


# --- Normalization ---


def _parse_timestamp(value) -> datetime | None:
    """ClickUp timestamps are epoch milliseconds, usually sent as strings."""
    if value is None or value == "":
        return None
    try:
        millis = int(value)
    except (TypeError, ValueError):
        return None
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)


def parse_task(task: dict, fallback_list_id: str = "") -> CanonicalTask:
    status = task.get("status") or {}
    task_list = task.get("list") or {}
    return CanonicalTask(
        task_id=task["id"],
        name=task.get("name") or "",
        description=task.get("description") or "",
        status=TaskStatus(status=status.get("status") or "Unknown", color=status.get("color")),
        date_created=_parse_timestamp(task.get("date_created")),
        date_updated=_parse_timestamp(task.get("date_updated")),
        date_closed=_parse_timestamp(task.get("date_closed")),
        due_date=_parse_timestamp(task.get("due_date")),
        assignees=[
            Assignee(id=a.get("id"), username=a.get("username"), email=a.get("email"))
            for a in task.get("assignees") or []
        ],
        tags=[
            Tag(name=t.get("name", ""), tag_fg=t.get("tag_fg"), tag_bg=t.get("tag_bg"))
            for t in task.get("tags") or []
        ],
        custom_fields=task.get("custom_fields") or [],
        url=task.get("url") or "",
        list_id=str(task_list.get("id") or fallback_list_id),
        list_name=task_list.get("name") or "Unknown List",
        priority=task.get("priority"),
        raw_data=task,
    )


# --- Page fetching ---


async def _fetch_page(fetch, source_id: str, page: int, api_key: str, timeout: float) -> dict | None:
    """Fetch one page off the event loop. Returns None when the page failed."""
    try:
        return await asyncio.to_thread(fetch, source_id, page, api_key, timeout)
    except UPSTREAM_ERRORS as e:
        logger.warning("Page %d of %s failed, treating as empty: %s", page, source_id, e)
        return None


def _is_last_page(payload: dict) -> bool:
    if "last_page" in payload:
        return bool(payload["last_page"])
    return len(payload.get("tasks") or []) < PAGE_SIZE


def _normalize(payload: dict, source_id: str, closed_only: bool) -> list[CanonicalTask]:
    tasks = [parse_task(raw, source_id) for raw in payload.get("tasks") or []]
    if closed_only:
        tasks = [t for t in tasks if t.date_closed is not None]
    return tasks


async def _single_page(
    fetch, source_id: str, api_key: str, options: CollectOptions, fallback_list_id: str = ""
) -> CollectResult:
    # A single requested page is not best-effort: its failure is the caller's error.
    payload = await asyncio.to_thread(fetch, source_id, options.page, api_key, options.single_page_timeout)
    return CollectResult(
        tasks=_normalize(payload, fallback_list_id, options.closed_only),
        pages_fetched=1,
        has_more=not _is_last_page(payload),
    )


async def _scan_list_closed(list_id: str, api_key: str, options: CollectOptions) -> CollectResult:
    started = time.monotonic()
    target = options.limit * options.early_stop_multiplier
    result = CollectResult(tasks=[], has_more=True)
    next_page = options.page

    while True:
        if time.monotonic() - started > options.budget_seconds:
            result.timed_out = True
            logger.info("Closed-task scan of list %s hit its %.1fs budget", list_id, options.budget_seconds)
            break

        pages = list(range(next_page, next_page + options.parallelism))
        next_page += options.parallelism
        payloads = await asyncio.gather(
            *(_fetch_page(clickup.get_list_tasks_page, list_id, p, api_key, options.page_timeout) for p in pages)
        )

        last_ok = None
        for page, payload in zip(pages, payloads):
            if payload is None:
                result.failed_pages.append(page)
                continue
            result.pages_fetched += 1
            result.tasks.extend(_normalize(payload, list_id, closed_only=True))
            last_ok = payload

        if last_ok is None:
            logger.warning("Every page of round %s failed for list %s, stopping scan", pages, list_id)
            break
        if _is_last_page(last_ok):
            result.has_more = False
            break
        if len(result.tasks) >= target:
            break

    return result


async def _scan_view_closed(view_id: str, api_key: str, options: CollectOptions) -> CollectResult:
    started = time.monotonic()
    target = options.limit * options.early_stop_multiplier
    result = CollectResult(tasks=[], has_more=True)
    page = options.page

    while True:
        if time.monotonic() - started > options.budget_seconds:
            result.timed_out = True
            break
        payload = await _fetch_page(clickup.get_view_tasks_page, view_id, page, api_key, options.page_timeout)
        if payload is None:
            result.failed_pages.append(page)
            break
        result.pages_fetched += 1
        result.tasks.extend(_normalize(payload, "", closed_only=True))
        if _is_last_page(payload):
            result.has_more = False
            break
        if len(result.tasks) >= target:
            break
        page += 1

    return result


async def collect(source: TaskSource, api_key: str, options: CollectOptions) -> CollectResult:
    """Collect canonical tasks from a list or a view.

    Without ``closed_only`` exactly the requested page is fetched. With it, a
    list is scanned in parallel rounds and a view page by page; both may return
    partial results when the time budget runs out.
    """
    source.validate_one()
    if source.view_id:
        if not options.closed_only:
            return await _single_page(clickup.get_view_tasks_page, source.view_id, api_key, options)
        result = await _scan_view_closed(source.view_id, api_key, options)
    else:
        if not options.closed_only:
            return await _single_page(
                clickup.get_list_tasks_page, source.list_id, api_key, options, fallback_list_id=source.list_id
            )
        result = await _scan_list_closed(source.list_id, api_key, options)

    logger.info(
        "Collected %d closed tasks from %s over %d pages (%d failed, timed_out=%s)",
        len(result.tasks), source.list_id or source.view_id, result.pages_fetched,
        len(result.failed_pages), result.timed_out,
    )
    return result
