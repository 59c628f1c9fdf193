from fastmcp import FastMCP
from pydantic import ValidationError as SchemaError

from clickup_archiver.archive_store import get_archive_store
from clickup_archiver.config import get_settings
from clickup_archiver.exceptions import (
    ArchiveAbortedError,
    ConfigurationError,
    PersistenceError,
    UpstreamError,
    UpstreamTimeout,
    UpstreamUnreachable,
    ValidationError,
)
from clickup_archiver.models.tasks import CanonicalTask
from clickup_archiver.services import archive as archive_service
from clickup_archiver.services import lists as lists_service
from clickup_archiver.services import task_status as status_service
from clickup_archiver.services.clickup import configured_api_key

mcp = FastMCP("ClickUp Archiver")

_TOOL_ERRORS = (
    ConfigurationError,
    ValidationError,
    UpstreamError,
    UpstreamTimeout,
    UpstreamUnreachable,
    PersistenceError,
    SchemaError,
)


def _handle_mcp_error(e: Exception) -> dict:
    """Convert exceptions to agent-friendly error dicts."""
    if isinstance(e, ConfigurationError):
        return {"error": "configuration_error", "message": str(e), "action": "Ask user to set the missing setting in .env"}
    if isinstance(e, (ValidationError, SchemaError)):
        return {"error": "invalid_request", "message": str(e)}
    if isinstance(e, UpstreamError) and e.status_code == 429:
        return {"error": "rate_limit", "message": str(e), "action": "Wait a moment and retry"}
    if isinstance(e, (UpstreamError, UpstreamTimeout, UpstreamUnreachable)):
        return {"error": "clickup_error", "message": str(e)}
    if isinstance(e, ArchiveAbortedError):
        return {"error": "archive_unavailable", "message": str(e), "results": [r.model_dump(by_alias=True) for r in e.results]}
    return {"error": "archive_error", "message": str(e)}


# --- Task collection ---

@mcp.tool
async def clickup_fetch_list_tasks(
    list_id: str | None = None,
    view_id: str | None = None,
    page: int = 0,
    limit: int = 100,
    closed_only: bool = False,
) -> dict:
    """Fetch tasks from a ClickUp list or view. Provide exactly one of list_id or view_id.
    With closed_only=True a list is scanned for closed tasks and the oldest closed come first;
    use the returned tasks as input to clickup_archive_tasks."""
    try:
        result = await lists_service.fetch_tasks(
            configured_api_key(), list_id=list_id, view_id=view_id, page=page, limit=limit, closed_only=closed_only,
        )
        return result.model_dump(mode="json", by_alias=True)
    except _TOOL_ERRORS as e:
        return _handle_mcp_error(e)


@mcp.tool
async def clickup_list_stats(list_id: str | None = None) -> dict:
    """Get a list's name, task count (first page only) and how many of its tasks are archived.
    Defaults to the configured CLICKUP_LIST_ID."""
    try:
        list_id = list_id or get_settings().clickup_list_id
        if not list_id:
            raise ValidationError("list_id is required when CLICKUP_LIST_ID is not configured")
        stats = await lists_service.get_list_stats(list_id, configured_api_key(), get_archive_store())
        return stats.model_dump(mode="json", by_alias=True)
    except _TOOL_ERRORS as e:
        return _handle_mcp_error(e)


# --- Archive ---

@mcp.tool
async def clickup_archive_tasks(tasks: list[dict]) -> dict:
    """Archive up to 10 tasks (as returned by clickup_fetch_list_tasks) and delete them from ClickUp.
    A task is only deleted after its archive copy was saved. Returns one result per task."""
    try:
        canonical = [CanonicalTask.model_validate(t) for t in tasks]
        results = await archive_service.archive_batch(canonical, get_archive_store(), configured_api_key())
        successful = sum(1 for r in results if r.success)
        return {
            "processed": len(results),
            "successful": successful,
            "failed": len(results) - successful,
            "results": [r.model_dump(by_alias=True) for r in results],
        }
    except _TOOL_ERRORS as e:
        return _handle_mcp_error(e)


# --- Status ---

@mcp.tool
def clickup_set_task_status(task_id: str, status: str) -> dict:
    """Set the status of one ClickUp task (e.g. 'complete', 'in progress')."""
    try:
        return status_service.update_status(task_id, status, configured_api_key()).model_dump(by_alias=True)
    except _TOOL_ERRORS as e:
        return _handle_mcp_error(e)


@mcp.tool
def clickup_archiver_status() -> dict:
    """Check whether the ClickUp key and archive table are configured."""
    settings = get_settings()
    return {
        "clickup_configured": bool(settings.clickup_api_key),
        "archive_table": settings.archive_table_name,
        "default_list_id": settings.clickup_list_id or None,
        "message": (
            "Ready" if settings.clickup_api_key
            else "CLICKUP_API_KEY is not set, add it to .env"
        ),
    }
