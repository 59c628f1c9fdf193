"""Thin client for the ClickUp v2 REST API.

All calls are blocking and go through the shared retrying session; async
callers move them off the event loop with ``asyncio.to_thread``.
"""

import re

import requests

from clickup_archiver.config import get_settings
from clickup_archiver.exceptions import (
    ConfigurationError,
    UpstreamError,
    UpstreamTimeout,
    UpstreamUnreachable,
    ValidationError,
)
from clickup_archiver.http_client import get_session

PAGE_SIZE = 100

UPSTREAM_ERRORS = (UpstreamError, UpstreamTimeout, UpstreamUnreachable)

_BEARER_PREFIX = re.compile(r"^Bearer\s+", re.IGNORECASE)


def configured_api_key() -> str:
    key = get_settings().clickup_api_key
    if not key:
        raise ConfigurationError("CLICKUP_API_KEY environment variable is not configured")
    return key


def header_api_key(authorization: str | None) -> str:
    """Extract the caller's ClickUp key from an Authorization header value."""
    key = _BEARER_PREFIX.sub("", authorization or "").strip()
    if not key:
        raise ValidationError("API key is required in Authorization header")
    return key


def _headers(api_key: str) -> dict:
    return {"Authorization": api_key, "Content-Type": "application/json"}


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200] or resp.reason or f"HTTP {resp.status_code}"
    if isinstance(body, dict) and body.get("err"):
        return body["err"]
    return resp.reason or f"HTTP {resp.status_code}"


def _check_status(resp: requests.Response) -> None:
    if resp.status_code >= 400:
        raise UpstreamError(resp.status_code, _error_message(resp))


def _handle_response(resp: requests.Response) -> dict:
    if resp.status_code == 204 or not resp.content:
        return {}
    return resp.json()


def _send(method: str, path: str, api_key: str, timeout: float, **kwargs) -> requests.Response:
    url = f"{get_settings().clickup_api_base}{path}"
    try:
        resp = get_session().request(method, url, headers=_headers(api_key), timeout=timeout, **kwargs)
    except requests.Timeout as e:
        raise UpstreamTimeout(f"ClickUp request timed out after {timeout}s ({method} {path})") from e
    except requests.RequestException as e:
        raise UpstreamUnreachable(f"ClickUp API unreachable ({method} {path}): {e}") from e
    _check_status(resp)
    return resp


def _request(method: str, path: str, api_key: str, timeout: float, **kwargs) -> dict:
    return _handle_response(_send(method, path, api_key, timeout, **kwargs))


# --- Lists ---


def get_list(list_id: str, api_key: str, timeout: float = 8) -> dict:
    """Return the raw list payload (name, statuses, task_count, ...)."""
    return _request("GET", f"/list/{list_id}", api_key, timeout)


def get_list_tasks_page(
    list_id: str,
    page: int,
    api_key: str,
    timeout: float = 30,
    include_closed: bool = True,
) -> dict:
    """Fetch one page (up to 100 tasks) of a list, oldest created first."""
    params = {
        "page": page,
        "subtasks": "false",
        "include_closed": "true" if include_closed else "false",
        "order_by": "created",
        "reverse": "false",
    }
    return _request("GET", f"/list/{list_id}/task", api_key, timeout, params=params)


def get_view_tasks_page(view_id: str, page: int, api_key: str, timeout: float = 30) -> dict:
    """Fetch one page of a view. Filtering and ordering are the view's own."""
    return _request("GET", f"/view/{view_id}/task", api_key, timeout, params={"page": page})


# --- Tasks ---


def get_task(task_id: str, api_key: str, timeout: float = 5) -> dict:
    return _request("GET", f"/task/{task_id}", api_key, timeout)


def update_task_status(task_id: str, status: str, api_key: str, timeout: float = 5) -> dict:
    return _request("PUT", f"/task/{task_id}", api_key, timeout, json={"status": status})


def delete_task(task_id: str, api_key: str, timeout: float = 8) -> None:
    # Any 2xx counts as deleted; the body is not ours to parse.
    _send("DELETE", f"/task/{task_id}", api_key, timeout)
