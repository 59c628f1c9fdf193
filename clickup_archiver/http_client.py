"""Shared HTTP client with automatic retry and exponential backoff."""

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from clickup_archiver.config import get_settings

_session: requests.Session | None = None


def get_session() -> requests.Session:
    """Return a shared requests.Session with retry on 429/5xx errors.

    Retries up to ``http_retries`` times with exponential backoff (1s, 2s, 4s).
    Timeouts and refused connections are never retried, so a caller's
    ``timeout`` bounds the whole call. DELETE is not retried at all: a replay
    after the first attempt went through would report the task as missing.
    """
    global _session
    if _session is None:
        _session = requests.Session()
        retry = Retry(
            total=get_settings().http_retries,
            connect=0,
            read=False,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET", "PUT"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        _session.mount("http://", adapter)
        _session.mount("https://", adapter)
    return _session
