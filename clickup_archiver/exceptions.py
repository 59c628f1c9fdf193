class ConfigurationError(Exception):
    """Raised when a required credential or endpoint is not configured."""


class ValidationError(Exception):
    """Raised when a request parameter is missing or malformed."""


class UpstreamError(Exception):
    """Raised when the ClickUp API answers with a non-2xx status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


class UpstreamTimeout(Exception):
    """Raised when a ClickUp API call exceeds its timeout."""


class UpstreamUnreachable(Exception):
    """Raised when the ClickUp API cannot be reached at all."""


class PersistenceError(Exception):
    """Raised when the archive store rejects or cannot serve an operation."""


class ArchiveAbortedError(PersistenceError):
    """Raised when a batch cannot run because the archive store is unreachable."""

    def __init__(self, message: str, results: list | None = None):
        super().__init__(message)
        self.results = results or []
