from datetime import datetime, timezone

from clickup_archiver.models.tasks import CanonicalTask

# Tasks without a closed date sort first, as if closed at the earliest instant.
_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def _closed_key(task: CanonicalTask) -> datetime:
    closed = task.date_closed
    if closed is None:
        return _EARLIEST
    if closed.tzinfo is None:
        return closed.replace(tzinfo=timezone.utc)
    return closed


def select_oldest(tasks: list[CanonicalTask], limit: int) -> list[CanonicalTask]:
    """Return up to ``limit`` tasks ordered by closed date, oldest first. Stable for ties."""
    return sorted(tasks, key=_closed_key)[:max(limit, 0)]
