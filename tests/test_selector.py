from datetime import datetime, timezone

from clickup_archiver.models.tasks import CanonicalTask
from clickup_archiver.services.selector import select_oldest


def _task(task_id: str, closed_ms: int | None) -> CanonicalTask:
    closed = datetime.fromtimestamp(closed_ms / 1000, tz=timezone.utc) if closed_ms is not None else None
    return CanonicalTask(task_id=task_id, date_closed=closed)


def _ids(tasks):
    return [t.task_id for t in tasks]


class TestSelectOldest:
    def test_orders_by_closed_date(self):
        tasks = [_task("c", 300), _task("a", 100), _task("b", 200)]
        assert _ids(select_oldest(tasks, 10)) == ["a", "b", "c"]

    def test_truncates_to_limit(self):
        tasks = [_task("c", 300), _task("a", 100), _task("b", 200)]
        assert _ids(select_oldest(tasks, 2)) == ["a", "b"]

    def test_missing_closed_date_sorts_first(self):
        tasks = [_task("closed", 1), _task("open", None)]
        assert _ids(select_oldest(tasks, 10)) == ["open", "closed"]

    def test_stable_for_equal_dates(self):
        tasks = [_task("first", 100), _task("second", 100), _task("third", 50)]
        assert _ids(select_oldest(tasks, 10)) == ["third", "first", "second"]

    def test_does_not_mutate_input(self):
        tasks = [_task("b", 200), _task("a", 100)]
        select_oldest(tasks, 1)
        assert _ids(tasks) == ["b", "a"]

    def test_naive_and_aware_dates_mix(self):
        naive = CanonicalTask(task_id="naive", date_closed=datetime(2024, 1, 2))
        aware = CanonicalTask(task_id="aware", date_closed=datetime(2024, 1, 1, tzinfo=timezone.utc))
        assert _ids(select_oldest([naive, aware], 10)) == ["aware", "naive"]

    def test_zero_limit(self):
        assert select_oldest([_task("a", 1)], 0) == []
