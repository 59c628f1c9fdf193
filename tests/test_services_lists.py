import asyncio

import pytest

from clickup_archiver.exceptions import UpstreamError, ValidationError
from clickup_archiver.services import lists as lists_service
from clickup_archiver.services.collector import parse_task
from clickup_archiver.services.archive import build_record
from conftest import CLICKUP_API_LIST, full_page, make_page, make_raw_task


def _fetch(**kwargs):
    return asyncio.run(lists_service.fetch_tasks("pk", **kwargs))


class TestFetchTasks:
    def test_oldest_closed_first(self, mocker):
        mocker.patch(
            "clickup_archiver.services.clickup.get_list_tasks_page",
            side_effect=lambda list_id, page, api_key, timeout: make_page([
                make_raw_task("c500", date_closed="500"),
                make_raw_task("open1"),
                make_raw_task("c100", date_closed="100"),
                make_raw_task("open2"),
                make_raw_task("c300", date_closed="300"),
            ]) if page == 0 else make_page([]),
        )
        result = _fetch(list_id="list1", closed_only=True, limit=2)
        assert [t.task_id for t in result.tasks] == ["c100", "c300"]
        assert result.task_count == 2
        assert result.total_found == 3
        assert result.has_more is True

    def test_plain_page_is_not_sorted(self, mocker):
        mocker.patch(
            "clickup_archiver.services.clickup.get_list_tasks_page",
            return_value=make_page([make_raw_task("b", date_closed="9"), make_raw_task("a", date_closed="1")]),
        )
        result = _fetch(list_id="list1")
        assert [t.task_id for t in result.tasks] == ["b", "a"]
        assert result.has_more is False

    def test_limit_capped_at_100(self, mocker):
        mocker.patch("clickup_archiver.services.clickup.get_list_tasks_page", return_value=full_page("p"))
        result = _fetch(list_id="list1", limit=500)
        assert result.task_count == 100
        assert result.has_more is True

    def test_view_closed_scan_keeps_view_order(self, mocker):
        mocker.patch(
            "clickup_archiver.services.clickup.get_view_tasks_page",
            return_value=make_page([make_raw_task("z", date_closed="900"), make_raw_task("y", date_closed="100")]),
        )
        result = _fetch(view_id="view1", closed_only=True, limit=10)
        assert [t.task_id for t in result.tasks] == ["z", "y"]
        assert result.view_id == "view1"

    def test_requires_a_source(self):
        with pytest.raises(ValidationError):
            _fetch()

    def test_negative_page_rejected(self, mocker):
        fetch_page = mocker.patch("clickup_archiver.services.clickup.get_list_tasks_page")
        with pytest.raises(ValidationError):
            _fetch(list_id="list1", page=-1)
        fetch_page.assert_not_called()


class TestGetListStats:
    def test_combines_vendor_and_archive(self, mocker, archive_store):
        mocker.patch("clickup_archiver.services.clickup.get_list", return_value=CLICKUP_API_LIST)
        mocker.patch(
            "clickup_archiver.services.clickup.get_list_tasks_page",
            return_value=make_page([make_raw_task("a"), make_raw_task("b")]),
        )
        archive_store.upsert(build_record(parse_task(make_raw_task("old"))))
        stats = asyncio.run(lists_service.get_list_stats("list1", "pk", archive_store))
        assert stats.list_name == "Support"
        assert stats.task_count == 2
        assert stats.is_partial_count is False
        assert stats.archived_count == 1
        assert stats.default_list_id == "list1"

    def test_full_first_page_is_partial(self, mocker, archive_store):
        mocker.patch("clickup_archiver.services.clickup.get_list", return_value=CLICKUP_API_LIST)
        mocker.patch("clickup_archiver.services.clickup.get_list_tasks_page", return_value=full_page("p"))
        stats = asyncio.run(lists_service.get_list_stats("list1", "pk", archive_store))
        assert stats.task_count == 100
        assert stats.is_partial_count is True

    def test_archive_failure_reports_zero(self, mocker, broken_store):
        mocker.patch("clickup_archiver.services.clickup.get_list", return_value=CLICKUP_API_LIST)
        mocker.patch("clickup_archiver.services.clickup.get_list_tasks_page", return_value=make_page([]))
        stats = asyncio.run(lists_service.get_list_stats("list1", "pk", broken_store))
        assert stats.archived_count == 0

    def test_vendor_failure_propagates(self, mocker, archive_store):
        mocker.patch("clickup_archiver.services.clickup.get_list", side_effect=UpstreamError(401, "Token invalid"))
        mocker.patch("clickup_archiver.services.clickup.get_list_tasks_page", return_value=make_page([]))
        with pytest.raises(UpstreamError):
            asyncio.run(lists_service.get_list_stats("list1", "pk", archive_store))
