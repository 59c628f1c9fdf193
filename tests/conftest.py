import pytest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from clickup_archiver.archive_store import ArchiveStore
from clickup_archiver.config import get_settings


# --- Canned API responses ---

def make_raw_task(task_id: str, date_closed: str | None = None, **overrides) -> dict:
    """A ClickUp v2 task payload as returned by /list/{id}/task."""
    task = {
        "id": task_id,
        "name": f"Task {task_id}",
        "description": None,
        "status": {"status": "complete" if date_closed else "to do", "color": "#6bc950"},
        "date_created": "1700000000000",
        "date_updated": "1700000500000",
        "date_closed": date_closed,
        "due_date": None,
        "assignees": [{"id": 7, "username": "alice", "email": "alice@example.com", "color": "#fff"}],
        "tags": [{"name": "billing", "tag_fg": "#000", "tag_bg": "#ff0"}],
        "custom_fields": [{"id": "cf1", "name": "Customer", "value": "ACME"}],
        "url": f"https://app.clickup.com/t/{task_id}",
        "list": {"id": "list1", "name": "Support"},
        "priority": {"priority": "high", "color": "#f00"},
    }
    task.update(overrides)
    return task


def make_page(tasks: list[dict], last_page: bool | None = None) -> dict:
    page = {"tasks": tasks}
    if last_page is not None:
        page["last_page"] = last_page
    return page


def full_page(prefix: str, closed: bool = False) -> dict:
    """A 100-task page; closed tasks get increasing closed dates."""
    return make_page([
        make_raw_task(f"{prefix}-{i}", date_closed=str(1700000000000 + i) if closed else None)
        for i in range(100)
    ])


CLICKUP_API_LIST = {
    "id": "list1",
    "name": "Support",
    "task_count": 42,
    "statuses": [{"status": "to do"}, {"status": "complete"}],
}

CLICKUP_API_TASK = {
    "id": "abc123",
    "name": "Refund request",
    "status": {"status": "in progress", "color": "#4194f6"},
    "url": "https://app.clickup.com/t/abc123",
    "list": {"id": "list1", "name": "Support"},
}


# --- Archive store fakes ---

class FakeTable:
    """In-memory stand-in for a DynamoDB table keyed by taskId."""

    def __init__(self):
        self.items: dict[str, dict] = {}
        self.put_calls = 0

    def load(self):
        pass

    def put_item(self, Item):
        self.put_calls += 1
        self.items[Item["taskId"]] = Item

    def scan(self, FilterExpression=None, Select=None, ExclusiveStartKey=None):
        expr = FilterExpression.get_expression()
        attr, value = expr["values"]
        matches = [item for item in self.items.values() if item.get(attr.name) == value]
        return {"Count": len(matches)}


@pytest.fixture
def fake_table():
    return FakeTable()


@pytest.fixture
def archive_store(fake_table):
    return ArchiveStore("clickup_archived_tasks", "us-east-1", table=fake_table)


@pytest.fixture
def broken_store():
    """A store whose every operation fails like an unreachable DynamoDB."""
    from botocore.exceptions import EndpointConnectionError

    table = MagicMock()
    error = EndpointConnectionError(endpoint_url="http://localhost:8000")
    table.put_item.side_effect = error
    table.scan.side_effect = error
    return ArchiveStore("clickup_archived_tasks", "us-east-1", table=table)


# --- Settings / clients ---

@pytest.fixture(autouse=True)
def settings_env(monkeypatch):
    """Deterministic configuration with no rate-limit sleeps."""
    monkeypatch.setenv("CLICKUP_API_KEY", "pk_test")
    monkeypatch.setenv("CLICKUP_LIST_ID", "list1")
    monkeypatch.setenv("ARCHIVE_TABLE_NAME", "clickup_archived_tasks")
    monkeypatch.setenv("ARCHIVE_DELAY_SECONDS", "0")
    monkeypatch.setenv("STATUS_BATCH_DELAY_SECONDS", "0")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def mock_session(mocker):
    """Mocked shared requests.Session used by the ClickUp client."""
    session = MagicMock()
    mocker.patch("clickup_archiver.services.clickup.get_session", return_value=session)
    return session


def make_response(status_code: int = 200, json_data=None, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.reason = "Error" if status_code >= 400 else "OK"
    if json_data is None:
        resp.json.side_effect = ValueError("no json")
        resp.content = text.encode()
        resp.text = text
    else:
        resp.json.return_value = json_data
        resp.content = b"{...}"
        resp.text = str(json_data)
    return resp


@pytest.fixture
def api_client():
    """FastAPI TestClient for router tests."""
    from clickup_archiver.main import api
    return TestClient(api)
