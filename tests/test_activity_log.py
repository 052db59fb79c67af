"""Unit tests for ActivityLogService."""

import asyncio

import pytest

from conftest import NOW
from fileshare.adapters.links.in_memory import InMemoryLinkStore
from fileshare.core.errors import InternalAppError, ValidationAppError
from fileshare.schemas.activity import QueueLogRequest
from fileshare.services.activity_log import ActivityLogService


@pytest.fixture
def service(store: InMemoryLinkStore) -> ActivityLogService:
    return ActivityLogService(store=store, clock=lambda: NOW)


def test_request_accepts_camel_case_body() -> None:
    payload = QueueLogRequest.model_validate(
        {"action": "paused", "taskId": "t-3", "userId": "u-2", "additionalData": {"reason": "offline"}}
    )

    assert payload.task_id == "t-3"
    assert payload.user_id == "u-2"
    assert payload.additional_data == {"reason": "offline"}


def test_logs_prefixed_action(service: ActivityLogService, store: InMemoryLinkStore) -> None:
    entry = asyncio.run(
        service.log_queue_action(QueueLogRequest(action="completed", task_id="t-1", file_name="a.txt"))
    )

    assert store.activity == [entry]
    assert entry.action == "queue_completed"
    assert entry.file_name == "a.txt"
    assert entry.user_id == "unknown"
    assert entry.timestamp == NOW


def test_reports_every_missing_parameter(service: ActivityLogService, store: InMemoryLinkStore) -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        asyncio.run(service.log_queue_action(QueueLogRequest()))

    assert exc_info.value.details == {"missing": ["action", "taskId"]}
    assert exc_info.value.kind.http_status == 400
    assert store.activity == []


def test_store_failure_maps_to_internal() -> None:
    class FailingStore(InMemoryLinkStore):
        async def append_activity(self, entry):
            raise ConnectionError("firestore unavailable")

    service = ActivityLogService(store=FailingStore(), clock=lambda: NOW)

    with pytest.raises(InternalAppError) as exc_info:
        asyncio.run(service.log_queue_action(QueueLogRequest(action="started", task_id="t-1")))

    assert exc_info.value.code == "activity_log_failed"
    assert isinstance(exc_info.value.__cause__, ConnectionError)
