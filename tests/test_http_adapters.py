from __future__ import annotations

import json

import httpx
import pytest

from hrflow.domain.requests.enums import EventKind, RequestType
from hrflow.notifications import HttpNotificationDispatcher
from hrflow.targets import HttpTargetResolver


def test_dispatcher_posts_event_to_notification_service() -> None:
    # Arrange
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202, json={"queued": True})

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        dispatcher = HttpNotificationDispatcher(base_url="http://notify/", client=client)

        # Act
        dispatcher.notify("u-employee", 7, EventKind.APPROVED)

    # Assert
    assert len(seen) == 1
    assert seen[0].method == "POST"
    assert str(seen[0].url) == "http://notify/notifications"
    assert json.loads(seen[0].content) == {
        "recipient_id": "u-employee",
        "request_id": 7,
        "event_kind": "approved",
    }


def test_dispatcher_raises_on_service_error() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(503))

    with httpx.Client(transport=transport) as client:
        dispatcher = HttpNotificationDispatcher(base_url="http://notify", client=client)

        with pytest.raises(httpx.HTTPStatusError):
            dispatcher.notify("hr", 1, EventKind.SUBMITTED)


def test_resolver_maps_type_to_resource_path() -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        if request.url.path.endswith("/missing"):
            return httpx.Response(404)
        return httpx.Response(200, json={"id": "ok"})

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        resolver = HttpTargetResolver(base_url="http://directory", client=client)

        assert resolver.exists(RequestType.TASK_EXTENSION, "task-1") is True
        assert resolver.exists(RequestType.DOCUMENT_APPROVAL, "missing") is False

    assert paths == ["/tasks/task-1", "/documents/missing"]


def test_resolver_propagates_infrastructure_failures() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500))

    with httpx.Client(transport=transport) as client:
        resolver = HttpTargetResolver(base_url="http://directory", client=client)

        with pytest.raises(httpx.HTTPStatusError):
            resolver.exists(RequestType.LOGISTICS_ITEM, "item-1")
