"""HTTP target resolver backed by the platform's resource directory."""

from __future__ import annotations

import httpx

from hrflow.domain.requests.enums import RequestType
from .base import TargetResolver


class HttpTargetResolver(TargetResolver):
    """Resolve targets with `GET {base_url}/{kind}/{id}`.

    200 means the resource exists, 404 means it does not; anything else is
    an infrastructure failure and propagates.
    """

    _KIND_BY_TYPE = {
        RequestType.TASK_HELP: 'tasks',
        RequestType.TASK_EXTENSION: 'tasks',
        RequestType.DEPARTMENT_TASK: 'tasks',
        RequestType.HR_TASK: 'tasks',
        RequestType.LOGISTICS_ITEM: 'logistics-items',
        RequestType.LEAVE: 'employees',
        RequestType.DOCUMENT_APPROVAL: 'documents',
        RequestType.REGISTRATION: 'employees',
    }

    def __init__(self, base_url: str, client: httpx.Client | None = None, timeout: float = 5.0) -> None:
        self._base_url = base_url.rstrip('/')
        self._client = client
        self._timeout = timeout

    def exists(self, request_type: RequestType, target_id: str) -> bool:
        url = f'{self._base_url}/{self._KIND_BY_TYPE[request_type]}/{target_id}'

        if self._client is not None:
            resp = self._client.get(url, timeout=self._timeout)
        else:
            with httpx.Client() as client:
                resp = client.get(url, timeout=self._timeout)

        if resp.status_code == 404:
            return False
        resp.raise_for_status()
        return True
