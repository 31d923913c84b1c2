from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from hrflow.domain.requests.enums import RequestType


class TargetResolver(ABC):
    """Answers whether the resource a request concerns exists."""

    @abstractmethod
    def exists(self, request_type: RequestType, target_id: str) -> bool:
        raise NotImplementedError


class AcceptAllTargetResolver(TargetResolver):
    """Used when no resource directory is configured."""

    def exists(self, request_type: RequestType, target_id: str) -> bool:
        return True


class InMemoryTargetResolver(TargetResolver):
    def __init__(self, known_ids: Iterable[str] = ()) -> None:
        self._known = set(known_ids)

    def add(self, target_id: str) -> None:
        self._known.add(target_id)

    def exists(self, request_type: RequestType, target_id: str) -> bool:
        return target_id in self._known
