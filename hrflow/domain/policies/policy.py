"""Authorization policy for request decisions, visibility, and fulfilment.

Core principles:
- One table decides who may act on which request type
- The engine and the query layer consult the same table
- Evaluation is pure: no lookups, no side effects
- Nobody decides their own request
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from hrflow.domain.requests.entities import RequestEntity
from hrflow.domain.requests.enums import ADVANCEABLE_TYPES, RequestStatus, RequestType
from .actor import Actor, Role
from .policy_decision import PolicyDecision, PolicyOutcome


@dataclass(frozen=True)
class DecisionRule:
    """Who is eligible to decide a request of one type."""

    roles: frozenset[Role]
    permissions: frozenset[str] = frozenset()
    direct_manager: bool = False

    def matches(self, actor: Actor, request: RequestEntity) -> bool:
        if actor.role in self.roles:
            return True
        if any(actor.has_permission(p) for p in self.permissions):
            return True
        if self.direct_manager and actor.manages(request.requester_id):
            return True
        return False


@dataclass(frozen=True)
class AdvanceRule:
    """Who may move an approved request into one fulfilment state."""

    roles: frozenset[Role]
    requester: bool = False

    def matches(self, actor: Actor, request: RequestEntity) -> bool:
        if actor.role in self.roles:
            return True
        return self.requester and actor.id == request.requester_id


@dataclass(frozen=True)
class AuthorizationPolicy:
    decide_rules: Mapping[RequestType, DecisionRule]
    advance_rules: Mapping[RequestStatus, AdvanceRule]
    oversight_roles: frozenset[Role] = field(default_factory=frozenset)

    def evaluate_decide(self, actor: Actor, request: RequestEntity) -> PolicyDecision:
        """
        Evaluates whether an actor may approve or reject a request.

        The evaluation follows a hierarchical check:
        1. Denial if the actor submitted the request.
        2. Denial if the type's rule does not cover the actor.
        3. Allowance otherwise.

        Args:
            actor: The identity attempting the decision.
            request: The request being decided.

        Returns:
            A PolicyDecision with outcome ALLOW or DENY and the reason.
        """
        if actor.id == request.requester_id:
            return PolicyDecision(
                outcome=PolicyOutcome.DENY,
                reason="Requesters cannot decide their own requests",
            )

        rule = self.decide_rules.get(request.type)
        if rule is None or not rule.matches(actor, request):
            return PolicyDecision(
                outcome=PolicyOutcome.DENY,
                reason=f"Role '{actor.role.value}' may not decide '{request.type.value}' requests",
            )

        return PolicyDecision(outcome=PolicyOutcome.ALLOW)

    def can_decide(self, actor: Actor, request: RequestEntity) -> bool:
        return self.evaluate_decide(actor, request).allowed

    def evaluate_advance(
            self,
            actor: Actor,
            request: RequestEntity,
            next_state: RequestStatus,
    ) -> PolicyDecision:
        rule = self.advance_rules.get(next_state)
        if rule is None or not rule.matches(actor, request):
            return PolicyDecision(
                outcome=PolicyOutcome.DENY,
                reason=f"Role '{actor.role.value}' may not mark requests as '{next_state.value}'",
            )
        return PolicyDecision(outcome=PolicyOutcome.ALLOW)

    def can_advance(self, actor: Actor, request: RequestEntity, next_state: RequestStatus) -> bool:
        return self.evaluate_advance(actor, request, next_state).allowed

    def can_view(self, actor: Actor, request: RequestEntity) -> bool:
        if actor.id == request.requester_id:
            return True
        if actor.role in self.oversight_roles:
            return True
        if request.reviewer_id is not None and actor.id == request.reviewer_id:
            return True

        rule = self.decide_rules.get(request.type)
        if rule is not None and rule.matches(actor, request):
            return True

        if request.type in ADVANCEABLE_TYPES:
            return any(r.matches(actor, request) for r in self.advance_rules.values())

        return False
