"""Actor identity as forwarded by the session layer.

Authentication happens upstream; by the time a call reaches this service the
gateway has attached the caller's id, role, permissions, and direct reports.
"""

from typing import Optional

from fastapi import Header

from hrflow.core.errors import AuthenticationError, AuthorizationError
from hrflow.domain.policies import Actor, Role


def _split(value: Optional[str]) -> frozenset[str]:
    if not value:
        return frozenset()
    return frozenset(v.strip() for v in value.split(",") if v.strip())


def get_actor(
    actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id"),
    actor_role: Optional[str] = Header(default=None, alias="X-Actor-Role"),
    actor_permissions: Optional[str] = Header(default=None, alias="X-Actor-Permissions"),
    actor_reports: Optional[str] = Header(default=None, alias="X-Actor-Reports"),
) -> Actor:
    if not actor_id or not actor_role:
        raise AuthenticationError("X-Actor-Id and X-Actor-Role headers are required")

    try:
        role = Role(actor_role)
    except ValueError:
        raise AuthenticationError(f"Unknown role '{actor_role}'") from None

    return Actor(
        id=actor_id,
        role=role,
        permissions=_split(actor_permissions),
        direct_report_ids=_split(actor_reports),
    )


def assert_same_actor(actor: Actor, claimed_id: str, field_name: str) -> None:
    """Body identities must match the authenticated caller."""
    if claimed_id != actor.id:
        raise AuthorizationError(f"{field_name} does not match the authenticated actor")
