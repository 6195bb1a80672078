# salonbook/core/permissions.py
"""
Actor-capability table.

Every authorization decision in the engine goes through this module:
first "may this role perform the operation at all", then "is this resource
within the actor's reach". Authentication itself happens upstream; the
engine only receives an (id, role) pair.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Optional

from .enums import Capability, RoleName
from .exceptions import ForbiddenException


@dataclass(frozen=True)
class Actor:
    """The party performing an operation."""

    id: str
    role: RoleName


@dataclass(frozen=True)
class ResourceScope:
    """Who a resource belongs to, from each role's point of view."""

    customer_id: Optional[str] = None
    provider_user_ids: FrozenSet[str] = field(default_factory=frozenset)
    owner_id: Optional[str] = None


ROLE_CAPABILITIES: Dict[RoleName, FrozenSet[Capability]] = {
    RoleName.CUSTOMER: frozenset(
        {
            Capability.VIEW_AVAILABILITY,
            Capability.CREATE_BOOKING,
            Capability.RESCHEDULE_BOOKING,
            Capability.CANCEL_BOOKING,
        }
    ),
    RoleName.PROVIDER: frozenset(
        {
            Capability.VIEW_AVAILABILITY,
            Capability.CANCEL_BOOKING,
            Capability.MANAGE_AVAILABILITY,
        }
    ),
    RoleName.OWNER: frozenset(
        {
            Capability.VIEW_AVAILABILITY,
            Capability.CANCEL_BOOKING,
            Capability.MANAGE_AVAILABILITY,
            Capability.MANAGE_BUSINESS_HOURS,
        }
    ),
    RoleName.ADMIN: frozenset(Capability),
}

_OWNERSHIP_RULES: Dict[RoleName, Callable[[Actor, ResourceScope], bool]] = {
    RoleName.CUSTOMER: lambda actor, scope: actor.id == scope.customer_id,
    RoleName.PROVIDER: lambda actor, scope: actor.id in scope.provider_user_ids,
    RoleName.OWNER: lambda actor, scope: actor.id == scope.owner_id,
    RoleName.ADMIN: lambda actor, scope: True,
}


def has_capability(role: RoleName, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES.get(role, frozenset())


def require_capability(actor: Actor, capability: Capability) -> None:
    """Raise ForbiddenException unless the actor's role grants the capability."""
    if not has_capability(actor.role, capability):
        raise ForbiddenException(
            f"Role '{actor.role.value}' may not {capability.value.replace('_', ' ')}",
            code="CAPABILITY_DENIED",
            details={"role": actor.role.value, "capability": capability.value},
        )


def actor_owns(actor: Actor, scope: ResourceScope) -> bool:
    """Whether the resource described by scope is within the actor's reach."""
    rule = _OWNERSHIP_RULES.get(actor.role)
    return bool(rule and rule(actor, scope))
