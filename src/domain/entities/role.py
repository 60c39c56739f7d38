"""Account roles and the capability predicate used for every role check."""

from enum import StrEnum


class Role(StrEnum):
    """Role assigned to a user exactly once, at account creation."""

    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    ADMIN_STAFF = "ADMIN_STAFF"
    CUSTOMER = "CUSTOMER"
    ENERGY_RENTER = "ENERGY_RENTER"
    USER = "USER"


class Capability(StrEnum):
    """Actions gated by role."""

    MANAGE_INVITATIONS = "manage_invitations"
    RECEIVE_ADMIN_NOTIFICATIONS = "receive_admin_notifications"
    SKIP_PROFILE_COMPLETION = "skip_profile_completion"


ADMIN_TIER: frozenset[Role] = frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.ADMIN_STAFF})

_CAPABILITIES: dict[Capability, frozenset[Role]] = {
    Capability.MANAGE_INVITATIONS: ADMIN_TIER,
    Capability.RECEIVE_ADMIN_NOTIFICATIONS: ADMIN_TIER,
    Capability.SKIP_PROFILE_COMPLETION: ADMIN_TIER,
}


def has_capability(role: Role | str | None, capability: Capability) -> bool:
    """Check whether a role grants a capability.

    Unknown role strings never grant anything.
    """
    if role is None:
        return False
    try:
        resolved = Role(role)
    except ValueError:
        return False
    return resolved in _CAPABILITIES[capability]


def roles_with(capability: Capability) -> frozenset[Role]:
    """All roles granting ``capability``."""
    return _CAPABILITIES[capability]
