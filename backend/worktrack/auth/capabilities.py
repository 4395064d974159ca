"""
Capabilities — named role-group checks that are not cells of the matrix.

Some screens are gated on "is the caller one of these roles" rather than on a
feature permission (who may see residency expiry alerts, who may see project
budgets, ...). They live here, behind the same rules as the engine: no role
means deny, admin means allow.
"""

from enum import Enum

from worktrack.auth.engine import AuthorizationEngine, PrincipalLike, _coerce, _record, get_default_engine
from worktrack.auth.features import Feature, Permission
from worktrack.auth.roles import Role


class Capability(str, Enum):
    REPORTS = "reports"
    SETTINGS = "settings"
    RESIDENCY_NOTIFICATIONS = "residency_notifications"
    PROJECT_FINANCIALS = "project_financials"
    DETAILED_PROJECT_INFO = "detailed_project_info"


_MANAGERS = frozenset({Role.HR_MANAGER, Role.GENERAL_MANAGER, Role.PROJECT_MANAGER})

CAPABILITY_ROLES: dict[Capability, frozenset[Role]] = {
    Capability.REPORTS: _MANAGERS,
    Capability.SETTINGS: frozenset(),                                   # admin only
    Capability.RESIDENCY_NOTIFICATIONS: _MANAGERS,
    Capability.PROJECT_FINANCIALS: frozenset({Role.GENERAL_MANAGER}),
    Capability.DETAILED_PROJECT_INFO: frozenset({Role.GENERAL_MANAGER, Role.PROJECT_MANAGER}),
}


def has_capability(role: Role | str | None, capability: Capability | str) -> bool:
    if role is None:
        return _record("capability", False)
    role_ = _coerce(Role, role)
    if role_ is Role.ADMIN:
        return _record("capability", True)
    capability_ = _coerce(Capability, capability)
    if role_ is None or capability_ is None:
        return _record("capability", False)
    return _record("capability", role_ in CAPABILITY_ROLES[capability_])


def capabilities_for(role: Role | str | None) -> list[Capability]:
    return [c for c in Capability if has_capability(role, c)]


def can_access_project(
    principal: PrincipalLike | None,
    project_id: int,
    engine: AuthorizationEngine | None = None,
) -> bool:
    """Project-level check; assignment lookups belong to the project store."""
    if principal is None:
        return False
    engine = engine or get_default_engine()
    return engine.has_permission(principal.role, Feature.PROJECTS, Permission.VIEW)
