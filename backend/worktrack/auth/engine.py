"""
Authorization engine — answers "may this role/principal do X?" against the
current AccessMatrix plus the ownership and admin-privacy rules.

Every decision method:
  1. denies when there is no principal/role (authentication happens upstream),
  2. short-circuits to allow for Role.ADMIN,
  3. otherwise consults the matrix.

Unknown role, feature or permission values are denied and logged, never
raised. Decisions are pure functions of (matrix, arguments); the only state
is the reference to the current matrix, which swap_matrix() replaces in one
assignment.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, Protocol, TypeVar

from worktrack.auth.features import ALL_PERMISSIONS, Feature, Permission
from worktrack.auth.matrix import AccessMatrix
from worktrack.auth.roles import Role
from worktrack.middleware.metrics import authz_decisions_total

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)
T = TypeVar("T")

# Permissions that let a role look at someone else's record in a feature
OWNED_RESOURCE_PERMISSIONS: tuple[Permission, ...] = (Permission.VIEW, Permission.MANAGE)


class PrincipalLike(Protocol):
    id: int
    role: Role


def _coerce(enum_cls: type[E], value: Any) -> E | None:
    """Enum member for value, or None when it is outside the enumeration."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning("Denying access check with unknown %s %r", enum_cls.__name__.lower(), value)
        return None


def _role_of(candidate: Any) -> Any:
    if isinstance(candidate, Mapping):
        return candidate.get("role")
    return getattr(candidate, "role", None)


def _record(check: str, allowed: bool) -> bool:
    authz_decisions_total.labels(check=check, outcome="allow" if allowed else "deny").inc()
    return allowed


class AuthorizationEngine:
    """Decision functions bound to one AccessMatrix reference."""

    def __init__(self, matrix: AccessMatrix | None = None):
        self._matrix = matrix if matrix is not None else AccessMatrix.default()

    @property
    def matrix(self) -> AccessMatrix:
        return self._matrix

    def swap_matrix(self, matrix: AccessMatrix) -> AccessMatrix:
        """Install a new matrix snapshot and return the previous one."""
        if not isinstance(matrix, AccessMatrix):
            raise TypeError(f"Expected AccessMatrix, got {type(matrix).__name__}")
        previous, self._matrix = self._matrix, matrix
        logger.info("Access matrix swapped")
        return previous

    # ── Matrix decisions ─────────────────────────────────────────────────────

    def permissions_for(self, role: Role | str | None, feature: Feature | str) -> frozenset[Permission]:
        role_ = _coerce(Role, role) if role is not None else None
        feature_ = _coerce(Feature, feature)
        if role_ is None or feature_ is None:
            return frozenset()
        if role_ is Role.ADMIN:
            return ALL_PERMISSIONS
        return self._matrix.permissions_for(role_, feature_)

    def has_feature_access(self, role: Role | str | None, feature: Feature | str) -> bool:
        """True iff role is admin or holds any permission on the feature."""
        if role is None:
            return _record("feature", False)
        role_ = _coerce(Role, role)
        if role_ is Role.ADMIN:
            return _record("feature", True)
        feature_ = _coerce(Feature, feature)
        if role_ is None or feature_ is None:
            return _record("feature", False)

        allowed = len(self._matrix.permissions_for(role_, feature_)) > 0
        if not allowed:
            logger.debug("Feature denied: %s -> %s", role_.value, feature_.value)
        return _record("feature", allowed)

    def has_permission(
        self,
        role: Role | str | None,
        feature: Feature | str,
        permission: Permission | str,
    ) -> bool:
        """True iff role is admin or permission is in matrix[role][feature]."""
        if role is None:
            return _record("permission", False)
        role_ = _coerce(Role, role)
        if role_ is Role.ADMIN:
            return _record("permission", True)
        feature_ = _coerce(Feature, feature)
        permission_ = _coerce(Permission, permission)
        if role_ is None or feature_ is None or permission_ is None:
            return _record("permission", False)

        allowed = permission_ in self._matrix.permissions_for(role_, feature_)
        if not allowed:
            logger.debug("Permission denied: %s -> %s:%s", role_.value, feature_.value, permission_.value)
        return _record("permission", allowed)

    def accessible_features(self, role: Role | str | None) -> list[Feature]:
        """Features the role can open at all, in declaration order."""
        return [f for f in Feature if self.has_feature_access(role, f)]

    # ── Ownership decisions ──────────────────────────────────────────────────

    def can_access_owned_resource(
        self,
        principal: PrincipalLike | None,
        resource_owner_id: int | None,
        resource_owner_role: Role | str | None,
        feature: Feature | str,
    ) -> bool:
        """
        Decide access to a record that belongs to a specific person.

        First match wins:
          1. principal is admin                      → allow
          2. owner is admin, principal is not        → deny (admin privacy)
          3. principal owns the record               → allow (self-access)
          4. role holds view or manage on the feature → allow, else deny

        Rule 2 must stay ahead of rule 4, otherwise a blanket `manage` grant
        (HR on staff, for example) would expose admin records.
        """
        if principal is None:
            return _record("owned", False)
        role_ = _coerce(Role, principal.role)
        if role_ is Role.ADMIN:
            return _record("owned", True)
        if role_ is None:
            return _record("owned", False)

        if resource_owner_role is not None:
            owner_role = _coerce(Role, resource_owner_role)
            if owner_role is None or owner_role is Role.ADMIN:
                logger.debug(
                    "Owned resource denied (admin privacy): %s:%s -> owner %s",
                    role_.value, principal.id, resource_owner_id,
                )
                return _record("owned", False)

        if resource_owner_id is not None and principal.id == resource_owner_id:
            return _record("owned", True)

        feature_ = _coerce(Feature, feature)
        if feature_ is None:
            return _record("owned", False)
        granted = self._matrix.permissions_for(role_, feature_)
        allowed = any(p in granted for p in OWNED_RESOURCE_PERMISSIONS)
        if not allowed:
            logger.debug(
                "Owned resource denied: %s:%s -> %s owned by %s",
                role_.value, principal.id, feature_.value, resource_owner_id,
            )
        return _record("owned", allowed)

    def filter_visible_roles(self, principal: PrincipalLike | None, candidates: Iterable[T]) -> list[T]:
        """
        Drop admin entries from a listing unless the principal is an admin.

        Candidates are mappings with a "role" key or objects with a `role`
        attribute. Order is kept. For non-admin principals an entry whose
        role is missing or unknown is dropped too (and logged). This is a
        display filter only; record access still goes through
        can_access_owned_resource().
        """
        items = list(candidates)
        if principal is not None and _coerce(Role, principal.role) is Role.ADMIN:
            return items
        visible = []
        for c in items:
            # unknown or missing roles are hidden, same as admin rows
            role = _coerce(Role, _role_of(c))
            if role is not None and role is not Role.ADMIN:
                visible.append(c)
        return visible


# ── Process-wide default engine ──────────────────────────────────────────────

_default_engine = AuthorizationEngine()


def get_default_engine() -> AuthorizationEngine:
    return _default_engine


def has_feature_access(role: Role | str | None, feature: Feature | str) -> bool:
    return _default_engine.has_feature_access(role, feature)


def has_permission(role: Role | str | None, feature: Feature | str, permission: Permission | str) -> bool:
    return _default_engine.has_permission(role, feature, permission)


def can_access_owned_resource(
    principal: PrincipalLike | None,
    resource_owner_id: int | None,
    resource_owner_role: Role | str | None,
    feature: Feature | str,
) -> bool:
    return _default_engine.can_access_owned_resource(principal, resource_owner_id, resource_owner_role, feature)


def filter_visible_roles(principal: PrincipalLike | None, candidates: Iterable[T]) -> list[T]:
    return _default_engine.filter_visible_roles(principal, candidates)
