"""
RequestContext — "who is asking, and may they do this?" for one request.

Every API request gets a RequestContext. It carries:
- principal: the authenticated caller (None when no token was presented)
- engine: the AuthorizationEngine whose matrix answers the questions

The require_* methods are the route guard: they raise 401 for anonymous
callers and 403 for callers the engine denies. The HTTP detail carries a
notice code the UI shows to the user and the page to redirect to.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from fastapi import HTTPException

from worktrack.auth.capabilities import Capability, has_capability
from worktrack.auth.engine import AuthorizationEngine, get_default_engine
from worktrack.auth.features import Feature, Permission
from worktrack.auth.roles import Role

LOGIN_REDIRECT = "/login"
HOME_REDIRECT = "/"


@dataclass(frozen=True)
class Principal:
    id: int
    role: Role
    email: str | None = None


@dataclass(frozen=True)
class OwnedResource:
    owner_id: int
    owner_role: Role | None = None


def _denied(status_code: int, message: str, notice: str, redirect: str) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"message": message, "notice": notice, "redirect": redirect},
    )


@dataclass
class RequestContext:
    principal: Principal | None = None
    engine: AuthorizationEngine = field(default_factory=get_default_engine)

    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None

    @property
    def role(self) -> Role | None:
        return self.principal.role if self.principal else None

    @property
    def actor(self) -> str:
        """Identity string for audit logging."""
        if self.principal is None:
            return "anonymous"
        return f"{self.principal.role.value}:{self.principal.id}"

    # ── Decisions ────────────────────────────────────────────────────────────

    def has_feature_access(self, feature: Feature) -> bool:
        return self.engine.has_feature_access(self.role, feature)

    def has_permission(self, feature: Feature, perm: Permission) -> bool:
        return self.engine.has_permission(self.role, feature, perm)

    def can_access(self, resource: OwnedResource, feature: Feature) -> bool:
        return self.engine.can_access_owned_resource(
            self.principal, resource.owner_id, resource.owner_role, feature,
        )

    # ── Guards ───────────────────────────────────────────────────────────────

    def require_authenticated(self) -> Principal:
        """Raise 401 if no principal was resolved for this request."""
        if self.principal is None:
            raise _denied(401, "Not authenticated", "unauthorized", LOGIN_REDIRECT)
        return self.principal

    def require_feature(self, feature: Feature) -> None:
        """Raise 401/403 unless the caller can open the feature at all."""
        self.require_authenticated()
        if not self.has_feature_access(feature):
            raise _denied(
                403,
                f"No access to feature: {feature.value}",
                "no_access_to_feature",
                HOME_REDIRECT,
            )

    def require_permissions(self, feature: Feature, *perms: Permission) -> None:
        """Raise 401/403 unless the caller holds ALL listed permissions on the feature."""
        self.require_feature(feature)
        missing = [p for p in perms if not self.has_permission(feature, p)]
        if missing:
            needed = ", ".join(f"{feature.value}:{p.value}" for p in missing)
            raise _denied(
                403,
                f"Insufficient permissions: requires {needed}",
                "insufficient_permissions",
                HOME_REDIRECT,
            )

    def require_owned_access(self, resource: OwnedResource, feature: Feature) -> None:
        """Raise 401/403 unless the caller may see this person's record."""
        self.require_authenticated()
        if not self.can_access(resource, feature):
            raise _denied(
                403,
                f"No access to {feature.value} record of user {resource.owner_id}",
                "insufficient_permissions",
                HOME_REDIRECT,
            )

    def require_capability(self, capability: Capability) -> None:
        self.require_authenticated()
        if not has_capability(self.role, capability):
            raise _denied(
                403,
                f"Insufficient permissions: requires {capability.value}",
                "insufficient_permissions",
                HOME_REDIRECT,
            )
