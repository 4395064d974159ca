"""Access API — authorization questions answered for the calling principal."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from worktrack.api.deps import get_engine, require_authenticated, require_feature
from worktrack.auth.capabilities import capabilities_for
from worktrack.auth.context import OwnedResource, RequestContext
from worktrack.auth.engine import AuthorizationEngine
from worktrack.auth.errors import AccessMatrixError
from worktrack.auth.features import Feature, Permission
from worktrack.auth.matrix import load_matrix_file
from worktrack.auth.roles import Role
from worktrack.config import settings
from worktrack.middleware.metrics import access_matrix_reloads_total

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/access", tags=["access"])


# ── Request / Response schemas ────────────────────────────────────────────────

class CheckRequest(BaseModel):
    feature: Feature
    permission: Permission | None = None


class OwnedCheckRequest(BaseModel):
    feature: Feature
    owner_id: int
    owner_role: Role | None = None


class VisibleRequest(BaseModel):
    candidates: list[dict[str, Any]] = Field(default_factory=list)


# ── Helpers ───────────────────────────────────────────────────────────────────

def reload_configured_matrix(engine: AuthorizationEngine) -> bool:
    """Swap in the snapshot at ACCESS_MATRIX_PATH. False when none is configured."""
    if not settings.access_matrix_path:
        return False
    try:
        matrix = load_matrix_file(settings.access_matrix_path)
    except AccessMatrixError:
        access_matrix_reloads_total.labels(status="invalid").inc()
        logger.error("Access matrix snapshot rejected: %s", settings.access_matrix_path, exc_info=True)
        raise
    engine.swap_matrix(matrix)
    access_matrix_reloads_total.labels(status="ok").inc()
    return True


# ── Endpoints ─────────────────────────────────────────────────────────────────

@router.get("/me")
async def me(ctx: RequestContext = Depends(require_authenticated())):
    """Role, reachable features and permission row of the caller (drives menus)."""
    principal = ctx.principal
    return {
        "user": {"id": principal.id, "role": principal.role.value, "email": principal.email},
        "features": [f.value for f in ctx.engine.accessible_features(principal.role)],
        "permissions": {
            f.value: [p.value for p in Permission if p in ctx.engine.permissions_for(principal.role, f)]
            for f in Feature
        },
        "capabilities": [c.value for c in capabilities_for(principal.role)],
    }


@router.get("/matrix")
async def get_matrix(ctx: RequestContext = Depends(require_feature(Feature.SETTINGS, Permission.VIEW))):
    """The full access matrix currently in force."""
    return ctx.engine.matrix.as_dict()


@router.post("/check")
async def check(body: CheckRequest, ctx: RequestContext = Depends(require_authenticated())):
    """Feature access, or a specific permission when one is given."""
    if body.permission is None:
        allowed = ctx.has_feature_access(body.feature)
    else:
        allowed = ctx.has_permission(body.feature, body.permission)
    return {
        "feature": body.feature.value,
        "permission": body.permission.value if body.permission else None,
        "allowed": allowed,
    }


@router.post("/owned")
async def check_owned(body: OwnedCheckRequest, ctx: RequestContext = Depends(require_authenticated())):
    """May the caller see a record owned by `owner_id`?"""
    resource = OwnedResource(owner_id=body.owner_id, owner_role=body.owner_role)
    return {
        "feature": body.feature.value,
        "owner_id": body.owner_id,
        "allowed": ctx.can_access(resource, body.feature),
    }


@router.post("/visible")
async def visible(body: VisibleRequest, ctx: RequestContext = Depends(require_authenticated())):
    """Drop admin entries from a listing unless the caller is an admin."""
    return {"items": ctx.engine.filter_visible_roles(ctx.principal, body.candidates)}


@router.post("/matrix/reload")
async def reload_matrix(
    ctx: RequestContext = Depends(require_feature(Feature.SETTINGS, Permission.MANAGE)),
    engine: AuthorizationEngine = Depends(get_engine),
):
    """Re-read the configured matrix snapshot and install it."""
    try:
        reloaded = reload_configured_matrix(engine)
    except AccessMatrixError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    if not reloaded:
        raise HTTPException(status_code=409, detail="No access matrix snapshot is configured")

    logger.info("Access matrix reloaded by %s", ctx.actor)
    return {"ok": True, "matrix": engine.matrix.as_dict()}
