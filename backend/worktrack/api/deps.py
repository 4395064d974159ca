"""
API Dependencies — authorization engine, request context, route guards.

`get_request_context`:
  1. Reads the Bearer token from the Authorization header (none → anonymous)
  2. Decodes and validates the JWT issued by the HR application
  3. Resolves the `role` claim to a Role (unknown role → 401)
  4. Returns a RequestContext bound to the process-wide engine

Route guards (`require_feature`, `require_capability`) turn engine denials
into 401/403 responses carrying a notice code and a redirect hint.
"""

import logging

from fastapi import Depends, HTTPException, Request
from jose import JWTError

from worktrack.auth.capabilities import Capability
from worktrack.auth.context import LOGIN_REDIRECT, Principal, RequestContext
from worktrack.auth.engine import AuthorizationEngine, get_default_engine
from worktrack.auth.features import Feature, Permission
from worktrack.auth.jwt import decode_access_token
from worktrack.auth.roles import Role
from worktrack.middleware.request_context import set_actor

logger = logging.getLogger(__name__)


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"message": message, "notice": "unauthorized", "redirect": LOGIN_REDIRECT},
    )


# ── Engine ───────────────────────────────────────────────────────────────────

def get_engine() -> AuthorizationEngine:
    return get_default_engine()


# ── Request context (JWT principal) ──────────────────────────────────────────

async def get_request_context(
    request: Request,
    engine: AuthorizationEngine = Depends(get_engine),
) -> RequestContext:
    """Build the RequestContext for the current request from its bearer token."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header:
        return RequestContext(principal=None, engine=engine)
    if not auth_header.startswith("Bearer "):
        raise _unauthorized("Invalid Authorization header")

    token = auth_header[7:]  # strip "Bearer "
    try:
        claims = decode_access_token(token)
    except JWTError as e:
        logger.debug("JWT decode failed: %s", e)
        raise _unauthorized("Invalid or expired token")

    try:
        user_id = int(claims.get("sub", ""))
        role = Role(claims.get("role"))
    except (TypeError, ValueError):
        logger.warning("Rejected token with sub=%r role=%r", claims.get("sub"), claims.get("role"))
        raise _unauthorized("Token does not carry a valid user id and role")

    ctx = RequestContext(
        principal=Principal(id=user_id, role=role, email=claims.get("email")),
        engine=engine,
    )
    set_actor(ctx.actor)
    return ctx


# ── Route guards ─────────────────────────────────────────────────────────────

def require_authenticated():
    async def _check(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
        ctx.require_authenticated()
        return ctx
    return _check


def require_feature(feature: Feature, *perms: Permission):
    """
    FastAPI dependency: caller must be able to open `feature` and hold ALL `perms` on it.

    Usage:
        @router.get("/matrix")
        async def get_matrix(ctx: RequestContext = Depends(require_feature(Feature.SETTINGS, Permission.VIEW))):
            ...
    """
    async def _check(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
        ctx.require_permissions(feature, *perms)
        return ctx
    return _check


def require_capability(capability: Capability):
    async def _check(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
        ctx.require_capability(capability)
        return ctx
    return _check
