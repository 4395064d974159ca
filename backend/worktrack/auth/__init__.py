from worktrack.auth.features import Feature, Permission
from worktrack.auth.roles import Role, DEFAULT_ACCESS
from worktrack.auth.errors import AccessMatrixError, InvalidAccessQuery, parse_feature, parse_permission, parse_role
from worktrack.auth.matrix import AccessMatrix, load_matrix_file
from worktrack.auth.engine import (
    AuthorizationEngine, get_default_engine, has_feature_access, has_permission,
    can_access_owned_resource, filter_visible_roles,
)
from worktrack.auth.capabilities import Capability, has_capability, capabilities_for, can_access_project
from worktrack.auth.context import Principal, OwnedResource, RequestContext

__all__ = [
    "Feature", "Permission", "Role", "DEFAULT_ACCESS",
    "AccessMatrixError", "InvalidAccessQuery", "parse_feature", "parse_permission", "parse_role",
    "AccessMatrix", "load_matrix_file",
    "AuthorizationEngine", "get_default_engine", "has_feature_access", "has_permission",
    "can_access_owned_resource", "filter_visible_roles",
    "Capability", "has_capability", "capabilities_for", "can_access_project",
    "Principal", "OwnedResource", "RequestContext",
]
