"""
Feature and permission constants — the areas of the application that are
gated, and the action classes that can be granted inside each of them.

A grant is always the pair (feature, permission). Permissions are independent
flags: holding `manage` on a feature says nothing about `view`, `edit` or
`delete` on that feature. The matrix in roles.py lists every flag explicitly.
"""

from enum import Enum


class Feature(str, Enum):
    DASHBOARD = "dashboard"
    PROJECTS = "projects"
    STAFF = "staff"
    CLIENTS = "clients"
    ATTENDANCE = "attendance"
    REPORTS = "reports"
    SETTINGS = "settings"
    TASKS = "tasks"
    RESIDENCY = "residency"     # residence permits and expiry tracking


class Permission(str, Enum):
    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    MANAGE = "manage"           # administrative actions inside the feature


ALL_PERMISSIONS: frozenset[Permission] = frozenset(Permission)
