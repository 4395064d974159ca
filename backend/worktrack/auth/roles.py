"""
Role definitions — which permissions each role holds on each feature.

Unlike a hierarchy of bundles, every role lists its grants per feature
explicitly, and every role has a row for every feature (an empty set means
no access). AccessMatrix enforces that at import time.

    admin            full trust, also short-circuited in the engine
    project_manager  assigned projects, their tasks and reports
    engineer         own tasks and assigned projects
    admin_staff      own attendance, assigned projects and tasks
    hr_manager       staff, attendance and residency management
    general_manager  everything except system settings
"""

from enum import Enum

from worktrack.auth.features import ALL_PERMISSIONS, Feature, Permission


class Role(str, Enum):
    ADMIN = "admin"
    PROJECT_MANAGER = "project_manager"
    ENGINEER = "engineer"
    ADMIN_STAFF = "admin_staff"
    HR_MANAGER = "hr_manager"
    GENERAL_MANAGER = "general_manager"


_NONE: frozenset[Permission] = frozenset()
_VIEW = frozenset({Permission.VIEW})
_VIEW_EDIT = frozenset({Permission.VIEW, Permission.EDIT})
_VIEW_CREATE_EDIT = frozenset({Permission.VIEW, Permission.CREATE, Permission.EDIT})
_ALL_BUT_DELETE = frozenset({Permission.VIEW, Permission.CREATE, Permission.EDIT, Permission.MANAGE})


DEFAULT_ACCESS: dict[Role, dict[Feature, frozenset[Permission]]] = {
    # ── Admin: everything (settings has no create/delete) ──
    Role.ADMIN: {
        Feature.DASHBOARD: ALL_PERMISSIONS,
        Feature.PROJECTS: ALL_PERMISSIONS,
        Feature.STAFF: ALL_PERMISSIONS,
        Feature.CLIENTS: ALL_PERMISSIONS,
        Feature.ATTENDANCE: ALL_PERMISSIONS,
        Feature.REPORTS: ALL_PERMISSIONS,
        Feature.SETTINGS: frozenset({Permission.VIEW, Permission.EDIT, Permission.MANAGE}),
        Feature.TASKS: ALL_PERMISSIONS,
        Feature.RESIDENCY: ALL_PERMISSIONS,
    },
    # ── Project manager: assigned projects, tasks and related reports ──
    Role.PROJECT_MANAGER: {
        Feature.DASHBOARD: _VIEW,
        Feature.PROJECTS: frozenset({Permission.VIEW, Permission.EDIT, Permission.MANAGE}),
        Feature.STAFF: _VIEW,
        Feature.CLIENTS: _VIEW,
        Feature.ATTENDANCE: _NONE,
        Feature.REPORTS: _VIEW,
        Feature.SETTINGS: _NONE,
        Feature.TASKS: _ALL_BUT_DELETE,
        Feature.RESIDENCY: _NONE,
    },
    # ── Engineer: own tasks, assigned projects ──
    Role.ENGINEER: {
        Feature.DASHBOARD: _NONE,
        Feature.PROJECTS: _VIEW,
        Feature.STAFF: _NONE,
        Feature.CLIENTS: _NONE,
        Feature.ATTENDANCE: _NONE,
        Feature.REPORTS: _NONE,
        Feature.SETTINGS: _NONE,
        Feature.TASKS: _VIEW_EDIT,
        Feature.RESIDENCY: _NONE,
    },
    # ── Administrative staff: own attendance, assigned projects and tasks ──
    Role.ADMIN_STAFF: {
        Feature.DASHBOARD: _VIEW,
        Feature.PROJECTS: _VIEW,
        Feature.STAFF: _NONE,
        Feature.CLIENTS: _NONE,
        Feature.ATTENDANCE: _VIEW,
        Feature.REPORTS: _NONE,
        Feature.SETTINGS: _NONE,
        Feature.TASKS: _VIEW_EDIT,
        Feature.RESIDENCY: _NONE,
    },
    # ── HR manager: staff, attendance and residency management ──
    Role.HR_MANAGER: {
        Feature.DASHBOARD: _VIEW,
        Feature.PROJECTS: _VIEW,
        Feature.STAFF: _ALL_BUT_DELETE,
        Feature.CLIENTS: _VIEW,
        Feature.ATTENDANCE: _ALL_BUT_DELETE,
        Feature.REPORTS: _VIEW_CREATE_EDIT,
        Feature.SETTINGS: _NONE,
        Feature.TASKS: _VIEW_CREATE_EDIT,
        Feature.RESIDENCY: _ALL_BUT_DELETE,
    },
    # ── General manager: all features except system settings ──
    Role.GENERAL_MANAGER: {
        Feature.DASHBOARD: frozenset({Permission.VIEW, Permission.MANAGE}),
        Feature.PROJECTS: ALL_PERMISSIONS,
        Feature.STAFF: _ALL_BUT_DELETE,
        Feature.CLIENTS: ALL_PERMISSIONS,
        Feature.ATTENDANCE: _ALL_BUT_DELETE,
        Feature.REPORTS: _ALL_BUT_DELETE,
        Feature.SETTINGS: _NONE,
        Feature.TASKS: ALL_PERMISSIONS,
        Feature.RESIDENCY: _ALL_BUT_DELETE,
    },
}
