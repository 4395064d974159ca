"""Tests for capabilities and the RequestContext route guards."""

import pytest
from fastapi import HTTPException
from prometheus_client import REGISTRY

from worktrack.auth.capabilities import Capability, can_access_project, capabilities_for, has_capability
from worktrack.auth.context import OwnedResource, Principal, RequestContext
from worktrack.auth.features import Feature, Permission
from worktrack.auth.roles import Role


class TestCapabilities:
    def test_admin_has_every_capability(self):
        assert capabilities_for(Role.ADMIN) == list(Capability)

    def test_settings_is_admin_only(self):
        for role in Role:
            assert has_capability(role, Capability.SETTINGS) is (role is Role.ADMIN)

    def test_residency_notifications(self):
        allowed = {r for r in Role if has_capability(r, Capability.RESIDENCY_NOTIFICATIONS)}
        assert allowed == {Role.ADMIN, Role.HR_MANAGER, Role.GENERAL_MANAGER, Role.PROJECT_MANAGER}

    def test_project_financials(self):
        assert has_capability(Role.GENERAL_MANAGER, Capability.PROJECT_FINANCIALS)
        assert not has_capability(Role.PROJECT_MANAGER, Capability.PROJECT_FINANCIALS)
        assert has_capability(Role.PROJECT_MANAGER, Capability.DETAILED_PROJECT_INFO)

    def test_missing_or_unknown_denied(self):
        assert not has_capability(None, Capability.REPORTS)
        assert not has_capability("intern", Capability.REPORTS)
        assert not has_capability(Role.HR_MANAGER, "payroll")

    def test_unknown_values_logged_and_counted(self, caplog):
        def denials():
            return REGISTRY.get_sample_value(
                "authz_decisions_total", {"check": "capability", "outcome": "deny"}
            ) or 0.0

        before = denials()
        with caplog.at_level("WARNING", logger="worktrack.auth.engine"):
            assert not has_capability("intern", Capability.REPORTS)
            assert not has_capability(Role.HR_MANAGER, "payroll")
        assert "intern" in caplog.text
        assert "payroll" in caplog.text
        assert denials() == before + 2

    def test_engineer_has_none(self):
        assert capabilities_for(Role.ENGINEER) == []

    def test_can_access_project(self):
        assert can_access_project(Principal(id=4, role=Role.ENGINEER), 12)
        assert not can_access_project(None, 12)


def _ctx(role: Role | None, user_id: int = 5) -> RequestContext:
    return RequestContext(principal=Principal(id=user_id, role=role) if role else None)


class TestGuards:
    def test_anonymous_is_401_with_login_redirect(self):
        with pytest.raises(HTTPException) as exc:
            _ctx(None).require_feature(Feature.DASHBOARD)
        assert exc.value.status_code == 401
        assert exc.value.detail["notice"] == "unauthorized"
        assert exc.value.detail["redirect"] == "/login"

    def test_feature_denied_is_403(self):
        with pytest.raises(HTTPException) as exc:
            _ctx(Role.ENGINEER).require_feature(Feature.ATTENDANCE)
        assert exc.value.status_code == 403
        assert exc.value.detail["notice"] == "no_access_to_feature"
        assert exc.value.detail["redirect"] == "/"

    def test_feature_checked_before_permissions(self):
        with pytest.raises(HTTPException) as exc:
            _ctx(Role.ENGINEER).require_permissions(Feature.STAFF, Permission.VIEW)
        assert exc.value.detail["notice"] == "no_access_to_feature"

    def test_all_permissions_required(self):
        ctx = _ctx(Role.PROJECT_MANAGER)
        ctx.require_permissions(Feature.TASKS, Permission.VIEW, Permission.CREATE)
        with pytest.raises(HTTPException) as exc:
            ctx.require_permissions(Feature.TASKS, Permission.VIEW, Permission.DELETE)
        assert exc.value.status_code == 403
        assert exc.value.detail["notice"] == "insufficient_permissions"
        assert "tasks:delete" in exc.value.detail["message"]

    def test_owned_access_guard(self):
        hr = _ctx(Role.HR_MANAGER, user_id=7)
        hr.require_owned_access(OwnedResource(owner_id=20, owner_role=Role.ENGINEER), Feature.STAFF)
        with pytest.raises(HTTPException) as exc:
            hr.require_owned_access(OwnedResource(owner_id=1, owner_role=Role.ADMIN), Feature.STAFF)
        assert exc.value.status_code == 403

    def test_capability_guard(self):
        _ctx(Role.HR_MANAGER).require_capability(Capability.RESIDENCY_NOTIFICATIONS)
        with pytest.raises(HTTPException):
            _ctx(Role.ENGINEER).require_capability(Capability.RESIDENCY_NOTIFICATIONS)

    def test_actor(self):
        assert _ctx(Role.HR_MANAGER, user_id=7).actor == "hr_manager:7"
        assert _ctx(None).actor == "anonymous"
