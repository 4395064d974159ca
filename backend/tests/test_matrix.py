"""Tests for AccessMatrix construction, validation and snapshot loading."""

import json

import pytest

from worktrack.auth.errors import AccessMatrixError, InvalidAccessQuery, parse_feature, parse_permission, parse_role
from worktrack.auth.features import Feature, Permission
from worktrack.auth.matrix import AccessMatrix, load_matrix_file
from worktrack.auth.roles import DEFAULT_ACCESS, Role


def _default_table() -> dict:
    return {r: dict(row) for r, row in DEFAULT_ACCESS.items()}


class TestExhaustiveness:
    def test_default_matrix_is_total(self):
        matrix = AccessMatrix.default()
        for role in Role:
            assert set(matrix.row(role)) == set(Feature)

    def test_missing_role_rejected(self):
        table = _default_table()
        del table[Role.ADMIN_STAFF]
        with pytest.raises(AccessMatrixError, match="admin_staff"):
            AccessMatrix(table)

    def test_missing_feature_rejected(self):
        table = _default_table()
        del table[Role.ENGINEER][Feature.RESIDENCY]
        with pytest.raises(AccessMatrixError, match="engineer.*residency"):
            AccessMatrix(table)

    def test_empty_cell_is_not_missing(self):
        matrix = AccessMatrix.default()
        assert matrix.permissions_for(Role.ENGINEER, Feature.ATTENDANCE) == frozenset()

    def test_unknown_lookup_is_empty(self):
        matrix = AccessMatrix.default()
        assert matrix.permissions_for("nobody", Feature.STAFF) == frozenset()
        assert matrix.permissions_for(Role.HR_MANAGER, "payroll") == frozenset()


class TestImmutability:
    def test_rows_cannot_be_assigned(self):
        matrix = AccessMatrix.default()
        with pytest.raises(TypeError):
            matrix.row(Role.ENGINEER)[Feature.STAFF] = frozenset({Permission.VIEW})

    def test_source_table_changes_do_not_leak(self):
        table = _default_table()
        matrix = AccessMatrix(table)
        table[Role.ENGINEER][Feature.STAFF] = frozenset({Permission.VIEW})
        assert matrix.permissions_for(Role.ENGINEER, Feature.STAFF) == frozenset()


class TestFromMapping:
    def test_rebuilds_default_from_plain_strings(self):
        raw = AccessMatrix.default().as_dict()
        assert AccessMatrix.from_mapping(raw) == AccessMatrix.default()

    def test_as_dict_orders_permissions(self):
        row = AccessMatrix.default().as_dict()["hr_manager"]
        assert row["staff"] == ["view", "create", "edit", "manage"]
        assert row["settings"] == []

    @pytest.mark.parametrize("mutate, fragment", [
        (lambda raw: raw.update({"intern": raw["engineer"]}), "role 'intern'"),
        (lambda raw: raw["engineer"].update({"payroll": []}), "feature 'payroll'"),
        (lambda raw: raw["engineer"].update({"tasks": ["view", "approve"]}), "permission 'approve'"),
        (lambda raw: raw["engineer"].update({"tasks": "view"}), "list of permissions"),
        (lambda raw: raw.update({"engineer": ["view"]}), "object keyed by feature"),
    ])
    def test_rejects_unknown_names(self, mutate, fragment):
        raw = AccessMatrix.default().as_dict()
        mutate(raw)
        with pytest.raises(AccessMatrixError, match=fragment):
            AccessMatrix.from_mapping(raw)

    def test_rejects_partial_snapshot(self):
        raw = AccessMatrix.default().as_dict()
        del raw["general_manager"]["tasks"]
        with pytest.raises(AccessMatrixError, match="general_manager"):
            AccessMatrix.from_mapping(raw)

    def test_rejects_non_object(self):
        with pytest.raises(AccessMatrixError):
            AccessMatrix.from_mapping(["admin"])


class TestLoadMatrixFile:
    def test_loads_snapshot(self, tmp_path):
        raw = AccessMatrix.default().as_dict()
        raw["engineer"]["reports"] = ["view"]
        path = tmp_path / "matrix.json"
        path.write_text(json.dumps(raw))

        matrix = load_matrix_file(path)
        assert matrix.permissions_for(Role.ENGINEER, Feature.REPORTS) == {Permission.VIEW}

    def test_missing_file(self, tmp_path):
        with pytest.raises(AccessMatrixError, match="not found"):
            load_matrix_file(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "matrix.json"
        path.write_text("{not json")
        with pytest.raises(AccessMatrixError, match="not valid JSON"):
            load_matrix_file(path)


class TestBoundaryParsing:
    def test_parse_valid_names(self):
        assert parse_role("hr_manager") is Role.HR_MANAGER
        assert parse_feature(Feature.TASKS) is Feature.TASKS
        assert parse_permission("manage") is Permission.MANAGE

    def test_parse_rejects_unknown(self):
        with pytest.raises(InvalidAccessQuery, match="Unknown role 'root'"):
            parse_role("root")
        with pytest.raises(InvalidAccessQuery):
            parse_feature("payroll")
        with pytest.raises(ValueError):
            parse_permission("approve")
