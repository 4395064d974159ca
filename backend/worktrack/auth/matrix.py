"""
AccessMatrix — the immutable (role, feature) → permissions table.

A matrix is total: it is only constructed when every role has an entry for
every feature, so a forgotten row is caught when the process starts (or when
a snapshot is loaded) instead of quietly turning into a deny at request time.
Once built, a matrix is never changed. Reconfiguring means building a new one
and handing it to AuthorizationEngine.swap_matrix().

Snapshot file format (JSON), same shape as as_dict():

    {
      "admin":    {"dashboard": ["view", "create", ...], ...},
      "engineer": {"dashboard": [], "projects": ["view"], ...},
      ...
    }
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from worktrack.auth.errors import AccessMatrixError
from worktrack.auth.features import Feature, Permission
from worktrack.auth.roles import DEFAULT_ACCESS, Role

logger = logging.getLogger(__name__)

_EMPTY: frozenset[Permission] = frozenset()


class AccessMatrix:
    """Total, read-only mapping from every (Role, Feature) to a permission set."""

    __slots__ = ("_table",)

    def __init__(self, table: Mapping[Role, Mapping[Feature, Iterable[Permission]]]):
        missing_roles = [r.value for r in Role if r not in table]
        if missing_roles:
            raise AccessMatrixError(f"Access matrix has no entry for role(s): {', '.join(missing_roles)}")

        frozen: dict[Role, Mapping[Feature, frozenset[Permission]]] = {}
        for role in Role:
            row = table[role]
            missing = [f.value for f in Feature if f not in row]
            if missing:
                raise AccessMatrixError(
                    f"Access matrix row {role.value!r} is missing feature(s): {', '.join(missing)}"
                )
            extra = [str(k) for k in row if not isinstance(k, Feature)]
            if extra:
                raise AccessMatrixError(f"Access matrix row {role.value!r} has unknown feature(s): {', '.join(extra)}")

            cells: dict[Feature, frozenset[Permission]] = {}
            for feature in Feature:
                perms = frozenset(row[feature])
                bad = [str(p) for p in perms if not isinstance(p, Permission)]
                if bad:
                    raise AccessMatrixError(
                        f"Access matrix cell {role.value}/{feature.value} has unknown permission(s): {', '.join(bad)}"
                    )
                cells[feature] = perms
            frozen[role] = MappingProxyType(cells)

        extra_roles = [str(k) for k in table if not isinstance(k, Role)]
        if extra_roles:
            raise AccessMatrixError(f"Access matrix has unknown role(s): {', '.join(extra_roles)}")

        self._table: Mapping[Role, Mapping[Feature, frozenset[Permission]]] = MappingProxyType(frozen)

    # ── Lookups ──────────────────────────────────────────────────────────────

    def permissions_for(self, role: Role, feature: Feature) -> frozenset[Permission]:
        """Permission set for the pair; empty for anything not in the table."""
        row = self._table.get(role)
        if row is None:
            return _EMPTY
        return row.get(feature, _EMPTY)

    def row(self, role: Role) -> Mapping[Feature, frozenset[Permission]]:
        return self._table.get(role, MappingProxyType({}))

    def as_dict(self) -> dict[str, dict[str, list[str]]]:
        """Plain-string form, permissions in enum order."""
        return {
            role.value: {
                feature.value: [p.value for p in Permission if p in perms]
                for feature, perms in row.items()
            }
            for role, row in self._table.items()
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AccessMatrix):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __hash__(self):
        return hash(tuple(sorted(
            (r.value, f.value, p.value)
            for r, row in self._table.items()
            for f, perms in row.items()
            for p in perms
        )))

    # ── Construction ─────────────────────────────────────────────────────────

    @classmethod
    def default(cls) -> AccessMatrix:
        return cls(DEFAULT_ACCESS)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> AccessMatrix:
        """Build a matrix from role/feature/permission names (e.g. parsed JSON)."""
        if not isinstance(raw, Mapping):
            raise AccessMatrixError("Access matrix snapshot must be an object keyed by role")

        table: dict[Role, dict[Feature, frozenset[Permission]]] = {}
        for role_name, row in raw.items():
            role = _lookup(Role, role_name, "role")
            if not isinstance(row, Mapping):
                raise AccessMatrixError(f"Access matrix row {role_name!r} must be an object keyed by feature")
            cells: dict[Feature, frozenset[Permission]] = {}
            for feature_name, perms in row.items():
                feature = _lookup(Feature, feature_name, "feature")
                if isinstance(perms, str) or not isinstance(perms, Iterable):
                    raise AccessMatrixError(
                        f"Access matrix cell {role_name}/{feature_name} must be a list of permissions"
                    )
                cells[feature] = frozenset(_lookup(Permission, p, "permission") for p in perms)
            table[role] = cells
        return cls(table)


def _lookup(enum_cls, value, kind: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise AccessMatrixError(f"Access matrix names unknown {kind} {value!r}") from None


def load_matrix_file(path: str | Path) -> AccessMatrix:
    """Read and validate a JSON matrix snapshot. Raises AccessMatrixError."""
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise AccessMatrixError(f"Access matrix snapshot not found: {path}") from None
    except json.JSONDecodeError as exc:
        raise AccessMatrixError(f"Access matrix snapshot {path} is not valid JSON: {exc}") from exc

    matrix = AccessMatrix.from_mapping(raw)
    logger.info("Loaded access matrix snapshot from %s", path)
    return matrix
