"""Authorization error types and boundary parsing for role/feature/permission names."""

from enum import Enum
from typing import TypeVar

from worktrack.auth.features import Feature, Permission
from worktrack.auth.roles import Role

E = TypeVar("E", bound=Enum)


class AccessMatrixError(ValueError):
    """The access matrix is incomplete or names something outside the enums.

    Raised only while a matrix is being built or loaded, never while a
    decision is being made.
    """


class InvalidAccessQuery(ValueError):
    """A role, feature or permission name from outside the enumerations."""


def _parse(enum_cls: type[E], value: str | E, kind: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidAccessQuery(f"Unknown {kind} {value!r}. Must be one of: {allowed}") from None


def parse_role(value: str | Role) -> Role:
    return _parse(Role, value, "role")


def parse_feature(value: str | Feature) -> Feature:
    return _parse(Feature, value, "feature")


def parse_permission(value: str | Permission) -> Permission:
    return _parse(Permission, value, "permission")
