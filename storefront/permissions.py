from enum import Enum
from typing import Iterable, NamedTuple, Optional

from .errors import ForbiddenError


class Permission(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"
    ITEMCREATE = "ITEMCREATE"
    ITEMUPDATE = "ITEMUPDATE"
    ITEMDELETE = "ITEMDELETE"
    PERMISSIONUPDATE = "PERMISSIONUPDATE"


class CallerContext(NamedTuple):
    """Identity resolved upstream from the session credential."""

    user_id: Optional[int] = None
    permissions: frozenset = frozenset()

    @property
    def authenticated(self) -> bool:
        return self.user_id is not None


ANONYMOUS = CallerContext()


def permission_set(values: Iterable) -> frozenset:
    """Normalize stored permission names into a set of Permission members."""
    return frozenset(Permission(v) for v in values)


def has_any_permission(holder, required: Iterable[Permission]) -> bool:
    return bool(permission_set(holder.permissions) & permission_set(required))


def require_any_permission(holder, required: Iterable[Permission]) -> None:
    """Raise ForbiddenError unless `holder.permissions` overlaps `required`.

    `holder` is anything carrying a ``permissions`` iterable: a User row or a
    CallerContext.
    """
    required = permission_set(required)
    if not has_any_permission(holder, required):
        needed = ", ".join(sorted(p.value for p in required))
        raise ForbiddenError(
            f"You do not have sufficient permissions: requires one of {needed}",
            details={"required": sorted(p.value for p in required)},
        )
