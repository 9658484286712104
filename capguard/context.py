"""Security contexts.

A :class:`SecurityContext` decides whether a permission is granted and runs
restricted operations only when it is. Subclasses implement :meth:`test`;
the enforcement helpers are shared.

Example::

    from capguard import Permission, UserContext

    read = Permission("cache:get")
    write = Permission("cache:set")

    security = UserContext.create("guest", "staff", read)
    security.enforce(read, cache.get, "key")          # runs
    security.enforce(write, cache.set, "key", data)   # raises SecurityViolation
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Callable, FrozenSet, Iterator, Optional, TypeVar

from .errors import (
    IdentityConflictError,
    InvalidArgumentError,
    MissingInputError,
    SecurityViolation,
)
from .permissions import (
    Permission,
    PermissionLike,
    create_group,
    create_user,
    match_group,
    match_user,
    ordered_permissions,
    permission_set,
)
from .templates import TemplateConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _denied(perm: Permission) -> SecurityViolation:
    return SecurityViolation(f"permission not granted: {perm}", {perm})


def _none_denied(perms: tuple[Permission, ...]) -> SecurityViolation:
    names = ", ".join(str(p) for p in perms)
    return SecurityViolation(f"no permission granted: {names}", perms)


class SecurityContext(ABC):
    """Context in which permissions are granted."""

    @abstractmethod
    def test(self, perm: Permission) -> bool:
        """Return ``True`` if *perm* is granted."""

    def test_any(self, perms: PermissionLike) -> bool:
        """Return ``True`` if *perms* is empty or any of it is granted."""
        perms = ordered_permissions(perms)
        return not perms or any(self.test(p) for p in perms)

    def test_all(self, perms: PermissionLike) -> bool:
        """Return ``True`` if every permission in *perms* is granted."""
        return all(self.test(p) for p in ordered_permissions(perms))

    def check(self, perm: Permission) -> None:
        """Raise :class:`SecurityViolation` unless *perm* is granted."""
        if not self.test(perm):
            raise _denied(perm)

    def check_any(self, perms: PermissionLike) -> None:
        """Raise unless *perms* is empty or any of it is granted."""
        perms = ordered_permissions(perms)
        if perms and not any(self.test(p) for p in perms):
            raise _none_denied(perms)

    def check_all(self, perms: PermissionLike) -> None:
        """Raise naming the first permission in *perms* that is not granted."""
        for perm in ordered_permissions(perms):
            if not self.test(perm):
                raise _denied(perm)

    def enforce(
        self, perm: Permission, op: Callable[..., T], /, *args: Any, **kwargs: Any
    ) -> T:
        """Call ``op(*args, **kwargs)`` if *perm* is granted.

        Raises :class:`SecurityViolation` without calling *op* otherwise.
        Exceptions raised by *op* propagate unchanged.
        """
        self.check(perm)
        return op(*args, **kwargs)

    def enforce_any(
        self, perms: PermissionLike, op: Callable[..., T], /, *args: Any, **kwargs: Any
    ) -> T:
        """Call *op* if any of *perms* is granted.

        *perms* is a permission or an iterable of them. An empty collection
        authorizes the operation.
        """
        self.check_any(perms)
        return op(*args, **kwargs)

    def enforce_all(
        self, perms: PermissionLike, op: Callable[..., T], /, *args: Any, **kwargs: Any
    ) -> T:
        """Call *op* if all of *perms* are granted.

        An empty collection authorizes the operation. The violation names the
        first denied permission in the order supplied.
        """
        self.check_all(perms)
        return op(*args, **kwargs)

    @contextmanager
    def guard(self, perm: Permission) -> Iterator["SecurityContext"]:
        """Run a ``with`` block only if *perm* is granted."""
        self.check(perm)
        yield self

    @contextmanager
    def guard_any(self, perms: PermissionLike) -> Iterator["SecurityContext"]:
        self.check_any(perms)
        yield self

    @contextmanager
    def guard_all(self, perms: PermissionLike) -> Iterator["SecurityContext"]:
        self.check_all(perms)
        yield self


class RootContext(SecurityContext):
    """Context in which every permission is granted.

    There is a single instance, :data:`ROOT`.
    """

    _instance: Optional["RootContext"] = None

    def __new__(cls) -> "RootContext":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def test(self, perm: Permission) -> bool:
        return True

    def __repr__(self) -> str:
        return "RootContext"

    def __reduce__(self):
        return (RootContext, ())


ROOT = RootContext()


def _identity(value: Optional[str], kind: str) -> str:
    if value is None:
        raise MissingInputError(f"{kind} must not be None")
    if not isinstance(value, str):
        raise TypeError(f"{kind} must be a string: {value!r}")
    value = value.strip()
    if not value:
        raise InvalidArgumentError(f"{kind} must not be blank")
    return value


@dataclass(frozen=True)
class UserContext(SecurityContext):
    """Context granting a set of permissions to a user.

    ``permissions`` always includes the user's own user permission and group
    permission. Supplying the identity permission of a different user or
    group raises :class:`IdentityConflictError`.

    Instances are immutable; :meth:`grant`, :meth:`revoke` and
    :meth:`with_permissions` return new contexts with the same identity.
    The identity permissions are restored by every derived context, so
    they cannot be revoked.
    """

    user_id: str
    group_id: str
    permissions: FrozenSet[Permission] = frozenset()
    config: Optional[TemplateConfig] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        user_id = _identity(self.user_id, "user_id")
        group_id = _identity(self.group_id, "group_id")
        perms = permission_set(self.permissions)
        own = {
            create_user(user_id, self.config),
            create_group(group_id, self.config),
        }

        for perm in perms - own:
            uid = match_user(perm, self.config)
            if uid is not None and uid != user_id:
                raise IdentityConflictError(
                    f"user permission {perm} conflicts with user_id {user_id!r}"
                )
            gid = match_group(perm, self.config)
            if gid is not None and gid != group_id:
                raise IdentityConflictError(
                    f"group permission {perm} conflicts with group_id {group_id!r}"
                )

        perms = perms | own
        object.__setattr__(self, "user_id", user_id)
        object.__setattr__(self, "group_id", group_id)
        object.__setattr__(self, "permissions", perms)
        logger.debug(
            "user context %s/%s with %d permission(s)", user_id, group_id, len(perms)
        )

    @classmethod
    def create(
        cls,
        user_id: str,
        group_id: str,
        *perms: PermissionLike,
        config: Optional[TemplateConfig] = None,
    ) -> "UserContext":
        """Create a context for *user_id* in *group_id* granting *perms*."""
        return cls(user_id, group_id, permission_set(*perms), config)

    def test(self, perm: Permission) -> bool:
        return perm in self.permissions

    def with_permissions(self, *perms: PermissionLike) -> "UserContext":
        """Return a context whose permissions are replaced by *perms*."""
        return replace(self, permissions=permission_set(*perms))

    def grant(self, *perms: PermissionLike) -> "UserContext":
        """Return a context with *perms* added."""
        return self.with_permissions(self.permissions | permission_set(*perms))

    def revoke(self, *perms: PermissionLike) -> "UserContext":
        """Return a context with *perms* removed, except identity permissions."""
        return self.with_permissions(self.permissions - permission_set(*perms))


__all__ = ["SecurityContext", "RootContext", "ROOT", "UserContext"]
