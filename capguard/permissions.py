"""Named permissions.

A :class:`Permission` is an immutable token identified by its name alone.
User and group permissions are ordinary permissions whose names follow the
configured templates (see :mod:`capguard.templates`); the ``create_*``
functions build them and the ``match_*`` functions recover the identifier.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Iterator, Optional, Union

from .errors import InvalidArgumentError, MissingInputError
from .templates import TemplateConfig, get_config


@dataclass(frozen=True)
class Permission:
    """Immutable capability identified by its trimmed name."""

    name: str

    def __post_init__(self) -> None:
        if self.name is None:
            raise MissingInputError("permission name must not be None")
        if not isinstance(self.name, str):
            raise TypeError(f"permission name must be a string: {self.name!r}")
        name = self.name.strip()
        if not name:
            raise InvalidArgumentError("permission name must not be blank")
        object.__setattr__(self, "name", name)

    def __str__(self) -> str:
        return self.name

    @classmethod
    def create(cls, name: str) -> "Permission":
        return cls(name)

    @classmethod
    def create_set(cls, *names: Union[str, Iterable[str]]) -> FrozenSet["Permission"]:
        return create_set(*names)


PermissionLike = Union[Permission, Iterable[Permission]]


def _flatten(items: tuple, atom: type) -> Iterator:
    # ``None`` is passed through so the factory reports it.
    for item in items:
        if item is None or isinstance(item, (atom, str)):
            yield item
        else:
            yield from item


def create_set(*names: Union[str, Iterable[str]]) -> FrozenSet[Permission]:
    """Return permissions for *names*, each a name or iterable of names."""
    return frozenset(Permission(name) for name in _flatten(names, str))


def permission_set(*items: PermissionLike) -> FrozenSet[Permission]:
    """Collect permissions and iterables of permissions into one set."""
    perms = frozenset(_flatten(items, Permission))
    for perm in perms:
        if not isinstance(perm, Permission):
            raise TypeError(f"expected Permission, got {perm!r}")
    return perms


def ordered_permissions(items: PermissionLike) -> tuple[Permission, ...]:
    """Deduplicate *items* keeping the caller's order."""
    if isinstance(items, Permission):
        return (items,)
    perms = tuple(dict.fromkeys(items))
    for perm in perms:
        if not isinstance(perm, Permission):
            raise TypeError(f"expected Permission, got {perm!r}")
    return perms


def decompose(perm: Optional[Permission]) -> Optional[str]:
    """Return the name of *perm*, or ``None`` when there is no permission."""
    if perm is None:
        return None
    return perm.name


def create_user(user_id: str, config: Optional[TemplateConfig] = None) -> Permission:
    """Return the permission restricting an operation to *user_id*.

    For example, write access to a resource can be limited to its owner.
    """
    config = config or get_config()
    return Permission(config.user.render(user_id))


def match_user(perm: Permission, config: Optional[TemplateConfig] = None) -> Optional[str]:
    """Return the user identifier encoded in *perm*, or ``None``."""
    if not isinstance(perm, Permission):
        return None
    config = config or get_config()
    return config.user.parse(perm.name)


def create_group(group_id: str, config: Optional[TemplateConfig] = None) -> Permission:
    """Return the permission restricting an operation to *group_id*.

    For example, read access to a resource can be limited to its owner's
    group.
    """
    config = config or get_config()
    return Permission(config.group.render(group_id))


def match_group(perm: Permission, config: Optional[TemplateConfig] = None) -> Optional[str]:
    """Return the group identifier encoded in *perm*, or ``None``."""
    if not isinstance(perm, Permission):
        return None
    config = config or get_config()
    return config.group.parse(perm.name)


def create_user_set(
    *user_ids: Union[str, Iterable[str]], config: Optional[TemplateConfig] = None
) -> FrozenSet[Permission]:
    return frozenset(create_user(uid, config) for uid in _flatten(user_ids, str))


def create_group_set(
    *group_ids: Union[str, Iterable[str]], config: Optional[TemplateConfig] = None
) -> FrozenSet[Permission]:
    return frozenset(create_group(gid, config) for gid in _flatten(group_ids, str))


__all__ = [
    "Permission",
    "create_set",
    "permission_set",
    "ordered_permissions",
    "decompose",
    "create_user",
    "match_user",
    "create_group",
    "match_group",
    "create_user_set",
    "create_group_set",
]
