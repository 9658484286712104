"""Ambient security context and permission decorators.

The active context is held in a :class:`contextvars.ContextVar`, so it is
scoped per thread and per asyncio task::

    @requires(Permission("cache:set"))
    def put(key, data): ...

    with use_context(UserContext.create("guest", "staff", ...)):
        put("k", b"v")

    put("k", b"v", security=ROOT)   # explicit context wins
"""

from __future__ import annotations

import contextvars
import functools
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, TypeVar

from .context import SecurityContext
from .errors import MissingContextError
from .permissions import Permission, PermissionLike, permission_set

F = TypeVar("F", bound=Callable[..., Any])

_current: contextvars.ContextVar[Optional[SecurityContext]] = contextvars.ContextVar(
    "capguard_security_context", default=None
)


def current_context() -> SecurityContext:
    """Return the active context or raise :class:`MissingContextError`."""
    ctx = _current.get()
    if ctx is None:
        raise MissingContextError("no security context is active")
    return ctx


@contextmanager
def use_context(ctx: SecurityContext) -> Iterator[SecurityContext]:
    """Make *ctx* the active context for the duration of the block."""
    if not isinstance(ctx, SecurityContext):
        raise TypeError(f"expected SecurityContext, got {ctx!r}")
    token = _current.set(ctx)
    try:
        yield ctx
    finally:
        _current.reset(token)


def _resolve(kwargs: dict) -> SecurityContext:
    ctx = kwargs.pop("security", None)
    if ctx is None:
        return current_context()
    if not isinstance(ctx, SecurityContext):
        raise TypeError(f"expected SecurityContext, got {ctx!r}")
    return ctx


def _decorate(check: Callable[[SecurityContext], None]) -> Callable[[F], F]:
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            check(_resolve(kwargs))
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def requires(perm: Permission) -> Callable[[F], F]:
    """Decorate a function so it runs only if *perm* is granted."""
    if not isinstance(perm, Permission):
        raise TypeError(f"expected Permission, got {perm!r}")
    return _decorate(lambda ctx: ctx.check(perm))


def requires_any(*perms: PermissionLike) -> Callable[[F], F]:
    """Decorate a function so it runs only if any of *perms* is granted."""
    required = tuple(permission_set(*perms))
    return _decorate(lambda ctx: ctx.check_any(required))


def requires_all(*perms: PermissionLike) -> Callable[[F], F]:
    """Decorate a function so it runs only if all of *perms* are granted."""
    required = tuple(permission_set(*perms))
    return _decorate(lambda ctx: ctx.check_all(required))


__all__ = [
    "current_context",
    "use_context",
    "requires",
    "requires_any",
    "requires_all",
]
