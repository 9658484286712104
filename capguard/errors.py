"""Exception hierarchy for capguard."""

import builtins as _builtins


class SecurityError(Exception):
    """Base class for all capguard errors."""


class InvalidArgumentError(SecurityError, _builtins.ValueError):
    """Raised when a permission name or identifier is blank."""


class MissingInputError(SecurityError, _builtins.TypeError):
    """Raised when a permission name or identifier is ``None``."""


class IdentityConflictError(SecurityError, _builtins.ValueError):
    """Raised when a user context is given another identity's permission."""


class SecurityViolation(SecurityError, _builtins.PermissionError):
    """Raised when a required permission is not granted.

    ``permissions`` holds the denied permission, or the full requested set
    when no permission of an *any* requirement was granted.
    """

    def __init__(self, message: str, permissions=frozenset()):
        super().__init__(message)
        self.permissions = frozenset(permissions)


class MissingContextError(SecurityError, _builtins.LookupError):
    """Raised when no security context is active."""


class TemplateError(SecurityError, _builtins.ValueError):
    """Raised when a permission template is malformed."""


class ConfigError(SecurityError, _builtins.ValueError):
    """Raised when a configuration file cannot be used."""
