"""capguard package init.

Permissions and the security contexts that enforce them.
"""

from .context import ROOT, RootContext, SecurityContext, UserContext
from .decorators import (
    current_context,
    requires,
    requires_all,
    requires_any,
    use_context,
)
from .errors import (
    ConfigError,
    IdentityConflictError,
    InvalidArgumentError,
    MissingContextError,
    MissingInputError,
    SecurityError,
    SecurityViolation,
    TemplateError,
)
from .logging import setup_structured_logging  # noqa: F401
from .permissions import (
    Permission,
    create_group,
    create_group_set,
    create_set,
    create_user,
    create_user_set,
    decompose,
    match_group,
    match_user,
    permission_set,
)
from .templates import PermissionTemplate, TemplateConfig, get_config, load_config

__all__ = [
    "Permission",
    "create_set",
    "permission_set",
    "decompose",
    "create_user",
    "match_user",
    "create_group",
    "match_group",
    "create_user_set",
    "create_group_set",
    "PermissionTemplate",
    "TemplateConfig",
    "load_config",
    "get_config",
    "SecurityContext",
    "RootContext",
    "ROOT",
    "UserContext",
    "current_context",
    "use_context",
    "requires",
    "requires_any",
    "requires_all",
    "SecurityError",
    "InvalidArgumentError",
    "MissingInputError",
    "IdentityConflictError",
    "SecurityViolation",
    "MissingContextError",
    "TemplateError",
    "ConfigError",
    "setup_structured_logging",
]
