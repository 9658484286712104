"""Identity permission templates.

A template is a string holding exactly one ``{}`` placeholder. Rendering
substitutes an identifier for the placeholder; parsing inverts it by matching
the literal text around the placeholder exactly and capturing what sits in its
place.

Templates are resolved once per process from, in increasing precedence, the
built-in defaults, an optional YAML file and the environment::

    # capguard.yml
    capguard:
      user_permission_template: "user:{}"
      group_permission_template: "group:{}"

A template without a single placeholder is ignored with a warning and the
default is used instead.
"""

from __future__ import annotations

import logging
import os
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

import yaml

from .errors import ConfigError, InvalidArgumentError, MissingInputError, TemplateError

logger = logging.getLogger(__name__)

PLACEHOLDER = "{}"

DEFAULT_USER_TEMPLATE = "<[[user=({})]]>"
DEFAULT_GROUP_TEMPLATE = "<[[group=({})]]>"

CONFIG_ENV = "CAPGUARD_CONFIG"
USER_TEMPLATE_ENV = "CAPGUARD_USER_PERMISSION_TEMPLATE"
GROUP_TEMPLATE_ENV = "CAPGUARD_GROUP_PERMISSION_TEMPLATE"

_USER_KEY = "user_permission_template"
_GROUP_KEY = "group_permission_template"


@dataclass(frozen=True)
class PermissionTemplate:
    """Reversible mapping between identifiers and permission names."""

    template: str
    _regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.template, str):
            raise TemplateError(f"template must be a string: {self.template!r}")
        template = self.template.strip()
        if template.count(PLACEHOLDER) != 1:
            raise TemplateError(
                f"template must contain exactly one {PLACEHOLDER!r}: {template!r}"
            )
        prefix, suffix = template.split(PLACEHOLDER)
        object.__setattr__(self, "template", template)
        pattern = re.escape(prefix) + "(.+?)" + re.escape(suffix)
        object.__setattr__(self, "_regex", re.compile(pattern, re.DOTALL))

    def render(self, value: str) -> str:
        """Return the permission name embedding *value*."""
        if value is None:
            raise MissingInputError("identifier must not be None")
        if not isinstance(value, str):
            raise TypeError(f"identifier must be a string: {value!r}")
        value = value.strip()
        if not value:
            raise InvalidArgumentError("identifier must not be blank")
        return self.template.replace(PLACEHOLDER, value)

    def parse(self, name: str) -> Optional[str]:
        """Return the identifier embedded in *name*, or ``None``."""
        if not isinstance(name, str):
            return None
        match = self._regex.fullmatch(name)
        return match.group(1) if match else None


@dataclass(frozen=True)
class TemplateConfig:
    """User and group templates used by the identity permission factories."""

    user: PermissionTemplate = field(
        default_factory=lambda: PermissionTemplate(DEFAULT_USER_TEMPLATE)
    )
    group: PermissionTemplate = field(
        default_factory=lambda: PermissionTemplate(DEFAULT_GROUP_TEMPLATE)
    )

    @classmethod
    def from_strings(
        cls, user: Optional[str] = None, group: Optional[str] = None
    ) -> "TemplateConfig":
        """Build a config, falling back to the default for bad templates."""
        return cls(
            user=_template_or_default(user, DEFAULT_USER_TEMPLATE, "user"),
            group=_template_or_default(group, DEFAULT_GROUP_TEMPLATE, "group"),
        )


def _template_or_default(value: object, default: str, kind: str) -> PermissionTemplate:
    if value is None:
        return PermissionTemplate(default)
    try:
        return PermissionTemplate(value)  # type: ignore[arg-type]
    except TemplateError as exc:
        logger.warning("ignoring %s permission template: %s", kind, exc)
        return PermissionTemplate(default)


def _read_file(path: Path) -> dict:
    """Return template settings found in the YAML file at *path*."""
    if not path.exists():
        logger.warning("config file not found: %s", path)
        return {}

    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from None
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    section = data.get("capguard", data)
    if not isinstance(section, dict):
        raise ConfigError(f'"capguard" must be a mapping: {path}')

    logger.debug("loaded permission templates from %s", path)
    return {k: section[k] for k in (_USER_KEY, _GROUP_KEY) if k in section}


def load_config(
    path: str | Path | None = None, environ: Optional[Mapping[str, str]] = None
) -> TemplateConfig:
    """Resolve templates from defaults, a YAML file and the environment.

    *path* defaults to ``$CAPGUARD_CONFIG``; *environ* defaults to
    ``os.environ``.
    """

    env = os.environ if environ is None else environ
    settings: dict = {}

    if path is None:
        path = env.get(CONFIG_ENV) or None
    if path is not None:
        settings.update(_read_file(Path(path)))

    for key, var in ((_USER_KEY, USER_TEMPLATE_ENV), (_GROUP_KEY, GROUP_TEMPLATE_ENV)):
        if var in env:
            settings[key] = env[var]

    return TemplateConfig.from_strings(
        user=settings.get(_USER_KEY), group=settings.get(_GROUP_KEY)
    )


_config: Optional[TemplateConfig] = None
_config_lock = threading.Lock()


def get_config() -> TemplateConfig:
    """Return the process-wide configuration, resolving it on first use."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = load_config()
                logger.debug(
                    "permission templates: user=%r group=%r",
                    _config.user.template,
                    _config.group.template,
                )
    return _config


__all__ = [
    "PLACEHOLDER",
    "DEFAULT_USER_TEMPLATE",
    "DEFAULT_GROUP_TEMPLATE",
    "PermissionTemplate",
    "TemplateConfig",
    "load_config",
    "get_config",
]
