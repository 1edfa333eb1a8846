"""Import policy defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .env import optional_env_list
from .errors import ConfigurationError

DEFAULT_PROTECTED_SETTINGS: tuple[str, ...] = (
    "active_theme",
    "db_hash",
    "password",
    "is_private",
    "active_apps",
    "installed_apps",
    "members_signin_emails",
)
DEFAULT_ROLE_NAME = "Author"
KNOWN_ROLE_NAMES = frozenset({"Administrator", "Editor", "Author", "Contributor"})


@dataclass(frozen=True, slots=True)
class ImportConfig:
    """Policy knobs for one import run.

    ``protected_settings`` lists destination setting keys that an import may never
    overwrite. ``default_role`` is assigned to new users without a role record.
    """

    protected_settings: frozenset[str] = field(
        default_factory=lambda: frozenset(DEFAULT_PROTECTED_SETTINGS)
    )
    default_role: str = DEFAULT_ROLE_NAME

    def is_protected(self, key: str) -> bool:
        return key in self.protected_settings


def get_import_config() -> ImportConfig:
    protected = optional_env_list("BLOGIMPORT_PROTECTED_SETTINGS")
    default_role = os.getenv("BLOGIMPORT_DEFAULT_ROLE") or DEFAULT_ROLE_NAME
    if default_role not in KNOWN_ROLE_NAMES:
        raise ConfigurationError(
            f"Invalid default role {default_role!r}; expected one of "
            f"{', '.join(sorted(KNOWN_ROLE_NAMES))}"
        )
    if protected is None:
        return ImportConfig(default_role=default_role)
    return ImportConfig(protected_settings=frozenset(protected), default_role=default_role)
