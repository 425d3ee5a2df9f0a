"""Environment file loading for the ``env_variables`` option."""

import logging
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import dotenv_values

if TYPE_CHECKING:
    from elm_symfony_bridge.config._options import BridgeOptions

__all__ = ("load_env_variables", "read_env_files")

logger = logging.getLogger("elm_symfony_bridge")


def read_env_files(project_root: "Path | str") -> "dict[str, str | None]":
    """Read ``.env`` and ``.env.local`` from the project root.

    Keys defined in ``.env.local`` override the ones from ``.env``. Missing files
    contribute nothing.

    Returns:
        The merged variables.
    """
    root = Path(project_root)
    base = dotenv_values(root / ".env")
    local = dotenv_values(root / ".env.local")
    return {**base, **{key: value for key, value in local.items() if value is not None}}


def load_env_variables(options: "BridgeOptions") -> "BridgeOptions":
    """Resolve declared env variables to their values.

    Each entry of ``options.env_variables`` maps a logical name to the name of a
    variable in the environment files. Variables that are missing or empty resolve
    to ``None``.

    Returns:
        A new options record with resolved ``env_variables``.
    """
    if not options.env_variables:
        return options
    env_vars = read_env_files(options.project_root)
    resolved: dict[str, str | None] = {}
    for name, source in options.env_variables.items():
        resolved[name] = (env_vars.get(source) or None) if source is not None else None
        if resolved[name] is None:
            logger.debug("Env variable %r (%s) is not defined", name, source)
    return replace(options, env_variables=resolved)
