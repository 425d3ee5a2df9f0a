"""Elm Symfony Bridge configuration.

Options come from three layers, merged key by key with the precedence
explicit > implicit > defaults:

- explicit: the ``elm-symfony-bridge`` block of ``package.json`` or options passed
  by a bundler integration
- implicit: values guessed from the project layout and the Symfony container
- defaults: :func:`default_options`

A second pass resolves the declared ``env_variables`` from ``.env`` and
``.env.local``.

Example usage::

    options = await resolve_config({"lang": "fr"}, project_root="path/to/project")
"""

from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from elm_symfony_bridge.config._constants import PACKAGE_JSON_KEY, TRUE_VALUES
from elm_symfony_bridge.config._env import load_env_variables, read_env_files
from elm_symfony_bridge.config._explicit import read_explicit
from elm_symfony_bridge.config._guess import guess_elm_version, guess_implicit, guess_url_prefix
from elm_symfony_bridge.config._options import (
    OPTION_ALIASES,
    OPTION_KEYS,
    BridgeOptions,
    default_options,
    resolve_options,
)

if TYPE_CHECKING:
    from elm_symfony_bridge.executor import SymfonyConsole

__all__ = (
    "OPTION_ALIASES",
    "OPTION_KEYS",
    "PACKAGE_JSON_KEY",
    "TRUE_VALUES",
    "BridgeOptions",
    "default_options",
    "guess_elm_version",
    "guess_implicit",
    "guess_url_prefix",
    "load_env_variables",
    "read_env_files",
    "read_explicit",
    "resolve_config",
    "resolve_options",
)


async def resolve_config(
    explicit: "Mapping[str, Any] | None" = None,
    *,
    project_root: "Path | str | None" = None,
    defaults: "Mapping[str, Any] | None" = None,
    console: "SymfonyConsole | None" = None,
    guess: bool = True,
) -> BridgeOptions:
    """Resolve every configuration layer and the env variables.

    Args:
        explicit: Explicit layer. Read from ``package.json`` when omitted.
        project_root: Project root, used when ``explicit`` does not set one.
        defaults: Default layer, see :func:`resolve_options`.
        console: Console used for implicit guesses. Built from the options when omitted.
        guess: Run the implicit guesses. Disabled, the implicit layer is empty.

    Returns:
        The resolved options.
    """
    from elm_symfony_bridge.executor import SymfonyConsole

    if project_root is not None:
        defaults = {**(defaults or {}), "project_root": Path(project_root)}
    if explicit is None:
        explicit = read_explicit(project_root if project_root is not None else Path.cwd())

    implicit: dict[str, Any] = {}
    if guess:
        preliminary = resolve_options(explicit, None, defaults)
        console = console or SymfonyConsole.from_options(preliminary)
        implicit = await guess_implicit(console, preliminary.project_root)

    return load_env_variables(resolve_options(explicit, implicit, defaults))
