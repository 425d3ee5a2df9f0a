"""Implicit configuration guessed from the project layout and the Symfony container.

Every guess is independent: one that fails degrades to ``None`` so the default
layer supplies the value, and the others are still used.
"""

import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import anyio

from elm_symfony_bridge.exceptions import ElmBridgeError

if TYPE_CHECKING:
    from elm_symfony_bridge.executor import SymfonyConsole

__all__ = ("guess_elm_version", "guess_implicit", "guess_url_prefix")

logger = logging.getLogger("elm_symfony_bridge")

_FRONT_CONTROLLERS = ("public/index.php", "web/app_dev.php")


def guess_elm_version(project_root: "Path | str") -> "str | None":
    """Detect the Elm version from the package file present in the project.

    Returns:
        ``"0.19"`` for ``elm.json``, ``"0.18"`` for ``elm-package.json``, else None.
    """
    root = Path(project_root)
    if (root / "elm.json").exists():
        return "0.19"
    if (root / "elm-package.json").exists():
        return "0.18"
    return None


def guess_url_prefix(project_root: "Path | str") -> "str | None":
    """Detect the front controller the dev server is reached through.

    Returns:
        ``"/<front controller file>"`` for the first existing controller, else None.
    """
    root = Path(project_root)
    for controller in _FRONT_CONTROLLERS:
        path = root / controller
        if path.exists():
            return f"/{path.name}"
    return None


async def guess_implicit(console: "SymfonyConsole", project_root: "Path | str | None" = None) -> "dict[str, Any]":
    """Guess the implicit configuration layer.

    Args:
        console: Console used for container queries.
        project_root: Project root. Defaults to the console's project root.

    Returns:
        A layer with ``elm_version``, ``enable_translations``, ``lang`` and
        ``url_prefix``. Each key is ``None`` when its guess failed.
    """
    root = Path(project_root) if project_root is not None else console.project_root

    async def _elm_version() -> "str | None":
        return guess_elm_version(root)

    async def _url_prefix() -> "str | None":
        return guess_url_prefix(root)

    async def _lang() -> Any:
        return await console.query_config("kernel.default_locale")

    guesses: dict[str, Callable[[], Awaitable[Any]]] = {
        "elm_version": _elm_version,
        "enable_translations": console.has_translation_bundle,
        "lang": _lang,
        "url_prefix": _url_prefix,
    }
    layer: dict[str, Any] = {}

    async def _guess(key: str, guess: "Callable[[], Awaitable[Any]]") -> None:
        try:
            layer[key] = await guess()
        except (ElmBridgeError, OSError) as e:
            logger.debug("Unable to guess %s: %s", key, e)
            layer[key] = None

    async with anyio.create_task_group() as tg:
        for key, guess in guesses.items():
            tg.start_soon(_guess, key, guess)
    return layer
