"""Explicit configuration read from the project's ``package.json``."""

import logging
from pathlib import Path
from typing import Any, cast

from litestar.exceptions import SerializationException
from litestar.serialization import decode_json

from elm_symfony_bridge.config._constants import PACKAGE_JSON_KEY

__all__ = ("read_explicit",)

logger = logging.getLogger("elm_symfony_bridge")


def read_explicit(project_root: "Path | str" = ".") -> "dict[str, Any]":
    """Read the ``elm-symfony-bridge`` block of ``package.json``.

    An unreadable or malformed file is reported and treated as an empty layer, so
    resolution always proceeds.

    Returns:
        The explicit configuration layer.
    """
    package_json = Path(project_root) / "package.json"
    if not package_json.exists():
        logger.debug("No package.json in %s, no explicit configuration", project_root)
        return {}

    try:
        payload = decode_json(package_json.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, SerializationException) as e:
        logger.warning(
            "[elm-symfony-bridge] Failed to read %s, unable to load explicit configuration: %s", package_json, e
        )
        return {}

    block = payload.get(PACKAGE_JSON_KEY) if isinstance(payload, dict) else None
    if block is None:
        return {}
    if not isinstance(block, dict):
        logger.warning("[elm-symfony-bridge] %r in %s must be an object, ignoring it", PACKAGE_JSON_KEY, package_json)
        return {}
    return cast("dict[str, Any]", block)
