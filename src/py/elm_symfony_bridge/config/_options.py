"""Resolved bridge options and the layered merge that builds them."""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from types import MappingProxyType
from typing import Any

from elm_symfony_bridge.config._constants import (
    DEFAULT_CONSOLE_PATH,
    DEFAULT_ELM_ROOT,
    DEFAULT_OUTPUT_FOLDER,
    DEFAULT_RELOAD_TRIGGERS,
    DEFAULT_WATCH_EXTENSIONS,
    DEFAULT_WATCH_FOLDERS,
    DEFAULT_WORKER_COMMAND,
    ELM_VERSIONS,
    TRUE_VALUES,
)

__all__ = ("OPTION_ALIASES", "OPTION_KEYS", "BridgeOptions", "default_options", "resolve_options")

logger = logging.getLogger("elm_symfony_bridge")

OPTION_ALIASES: "Mapping[str, str]" = MappingProxyType(
    {
        "projectRoot": "project_root",
        "elmRoot": "elm_root",
        "outputFolder": "output_folder",
        "elmVersion": "elm_version",
        "enableRouting": "enable_routing",
        "enableTranslations": "enable_translations",
        "urlPrefix": "url_prefix",
        "watchFolders": "watch_folders",
        "watchExtensions": "watch_extensions",
        "envVariables": "env_variables",
        "consolePath": "console_path",
        "workerCommand": "worker_command",
        "reloadTriggers": "reload_triggers",
    }
)
"""camelCase spellings accepted for keys coming from ``package.json`` or bundler options."""


@dataclass(frozen=True)
class BridgeOptions:
    """Fully resolved options for one generation run.

    Instances are built by :func:`resolve_options` and never mutated. Reloading the
    configuration produces a new instance.

    Attributes:
        watch: Re-trigger generation when watched Symfony files change.
        dev: Development mode. Selects the URL prefix behavior and the console ``--env``.
        project_root: Root of the Symfony project; relative paths resolve against it.
        elm_root: Directory receiving the generated Elm modules.
        output_folder: Scratch directory for the translation dump.
        elm_version: Targeted Elm version (``"0.18"``, ``"0.19"`` or ``None``).
        enable_routing: Generate the ``Routing.elm`` module.
        enable_translations: Generate one module per translation domain.
        url_prefix: Prefix prepended to generated URLs in development mode.
        lang: Locale of the translation catalogs to transpile.
        watch_folders: Folders watched for changes, relative to the project root.
        watch_extensions: File extensions watched inside ``watch_folders``.
        env_variables: Logical name to source variable name, or to its resolved value
            after :func:`~elm_symfony_bridge.config.load_env_variables`.
        console_path: Symfony console binary, relative to the project root.
        worker_command: Command launching the transpilation worker.
        reload_triggers: Files, relative to the project root, whose change reloads the
            configuration before regenerating.
    """

    watch: bool
    dev: bool
    project_root: Path
    elm_root: Path
    output_folder: Path
    elm_version: "str | None"
    enable_routing: bool
    enable_translations: bool
    url_prefix: str
    lang: str
    watch_folders: "tuple[str, ...]"
    watch_extensions: "tuple[str, ...]"
    env_variables: "Mapping[str, str | None]"
    console_path: Path
    worker_command: "tuple[str, ...]"
    reload_triggers: "tuple[str, ...]"

    def __post_init__(self) -> None:
        """Normalize collection and path types so the record stays immutable."""
        for name in ("project_root", "elm_root", "output_folder", "console_path"):
            value = getattr(self, name)
            if not isinstance(value, Path):
                object.__setattr__(self, name, Path(value))
        for name in _LIST_KEYS:
            value = getattr(self, name)
            if isinstance(value, (str, Path)):
                value = (value,)
            object.__setattr__(self, name, tuple(str(item) for item in value))
        object.__setattr__(self, "env_variables", MappingProxyType(dict(self.env_variables)))

        if self.elm_version is not None and self.elm_version not in ELM_VERSIONS:
            msg = f"Invalid elm_version: {self.elm_version!r}. Expected one of: {', '.join(ELM_VERSIONS)}"
            raise ValueError(msg)

    def resolve(self, path: "str | Path") -> Path:
        """Resolve ``path`` relative to the project root.

        Returns:
            ``path`` unchanged when absolute, otherwise rooted at ``project_root``.
        """
        path = Path(path)
        return path if path.is_absolute() else (self.project_root / path)

    @property
    def elm_root_dir(self) -> Path:
        return self.resolve(self.elm_root)

    @property
    def output_dir(self) -> Path:
        return self.resolve(self.output_folder)

    @property
    def routing_url_prefix(self) -> str:
        """URL prefix sent to the worker: the configured prefix in dev, empty in prod."""
        return self.url_prefix if self.dev else ""

    @property
    def symfony_env(self) -> str:
        return "dev" if self.dev else "prod"

    @property
    def watch_patterns(self) -> "tuple[str, ...]":
        """Glob patterns combining every watch folder with every watch extension.

        Returns:
            Patterns of the form ``<project_root>/<folder>/**/*.<extension>``.
        """
        return tuple(
            f"{self.resolve(folder).as_posix()}/**/*.{extension}"
            for folder in self.watch_folders
            for extension in self.watch_extensions
        )

    @property
    def watch_dependencies(self) -> "frozenset[Path]":
        """Resolved watch folders, for bundlers that track context directories."""
        return frozenset(self.resolve(folder) for folder in self.watch_folders)

    def is_watched(self, path: "str | Path") -> bool:
        """Check whether a changed file should trigger a generation.

        Returns:
            True when ``path`` lies below a watch folder and has a watched extension.
        """
        candidate = Path(os.path.abspath(self.resolve(path)))
        if candidate.suffix.lstrip(".") not in self.watch_extensions:
            return False
        return any(candidate.is_relative_to(os.path.abspath(folder)) for folder in self.watch_dependencies)

    @property
    def reload_trigger_paths(self) -> "frozenset[Path]":
        return frozenset(self.resolve(trigger) for trigger in self.reload_triggers)

    def is_reload_trigger(self, path: "str | Path") -> bool:
        """Check whether a changed file should reload the configuration."""
        candidate = os.path.abspath(self.resolve(path))
        return any(candidate == os.path.abspath(trigger) for trigger in self.reload_trigger_paths)


_LIST_KEYS = ("watch_folders", "watch_extensions", "worker_command", "reload_triggers")

OPTION_KEYS: "tuple[str, ...]" = tuple(f.name for f in fields(BridgeOptions))
"""Every recognized option key, in declaration order."""


def _default_dev_mode() -> bool:
    env_value = os.getenv("ELM_BRIDGE_DEV_MODE")
    if env_value is not None:
        return env_value in TRUE_VALUES
    return os.getenv("NODE_ENV", "development") != "production"


def default_options() -> "dict[str, Any]":
    """Return the hard-default option layer.

    This is the single place listing the default of every recognized key.

    Returns:
        A mapping holding a value for every key in :data:`OPTION_KEYS`.
    """
    return {
        "watch": os.getenv("ELM_BRIDGE_WATCH", "False") in TRUE_VALUES,
        "dev": _default_dev_mode(),
        "project_root": Path("./"),
        "elm_root": Path(DEFAULT_ELM_ROOT),
        "output_folder": Path(DEFAULT_OUTPUT_FOLDER),
        "elm_version": "0.19",
        "enable_routing": True,
        "enable_translations": True,
        "url_prefix": "",
        "lang": "en",
        "watch_folders": DEFAULT_WATCH_FOLDERS,
        "watch_extensions": DEFAULT_WATCH_EXTENSIONS,
        "env_variables": {},
        "console_path": Path(DEFAULT_CONSOLE_PATH),
        "worker_command": DEFAULT_WORKER_COMMAND,
        "reload_triggers": DEFAULT_RELOAD_TRIGGERS,
    }


def _normalize_layer(layer: "Mapping[str, Any] | None", name: str) -> "dict[str, Any]":
    """Map camelCase keys to field names and drop unknown keys.

    Returns:
        The layer keyed by option field names.
    """
    if not layer:
        return {}
    normalized: dict[str, Any] = {}
    for key, value in layer.items():
        field_name = OPTION_ALIASES.get(key, key)
        if field_name not in OPTION_KEYS:
            logger.warning("Ignoring unknown %s option %r", name, key)
            continue
        normalized[field_name] = value
    return normalized


_BOOL_KEYS = ("watch", "dev", "enable_routing", "enable_translations")
_PATH_KEYS = ("project_root", "elm_root", "output_folder", "console_path")
_STR_KEYS = ("url_prefix", "lang")


def _is_valid(key: str, value: Any) -> bool:
    if key == "elm_version":
        return value in ELM_VERSIONS
    if key in _BOOL_KEYS:
        return isinstance(value, bool)
    if key in _PATH_KEYS:
        return isinstance(value, (str, Path))
    if key in _STR_KEYS:
        return isinstance(value, str)
    if key in _LIST_KEYS:
        return isinstance(value, (str, Path)) or (
            isinstance(value, (list, tuple)) and all(isinstance(item, (str, Path)) for item in value)
        )
    if key == "env_variables":
        return isinstance(value, Mapping)
    return True


def _pick(key: str, layers: "list[dict[str, Any]]") -> Any:
    """Return the first provided and valid value for ``key``, invalid ones are logged and skipped."""
    for layer in layers:
        value = layer.get(key)
        if value is None:
            continue
        if _is_valid(key, value):
            return value
        logger.warning("[elm-symfony-bridge] Ignoring invalid value %r for option %r", value, key)
    return None


def resolve_options(
    explicit: "Mapping[str, Any] | None",
    implicit: "Mapping[str, Any] | None",
    defaults: "Mapping[str, Any] | None" = None,
) -> BridgeOptions:
    """Merge the option layers into one :class:`BridgeOptions`.

    For every key the precedence is explicit > implicit > defaults. A key counts as
    provided only when it is present and not ``None``; otherwise the next layer
    supplies it. A value of the wrong type, or an unsupported ``elm_version``, is
    logged and falls through the same way. Keys no layer provides fall back to
    :func:`default_options`, so the result is never partially populated.

    Args:
        explicit: User configuration (``package.json`` block or bundler options).
        implicit: Guessed configuration, see :func:`~elm_symfony_bridge.config.guess_implicit`.
        defaults: Default layer. Defaults to :func:`default_options`.

    Returns:
        The resolved options.
    """
    layers = [
        _normalize_layer(explicit, "explicit"),
        _normalize_layer(implicit, "implicit"),
        _normalize_layer(defaults, "default"),
        default_options(),
    ]
    return BridgeOptions(**{key: _pick(key, layers) for key in OPTION_KEYS})
