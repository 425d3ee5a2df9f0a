"""Tests for elm_symfony_bridge.config."""

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from elm_symfony_bridge.config import (
    OPTION_KEYS,
    BridgeOptions,
    default_options,
    guess_elm_version,
    guess_implicit,
    guess_url_prefix,
    load_env_variables,
    read_env_files,
    read_explicit,
    resolve_config,
    resolve_options,
)
from elm_symfony_bridge.exceptions import ConsoleExecutionError, ConsoleNotFoundError

# =====================================================
# Layer merge
# =====================================================


def test_merge_falls_through_null_values() -> None:
    options = resolve_options(
        explicit={"enableRouting": False},
        implicit={"lang": None},
        defaults={"lang": "en", "enableRouting": True},
    )

    assert options.lang == "en"
    assert options.enable_routing is False


def test_merge_precedence() -> None:
    options = resolve_options(
        explicit={"lang": "fr"},
        implicit={"lang": "de", "url_prefix": "/index.php"},
        defaults={"lang": "en", "url_prefix": "/app.php", "elm_version": "0.18"},
    )

    assert options.lang == "fr"
    assert options.url_prefix == "/index.php"
    assert options.elm_version == "0.18"


def test_merge_is_never_partial() -> None:
    options = resolve_options(None, None)

    for key, value in default_options().items():
        resolved = getattr(options, key)
        if isinstance(value, tuple):
            assert resolved == value
        elif isinstance(value, dict):
            assert dict(resolved) == value
        else:
            assert resolved == value
    assert set(default_options()) == set(OPTION_KEYS)


def test_merge_accepts_camel_case_and_ignores_unknown_keys(caplog: pytest.LogCaptureFixture) -> None:
    options = resolve_options({"elmRoot": "front/elm", "watchFolders": ["src"], "unknownKey": 1}, None)

    assert options.elm_root == Path("front/elm")
    assert options.watch_folders == ("src",)
    assert "unknownKey" in caplog.text


def test_options_are_immutable(project_root: Path) -> None:
    options = resolve_options({"project_root": project_root, "envVariables": {"FOO": "A"}}, None)

    with pytest.raises(AttributeError):
        options.lang = "fr"  # type: ignore[misc]
    with pytest.raises(TypeError):
        options.env_variables["FOO"] = "B"  # type: ignore[index]


def test_invalid_elm_version_falls_through(caplog: pytest.LogCaptureFixture) -> None:
    options = resolve_options({"elmVersion": "0.20"}, {"elm_version": "0.18"})

    assert options.elm_version == "0.18"
    assert "'0.20'" in caplog.text
    assert resolve_options({"elmVersion": "0.20"}, None).elm_version == "0.19"


def test_invalid_elm_version_record() -> None:
    with pytest.raises(ValueError, match="Invalid elm_version"):
        BridgeOptions(**{**default_options(), "elm_version": "0.20"})


@pytest.mark.parametrize(
    ("explicit", "key", "expected"),
    [
        ({"dev": "false"}, "dev", True),
        ({"lang": 3}, "lang", "en"),
        ({"watchFolders": 1}, "watch_folders", ("src", "app", "config", "translations")),
        ({"watchFolders": ["src", 2]}, "watch_folders", ("src", "app", "config", "translations")),
        ({"envVariables": ["API_URL"]}, "env_variables", {}),
    ],
)
def test_wrongly_typed_values_fall_through(explicit: "dict[str, Any]", key: str, expected: Any) -> None:
    resolved = getattr(resolve_options(explicit, None), key)

    assert (dict(resolved) if key == "env_variables" else resolved) == expected


@pytest.mark.parametrize(
    ("key", "value", "field"),
    [
        ("watchFolders", "src", "watch_folders"),
        ("watchExtensions", "php", "watch_extensions"),
        ("workerCommand", "elm-bridge-worker", "worker_command"),
        ("reloadTriggers", "composer.json", "reload_triggers"),
    ],
)
def test_string_list_option_is_one_item(key: str, value: str, field: str) -> None:
    assert getattr(resolve_options({key: value}, None), field) == (value,)


@pytest.mark.anyio
async def test_resolve_config_recovers_from_invalid_version(project_root: Path) -> None:
    (project_root / "package.json").write_text('{"elm-symfony-bridge": {"elmVersion": "0.20", "lang": "fr"}}')

    options = await resolve_config(project_root=project_root, guess=False)

    assert options.elm_version == "0.19"
    assert options.lang == "fr"


@pytest.mark.parametrize(
    ("env", "expected"),
    [
        ({}, True),
        ({"NODE_ENV": "production"}, False),
        ({"NODE_ENV": "development"}, True),
        ({"NODE_ENV": "production", "ELM_BRIDGE_DEV_MODE": "true"}, True),
        ({"ELM_BRIDGE_DEV_MODE": "false"}, False),
    ],
)
def test_default_dev_mode(monkeypatch: pytest.MonkeyPatch, env: "dict[str, str]", expected: bool) -> None:
    for key, value in env.items():
        monkeypatch.setenv(key, value)

    assert default_options()["dev"] is expected


def test_default_watch(monkeypatch: pytest.MonkeyPatch) -> None:
    assert default_options()["watch"] is False
    monkeypatch.setenv("ELM_BRIDGE_WATCH", "1")
    assert default_options()["watch"] is True


# =====================================================
# Derived values
# =====================================================


def test_paths_resolve_against_project_root(project_root: Path) -> None:
    options = resolve_options({"project_root": project_root, "elm_root": "assets/elm"}, None)

    assert options.elm_root_dir == project_root / "assets/elm"
    assert options.output_dir == project_root / "elm-stuff/generated-code/elm-symfony-bridge"
    assert options.resolve("/abs/path") == Path("/abs/path")


def test_routing_url_prefix_only_in_dev() -> None:
    dev = resolve_options({"dev": True, "url_prefix": "/index.php"}, None)
    prod = resolve_options({"dev": False, "url_prefix": "/index.php"}, None)

    assert dev.routing_url_prefix == "/index.php"
    assert dev.symfony_env == "dev"
    assert prod.routing_url_prefix == ""
    assert prod.symfony_env == "prod"


def test_watch_patterns(project_root: Path) -> None:
    options = resolve_options(
        {"project_root": project_root, "watch_folders": ["src", "config"], "watch_extensions": ["php", "yaml"]}, None
    )

    assert options.watch_patterns == (
        f"{project_root.as_posix()}/src/**/*.php",
        f"{project_root.as_posix()}/src/**/*.yaml",
        f"{project_root.as_posix()}/config/**/*.php",
        f"{project_root.as_posix()}/config/**/*.yaml",
    )
    assert options.watch_dependencies == frozenset({project_root / "src", project_root / "config"})


def test_is_watched(project_root: Path) -> None:
    options = resolve_options({"project_root": project_root}, None)

    assert options.is_watched(project_root / "src/Controller/HomeController.php")
    assert options.is_watched(project_root / "config/routes.yaml")
    assert options.is_watched("translations/messages.en.xml")
    assert not options.is_watched(project_root / "src/app.js")
    assert not options.is_watched(project_root / "vendor/lib/Foo.php")
    assert not options.is_watched(project_root / "srcs/Foo.php")


def test_is_reload_trigger(project_root: Path) -> None:
    options = resolve_options({"project_root": project_root}, None)

    assert options.is_reload_trigger(project_root / "package.json")
    assert options.is_reload_trigger("composer.json")
    assert options.is_reload_trigger(project_root / ".env.local")
    assert options.is_reload_trigger(project_root / "elm.json")
    assert not options.is_reload_trigger(project_root / "assets/package.json")
    assert not options.is_reload_trigger(project_root / "config/routes.yaml")
    assert project_root / "elm-package.json" in options.reload_trigger_paths


# =====================================================
# Environment files
# =====================================================


def test_env_local_overrides_env(project_root: Path) -> None:
    (project_root / ".env").write_text("A=1\n")
    (project_root / ".env.local").write_text("A=2\n")
    options = resolve_options({"project_root": project_root, "envVariables": {"FOO": "A"}}, None)

    resolved = load_env_variables(options)

    assert resolved.env_variables["FOO"] == "2"
    assert options.env_variables["FOO"] == "A"


def test_env_missing_and_empty_values_resolve_to_none(project_root: Path) -> None:
    (project_root / ".env").write_text("EMPTY=\nSET=value\n")
    options = resolve_options(
        {"project_root": project_root, "envVariables": {"MISSING": "NOPE", "EMPTY": "EMPTY", "SET": "SET"}}, None
    )

    resolved = load_env_variables(options)

    assert dict(resolved.env_variables) == {"MISSING": None, "EMPTY": None, "SET": "value"}


def test_read_env_files_without_files(project_root: Path) -> None:
    assert read_env_files(project_root) == {}


# =====================================================
# Explicit layer
# =====================================================


def test_read_explicit(project_root: Path) -> None:
    (project_root / "package.json").write_text('{"name": "app", "elm-symfony-bridge": {"lang": "fr", "dev": false}}')

    assert read_explicit(project_root) == {"lang": "fr", "dev": False}


def test_read_explicit_without_block(project_root: Path) -> None:
    (project_root / "package.json").write_text('{"name": "app"}')

    assert read_explicit(project_root) == {}


def test_read_explicit_without_file(project_root: Path) -> None:
    assert read_explicit(project_root) == {}


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", '{"elm-symfony-bridge": "fr"}'])
def test_read_explicit_malformed(project_root: Path, content: str) -> None:
    (project_root / "package.json").write_text(content)

    assert read_explicit(project_root) == {}


# =====================================================
# Implicit layer
# =====================================================


def test_guess_elm_version(project_root: Path) -> None:
    assert guess_elm_version(project_root) is None
    (project_root / "elm-package.json").write_text("{}")
    assert guess_elm_version(project_root) == "0.18"
    (project_root / "elm.json").write_text("{}")
    assert guess_elm_version(project_root) == "0.19"


def test_guess_url_prefix(project_root: Path) -> None:
    assert guess_url_prefix(project_root) is None
    (project_root / "web").mkdir()
    (project_root / "web/app_dev.php").write_text("<?php")
    assert guess_url_prefix(project_root) == "/app_dev.php"
    (project_root / "public").mkdir()
    (project_root / "public/index.php").write_text("<?php")
    assert guess_url_prefix(project_root) == "/index.php"


def _console(project_root: Path, **overrides: Any) -> AsyncMock:
    console = AsyncMock()
    console.project_root = project_root
    console.query_config.return_value = "fr"
    console.has_translation_bundle.return_value = True
    for name, value in overrides.items():
        setattr(console, name, value)
    return console


@pytest.mark.anyio
async def test_guess_implicit(project_root: Path) -> None:
    (project_root / "elm.json").write_text("{}")

    layer = await guess_implicit(_console(project_root))

    assert layer == {"elm_version": "0.19", "enable_translations": True, "lang": "fr", "url_prefix": None}


@pytest.mark.anyio
async def test_guess_failures_are_isolated(project_root: Path) -> None:
    console = _console(
        project_root,
        query_config=AsyncMock(side_effect=ConsoleExecutionError(["bin/console"], 1, "boom")),
        has_translation_bundle=AsyncMock(side_effect=ConsoleNotFoundError("bin/console")),
    )
    (project_root / "elm-package.json").write_text("{}")

    layer = await guess_implicit(console)

    assert layer == {"elm_version": "0.18", "enable_translations": None, "lang": None, "url_prefix": None}


# =====================================================
# Full resolution
# =====================================================


@pytest.mark.anyio
async def test_resolve_config(project_root: Path) -> None:
    (project_root / "package.json").write_text('{"elm-symfony-bridge": {"envVariables": {"API": "API_URL"}}}')
    (project_root / ".env").write_text("API_URL=https://example.test\n")
    (project_root / "elm.json").write_text("{}")

    options = await resolve_config(project_root=project_root, console=_console(project_root))

    assert isinstance(options, BridgeOptions)
    assert options.project_root == project_root
    assert options.lang == "fr"
    assert options.elm_version == "0.19"
    assert dict(options.env_variables) == {"API": "https://example.test"}


@pytest.mark.anyio
async def test_resolve_config_without_guessing(project_root: Path) -> None:
    options = await resolve_config({"lang": "de"}, project_root=project_root, guess=False)

    assert options.lang == "de"
    assert options.project_root == project_root
    assert options.url_prefix == ""


@pytest.mark.anyio
async def test_resolve_config_explicit_project_root_wins(project_root: Path, tmp_path: Path) -> None:
    options = await resolve_config({"projectRoot": str(project_root)}, project_root=tmp_path, guess=False)

    assert options.project_root == project_root
