from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from click import Path as ClickPath
from click import group, option

if TYPE_CHECKING:
    from elm_symfony_bridge.codegen import GenerationResult
    from elm_symfony_bridge.config import BridgeOptions
    from elm_symfony_bridge.hooks import BridgeHooks
    from elm_symfony_bridge.worker import WorkerClient


@group(name="elm")
def elm_group() -> None:
    """Generate Elm modules from a Symfony project."""


async def _resolve_options(
    project_root: "Optional[Path]", dev: "Optional[bool]", lang: "Optional[str]", no_guess: bool
) -> "BridgeOptions":
    """Resolve options from ``package.json`` with the command line flags on top.

    Returns:
        The resolved options.
    """
    from elm_symfony_bridge.config import read_explicit, resolve_config

    root = project_root or Path.cwd()
    explicit = read_explicit(root)
    if dev is not None:
        explicit["dev"] = dev
    if lang is not None:
        explicit["lang"] = lang
    return await resolve_config(explicit, project_root=root, guess=not no_guess)


def _build_hooks(worker: "WorkerClient", options: "BridgeOptions", timeout: "Optional[float]") -> "BridgeHooks":
    from elm_symfony_bridge.codegen import GenerationContext, GenerationPipeline
    from elm_symfony_bridge.hooks import BridgeHooks

    return BridgeHooks(GenerationPipeline(GenerationContext(worker=worker, timeout=timeout)), options)


async def _generate_once(
    project_root: "Optional[Path]",
    dev: "Optional[bool]",
    lang: "Optional[str]",
    no_guess: bool,
    timeout: "Optional[float]",
) -> "GenerationResult | None":
    from elm_symfony_bridge.worker import open_worker

    options = await _resolve_options(project_root, dev, lang, no_guess)
    async with open_worker(options) as worker:
        return await _build_hooks(worker, options, timeout).on_before_build()


async def _generate_and_watch(
    project_root: "Optional[Path]",
    dev: "Optional[bool]",
    lang: "Optional[str]",
    no_guess: bool,
    timeout: "Optional[float]",
) -> None:
    from elm_symfony_bridge.hooks import watch_project
    from elm_symfony_bridge.plugin._utils import log_info, report_result
    from elm_symfony_bridge.worker import open_worker

    options = await _resolve_options(project_root, dev, lang, no_guess)
    async with open_worker(options) as worker:
        hooks = _build_hooks(worker, options, timeout)
        report_result(await hooks.on_before_build())
        log_info(f"Watching {', '.join(options.watch_folders)} for changes")
        await watch_project(
            hooks,
            on_result=report_result,
            reload_options=partial(_resolve_options, project_root, dev, lang, no_guess),
        )


@elm_group.command(
    name="generate",
    help="Generate the routing and translation modules once.",
)
@option(
    "--project-root",
    type=ClickPath(dir_okay=True, file_okay=False, path_type=Path),
    help="The root of the Symfony project. Defaults to the current directory.",
    default=None,
    required=False,
)
@option("--dev/--prod", "dev", default=None, help="Generate for development or production. Defaults to NODE_ENV.")
@option("--lang", type=str, help="Locale of the translation catalogs to generate.", default=None, required=False)
@option(
    "--no-guess",
    type=bool,
    help="Do not guess configuration from the Symfony project.",
    default=False,
    is_flag=True,
)
@option("--timeout", type=float, help="Seconds to wait for each worker response.", default=None, required=False)
def generate_modules(
    project_root: "Optional[Path]",
    dev: "Optional[bool]",
    lang: "Optional[str]",
    no_guess: bool,
    timeout: "Optional[float]",
) -> None:
    """Generate the Elm modules."""
    import anyio
    from litestar.cli._utils import LitestarCLIException, console  # pyright: ignore[reportPrivateImportUsage]

    from elm_symfony_bridge.exceptions import ElmBridgeError
    from elm_symfony_bridge.plugin._utils import report_result

    console.rule("[yellow]Generating Elm modules[/]", align="left")
    try:
        result = anyio.run(_generate_once, project_root, dev, lang, no_guess, timeout)
    except ElmBridgeError as e:
        raise LitestarCLIException(str(e)) from e

    report_result(result)
    if result is not None and not result.succeeded:
        msg = f"Generation failed for {', '.join(result.errors)}"
        raise LitestarCLIException(msg)


@elm_group.command(
    name="watch",
    help="Generate the modules, then regenerate them whenever a watched Symfony file changes.",
)
@option(
    "--project-root",
    type=ClickPath(dir_okay=True, file_okay=False, path_type=Path),
    help="The root of the Symfony project. Defaults to the current directory.",
    default=None,
    required=False,
)
@option("--dev/--prod", "dev", default=None, help="Generate for development or production. Defaults to NODE_ENV.")
@option("--lang", type=str, help="Locale of the translation catalogs to generate.", default=None, required=False)
@option(
    "--no-guess",
    type=bool,
    help="Do not guess configuration from the Symfony project.",
    default=False,
    is_flag=True,
)
@option("--timeout", type=float, help="Seconds to wait for each worker response.", default=None, required=False)
def watch_modules(
    project_root: "Optional[Path]",
    dev: "Optional[bool]",
    lang: "Optional[str]",
    no_guess: bool,
    timeout: "Optional[float]",
) -> None:
    """Generate the Elm modules on every change."""
    import anyio
    from litestar.cli._utils import LitestarCLIException, console  # pyright: ignore[reportPrivateImportUsage]

    from elm_symfony_bridge.exceptions import ElmBridgeError

    console.rule("[yellow]Watching Symfony project[/]", align="left")
    try:
        anyio.run(_generate_and_watch, project_root, dev, lang, no_guess, timeout)
    except ElmBridgeError as e:
        raise LitestarCLIException(str(e)) from e
    except KeyboardInterrupt:
        console.print("[yellow]Stopped watching.[/]")
