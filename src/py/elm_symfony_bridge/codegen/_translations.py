"""Translation task: one Elm module per translation catalog of the configured locale."""

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

import anyio

from elm_symfony_bridge.codegen._utils import fmt_path, write_if_changed
from elm_symfony_bridge.exceptions import ElmBridgeError, GenerationError, WorkerProtocolError
from elm_symfony_bridge.worker import TranslationRequest

if TYPE_CHECKING:
    from elm_symfony_bridge.codegen._pipeline import GenerationContext
    from elm_symfony_bridge.codegen._result import GenerationResult
    from elm_symfony_bridge.config import BridgeOptions
    from elm_symfony_bridge.executor import SymfonyConsole

__all__ = (
    "catalog_name",
    "find_translation_files",
    "generate_translations",
    "translate_file",
    "translation_cache_key",
)

logger = logging.getLogger("elm_symfony_bridge")


def translation_cache_key(path: "Path | str") -> str:
    return f"translations {path}"


def find_translation_files(options: "BridgeOptions") -> "list[Path]":
    """List the dumped catalogs matching the configured locale.

    Returns:
        Paths of ``<output_folder>/translations/<domain>/<lang>.json``, sorted.
    """
    return sorted(options.output_dir.glob(f"translations/*/{options.lang}.json"))


def catalog_name(options: "BridgeOptions", path: Path) -> str:
    """Name of a catalog as sent to the worker: relative to the project root when below it.

    Returns:
        A POSIX path such as ``elm-stuff/generated-code/elm-symfony-bridge/translations/messages/en.json``.
    """
    root = os.path.abspath(options.project_root)
    absolute = os.path.abspath(path)
    if Path(absolute).is_relative_to(root):
        return Path(os.path.relpath(absolute, root)).as_posix()
    return Path(absolute).as_posix()


def _output_path(options: "BridgeOptions", name: str) -> Path:
    if "\x00" in name:
        msg = f"Worker returned file name {name!r} containing a NUL character"
        raise WorkerProtocolError(msg)
    root = Path(os.path.abspath(options.elm_root_dir))
    path = Path(os.path.abspath(root / name))
    if not path.is_relative_to(root) or path == root:
        msg = f"Worker returned file name {name!r} outside of {fmt_path(root)}"
        raise WorkerProtocolError(msg)
    return path


async def translate_file(
    context: "GenerationContext", options: "BridgeOptions", path: Path, result: "GenerationResult"
) -> None:
    """Regenerate the module for one catalog when its content changed.

    Raises:
        GenerationError: If the worker reports a failure. The output file is left untouched.
    """
    content = await anyio.Path(path).read_text(encoding="utf-8")
    key = translation_cache_key(path)

    async def transpile() -> None:
        request = TranslationRequest(
            name=catalog_name(options, path),
            content=content,
            version=options.elm_version,
            env_variables=dict(options.env_variables),
        )
        response = await context.worker.call(request, timeout=context.timeout)
        if not response.succeeded or response.file is None:
            raise GenerationError(fmt_path(path), response.error or "worker returned no file")

        output = _output_path(options, response.file.name)
        if await write_if_changed(output, response.file.content):
            result.written_files.append(fmt_path(output))
        else:
            result.unchanged_files.append(fmt_path(output))

    ran, _ = await context.cache.when_changed(key, content, transpile)
    if not ran:
        result.skipped.append(key)


async def generate_translations(
    context: "GenerationContext", options: "BridgeOptions", console: "SymfonyConsole", result: "GenerationResult"
) -> None:
    """Dump the catalogs and regenerate every changed translation module.

    Files are processed concurrently. A failing file is reported in
    ``result.errors`` under its own path and does not cancel the others; modules
    already written stay on disk.
    """
    if not options.enable_translations:
        result.skipped.append("translations")
        return

    await console.dump_translations(options.output_dir)
    files = find_translation_files(options)
    if not files:
        logger.warning("No %r translation catalogs found in %s", options.lang, fmt_path(options.output_dir))
        return

    async def isolated(path: Path) -> None:
        try:
            await translate_file(context, options, path, result)
        except (ElmBridgeError, OSError, UnicodeDecodeError) as e:
            logger.error("[elm-symfony-bridge] Translation %s failed: %s", fmt_path(path), e)  # noqa: TRY400
            result.add_error(fmt_path(path), e)
        except Exception as e:
            logger.exception("[elm-symfony-bridge] Translation %s failed unexpectedly", fmt_path(path))
            result.add_error(fmt_path(path), e)

    async with anyio.create_task_group() as tg:
        for path in files:
            tg.start_soon(isolated, path)
