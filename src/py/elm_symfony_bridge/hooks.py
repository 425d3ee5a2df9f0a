"""Build-tool hook surface.

Bundler integrations call :meth:`BridgeHooks.on_before_build` whenever a build
or module load starts, and :meth:`BridgeHooks.on_file_changed` for every changed
file they see. Only the first build hook generates; later changes come in through
the file hook. Both go through the pipeline's gate, so hooks firing together for
the same change run a single generation.
"""

import logging
from contextlib import aclosing
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING

from watchfiles import awatch

from elm_symfony_bridge.config import resolve_config

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    import anyio

    from elm_symfony_bridge.codegen import GenerationPipeline, GenerationResult
    from elm_symfony_bridge.config import BridgeOptions

__all__ = ("BridgeHooks", "watch_project")

logger = logging.getLogger("elm_symfony_bridge")


class BridgeHooks:
    """Callbacks handed to a bundler integration."""

    __slots__ = ("_built", "_options", "pipeline")

    def __init__(self, pipeline: "GenerationPipeline", options: "BridgeOptions") -> None:
        self.pipeline = pipeline
        self._options = options
        self._built = False

    @property
    def options(self) -> "BridgeOptions":
        return self._options

    @property
    def watch_dependencies(self) -> "frozenset[Path]":
        """Folders the bundler should track so Symfony changes retrigger a build."""
        return self._options.watch_dependencies

    def reload(self, options: "BridgeOptions") -> None:
        """Use a newly resolved options record. The next build hook generates again."""
        self._options = options
        self._built = False

    async def on_before_build(self) -> "GenerationResult | None":
        """Generate before the bundler builds, once per options record.

        Returns:
            The run's result, or None if the modules were already built or the call
            was coalesced into a run in progress.
        """
        if self._built:
            return None
        self._built = True
        return await self.pipeline.run(self._options)

    async def on_file_changed(self, path: "str | Path") -> "GenerationResult | None":
        """Generate if ``path`` is a watched Symfony source file.

        Returns:
            The run's result, or None when the file is not watched or the call was
            coalesced into a run in progress.
        """
        if not self._options.is_watched(path):
            return None
        logger.debug("%s changed, regenerating", path)
        return await self.pipeline.run(self._options)


async def watch_project(
    hooks: BridgeHooks,
    *,
    on_result: "Callable[[GenerationResult], None] | None" = None,
    stop_event: "anyio.Event | None" = None,
    reload_options: "Callable[[], Awaitable[BridgeOptions]] | None" = None,
) -> None:
    """Watch the configured folders and feed changes to ``hooks``.

    A change to one of the reload triggers (``package.json``, ``elm.json``, ...)
    resolves the configuration again, installs it with :meth:`BridgeHooks.reload`
    and regenerates. Watching then resumes with the new watch folders.

    Args:
        hooks: Hooks receiving the changes.
        on_result: Called with the result of every run this loop performed.
        stop_event: Stops watching once set.
        reload_options: Resolves the new options on a reload. Defaults to
            :func:`~elm_symfony_bridge.config.resolve_config` for the current project root.
    """
    if reload_options is None:
        reload_options = partial(resolve_config, project_root=hooks.options.project_root)

    while True:
        options = hooks.options
        folders = sorted(str(folder) for folder in options.watch_dependencies if folder.is_dir())
        triggers = sorted(str(trigger) for trigger in options.reload_trigger_paths if trigger.is_file())
        if not folders and not triggers:
            logger.warning("None of the watch folders exist, not watching for changes")
            return

        reloaded = False
        async with aclosing(awatch(*folders, *triggers, stop_event=stop_event)) as batches:
            async for changes in batches:
                changed = sorted(Path(path) for _, path in changes)
                trigger = next((path for path in changed if options.is_reload_trigger(path)), None)
                if trigger is not None:
                    logger.info("%s changed, reloading configuration", trigger)
                    hooks.reload(await reload_options())
                    result = await hooks.on_before_build()
                    reloaded = True
                else:
                    watched = next((path for path in changed if options.is_watched(path)), None)
                    if watched is None:
                        continue
                    result = await hooks.on_file_changed(watched)
                if result is not None and on_result is not None:
                    on_result(result)
                if reloaded:
                    break
        if not reloaded:
            return
