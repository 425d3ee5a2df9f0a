"""Elm Symfony Bridge plugin for Litestar.

The plugin runs the generation when the application starts and, in watch mode,
every time a watched Symfony file changes while the application runs. It also
registers the ``elm`` CLI group.

Example::

    from litestar import Litestar
    from elm_symfony_bridge import ElmBridgePlugin

    app = Litestar(plugins=[ElmBridgePlugin(config={"lang": "fr", "watch": True})])
"""

from collections.abc import Mapping
from contextlib import AsyncExitStack, asynccontextmanager
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, Any

import anyio
from litestar.plugins import CLIPlugin, InitPluginProtocol
from rich.markup import escape

from elm_symfony_bridge.codegen import GenerationContext, GenerationPipeline
from elm_symfony_bridge.config import BridgeOptions, load_env_variables, resolve_config
from elm_symfony_bridge.exceptions import WorkerProcessError
from elm_symfony_bridge.hooks import BridgeHooks, watch_project
from elm_symfony_bridge.plugin._utils import log_fail, log_info, report_result
from elm_symfony_bridge.worker import open_worker

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from click import Group
    from litestar import Litestar
    from litestar.config.app import AppConfig

    from elm_symfony_bridge.worker import WorkerClient

__all__ = ("ElmBridgePlugin",)


class ElmBridgePlugin(InitPluginProtocol, CLIPlugin):
    """Elm Symfony Bridge plugin for Litestar."""

    __slots__ = ("_config", "_guess", "_hooks", "_project_root", "_timeout")

    def __init__(
        self,
        config: "BridgeOptions | Mapping[str, Any] | None" = None,
        *,
        project_root: "Path | str | None" = None,
        guess: bool = True,
        timeout: "float | None" = None,
    ) -> None:
        """Initialize the plugin.

        Args:
            config: Resolved options, or an explicit option layer. When None, the
                ``package.json`` block is used.
            project_root: Symfony project root used when ``config`` does not set one.
            guess: Guess the implicit option layer from the project.
            timeout: Seconds to wait for each worker response.
        """
        self._config = config
        self._project_root = project_root
        self._guess = guess
        self._timeout = timeout
        self._hooks: "BridgeHooks | None" = None

    @property
    def hooks(self) -> "BridgeHooks | None":
        """Hooks of the running generation, available while the app lifespan is active."""
        return self._hooks

    async def resolve_options(self) -> BridgeOptions:
        """Resolve the plugin configuration.

        Returns:
            The options used for the application's lifetime.
        """
        if isinstance(self._config, BridgeOptions):
            return load_env_variables(self._config)
        return await resolve_config(self._config, project_root=self._project_root, guess=self._guess)

    def on_cli_init(self, cli: "Group") -> None:
        """Register CLI commands.

        Args:
            cli: The Click command group to add commands to.
        """
        from elm_symfony_bridge.cli import elm_group

        cli.add_command(elm_group)

    def on_app_init(self, app_config: "AppConfig") -> "AppConfig":
        """Register the generation lifespan.

        Returns:
            The modified application configuration.
        """
        app_config.lifespan.append(self.lifespan)  # pyright: ignore[reportUnknownMemberType]
        return app_config

    @asynccontextmanager
    async def lifespan(self, app: "Litestar") -> "AsyncIterator[None]":
        """Start the worker, generate once, and watch for changes in watch mode.

        A worker that cannot be started is reported and the application starts
        without generation.

        Args:
            app: The Litestar application instance.

        Yields:
            None
        """
        options = await self.resolve_options()
        async with AsyncExitStack() as stack:
            try:
                worker: "WorkerClient | None" = await stack.enter_async_context(open_worker(options))
            except WorkerProcessError as e:
                log_fail(f"Elm generation disabled: {escape(str(e))}")
                worker = None
            if worker is None:
                yield
                return

            hooks = BridgeHooks(GenerationPipeline(GenerationContext(worker=worker, timeout=self._timeout)), options)
            self._hooks = hooks
            report_result(await hooks.on_before_build())

            tg = await stack.enter_async_context(anyio.create_task_group())
            if options.watch:
                log_info(f"Watching {', '.join(options.watch_folders)} for changes")
                tg.start_soon(
                    partial(watch_project, hooks, on_result=report_result, reload_options=self.resolve_options)
                )
            try:
                yield
            finally:
                self._hooks = None
                tg.cancel_scope.cancel()
