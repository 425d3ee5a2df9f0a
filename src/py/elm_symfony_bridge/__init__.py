"""Elm Symfony Bridge: Elm routing and translation modules generated from Symfony.

This package queries a Symfony project for its routing table and translation
catalogs, hands them to a transpilation worker, and writes the resulting Elm
modules into the Elm source tree. Runs are cached by content and serialized, so
build tools can trigger them as often as they like.

Basic usage:
    from litestar import Litestar
    from elm_symfony_bridge import ElmBridgePlugin

    app = Litestar(plugins=[ElmBridgePlugin(config={"lang": "fr", "watch": True})])

Driving the pipeline from another build tool:
    from elm_symfony_bridge import BridgeHooks, GenerationContext, GenerationPipeline, resolve_config
    from elm_symfony_bridge.worker import open_worker

    options = await resolve_config(project_root="path/to/symfony")
    async with open_worker(options) as worker:
        hooks = BridgeHooks(GenerationPipeline(GenerationContext(worker=worker)), options)
        await hooks.on_before_build()
"""

from elm_symfony_bridge.__metadata__ import __project__, __version__
from elm_symfony_bridge.cache import ChangeCache
from elm_symfony_bridge.codegen import GenerationContext, GenerationPipeline, GenerationResult
from elm_symfony_bridge.config import BridgeOptions, resolve_config, resolve_options
from elm_symfony_bridge.executor import SymfonyConsole
from elm_symfony_bridge.gate import ExclusiveGate
from elm_symfony_bridge.hooks import BridgeHooks
from elm_symfony_bridge.plugin import ElmBridgePlugin
from elm_symfony_bridge.worker import WorkerClient

__all__ = (
    "BridgeHooks",
    "BridgeOptions",
    "ChangeCache",
    "ElmBridgePlugin",
    "ExclusiveGate",
    "GenerationContext",
    "GenerationPipeline",
    "GenerationResult",
    "SymfonyConsole",
    "WorkerClient",
    "__project__",
    "__version__",
    "resolve_config",
    "resolve_options",
)
