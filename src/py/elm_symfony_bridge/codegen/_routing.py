"""Routing task: Symfony routing table to ``Routing.elm``."""

import logging
from typing import TYPE_CHECKING

from elm_symfony_bridge.codegen._utils import fmt_path, write_if_changed
from elm_symfony_bridge.exceptions import GenerationError
from elm_symfony_bridge.worker import RoutingRequest

if TYPE_CHECKING:
    from elm_symfony_bridge.codegen._pipeline import GenerationContext
    from elm_symfony_bridge.codegen._result import GenerationResult
    from elm_symfony_bridge.config import BridgeOptions
    from elm_symfony_bridge.executor import SymfonyConsole

__all__ = ("ROUTING_CACHE_KEY", "ROUTING_MODULE", "generate_routing")

logger = logging.getLogger("elm_symfony_bridge")

ROUTING_CACHE_KEY = "routing"
ROUTING_MODULE = "Routing.elm"


async def generate_routing(
    context: "GenerationContext", options: "BridgeOptions", console: "SymfonyConsole", result: "GenerationResult"
) -> None:
    """Regenerate ``Routing.elm`` when the routing table changed.

    Raises:
        GenerationError: If the worker reports a failure. The output file is left untouched.
    """
    if not options.enable_routing:
        result.skipped.append(ROUTING_CACHE_KEY)
        return

    content = await console.query_routing()

    async def transpile() -> None:
        request = RoutingRequest(
            content=content,
            version=options.elm_version,
            env_variables=dict(options.env_variables),
            url_prefix=options.routing_url_prefix,
        )
        response = await context.worker.call(request, timeout=context.timeout)
        if not response.succeeded or response.content is None:
            raise GenerationError("routing", response.error or "worker returned no content")

        path = options.elm_root_dir / ROUTING_MODULE
        if await write_if_changed(path, response.content):
            result.written_files.append(fmt_path(path))
        else:
            result.unchanged_files.append(fmt_path(path))

    ran, _ = await context.cache.when_changed(ROUTING_CACHE_KEY, content, transpile)
    if not ran:
        result.skipped.append(ROUTING_CACHE_KEY)
