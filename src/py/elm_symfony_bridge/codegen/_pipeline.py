"""Generation pipeline.

A run executes the routing task and the translation task concurrently. Each task
consults the :class:`~elm_symfony_bridge.cache.ChangeCache`, calls the worker on a
cache miss and writes the returned modules. Failures are caught at the task
boundary, logged and recorded in the :class:`GenerationResult`; they never escape
to the build tool, and the next triggered run gets another chance.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import anyio

from elm_symfony_bridge.cache import ChangeCache
from elm_symfony_bridge.codegen._result import GenerationResult
from elm_symfony_bridge.codegen._routing import generate_routing
from elm_symfony_bridge.codegen._translations import generate_translations
from elm_symfony_bridge.exceptions import ElmBridgeError
from elm_symfony_bridge.executor import SymfonyConsole
from elm_symfony_bridge.gate import ExclusiveGate

if TYPE_CHECKING:
    from elm_symfony_bridge.config import BridgeOptions
    from elm_symfony_bridge.worker import WorkerClient

__all__ = ("GenerationContext", "GenerationPipeline")

logger = logging.getLogger("elm_symfony_bridge")

_Task = Callable[["GenerationContext", "BridgeOptions", SymfonyConsole, GenerationResult], Awaitable[None]]


@dataclass
class GenerationContext:
    """State shared by every run of one orchestrator.

    Owned by the top-level integration (plugin, CLI command) and handed to the
    pipeline; nothing here is module-global.

    Attributes:
        worker: Client of the single transpilation worker.
        cache: Change cache, alive as long as the context.
        gate: Gate serializing runs.
        console_factory: Builds the Symfony console for the options of a run.
        timeout: Seconds to wait for each worker response, ``None`` to wait indefinitely.
    """

    worker: "WorkerClient"
    cache: ChangeCache = field(default_factory=ChangeCache)
    gate: ExclusiveGate = field(default_factory=ExclusiveGate)
    console_factory: "Callable[[BridgeOptions], SymfonyConsole]" = SymfonyConsole.from_options
    timeout: "float | None" = None


class GenerationPipeline:
    """Runs routing and translation generation for resolved options."""

    __slots__ = ("context",)

    def __init__(self, context: GenerationContext) -> None:
        self.context = context

    async def generate(self, options: "BridgeOptions") -> GenerationResult:
        """Run both generation tasks concurrently.

        A failure in one task does not prevent the other from completing.

        Returns:
            The combined result of both tasks.
        """
        result = GenerationResult()
        console = self.context.console_factory(options)

        async def guarded(name: str, task: _Task) -> None:
            try:
                await task(self.context, options, console, result)
            except (ElmBridgeError, OSError) as e:
                logger.error("[elm-symfony-bridge] %s generation failed: %s", name.capitalize(), e)  # noqa: TRY400
                result.add_error(name, e)
            except Exception as e:
                logger.exception("[elm-symfony-bridge] %s generation failed unexpectedly", name.capitalize())
                result.add_error(name, e)

        async with anyio.create_task_group() as tg:
            tg.start_soon(guarded, "routing", generate_routing)
            tg.start_soon(guarded, "translations", generate_translations)
        return result

    async def run(self, options: "BridgeOptions") -> "GenerationResult | None":
        """Run a generation through the gate.

        Returns:
            The result when this call performed the run, None when it was coalesced
            into a run that was already in progress.
        """
        outcome: list[GenerationResult] = []

        async def _run() -> None:
            outcome.append(await self.generate(options))

        await self.context.gate.run_exclusive(_run)
        return outcome[0] if outcome else None
