"""Cross-invocation mutual exclusion for generation runs.

Several bundler hooks can fire for the same change (a module load and a hot update,
for instance). Running two generations at once would race on the output files and
call the worker twice, so runs go through an :class:`ExclusiveGate`: the first
caller runs, the others wait for it to finish and reuse its effects.
"""

import logging
import threading
from collections.abc import Awaitable, Callable

import anyio
import anyio.to_thread

__all__ = ("ExclusiveGate",)

logger = logging.getLogger("elm_symfony_bridge")


class ExclusiveGate:
    """Admits at most one run at a time.

    The gate state is guarded by a :class:`threading.Condition`, so it can be shared
    by callers on different event loops and OS threads. Each release bumps a
    generation counter; a waiter parks until the counter moves past the value it
    observed when it lost the race, which wakes exactly the waiters parked at that
    release.
    """

    __slots__ = ("_condition", "_locked", "_release_count")

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._locked = False
        self._release_count = 0

    @property
    def locked(self) -> bool:
        with self._condition:
            return self._locked

    def _try_acquire(self) -> "int | None":
        """Atomically acquire the gate.

        Returns:
            None when acquired, otherwise the release count observed while locked.
        """
        with self._condition:
            if self._locked:
                return self._release_count
            self._locked = True
            return None

    def _release(self) -> None:
        with self._condition:
            self._locked = False
            self._release_count += 1
            self._condition.notify_all()

    def _wait_for_release(self, observed: int) -> None:
        with self._condition:
            self._condition.wait_for(lambda: self._release_count != observed)

    async def run_exclusive(self, run: "Callable[[], Awaitable[object]]") -> bool:
        """Run ``run`` unless another run is active.

        When the gate is free, ``run`` executes and the gate is released afterwards
        whatever the outcome. When a run is active, this waits until it releases the
        gate and returns without executing ``run``.

        Args:
            run: Coroutine function performing the generation.

        Returns:
            True if ``run`` was executed by this caller, False if it was coalesced
            into the run that was already active.
        """
        observed = self._try_acquire()
        if observed is not None:
            logger.debug("Generation already running, waiting for it to finish")
            # own limiter: parked waiters must not starve the run of worker threads
            await anyio.to_thread.run_sync(self._wait_for_release, observed, limiter=anyio.CapacityLimiter(1))
            return False

        try:
            await run()
        finally:
            self._release()
        return True
