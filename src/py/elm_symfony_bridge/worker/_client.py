"""Correlation-id request/response client for the transpilation worker."""

import logging
import uuid
from collections.abc import AsyncIterator, Callable
from contextlib import AsyncExitStack, asynccontextmanager
from typing import TYPE_CHECKING, Any

import anyio
import msgspec

from elm_symfony_bridge.exceptions import WorkerClosedError, WorkerProtocolError
from elm_symfony_bridge.worker._channel import ProcessChannel
from elm_symfony_bridge.worker._protocol import decode_envelope, decode_response, encode_message

if TYPE_CHECKING:
    from types import TracebackType

    from anyio.abc import TaskGroup

    from elm_symfony_bridge.config import BridgeOptions
    from elm_symfony_bridge.worker._channel import WorkerChannel
    from elm_symfony_bridge.worker._protocol import WorkerRequest, WorkerResponse

__all__ = ("WorkerClient", "open_worker")

logger = logging.getLogger("elm_symfony_bridge")


def _new_request_id() -> str:
    return uuid.uuid4().hex


class _PendingRequest:
    """Single-use completion handle for one outstanding request."""

    __slots__ = ("_event", "_outcome", "kind")

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._event = anyio.Event()
        self._outcome: "WorkerResponse | Exception | None" = None

    @property
    def done(self) -> bool:
        return self._event.is_set()

    def resolve(self, outcome: "WorkerResponse | Exception") -> bool:
        """Deliver the outcome. Only the first call has an effect.

        Returns:
            True if this call resolved the handle.
        """
        if self._event.is_set():
            return False
        self._outcome = outcome
        self._event.set()
        return True

    async def wait(self) -> "WorkerResponse":
        await self._event.wait()
        if isinstance(self._outcome, Exception):
            raise self._outcome
        return self._outcome  # type: ignore[return-value]


class WorkerClient:
    """Multiplexes concurrent requests over one worker channel.

    Each :meth:`call` gets a fresh correlation id and a pending handle. A reader task
    routes every inbound frame to the handle with the matching id; frames without an
    outstanding handle are dropped. Responses may arrive in any order.

    The client is an async context manager: entering it starts the reader task,
    exiting it closes the channel and fails the calls still waiting.

    Example::

        async with WorkerClient(channel) as client:
            response = await client.call(RoutingRequest(content=routes, version="0.19"))
    """

    def __init__(self, channel: "WorkerChannel", *, id_factory: "Callable[[], str] | None" = None) -> None:
        self._channel = channel
        self._id_factory = id_factory or _new_request_id
        self._pending: dict[str, _PendingRequest] = {}
        self._closed = False
        self._exit_stack: "AsyncExitStack | None" = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def __aenter__(self) -> "WorkerClient":
        async with AsyncExitStack() as stack:
            task_group: TaskGroup = await stack.enter_async_context(anyio.create_task_group())
            stack.push_async_callback(self._shutdown)
            task_group.start_soon(self._read_loop)
            stack.callback(task_group.cancel_scope.cancel)
            self._exit_stack = stack.pop_all()
        return self

    async def __aexit__(
        self,
        exc_type: "type[BaseException] | None",
        exc_val: "BaseException | None",
        exc_tb: "TracebackType | None",
    ) -> "bool | None":
        if self._exit_stack is None:
            return None
        stack, self._exit_stack = self._exit_stack, None
        return await stack.__aexit__(exc_type, exc_val, exc_tb)

    async def _shutdown(self) -> None:
        with anyio.CancelScope(shield=True):
            await self._channel.aclose()
        self._fail_pending()

    def _fail_pending(self) -> None:
        self._closed = True
        for request_id, pending in list(self._pending.items()):
            pending.resolve(WorkerClosedError(request_id))

    async def _read_loop(self) -> None:
        try:
            while True:
                try:
                    frame = await self._channel.receive()
                except (anyio.EndOfStream, anyio.ClosedResourceError, anyio.BrokenResourceError):
                    logger.debug("Worker channel closed")
                    return
                self.dispatch(frame)
        finally:
            self._fail_pending()

    def dispatch(self, frame: "bytes | str") -> bool:
        """Route one inbound frame to its caller.

        Args:
            frame: Raw inbound frame.

        Returns:
            True if the frame resolved an outstanding request, False if it was dropped.
        """
        try:
            envelope = decode_envelope(frame)
        except msgspec.DecodeError as e:
            logger.debug("Dropping undecodable worker frame: %s", e)
            return False

        pending = self._pending.pop(envelope.id, None)
        if pending is None:
            logger.debug("Dropping worker frame for unknown request %s", envelope.id)
            return False

        outcome: "WorkerResponse | Exception"
        try:
            response = decode_response(frame)
        except msgspec.DecodeError as e:
            outcome = WorkerProtocolError(f"Malformed response to request {envelope.id}: {e}")
        else:
            if response.kind != pending.kind:
                outcome = WorkerProtocolError(
                    f"Request {envelope.id} expected a {pending.kind!r} response, got {response.kind!r}"
                )
            else:
                outcome = response
        return pending.resolve(outcome)

    async def call(self, request: "WorkerRequest", *, timeout: "float | None" = None) -> "WorkerResponse":
        """Send ``request`` to the worker and wait for its response.

        Args:
            request: Routing or translation request.
            timeout: Seconds to wait for the response. ``None`` waits indefinitely.

        Raises:
            WorkerClosedError: If the channel is closed or closes while waiting.
            WorkerProtocolError: If the response does not match the request kind.
            TimeoutError: If ``timeout`` elapses; the request is abandoned.

        Returns:
            The response carrying the request's correlation id.
        """
        if self._closed:
            raise WorkerClosedError
        request_id = self._id_factory()
        if request_id in self._pending:
            msg = f"Correlation id {request_id!r} is already in flight"
            raise WorkerProtocolError(msg)

        pending = _PendingRequest(request.kind)
        self._pending[request_id] = pending
        try:
            try:
                await self._channel.send(encode_message(request_id, request))
            except (anyio.ClosedResourceError, anyio.BrokenResourceError) as e:
                raise WorkerClosedError(request_id) from e
            with anyio.fail_after(timeout):
                return await pending.wait()
        finally:
            self._pending.pop(request_id, None)


@asynccontextmanager
async def open_worker(options: "BridgeOptions", **kwargs: Any) -> "AsyncIterator[WorkerClient]":
    """Start the worker process configured by ``options`` and yield a client for it.

    The process lives until the context exits.

    Yields:
        A connected :class:`WorkerClient`.
    """
    channel = ProcessChannel(options.worker_command, cwd=options.project_root)
    await channel.start()
    async with WorkerClient(channel, **kwargs) as client:
        yield client
