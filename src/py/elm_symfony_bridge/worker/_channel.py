"""Transports carrying worker frames."""

import logging
import math
from contextlib import suppress
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import anyio
from anyio.streams.buffered import BufferedByteReceiveStream

from elm_symfony_bridge.exceptions import WorkerProcessError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from anyio.abc import ObjectReceiveStream, ObjectSendStream, Process

__all__ = ("MAX_FRAME_SIZE", "MemoryChannel", "ProcessChannel", "WorkerChannel", "memory_channel_pair")

logger = logging.getLogger("elm_symfony_bridge")

MAX_FRAME_SIZE = 64 * 1024 * 1024


@runtime_checkable
class WorkerChannel(Protocol):
    """Bidirectional frame channel to a worker.

    ``receive`` raises :class:`anyio.EndOfStream` once the worker side is gone.
    """

    async def send(self, frame: bytes) -> None: ...

    async def receive(self) -> bytes: ...

    async def aclose(self) -> None: ...


class MemoryChannel:
    """In-process channel backed by anyio memory object streams."""

    def __init__(self, send_stream: "ObjectSendStream[bytes]", receive_stream: "ObjectReceiveStream[bytes]") -> None:
        self._send_stream = send_stream
        self._receive_stream = receive_stream

    async def send(self, frame: bytes) -> None:
        await self._send_stream.send(frame)

    async def receive(self) -> bytes:
        return await self._receive_stream.receive()

    async def aclose(self) -> None:
        await self._send_stream.aclose()
        await self._receive_stream.aclose()


def memory_channel_pair() -> "tuple[MemoryChannel, MemoryChannel]":
    """Create two connected in-process channels.

    Returns:
        ``(client_side, worker_side)``: frames sent on one are received on the other.
    """
    to_worker_send, to_worker_receive = anyio.create_memory_object_stream[bytes](max_buffer_size=math.inf)
    to_client_send, to_client_receive = anyio.create_memory_object_stream[bytes](max_buffer_size=math.inf)
    return MemoryChannel(to_worker_send, to_client_receive), MemoryChannel(to_client_send, to_worker_receive)


class ProcessChannel:
    """Channel to a worker subprocess exchanging newline-delimited JSON frames.

    Frames are written under a lock so concurrent senders never interleave their
    bytes on the worker's stdin. The worker's stderr is inherited for live output.
    """

    def __init__(self, command: "Sequence[str]", cwd: "Path | str | None" = None) -> None:
        self.command = list(command)
        self.cwd = Path(cwd) if cwd is not None else None
        self._process: "Process | None" = None
        self._reader: "BufferedByteReceiveStream | None" = None
        self._send_lock: "anyio.Lock | None" = None

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def start(self) -> None:
        """Launch the worker process.

        Raises:
            WorkerProcessError: If the process cannot be started.
        """
        if self.is_running:
            return
        try:
            self._process = await anyio.open_process(self.command, cwd=self.cwd, stderr=None)
        except OSError as e:
            msg = f"Failed to start worker process: {e!s}"
            raise WorkerProcessError(msg, command=self.command) from e
        if self._process.stdout is None or self._process.stdin is None:  # pragma: no cover
            msg = "Worker process has no stdio pipes"
            raise WorkerProcessError(msg, command=self.command)
        self._reader = BufferedByteReceiveStream(self._process.stdout)
        self._send_lock = anyio.Lock()
        logger.debug("Worker process started: %s", " ".join(self.command))

    async def send(self, frame: bytes) -> None:
        if self._process is None or self._process.stdin is None or self._send_lock is None:
            raise anyio.ClosedResourceError
        async with self._send_lock:
            await self._process.stdin.send(frame + b"\n")

    async def receive(self) -> bytes:
        if self._reader is None:
            raise anyio.EndOfStream
        try:
            return await self._reader.receive_until(b"\n", MAX_FRAME_SIZE)
        except anyio.IncompleteRead as e:
            raise anyio.EndOfStream from e
        except anyio.DelimiterNotFound as e:
            logger.error("Worker frame exceeds %d bytes, closing the channel", MAX_FRAME_SIZE)
            raise anyio.EndOfStream from e

    async def aclose(self, timeout: float = 5.0) -> None:
        """Close stdin and wait for the worker to exit, killing it after ``timeout`` seconds."""
        process, self._process = self._process, None
        self._reader = None
        if process is None:
            return
        if process.stdin is not None:
            with suppress(anyio.BrokenResourceError, anyio.ClosedResourceError):
                await process.stdin.aclose()
        with anyio.move_on_after(timeout) as scope:
            await process.wait()
        if scope.cancelled_caught:
            logger.warning("Worker process did not exit within %ss, killing it", timeout)
            process.kill()
            await process.wait()
        await process.aclose()
