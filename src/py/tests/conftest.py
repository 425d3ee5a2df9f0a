from collections.abc import AsyncIterator, Callable, Generator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Optional

import anyio
import msgspec
import pytest

from elm_symfony_bridge.config import BridgeOptions, resolve_options
from elm_symfony_bridge.worker import MemoryChannel, WorkerClient, memory_channel_pair

here = Path(__file__).parent


# Environment variables that change the default option layer - clear before each test
_BRIDGE_ENV_VARS = [
    "ELM_BRIDGE_WATCH",
    "ELM_BRIDGE_DEV_MODE",
    "NODE_ENV",
]


@pytest.fixture(autouse=True)
def clean_bridge_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear bridge-related environment variables before each test for isolation."""
    for var in _BRIDGE_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


Handler = Callable[[dict[str, Any]], Optional[dict[str, Any]]]


def module_name_for(catalog: str) -> str:
    """Module name the fake worker returns for a catalog path (``.../<domain>/<lang>.json``)."""
    return f"Trans/{Path(catalog).parent.name.capitalize()}.elm"


def default_handler(message: "dict[str, Any]") -> "dict[str, Any]":
    """Answer every request successfully."""
    if "routing" in message:
        return {
            "id": message["id"],
            "type": "routing",
            "succeeded": True,
            "content": "module Routing exposing (..)\n",
        }
    request = message["translation"]
    return {
        "id": message["id"],
        "type": "translation",
        "succeeded": True,
        "file": {
            "name": module_name_for(request["name"]),
            "content": f"module {Path(module_name_for(request['name'])).stem} exposing (..)\n",
        },
    }


class FakeWorker:
    """Worker side of a memory channel pair, answering with ``handler``.

    A handler returning None leaves the request unanswered.
    """

    def __init__(self, channel: MemoryChannel, handler: "Handler | None" = None) -> None:
        self.channel = channel
        self.handler = handler or default_handler
        self.requests: list[dict[str, Any]] = []

    @property
    def routing_requests(self) -> "list[dict[str, Any]]":
        return [message["routing"] for message in self.requests if "routing" in message]

    @property
    def translation_requests(self) -> "list[dict[str, Any]]":
        return [message["translation"] for message in self.requests if "translation" in message]

    async def serve(self) -> None:
        while True:
            try:
                frame = await self.channel.receive()
            except (anyio.EndOfStream, anyio.ClosedResourceError):
                return
            message = msgspec.json.decode(frame)
            self.requests.append(message)
            response = self.handler(message)
            if response is not None:
                await self.channel.send(msgspec.json.encode(response))


@asynccontextmanager
async def _running_worker(handler: "Handler | None" = None) -> "AsyncIterator[tuple[WorkerClient, FakeWorker]]":
    client_side, worker_side = memory_channel_pair()
    fake = FakeWorker(worker_side, handler)
    async with anyio.create_task_group() as tg:
        tg.start_soon(fake.serve)
        async with WorkerClient(client_side) as client:
            yield client, fake
        tg.cancel_scope.cancel()


@pytest.fixture
def worker_handler() -> Handler:
    """Handler answering every request successfully."""
    return default_handler


@pytest.fixture
def running_worker() -> Callable[..., Any]:
    """Factory for an in-process worker: ``async with running_worker(handler) as (client, fake)``."""
    return _running_worker


class FakeConsole:
    """Stand-in for :class:`~elm_symfony_bridge.executor.SymfonyConsole`.

    ``catalogs`` maps paths relative to the dump target to their content; they are
    written on every :meth:`dump_translations` call.
    """

    def __init__(self, project_root: Path, routing: str = '{"home": {"path": "/"}}') -> None:
        self.project_root = project_root
        self.routing = routing
        self.catalogs: dict[str, str] = {}
        self.calls: list[str] = []

    async def query_routing(self) -> str:
        self.calls.append("debug:router")
        return self.routing

    async def dump_translations(self, target: "Path | str") -> None:
        self.calls.append("bazinga:js-translation:dump")
        for relative, content in self.catalogs.items():
            path = Path(target) / "translations" / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def fake_console(project_root: Path) -> FakeConsole:
    return FakeConsole(project_root)


@pytest.fixture
def bridge_options(project_root: Path) -> BridgeOptions:
    return resolve_options({"project_root": project_root, "url_prefix": "/index.php"}, None)
