"""Symfony console executor.

The routing table, the container parameters and the translation dump all come
from the project's ``bin/console``. This module runs it asynchronously and turns
its failures into :mod:`elm_symfony_bridge.exceptions` errors.
"""

import logging
import platform
from pathlib import Path
from typing import TYPE_CHECKING, Any

import anyio
import msgspec

from elm_symfony_bridge.config._constants import DEFAULT_CONSOLE_PATH
from elm_symfony_bridge.exceptions import ConsoleExecutionError, ConsoleNotFoundError, ConsoleOutputError

if TYPE_CHECKING:
    from elm_symfony_bridge.config import BridgeOptions

__all__ = ("SymfonyConsole",)

logger = logging.getLogger("elm_symfony_bridge")

_TRANSLATION_DUMP_SERVICE = "bazinga.jstranslation.dump_command"


class SymfonyConsole:
    """Runs Symfony console commands for one project.

    Every command receives ``--env=dev`` or ``--env=prod`` depending on the mode.
    """

    def __init__(
        self, project_root: "Path | str", *, console_path: "Path | str" = DEFAULT_CONSOLE_PATH, dev: bool = True
    ) -> None:
        self.project_root = Path(project_root)
        self.console_path = Path(console_path)
        self.dev = dev

    @classmethod
    def from_options(cls, options: "BridgeOptions") -> "SymfonyConsole":
        return cls(options.project_root, console_path=options.console_path, dev=options.dev)

    @property
    def env(self) -> str:
        return "dev" if self.dev else "prod"

    def _resolve_executable(self) -> str:
        executable = self.console_path if self.console_path.is_absolute() else self.project_root / self.console_path
        if not executable.exists():
            raise ConsoleNotFoundError(str(executable))
        return str(executable)

    def build_command(self, args: "list[str]") -> "list[str]":
        """Build the full command line for ``args``.

        Returns:
            The console executable followed by ``args`` and the ``--env`` flag.
        """
        return [self._resolve_executable(), *args, f"--env={self.env}"]

    async def run_command(self, args: "list[str]") -> str:
        """Run a console command and return its standard output.

        Args:
            args: Console arguments, e.g. ``["debug:router", "--format=json"]``.

        Raises:
            ConsoleExecutionError: If the command exits with a non-zero status.

        Returns:
            The decoded standard output.
        """
        command = self.build_command(args)
        logger.debug("Running %s", " ".join(command))
        if platform.system() == "Windows":
            # bin/console is a PHP script without an executable bit on Windows
            command = ["php", *command]
        process = await anyio.run_process(command, cwd=self.project_root, check=False)
        if process.returncode != 0:
            stderr = process.stderr.decode(errors="replace") if process.stderr else ""
            raise ConsoleExecutionError(command, process.returncode, stderr)
        return process.stdout.decode(errors="replace")

    async def query_config(self, key: str) -> Any:
        """Read a container parameter.

        Returns:
            The parameter value, or ``None`` when it is unset.
        """
        args = ["debug:container", f"--parameter={key}", "--format=json"]
        output = await self.run_command(args)
        try:
            payload = msgspec.json.decode(output)
        except msgspec.DecodeError as e:
            raise ConsoleOutputError(args, str(e)) from e
        if not isinstance(payload, dict):
            raise ConsoleOutputError(args, "expected a JSON object")
        return payload.get(key) or None

    async def has_translation_bundle(self) -> bool:
        """Check whether the Bazinga JS translation bundle is installed.

        Returns:
            True when the translation dump command is registered in the container.
        """
        try:
            await self.run_command(["debug:container", _TRANSLATION_DUMP_SERVICE, "--format=json"])
        except ConsoleExecutionError:
            return False
        return True

    async def query_routing(self) -> str:
        """Dump the routing table as JSON.

        PHP serializes an empty route collection as ``[]``; anything that is not a JSON
        object is reported as an empty object.

        Returns:
            The routing table JSON document.
        """
        output = await self.run_command(["debug:router", "--format=json"])
        return output if output.startswith("{") else "{}"

    async def dump_translations(self, target: "Path | str") -> None:
        """Dump the translation catalogs as JSON files below ``target``."""
        await self.run_command(["bazinga:js-translation:dump", str(target)])
