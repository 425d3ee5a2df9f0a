"""Elm Symfony Bridge exception classes."""

__all__ = [
    "ConsoleExecutionError",
    "ConsoleOutputError",
    "ConsoleNotFoundError",
    "ElmBridgeError",
    "GenerationError",
    "WorkerClosedError",
    "WorkerProcessError",
    "WorkerProtocolError",
]


class ElmBridgeError(Exception):
    """Base exception for Elm Symfony Bridge related errors."""


class ConsoleNotFoundError(ElmBridgeError):
    """Raised when the Symfony console binary is not found."""

    def __init__(self, console_path: str) -> None:
        super().__init__(f"Symfony console {console_path!r} not found. Is the project root configured correctly?")


class ConsoleExecutionError(ElmBridgeError):
    """Raised when a Symfony console command fails."""

    def __init__(self, command: list[str], return_code: int, stderr: str) -> None:
        super().__init__(f"Command {command!r} failed with return code {return_code}.\nStderr: {stderr}")
        self.command = command
        self.return_code = return_code
        self.stderr = stderr


class WorkerProcessError(ElmBridgeError):
    """Raised when the transpilation worker fails to start or stop."""

    def __init__(
        self,
        message: str,
        command: "list[str] | None" = None,
        exit_code: "int | None" = None,
        stderr: "str | None" = None,
    ) -> None:
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr


class WorkerProtocolError(ElmBridgeError):
    """Raised when the worker answers with a message that does not fit the request."""


class WorkerClosedError(ElmBridgeError):
    """Raised when the worker channel closes before a response arrived."""

    def __init__(self, request_id: "str | None" = None) -> None:
        if request_id is None:
            super().__init__("Worker channel is closed.")
        else:
            super().__init__(f"Worker channel closed before request {request_id!r} was answered.")
        self.request_id = request_id


class GenerationError(ElmBridgeError):
    """Raised when the worker reports a failed transpilation.

    The worker's error description is kept verbatim in ``error``.
    """

    def __init__(self, artifact: str, error: str) -> None:
        super().__init__(f"Generation of {artifact} failed: {error}")
        self.artifact = artifact
        self.error = error


class ConsoleOutputError(ElmBridgeError):
    """Raised when a Symfony console command prints output that cannot be parsed."""

    def __init__(self, command: list[str], detail: str) -> None:
        super().__init__(f"Command {command!r} returned unparseable output: {detail}")
        self.command = command
