"""File output helpers for generated Elm modules."""

import hashlib
from pathlib import Path

import anyio

__all__ = ("fmt_path", "write_if_changed")


def fmt_path(path: "Path | str") -> str:
    """Format path for display, using relative path when possible.

    Returns:
        The path relative to the working directory, or unchanged when outside it.
    """
    path = Path(path)
    try:
        return str(path.absolute().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


async def write_if_changed(path: "Path | str", content: "bytes | str", *, encoding: str = "utf-8") -> bool:
    """Write content to file only if it differs from the existing content.

    Uses hash comparison to avoid unnecessary writes that would trigger file
    watchers and rebuilds in the bundler. Parent directories are created as needed.

    Args:
        path: The file path to write to.
        content: The content to write (bytes or str).
        encoding: Encoding for string content.

    Raises:
        OSError: If the file cannot be written.

    Returns:
        True if file was written (content changed), False if skipped (unchanged).
    """
    content_bytes = content.encode(encoding) if isinstance(content, str) else content
    target = anyio.Path(path)

    if await target.exists():
        try:
            existing = await target.read_bytes()
        except OSError:
            existing = None
        if existing is not None and hashlib.sha256(existing).digest() == hashlib.sha256(content_bytes).digest():
            return False

    await target.parent.mkdir(parents=True, exist_ok=True)
    await target.write_bytes(content_bytes)
    return True
