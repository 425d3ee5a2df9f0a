"""Content-hash change detection.

The cache remembers, per artifact key, the digest of the last content that was
successfully processed. Re-running a generation with unchanged sources is then
a no-op, which is the common case in watch mode.
"""

import hashlib
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

__all__ = ("ChangeCache", "content_digest")

logger = logging.getLogger("elm_symfony_bridge")

T = TypeVar("T")


def content_digest(content: "str | bytes") -> str:
    """Return the SHA-256 hex digest of ``content``.

    Returns:
        A 64 character hexadecimal digest of the full content.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


class ChangeCache:
    """Maps artifact keys to the digest of their last processed content.

    Entries are only written by :meth:`when_changed` after its task succeeded and
    live as long as the cache instance.
    """

    __slots__ = ("_digests",)

    def __init__(self) -> None:
        self._digests: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._digests)

    def __contains__(self, key: object) -> bool:
        return key in self._digests

    def digest_for(self, key: str) -> "str | None":
        """Return the stored digest for ``key``, if any."""
        return self._digests.get(key)

    def is_changed(self, key: str, content: "str | bytes") -> bool:
        return self._digests.get(key) != content_digest(content)

    async def when_changed(
        self, key: str, content: "str | bytes", task: "Callable[[], Awaitable[T]]"
    ) -> "tuple[bool, T | None]":
        """Run ``task`` only if ``content`` differs from the last processed content for ``key``.

        The digest is stored only after ``task`` completed without raising, so a failed
        task is attempted again on the next call with the same content.

        Args:
            key: Artifact identity.
            content: Source content for the artifact.
            task: Coroutine function doing the work for the new content.

        Returns:
            ``(ran, result)``: whether the task ran and its result (``None`` when skipped).
        """
        digest = content_digest(content)
        if self._digests.get(key) == digest:
            logger.debug("%s unchanged, skipping", key)
            return False, None

        result = await task()
        self._digests[key] = digest
        return True, result
