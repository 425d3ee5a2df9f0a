"""Outcome of a generation run."""

from dataclasses import dataclass, field

__all__ = ("GenerationResult",)


@dataclass
class GenerationResult:
    """Result of one generation run."""

    written_files: list[str] = field(default_factory=list)  # pyright: ignore[reportUnknownVariableType]
    """Files that were written (content changed)."""

    unchanged_files: list[str] = field(default_factory=list)  # pyright: ignore[reportUnknownVariableType]
    """Files the worker regenerated with identical content."""

    skipped: list[str] = field(default_factory=list)  # pyright: ignore[reportUnknownVariableType]
    """Artifacts whose source content did not change since the last successful run."""

    errors: dict[str, str] = field(default_factory=dict)  # pyright: ignore[reportUnknownVariableType]
    """Error description per failed artifact."""

    @property
    def succeeded(self) -> bool:
        return not self.errors

    def add_error(self, artifact: str, error: BaseException) -> None:
        self.errors[artifact] = str(error)
