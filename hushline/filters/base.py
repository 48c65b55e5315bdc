"""Base abstractions for hushline filters."""

from __future__ import annotations

import dataclasses
import pathlib
from abc import ABC, abstractmethod


@dataclasses.dataclass(frozen=True)
class FileContext:
    """The source file an audit event was produced for.

    Filters cache per-file state keyed on this value; a different
    ``FileContext`` invalidates the cache.
    """

    path: str
    lines: tuple[str, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.lines, tuple):
            object.__setattr__(self, "lines", tuple(self.lines))

    @classmethod
    def from_text(cls, path: str, text: str) -> FileContext:
        """Build a context from the full text of a file."""
        return cls(path=path, lines=tuple(text.splitlines()))

    @classmethod
    def read(cls, path: str | pathlib.Path) -> FileContext:
        """Read *path* as UTF-8 and build its context.

        Raises:
            OSError: If the file cannot be read.
        """
        text = pathlib.Path(path).read_text(encoding="utf-8")
        return cls.from_text(str(path), text)

    def line(self, index: int) -> str | None:
        """Return the zero-based line *index*, or None if out of range."""
        if 0 <= index < len(self.lines):
            return self.lines[index]
        return None


@dataclasses.dataclass(frozen=True)
class AuditEvent:
    """A single diagnostic emitted by a check while auditing a file."""

    file: FileContext | None
    line: int      # 0-indexed, same numbering as Tag.line
    column: int
    source_name: str
    message: str | None   # None marks a structural, unsuppressible event
    module_id: str | None = None


class Filter(ABC):
    """Abstract base class for all hushline filters."""

    @abstractmethod
    def accept(self, event: AuditEvent) -> bool:
        """Decide whether *event* is reported.

        Args:
            event: The audit event to decide on.

        Returns:
            True if the event should be reported, False if it is suppressed.
        """
