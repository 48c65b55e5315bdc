"""Find the "reporting off" / "reporting on" marker lines of a source file."""

from __future__ import annotations

import dataclasses
import enum
import typing

if typing.TYPE_CHECKING:
    import re
    from collections.abc import Iterable, Iterator


class Direction(enum.Enum):
    """Whether a marker turns reporting off or back on."""

    OFF = "off"
    ON = "on"


@dataclasses.dataclass(frozen=True)
class Marker:
    """One raw marker occurrence found by the scanner."""

    line: int  # 0-indexed
    text: str
    direction: Direction


def scan_markers(
    lines: Iterable[str],
    off_pattern: re.Pattern[str] | None,
    on_pattern: re.Pattern[str] | None,
) -> Iterator[Marker]:
    """Yield every marker in *lines*, top to bottom.

    Each line is searched for the off pattern first and then the on pattern,
    so a line matching both yields an OFF marker followed by an ON marker.
    A pattern of ``None`` disables that direction.
    """
    candidates = ((off_pattern, Direction.OFF), (on_pattern, Direction.ON))
    directions = [(pattern, direction) for pattern, direction in candidates if pattern]
    for lineno, line_text in enumerate(lines):
        for pattern, direction in directions:
            match = pattern.search(line_text)
            if match:
                yield Marker(line=lineno, text=match.group(0), direction=direction)
