"""Position-ordered index of the suppression tags of one file."""

from __future__ import annotations

import bisect
import typing

from hushline import markers
from hushline import tags as hushline_tags

if typing.TYPE_CHECKING:
    import re
    from collections.abc import Iterable, Iterator, Sequence

    from hushline.filters import base


class SuppressionIndex:
    """Tags of one file, in scan order (non-decreasing by line)."""

    def __init__(self, tags: Iterable[hushline_tags.Tag] = ()) -> None:
        """Initialize from tags already in scan order.

        Args:
            tags: Compiled tags, sorted by line.

        Raises:
            ValueError: If *tags* are not sorted by line.
        """
        self._tags = tuple(tags)
        if any(prev.line > tag.line for prev, tag in zip(self._tags, self._tags[1:])):
            msg = "tags must be ordered by line"
            raise ValueError(msg)

    @classmethod
    def build(
        cls,
        lines: Sequence[str],
        off_pattern: re.Pattern[str] | None,
        on_pattern: re.Pattern[str] | None,
        templates: hushline_tags.Templates,
    ) -> SuppressionIndex:
        """Scan *lines* for markers and compile each into a Tag.

        Raises:
            ConfigurationError: If an expanded template is not a valid regex.
        """
        return cls(
            hushline_tags.compile_tag(
                marker,
                lines[marker.line],
                templates,
                off_pattern=off_pattern,
                on_pattern=on_pattern,
            )
            for marker in markers.scan_markers(lines, off_pattern, on_pattern)
        )

    @property
    def tags(self) -> tuple[hushline_tags.Tag, ...]:
        return self._tags

    def __len__(self) -> int:
        return len(self._tags)

    def __iter__(self) -> Iterator[hushline_tags.Tag]:
        return iter(self._tags)

    def nearest_match_at_or_before(
        self, event: base.AuditEvent
    ) -> hushline_tags.Tag | None:
        """Return the last tag at or before the event's line that matches it.

        Tags on the event's own line are included. Only matching tags count,
        so two OFF tags in a row behave like one; the nearest one decides.
        """
        cutoff = bisect.bisect_right(self._tags, event.line, key=lambda tag: tag.line)
        for tag in reversed(self._tags[:cutoff]):
            if tag.matches(event):
                return tag
        return None
