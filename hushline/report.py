"""Parse plain-text linter output into audit events.

Two line formats are understood, both with 1-based line numbers:

    path:12:4: IMP001 Import the module directly        (ruff, flake8 style)
    [WARN] path:12:4: Line is longer than 100 [LineLength]   (checkstyle plain)

In the first format the source token may carry a module id in brackets,
``LineLength[longLines]``.  Checkstyle prints the module id in place of the
check name when the module has one, so its bracket token is used as both the
source name and the module id.  The column is optional in both.
"""

from __future__ import annotations

import logging
import re
import typing

from hushline.filters import base

if typing.TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

log = logging.getLogger(__name__)

_CHECKSTYLE_PAT = re.compile(
    r"^\[(?P<severity>[A-Z]+)\]\s+(?P<path>.+?):(?P<line>\d+):(?:(?P<col>\d+):)?\s*"
    r"(?P<message>.*?)\s*\[(?P<source>[^\]\s]+)\]\s*$"
)
_LINTER_PAT = re.compile(
    r"^(?P<path>.+?):(?P<line>\d+):(?:(?P<col>\d+):)?\s*"
    r"(?P<source>[^\s\[]+)(?:\[(?P<module>[^\]]*)\])?(?:\s+(?P<message>.*))?$"
)


class FileCache:
    """Reads each referenced source file at most once."""

    def __init__(self) -> None:
        self._files: dict[str, base.FileContext | None] = {}

    def get(self, path: str) -> base.FileContext | None:
        """Return the context for *path*, or None if it cannot be read."""
        if path not in self._files:
            try:
                self._files[path] = base.FileContext.read(path)
            except (OSError, UnicodeDecodeError) as e:
                log.warning(
                    "Cannot read source file %s (%s); not filtering it.", path, e
                )
                self._files[path] = None
        return self._files[path]


def parse_line(text: str, files: FileCache) -> base.AuditEvent | None:
    """Parse one line of linter output.

    Args:
        text: A single report line, without its line terminator.
        files: Source of the file contexts the events refer to.

    Returns:
        The audit event, or None if the line is not a finding.
    """
    match = _CHECKSTYLE_PAT.match(text)
    if match is not None:
        module_id = match.group("source")
    else:
        match = _LINTER_PAT.match(text)
        if match is None:
            return None
        module_id = match.group("module") or None

    return base.AuditEvent(
        file=files.get(match.group("path")),
        line=int(match.group("line")) - 1,
        column=int(match.group("col") or 0),
        source_name=match.group("source"),
        message=match.group("message") or "",
        module_id=module_id,
    )


def parse_report(
    lines: Iterable[str], files: FileCache
) -> Iterator[tuple[str, base.AuditEvent | None]]:
    """Yield ``(original line, event or None)`` for every report line."""
    for raw in lines:
        text = raw.rstrip("\r\n")
        yield text, parse_line(text, files)
