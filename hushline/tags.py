"""Compile marker occurrences into scope-aware suppression tags."""

from __future__ import annotations

import dataclasses
import re
import typing

from hushline import config as hushline_config
from hushline import markers

if typing.TYPE_CHECKING:
    from collections.abc import Iterator

    from hushline.filters import base

# Matches a back-reference into the marker match:  $0, $1, ... $12
_BACKREF_PAT = re.compile(r"\$(\d+)")


@dataclasses.dataclass(frozen=True)
class Templates:
    """The scope templates shared by every tag of a filter.

    Each template is a regular expression that may contain ``$n``
    back-references into the marker line's match. ``None`` leaves that scope
    unconfigured.
    """

    check_name_format: str | None = None
    message_format: str | None = None
    module_id_format: str | None = None

    def items(self) -> Iterator[tuple[str, str]]:
        """Yield ``(option name, template)`` for every configured template."""
        for field in dataclasses.fields(self):
            template = getattr(self, field.name)
            if template is not None:
                yield field.name, template

    def is_empty(self) -> bool:
        """Return True if no scope template is configured."""
        return next(self.items(), None) is None


@dataclasses.dataclass(frozen=True)
class Tag:
    """A compiled marker: its location, direction and scope regexes."""

    line: int  # 0-indexed
    direction: markers.Direction
    text: str
    check_name_regex: re.Pattern[str] | None = None
    message_regex: re.Pattern[str] | None = None
    module_id_regex: re.Pattern[str] | None = None

    @property
    def is_on(self) -> bool:
        """True if this tag turns reporting back on."""
        return self.direction is markers.Direction.ON

    def matches(self, event: base.AuditEvent) -> bool:
        """Return True if at least one of the scope regexes matches *event*.

        A tag without any scope regex matches nothing.
        """
        if self.check_name_regex is not None and self.check_name_regex.search(
            event.source_name
        ):
            return True
        if (
            self.message_regex is not None
            and event.message is not None
            and self.message_regex.search(event.message)
        ):
            return True
        return bool(
            self.module_id_regex is not None
            and event.module_id is not None
            and self.module_id_regex.search(event.module_id)
        )

    def __str__(self) -> str:
        return f"Tag[line={self.line}; {self.direction.name}; text={self.text!r}]"


def check_template_groups(
    template: str, pattern: re.Pattern[str], *, name: str
) -> None:
    """Verify every ``$n`` in *template* names a group that *pattern* captures.

    Raises:
        ConfigurationError: If a back-reference is out of range.
    """
    for ref in _BACKREF_PAT.finditer(template):
        index = int(ref.group(1))
        if index > pattern.groups:
            raise hushline_config.ConfigurationError(
                name,
                template,
                f"${index} refers past the {pattern.groups} group(s)"
                f" of marker pattern {pattern.pattern!r}",
            )


def expand_template(template: str, match: re.Match[str], *, name: str) -> str:
    """Substitute each ``$n`` in *template* with group ``n`` of *match*.

    Group 0 is the whole match. A group that did not take part in the match
    expands to the empty string.

    Raises:
        ConfigurationError: If ``n`` exceeds the number of groups of the
            pattern that produced *match*.
    """
    check_template_groups(template, match.re, name=name)
    return _BACKREF_PAT.sub(lambda ref: match.group(int(ref.group(1))) or "", template)


def compile_tag(
    marker: markers.Marker,
    line_text: str,
    templates: Templates,
    *,
    off_pattern: re.Pattern[str] | None,
    on_pattern: re.Pattern[str] | None,
) -> Tag:
    """Build the Tag for *marker*, expanding every template against its line.

    The direction's own pattern is re-run on the whole line to obtain the
    capture groups. If it does not match, templates are compiled unexpanded.

    Raises:
        ConfigurationError: If an expanded template is not a valid regex.
    """
    pattern = on_pattern if marker.direction is markers.Direction.ON else off_pattern
    match = pattern.search(line_text) if pattern is not None else None

    compiled: dict[str, re.Pattern[str]] = {}
    for name, template in templates.items():
        expanded = expand_template(template, match, name=name) if match else template
        try:
            compiled[name] = re.compile(expanded)
        except re.error as e:
            raise hushline_config.ConfigurationError(
                name,
                expanded,
                f"expanded from {template!r} at line {marker.line + 1}: {e}",
            ) from e

    return Tag(
        line=marker.line,
        direction=marker.direction,
        text=marker.text,
        check_name_regex=compiled.get("check_name_format"),
        message_regex=compiled.get("message_format"),
        module_id_regex=compiled.get("module_id_format"),
    )
