"""Marker-line suppression: reporting switched off and on by magic comments."""

from __future__ import annotations

import logging
import re

from hushline import config as hushline_config
from hushline import index as hushline_index
from hushline import tags as hushline_tags
from hushline.filters import base

log = logging.getLogger(__name__)


def _compile(name: str, pattern: str | None) -> re.Pattern[str] | None:
    """Compile an option's pattern, or return None when it is unset."""
    if pattern is None:
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        raise hushline_config.ConfigurationError(name, pattern, str(e)) from e


class SuppressionLine(base.Filter):
    """Suppress events after an "off" marker line until an "on" marker line.

    After an off marker, an event is suppressed if at least one configured
    scope template, expanded with the marker's capture groups, is found in
    the corresponding event field:

    - ``check_name_format`` in the check name (e.g. ``UnusedImports``)
    - ``message_format`` in the event message
    - ``module_id_format`` in the id of the module that produced the event

    Scopes are searched anywhere in the field, so ``$1`` expanding to
    ``MagicNumber`` also matches ``MagicNumberCheck``; use ``^$1$`` for an
    exact match.

    Example (the defaults):
        off_format        = "CHECKSTYLE (.+):OFF"
        on_format         = "CHECKSTYLE (.+):ON"
        check_name_format = "$1"

        // CHECKSTYLE MagicNumber:OFF
        int answer = 42;             <- MagicNumber suppressed here
        // CHECKSTYLE MagicNumber:ON

    The decision for an event derives from the nearest matching marker at or
    before its line, so repeated off markers do not need matching on
    markers.
    """

    def __init__(
        self,
        off_format: str | None = hushline_config.DEFAULT_OFF_FORMAT,
        on_format: str | None = hushline_config.DEFAULT_ON_FORMAT,
        check_name_format: str | None = hushline_config.DEFAULT_CHECK_NAME_FORMAT,
        message_format: str | None = None,
        module_id_format: str | None = None,
    ) -> None:
        """Validate and store the filter options.

        Args:
            off_format: Pattern of a line that turns reporting off.
            on_format: Pattern of a line that turns reporting back on.
            check_name_format: Scope template for check names.
            message_format: Scope template for event messages.
            module_id_format: Scope template for module ids.

        Raises:
            ConfigurationError: If a pattern or template does not compile,
                a template refers to a group a marker pattern lacks, or
                neither marker pattern is given.
        """
        if off_format is None and on_format is None:
            raise hushline_config.ConfigurationError(
                "off_format", "", "at least one of off_format and on_format is required"
            )
        self.off_pattern = _compile("off_format", off_format)
        self.on_pattern = _compile("on_format", on_format)
        self.templates = hushline_tags.Templates(
            check_name_format=check_name_format,
            message_format=message_format,
            module_id_format=module_id_format,
        )
        for name, template in self.templates.items():
            _compile(name, template)
            for pattern in (self.off_pattern, self.on_pattern):
                if pattern is not None:
                    hushline_tags.check_template_groups(template, pattern, name=name)
        if self.templates.is_empty():
            log.warning(
                "No check_name_format, message_format or module_id_format is set;"
                " marker lines will not suppress anything"
            )

        self._file: base.FileContext | None = None
        self._index: hushline_index.SuppressionIndex | None = None

    @property
    def index(self) -> hushline_index.SuppressionIndex | None:
        """The index of the file currently being filtered, if any."""
        return self._index

    def _index_for(self, file: base.FileContext) -> hushline_index.SuppressionIndex:
        """Return the index for *file*, rebuilding it on the first event of a file."""
        if self._index is None or (self._file is not file and self._file != file):
            self._file = None
            self._index = None
            index = hushline_index.SuppressionIndex.build(
                file.lines, self.off_pattern, self.on_pattern, self.templates
            )
            self._file = file
            self._index = index
            log.debug("Indexed %d suppression tag(s) in %s", len(index), file.path)
            for tag in index:
                log.debug("%s: %s", file.path, tag)
        return self._index

    def accept(self, event: base.AuditEvent) -> bool:
        """Return False if the nearest matching marker turned reporting off."""
        if event.message is None:
            return True  # structural event
        if event.file is None:
            return True
        match_tag = self._index_for(event.file).nearest_match_at_or_before(event)
        return match_tag is None or match_tag.is_on
