"""Same-line suppression: events on lines matching a regex are dropped."""

from __future__ import annotations

import re

from hushline import config as hushline_config
from hushline.filters import base


def _compile(name: str, pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise hushline_config.ConfigurationError(name, pattern, str(e)) from e


class SuppressionRegex(base.Filter):
    """Suppress events whose own source line matches ``line_format``.

    On such a line an event is suppressed if at least one of the configured
    scope regexes is found in the corresponding event field.  Unlike
    ``SuppressionLine`` the scope regexes are used as given; there is no
    back-reference expansion.

    Allowed:
        String url = "http://example.com";

    Suppressed (line_format = "NOPMD", check_name_format = "LineLength"):
        String url = "http://example.com/a/very/long/path"; // NOPMD
    """

    def __init__(
        self,
        line_format: str,
        check_name_format: str | None = None,
        message_format: str | None = None,
        module_id_format: str | None = None,
    ) -> None:
        """Compile the line pattern and the scope regexes.

        Raises:
            ConfigurationError: If any of the patterns does not compile.
        """
        self.line_regex = _compile("line_format", line_format)
        self.check_name_regex = (
            _compile("check_name_format", check_name_format)
            if check_name_format is not None
            else None
        )
        self.message_regex = (
            _compile("message_format", message_format)
            if message_format is not None
            else None
        )
        self.module_id_regex = (
            _compile("module_id_format", module_id_format)
            if module_id_format is not None
            else None
        )

    def _matches_scope(self, event: base.AuditEvent) -> bool:
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

    def accept(self, event: base.AuditEvent) -> bool:
        """Return False if the event's line matches and its scope matches."""
        if event.message is None or event.file is None:
            return True
        line_text = event.file.line(event.line)
        if line_text is None or not self.line_regex.search(line_text):
            return True
        return not self._matches_scope(event)
