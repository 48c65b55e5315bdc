"""All hushline filters."""

from hushline.filters import base, line, regex

__all__ = ["base", "line", "regex"]
