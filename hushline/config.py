"""Load hushline configuration from pyproject.toml."""

from __future__ import annotations

import dataclasses
import logging
import pathlib
import tomllib
import typing

if typing.TYPE_CHECKING:
    from hushline.filters import base

log = logging.getLogger(__name__)

DEFAULT_OFF_FORMAT = "CHECKSTYLE (.+):OFF"
DEFAULT_ON_FORMAT = "CHECKSTYLE (.+):ON"
DEFAULT_CHECK_NAME_FORMAT = "$1"

_LINE_OPTIONS = (
    "off_format",
    "on_format",
    "check_name_format",
    "message_format",
    "module_id_format",
)
_REGEX_OPTIONS = (
    "line_format",
    "check_name_format",
    "message_format",
    "module_id_format",
)


class ConfigurationError(ValueError):
    """A marker pattern or scope template is not usable.

    Attributes:
        option: Name of the offending option, e.g. ``check_name_format``.
        value: The string that failed, after any back-reference expansion.
    """

    def __init__(self, option: str, value: str, reason: str | None = None) -> None:
        self.option = option
        self.value = value
        message = f"invalid {option} {value!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


@dataclasses.dataclass(frozen=True)
class RegexOptions:
    """Options of one ``[[tool.hushline.line_regex]]`` table."""

    line_format: str
    check_name_format: str | None = None
    message_format: str | None = None
    module_id_format: str | None = None


@dataclasses.dataclass(frozen=True)
class Config:
    """Resolved hushline configuration.

    Attributes:
        off_format: Marker pattern that turns reporting off.
        on_format: Marker pattern that turns reporting back on.
        check_name_format: Scope template matched against check names.
        message_format: Scope template matched against event messages.
        module_id_format: Scope template matched against module ids.
        line_regex: Additional same-line suppression filters.
    """

    off_format: str | None = DEFAULT_OFF_FORMAT
    on_format: str | None = DEFAULT_ON_FORMAT
    check_name_format: str | None = DEFAULT_CHECK_NAME_FORMAT
    message_format: str | None = None
    module_id_format: str | None = None
    line_regex: tuple[RegexOptions, ...] = ()


def _find_pyproject(start: pathlib.Path) -> pathlib.Path | None:
    """Walk up from *start* to find the nearest pyproject.toml."""
    for directory in [start, *start.parents]:
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def _read_options(
    section: dict[str, object],
    names: tuple[str, ...],
    where: str,
) -> dict[str, str | None]:
    """Pick the string options in *names* out of a TOML table.

    An empty string disables the option. Values of any other type are
    dropped with a warning.
    """
    options: dict[str, str | None] = {}
    for name in names:
        if name not in section:
            continue
        value = section[name]
        if not isinstance(value, str):
            log.warning("Ignoring %s.%s: expected a string, got %r", where, name, value)
            continue
        options[name] = value or None
    return options


def load_config(start: pathlib.Path | None = None) -> Config:
    """Return the Config from the nearest pyproject.toml, or defaults.

    Reads ``[tool.hushline]`` from the first ``pyproject.toml`` found by
    walking up from *start* (defaults to ``Path.cwd()``).  Returns a
    default Config if no file is found, the file cannot be parsed, or the
    section is absent.  Patterns are not validated here; see
    ``build_filters``.

    Args:
        start: Directory to begin the upward search.  Defaults to cwd.

    Returns:
        A Config reflecting the options present in the file.
    """
    search_root = start if start is not None else pathlib.Path.cwd()
    pyproject = _find_pyproject(search_root)
    if pyproject is None:
        return Config()

    try:
        with pyproject.open("rb") as fh:
            data = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as e:
        log.warning("Failed to load %s (%s). Using defaults.", pyproject, e)
        return Config()

    section = data.get("tool", {}).get("hushline", {})
    if not isinstance(section, dict):
        return Config()

    line_options = _read_options(section, _LINE_OPTIONS, "tool.hushline")

    regex_tables = section.get("line_regex", [])
    if not isinstance(regex_tables, list):
        log.warning("Ignoring tool.hushline.line_regex: expected an array of tables")
        regex_tables = []
    line_regex: list[RegexOptions] = []
    for position, table in enumerate(regex_tables):
        where = f"tool.hushline.line_regex[{position}]"
        if not isinstance(table, dict):
            log.warning("Ignoring %s: expected a table", where)
            continue
        opts = _read_options(table, _REGEX_OPTIONS, where)
        line_format = opts.pop("line_format", None)
        if line_format is None:
            log.warning("Ignoring %s: line_format is required", where)
            continue
        line_regex.append(RegexOptions(line_format=line_format, **opts))

    return Config(**line_options, line_regex=tuple(line_regex))


def build_filters(config: Config) -> list[base.Filter]:
    """Instantiate every filter described by *config*, in order.

    The marker-line filter comes first, followed by one line-regex filter
    per ``line_regex`` table.

    Raises:
        ConfigurationError: If any pattern or template is invalid.
    """
    from hushline.filters import line, regex  # noqa: PLC0415

    filters: list[base.Filter] = []
    if config.off_format is not None or config.on_format is not None:
        filters.append(
            line.SuppressionLine(
                off_format=config.off_format,
                on_format=config.on_format,
                check_name_format=config.check_name_format,
                message_format=config.message_format,
                module_id_format=config.module_id_format,
            )
        )
    filters.extend(
        regex.SuppressionRegex(
            line_format=opts.line_format,
            check_name_format=opts.check_name_format,
            message_format=opts.message_format,
            module_id_format=opts.module_id_format,
        )
        for opts in config.line_regex
    )
    return filters
