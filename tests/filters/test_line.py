"""Tests for hushline.filters.line: SuppressionLine."""

import logging

import pytest

from hushline import config as hushline_config
from hushline import index as hushline_index
from hushline.filters import base, line


def _file(lines: list[str], path: str = "Example.java") -> base.FileContext:
    return base.FileContext(path=path, lines=tuple(lines))


def _event(
    file: base.FileContext | None,
    lineno: int,
    source_name: str = "MagicNumber",
    message: str | None = "'42' is a magic number.",
    module_id: str | None = None,
) -> base.AuditEvent:
    return base.AuditEvent(
        file=file,
        line=lineno,
        column=0,
        source_name=source_name,
        message=message,
        module_id=module_id,
    )


def _suppression(**options) -> line.SuppressionLine:
    defaults = {
        "off_format": r"// SUPPRESS:\s*(\S+)",
        "on_format": r"// RESUME:\s*(\S+)",
        "check_name_format": "$1",
    }
    defaults.update(options)
    return line.SuppressionLine(**defaults)


# ---------------------------------------------------------------------------
# End-to-end: plain OFF / ON markers
# ---------------------------------------------------------------------------


class TestOffOnRegion:
    _LINES = ["a", "// OFF", "b", "// ON", "c"]

    def _filter(self) -> line.SuppressionLine:
        return line.SuppressionLine(
            off_format="// OFF", on_format="// ON", check_name_format=".*"
        )

    def test_inside_region_suppressed(self) -> None:
        file = _file(self._LINES)
        assert self._filter().accept(_event(file, 2, source_name="Anything")) is False

    def test_before_first_marker_accepted(self) -> None:
        file = _file(self._LINES)
        assert self._filter().accept(_event(file, 0)) is True

    def test_after_on_marker_accepted(self) -> None:
        file = _file(self._LINES)
        assert self._filter().accept(_event(file, 4)) is True

    def test_event_on_off_marker_line_suppressed(self) -> None:
        file = _file(self._LINES)
        assert self._filter().accept(_event(file, 1)) is False

    def test_event_on_on_marker_line_accepted(self) -> None:
        file = _file(self._LINES)
        assert self._filter().accept(_event(file, 3)) is True

    def test_event_past_end_of_file_uses_last_tag(self) -> None:
        file = _file(["// OFF"])
        assert self._filter().accept(_event(file, 10)) is False


# ---------------------------------------------------------------------------
# Scoped markers
# ---------------------------------------------------------------------------


class TestScopedSuppression:
    _LINES = [
        "import java.util.List;",
        "",
        "",
        "// SUPPRESS: UnusedImports",
        "import java.util.Map;",
        "int x = 42;",
        "",
        "",
        "",
        "",
        "// SUPPRESS: MagicNumber",
        "int y = 43;",
        "// RESUME: MagicNumber",
        "int z = 44;",
    ]

    def test_matching_check_suppressed(self) -> None:
        file = _file(self._LINES)
        assert _suppression().accept(_event(file, 4, source_name="UnusedImports")) is False

    def test_other_check_not_suppressed_by_earlier_tag(self) -> None:
        file = _file(self._LINES)
        assert _suppression().accept(_event(file, 5, source_name="MagicNumber")) is True

    def test_each_tag_suppresses_its_own_scope(self) -> None:
        file = _file(self._LINES)
        flt = _suppression()
        assert flt.accept(_event(file, 11, source_name="MagicNumber")) is False
        assert flt.accept(_event(file, 11, source_name="UnusedImports")) is False
        assert flt.accept(_event(file, 11, source_name="LineLength")) is True

    def test_resume_only_affects_its_scope(self) -> None:
        file = _file(self._LINES)
        flt = _suppression()
        assert flt.accept(_event(file, 13, source_name="MagicNumber")) is True
        assert flt.accept(_event(file, 13, source_name="UnusedImports")) is False

    def test_message_scope(self) -> None:
        file = _file(["// SUPPRESS: magic", "int x = 42;"])
        flt = _suppression(check_name_format=None, message_format="$1")
        assert flt.accept(_event(file, 1, message="'42' is a magic number.")) is False
        assert flt.accept(_event(file, 1, message="Line is longer than 100")) is True

    def test_module_id_scope(self) -> None:
        file = _file(["// SUPPRESS: longLines", "x"])
        flt = _suppression(check_name_format=None, module_id_format="^$1$")
        assert flt.accept(_event(file, 1, module_id="longLines")) is False
        assert flt.accept(_event(file, 1, module_id="other")) is True
        assert flt.accept(_event(file, 1, module_id=None)) is True

    def test_scope_found_anywhere_in_field(self) -> None:
        file = _file(["// SUPPRESS: MagicNumber", "int x = 42;"])
        flt = _suppression()
        assert flt.accept(_event(file, 1, source_name="MagicNumberCheck")) is False

    def test_anchored_scope_matches_exact_name_only(self) -> None:
        file = _file(["// SUPPRESS: MagicNumber", "int x = 42;"])
        flt = _suppression(check_name_format="^$1$")
        assert flt.accept(_event(file, 1, source_name="MagicNumber")) is False
        assert flt.accept(_event(file, 1, source_name="MagicNumberCheck")) is True


# ---------------------------------------------------------------------------
# Nearest matching tag wins
# ---------------------------------------------------------------------------


class TestNearestWins:
    def test_two_off_tags_without_on(self) -> None:
        file = _file(["// SUPPRESS: A", "x", "// SUPPRESS: A", "y"])
        flt = _suppression()
        assert flt.accept(_event(file, 1, source_name="A")) is False
        assert flt.accept(_event(file, 3, source_name="A")) is False

    def test_two_on_tags_without_off(self) -> None:
        file = _file(["// RESUME: A", "x", "// RESUME: A", "y"])
        flt = _suppression()
        assert flt.accept(_event(file, 1, source_name="A")) is True
        assert flt.accept(_event(file, 3, source_name="A")) is True

    def test_off_after_on_suppresses_again(self) -> None:
        file = _file(["// SUPPRESS: A", "// RESUME: A", "x", "// SUPPRESS: A", "y"])
        flt = _suppression()
        assert flt.accept(_event(file, 2, source_name="A")) is True
        assert flt.accept(_event(file, 4, source_name="A")) is False

    def test_off_and_on_on_same_line_resolves_to_on(self) -> None:
        file = _file(["// SUPPRESS: A // RESUME: A", "x"])
        assert _suppression().accept(_event(file, 1, source_name="A")) is True


# ---------------------------------------------------------------------------
# Structural events, missing files, unscoped configuration
# ---------------------------------------------------------------------------


class TestSpecialEvents:
    def test_event_without_message_always_accepted(self) -> None:
        file = _file(["// SUPPRESS: A", "x"])
        flt = _suppression()
        assert flt.accept(_event(file, 1, source_name="A", message=None)) is True
        assert flt.index is None

    def test_event_without_file_accepted(self) -> None:
        assert _suppression().accept(_event(None, 3)) is True

    def test_no_scope_templates_makes_markers_inert(self) -> None:
        file = _file(["// SUPPRESS: A", "x"])
        flt = _suppression(check_name_format=None)
        assert flt.accept(_event(file, 1, source_name="A")) is True

    def test_no_scope_templates_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="hushline.filters.line"):
            _suppression(check_name_format=None)
        assert "will not suppress anything" in caplog.text


# ---------------------------------------------------------------------------
# Per-file cache
# ---------------------------------------------------------------------------


class TestFileCache:
    def test_index_built_once_per_file(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[int] = []
        original_build = hushline_index.SuppressionIndex.build

        def counting_build(*args, **kwargs):
            calls.append(1)
            return original_build(*args, **kwargs)

        monkeypatch.setattr(hushline_index.SuppressionIndex, "build", counting_build)
        file = _file(["// SUPPRESS: A", "x"])
        flt = _suppression()
        first = flt.accept(_event(file, 1, source_name="A"))
        second = flt.accept(_event(file, 1, source_name="A"))
        assert first is second is False
        assert len(calls) == 1

    def test_equal_context_reuses_index(self) -> None:
        flt = _suppression()
        flt.accept(_event(_file(["// SUPPRESS: A", "x"]), 1, source_name="A"))
        cached = flt.index
        flt.accept(_event(_file(["// SUPPRESS: A", "x"]), 1, source_name="A"))
        assert flt.index is cached

    def test_new_file_rebuilds_index(self) -> None:
        flt = _suppression()
        first = _file(["// SUPPRESS: A", "x"], path="First.java")
        second = _file(["x", "y"], path="Second.java")
        assert flt.accept(_event(first, 1, source_name="A")) is False
        first_index = flt.index
        assert flt.accept(_event(second, 1, source_name="A")) is True
        assert flt.index is not first_index
        assert len(flt.index) == 0

    def test_switching_back_rebuilds_again(self) -> None:
        flt = _suppression()
        first = _file(["// SUPPRESS: A", "x"], path="First.java")
        second = _file(["x", "y"], path="Second.java")
        flt.accept(_event(first, 1, source_name="A"))
        flt.accept(_event(second, 1, source_name="A"))
        assert flt.accept(_event(first, 1, source_name="A")) is False
        assert len(flt.index) == 1

    def test_changed_lines_same_path_rebuilds(self) -> None:
        flt = _suppression()
        assert flt.accept(_event(_file(["// SUPPRESS: A", "x"]), 1, source_name="A")) is False
        assert flt.accept(_event(_file(["// RESUME: A", "x"]), 1, source_name="A")) is True

    def test_rebuild_logs_each_tag(self, caplog: pytest.LogCaptureFixture) -> None:
        file = _file(["// SUPPRESS: A", "x", "// RESUME: A"])
        with caplog.at_level(logging.DEBUG, logger="hushline.filters.line"):
            _suppression().accept(_event(file, 1, source_name="A"))
        assert "Indexed 2 suppression tag(s) in Example.java" in caplog.text
        assert "Example.java: Tag[line=0; OFF; text='// SUPPRESS: A']" in caplog.text
        assert "Example.java: Tag[line=2; ON; text='// RESUME: A']" in caplog.text


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------


class TestConfigurationErrors:
    def test_invalid_off_format(self) -> None:
        with pytest.raises(hushline_config.ConfigurationError) as exc_info:
            _suppression(off_format="(unclosed")
        assert exc_info.value.option == "off_format"
        assert exc_info.value.value == "(unclosed"

    def test_invalid_on_format(self) -> None:
        with pytest.raises(hushline_config.ConfigurationError, match="on_format"):
            _suppression(on_format="[")

    def test_invalid_raw_template(self) -> None:
        with pytest.raises(hushline_config.ConfigurationError, match="message_format"):
            _suppression(message_format="$1(")

    def test_backreference_out_of_range(self) -> None:
        with pytest.raises(hushline_config.ConfigurationError, match=r"\$2"):
            _suppression(check_name_format="$2")

    def test_backreference_checked_against_on_pattern(self) -> None:
        with pytest.raises(hushline_config.ConfigurationError, match="RESUME"):
            _suppression(
                off_format=r"// SUPPRESS: (\S+) (\S+)",
                on_format=r"// RESUME",
                check_name_format="$2",
            )

    def test_both_marker_patterns_missing(self) -> None:
        with pytest.raises(hushline_config.ConfigurationError):
            _suppression(off_format=None, on_format=None)

    def test_single_marker_pattern_allowed(self) -> None:
        file = _file(["// SUPPRESS: A", "x"])
        flt = _suppression(on_format=None)
        assert flt.accept(_event(file, 1, source_name="A")) is False

    def test_invalid_expanded_template_propagates_from_accept(self) -> None:
        file = _file(["// SUPPRESS: Broken[", "x"])
        flt = _suppression()
        with pytest.raises(hushline_config.ConfigurationError) as exc_info:
            flt.accept(_event(file, 1))
        assert exc_info.value.value == "Broken["
        assert flt.index is None


class TestDefaults:
    def test_checkstyle_style_markers(self) -> None:
        file = _file(
            [
                "// CHECKSTYLE MagicNumber:OFF",
                "int x = 42;",
                "// CHECKSTYLE MagicNumber:ON",
                "int y = 43;",
            ]
        )
        flt = line.SuppressionLine()
        assert flt.accept(_event(file, 1)) is False
        assert flt.accept(_event(file, 3)) is True
        assert flt.accept(_event(file, 1, source_name="LineLength")) is True
