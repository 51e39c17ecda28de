# tests/unit/test_templates.py
"""Tests for message template parsing and rendering."""

import pytest

from logtiming.templates import MessageTemplate, PropertyToken, TextToken, format_value


class TestParse:
    def test_plain_text_has_no_properties(self) -> None:
        template = MessageTemplate.parse("Nothing to see")

        assert template.tokens == (TextToken("Nothing to see"),)
        assert template.properties == ()

    def test_properties_are_indexed_in_order(self) -> None:
        template = MessageTemplate.parse("Moved {Src} to {Dst}")

        assert [(p.name, p.index) for p in template.properties] == [("Src", 0), ("Dst", 1)]

    def test_format_and_alignment(self) -> None:
        (prop,) = MessageTemplate.parse("{Elapsed,8:0.0}").properties

        assert prop == PropertyToken(name="Elapsed", index=0, raw="{Elapsed,8:0.0}", format="0.0", alignment=8)

    def test_destructuring_prefix_is_ignored(self) -> None:
        template = MessageTemplate.parse("{@Order} {$Id}")

        assert [p.name for p in template.properties] == ["Order", "Id"]

    def test_escaped_braces_are_literal(self) -> None:
        template = MessageTemplate.parse("{{literal}} {Value}")

        assert template.render([1]) == "{literal} 1"
        assert [p.name for p in template.properties] == ["Value"]

    def test_unterminated_hole_is_literal(self) -> None:
        template = MessageTemplate.parse("Broken {Hole")

        assert template.properties == ()
        assert template.render(["x"]) == "Broken {Hole"

    def test_parse_is_cached(self) -> None:
        assert MessageTemplate.parse("Cached {X}") is MessageTemplate.parse("Cached {X}")


class TestRender:
    def test_binds_positionally(self) -> None:
        template = MessageTemplate.parse("Saved {Count} rows to {Table}")

        assert template.render([3, "orders"]) == "Saved 3 rows to orders"

    def test_missing_arguments_render_hole(self) -> None:
        template = MessageTemplate.parse("{A} and {B}")

        assert template.render([1]) == "1 and {B}"

    def test_surplus_arguments_ignored(self) -> None:
        assert MessageTemplate.parse("{A}").render([1, 2, 3]) == "1"

    def test_alignment(self) -> None:
        assert MessageTemplate.parse("[{A,4}]").render(["x"]) == "[   x]"
        assert MessageTemplate.parse("[{A,-4}]").render(["x"]) == "[x   ]"

    def test_one_decimal_fixed_point(self) -> None:
        template = MessageTemplate.parse("{Outcome} in {Elapsed:0.0} ms")

        assert template.render(["completed", 12.345]) == "completed in 12.3 ms"
        assert template.render(["completed", 0]) == "completed in 0.0 ms"


class TestBind:
    def test_bind_returns_named_values(self) -> None:
        template = MessageTemplate.parse("{Outcome} in {Elapsed:0.0} ms")

        assert template.bind(["completed", 1.25]) == {"Outcome": "completed", "Elapsed": 1.25}

    def test_bind_omits_unbound_holes(self) -> None:
        assert MessageTemplate.parse("{A} {B}").bind(["a"]) == {"A": "a"}


class TestFormatValue:
    @pytest.mark.parametrize(
        ("value", "fmt", "expected"),
        [
            (1.25, None, "1.25"),
            (1.25, "0.0", "1.2"),
            (7, "0.00", "7.00"),
            (1.5, "0.##", "1.5"),
            (2.0, "0.##", "2"),
            (1.5, "0.0#", "1.5"),
            (1234.5678, "0", "1235"),
            (3.14159, ".3f", "3.142"),
            (42, "05d", "00042"),
        ],
    )
    def test_numeric_formats(self, value: float, fmt: str | None, expected: str) -> None:
        assert format_value(value, fmt) == expected

    def test_unsupported_format_falls_back_to_str(self) -> None:
        assert format_value("text", "0.0") == "text"
        assert format_value("text", "d") == "text"
        assert format_value(object, ".2f").startswith("<class")

    def test_bool_not_treated_as_number(self) -> None:
        assert format_value(True, "0.0") == "True"
