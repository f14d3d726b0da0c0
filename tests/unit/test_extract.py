"""Unit tests for balanced-span extraction and scan-located rewriting."""

from __future__ import annotations

from wikistyle.text.extract import extract_spans, outermost_spans, rewrite_spans


def test_extract_spans_returns_only_the_outermost_nested_span() -> None:
    """Nested templates should yield one span covering the whole construct."""

    spans = extract_spans("{{", "}}", "{{a|{{b}}}}")

    assert [(span.start, span.end, span.text) for span in spans] == [(0, 11, "{{a|{{b}}}}")]


def test_extract_spans_finds_sibling_spans_in_order() -> None:
    """Adjacent top-level spans should be returned in document order."""

    spans = extract_spans("{{", "}}", "a {{x}} b {{y}}")

    assert [(span.start, span.end, span.text) for span in spans] == [
        (2, 7, "{{x}}"),
        (10, 15, "{{y}}"),
    ]


def test_extract_spans_skips_unbalanced_openings() -> None:
    """An opening delimiter that never closes should not produce a partial span."""

    spans = extract_spans("{{", "}}", "{{a {{b}}")

    assert [span.text for span in spans] == ["{{b}}"]


def test_extract_spans_returns_empty_list_without_delimiters() -> None:
    """Text without the opening delimiter should yield no spans."""

    assert extract_spans("{{", "}}", "plain text") == []
    assert extract_spans("", "}}", "{{a}}") == []


def test_extract_spans_supports_unequal_multi_character_delimiters() -> None:
    """Table spans close on a newline-prefixed delimiter of a different length."""

    text = "{|\n| a\n|}\ntext"

    spans = extract_spans("{|", "\n|}", text)

    assert [span.text for span in spans] == ["{|\n| a\n|}"]
    assert spans[0].starts_line(text) is True
    assert spans[0].ends_line(text) is True


def test_span_line_boundaries_reflect_surrounding_text() -> None:
    """Line-boundary helpers should inspect the characters around the span."""

    text = "x {{a}}\n{{b}}"
    inline, block = extract_spans("{{", "}}", text)

    assert inline.starts_line(text) is False
    assert inline.ends_line(text) is True
    assert block.starts_line(text) is True
    assert block.ends_line(text) is True


def test_outermost_spans_drops_spans_inside_other_constructs() -> None:
    """Merging several delimiter pairs should keep only non-overlapping outer spans."""

    text = "{{a|[[b]]}} [[c]]"

    spans = outermost_spans([extract_spans("{{", "}}", text), extract_spans("[[", "]]", text)])

    assert [span.text for span in spans] == ["{{a|[[b]]}}", "[[c]]"]


def test_rewrite_spans_replaces_only_located_occurrences() -> None:
    """Identical text outside the located spans should stay untouched."""

    text = "{{a}} and {{a}}"
    first_only = extract_spans("{{", "}}", text)[:1]

    assert rewrite_spans(text, first_only, str.upper) == "{{A}} and {{a}}"
    assert rewrite_spans(text, [], str.upper) == text
