"""Tests for llmreader.normalize: HTML fragment to LLM-ready text."""

from __future__ import annotations

import re

import pytest

from llmreader.normalize import RULES, apply_rule, normalize_html_to_text

_TAG_RE = re.compile(r"<[^>]+>")


def _rule(name: str):
    return next(rule for rule in RULES if rule.name == name)


# ---------------------------------------------------------------------------
# Empty input
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("html", ["", "   ", "\n\t \n"])
def test_blank_input_returns_empty(html):
    assert normalize_html_to_text(html) == ""


def test_non_string_input_returns_empty():
    assert normalize_html_to_text(None) == ""  # type: ignore[arg-type]


def test_only_tags_returns_empty():
    assert normalize_html_to_text("<div><p></p></div>") == ""


# ---------------------------------------------------------------------------
# End-to-end conversions
# ---------------------------------------------------------------------------

class TestNormalize:
    def test_paragraph_and_heading_with_sentence_repair(self):
        assert normalize_html_to_text("<p>Hello.World</p><h1>Title</h1>") == "Hello. World\n\nTitle"

    def test_list_items_on_single_lines(self):
        assert normalize_html_to_text("<ul><li>One</li><li>Two</li></ul>") == "One\nTwo"

    def test_line_breaks(self):
        html = "<p>Line one<br>Line two<br/>Line three<BR class='x'></p>"
        assert normalize_html_to_text(html) == "Line one\nLine two\nLine three"

    def test_horizontal_rule_marker(self):
        assert normalize_html_to_text("<p>Above</p><hr><p>Below</p>") == "Above\n\n---\nBelow"

    def test_nested_blocks_collapse_to_one_blank_line(self):
        html = "<div><section><div><p>A</p></div></section></div><p>B</p>"
        assert normalize_html_to_text(html) == "A\n\nB"

    def test_block_containers(self):
        html = (
            "<article><header>Head</header><blockquote>Quote</blockquote>"
            "<figure><img src='x.png'><figcaption>Cap</figcaption></figure>"
            "<pre>code</pre></article>"
        )
        assert normalize_html_to_text(html) == "Head\n\nQuote\n\nCap\n\ncode"

    def test_inline_tags_removed(self):
        html = "<p>Some <b>bold</b> and <a href='/x'>a link</a> here</p>"
        assert normalize_html_to_text(html) == "Some bold and a link here"

    def test_multiple_spaces_collapsed(self):
        assert normalize_html_to_text("<p>Too    many   spaces</p>") == "Too many spaces"

    def test_indentation_after_paragraph_dropped(self):
        assert normalize_html_to_text("<p>First</p>\n    <p>Second</p>") == "First\n\nSecond"

    def test_sentence_punctuation_spacing(self):
        assert normalize_html_to_text("<p>Wait?Yes!Done.</p>") == "Wait? Yes! Done."

    def test_heading_levels_case_insensitive(self):
        assert normalize_html_to_text("<H2>One</H2><h6>Two</h6>") == "One\n\nTwo"

    def test_entities_left_encoded(self):
        assert normalize_html_to_text("<p>a &lt;b&gt; c</p>") == "a &lt;b&gt; c"


# ---------------------------------------------------------------------------
# Output guarantees
# ---------------------------------------------------------------------------

_SAMPLES = [
    "<p>Hello</p>",
    "<div class='x'><p>One <em>two</em></p><ul><li>a</li><li>b</li></ul></div>",
    "<h1>T</h1><p>x<br>y</p><hr/><p>z</p>",
    "<table><tr><td>cell</td></tr></table><img src='a.png' alt='a'>",
    "text with no tags at all",
    "<p>broken <b>markup</p>",
]


@pytest.mark.parametrize("html", _SAMPLES)
def test_output_contains_no_tags(html):
    assert _TAG_RE.search(normalize_html_to_text(html)) is None


@pytest.mark.parametrize("html", _SAMPLES)
def test_output_has_no_runs_of_three_newlines(html):
    out = normalize_html_to_text(html)
    assert "\n\n\n" not in out
    assert out == out.strip()


@pytest.mark.parametrize(
    "text",
    [
        "Hello. World\n\nTitle",
        "One\nTwo",
        "Para one.\n\nLine a\nLine b\n\n---\nEnd",
        "Single line without punctuation",
    ],
)
def test_normalized_text_is_a_fixed_point(text):
    assert normalize_html_to_text(text) == text


def test_normalize_twice_on_text_is_stable():
    once = normalize_html_to_text("<p>A.B</p><p>C</p><ul><li>x</li><li>y</li></ul>")
    assert normalize_html_to_text(once) == once


# ---------------------------------------------------------------------------
# Individual rules
# ---------------------------------------------------------------------------

class TestRules:
    def test_block_rules_run_before_tag_strip(self):
        names = [rule.name for rule in RULES]
        strip_at = names.index("strip_tags")
        for name in ("line_breaks", "headings", "paragraphs", "divs",
                     "block_containers", "list_items", "horizontal_rules"):
            assert names.index(name) < strip_at

    def test_whitespace_rules_run_after_tag_strip(self):
        names = [rule.name for rule in RULES]
        assert names[names.index("strip_tags") + 1] == "trim"
        assert names[-1] == "sentence_spacing"

    def test_strip_tags(self):
        assert apply_rule(_rule("strip_tags"), "<p class='a'>x</p><br/>") == "x"

    def test_trim(self):
        assert apply_rule(_rule("trim"), "\n  x y \n\n") == "x y"

    def test_collapse_blank_runs(self):
        assert apply_rule(_rule("collapse_blank_runs"), "a\n \n\n \nb") == "a\n\nb"

    def test_newline_runs_keep_single_and_double(self):
        rule = _rule("newline_runs")
        assert apply_rule(rule, "a\n  b") == "a\nb"
        assert apply_rule(rule, "a\n \n  b") == "a\n\nb"

    def test_collapse_blank_lines(self):
        assert apply_rule(_rule("collapse_blank_lines"), "a\n \n \nb") == "a\n\nb"

    def test_sentence_spacing_leaves_existing_space(self):
        rule = _rule("sentence_spacing")
        assert apply_rule(rule, "One. Two") == "One. Two"
        assert apply_rule(rule, "One.Two") == "One. Two"
