"""Tests for llmreader.sanitize."""

from __future__ import annotations

import pytest

from llmreader.items import ExtractedArticle
from llmreader.options import filter_sanitize_options
from llmreader.pipeline import ArticlePipeline
from llmreader.plugins import HtmlSanitizer
from llmreader.sanitize import DomSanitizer, merge_sanitize_options
from llmreader.settings import DEFAULT_SANITIZE_OPTIONS


def _clean(html: str, raw_options=None) -> str:
    options = merge_sanitize_options(filter_sanitize_options(raw_options or {}))
    return DomSanitizer().sanitize(html, options)


# ---------------------------------------------------------------------------
# Option merging
# ---------------------------------------------------------------------------

class TestMergeOptions:
    def test_empty_gives_defaults(self):
        assert merge_sanitize_options({}) == DEFAULT_SANITIZE_OPTIONS
        assert merge_sanitize_options(None) == DEFAULT_SANITIZE_OPTIONS

    def test_caller_key_replaces_default(self):
        merged = merge_sanitize_options({"FORBID_TAGS": ["img"]})
        assert merged["FORBID_TAGS"] == ["img"]
        assert merged["FORBID_ATTR"] == ["onerror", "onload"]

    def test_defaults_not_mutated(self):
        merged = merge_sanitize_options({"ADD_TAGS": ["iframe"]})
        merged["FORBID_TAGS"] = []
        assert DEFAULT_SANITIZE_OPTIONS["FORBID_TAGS"] == ["script", "style"]
        assert "ADD_TAGS" not in DEFAULT_SANITIZE_OPTIONS

    def test_in_place_mutation_does_not_reach_defaults(self):
        merged = merge_sanitize_options({})
        merged["FORBID_TAGS"].append("p")
        merged["FORBID_ATTR"].append("href")
        merged["USE_PROFILES"]["svg"] = True
        assert DEFAULT_SANITIZE_OPTIONS["FORBID_TAGS"] == ["script", "style"]
        assert DEFAULT_SANITIZE_OPTIONS["FORBID_ATTR"] == ["onerror", "onload"]
        assert DEFAULT_SANITIZE_OPTIONS["USE_PROFILES"] == {"html": True}
        assert merge_sanitize_options({})["FORBID_TAGS"] == ["script", "style"]

    def test_caller_values_are_copied(self):
        filtered = {"ADD_TAGS": ["iframe"]}
        merged = merge_sanitize_options(filtered)
        merged["ADD_TAGS"].append("object")
        assert filtered == {"ADD_TAGS": ["iframe"]}

    def test_mutating_sanitizer_leaves_later_requests_alone(self):
        class MutatingSanitizer:
            def sanitize(self, html, options):
                options["FORBID_TAGS"].append("p")
                return DomSanitizer().sanitize(html, options)

        class StaticExtractor:
            name = "static"

            def extract(self, document, options):
                return ExtractedArticle(content_html="<p>kept</p>", raw_text="kept", length=4)

        ArticlePipeline(
            extractor=StaticExtractor(), sanitizer=MutatingSanitizer(), readerable=lambda _d: True,
        ).process("<p>x</p>")
        assert _clean("<p>kept</p>") == "<p>kept</p>"


# ---------------------------------------------------------------------------
# Default policy
# ---------------------------------------------------------------------------

class TestDefaultPolicy:
    def test_satisfies_protocol(self):
        assert isinstance(DomSanitizer(), HtmlSanitizer)

    @pytest.mark.parametrize("html", ["", "   \n"])
    def test_blank_input(self, html):
        assert DomSanitizer().sanitize(html, merge_sanitize_options({})) == ""

    def test_script_removed_with_content(self):
        out = _clean("<p>Hello<script>alert(1)</script> world</p>")
        assert "script" not in out
        assert "alert" not in out
        assert out == "<p>Hello world</p>"

    def test_style_removed_with_content(self):
        out = _clean("<p>intro</p><div><style>.a { color: red }</style>kept</div>")
        assert "<style" not in out
        assert "color" not in out
        assert "kept" in out

    def test_event_handlers_removed(self):
        out = _clean('<p><img src="/x.png" alt="x" onerror="alert(1)" onload="y()"></p>')
        assert "onerror" not in out
        assert "onload" not in out
        assert 'src="/x.png"' in out
        assert 'alt="x"' in out

    def test_unlisted_attribute_removed(self):
        out = _clean('<p onclick="go()" foo="bar" title="t">x</p>')
        assert out == '<p title="t">x</p>'

    def test_data_and_aria_attributes_kept(self):
        out = _clean('<p data-id="7" aria-label="note">x</p>')
        assert 'data-id="7"' in out
        assert 'aria-label="note"' in out

    def test_comments_removed(self):
        assert _clean("<p>a<!-- secret --></p>") == "<p>a</p>"

    def test_unknown_tag_unwrapped_keeping_text(self):
        assert _clean("<p><blorp>inner</blorp> text</p>") == "<p>inner text</p>"

    def test_iframe_dropped_by_default(self):
        out = _clean('<p>x</p><iframe src="https://example.com/v">fallback</iframe>')
        assert "iframe" not in out
        assert "fallback" not in out


class TestUriAttributes:
    @pytest.mark.parametrize(
        "href",
        ["javascript:alert(1)", "JaVaScRiPt:alert(1)", "java\tscript:alert(1)", "vbscript:x"],
    )
    def test_script_schemes_stripped(self, href):
        out = _clean(f'<p><a href="{href}">x</a></p>')
        assert out == "<p><a>x</a></p>"

    @pytest.mark.parametrize(
        "href",
        ["https://example.com/a", "/relative/path", "#anchor", "mailto:a@example.com", "page.html"],
    )
    def test_safe_targets_kept(self, href):
        out = _clean(f'<p><a href="{href}">x</a></p>')
        assert "href=" in out

    def test_data_uri_allowed_on_images(self):
        out = _clean('<p><img src="data:image/png;base64,AAAA"></p>')
        assert 'src="data:image/png;base64,AAAA"' in out

    def test_data_uri_stripped_from_links(self):
        out = _clean('<p><a href="data:text/html,hi">x</a></p>')
        assert "data:" not in out


# ---------------------------------------------------------------------------
# Caller options
# ---------------------------------------------------------------------------

class TestCallerOptions:
    def test_forbid_tags_replaces_default_list(self):
        # The caller list replaces ["script", "style"], so style is allowed again
        out = _clean(
            "<p>intro</p><div><style>.a{}</style><img src='/a.png'>body</div>",
            {"FORBID_TAGS": ["img"]},
        )
        assert "<style>" in out
        assert "<img" not in out
        assert "body" in out

    def test_script_still_removed_when_forbid_tags_overridden(self):
        out = _clean("<p>x<script>bad()</script></p>", {"FORBID_TAGS": ["img"]})
        assert "bad()" not in out

    def test_forbid_attr_is_treated_as_add_attr(self):
        out = _clean('<p><a href="/x" onclick="go()">x</a></p>', {"FORBID_ATTR": ["onclick"]})
        assert 'onclick="go()"' in out

    def test_add_tags_list(self):
        out = _clean('<p>x</p><iframe src="https://example.com/v"></iframe>', {"ADD_TAGS": ["iframe"]})
        assert '<iframe src="https://example.com/v">' in out

    def test_add_tags_mapping_respects_truthiness(self):
        html = '<p>x</p><iframe src="https://example.com/v"></iframe>'
        assert "<iframe" in _clean(html, {"ADD_TAGS": {"iframe": True}})
        assert "<iframe" not in _clean(html, {"ADD_TAGS": {"iframe": False}})

    def test_add_attr(self):
        out = _clean('<p><a href="/x" target="_blank">x</a></p>', {"ADD_ATTR": ["target"]})
        assert 'target="_blank"' in out

    def test_profile_without_html_unwraps_html_tags(self):
        out = _clean("<p>Hello <b>there</b></p>", {"USE_PROFILES": {"svg": True}})
        assert out == "Hello there"


def test_article_fragment(article_html):
    out = _clean(article_html)
    assert "window.tracker" not in out
    assert "onerror" not in out
    assert "font-family" not in out
    assert "Language models read tokens" in out
    assert 'src="/img/diagram.png"' in out
