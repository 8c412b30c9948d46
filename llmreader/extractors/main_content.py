"""Article extraction engines.

readability  readability-lxml   (Mozilla Readability algorithm, default)
trafilatura  trafilatura        (second-opinion extractor)

Both engines share the same contract (:class:`llmreader.plugins.ArticleExtractor`):
take a :class:`ParsedDocument` plus :class:`ExtractionOptions`, return an
:class:`~llmreader.items.ExtractedArticle` or ``None`` when the page holds
nothing article-shaped.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from bs4 import BeautifulSoup, Tag

from llmreader.extractors.metadata import extract_article_metadata
from llmreader.fragments import fragment_to_html, parse_fragment
from llmreader.items import ExtractedArticle
from llmreader.language import resolve_language
from llmreader.plugins import register_engine

logger = logging.getLogger(__name__)

# Paragraph-like elements shorter than this are not scored (readability-lxml default)
_MIN_TEXT_LENGTH = 25

# A <div> holding none of these is scored like a paragraph
_DIV_TO_P_ELEMS: frozenset[str] = frozenset(
    {"a", "blockquote", "dl", "div", "img", "ol", "p", "pre", "table", "ul"},
)

_DEFAULT_CLASSES_TO_PRESERVE: tuple[str, ...] = ("page",)


class ExtractionAbortedError(ValueError):
    """The document is larger than the caller allowed us to parse."""


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ParsedDocument:
    """A navigable document tree anchored at a base URL."""

    html: str
    url: str
    soup: BeautifulSoup


def parse_document(html: str, url: str) -> ParsedDocument:
    return ParsedDocument(html=html, url=url, soup=BeautifulSoup(html, "lxml"))


@dataclass(frozen=True)
class ExtractionOptions:
    """Engine parameters built from an allow-listed readability payload.

    ``max_elems_to_parse == 0`` means unlimited; ``nb_top_candidates is None``
    traces every candidate; ``char_threshold is None`` leaves the engine's own
    default in place.  An infinite number in the payload maps onto the
    matching "no limit" value.
    """

    debug: bool = False
    max_elems_to_parse: int = 0
    nb_top_candidates: int | None = 5
    char_threshold: int | None = None
    keep_classes: bool = False
    classes_to_preserve: tuple[str, ...] = _DEFAULT_CLASSES_TO_PRESERVE
    disable_json_ld: bool = False

    @classmethod
    def from_filtered(cls, filtered: dict[str, Any]) -> ExtractionOptions:
        """Build options from the output of ``filter_readability_options``."""
        kwargs: dict[str, Any] = {}
        if "debug" in filtered:
            kwargs["debug"] = filtered["debug"]
        if "maxElemsToParse" in filtered:
            kwargs["max_elems_to_parse"] = _finite_int(filtered["maxElemsToParse"]) or 0
        if "nbTopCandidates" in filtered:
            kwargs["nb_top_candidates"] = _finite_int(filtered["nbTopCandidates"])
        if "charThreshold" in filtered:
            kwargs["char_threshold"] = _finite_int(filtered["charThreshold"])
        if "keepClasses" in filtered:
            kwargs["keep_classes"] = filtered["keepClasses"]
        if "classesToPreserve" in filtered:
            extra = [c for c in filtered["classesToPreserve"] if c not in _DEFAULT_CLASSES_TO_PRESERVE]
            kwargs["classes_to_preserve"] = _DEFAULT_CLASSES_TO_PRESERVE + tuple(extra)
        if "disableJSONLD" in filtered:
            kwargs["disable_json_ld"] = filtered["disableJSONLD"]
        return cls(**kwargs)


def _finite_int(value: float) -> int | None:
    """``int(value)``, or None for infinity."""
    if not math.isfinite(value):
        return None
    return int(value)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _text_length(tag: Tag) -> int:
    return len(" ".join(tag.get_text(" ").split()))


def _is_misused_div(tag: Tag) -> bool:
    return tag.name == "div" and tag.find(sorted(_DIV_TO_P_ELEMS)) is None


def paragraph_candidates(
    soup: BeautifulSoup, min_text_length: int = _MIN_TEXT_LENGTH,
) -> list[tuple[int, Tag]]:
    """Return ``(text_length, element)`` for every scoreable paragraph, longest first.

    Scoreable means ``<p>``, ``<pre>``, ``<td>`` or a ``<div>`` used as a
    paragraph, holding at least *min_text_length* characters of text.
    """
    candidates: list[tuple[int, Tag]] = []
    for el in soup.find_all(["p", "pre", "td", "div"]):
        if not isinstance(el, Tag):
            continue
        if el.name == "div" and not _is_misused_div(el):
            continue
        length = _text_length(el)
        if length >= min_text_length:
            candidates.append((length, el))
    candidates.sort(key=lambda item: item[0], reverse=True)
    return candidates


def check_element_budget(document: ParsedDocument, options: ExtractionOptions) -> None:
    """Raise :class:`ExtractionAbortedError` when the document is over budget."""
    if options.max_elems_to_parse <= 0:
        return
    count = len(document.soup.find_all(True))
    if count > options.max_elems_to_parse:
        raise ExtractionAbortedError(f"Aborting parsing document; {count} elements found")


def clean_classes(container: Tag, classes_to_preserve: tuple[str, ...]) -> None:
    """Drop ``class`` attributes in-place, keeping only preserved class names."""
    preserve = set(classes_to_preserve)
    for el in container.find_all(True):
        classes = el.get("class")
        if classes is None:
            continue
        if isinstance(classes, str):
            classes = classes.split()
        kept = [c for c in classes if c in preserve]
        if kept:
            el["class"] = kept
        else:
            del el["class"]


def _first_paragraph(container: Tag) -> str | None:
    for p in container.find_all("p"):
        text = " ".join(p.get_text(" ").split())
        if text:
            return text
    return None


def build_article(
    document: ParsedDocument,
    options: ExtractionOptions,
    content_html: str,
    fallback_title: str | None = None,
) -> ExtractedArticle:
    """Assemble an :class:`ExtractedArticle` from engine output and page metadata."""
    _, container = parse_fragment(content_html or "")
    if not options.keep_classes:
        clean_classes(container, options.classes_to_preserve)

    raw_text = container.get_text()
    if raw_text.strip():
        content_html = fragment_to_html(container)
    else:
        content_html = ""

    meta = extract_article_metadata(document.soup, use_json_ld=not options.disable_json_ld)
    return ExtractedArticle(
        title=meta["title"] or fallback_title,
        byline=meta["byline"],
        direction=meta["direction"],
        language=resolve_language(meta["language"], raw_text),
        content_html=content_html or None,
        raw_text=raw_text,
        length=len(raw_text),
        excerpt=meta["excerpt"] or _first_paragraph(container),
        site_name=meta["site_name"],
        published_time=meta["published_time"],
    )


# ---------------------------------------------------------------------------
# Engine: readability-lxml
# ---------------------------------------------------------------------------

class ReadabilityExtractor:
    """Mozilla Readability via readability-lxml."""

    name = "readability"

    def __init__(self, min_text_length: int = _MIN_TEXT_LENGTH) -> None:
        self.min_text_length = min_text_length

    def extract(
        self, document: ParsedDocument, options: ExtractionOptions,
    ) -> ExtractedArticle | None:
        log = logger.info if options.debug else logger.debug

        check_element_budget(document, options)

        candidates = paragraph_candidates(document.soup, self.min_text_length)
        if not candidates:
            log("No scoreable paragraphs in %s", document.url)
            return None
        for length, el in candidates[: options.nb_top_candidates]:
            log("Candidate <%s class=%r> with %d chars", el.name, el.get("class"), length)

        from readability import Document  # type: ignore[import-untyped]

        kwargs: dict[str, Any] = {"url": document.url, "min_text_length": self.min_text_length}
        if options.char_threshold is not None:
            kwargs["retry_length"] = options.char_threshold
        doc = Document(document.html, **kwargs)
        content = doc.summary(html_partial=True)
        log("readability produced %d chars of HTML for %s", len(content or ""), document.url)

        return build_article(document, options, content or "", fallback_title=doc.short_title())


# ---------------------------------------------------------------------------
# Engine: trafilatura
# ---------------------------------------------------------------------------

class TrafilaturaExtractor:
    """trafilatura in HTML output mode."""

    name = "trafilatura"

    def extract(
        self, document: ParsedDocument, options: ExtractionOptions,
    ) -> ExtractedArticle | None:
        log = logger.info if options.debug else logger.debug

        check_element_budget(document, options)

        import trafilatura  # type: ignore[import-untyped]
        from trafilatura.settings import use_config  # type: ignore[import-untyped]

        config = use_config()
        if options.char_threshold is not None:
            config.set("DEFAULT", "MIN_EXTRACTED_SIZE", str(options.char_threshold))

        content = trafilatura.extract(
            document.html,
            url=document.url,
            output_format="html",
            include_links=True,
            include_images=True,
            include_tables=True,
            include_comments=False,
            favor_recall=True,
            config=config,
        )
        if not content:
            log("trafilatura found no article in %s", document.url)
            return None
        log("trafilatura produced %d chars of HTML for %s", len(content), document.url)

        title_tag = document.soup.find("title")
        fallback_title = title_tag.get_text().strip() if isinstance(title_tag, Tag) else None
        return build_article(document, options, content, fallback_title=fallback_title)


register_engine(ReadabilityExtractor.name, ReadabilityExtractor)
register_engine(TrafilaturaExtractor.name, TrafilaturaExtractor)
