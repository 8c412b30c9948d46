"""llmreader.plugins — Capability contracts and the extraction-engine registry.

The pipeline only talks to three capabilities, each a ``runtime_checkable``
``Protocol`` so any conforming object can be swapped in without inheriting
from a base class::

    from llmreader import ArticlePipeline

    class UpperCaseSanitizer:
        def sanitize(self, html, options):
            return html.upper()

    pipeline = ArticlePipeline(sanitizer=UpperCaseSanitizer())

Extraction engines are additionally registered by name so front ends can pick
one from configuration::

    from llmreader import register_engine

    register_engine("mine", MyExtractor)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable

    from llmreader.extractors.main_content import ExtractionOptions, ParsedDocument
    from llmreader.items import ExtractedArticle

# ---------------------------------------------------------------------------
# Protocol definitions
# ---------------------------------------------------------------------------

@runtime_checkable
class ArticleExtractor(Protocol):
    """Locates the main article in a parsed document."""

    name: str

    def extract(
        self, document: ParsedDocument, options: ExtractionOptions,
    ) -> ExtractedArticle | None:
        """Return the article, or None when nothing article-shaped was found."""
        ...


@runtime_checkable
class HtmlSanitizer(Protocol):
    """Filters an HTML fragment down to safe elements and attributes."""

    def sanitize(self, html: str, options: dict[str, Any]) -> str:
        """Return the sanitized fragment for *html* under *options*."""
        ...


@runtime_checkable
class ReaderableCheck(Protocol):
    """Cheap pre-check: does the document look like an article at all?"""

    def __call__(self, document: ParsedDocument) -> bool:
        ...


# ---------------------------------------------------------------------------
# Engine registry
# ---------------------------------------------------------------------------

_engines: dict[str, Callable[[], ArticleExtractor]] = {}


def register_engine(name: str, factory: Callable[[], ArticleExtractor]) -> None:
    """Register an extractor *factory* under *name* (replacing any previous one)."""
    _engines[name] = factory


def get_engine(name: str) -> ArticleExtractor:
    """Instantiate the engine registered as *name*."""
    # Built-in engines register themselves on import.
    import llmreader.extractors.main_content  # noqa: F401

    try:
        factory = _engines[name]
    except KeyError:
        known = ", ".join(sorted(_engines)) or "none"
        raise ValueError(f"Unknown extraction engine {name!r} (known: {known})") from None
    return factory()


def get_engine_names() -> list[str]:
    import llmreader.extractors.main_content  # noqa: F401

    return sorted(_engines)


def unregister_engine(name: str) -> None:
    """Remove *name* from the registry. Primarily for use in tests."""
    _engines.pop(name, None)
