"""llmreader.pipeline — HTML in, sanitized article and LLM-ready text out.

Stages, per call and with nothing shared between calls::

    validate → filter options → parse → readerable advisory → extract
             → sanitize (security floor + caller options) → normalize

Basic usage::

    from llmreader import process

    result = process(html, url="https://example.com/post")
    print(result.normalized_text)
    body = result.render(strip=False)   # structured record as a dict

Swapping a capability::

    from llmreader import ArticlePipeline
    from llmreader.extractors.main_content import TrafilaturaExtractor

    pipeline = ArticlePipeline(extractor=TrafilaturaExtractor())
    result = pipeline.process(html)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from llmreader import settings
from llmreader.extractors.main_content import (
    ExtractionOptions,
    ReadabilityExtractor,
    parse_document,
)
from llmreader.extractors.readerable import is_probably_readerable
from llmreader.items import ArticleResponse, ExtractedArticle
from llmreader.normalize import normalize_html_to_text
from llmreader.options import filter_readability_options, filter_sanitize_options
from llmreader.sanitize import DomSanitizer, merge_sanitize_options

if TYPE_CHECKING:
    from llmreader.plugins import ArticleExtractor, HtmlSanitizer, ReaderableCheck

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Public exceptions
# ---------------------------------------------------------------------------

class ExtractionError(RuntimeError):
    """Base class for pipeline failures.

    Attributes:
        status  -- HTTP-style status a transport should report
        url     -- base URL the document was anchored at ("" if not reached)
        details -- underlying error message, if any
    """

    status = 500

    def __init__(self, message: str, url: str = "", details: str | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": str(self)}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidInputError(ExtractionError):
    """The request carried no usable HTML."""

    status = 400


class NoArticleError(ExtractionError):
    """The document parsed fine but holds nothing article-shaped."""

    status = 404


class InternalProcessingError(ExtractionError):
    """A parsing, extraction or sanitization collaborator failed."""

    status = 500


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProcessResult:
    article: ExtractedArticle
    sanitized_html: str | None
    normalized_text: str
    warnings: tuple[str, ...] = ()

    def to_response(self) -> ArticleResponse:
        return ArticleResponse.from_article(
            self.article, self.sanitized_html, self.normalized_text,
        )

    def render(self, strip: bool = False) -> str | dict[str, Any]:
        """Return plain text when *strip* is set, otherwise the structured record."""
        if strip:
            return self.normalized_text
        return self.to_response().to_wire()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _resolve_url(url: Any) -> str:
    if isinstance(url, str) and url.strip():
        return url
    return settings.DEFAULT_URL


def _validate_html(html: Any) -> str:
    if not isinstance(html, str) or not html.strip():
        logger.warning("Bad request: missing or empty 'html' string")
        raise InvalidInputError('Request body must contain a non-empty "html" string.')
    return html


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

class ArticlePipeline:
    """Sequences the extraction stages over pluggable capabilities.

    Args:
        extractor:  :class:`~llmreader.plugins.ArticleExtractor`; defaults to
                    :class:`~llmreader.extractors.main_content.ReadabilityExtractor`.
        sanitizer:  :class:`~llmreader.plugins.HtmlSanitizer`; defaults to
                    :class:`~llmreader.sanitize.DomSanitizer`.
        readerable: :class:`~llmreader.plugins.ReaderableCheck`; defaults to
                    :func:`~llmreader.extractors.readerable.is_probably_readerable`.
    """

    def __init__(
        self,
        extractor: ArticleExtractor | None = None,
        sanitizer: HtmlSanitizer | None = None,
        readerable: ReaderableCheck | None = None,
    ) -> None:
        self.extractor = extractor or ReadabilityExtractor()
        self.sanitizer = sanitizer or DomSanitizer()
        self.readerable = readerable or is_probably_readerable

    def process(
        self,
        html: Any,
        url: Any = None,
        readability_options: Any = None,
        sanitize_options: Any = None,
    ) -> ProcessResult:
        """Run the full pipeline over one document.

        Raises:
            InvalidInputError:        *html* is missing, not a string or blank.
            NoArticleError:           the extractor found no article.
            InternalProcessingError:  any collaborator raised.
        """
        html = _validate_html(html)
        input_url = _resolve_url(url)

        warnings: list[str] = []
        try:
            extraction_options = ExtractionOptions.from_filtered(
                filter_readability_options(readability_options),
            )
            filtered_sanitize = filter_sanitize_options(sanitize_options)

            document = parse_document(html, input_url)

            if not self.readerable(document):
                message = (
                    f"Content at {input_url} is probably not readerable; "
                    "it might not be a typical article."
                )
                logger.warning(message)
                warnings.append(message)

            article = self.extractor.extract(document, extraction_options)
            if article is None:
                logger.warning(
                    "No article extracted from URL: %s. Content might be too short "
                    "or not structured as an article.",
                    input_url,
                )
                raise NoArticleError(
                    "Could not extract an article from the provided HTML. The content "
                    "might be too short or not structured as an article.",
                    url=input_url,
                )

            sanitized_html: str | None = None
            if article.has_content:
                sanitized_html = self.sanitizer.sanitize(
                    article.content_html or "", merge_sanitize_options(filtered_sanitize),
                )
                logger.info("Sanitized HTML content length: %d", len(sanitized_html))
            else:
                message = f"Article content was empty after extraction for URL: {input_url}"
                logger.warning(message)
                warnings.append(message)

            normalized_text = normalize_html_to_text(sanitized_html or "")
            logger.info("Final LLM text content length: %d", len(normalized_text))
        except ExtractionError:
            raise
        except Exception as exc:
            logger.exception("Internal error during HTML processing for URL: %s", input_url)
            raise InternalProcessingError(
                "Internal server error during HTML processing.",
                url=input_url,
                details=str(exc),
            ) from exc

        return ProcessResult(
            article=article,
            sanitized_html=sanitized_html,
            normalized_text=normalized_text,
            warnings=tuple(warnings),
        )


def process(
    html: Any,
    url: Any = None,
    readability_options: Any = None,
    sanitize_options: Any = None,
) -> ProcessResult:
    """Run :meth:`ArticlePipeline.process` with the default capabilities."""
    return ArticlePipeline().process(html, url, readability_options, sanitize_options)
