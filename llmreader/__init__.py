"""llmreader - extract the article from any HTML page as clean, LLM-ready text.

Quick usage::

    from llmreader import process

    result = process(html, url="https://example.com/blog/some-post")
    print(result.article.title)
    print(result.normalized_text)

Untrusted options are allow-listed before use::

    result = process(
        html,
        readability_options={"charThreshold": 300, "keepClasses": True},
        sanitize_options={"FORBID_TAGS": ["script", "style", "img"]},
    )

Plain normalization of an already-sanitized fragment::

    from llmreader import normalize_html_to_text

    normalize_html_to_text("<p>Hello.World</p><h1>Title</h1>")
    # 'Hello. World\\n\\nTitle'
"""

from llmreader.items import ArticleResponse, ExtractedArticle
from llmreader.normalize import normalize_html_to_text
from llmreader.options import (
    filter_options,
    filter_readability_options,
    filter_sanitize_options,
)
from llmreader.pipeline import (
    ArticlePipeline,
    ExtractionError,
    InternalProcessingError,
    InvalidInputError,
    NoArticleError,
    ProcessResult,
    process,
)
from llmreader.plugins import get_engine, register_engine

__version__ = "0.1.0"
__all__ = [
    "ArticlePipeline",
    "ArticleResponse",
    "ExtractedArticle",
    "ExtractionError",
    "InternalProcessingError",
    "InvalidInputError",
    "NoArticleError",
    "ProcessResult",
    "filter_options",
    "filter_readability_options",
    "filter_sanitize_options",
    "get_engine",
    "normalize_html_to_text",
    "process",
    "register_engine",
]
