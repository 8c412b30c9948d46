"""Extraction sub-package: readerable check, article engines and metadata."""

from .main_content import (
    ExtractionAbortedError,
    ExtractionOptions,
    ParsedDocument,
    ReadabilityExtractor,
    TrafilaturaExtractor,
    parse_document,
)
from .metadata import extract_article_metadata
from .readerable import is_probably_readerable

__all__ = [
    "ExtractionAbortedError",
    "ExtractionOptions",
    "ParsedDocument",
    "ReadabilityExtractor",
    "TrafilaturaExtractor",
    "extract_article_metadata",
    "is_probably_readerable",
    "parse_document",
]
