"""llmreader.extractors.readerable — "Does this page look like an article?"

Pure function, no network calls, modelled on Mozilla's
``isProbablyReaderable``: every visible ``<p>``, ``<pre>`` and ``<article>``
(plus the parent of any ``div > br``) with enough text contributes
``sqrt(len - min_content_length)`` to a running score; the page is readerable
once the score passes *min_score*.

The result is advisory only.  A negative answer never stops extraction.

Usage::

    from llmreader.extractors.readerable import is_probably_readerable

    if not is_probably_readerable(document):
        logger.warning("probably not an article")
"""

from __future__ import annotations

import math
import re
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup, Tag

from llmreader import settings

if TYPE_CHECKING:
    from llmreader.extractors.main_content import ParsedDocument

# ---------------------------------------------------------------------------
# Compiled patterns (evaluated once at import time)
# ---------------------------------------------------------------------------

_UNLIKELY_CANDIDATES_RE = re.compile(
    r"-ad-|ai2html|banner|breadcrumbs|combx|comment|community|cover-wrap|disqus|"
    r"extra|footer|gdpr|header|legends|menu|related|remark|replies|rss|shoutbox|"
    r"sidebar|skyscraper|social|sponsor|supplemental|ad-break|agegate|pagination|"
    r"pager|popup|yom-remote",
    re.IGNORECASE,
)
_MAYBE_CANDIDATE_RE = re.compile(r"and|article|body|column|content|main|shadow", re.IGNORECASE)
_DISPLAY_NONE_RE = re.compile(r"display\s*:\s*none", re.IGNORECASE)
_VISIBILITY_HIDDEN_RE = re.compile(r"visibility\s*:\s*hidden", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _attr_str(tag: Tag, name: str) -> str:
    val = tag.get(name)
    if val is None:
        return ""
    if isinstance(val, list):
        return " ".join(str(v) for v in val)
    return str(val)


def _is_node_visible(tag: Tag) -> bool:
    style = _attr_str(tag, "style")
    if _DISPLAY_NONE_RE.search(style) or _VISIBILITY_HIDDEN_RE.search(style):
        return False
    if tag.has_attr("hidden"):
        return False
    # Wikimedia math fallback images are aria-hidden but still the readable text
    return not (
        tag.has_attr("aria-hidden")
        and _attr_str(tag, "aria-hidden") == "true"
        and "fallback-image" not in _attr_str(tag, "class")
    )


def _candidate_nodes(soup: BeautifulSoup) -> list[Tag]:
    nodes: list[Tag] = [n for n in soup.select("p, pre, article") if isinstance(n, Tag)]
    seen = {id(n) for n in nodes}
    for br in soup.select("div > br"):
        parent = br.parent
        if isinstance(parent, Tag) and id(parent) not in seen:
            seen.add(id(parent))
            nodes.append(parent)
    return nodes


def _inside_list_item(tag: Tag) -> bool:
    return tag.name == "p" and tag.find_parent("li") is not None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def readerable_score(
    soup: BeautifulSoup,
    min_content_length: int = settings.READERABLE_MIN_CONTENT_LENGTH,
    min_score: float | None = None,
) -> float:
    """Return the accumulated readability score of *soup*.

    When *min_score* is given the scan stops as soon as it is exceeded.
    """
    score = 0.0
    for node in _candidate_nodes(soup):
        if not _is_node_visible(node):
            continue

        match_string = f"{_attr_str(node, 'class')} {_attr_str(node, 'id')}"
        if _UNLIKELY_CANDIDATES_RE.search(match_string) and not _MAYBE_CANDIDATE_RE.search(
            match_string,
        ):
            continue

        if _inside_list_item(node):
            continue

        text_length = len(node.get_text().strip())
        if text_length < min_content_length:
            continue

        score += math.sqrt(text_length - min_content_length)
        if min_score is not None and score > min_score:
            break
    return score


def is_probably_readerable(
    document: ParsedDocument,
    min_score: float = settings.READERABLE_MIN_SCORE,
    min_content_length: int = settings.READERABLE_MIN_CONTENT_LENGTH,
) -> bool:
    """Return True when *document* probably holds a readable article."""
    score = readerable_score(document.soup, min_content_length, min_score=min_score)
    return score > min_score
