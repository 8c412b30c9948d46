"""Deterministic article metadata extraction from a parsed document.

Priority chain (highest → lowest):
    JSON-LD → Open Graph / Twitter Card / Dublin Core → HTML <meta> → markup
    (<html lang>, <html dir>, rel=author elements)

JSON-LD can be switched off per request (``disableJSONLD``).
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import dateparser
from bs4 import BeautifulSoup, Tag

from llmreader.language import normalize_language_tag

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_WHITESPACE_RE = re.compile(r"\s+")

# Bylines longer than this are paragraphs that happen to carry a byline class
_MAX_BYLINE_LENGTH = 100

_BYLINE_SELECTORS: tuple[str, ...] = (
    '[rel="author"]',
    '[itemprop="author"]',
    ".byline",
    ".author",
)


def _safe_str(val: Any, default: str = "") -> str:
    """Safely convert a BeautifulSoup attribute value (str | list | None) to str."""
    if val is None:
        return default
    if isinstance(val, list):
        return " ".join(str(v) for v in val)
    return str(val)


def _clean(val: Any) -> str | None:
    if not isinstance(val, str):
        return None
    val = _WHITESPACE_RE.sub(" ", val).strip()
    return val or None


def _first(*values: Any) -> Any:
    """Return the first non-empty, non-None value."""
    for v in values:
        if v:
            return v
    return None


def parse_date(raw: str | None) -> str | None:
    """Parse a date string to ISO 8601.

    Returns None on failure or when the year falls outside 1990-2099
    (catches epoch defaults like 1970-01-01 and far-future typos).
    """
    if not raw:
        return None
    raw = _WHITESPACE_RE.sub(" ", raw.strip())
    try:
        parsed = dateparser.parse(
            raw,
            settings={
                "RETURN_AS_TIMEZONE_AWARE": True,
                "PREFER_DAY_OF_MONTH": "first",
                "PREFER_LOCALE_DATE_ORDER": False,
            },
        )
        if parsed:
            if not (1990 <= parsed.year <= 2099):
                return None
            return parsed.isoformat()
    except Exception as exc:
        logger.debug("Date parse failed for %r: %s", raw, exc)
    return None


# ---------------------------------------------------------------------------
# JSON-LD
# ---------------------------------------------------------------------------

_ARTICLE_TYPES: frozenset[str] = frozenset(
    {
        "article",
        "advertisercontentarticle",
        "blogposting",
        "newsarticle",
        "analysisnewsarticle",
        "opinionnewsarticle",
        "reportagenewsarticle",
        "reviewnewsarticle",
        "techarticle",
        "scholarlyarticle",
        "medicalscholarlyarticle",
        "liveblogposting",
        "report",
        "reportage",
    },
)


def _node_types(node: dict) -> list[str]:
    dtype = node.get("@type", "")
    if isinstance(dtype, list):
        return [str(t).lower() for t in dtype]
    return [str(dtype).lower()]


def extract_jsonld(soup: BeautifulSoup) -> dict:
    """Return the first article-typed JSON-LD node on the page, or ``{}``."""
    for script in soup.find_all("script", type="application/ld+json"):
        try:
            raw = json.loads(script.string or "")
        except (json.JSONDecodeError, TypeError):
            continue

        nodes: list = []
        if isinstance(raw, list):
            nodes = raw
        elif isinstance(raw, dict):
            graph = raw.get("@graph")
            nodes = graph if isinstance(graph, list) else [raw]

        for node in nodes:
            if not isinstance(node, dict):
                continue
            if any(t in _ARTICLE_TYPES for t in _node_types(node)):
                return node
    return {}


def _author_from_jsonld(node: dict) -> str | None:
    author = node.get("author")
    if isinstance(author, dict):
        return _clean(author.get("name"))
    if isinstance(author, list) and author:
        names = []
        for entry in author:
            name = _clean(entry.get("name")) if isinstance(entry, dict) else _clean(entry)
            if name:
                names.append(name)
        return ", ".join(names) or None
    return _clean(author)


def _publisher_from_jsonld(node: dict) -> str | None:
    publisher = node.get("publisher")
    if isinstance(publisher, dict):
        return _clean(publisher.get("name"))
    return None


# ---------------------------------------------------------------------------
# <meta> tags
# ---------------------------------------------------------------------------

def _extract_meta(soup: BeautifulSoup) -> dict[str, str]:
    """Collect ``property``/``name`` meta values, lower-cased keys, first wins."""
    values: dict[str, str] = {}
    for tag in soup.find_all("meta"):
        if not isinstance(tag, Tag):
            continue
        content = _safe_str(tag.get("content"), "").strip()
        if not content:
            continue
        for attr in ("property", "name", "itemprop"):
            for key in _safe_str(tag.get(attr), "").lower().split():
                values.setdefault(key, content)
    return values


# ---------------------------------------------------------------------------
# Markup fallbacks
# ---------------------------------------------------------------------------

def _byline_from_markup(soup: BeautifulSoup) -> str | None:
    for selector in _BYLINE_SELECTORS:
        el = soup.select_one(selector)
        if not isinstance(el, Tag):
            continue
        text = _clean(el.get_text(" "))
        if text and len(text) < _MAX_BYLINE_LENGTH:
            return text
    return None


def _extract_language(soup: BeautifulSoup, meta: dict[str, str], jsonld: dict) -> str | None:
    """First well-formed language the page declares; never guesses."""
    html_tag = soup.find("html")
    html_lang = _safe_str(html_tag.get("lang")) if isinstance(html_tag, Tag) else None

    lang_jld = jsonld.get("inLanguage")
    meta_lang = soup.find("meta", attrs={"http-equiv": re.compile("^content-language$", re.I)})
    http_lang = _safe_str(meta_lang.get("content")) if isinstance(meta_lang, Tag) else None

    for declared in (
        html_lang,
        lang_jld if isinstance(lang_jld, str) else None,
        meta.get("og:locale"),
        http_lang,
    ):
        tag = normalize_language_tag(declared)
        if tag:
            return tag
    return None


def _extract_direction(soup: BeautifulSoup) -> str | None:
    for name in ("html", "body"):
        tag = soup.find(name)
        if isinstance(tag, Tag):
            direction = _safe_str(tag.get("dir"), "").strip().lower()
            if direction:
                return direction
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_article_metadata(soup: BeautifulSoup, *, use_json_ld: bool = True) -> dict:
    """Extract article-level metadata from *soup*.

    Returns a dict with keys:
        title, byline, excerpt, site_name, published_time, language,
        direction, jsonld
    Any value may be None; the caller fills gaps from the extracted content.
    """
    jsonld = extract_jsonld(soup) if use_json_ld else {}
    meta = _extract_meta(soup)

    title = _first(
        _clean(jsonld.get("headline")),
        _clean(jsonld.get("name")),
        _clean(meta.get("dc:title")),
        _clean(meta.get("dcterm:title")),
        _clean(meta.get("og:title")),
        _clean(meta.get("weibo:article:title")),
        _clean(meta.get("twitter:title")),
    )

    byline = _first(
        _author_from_jsonld(jsonld),
        _clean(meta.get("dc:creator")),
        _clean(meta.get("dcterm:creator")),
        _clean(meta.get("author")),
        _clean(meta.get("article:author")),
        _byline_from_markup(soup),
    )

    excerpt = _first(
        _clean(jsonld.get("description")),
        _clean(meta.get("dc:description")),
        _clean(meta.get("dcterm:description")),
        _clean(meta.get("og:description")),
        _clean(meta.get("weibo:article:description")),
        _clean(meta.get("description")),
        _clean(meta.get("twitter:description")),
    )

    site_name = _first(
        _publisher_from_jsonld(jsonld),
        _clean(meta.get("og:site_name")),
    )

    published_raw = _first(
        jsonld.get("datePublished") if isinstance(jsonld.get("datePublished"), str) else None,
        meta.get("article:published_time"),
        meta.get("parsely-pub-date"),
        meta.get("pubdate"),
    )

    return {
        "title": title,
        "byline": byline if byline and len(byline) < _MAX_BYLINE_LENGTH else None,
        "excerpt": excerpt,
        "site_name": site_name,
        "published_time": parse_date(published_raw),
        "language": _extract_language(soup, meta, jsonld),
        "direction": _extract_direction(soup),
        "jsonld": jsonld,
    }
