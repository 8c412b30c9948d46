"""Flatten sanitized article HTML into LLM-friendly plain text.

The conversion is an ordered cascade of regex rewrites over the whole string.
Order is load-bearing: block closings become newlines *before* the generic
tag strip, and the whitespace passes assume the strip already happened.

Output convention:
    - exactly two newlines between block-level units (paragraphs, headings)
    - one newline between list items and ``<br>``-separated lines
    - single spaces, and one space after ``.``, ``?`` or ``!``

Entities are left as they are; decoding them could turn ``&lt;b&gt;`` back
into something tag-shaped.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import NamedTuple

_BLOCK_CONTAINERS = "article|section|header|footer|aside|nav|figure|figcaption|blockquote|pre"


class NormalizeRule(NamedTuple):
    name: str
    pattern: re.Pattern[str]
    replacement: str | Callable[[re.Match[str]], str]


def _paragraph_or_line(match: re.Match[str]) -> str:
    return "\n\n" if match.group(1) else "\n"


RULES: tuple[NormalizeRule, ...] = (
    NormalizeRule("line_breaks", re.compile(r"<br[^>]*>", re.IGNORECASE), "\n"),
    NormalizeRule("headings", re.compile(r"</h[1-6]>", re.IGNORECASE), "\n\n"),
    NormalizeRule("paragraphs", re.compile(r"</p>", re.IGNORECASE), "\n\n"),
    NormalizeRule("divs", re.compile(r"</div>", re.IGNORECASE), "\n\n"),
    NormalizeRule(
        "block_containers",
        re.compile(rf"</(?:{_BLOCK_CONTAINERS})>", re.IGNORECASE),
        "\n\n",
    ),
    NormalizeRule("list_items", re.compile(r"</li>", re.IGNORECASE), "\n"),
    NormalizeRule("horizontal_rules", re.compile(r"<hr[^>]*>", re.IGNORECASE), "\n---\n"),
    NormalizeRule("strip_tags", re.compile(r"<[^>]+>"), ""),
    NormalizeRule("trim", re.compile(r"\A\s+|\s+\Z"), ""),
    NormalizeRule("collapse_blank_runs", re.compile(r"\n\s*\n\s*\n"), "\n\n"),
    NormalizeRule(
        "newline_runs", re.compile(r"\n[^\S\n]*(\n)?[^\S\n]*"), _paragraph_or_line,
    ),
    NormalizeRule("collapse_spaces", re.compile(r" {2,}"), " "),
    NormalizeRule("collapse_blank_lines", re.compile(r"(?:\n ?)+\n"), "\n\n"),
    NormalizeRule("sentence_spacing", re.compile(r"([.?!])(\S)"), r"\1 \2"),
)


def apply_rule(rule: NormalizeRule, text: str) -> str:
    """Apply a single cascade step to *text*."""
    return rule.pattern.sub(rule.replacement, text)


def normalize_html_to_text(html: str) -> str:
    """Convert a sanitized HTML fragment into normalized plain text.

    Never raises; non-string and blank input give ``""``.
    """
    if not isinstance(html, str) or not html.strip():
        return ""

    text = html
    for rule in RULES:
        text = apply_rule(rule, text)
    return text
