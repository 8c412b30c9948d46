"""Helpers for parsing and re-serialising HTML fragments with BeautifulSoup.

lxml wraps any fragment in ``<html><body>``; these helpers hide that so a
fragment goes in and the same-shaped fragment comes out.
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag


def parse_fragment(html: str) -> tuple[BeautifulSoup, Tag]:
    """Parse *html* and return ``(soup, container)``.

    ``container`` is the ``<body>`` lxml created, or the soup itself when the
    input produced no body (empty input).
    """
    soup = BeautifulSoup(html, "lxml")
    body = soup.body
    return soup, body if isinstance(body, Tag) else soup


def fragment_to_html(container: Tag) -> str:
    """Serialise the children of *container* back to an HTML string."""
    return container.decode_contents()
