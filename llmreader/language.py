"""Resolve the ``lang`` of an extracted article.

The language the page declares (``<html lang>``, JSON-LD ``inLanguage``,
``og:locale``, ``Content-Language``) always wins.  Only when the page declares
nothing is the article's raw text run through langdetect, and a guess is
reported only when langdetect is confident about it.
"""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

# Fewer characters than this give langdetect too little signal
MIN_SAMPLE_LENGTH = 40

# Probability the top langdetect guess needs before it is reported
MIN_CONFIDENCE = 0.80

_MAX_TAG_LENGTH = 10
_TAG_RE = re.compile(r"^[A-Za-z]{2,3}(?:-[A-Za-z0-9]{1,8})*$")


def normalize_language_tag(raw: str | None) -> str | None:
    """Return *raw* as a BCP 47-shaped tag (``pt_BR`` -> ``pt-BR``), or None.

    Values that do not look like a language tag at all are discarded.
    """
    if not raw:
        return None
    tag = raw.split(",")[0].strip().replace("_", "-")[:_MAX_TAG_LENGTH].rstrip("-")
    if not _TAG_RE.match(tag):
        logger.debug("Ignoring malformed language tag %r", raw)
        return None
    return tag


def guess_language(raw_text: str) -> str | None:
    """Best langdetect guess for *raw_text*, or None when unsure."""
    sample = (raw_text or "").strip()
    if len(sample) < MIN_SAMPLE_LENGTH:
        return None
    try:
        from langdetect import DetectorFactory, detect_langs
        from langdetect.lang_detect_exception import LangDetectException

        DetectorFactory.seed = 0
        guesses = detect_langs(sample)
    except LangDetectException as exc:
        logger.debug("Language detection failed: %s", exc)
        return None
    if not guesses or guesses[0].prob < MIN_CONFIDENCE:
        return None
    return guesses[0].lang


def resolve_language(declared: str | None, raw_text: str) -> str | None:
    """Declared language if the page has one, else a confident guess from *raw_text*."""
    tag = normalize_language_tag(declared)
    if tag:
        return tag
    guess = guess_language(raw_text)
    if guess:
        logger.debug("No declared language; detected %r from article text", guess)
    return guess
