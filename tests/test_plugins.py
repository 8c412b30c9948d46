"""Tests for the extraction-engine registry."""

from __future__ import annotations

import pytest

from llmreader.extractors.main_content import ReadabilityExtractor, TrafilaturaExtractor
from llmreader.plugins import (
    ArticleExtractor,
    get_engine,
    get_engine_names,
    register_engine,
    unregister_engine,
)


class _Echo:
    name = "echo"

    def extract(self, document, options):
        return None


@pytest.fixture
def echo_engine():
    register_engine("echo", _Echo)
    yield
    unregister_engine("echo")


def test_builtin_engines_registered():
    assert {"readability", "trafilatura"} <= set(get_engine_names())
    assert isinstance(get_engine("readability"), ReadabilityExtractor)
    assert isinstance(get_engine("trafilatura"), TrafilaturaExtractor)


def test_each_call_builds_a_new_instance():
    assert get_engine("readability") is not get_engine("readability")


def test_unknown_engine():
    with pytest.raises(ValueError, match="Unknown extraction engine 'missing'"):
        get_engine("missing")


def test_register_custom_engine(echo_engine):
    engine = get_engine("echo")
    assert isinstance(engine, ArticleExtractor)
    assert "echo" in get_engine_names()


def test_unregister_is_idempotent():
    unregister_engine("never-registered")
