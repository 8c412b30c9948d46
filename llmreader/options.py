"""Allow-list filtering for untrusted extraction and sanitization options.

Callers hand us arbitrary JSON-ish payloads.  Before anything reaches the
extraction engine or the sanitizer it is narrowed down to a fixed table of
known fields, each guarded by a shape predicate.  Anything unknown or
malformed is dropped without a word.

Usage::

    from llmreader.options import filter_options

    filter_options("readability", {"maxElemsToParse": 5, "evil": True})
    # -> {"maxElemsToParse": 5}
"""

from __future__ import annotations

import copy
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def is_non_negative_number(value: Any) -> bool:
    # bool is an int subclass; True must not pass as 1
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    return value >= 0


def is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def is_mapping(value: Any) -> bool:
    return isinstance(value, dict)


def is_structured(value: Any) -> bool:
    """Return True for the JSON container shapes (object or array)."""
    return isinstance(value, (dict, list))


# ---------------------------------------------------------------------------
# Schema tables
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FieldRule:
    """One allow-listed field.

    ``target`` is the key written to the filtered output; it only differs
    from ``name`` when an input field is stored under another key.
    """

    name: str
    predicate: Callable[[Any], bool]
    target: str = ""

    @property
    def output_key(self) -> str:
        return self.target or self.name


@dataclass(frozen=True)
class OptionSchema:
    id: str
    rules: tuple[FieldRule, ...]

    @property
    def keys(self) -> frozenset[str]:
        return frozenset(rule.output_key for rule in self.rules)

    def accepts(self, key: str, value: Any) -> bool:
        """Return True if *value* is valid output for *key* under any rule."""
        return any(
            rule.output_key == key and rule.predicate(value) for rule in self.rules
        )


READABILITY_SCHEMA = OptionSchema(
    id="readability",
    rules=(
        FieldRule("debug", is_bool),
        FieldRule("maxElemsToParse", is_non_negative_number),
        FieldRule("nbTopCandidates", is_non_negative_number),
        FieldRule("charThreshold", is_non_negative_number),
        FieldRule("keepClasses", is_bool),
        FieldRule("classesToPreserve", is_string_list),
        FieldRule("disableJSONLD", is_bool),
    ),
)

# FORBID_ATTR values land in ADD_ATTR, and a valid ADD_ATTR listed after it
# wins.  The legacy service instead copied the caller's ADD_ATTR when
# FORBID_ATTR was valid.  Kept as-is pending product confirmation; see
# DESIGN.md.
SANITIZE_SCHEMA = OptionSchema(
    id="sanitize",
    rules=(
        FieldRule("USE_PROFILES", is_mapping),
        FieldRule("FORBID_TAGS", is_string_list),
        FieldRule("FORBID_ATTR", is_string_list, target="ADD_ATTR"),
        FieldRule("ADD_TAGS", is_structured),
        FieldRule("ADD_ATTR", is_structured),
    ),
)

SCHEMAS: dict[str, OptionSchema] = {
    READABILITY_SCHEMA.id: READABILITY_SCHEMA,
    SANITIZE_SCHEMA.id: SANITIZE_SCHEMA,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def get_schema(schema: OptionSchema | str) -> OptionSchema:
    if isinstance(schema, OptionSchema):
        return schema
    try:
        return SCHEMAS[schema]
    except KeyError:
        raise ValueError(f"Unknown option schema: {schema!r}") from None


def filter_options(schema: OptionSchema | str, raw: Any) -> dict[str, Any]:
    """Return the subset of *raw* allowed by *schema*.

    Non-mapping input yields ``{}``.  Accepted values are deep-copied so the
    result shares nothing with the caller's payload.
    """
    active = get_schema(schema)
    if not isinstance(raw, Mapping):
        return {}

    allowed: dict[str, Any] = {}
    for rule in active.rules:
        if rule.name not in raw:
            continue
        value = raw[rule.name]
        if rule.predicate(value):
            allowed[rule.output_key] = copy.deepcopy(value)
    return allowed


def filter_readability_options(raw: Any) -> dict[str, Any]:
    return filter_options(READABILITY_SCHEMA, raw)


def filter_sanitize_options(raw: Any) -> dict[str, Any]:
    return filter_options(SANITIZE_SCHEMA, raw)
