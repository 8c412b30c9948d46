"""llmreader.sanitize — Allow-list HTML sanitizer built on BeautifulSoup.

Options use the DOMPurify vocabulary so existing option payloads keep
working unchanged:

    USE_PROFILES  {"html": bool, "svg": bool, "svgFilters": bool, "mathMl": bool}
    FORBID_TAGS   tags removed even when a profile allows them
    FORBID_ATTR   attributes removed even when allowed
    ADD_TAGS      extra allowed tags (list, or mapping of tag -> truthy)
    ADD_ATTR      extra allowed attributes (same shapes)

Rules, in evaluation order per element:
    - comments, doctypes and processing instructions are dropped
    - forbidden or unknown elements are removed; their children are kept
      unless the element is one whose content is never safe to show
      (script, style, template, iframe, ...)
    - attributes must be allowed (profile, ``data-*``, ``aria-*`` or
      ADD_ATTR) and not forbidden; URI-bearing attributes must use a safe
      scheme, ``data:`` only for media ``src``

Usage::

    from llmreader.sanitize import DomSanitizer, merge_sanitize_options

    clean = DomSanitizer().sanitize(html, merge_sanitize_options({}))
"""

from __future__ import annotations

import copy
import logging
import re
from typing import Any

from bs4 import Tag
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction

from llmreader import settings
from llmreader.fragments import fragment_to_html, parse_fragment

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

HTML_TAGS: frozenset[str] = frozenset({
    "a", "abbr", "acronym", "address", "area", "article", "aside", "audio", "b",
    "bdi", "bdo", "big", "blink", "blockquote", "body", "br", "button", "canvas",
    "caption", "center", "cite", "code", "col", "colgroup", "content", "data",
    "datalist", "dd", "decorator", "del", "details", "dfn", "dialog", "dir", "div",
    "dl", "dt", "element", "em", "fieldset", "figcaption", "figure", "font",
    "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6", "head", "header",
    "hgroup", "hr", "html", "i", "img", "input", "ins", "kbd", "label", "legend",
    "li", "main", "map", "mark", "marquee", "menu", "menuitem", "meter", "nav",
    "nobr", "ol", "optgroup", "option", "output", "p", "picture", "pre",
    "progress", "q", "rp", "rt", "ruby", "s", "samp", "section", "select",
    "shadow", "small", "source", "spacer", "span", "strike", "strong", "style",
    "sub", "summary", "sup", "table", "tbody", "td", "template", "textarea",
    "tfoot", "th", "thead", "time", "tr", "track", "tt", "u", "ul", "var",
    "video", "wbr",
})

SVG_TAGS: frozenset[str] = frozenset({
    "svg", "a", "altglyph", "altglyphdef", "altglyphitem", "animatecolor",
    "animatemotion", "animatetransform", "circle", "clippath", "defs", "desc",
    "ellipse", "filter", "font", "g", "glyph", "glyphref", "hkern", "image",
    "line", "lineargradient", "marker", "mask", "metadata", "mpath", "path",
    "pattern", "polygon", "polyline", "radialgradient", "rect", "stop", "style",
    "switch", "symbol", "text", "textpath", "title", "tref", "tspan", "view",
    "vkern",
})

SVG_FILTER_TAGS: frozenset[str] = frozenset({
    "feblend", "fecolormatrix", "fecomponenttransfer", "fecomposite",
    "feconvolvematrix", "fediffuselighting", "fedisplacementmap",
    "fedistantlight", "fedropshadow", "feflood", "fefunca", "fefuncb",
    "fefuncg", "fefuncr", "fegaussianblur", "feimage", "femerge", "femergenode",
    "femorphology", "feoffset", "fepointlight", "fespecularlighting",
    "fespotlight", "fetile", "feturbulence",
})

MATHML_TAGS: frozenset[str] = frozenset({
    "math", "menclose", "merror", "mfenced", "mfrac", "mglyph", "mi",
    "mlabeledtr", "mmultiscripts", "mn", "mo", "mover", "mpadded", "mphantom",
    "mroot", "mrow", "ms", "mspace", "msqrt", "mstyle", "msub", "msup",
    "msubsup", "mtable", "mtd", "mtext", "mtr", "munder", "munderover",
    "mprescripts",
})

HTML_ATTRS: frozenset[str] = frozenset({
    "accept", "action", "align", "alt", "autocapitalize", "autocomplete",
    "autopictureinpicture", "autoplay", "background", "bgcolor", "border",
    "capture", "cellpadding", "cellspacing", "checked", "cite", "class", "clear",
    "color", "cols", "colspan", "controls", "controlslist", "coords",
    "crossorigin", "datetime", "decoding", "default", "dir", "disabled",
    "disablepictureinpicture", "disableremoteplayback", "download", "draggable",
    "enctype", "enterkeyhint", "face", "for", "headers", "height", "hidden",
    "high", "href", "hreflang", "id", "inputmode", "integrity", "ismap", "kind",
    "label", "lang", "list", "loading", "loop", "low", "max", "maxlength",
    "media", "method", "min", "minlength", "multiple", "muted", "name", "nonce",
    "noshade", "novalidate", "nowrap", "open", "optimum", "pattern",
    "placeholder", "playsinline", "poster", "preload", "pubdate", "radiogroup",
    "readonly", "rel", "required", "rev", "reversed", "role", "rows", "rowspan",
    "spellcheck", "scope", "selected", "shape", "size", "sizes", "span",
    "srclang", "start", "src", "srcset", "step", "style", "summary", "tabindex",
    "title", "translate", "type", "usemap", "valign", "value", "width", "wrap",
    "xmlns",
})

SVG_ATTRS: frozenset[str] = frozenset({
    "accent-height", "accumulate", "additive", "alignment-baseline", "ascent",
    "attributename", "attributetype", "azimuth", "basefrequency",
    "baseline-shift", "begin", "bias", "by", "class", "clip", "clippathunits",
    "clip-path", "clip-rule", "color", "color-interpolation",
    "color-interpolation-filters", "color-profile", "color-rendering", "cx",
    "cy", "d", "dx", "dy", "diffuseconstant", "direction", "display", "divisor",
    "dur", "edgemode", "elevation", "end", "fill", "fill-opacity", "fill-rule",
    "filter", "filterunits", "flood-color", "flood-opacity", "font-family",
    "font-size", "font-size-adjust", "font-stretch", "font-style",
    "font-variant", "font-weight", "fx", "fy", "g1", "g2", "glyph-name",
    "glyphref", "gradientunits", "gradienttransform", "height", "href", "id",
    "image-rendering", "in", "in2", "k", "k1", "k2", "k3", "k4", "kerning",
    "keypoints", "keysplines", "keytimes", "lang", "lengthadjust",
    "letter-spacing", "kernelmatrix", "kernelunitlength", "lighting-color",
    "local", "marker-end", "marker-mid", "marker-start", "markerheight",
    "markerunits", "markerwidth", "maskcontentunits", "maskunits", "max", "mask",
    "media", "method", "mode", "min", "name", "numoctaves", "offset", "operator",
    "opacity", "order", "orient", "orientation", "origin", "overflow",
    "paint-order", "path", "pathlength", "patterncontentunits",
    "patterntransform", "patternunits", "points", "preservealpha",
    "preserveaspectratio", "primitiveunits", "r", "rx", "ry", "radius", "refx",
    "refy", "repeatcount", "repeatdur", "restart", "result", "rotate", "scale",
    "seed", "shape-rendering", "specularconstant", "specularexponent",
    "spreadmethod", "startoffset", "stddeviation", "stitchtiles", "stop-color",
    "stop-opacity", "stroke-dasharray", "stroke-dashoffset", "stroke-linecap",
    "stroke-linejoin", "stroke-miterlimit", "stroke-opacity", "stroke",
    "stroke-width", "style", "surfacescale", "systemlanguage", "tabindex",
    "targetx", "targety", "transform", "transform-origin", "text-anchor",
    "text-decoration", "text-rendering", "textlength", "type", "u1", "u2",
    "unicode", "values", "viewbox", "visibility", "version", "vert-adv-y",
    "vert-origin-x", "vert-origin-y", "width", "word-spacing", "wrap",
    "writing-mode", "xchannelselector", "ychannelselector", "x", "x1", "x2",
    "xmlns", "y", "y1", "y2", "z", "zoomandpan", "xlink:href",
})

MATHML_ATTRS: frozenset[str] = frozenset({
    "accent", "accentunder", "align", "bevelled", "close", "columnsalign",
    "columnlines", "columnspan", "denomalign", "depth", "dir", "display",
    "displaystyle", "encoding", "fence", "frame", "height", "href", "id",
    "largeop", "length", "linethickness", "lspace", "lquote", "mathbackground",
    "mathcolor", "mathsize", "mathvariant", "maxsize", "minsize", "movablelimits",
    "notation", "numalign", "open", "rowalign", "rowlines", "rowspacing",
    "rowspan", "rspace", "rquote", "scriptlevel", "scriptminsize",
    "scriptsizemultiplier", "selection", "separator", "separators", "stretchy",
    "subscriptshift", "supscriptshift", "symmetric", "voffset", "width", "xmlns",
})

_PROFILES: dict[str, tuple[frozenset[str], frozenset[str]]] = {
    "html": (HTML_TAGS, HTML_ATTRS),
    "svg": (SVG_TAGS, SVG_ATTRS),
    "svgFilters": (SVG_FILTER_TAGS, SVG_ATTRS),
    "mathMl": (MATHML_TAGS, MATHML_ATTRS),
}

# Removed together with everything inside them
FORBID_CONTENTS: frozenset[str] = frozenset({
    "annotation-xml", "audio", "colgroup", "desc", "foreignobject", "head",
    "iframe", "math", "mi", "mn", "mo", "ms", "mtext", "noembed", "noframes",
    "noscript", "plaintext", "script", "style", "svg", "template", "thead",
    "title", "video", "xmp",
})

URI_ATTRS: frozenset[str] = frozenset({
    "action", "background", "cite", "formaction", "href", "longdesc", "lowsrc",
    "ping", "poster", "src", "xlink:href",
})

DATA_URI_TAGS: frozenset[str] = frozenset({"audio", "img", "source", "track", "video"})

# ---------------------------------------------------------------------------
# Compiled patterns
# ---------------------------------------------------------------------------

_ALLOWED_URI_RE = re.compile(
    r"^(?:(?:(?:f|ht)tps?|mailto|tel|callto|sms|cid|xmpp):|[^a-z]|[a-z+.\-]+(?:[^a-z+.\-:]|$))",
    re.IGNORECASE,
)
_ATTR_WHITESPACE_RE = re.compile(r"[\x00-\x20\xa0\u1680\u180e\u2000-\u2029\u205f\u3000]")
_DATA_ATTR_RE = re.compile(r"^data-[\w.\u00b7-\uffff-]+$")
_ARIA_ATTR_RE = re.compile(r"^aria-[\w-]+$")


# ---------------------------------------------------------------------------
# Option handling
# ---------------------------------------------------------------------------

def merge_sanitize_options(filtered: dict[str, Any] | None) -> dict[str, Any]:
    """Spread allow-listed caller options over the security floor.

    A caller key replaces the floor key of the same name; lists are not
    unioned.  The result is a fresh deep copy, so a sanitizer may mutate it
    without touching the floor or the caller's payload.
    """
    return copy.deepcopy({**settings.DEFAULT_SANITIZE_OPTIONS, **(filtered or {})})


def _name_set(value: Any) -> set[str]:
    """Lower-cased names from a list, or from the truthy keys of a mapping."""
    if isinstance(value, dict):
        return {str(k).lower() for k, v in value.items() if v}
    if isinstance(value, (list, tuple, set, frozenset)):
        return {item.lower() for item in value if isinstance(item, str)}
    return set()


class _Policy:
    """Resolved allow/deny sets for one sanitize call."""

    def __init__(self, options: dict[str, Any]) -> None:
        tags: set[str] = set()
        attrs: set[str] = set()

        profiles = options.get("USE_PROFILES")
        if isinstance(profiles, dict):
            for profile, (profile_tags, profile_attrs) in _PROFILES.items():
                if profiles.get(profile):
                    tags |= profile_tags
                    attrs |= profile_attrs
        else:
            for profile_tags, profile_attrs in _PROFILES.values():
                tags |= profile_tags
                attrs |= profile_attrs

        self.forbid_tags = _name_set(options.get("FORBID_TAGS"))
        self.forbid_attrs = _name_set(options.get("FORBID_ATTR"))
        self.allowed_tags = (tags | _name_set(options.get("ADD_TAGS"))) - self.forbid_tags
        self.allowed_attrs = attrs | _name_set(options.get("ADD_ATTR"))

    def tag_allowed(self, name: str) -> bool:
        return name in self.allowed_tags

    def attr_allowed(self, tag_name: str, name: str, value: str) -> bool:
        if name in self.forbid_attrs:
            return False
        if not (
            name in self.allowed_attrs
            or _DATA_ATTR_RE.match(name)
            or _ARIA_ATTR_RE.match(name)
        ):
            return False
        if name in URI_ATTRS:
            return _is_safe_uri(tag_name, name, value)
        return True


def _is_safe_uri(tag_name: str, attr_name: str, value: str) -> bool:
    compact = _ATTR_WHITESPACE_RE.sub("", value)
    if not compact or _ALLOWED_URI_RE.match(compact):
        return True
    return (
        attr_name in ("src", "xlink:href", "href")
        and tag_name in DATA_URI_TAGS
        and value.startswith("data:")
    )


def _attr_value(value: Any) -> str:
    if isinstance(value, list):
        return " ".join(str(v) for v in value)
    return str(value)


# ---------------------------------------------------------------------------
# Sanitizer
# ---------------------------------------------------------------------------

class DomSanitizer:
    """:class:`llmreader.plugins.HtmlSanitizer` backed by BeautifulSoup."""

    def sanitize(self, html: str, options: dict[str, Any]) -> str:
        if not html or not html.strip():
            return ""

        policy = _Policy(options)
        _, container = parse_fragment(html)

        for node in list(container.descendants):
            if isinstance(node, (CData, Comment, Declaration, Doctype, ProcessingInstruction)):
                node.extract()

        removed = 0
        for el in list(container.find_all(True)):
            if el.decomposed:
                continue
            name = (el.name or "").lower()
            if not policy.tag_allowed(name):
                removed += 1
                if name in FORBID_CONTENTS:
                    el.decompose()
                else:
                    el.unwrap()
                continue
            self._clean_attributes(el, name, policy)

        if removed:
            logger.debug("Sanitizer removed %d element(s)", removed)
        return fragment_to_html(container)

    @staticmethod
    def _clean_attributes(el: Tag, tag_name: str, policy: _Policy) -> None:
        for attr in list(el.attrs):
            value = _attr_value(el.attrs[attr])
            if not policy.attr_allowed(tag_name, attr.lower(), value):
                del el.attrs[attr]
