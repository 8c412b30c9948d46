"""Project settings for llmreader.

Plain module constants.  A handful can be overridden from the environment
(``LLMREADER_*``); everything per-request arrives through the untrusted option
payloads and goes through :mod:`llmreader.options` instead.
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Document anchoring
# ---------------------------------------------------------------------------
# Base URL used to resolve relative links/images when the caller sends none.
# It never has to be reachable.
DEFAULT_URL = "http://localhost/default_page"

# ---------------------------------------------------------------------------
# Sanitization floor
# ---------------------------------------------------------------------------
# Caller options are spread over this mapping, so a caller key replaces the
# matching floor key instead of extending it.
DEFAULT_SANITIZE_OPTIONS: dict = {
    "USE_PROFILES": {"html": True},
    "FORBID_TAGS": ["script", "style"],
    "FORBID_ATTR": ["onerror", "onload"],
}

# ---------------------------------------------------------------------------
# Readerable heuristic
# ---------------------------------------------------------------------------
READERABLE_MIN_SCORE = 20
READERABLE_MIN_CONTENT_LENGTH = 140

# ---------------------------------------------------------------------------
# Extraction engine
# ---------------------------------------------------------------------------
DEFAULT_ENGINE = os.environ.get("LLMREADER_ENGINE", "readability")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.environ.get("LLMREADER_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
