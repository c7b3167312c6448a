"""Query validation and prompt injection detection.

Research queries are forwarded verbatim to an LLM grounding service, so the
CLI screens them before a run starts.
"""

import re
import unicodedata
from typing import Optional, Tuple

from scout.utils.config import settings

INJECTION_PATTERNS = [
    r"ignore\s+(all\s+)?(previous|above|prior)\s+instructions",
    r"disregard\s+(your\s+)?(instructions|prompt)",
    r"pretend\s+you\s+are",
    r"system\s*:\s*",
    r"\[system\]",
    r"<\|.*\|>",
    r"<\s*script",
]


def check_injection(text: str) -> Tuple[bool, Optional[str]]:
    """Return (is_safe, reason).  ``is_safe`` is False when injection is suspected."""
    if not text or not text.strip():
        return True, None
    for pattern in INJECTION_PATTERNS:
        if re.search(pattern, text, re.IGNORECASE):
            return False, f"Potential injection detected: {pattern}"
    return True, None


def validate_query(query: str, max_length: Optional[int] = None) -> Tuple[bool, Optional[str]]:
    """Validate emptiness, length, control characters and injection phrasing."""
    limit = max_length or settings.max_query_length
    if not query or not query.strip():
        return False, "Query is empty."
    if len(query) > limit:
        return False, f"Query exceeds max length ({limit} chars)."
    if any(unicodedata.category(ch) == "Cc" for ch in query):
        return False, "Query contains control characters."
    return check_injection(query)
