"""Security module -- query guardrails and the fetch SSRF guard."""

from scout.security.guardrails import check_injection, validate_query
from scout.security.ssrf import UnsafeUrlError, check_url

__all__ = ["check_injection", "validate_query", "UnsafeUrlError", "check_url"]
