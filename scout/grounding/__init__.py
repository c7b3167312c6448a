"""Grounding module -- LLM answers with cited web sources."""

from scout.grounding.provider import (
    Citation,
    GroundedAnswer,
    GroundingClient,
    GroundingError,
    InvalidResponseError,
    RateLimitedError,
    UnauthorizedError,
    UnavailableError,
)

__all__ = [
    "Citation",
    "GroundedAnswer",
    "GroundingClient",
    "GroundingError",
    "InvalidResponseError",
    "RateLimitedError",
    "UnauthorizedError",
    "UnavailableError",
]
