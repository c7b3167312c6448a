"""Tavily Search as a grounding provider.

Tavily returns an LLM-written answer (``include_answer``) alongside the
results it was built from, which maps directly onto ``GroundedAnswer``.
"""

import asyncio
from typing import TYPE_CHECKING, List

from tavily import TavilyClient
from tavily.errors import (
    BadRequestError,
    ForbiddenError,
    InvalidAPIKeyError,
    MissingAPIKeyError,
    UsageLimitExceededError,
)

from scout.grounding.provider import (
    Citation,
    GroundedAnswer,
    GroundingClient,
    InvalidResponseError,
    RateLimitedError,
    UnauthorizedError,
    UnavailableError,
)
from scout.utils.logger import get_logger

if TYPE_CHECKING:
    from scout.search.models import QueryVariant

log = get_logger(__name__)


class TavilyGrounding(GroundingClient):
    """Grounded search via the Tavily API."""

    name = "tavily"

    def __init__(self, api_key: str | None = None, max_results: int = 8):
        try:
            self._client = TavilyClient(api_key=api_key or None)
        except MissingAPIKeyError as exc:
            raise UnauthorizedError("TAVILY_API_KEY not set") from exc
        self.max_results = max_results

    async def ground(self, variant: "QueryVariant") -> GroundedAnswer:
        """Execute a Tavily search off the event loop and normalise results."""
        try:
            raw = await asyncio.to_thread(
                self._client.search,
                query=variant.text,
                max_results=self.max_results,
                search_depth="advanced",
                include_answer=True,
            )
        except UsageLimitExceededError as exc:
            raise RateLimitedError(f"Tavily usage limit exceeded: {exc}") from exc
        except (InvalidAPIKeyError, MissingAPIKeyError, ForbiddenError) as exc:
            raise UnauthorizedError(f"Tavily API key rejected: {exc}") from exc
        except BadRequestError as exc:
            raise InvalidResponseError(f"Tavily rejected the request: {exc}") from exc
        except Exception as exc:
            log.warning("Tavily search failed for query: %s", variant.text)
            raise UnavailableError(f"Tavily search failed: {exc}") from exc

        if not isinstance(raw, dict):
            raise InvalidResponseError("Tavily returned a non-dict payload")

        citations: List[Citation] = []
        for item in raw.get("results") or []:
            if not isinstance(item, dict) or not item.get("url"):
                continue
            citations.append(
                Citation(
                    url=item["url"],
                    title=item.get("title") or "",
                    snippet=item.get("content") or "",
                )
            )
        return GroundedAnswer(answer_text=raw.get("answer") or "", citations=tuple(citations))
