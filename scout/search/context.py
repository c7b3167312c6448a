"""Per-run collaborators for the search pipeline.

Everything a search needs is passed in through a ``SearchContext`` so that
tests can swap any piece for a fake.  ``open_context`` builds the real one
from ``Settings`` and owns the shared HTTP client.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator

import httpx

from scout.grounding.gemini_grounding import GeminiGrounding
from scout.grounding.provider import GroundingClient
from scout.grounding.tavily_grounding import TavilyGrounding
from scout.search.bilingual import BilingualExpander
from scout.search.translate import QueryTranslator
from scout.utils.config import Settings
from scout.utils.logger import get_logger
from scout.web.extractor import Extractor
from scout.web.fetcher import Fetcher

log = get_logger(__name__)


@dataclass
class SearchContext:
    settings: Settings
    grounding: GroundingClient
    fetcher: Fetcher
    expander: BilingualExpander = field(default_factory=BilingualExpander)
    extractor: Extractor = field(default_factory=Extractor)


def create_grounding_client(settings: Settings, http: httpx.AsyncClient) -> GroundingClient:
    """Pick the grounding backend named by ``GROUNDING_PROVIDER``."""
    provider = settings.grounding_provider
    if provider == "gemini":
        return GeminiGrounding(
            http, settings.gemini_api_key, settings.gemini_model, settings.user_agent
        )
    if provider == "tavily":
        return TavilyGrounding(settings.tavily_api_key or None)
    raise ValueError(f"Unknown GROUNDING_PROVIDER {provider!r} (expected gemini or tavily)")


def create_expander(settings: Settings) -> BilingualExpander:
    if not settings.openai_api_key:
        return BilingualExpander()
    translator = QueryTranslator(model=settings.translation_model, api_key=settings.openai_api_key)
    return BilingualExpander(translator)


@asynccontextmanager
async def open_context(settings: Settings) -> AsyncIterator[SearchContext]:
    """Yield a ready ``SearchContext``; the HTTP client closes on exit."""
    # Per-request deadlines are enforced by the stages; this is the outer bound.
    timeout = httpx.Timeout(max(settings.fetch_timeout, settings.grounding_timeout))
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as http:
        ctx = SearchContext(
            settings=settings,
            grounding=create_grounding_client(settings, http),
            fetcher=Fetcher(http, settings),
            expander=create_expander(settings),
            extractor=Extractor(),
        )
        log.debug("Search context ready (provider=%s)", ctx.grounding.name)
        yield ctx
