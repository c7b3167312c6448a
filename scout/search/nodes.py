"""Node implementations for the search state machine.

Each node receives the full ``SearchState`` and returns a *partial* dict
with only the keys it updates.  Nodes are methods of ``SearchNodes`` so that
every run reads its collaborators from one ``SearchContext`` rather than
from module globals.
"""

import asyncio
import dataclasses
import logging
import time
from collections import Counter
from typing import Any, Dict, Optional, Tuple

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from scout.grounding.provider import (
    Citation,
    GroundedAnswer,
    GroundingError,
    UnauthorizedError,
    UnavailableError,
)
from scout.search.context import SearchContext
from scout.search.merge import collect_unique_sources, merge_results
from scout.search.models import QueryVariant
from scout.search.state import SearchState
from scout.utils.concurrency import bounded_gather
from scout.utils.logger import get_logger, log_search_run
from scout.web.extractor import ExtractedDocument
from scout.web.fetcher import FetchError

log = get_logger(__name__)


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, GroundingError) and exc.retryable


class SearchNodes:
    def __init__(self, ctx: SearchContext):
        self.ctx = ctx

    # ---- Nodes -----------------------------------------------------------

    async def expand_node(self, state: SearchState) -> Dict[str, Any]:
        """Expand the query into language variants."""
        query = state["query"]
        log.info("Searching: %s", query.text)
        # A configured translator makes a blocking API call.
        variants = await asyncio.to_thread(self.ctx.expander.expand, query)
        return {"variants": variants, "stage": "grounding"}

    async def ground_node(self, state: SearchState) -> Dict[str, Any]:
        """Ground every variant concurrently; failed variants degrade to None."""
        variants = state.get("variants") or []
        answers = await bounded_gather(
            self._ground_variant, variants, self.ctx.settings.grounding_concurrency
        )
        grounded = list(zip(variants, answers))
        degraded = [variant for variant, answer in grounded if answer is None]
        log.info(
            "Grounded %d/%d variants (%d citations)",
            len(variants) - len(degraded),
            len(variants),
            sum(len(a.citations) for a in answers if a is not None),
        )
        return {"grounded": grounded, "degraded_variants": degraded, "stage": "fetching"}

    async def fetch_node(self, state: SearchState) -> Dict[str, Any]:
        """Fetch and extract each unique cited URL, up to ``max_fetch_urls``."""
        sources = collect_unique_sources(state.get("grounded") or [])
        limit = self.ctx.settings.max_fetch_urls
        if limit <= 0:
            limit = len(sources)
        targets, rest = sources[:limit], sources[limit:]

        docs = await bounded_gather(
            self._fetch_document, targets, self.ctx.settings.fetch_concurrency
        )
        documents = {key: doc for (key, _), doc in zip(targets, docs)}
        for key, citation in rest:
            documents[key] = ExtractedDocument.skipped(
                citation.url, f"fetch limit of {limit} URLs reached"
            )
        log.info("Fetched %d URLs, skipped %d", len(targets), len(rest))
        return {"documents": documents, "stage": "merging"}

    async def merge_node(self, state: SearchState) -> Dict[str, Any]:
        """Rank and merge, then write the run log record."""
        query = state["query"]
        variants = state.get("variants") or []
        degraded = state.get("degraded_variants") or []
        result_set = merge_results(
            query,
            state.get("grounded") or [],
            state.get("documents") or {},
            snippet_chars=self.ctx.settings.snippet_chars,
            degraded_variants=degraded,
        )

        elapsed_ms = (time.monotonic() - state.get("start_time", time.monotonic())) * 1000
        statuses = Counter(r.extraction_status.value for r in result_set.results)
        log.info("Search finished: %d results in %.0fms", len(result_set), elapsed_ms)
        log_search_run(
            query=query.text,
            languages=[v.language for v in variants],
            variant_count=len(variants),
            degraded_variants=[v.language for v in degraded],
            result_count=len(result_set),
            status_counts=dict(statuses),
            elapsed_ms=elapsed_ms,
            path=self.ctx.settings.run_log_file,
        )
        return {"result_set": result_set, "stage": "done"}

    # ---- Helpers ---------------------------------------------------------

    async def _ground_variant(self, variant: QueryVariant) -> Optional[GroundedAnswer]:
        s = self.ctx.settings
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max(1, s.grounding_max_attempts)),
            wait=wait_exponential(multiplier=s.backoff_base, max=s.backoff_max),
            retry=retry_if_exception(_is_transient),
            before_sleep=before_sleep_log(log, logging.WARNING),
            reraise=True,
        )
        try:
            return await retrying(self._ground_once, variant)
        except UnauthorizedError:
            raise
        except GroundingError as exc:
            log.warning("Variant degraded (%s): %s", variant.language, exc)
            return None

    async def _ground_once(self, variant: QueryVariant) -> GroundedAnswer:
        timeout = self.ctx.settings.grounding_timeout
        try:
            return await asyncio.wait_for(self.ctx.grounding.ground(variant), timeout)
        except asyncio.TimeoutError as exc:
            raise UnavailableError(f"grounding timed out after {timeout:g}s") from exc

    async def _fetch_document(self, source: Tuple[str, Citation]) -> ExtractedDocument:
        _key, citation = source
        try:
            page = await self.ctx.fetcher.fetch(citation.url)
        except FetchError as exc:
            log.info("Fetch failed for %s: %s", citation.url, exc)
            return ExtractedDocument.failed(citation.url, str(exc) or type(exc).__name__)
        except Exception as exc:
            log.warning("Unexpected fetch error for %s", citation.url, exc_info=True)
            return ExtractedDocument.failed(citation.url, f"{type(exc).__name__}: {exc}")

        # trafilatura parsing is CPU-bound; keep the event loop free for siblings.
        doc = await asyncio.to_thread(
            self.ctx.extractor.extract, citation.url, page.content, page.content_type
        )
        if page.final_url != citation.url:
            doc = dataclasses.replace(doc, metadata={**doc.metadata, "final_url": page.final_url})
        return doc
