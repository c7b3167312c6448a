"""Search orchestration: expand -> ground -> fetch -> merge."""

import asyncio
import time
from typing import List, Optional, Sequence, Union

from scout.search.context import SearchContext, open_context
from scout.search.graph import build_graph
from scout.search.models import Query, SearchResultSet
from scout.search.nodes import SearchNodes
from scout.utils.config import Settings, settings as default_settings


class SearchEngine:
    """Runs one bilingual grounded search per call.

    Concurrency: at most ``grounding_concurrency`` grounding calls and
    ``fetch_concurrency`` fetches are in flight for one search.  With V
    variants, U fetched URLs, A attempts, T per-attempt timeout and B the
    capped backoff sum, a search finishes within roughly::

        ceil(V / grounding_concurrency) * (A_g * T_g + B_g)
      + ceil(U / fetch_concurrency)     * (A_f * T_f + B_f)

    plus expansion and extraction time.

    Failures: an unsupported secondary language raises ``ExpansionError``
    and rejected credentials raise ``UnauthorizedError``.  Anything else
    degrades a variant or marks a result failed; the search still returns.

    Cancelling ``search`` cancels every in-flight grounding and fetch call
    before the cancellation propagates.  One engine may serve concurrent
    searches; no state is shared between runs.
    """

    def __init__(self, context: SearchContext):
        self.context = context
        self._graph = build_graph(SearchNodes(context))

    async def search(self, query: Query) -> SearchResultSet:
        result = await self._graph.ainvoke(
            {"query": query, "stage": "expanding", "start_time": time.monotonic()}
        )
        return result["result_set"]

    async def search_many(
        self, queries: Sequence[Query]
    ) -> List[Union[SearchResultSet, BaseException]]:
        """Run independent searches concurrently.

        A fatal error in one search is returned in its slot instead of
        aborting the others.
        """
        return await asyncio.gather(*(self.search(q) for q in queries), return_exceptions=True)


async def run_search(query: Query, settings: Optional[Settings] = None) -> SearchResultSet:
    """One-shot convenience: build a context from settings, search, clean up."""
    async with open_context(settings or default_settings) as ctx:
        return await SearchEngine(ctx).search(query)
