"""Search module -- query expansion, orchestration, merging."""

from scout.search.bilingual import BilingualExpander, ExpansionError
from scout.search.context import SearchContext, open_context
from scout.search.engine import SearchEngine, run_search
from scout.search.models import Query, QueryVariant, SearchResult, SearchResultSet

__all__ = [
    "BilingualExpander",
    "ExpansionError",
    "Query",
    "QueryVariant",
    "SearchContext",
    "SearchEngine",
    "SearchResult",
    "SearchResultSet",
    "open_context",
    "run_search",
]
