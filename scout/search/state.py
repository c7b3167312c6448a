"""Search state schema -- the TypedDict that flows through every node."""

from typing import Dict, List, Optional, Tuple, TypedDict

from scout.grounding.provider import GroundedAnswer
from scout.search.models import Query, QueryVariant, SearchResultSet
from scout.web.extractor import ExtractedDocument


class SearchState(TypedDict, total=False):
    """State carried across the search state machine.

    Every node receives the full state and returns a *partial* dict with only
    the keys it wants to update.
    """

    # Input
    query: Query

    # Expansion
    variants: List[QueryVariant]

    # Grounding (one entry per variant, None when it degraded)
    grounded: List[Tuple[QueryVariant, Optional[GroundedAnswer]]]
    degraded_variants: List[QueryVariant]

    # Fetch / extract, keyed by normalized URL
    documents: Dict[str, ExtractedDocument]

    # Output
    result_set: Optional[SearchResultSet]

    # Observability
    stage: str          # "expanding" | "grounding" | "fetching" | "merging" | "done"
    start_time: float
