"""Query, variant and result types shared across the search pipeline."""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterator, Optional, Tuple

from scout.web.extractor import ExtractionStatus


@dataclass(frozen=True)
class Query:
    """A user search string plus the secondary language to search in."""

    text: str
    secondary_language: str = "auto"


@dataclass(frozen=True)
class QueryVariant:
    """One language form of a query, grounded independently."""

    text: str
    language: str


@dataclass(frozen=True)
class SearchResult:
    """One source, merged across every variant that cited it."""

    url: str
    normalized_url: str
    title: str
    snippet: str
    body_text: str
    source_languages: FrozenSet[str]
    citation_count: int
    extraction_status: ExtractionStatus
    failure_reason: Optional[str] = None

    @property
    def has_content(self) -> bool:
        return self.extraction_status in (ExtractionStatus.OK, ExtractionStatus.DEGRADED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "normalized_url": self.normalized_url,
            "title": self.title,
            "snippet": self.snippet,
            "source_languages": sorted(self.source_languages),
            "citation_count": self.citation_count,
            "extraction_status": self.extraction_status.value,
            "failure_reason": self.failure_reason,
        }


@dataclass(frozen=True)
class SearchResultSet:
    """Ranked, deduplicated results for one query.  Read-only for formatters."""

    query: Query
    results: Tuple[SearchResult, ...] = ()
    answers: Tuple[Tuple[str, str], ...] = ()
    degraded_variants: Tuple[QueryVariant, ...] = ()

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[SearchResult]:
        return iter(self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query.text,
            "secondary_language": self.query.secondary_language,
            "answers": [{"language": lang, "text": text} for lang, text in self.answers],
            "degraded_variants": [
                {"language": v.language, "text": v.text} for v in self.degraded_variants
            ],
            "results": [r.to_dict() for r in self.results],
        }
