"""Merge grounded citations and extracted documents into ranked results.

Pure functions: no I/O, deterministic for identical inputs.

Ranking: sources cited by more (variant, citation) pairs come first; ties
keep the order in which the source was first cited across variants in
expansion order; the normalized URL breaks whatever is left.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

from scout.grounding.provider import Citation, GroundedAnswer
from scout.search.models import Query, QueryVariant, SearchResult, SearchResultSet
from scout.utils.urls import normalize_url
from scout.web.converter import collapse_whitespace
from scout.web.extractor import ExtractedDocument, ExtractionStatus

Grounded = Sequence[Tuple[QueryVariant, Optional[GroundedAnswer]]]


@dataclass
class _Entry:
    url: str
    first_position: int
    count: int = 0
    languages: Set[str] = field(default_factory=set)
    citations: List[Citation] = field(default_factory=list)


def collect_unique_sources(grounded: Grounded) -> List[Tuple[str, Citation]]:
    """(normalized URL, first citation) for every cited source, first-seen order."""
    seen: Dict[str, Citation] = {}
    for _variant, answer in grounded:
        if answer is None:
            continue
        for citation in answer.citations:
            key = normalize_url(citation.url)
            if key and key not in seen:
                seen[key] = citation
    return list(seen.items())


def truncate_snippet(text: str, limit: int) -> str:
    text = collapse_whitespace(text)
    if limit <= 0 or len(text) <= limit:
        return text
    cut = text[:limit]
    space = cut.rfind(" ")
    if space > limit * 0.6:
        cut = cut[:space]
    return cut.rstrip() + "..."


def _pick_title(entry: _Entry, doc: Optional[ExtractedDocument]) -> str:
    if doc is not None and doc.has_content and doc.title.strip():
        return doc.title.strip()
    for citation in entry.citations:
        if citation.title.strip():
            return citation.title.strip()
    return entry.url


def _pick_snippet(entry: _Entry, doc: Optional[ExtractedDocument], title: str, limit: int) -> str:
    if doc is not None and doc.has_content and doc.body_text.strip():
        return truncate_snippet(doc.body_text, limit)
    for citation in entry.citations:
        if citation.snippet.strip():
            return truncate_snippet(citation.snippet, limit)
    return title


def _build_result(
    key: str, entry: _Entry, doc: Optional[ExtractedDocument], snippet_chars: int
) -> SearchResult:
    title = _pick_title(entry, doc)
    if doc is None:
        # Cited but never handed to the fetch stage.
        status, reason, body = ExtractionStatus.SKIPPED, "not fetched", ""
    else:
        status, reason, body = doc.extraction_status, doc.failure_reason, doc.body_text
    return SearchResult(
        url=entry.url,
        normalized_url=key,
        title=title,
        snippet=_pick_snippet(entry, doc, title, snippet_chars),
        body_text=body,
        source_languages=frozenset(entry.languages),
        citation_count=entry.count,
        extraction_status=status,
        failure_reason=reason,
    )


def merge_results(
    query: Query,
    grounded: Grounded,
    documents: Mapping[str, ExtractedDocument],
    snippet_chars: int = 500,
    degraded_variants: Sequence[QueryVariant] = (),
) -> SearchResultSet:
    """Build the final ``SearchResultSet``.

    *grounded* pairs each variant (in expansion order) with its answer, or
    None when the variant degraded.  *documents* is keyed by normalized URL.
    """
    entries: Dict[str, _Entry] = {}
    position = 0
    for variant, answer in grounded:
        if answer is None:
            continue
        for citation in answer.citations:
            key = normalize_url(citation.url)
            if not key:
                continue
            entry = entries.get(key)
            if entry is None:
                entry = entries[key] = _Entry(url=citation.url, first_position=position)
            entry.count += 1
            entry.languages.add(variant.language)
            entry.citations.append(citation)
            position += 1

    ranked = sorted(
        entries.items(),
        key=lambda item: (-item[1].count, item[1].first_position, item[0]),
    )
    results = tuple(
        _build_result(key, entry, documents.get(key), snippet_chars) for key, entry in ranked
    )
    answers = tuple(
        (variant.language, answer.answer_text)
        for variant, answer in grounded
        if answer is not None and answer.answer_text.strip()
    )
    return SearchResultSet(
        query=query,
        results=results,
        answers=answers,
        degraded_variants=tuple(degraded_variants),
    )
