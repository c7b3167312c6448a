"""Unit tests for result merging and ranking."""

from datetime import datetime, timezone

from scout.grounding.provider import Citation, GroundedAnswer
from scout.search.merge import collect_unique_sources, merge_results, truncate_snippet
from scout.search.models import Query, QueryVariant
from scout.web.extractor import ExtractedDocument, ExtractionStatus

EN = QueryVariant("rust async runtimes", "en")
JA = QueryVariant("rust async runtimes (日本語で回答)", "ja")
QUERY = Query("rust async runtimes", "ja")


def _answer(*urls, text="answer"):
    return GroundedAnswer(
        answer_text=text,
        citations=tuple(Citation(url=u, title=f"title {u}", snippet=f"snippet {u}") for u in urls),
    )


def _doc(url, title="", body="", status=ExtractionStatus.OK):
    return ExtractedDocument(
        url=url,
        title=title,
        body_text=body,
        fetched_at=datetime.now(timezone.utc),
        extraction_status=status,
    )


def test_overlap_ranked_first_with_both_languages():
    grounded = [
        (EN, _answer("https://a.com", "https://b.com")),
        (JA, _answer("https://b.com/", "https://c.com")),
    ]
    rs = merge_results(QUERY, grounded, {})
    assert [r.normalized_url for r in rs.results] == [
        "https://b.com",
        "https://a.com",
        "https://c.com",
    ]
    top = rs.results[0]
    assert top.citation_count == 2
    assert top.source_languages == frozenset({"en", "ja"})
    assert rs.results[1].source_languages == frozenset({"en"})
    assert rs.results[2].source_languages == frozenset({"ja"})


def test_duplicate_within_one_variant_counts_twice():
    grounded = [(EN, _answer("https://a.com/x", "https://A.com/x#frag"))]
    rs = merge_results(QUERY, grounded, {})
    assert len(rs) == 1
    assert rs.results[0].citation_count == 2
    assert rs.results[0].url == "https://a.com/x"


def test_normalized_urls_unique():
    grounded = [
        (EN, _answer("https://a.com", "https://a.com/", "https://a.com:443")),
        (JA, _answer("https://A.com/#x", "https://b.com")),
    ]
    rs = merge_results(QUERY, grounded, {})
    keys = [r.normalized_url for r in rs.results]
    assert len(keys) == len(set(keys)) == 2
    assert rs.results[0].citation_count == 4


def test_tie_broken_by_first_appearance():
    grounded = [(EN, _answer("https://z.com", "https://a.com"))]
    rs = merge_results(QUERY, grounded, {})
    assert [r.normalized_url for r in rs.results] == ["https://z.com", "https://a.com"]


def test_degraded_variant_contributes_nothing():
    grounded = [(EN, None), (JA, _answer("https://c.com"))]
    rs = merge_results(QUERY, grounded, {}, degraded_variants=[EN])
    assert [r.normalized_url for r in rs.results] == ["https://c.com"]
    assert rs.degraded_variants == (EN,)
    assert rs.answers == (("ja", "answer"),)


def test_document_title_and_body_preferred():
    grounded = [(EN, _answer("https://a.com"))]
    docs = {"https://a.com": _doc("https://a.com", title="Real Title", body="Body text here.")}
    r = merge_results(QUERY, grounded, docs).results[0]
    assert r.title == "Real Title"
    assert r.snippet == "Body text here."
    assert r.body_text == "Body text here."
    assert r.extraction_status is ExtractionStatus.OK


def test_failed_document_falls_back_to_citation():
    grounded = [(EN, _answer("https://a.com"))]
    docs = {"https://a.com": ExtractedDocument.failed("https://a.com", "timed out after 15s")}
    r = merge_results(QUERY, grounded, docs).results[0]
    assert r.extraction_status is ExtractionStatus.FAILED
    assert r.failure_reason == "timed out after 15s"
    assert r.title == "title https://a.com"
    assert r.snippet == "snippet https://a.com"


def test_title_falls_back_to_url():
    grounded = [(EN, GroundedAnswer("a", (Citation("https://a.com/page"),)))]
    r = merge_results(QUERY, grounded, {}).results[0]
    assert r.title == "https://a.com/page"
    assert r.snippet == "https://a.com/page"
    assert r.extraction_status is ExtractionStatus.SKIPPED


def test_empty_citation_url_ignored():
    grounded = [(EN, GroundedAnswer("a", (Citation(""), Citation("https://a.com"))))]
    rs = merge_results(QUERY, grounded, {})
    assert [r.url for r in rs.results] == ["https://a.com"]


def test_no_citations_gives_empty_set():
    rs = merge_results(QUERY, [(EN, GroundedAnswer("nothing")), (JA, GroundedAnswer(""))], {})
    assert len(rs) == 0
    assert rs.answers == (("en", "nothing"),)


def test_merge_is_deterministic():
    grounded = [
        (EN, _answer("https://x.com", "https://y.com", "https://z.com")),
        (JA, _answer("https://z.com", "https://w.com", "https://x.com")),
    ]
    first = merge_results(QUERY, grounded, {})
    for _ in range(5):
        assert merge_results(QUERY, grounded, {}) == first


def test_collect_unique_sources_first_seen_order():
    grounded = [
        (EN, _answer("https://b.com", "https://a.com")),
        (JA, _answer("https://a.com/", "https://c.com")),
        (QueryVariant("x", "de"), None),
    ]
    keys = [key for key, _ in collect_unique_sources(grounded)]
    assert keys == ["https://b.com", "https://a.com", "https://c.com"]


def test_truncate_snippet():
    assert truncate_snippet("short   text", 50) == "short text"
    out = truncate_snippet("word " * 100, 40)
    assert out.endswith("...")
    assert len(out) <= 43


def test_to_dict_shape():
    grounded = [(EN, _answer("https://a.com")), (JA, _answer("https://a.com"))]
    d = merge_results(QUERY, grounded, {}).to_dict()
    assert d["query"] == "rust async runtimes"
    assert d["results"][0]["source_languages"] == ["en", "ja"]
    assert d["results"][0]["extraction_status"] == "skipped"
    assert d["results"][0]["citation_count"] == 2
