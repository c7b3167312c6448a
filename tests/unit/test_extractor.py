"""Unit tests for content extraction.

trafilatura is patched where the test depends on whether it finds main
content, so results do not hinge on its heuristics.
"""

import json
from unittest.mock import patch

from scout.web.extractor import (
    ExtractedDocument,
    ExtractionStatus,
    Extractor,
    content_kind,
    page_metadata,
)

PAGE = b"""<html><head>
<title>Tokio - An asynchronous Rust runtime</title>
<meta name="author" content="Tokio Contributors">
<meta property="article:published_time" content="2024-05-01">
</head><body><nav>Home | Docs</nav><article><h1>Tokio</h1>
<p>Tokio is an event-driven, non-blocking I/O platform.</p></article></body></html>"""


def test_html_main_content_ok():
    with patch("scout.web.extractor.trafilatura.extract", return_value="Tokio is an event-driven platform."):
        doc = Extractor().extract("https://tokio.rs", PAGE, "text/html; charset=utf-8")
    assert doc.extraction_status is ExtractionStatus.OK
    assert doc.title == "Tokio - An asynchronous Rust runtime"
    assert doc.body_text == "Tokio is an event-driven platform."
    assert doc.metadata["author"] == "Tokio Contributors"
    assert doc.metadata["published"] == "2024-05-01"
    assert doc.metadata["content_type"] == "text/html; charset=utf-8"


def test_html_fallback_is_degraded():
    with patch("scout.web.extractor.trafilatura.extract", return_value=None):
        doc = Extractor().extract("https://tokio.rs", PAGE, "text/html")
    assert doc.extraction_status is ExtractionStatus.DEGRADED
    assert "non-blocking I/O platform" in doc.body_text
    assert doc.title.startswith("Tokio")


def test_trafilatura_exception_is_degraded():
    with patch("scout.web.extractor.trafilatura.extract", side_effect=RuntimeError("parser")):
        doc = Extractor().extract("https://tokio.rs", PAGE, "text/html")
    assert doc.extraction_status is ExtractionStatus.DEGRADED
    assert doc.body_text


def test_unexpected_failure_falls_back_to_raw_text():
    with patch("scout.web.extractor.content_kind", side_effect=RuntimeError("boom")):
        doc = Extractor().extract("https://x.com", b"<p>raw <b>words</b></p>", "text/html")
    assert doc.extraction_status is ExtractionStatus.DEGRADED
    assert "raw" in doc.body_text and "words" in doc.body_text
    assert "<p>" not in doc.body_text


def test_plain_text_ok():
    doc = Extractor().extract("https://x.com/a.txt", b"line one\n\n\n\nline two", "text/plain")
    assert doc.extraction_status is ExtractionStatus.OK
    assert doc.body_text == "line one\n\nline two"
    assert doc.title == ""


def test_json_pretty_printed():
    raw = json.dumps({"name": "tokio", "stars": 1}).encode()
    doc = Extractor().extract("https://api.x.com", raw, "application/json")
    assert doc.extraction_status is ExtractionStatus.OK
    assert json.loads(doc.body_text) == {"name": "tokio", "stars": 1}
    assert "\n" in doc.body_text


def test_invalid_json_degraded():
    doc = Extractor().extract("https://api.x.com", b"{not json", "application/json")
    assert doc.extraction_status is ExtractionStatus.DEGRADED
    assert doc.body_text == "{not json"


def test_empty_body_degraded():
    doc = Extractor().extract("https://x.com", b"", "text/plain")
    assert doc.extraction_status is ExtractionStatus.DEGRADED
    assert doc.body_text == ""


def test_charset_from_header_used():
    raw = "非同期ランタイム".encode("euc-jp")
    doc = Extractor().extract("https://x.jp", raw, "text/plain; charset=EUC-JP")
    assert doc.body_text == "非同期ランタイム"


def test_charset_sniffed_from_meta():
    html = '<html><head><meta charset="shift_jis"><title>日本語</title></head><body><p>本文</p></body></html>'
    with patch("scout.web.extractor.trafilatura.extract", return_value="本文"):
        doc = Extractor().extract("https://x.jp", html.encode("shift_jis"), "text/html")
    assert doc.title == "日本語"
    assert doc.body_text == "本文"


def test_content_kind_sniffing():
    assert content_kind("", "<!DOCTYPE html><html></html>") == "html"
    assert content_kind("", '{"a": 1}') == "json"
    assert content_kind("", "<?xml version='1.0'?><a/>") == "xml"
    assert content_kind("", "hello") == "text"
    assert content_kind("application/atom+xml", "") == "xml"
    assert content_kind("text/markdown", "") == "text"


def test_title_prefers_og_title():
    title, _ = page_metadata(
        '<html><head><meta property="og:title" content="OG"><title>T</title></head></html>'
    )
    assert title == "OG"


def test_title_falls_back_to_h1():
    title, meta = page_metadata("<html><body><h1> Heading  one </h1></body></html>")
    assert title == "Heading one"
    assert meta == {}


def test_failed_and_skipped_constructors():
    failed = ExtractedDocument.failed("https://x.com", "HTTP status 404")
    assert failed.extraction_status is ExtractionStatus.FAILED
    assert failed.failure_reason == "HTTP status 404"
    assert not failed.has_content
    skipped = ExtractedDocument.skipped("https://y.com", "limit")
    assert skipped.extraction_status is ExtractionStatus.SKIPPED
