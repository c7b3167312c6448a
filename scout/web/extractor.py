"""Turn a fetched page into an ``ExtractedDocument``.

``Extractor.extract`` is total: whatever the bytes look like it returns a
document, marking best-effort output as ``degraded`` instead of raising.

HTML goes through trafilatura for main-content extraction.  When that finds
nothing readable (link farms, app shells, very short pages) the whole page is
converted to Markdown instead and the document is marked ``degraded``.
"""

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional, Tuple

import trafilatura
from bs4 import BeautifulSoup

from scout.utils.logger import get_logger
from scout.utils.urls import redact_url_credentials
from scout.web.converter import (
    charset_from_content_type,
    collapse_whitespace,
    decode_body,
    html_to_markdown,
    html_to_text,
    normalize_text,
    sniff_charset,
)

log = get_logger(__name__)

_TAG = re.compile(r"<[^>]+>")


class ExtractionStatus(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ExtractedDocument:
    """Normalized content of one fetched URL."""

    url: str
    title: str
    body_text: str
    fetched_at: datetime
    extraction_status: ExtractionStatus
    failure_reason: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def failed(cls, url: str, reason: str) -> "ExtractedDocument":
        return cls(
            url=url,
            title="",
            body_text="",
            fetched_at=datetime.now(timezone.utc),
            extraction_status=ExtractionStatus.FAILED,
            failure_reason=reason,
        )

    @classmethod
    def skipped(cls, url: str, reason: str) -> "ExtractedDocument":
        return cls(
            url=url,
            title="",
            body_text="",
            fetched_at=datetime.now(timezone.utc),
            extraction_status=ExtractionStatus.SKIPPED,
            failure_reason=reason,
        )

    @property
    def has_content(self) -> bool:
        return self.extraction_status in (ExtractionStatus.OK, ExtractionStatus.DEGRADED)


def content_kind(content_type: str, text: str) -> str:
    """Classify a page as ``html``, ``json``, ``xml`` or ``text``."""
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    if mime in ("text/html", "application/xhtml+xml"):
        return "html"
    if mime == "application/json" or mime.endswith("+json"):
        return "json"
    if mime in ("application/xml", "text/xml") or mime.endswith("+xml"):
        return "xml"
    if mime:
        return "text"

    head = text.lstrip()[:512].lower()
    if head.startswith("<!doctype html") or "<html" in head or "<body" in head:
        return "html"
    if head.startswith(("{", "[")):
        return "json"
    if head.startswith("<?xml"):
        return "xml"
    return "text"


def detect_title(soup: BeautifulSoup) -> str:
    """og:title, then <title>, then the first <h1>."""
    og = soup.find("meta", attrs={"property": "og:title"})
    if og and og.get("content"):
        title = collapse_whitespace(og["content"])
        if title:
            return title
    if soup.title and soup.title.string:
        title = collapse_whitespace(soup.title.string)
        if title:
            return title
    h1 = soup.find("h1")
    if h1:
        return collapse_whitespace(h1.get_text(" "))
    return ""


def _meta_content(soup: BeautifulSoup, **attrs) -> str:
    tag = soup.find("meta", attrs=attrs)
    if tag and tag.get("content"):
        return collapse_whitespace(tag["content"])
    return ""


def page_metadata(html: str) -> Tuple[str, Dict[str, str]]:
    """Return (title, metadata) detected from the page head."""
    soup = BeautifulSoup(html, "html.parser")
    meta: Dict[str, str] = {}
    author = _meta_content(soup, name="author") or _meta_content(soup, property="article:author")
    if author:
        meta["author"] = author
    published = (
        _meta_content(soup, property="article:published_time")
        or _meta_content(soup, name="date")
        or _meta_content(soup, itemprop="datePublished")
    )
    if published:
        meta["published"] = published
    return detect_title(soup), meta


class Extractor:
    """Extract title, body text and metadata from raw page bytes."""

    def __init__(self, favor_precision: bool = True):
        self.favor_precision = favor_precision

    def extract(
        self,
        url: str,
        raw: bytes,
        content_type: str = "",
        fetched_at: Optional[datetime] = None,
    ) -> ExtractedDocument:
        fetched_at = fetched_at or datetime.now(timezone.utc)
        text = ""
        try:
            charset = charset_from_content_type(content_type) or sniff_charset(raw)
            text = decode_body(raw, charset)
            kind = content_kind(content_type, text)
            if kind == "html":
                title, body, status, meta = self._extract_html(url, text)
            elif kind == "json":
                title, body, status, meta = self._extract_json(text)
            elif kind == "xml":
                title, body, status, meta = "", html_to_text(text), ExtractionStatus.OK, {}
            else:
                title, body, status, meta = "", normalize_text(text), ExtractionStatus.OK, {}
        except Exception:
            log.warning("Extraction failed for %s, using raw text", redact_url_credentials(url), exc_info=True)
            if not text:
                text = raw.decode("utf-8", errors="replace")
            title, body, status, meta = "", normalize_text(_TAG.sub(" ", text)), ExtractionStatus.DEGRADED, {}

        if not body:
            status = ExtractionStatus.DEGRADED
        if content_type:
            meta["content_type"] = content_type
        return ExtractedDocument(
            url=url,
            title=title,
            body_text=body,
            fetched_at=fetched_at,
            extraction_status=status,
            metadata=meta,
        )

    def _extract_html(self, url: str, html: str):
        try:
            title, meta = page_metadata(html)
        except Exception:
            log.debug("Metadata parse failed for %s", redact_url_credentials(url), exc_info=True)
            title, meta = "", {}

        body = None
        try:
            body = trafilatura.extract(
                html,
                url=url,
                include_comments=False,
                include_tables=True,
                favor_precision=self.favor_precision,
            )
        except Exception:
            log.warning("trafilatura failed for %s", redact_url_credentials(url), exc_info=True)

        if body and body.strip():
            return title, normalize_text(body), ExtractionStatus.OK, meta

        # Raw fallback: convert the whole page.
        log.debug("No readable main content in %s, converting whole page", redact_url_credentials(url))
        try:
            fallback = html_to_markdown(html)
        except Exception:
            log.warning("Markdown conversion failed for %s", redact_url_credentials(url), exc_info=True)
            fallback = normalize_text(_TAG.sub(" ", html))
        return title, fallback, ExtractionStatus.DEGRADED, meta

    def _extract_json(self, text: str):
        try:
            parsed = json.loads(text)
        except ValueError:
            return "", normalize_text(text), ExtractionStatus.DEGRADED, {}
        return "", json.dumps(parsed, indent=2, ensure_ascii=False), ExtractionStatus.OK, {}
