"""Web module -- page fetching, content extraction, HTML conversion."""

from scout.web.extractor import ExtractedDocument, ExtractionStatus, Extractor
from scout.web.fetcher import FetchedPage, FetchError, Fetcher

__all__ = [
    "ExtractedDocument",
    "ExtractionStatus",
    "Extractor",
    "FetchedPage",
    "FetchError",
    "Fetcher",
]
