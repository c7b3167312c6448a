"""Raw bytes -> text, and HTML -> Markdown/plain text conversion."""

import codecs
import re
from typing import Optional

from bs4 import BeautifulSoup
from markdownify import markdownify

from scout.utils.logger import get_logger

log = get_logger(__name__)

NOISE_TAGS = ["script", "style", "noscript", "template", "iframe", "svg"]

_META_CHARSET = re.compile(rb"""<meta[^>]+charset\s*=\s*["']?\s*([A-Za-z0-9_.:-]+)""", re.I)


def charset_from_content_type(content_type: str) -> Optional[str]:
    """Return the ``charset`` parameter of a Content-Type header, lowercased."""
    for param in (content_type or "").split(";")[1:]:
        key, _, value = param.strip().partition("=")
        if key.strip().lower() == "charset":
            value = value.strip().strip('"').strip("'")
            if value:
                return value.lower()
    return None


def sniff_charset(raw: bytes) -> Optional[str]:
    """Look for a ``<meta charset>`` declaration in the first 2 KB."""
    match = _META_CHARSET.search(raw[:2048])
    if not match:
        return None
    return match.group(1).decode("ascii", errors="ignore").lower() or None


def decode_body(raw: bytes, charset: Optional[str] = None) -> str:
    """Decode *raw* with *charset*, falling back to UTF-8 for unknown labels."""
    label = charset or "utf-8"
    try:
        codecs.lookup(label)
        return raw.decode(label, errors="replace")
    except LookupError:
        # Unknown label, or a non-text codec such as "base64".
        log.debug("Unknown charset %r, decoding as utf-8", label)
        return raw.decode("utf-8", errors="replace")


def normalize_text(text: str) -> str:
    """Trim trailing spaces per line and collapse runs of blank lines."""
    if not text:
        return ""
    lines = [line.rstrip() for line in text.replace("\r\n", "\n").replace("\r", "\n").split("\n")]
    out = "\n".join(lines)
    out = re.sub(r"[ \t]{2,}", " ", out)
    out = re.sub(r"\n{3,}", "\n\n", out)
    return out.strip()


def collapse_whitespace(text: str) -> str:
    return " ".join((text or "").split())


def _strip_noise(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(NOISE_TAGS):
        tag.decompose()
    return str(soup)


def html_to_markdown(html: str) -> str:
    """Convert an HTML string to clean Markdown."""
    if not html or not html.strip():
        return ""
    md = markdownify(_strip_noise(html), heading_style="ATX", strip=["img"])
    # Collapse excessive blank lines
    md = re.sub(r"\n{3,}", "\n\n", md)
    return md.strip()


def html_to_text(html: str) -> str:
    """Visible text of *html*, one block per line."""
    if not html or not html.strip():
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(NOISE_TAGS):
        tag.decompose()
    return normalize_text(soup.get_text("\n"))
