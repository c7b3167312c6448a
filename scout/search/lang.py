"""Supported search languages and script-based language detection."""

import re
from dataclasses import dataclass
from typing import Dict, Optional

AUTO = "auto"


@dataclass(frozen=True)
class Language:
    tag: str
    name: str
    instruction: str  # appended to a variant so the answer comes back in this language


LANGUAGES: Dict[str, Language] = {
    "en": Language("en", "English", "(answer in English)"),
    "ja": Language("ja", "Japanese", "(日本語で回答)"),
    "zh": Language("zh", "Chinese", "(请用中文回答)"),
    "ko": Language("ko", "Korean", "(한국어로 답변)"),
    "de": Language("de", "German", "(auf Deutsch antworten)"),
    "fr": Language("fr", "French", "(répondre en français)"),
    "es": Language("es", "Spanish", "(responder en español)"),
}

_KANA = re.compile(r"[぀-ゟ゠-ヿ]")
_CJK = re.compile(r"[㐀-䶿一-鿿]")
_HANGUL = re.compile(r"[가-힯ᄀ-ᇿ㄰-㆏]")
_ASCII_TERM = re.compile(r"[A-Za-z0-9._-]+")


def canonical_tag(tag: str) -> str:
    """``ja-JP`` -> ``ja``, ``EN`` -> ``en``."""
    return (tag or "").strip().lower().replace("_", "-").split("-", 1)[0]


def get_language(tag: str) -> Optional[Language]:
    return LANGUAGES.get(canonical_tag(tag))


def contains_japanese(text: str) -> bool:
    return bool(_KANA.search(text) or _CJK.search(text))


def detect_language(text: str) -> str:
    """Primary language of *text* by script: ``ja``, ``ko`` or ``en``.

    Han characters without kana are treated as Japanese.
    """
    if _KANA.search(text):
        return "ja"
    if _HANGUL.search(text):
        return "ko"
    if contains_japanese(text):
        return "ja"
    return "en"


def to_english_terms(text: str) -> str:
    """Best-effort English query: the ASCII technical terms in *text*.

    ``"Rust MCP SDK の使い方"`` -> ``"Rust MCP SDK"``.  Returns an empty string
    when there are none.
    """
    terms = [t for t in _ASCII_TERM.findall(text) if len(t) >= 2]
    return " ".join(terms)
