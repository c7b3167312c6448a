"""Bilingual query expansion."""

from typing import List, Optional, Protocol

from scout.search.lang import AUTO, Language, LANGUAGES, detect_language, get_language, to_english_terms
from scout.search.models import Query, QueryVariant
from scout.utils.logger import get_logger

log = get_logger(__name__)


class ExpansionError(ValueError):
    """The query's secondary language is not supported."""


class Translator(Protocol):
    def translate(self, text: str, language: Language) -> Optional[str]: ...


class BilingualExpander:
    """Expand one query into an original-language and a secondary-language variant.

    The first variant is the query as typed, tagged with its detected
    language.  The second is the query in the secondary language (LLM
    translation when a translator is configured, a heuristic otherwise)
    followed by that language's answer instruction, so the two never
    collide even when both languages are the same.
    """

    def __init__(self, translator: Optional[Translator] = None):
        self.translator = translator

    def resolve_secondary(self, tag: str, primary: str) -> Language:
        if (tag or "").strip().lower() in ("", AUTO):
            return LANGUAGES["ja"] if primary == "en" else LANGUAGES["en"]
        language = get_language(tag)
        if language is None:
            supported = ", ".join(sorted(LANGUAGES))
            raise ExpansionError(f"unsupported language {tag!r} (supported: {supported}, auto)")
        return language

    def expand(self, query: Query) -> List[QueryVariant]:
        text = query.text.strip()
        primary = detect_language(text)
        secondary = self.resolve_secondary(query.secondary_language, primary)

        translated = self._translate(text, primary, secondary)
        variants = [
            QueryVariant(text=text, language=primary),
            QueryVariant(text=f"{translated} {secondary.instruction}".strip(), language=secondary.tag),
        ]
        log.info(
            "Expanded query into %s",
            ", ".join(f"{v.language}: {v.text!r}" for v in variants),
        )
        return variants

    def _translate(self, text: str, primary: str, secondary: Language) -> str:
        if secondary.tag == primary:
            return text
        if self.translator is not None:
            translated = self.translator.translate(text, secondary)
            if translated:
                return translated
            log.info("Translator returned nothing, falling back to heuristic")
        if secondary.tag == "en":
            return to_english_terms(text) or text
        return text
