"""Query translation via any OpenAI-compatible chat completions API.

Used by the bilingual expander when an API key is configured.  Failures
return ``None`` so the expander can fall back to its heuristic.
"""

from typing import Optional

from openai import OpenAI

from scout.search.lang import Language
from scout.utils.config import settings
from scout.utils.logger import get_logger

log = get_logger(__name__)

TRANSLATE_PROMPT = """Translate this web search query into {language}.

Keep product names, library names, and other technical terms as they are.
Reply with the translated query only, on one line, without quotes or explanation.

Query: {query}"""


class QueryTranslator:
    """Thin wrapper around the chat completions API for short queries."""

    def __init__(self, model: str | None = None, api_key: str | None = None):
        self.model = model or settings.translation_model
        self._client = OpenAI(api_key=api_key or settings.openai_api_key)

    def translate(self, text: str, language: Language) -> Optional[str]:
        """Return *text* translated into *language*, or None on any failure."""
        messages = [
            {
                "role": "user",
                "content": TRANSLATE_PROMPT.format(language=language.name, query=text),
            }
        ]
        try:
            resp = self._client.chat.completions.create(model=self.model, messages=messages)
            msg = resp.choices[0].message
            content = msg.content if msg else None
        except Exception:
            log.warning("Query translation to %s failed", language.tag, exc_info=True)
            return None
        if not content or not content.strip():
            return None
        return content.strip().splitlines()[0].strip().strip('"“”「」')
