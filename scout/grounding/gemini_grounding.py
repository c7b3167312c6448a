"""Gemini ``generateContent`` with the Google Search grounding tool."""

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import httpx

from scout.grounding.provider import (
    Citation,
    GroundedAnswer,
    GroundingClient,
    GroundingError,
    InvalidResponseError,
    RateLimitedError,
    UnauthorizedError,
    UnavailableError,
)
from scout.utils.logger import get_logger

if TYPE_CHECKING:
    from scout.search.models import QueryVariant

log = get_logger(__name__)

API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODEL = "gemini-2.5-flash"


class GeminiGrounding(GroundingClient):
    """Grounded search via the Gemini REST API.

    Citations come from ``groundingMetadata.groundingChunks``; a citation's
    snippet is the first answer segment that ``groundingSupports`` attributes
    to it.
    """

    name = "gemini"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        model: str | None = None,
        user_agent: str = "scout",
    ):
        if not api_key or not api_key.strip():
            raise UnauthorizedError("GEMINI_API_KEY not set. Get one at https://aistudio.google.com/apikey")
        self._client = client
        self._api_key = api_key.strip()
        self.model = model or DEFAULT_MODEL
        self.user_agent = user_agent

    def __repr__(self) -> str:
        return f"GeminiGrounding(model={self.model!r}, api_key=[REDACTED])"

    async def ground(self, variant: "QueryVariant") -> GroundedAnswer:
        url = f"{API_BASE}/{self.model}:generateContent"
        payload = {
            "contents": [{"role": "user", "parts": [{"text": variant.text}]}],
            "tools": [{"google_search": {}}],
        }
        headers = {"x-goog-api-key": self._api_key, "User-Agent": self.user_agent}
        try:
            resp = await self._client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            raise UnavailableError(f"Gemini request timed out: {exc.__class__.__name__}") from exc
        except httpx.HTTPError as exc:
            raise UnavailableError(f"Network error: {exc}") from exc

        try:
            body = resp.json()
        except ValueError:
            body = None

        error = body.get("error") if isinstance(body, dict) else None
        if resp.status_code >= 400 or error:
            err = classify_api_error(resp.status_code, error)
            log.warning("Gemini API error for %s variant: %s", variant.language, err)
            raise err
        if not isinstance(body, dict):
            raise InvalidResponseError("Gemini returned a non-JSON body")

        answer = parse_grounded_answer(body)
        log.debug(
            "Gemini grounding (%s) returned %d citations", variant.language, len(answer.citations)
        )
        return answer


def classify_api_error(status_code: int, error: Optional[Dict[str, Any]]) -> GroundingError:
    """Map an HTTP status and Gemini error object to a ``GroundingError``."""
    error = error if isinstance(error, dict) else {}
    code = error.get("code") or status_code
    message = error.get("message") or f"HTTP {status_code}"
    status = str(error.get("status") or "").upper()
    reasons = [
        str(d.get("reason", "")).upper()
        for d in error.get("details") or []
        if isinstance(d, dict)
    ]

    if code == 429 or status == "RESOURCE_EXHAUSTED":
        return RateLimitedError("API rate limit exceeded. Please retry later.")
    if code in (401, 403) or status in ("UNAUTHENTICATED", "PERMISSION_DENIED"):
        return UnauthorizedError(f"API key rejected ({code}): {message}")
    if code == 400 and ("API_KEY_INVALID" in reasons or "api key" in message.lower()):
        return UnauthorizedError(f"API key rejected ({code}): {message}")
    if (isinstance(code, int) and code >= 500) or status == "UNAVAILABLE":
        return UnavailableError(f"API error ({code}): {message}")
    return InvalidResponseError(f"API error ({code}): {message}")


def parse_grounded_answer(body: Dict[str, Any]) -> GroundedAnswer:
    """Build a ``GroundedAnswer`` from a ``generateContent`` response body."""
    try:
        candidates = body.get("candidates") or []
        candidate = candidates[0] if candidates else {}
        parts = (candidate.get("content") or {}).get("parts") or []
        answer = "".join(p.get("text", "") for p in parts if isinstance(p, dict))

        metadata = candidate.get("groundingMetadata") or {}
        snippets: Dict[int, str] = {}
        for support in metadata.get("groundingSupports") or []:
            text = ((support.get("segment") or {}).get("text") or "").strip()
            if not text:
                continue
            for idx in support.get("groundingChunkIndices") or []:
                snippets.setdefault(idx, text)

        citations: List[Citation] = []
        for idx, chunk in enumerate(metadata.get("groundingChunks") or []):
            web = chunk.get("web") or {}
            uri = web.get("uri")
            if not uri:
                continue
            citations.append(
                Citation(url=uri, title=web.get("title") or "", snippet=snippets.get(idx, ""))
            )
    except (AttributeError, TypeError, KeyError) as exc:
        raise InvalidResponseError(f"Unexpected Gemini response shape: {exc}") from exc

    if not answer:
        log.warning("Gemini returned empty answer (safety filter or empty response)")
    return GroundedAnswer(answer_text=answer, citations=tuple(citations))
