"""Page fetcher with per-call deadline, byte ceiling, retries and SSRF guard."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from scout.security.ssrf import HostResolutionError, Resolver, UnsafeUrlError, check_url
from scout.utils.config import Settings
from scout.utils.logger import get_logger
from scout.utils.urls import redact_url_credentials

log = get_logger(__name__)

ACCEPTED_TYPES = ("application/xhtml+xml", "application/xml", "application/json")


class FetchError(Exception):
    """Base class for fetch failures.  ``retryable`` marks transient ones."""

    retryable = False


class FetchTimeoutError(FetchError):
    retryable = True


class UnreachableError(FetchError):
    retryable = True


class HttpStatusError(FetchError):
    def __init__(self, status_code: int):
        super().__init__(f"HTTP status {status_code}")
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        return self.status_code == 429 or self.status_code >= 500


class TooLargeError(FetchError):
    pass


class BlockedUrlError(FetchError):
    pass


class UnsupportedContentTypeError(FetchError):
    pass


@dataclass(frozen=True)
class FetchedPage:
    url: str
    final_url: str
    content: bytes
    content_type: str


def check_content_type(content_type: str) -> None:
    mime = content_type.split(";", 1)[0].strip().lower()
    if mime and not mime.startswith("text/") and mime not in ACCEPTED_TYPES:
        raise UnsupportedContentTypeError(f"unsupported content type: {mime}")


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, FetchError) and exc.retryable


class Fetcher:
    """GET pages over a shared ``httpx.AsyncClient``.

    Each call is bounded by ``settings.fetch_timeout`` (DNS check, connect and
    the full body read) and retried up to ``settings.fetch_max_attempts``
    times on timeouts, connection errors, 429 and 5xx.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: Settings,
        resolver: Optional[Resolver] = None,
    ):
        self._client = client
        self.settings = settings
        self._resolver = resolver

    async def fetch(self, url: str) -> FetchedPage:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max(1, self.settings.fetch_max_attempts)),
            wait=wait_exponential(multiplier=self.settings.backoff_base, max=self.settings.backoff_max),
            retry=retry_if_exception(_is_transient),
            before_sleep=before_sleep_log(log, logging.WARNING),
            reraise=True,
        )
        return await retrying(self._fetch_with_deadline, url)

    async def _fetch_with_deadline(self, url: str) -> FetchedPage:
        try:
            return await asyncio.wait_for(self._fetch_once(url), timeout=self.settings.fetch_timeout)
        except asyncio.TimeoutError as exc:
            raise FetchTimeoutError(f"timed out after {self.settings.fetch_timeout:g}s") from exc

    async def _guard(self, url: str) -> None:
        if self.settings.allow_private_hosts:
            return
        try:
            await check_url(url, self._resolver)
        except UnsafeUrlError as exc:
            raise BlockedUrlError(str(exc)) from exc
        except HostResolutionError as exc:
            raise UnreachableError(str(exc)) from exc

    async def _fetch_once(self, url: str) -> FetchedPage:
        await self._guard(url)
        limit = self.settings.max_response_bytes
        try:
            async with self._client.stream(
                "GET", url, headers={"User-Agent": self.settings.user_agent}
            ) as response:
                if response.status_code >= 400:
                    raise HttpStatusError(response.status_code)
                content_type = response.headers.get("content-type", "")
                check_content_type(content_type)
                declared = response.headers.get("content-length", "")
                if declared.isdigit() and int(declared) > limit:
                    raise TooLargeError(f"response too large (>{limit} bytes)")

                body = bytearray()
                async for chunk in response.aiter_bytes():
                    body.extend(chunk)
                    if len(body) > limit:
                        raise TooLargeError(f"response too large (>{limit} bytes)")
                final_url = str(response.url)
        except httpx.TimeoutException as exc:
            raise FetchTimeoutError(f"timed out: {exc.__class__.__name__}") from exc
        except httpx.InvalidURL as exc:
            raise BlockedUrlError(f"invalid URL: {exc}") from exc
        except UnicodeError as exc:
            raise BlockedUrlError(f"invalid URL: bad hostname ({exc})") from exc
        except httpx.HTTPError as exc:
            raise UnreachableError(f"{exc.__class__.__name__}: {exc}") from exc

        # Redirects may have landed on an internal host.
        if final_url != url:
            await self._guard(final_url)

        log.debug("Fetched %s (%d bytes)", redact_url_credentials(final_url), len(body))
        return FetchedPage(url=url, final_url=final_url, content=bytes(body), content_type=content_type)
