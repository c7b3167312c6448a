"""Shared fixtures."""

import dataclasses

import pytest

from scout.utils.config import Settings


@pytest.fixture
def test_settings():
    """Settings with instant retries and no run log, independent of the local .env."""
    return dataclasses.replace(
        Settings(),
        grounding_provider="gemini",
        gemini_api_key="test-key",
        openai_api_key="",
        grounding_concurrency=4,
        fetch_concurrency=5,
        grounding_timeout=5.0,
        fetch_timeout=5.0,
        grounding_max_attempts=3,
        fetch_max_attempts=2,
        backoff_base=0.0,
        backoff_max=0.0,
        max_response_bytes=10_000_000,
        max_fetch_urls=10,
        snippet_chars=500,
        allow_private_hosts=False,
        run_log_file="",
        max_query_length=500,
    )


@pytest.fixture
def public_resolver():
    """DNS stand-in that resolves every host to a public address."""
    calls = []

    async def resolve(host, port):
        calls.append((host, port))
        return ["93.184.216.34"]

    resolve.calls = calls
    return resolve
