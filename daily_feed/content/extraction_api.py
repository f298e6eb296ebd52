"""
Hosted extraction-API fallback (Supadata web scrape).
"""

import logging
from typing import Optional

import requests
from daily_feed.content.base import ContentFetcher
from daily_feed.errors import TransientProviderError

logger = logging.getLogger(__name__)


class ExtractionApiFetcher(ContentFetcher):
    """Last-resort fetcher backed by a hosted scraping API."""

    API_URL = "https://api.supadata.ai/v1/web/scrape"

    def __init__(self, api_key: Optional[str], timeout: float = 60):
        self.api_key = api_key
        self.timeout = timeout

    def name(self) -> str:
        return "extraction_api"

    def fetch(self, url: str) -> str:
        if not self.api_key:
            raise TransientProviderError(self.name(), "SUPADATA_API_KEY not set")

        try:
            resp = requests.get(
                self.API_URL,
                params={"url": url},
                headers={"x-api-key": self.api_key, "Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as req_err:
            raise TransientProviderError(self.name(), str(req_err)) from req_err

        logger.info("Extraction API fetch %s -> %d", url, resp.status_code)
        if resp.status_code != 200:
            raise TransientProviderError(
                self.name(), f"status code {resp.status_code}: {resp.text[:200]}"
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise TransientProviderError(self.name(), f"invalid JSON: {e}") from e

        content = (data or {}).get("content") or ""
        if not content:
            raise TransientProviderError(self.name(), "no content in response")

        logger.info(
            "Extraction API returned %d characters from %r", len(content), data.get("name", "")
        )
        return content
