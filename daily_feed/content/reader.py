"""
Reader-service fallback for JavaScript-heavy pages.
"""

import logging
from typing import Dict, Optional

import requests
from daily_feed.content.base import ContentFetcher
from daily_feed.errors import TransientProviderError

logger = logging.getLogger(__name__)


class ReaderFetcher(ContentFetcher):
    """Delegates rendering and extraction to the Jina Reader service."""

    READER_URL = "https://r.jina.ai/"

    def __init__(self, api_key: Optional[str] = None, timeout: float = 60):
        self.api_key = api_key
        self.timeout = timeout

    def name(self) -> str:
        return "reader"

    def fetch(self, url: str) -> str:
        headers: Dict[str, str] = {"Accept": "text/plain"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            resp = requests.get(self.READER_URL + url, headers=headers, timeout=self.timeout)
        except requests.RequestException as req_err:
            raise TransientProviderError(self.name(), str(req_err)) from req_err

        logger.info("Reader fetch %s -> %d", url, resp.status_code)
        if resp.status_code != 200:
            raise TransientProviderError(self.name(), f"status code {resp.status_code}")

        return resp.text.strip()
