"""
SerpApi Google News provider.
"""

import logging
from typing import Any, Dict, List

import requests
from daily_feed.errors import TransientProviderError
from daily_feed.models import CandidateArticle
from daily_feed.search.base import SearchProvider

logger = logging.getLogger(__name__)


class SerpApiProvider(SearchProvider):
    """Searches Google News through SerpApi."""

    API_URL = "https://serpapi.com/search.json"

    def __init__(self, api_key: str, timeout: float = 30):
        self.api_key = api_key
        self.timeout = timeout

    def name(self) -> str:
        return "google"

    def search_raw(self, query: str, max_results: int) -> List[Dict[str, Any]]:
        """Returns raw news results with a position-derived ranking score.

        ``position_score`` is 1.0 for the first result and drops by 0.05 per
        position (floor 0.1). It reflects Google's ordering only and is not
        comparable with the evaluator's relevance score.
        """
        params = {
            "engine": "google_news",
            "q": query,
            "gl": "us",
            "hl": "en",
            "num": str(max_results),
            "api_key": self.api_key,
        }
        logger.info("Searching SerpApi News for %r", query)

        try:
            resp = requests.get(self.API_URL, params=params, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as req_err:
            raise TransientProviderError(self.name(), str(req_err)) from req_err
        except ValueError as e:
            raise TransientProviderError(self.name(), f"invalid JSON: {e}") from e

        if "error" in data:
            raise TransientProviderError(self.name(), str(data["error"]))

        results = []
        for i, item in enumerate(data.get("news_results") or []):
            if not isinstance(item, dict):
                continue
            title = item.get("title") or ""
            link = item.get("link") or ""
            if not title or not link:
                continue
            results.append(
                {
                    "title": title,
                    "url": link,
                    # Dates are not snippets; leave empty when missing
                    "snippet": item.get("snippet") or "",
                    "position_score": max(0.1, 1.0 - i * 0.05),
                }
            )
            if len(results) >= max_results:
                break

        logger.info("SerpApi returned %d news results", len(results))
        return results

    def search_news(self, query: str, max_results: int) -> List[CandidateArticle]:
        return [
            {
                "title": r["title"],
                "url": r["url"],
                "provider": self.name(),
                "snippet": r["snippet"],
            }
            for r in self.search_raw(query, max_results)
        ]
