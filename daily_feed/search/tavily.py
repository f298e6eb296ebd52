"""
Tavily search provider.

This module provides the TavilyProvider class, which queries the Tavily
Search API in its "news" topic for recent articles.
"""

import logging
from typing import Any, Dict, List

import requests
from daily_feed.errors import TransientProviderError
from daily_feed.models import CandidateArticle
from daily_feed.search.base import SearchProvider

logger = logging.getLogger(__name__)


class TavilyProvider(SearchProvider):
    """Searches recent news through the Tavily API."""

    API_URL = "https://api.tavily.com/search"

    def __init__(self, api_key: str, days: int = 7, timeout: float = 30):
        self.api_key = api_key
        self.days = days
        self.timeout = timeout

    def name(self) -> str:
        return "tavily"

    def _build_payload(self, query: str, max_results: int) -> Dict[str, Any]:
        return {
            "query": query,
            "api_key": self.api_key,
            "search_depth": "basic",
            "topic": "news",
            "days": self.days,
            "max_results": max_results if max_results > 0 else 10,
        }

    def search_news(self, query: str, max_results: int) -> List[CandidateArticle]:
        """Searches Tavily and maps its results to candidates."""
        payload = self._build_payload(query, max_results)
        logger.info(
            "Searching Tavily for %r (max %d results, last %d days)",
            query,
            payload["max_results"],
            self.days,
        )

        try:
            resp = requests.post(self.API_URL, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as req_err:
            raise TransientProviderError(self.name(), str(req_err)) from req_err
        except ValueError as e:
            raise TransientProviderError(self.name(), f"invalid JSON: {e}") from e

        items: List[CandidateArticle] = []
        for result in data.get("results") or []:
            url = result.get("url") or ""
            if not url:
                continue
            items.append(
                {
                    "title": result.get("title") or "",
                    "url": url,
                    "provider": self.name(),
                    "snippet": result.get("content") or "",
                }
            )

        logger.info("Tavily returned %d results for %r", len(items), query)
        return items
