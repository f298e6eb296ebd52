"""
Google News RSS search provider.

This module provides the GoogleNewsRSSProvider class, a keyless provider
that runs the query against the Google News RSS search endpoint and parses
the feed with feedparser.
"""

import html
import re
from typing import List
import logging

import requests
import feedparser  # type: ignore
from daily_feed.errors import TransientProviderError
from daily_feed.models import CandidateArticle
from daily_feed.search.base import SearchProvider

logger = logging.getLogger(__name__)


class GoogleNewsRSSProvider(SearchProvider):
    """Searches the Google News RSS feed."""

    FEED_URL = "https://news.google.com/rss/search"

    def __init__(self, language: str = "en-US", country: str = "US", timeout: float = 10):
        self.language = language
        self.country = country
        self.timeout = timeout

    def name(self) -> str:
        return "google_news"

    def _clean_html(self, raw_html: str) -> str:
        """Removes HTML tags and entities from a string."""
        if not raw_html:
            return ""
        cleaner = re.compile("<.*?>")
        text = html.unescape(re.sub(cleaner, " ", raw_html))
        return " ".join(text.split())

    def search_news(self, query: str, max_results: int) -> List[CandidateArticle]:
        """Fetches and parses the RSS search feed for a query."""
        params = {
            "q": query,
            "hl": self.language,
            "gl": self.country,
            "ceid": f"{self.country}:{self.language.split('-')[0]}",
        }
        try:
            # Some edges reject the default requests user-agent
            resp = requests.get(
                self.FEED_URL,
                params=params,
                timeout=self.timeout,
                headers={"User-Agent": "DailyFeedBot/1.0"},
            )
            resp.raise_for_status()
        except requests.RequestException as req_err:
            raise TransientProviderError(self.name(), str(req_err)) from req_err

        feed = feedparser.parse(resp.content)
        if feed.bozo and not feed.entries:
            raise TransientProviderError(
                self.name(), f"unparseable feed: {feed.get('bozo_exception')}"
            )

        items: List[CandidateArticle] = []
        for entry in feed.entries[:max_results]:
            link = entry.link if hasattr(entry, "link") else ""
            if not link:
                continue
            title = entry.title if hasattr(entry, "title") else ""
            raw_summary = entry.summary if hasattr(entry, "summary") else ""
            items.append(
                {
                    "title": title,
                    "url": link,
                    "provider": self.name(),
                    "snippet": self._clean_html(raw_summary),
                }
            )

        logger.info("Google News RSS returned %d results for %r", len(items), query)
        return items
