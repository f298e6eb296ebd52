"""
Content acquisition with an ordered fallback chain.

This module provides the ContentAcquirer class. A candidate whose search
snippet is already long enough is used as is. Otherwise each fetcher in
the chain is tried in order until one returns enough text.
"""

import logging
from typing import List, Optional, Sequence

from daily_feed.content.base import ContentFetcher
from daily_feed.content.direct import DirectFetcher
from daily_feed.content.extraction_api import ExtractionApiFetcher
from daily_feed.content.reader import ReaderFetcher
from daily_feed.errors import ContentUnavailableError
from daily_feed.models import CandidateArticle

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 100
MAX_CONTENT_LENGTH = 50000


class ContentAcquirer:
    """Turns candidates into readable text."""

    def __init__(
        self,
        fetchers: Sequence[ContentFetcher],
        min_length: int = MIN_CONTENT_LENGTH,
        max_length: int = MAX_CONTENT_LENGTH,
    ):
        self.fetchers: List[ContentFetcher] = list(fetchers)
        self.min_length = min_length
        self.max_length = max_length

    @classmethod
    def default(
        cls,
        jina_api_key: Optional[str] = None,
        supadata_api_key: Optional[str] = None,
        timeout: float = 60,
    ) -> "ContentAcquirer":
        """Direct fetch, then the reader service, then the extraction API."""
        return cls(
            [
                DirectFetcher(timeout=timeout),
                ReaderFetcher(api_key=jina_api_key, timeout=timeout),
                ExtractionApiFetcher(api_key=supadata_api_key, timeout=timeout),
            ]
        )

    def _truncate(self, text: str) -> str:
        if len(text) > self.max_length:
            logger.info("Truncating content from %d to %d chars", len(text), self.max_length)
            return text[: self.max_length]
        return text

    def acquire(self, candidate: CandidateArticle) -> str:
        """Returns content for a candidate, preferring its search snippet."""
        snippet = (candidate.get("snippet") or "").strip()
        if len(snippet) >= self.min_length:
            # Snippet is enough to summarize; skip the network entirely
            return self._truncate(snippet)
        return self.fetch_url(candidate["url"])

    def fetch_url(self, url: str) -> str:
        """Runs the fetcher chain for a URL.

        Raises ContentUnavailableError when no fetcher produces more than
        ``min_length`` characters.
        """
        for fetcher in self.fetchers:
            try:
                text = fetcher.fetch(url)
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.warning("Fetcher %s failed for %s: %s", fetcher.name(), url, e)
                continue

            if len(text) > self.min_length:
                logger.info(
                    "Fetcher %s extracted %d characters from %s", fetcher.name(), len(text), url
                )
                return self._truncate(text)
            logger.info(
                "Fetcher %s returned insufficient content (%d chars) for %s",
                fetcher.name(),
                len(text),
                url,
            )

        raise ContentUnavailableError(url)
