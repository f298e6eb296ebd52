"""
Acceptance threshold and duplicate-guarded persistence.
"""

import datetime
import logging
from typing import Callable, Iterable

from daily_feed.models import DailyArticle, ScoredCandidate
from daily_feed.services.base import FeedStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class FilterAndStore:
    """Keeps candidates above the threshold and writes them once per URL."""

    def __init__(
        self,
        store: FeedStore,
        min_relevance_score: float = 0.6,
        today: Callable[[], datetime.date] = datetime.date.today,
        now: Callable[[], datetime.datetime] = _utcnow,
    ):
        self.store = store
        self.min_relevance_score = min_relevance_score
        self.today = today
        self.now = now

    def accepts(self, scored: ScoredCandidate) -> bool:
        return scored["score"] >= self.min_relevance_score

    def _to_article(self, user_id: str, scored: ScoredCandidate) -> DailyArticle:
        candidate = scored["candidate"]
        return {
            "user_id": user_id,
            "title": candidate["title"],
            "url": candidate["url"],
            "summary": scored["summary"],
            "relevance_score": scored["score"],
            "provider": candidate["provider"],
            "suggested_date": self.today().isoformat(),
            "created_at": self.now().isoformat(),
        }

    def store_accepted(self, user_id: str, scored: Iterable[ScoredCandidate], budget: int) -> int:
        """Persists accepted candidates, at most ``budget`` of them.

        Returns the number of articles written. Candidates whose URL already
        exists, or whose write fails, are skipped.
        """
        stored = 0
        for item in scored:
            if stored >= budget:
                break
            if not self.accepts(item):
                continue

            url = item["candidate"]["url"]
            try:
                # Another worker or an earlier loop may have stored it since
                if self.store.article_url_exists(user_id, url):
                    logger.info("Skipping duplicate URL: %s", url)
                    continue
                self.store.store_daily_article(user_id, self._to_article(user_id, item))
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error("Failed to store article %s: %s", url, e)
                continue

            stored += 1
            logger.info(
                "Stored '%s' (Score: %.2f, Provider: %s)",
                item["candidate"]["title"],
                item["score"],
                item["candidate"]["provider"],
            )
        return stored
