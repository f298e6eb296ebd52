"""
Storage interfaces consumed by the feed pipeline and the quota guard.
"""

import datetime
from typing import Callable, List, Optional, Protocol, Tuple, TypeVar

from daily_feed.models import DailyArticle, FeedPreferences, QuotaRecord

T = TypeVar("T")

# Receives the stored record (None when absent) and returns the record to
# write back (None to leave storage untouched) plus the caller's result.
QuotaUpdate = Callable[[Optional[QuotaRecord]], Tuple[Optional[QuotaRecord], T]]


class FeedStore(Protocol):
    """Preference and article persistence."""

    def get_feed_preferences(self, user_id: str) -> FeedPreferences:
        """Loads a user's feed preferences."""

    def article_url_exists(self, user_id: str, url: str) -> bool:
        """Returns True if the URL was already stored for the user."""

    def store_daily_article(self, user_id: str, article: DailyArticle) -> None:
        """Persists an article. Raises PersistenceError on failure."""

    def get_daily_articles(self, user_id: str, date: datetime.date) -> List[DailyArticle]:
        """Returns the articles suggested to the user on a date."""

    def get_users_with_feed_enabled(self) -> List[str]:
        """Returns the IDs of every user with the feed switched on."""


class QuotaStore(Protocol):
    """Atomic access to per-user, per-resource usage counters."""

    def transact_quota(self, user_id: str, resource: str, update: QuotaUpdate[T]) -> T:
        """Runs ``update`` on the current record inside one transaction."""
