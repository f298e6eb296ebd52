"""
Database service for feed persistence and usage quotas.

This module provides the FirestoreStore class which interfaces with Google
Firestore to read feed preferences, record daily articles and keep the
per-user daily usage counters.
"""

import datetime
import logging
from typing import List, Optional

from google.api_core import exceptions as google_exceptions  # type: ignore
from google.cloud import firestore  # type: ignore
from daily_feed.errors import ConfigurationError, PersistenceError
from daily_feed.models import DailyArticle, FeedPreferences, QuotaRecord
from daily_feed.services.base import FeedStore, QuotaStore, QuotaUpdate, T

logger = logging.getLogger(__name__)


class FirestoreStore(FeedStore, QuotaStore):
    """Feed and quota storage on Google Firestore.

    Collections:
    - ``users/{user_id}``: ``feed_enabled``, ``interest_prompt``,
      ``feed_eval_prompt``
    - ``daily_articles``: one document per stored article (auto ID)
    - ``usage_quotas/{user_id}:{resource}``: daily usage counters
    """

    USERS = "users"
    ARTICLES = "daily_articles"
    QUOTAS = "usage_quotas"

    def __init__(self, project_id: Optional[str], client: Optional[firestore.Client] = None):
        if client is not None:
            self.db = client
        else:
            if not project_id:
                raise ConfigurationError("GCP_PROJECT_ID not set. Feed storage unavailable.")
            try:
                self.db = firestore.Client(project=project_id)
            except Exception as e:  # pylint: disable=broad-exception-caught
                raise ConfigurationError(f"Firestore connection failed: {e}") from e
            logger.info("Connected to Firestore project %s.", project_id)

        self.users = self.db.collection(self.USERS)
        self.articles = self.db.collection(self.ARTICLES)
        self.quotas = self.db.collection(self.QUOTAS)

    def get_quota_id(self, user_id: str, resource: str) -> str:
        """Document ID of a user's counter for a resource."""
        return f"{user_id}:{resource}"

    def get_feed_preferences(self, user_id: str) -> FeedPreferences:
        try:
            snap = self.users.document(user_id).get()
        except google_exceptions.GoogleAPIError as e:
            raise PersistenceError(f"failed to get preferences for {user_id}: {e}") from e

        data = (snap.to_dict() or {}) if snap.exists else {}
        return {
            "user_id": user_id,
            "feed_enabled": bool(data.get("feed_enabled", False)),
            "interest_prompt": data.get("interest_prompt") or "",
            "eval_prompt": data.get("feed_eval_prompt") or "",
        }

    def article_url_exists(self, user_id: str, url: str) -> bool:
        query = (
            self.articles.where(filter=firestore.FieldFilter("user_id", "==", user_id))
            .where(filter=firestore.FieldFilter("url", "==", url))
            .limit(1)
        )
        try:
            return len(list(query.stream())) > 0
        except google_exceptions.GoogleAPIError as e:
            raise PersistenceError(f"failed to check article URL: {e}") from e

    def store_daily_article(self, user_id: str, article: DailyArticle) -> None:
        record = dict(article)
        record["user_id"] = user_id
        try:
            self.articles.add(record)
        except google_exceptions.GoogleAPIError as e:
            raise PersistenceError(f"failed to store article {article['url']}: {e}") from e

    def get_daily_articles(self, user_id: str, date: datetime.date) -> List[DailyArticle]:
        query = self.articles.where(
            filter=firestore.FieldFilter("user_id", "==", user_id)
        ).where(filter=firestore.FieldFilter("suggested_date", "==", date.isoformat()))
        try:
            snapshots = list(query.stream())
        except google_exceptions.GoogleAPIError as e:
            raise PersistenceError(f"failed to get daily articles: {e}") from e

        articles: List[DailyArticle] = []
        for snap in snapshots:
            data = snap.to_dict() or {}
            articles.append(
                {
                    "user_id": user_id,
                    "title": data.get("title", ""),
                    "url": data.get("url", ""),
                    "summary": data.get("summary", ""),
                    "relevance_score": float(data.get("relevance_score", 0.0)),
                    "provider": data.get("provider", ""),
                    "suggested_date": data.get("suggested_date", date.isoformat()),
                    "created_at": data.get("created_at", ""),
                }
            )
        return articles

    def get_users_with_feed_enabled(self) -> List[str]:
        query = self.users.where(filter=firestore.FieldFilter("feed_enabled", "==", True))
        try:
            return [snap.id for snap in query.stream()]
        except google_exceptions.GoogleAPIError as e:
            raise PersistenceError(f"failed to list feed users: {e}") from e

    def transact_quota(self, user_id: str, resource: str, update: QuotaUpdate[T]) -> T:
        ref = self.quotas.document(self.get_quota_id(user_id, resource))

        # Firestore may re-run this on contention, so update must be pure
        @firestore.transactional
        def run(transaction: firestore.Transaction) -> T:
            snap = ref.get(transaction=transaction)
            current: Optional[QuotaRecord] = None
            if snap.exists:
                data = snap.to_dict() or {}
                current = {
                    "user_id": user_id,
                    "resource": resource,
                    "count": int(data.get("count", 0)),
                    "last_reset_at": data.get("last_reset_at", ""),
                }
            new_record, result = update(current)
            if new_record is not None:
                transaction.set(ref, dict(new_record))
            return result

        try:
            return run(self.db.transaction())
        except google_exceptions.GoogleAPIError as e:
            raise PersistenceError(f"quota transaction failed: {e}") from e
