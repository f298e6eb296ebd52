"""
Per-user daily quotas for resource-consuming actions.

Counters live in a QuotaStore and are only valid for the day recorded in
``last_reset_at``; every access resets a stale counter to zero first.

``check_quota`` followed by ``increment_quota`` is the two-phase protocol:
concurrent callers can both pass the check before either increments.
``try_consume`` does both in one transaction and cannot overshoot.
"""

import datetime
import logging
import os
from typing import Callable, Dict, Mapping, Optional, Tuple

from daily_feed.models import QuotaRecord
from daily_feed.services.base import QuotaStore

logger = logging.getLogger(__name__)

RESOURCE_LINK_IMPORT = "link_import"
RESOURCE_TEXT_IMPORT = "text_import"
RESOURCE_IMAGE_IMPORT = "image_import"
RESOURCE_YOUTUBE_IMPORT = "youtube_import"

_DISPLAY_NAMES = {
    RESOURCE_LINK_IMPORT: "link imports",
    RESOURCE_TEXT_IMPORT: "text imports",
    RESOURCE_IMAGE_IMPORT: "image imports",
    RESOURCE_YOUTUBE_IMPORT: "YouTube imports",
}

PLAN_FREE = "FREE"
PLAN_PRO = "PRO"


def resource_display_name(resource: str) -> str:
    """User-facing name of a resource for error messages."""
    return _DISPLAY_NAMES.get(resource, resource)


def load_limits(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Dict[str, int]]:
    """Daily limits per plan and resource, with environment overrides."""
    env = os.environ if environ is None else environ

    def env_int(key: str, default: int) -> int:
        value = env.get(key)
        if not value:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Ignoring non-integer %s=%r", key, value)
            return default

    return {
        PLAN_FREE: {
            RESOURCE_LINK_IMPORT: env_int("LIMIT_FREE_LINK", 3),
            RESOURCE_TEXT_IMPORT: env_int("LIMIT_FREE_TEXT", 10),
        },
        PLAN_PRO: {
            RESOURCE_LINK_IMPORT: env_int("LIMIT_PRO_LINK", 20),
            RESOURCE_TEXT_IMPORT: env_int("LIMIT_PRO_TEXT", 100000),
        },
    }


def limit_for(
    plan: str, resource: str, limits: Optional[Dict[str, Dict[str, int]]] = None
) -> Optional[int]:
    """Returns the daily limit, or None when the resource is not capped.

    Unknown plans get the FREE limits.
    """
    table = limits if limits is not None else load_limits()
    return table.get(plan, table[PLAN_FREE]).get(resource)


class QuotaGuard:
    """Enforces a per-user, per-resource daily action cap."""

    def __init__(
        self,
        store: QuotaStore,
        today: Callable[[], datetime.date] = datetime.date.today,
    ):
        self.store = store
        self.today = today

    def _current(
        self, record: Optional[QuotaRecord], user_id: str, resource: str, today: str
    ) -> Tuple[QuotaRecord, bool]:
        """Returns today's view of a record and whether it had to change."""
        if record is None:
            return (
                {"user_id": user_id, "resource": resource, "count": 0, "last_reset_at": today},
                True,
            )
        if record["last_reset_at"] < today:
            return {**record, "count": 0, "last_reset_at": today}, True
        return record, False

    def check_quota(self, user_id: str, resource: str, limit: int) -> bool:
        """Returns True if the user has used fewer than ``limit`` today."""
        today = self.today().isoformat()

        def update(record):
            current, changed = self._current(record, user_id, resource, today)
            return (current if changed else None), current["count"] < limit

        allowed = self.store.transact_quota(user_id, resource, update)
        if not allowed:
            logger.info(
                "Daily quota reached for user %s: %s (limit %d)",
                user_id,
                resource_display_name(resource),
                limit,
            )
        return allowed

    def increment_quota(self, user_id: str, resource: str) -> int:
        """Counts one use of a resource. Call only after the action succeeded."""
        today = self.today().isoformat()

        def update(record):
            current, _ = self._current(record, user_id, resource, today)
            bumped: QuotaRecord = {**current, "count": current["count"] + 1}
            return bumped, bumped["count"]

        return self.store.transact_quota(user_id, resource, update)

    def try_consume(self, user_id: str, resource: str, limit: int) -> bool:
        """Checks and increments in one transaction.

        Returns False without counting when the limit is already reached.
        """
        today = self.today().isoformat()

        def update(record):
            current, changed = self._current(record, user_id, resource, today)
            if current["count"] >= limit:
                return (current if changed else None), False
            return {**current, "count": current["count"] + 1}, True

        allowed = self.store.transact_quota(user_id, resource, update)
        if not allowed:
            logger.info(
                "Daily quota reached for user %s: %s (limit %d)",
                user_id,
                resource_display_name(resource),
                limit,
            )
        return allowed

    def get_usage(self, user_id: str, resource: str) -> int:
        """Today's usage count, without modifying storage."""
        today = self.today().isoformat()

        def update(record):
            current, _ = self._current(record, user_id, resource, today)
            return None, current["count"]

        return self.store.transact_quota(user_id, resource, update)
