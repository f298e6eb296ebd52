"""
Data models for the Daily Feed generator.
"""

from typing import TypedDict


DEFAULT_EVAL_CRITERIA = (
    "Ensure the article is informative, relevant to their interests, and not clickbait."
)


class FeedPreferences(TypedDict):
    """A user's feed settings, read from the user record."""

    user_id: str
    feed_enabled: bool
    interest_prompt: str
    eval_prompt: str  # Empty means DEFAULT_EVAL_CRITERIA


class CandidateArticle(TypedDict):
    """A search result under evaluation within one workflow run."""

    title: str
    url: str
    provider: str
    snippet: str


class ScoredCandidate(TypedDict):
    """A candidate after summarization and evaluation."""

    candidate: CandidateArticle
    summary: str
    score: float


class DailyArticle(TypedDict):
    """A persisted, relevance-approved article for a given date."""

    user_id: str
    title: str
    url: str
    summary: str
    relevance_score: float
    provider: str
    suggested_date: str  # ISO date
    created_at: str  # ISO timestamp


class QuotaRecord(TypedDict):
    """Daily usage counter for one user and resource."""

    user_id: str
    resource: str
    count: int
    last_reset_at: str  # ISO date
