"""
Multi-provider search aggregation.

Every registered provider is queried independently. A provider that fails
is logged and skipped, and the merged results are deduplicated by a
normalized URL.
"""

import logging
from typing import Iterable, List

from daily_feed.models import CandidateArticle
from daily_feed.search.registry import ProviderRegistry

logger = logging.getLogger(__name__)


def normalize_url(url: str) -> str:
    """Dedup key for a URL: the URL without trailing slashes.

    This is deliberately weak. Scheme, host case, query strings and
    fragments are left untouched.
    """
    return (url or "").strip().rstrip("/")


def deduplicate(candidates: Iterable[CandidateArticle]) -> List[CandidateArticle]:
    """Keeps the first candidate per normalized URL, preserving order."""
    seen = set()
    unique = []
    for candidate in candidates:
        key = normalize_url(candidate["url"])
        if not key or key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


class SearchAggregator:
    """Queries every registered provider and merges the results."""

    def __init__(self, registry: ProviderRegistry, max_results_per_provider: int = 10):
        self.registry = registry
        self.max_results_per_provider = max_results_per_provider

    def search(self, query: str) -> List[CandidateArticle]:
        """Returns deduplicated candidates for a query, possibly empty."""
        merged: List[CandidateArticle] = []

        for provider in self.registry:
            provider_name = provider.name()
            try:
                results = provider.search_news(query, self.max_results_per_provider)
                if not isinstance(results, list):
                    raise TypeError(f"expected a list, got {type(results).__name__}")
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error("Search provider %s failed: %s", provider_name, e)
                continue

            logger.info("%s returned %d results", provider_name, len(results))
            for result in results:
                if not isinstance(result, dict):
                    logger.warning("Skipping malformed result from %s: %r", provider_name, result)
                    continue
                merged.append(
                    {
                        "title": result.get("title") or "",
                        "url": result.get("url") or "",
                        "provider": result.get("provider") or provider_name,
                        "snippet": result.get("snippet") or "",
                    }
                )

        unique = deduplicate(merged)
        logger.info(
            "Search aggregation: %d results -> %d unique candidates.",
            len(merged),
            len(unique),
        )
        return unique
