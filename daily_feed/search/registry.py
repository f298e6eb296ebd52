"""
Ordered registry of search providers.
"""

import logging
from typing import Iterator, List

from daily_feed.search.base import SearchProvider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Holds the registered search providers in registration order."""

    def __init__(self) -> None:
        self._providers: List[SearchProvider] = []

    def register(self, provider: SearchProvider) -> None:
        """Adds a provider. Registering the same name twice is ignored."""
        if any(p.name() == provider.name() for p in self._providers):
            logger.warning("Search provider %s already registered.", provider.name())
            return
        self._providers.append(provider)
        logger.info("Registered search provider: %s", provider.name())

    def get_all(self) -> List[SearchProvider]:
        return list(self._providers)

    def names(self) -> List[str]:
        return [p.name() for p in self._providers]

    def __len__(self) -> int:
        return len(self._providers)

    def __iter__(self) -> Iterator[SearchProvider]:
        return iter(list(self._providers))
