"""
Error types for the Daily Feed generator.

None of these are allowed to escape a workflow run. Each one marks a
degraded outcome: a skipped provider, a dropped candidate or an abandoned
loop iteration.
"""


class FeedError(Exception):
    """Base class for feed generation errors."""


class TransientProviderError(FeedError):
    """A search, fetch or language-model call failed."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class ContentUnavailableError(TransientProviderError):
    """Every content fetcher failed for a URL."""

    def __init__(self, url: str):
        super().__init__("content", f"all fetchers failed for {url}")
        self.url = url


class ScoreParseError(FeedError):
    """The evaluator response did not contain a usable number."""


class PersistenceError(FeedError):
    """A store read or write failed."""


class ConfigurationError(FeedError):
    """The feature cannot run with the current configuration."""
