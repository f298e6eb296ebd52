"""
Configuration for the Daily Feed generator.

Tunables come from a JSON file (``config.json`` next to the entry point),
secrets and per-deployment overrides come from environment variables.
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional

from daily_feed.errors import ConfigurationError

logger = logging.getLogger(__name__)


def load_config(config_filename: str = "config.json") -> Dict[str, Any]:
    """Loads configuration from a JSON file."""
    # Relative names resolve next to this package
    base_dir = os.path.dirname(os.path.abspath(__file__))
    config_path = os.path.join(base_dir, config_filename)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.warning("Config file not found at %s. Using empty config.", config_path)
        return {}


@dataclass(frozen=True)
class FeedConfig:
    """Limits and thresholds for one workflow run."""

    max_articles_per_day: int = 10
    search_max_results_per_provider: int = 10
    min_relevance_score: float = 0.6
    max_search_loops: int = 3
    worker_concurrency: int = 1
    run_deadline: float = 1800.0  # seconds
    max_query_length: int = 380
    delay_between_users: float = 120.0  # seconds

    def __post_init__(self) -> None:
        if self.max_articles_per_day < 1:
            raise ConfigurationError("max_articles_per_day must be at least 1")
        if self.search_max_results_per_provider < 1:
            raise ConfigurationError("search_max_results_per_provider must be at least 1")
        if not 0.0 <= self.min_relevance_score <= 1.0:
            raise ConfigurationError("min_relevance_score must be within [0, 1]")
        if self.max_search_loops < 1:
            raise ConfigurationError("max_search_loops must be at least 1")
        if not 1 <= self.worker_concurrency <= 10:
            raise ConfigurationError("worker_concurrency must be between 1 and 10")
        if self.run_deadline <= 0:
            raise ConfigurationError("run_deadline must be positive")
        if self.max_query_length < 1:
            raise ConfigurationError("max_query_length must be at least 1")
        if self.delay_between_users < 0:
            raise ConfigurationError("delay_between_users cannot be negative")

    @classmethod
    def from_sources(
        cls,
        config: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "FeedConfig":
        """Builds a config from the ``feed`` block of the JSON config,
        overridden by ``FEED_<OPTION>`` environment variables."""
        section = dict((config or {}).get("feed", {}))
        env = os.environ if environ is None else environ

        values: Dict[str, Any] = {}
        for f in fields(cls):
            raw = env.get(f"FEED_{f.name.upper()}", section.get(f.name))
            if raw is None:
                continue
            caster = int if f.type in (int, "int") else float
            try:
                values[f.name] = caster(raw)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"invalid value for {f.name}: {raw!r}") from e

        unknown = set(section) - {f.name for f in fields(cls)}
        if unknown:
            logger.warning("Ignoring unknown feed options: %s", ", ".join(sorted(unknown)))

        return cls(**values)


@dataclass(frozen=True)
class Settings:
    """Credentials and service endpoints, read from the environment."""

    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"
    gemini_fallback_models: List[str] = field(default_factory=list)
    gcp_project_id: Optional[str] = None
    tavily_api_key: Optional[str] = None
    serpapi_api_key: Optional[str] = None
    jina_api_key: Optional[str] = None
    supadata_api_key: Optional[str] = None
    google_news_rss: bool = True

    @classmethod
    def from_env(
        cls,
        config: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Settings":
        env = os.environ if environ is None else environ
        providers = dict((config or {}).get("providers", {}))
        fallbacks = env.get("GEMINI_FALLBACK_MODELS", "")

        return cls(
            gemini_api_key=env.get("GEMINI_KEY"),
            gemini_model=env.get("GEMINI_MODEL", cls.gemini_model),
            gemini_fallback_models=[m.strip() for m in fallbacks.split(",") if m.strip()],
            gcp_project_id=env.get("GCP_PROJECT_ID"),
            tavily_api_key=env.get("TAVILY_API_KEY"),
            serpapi_api_key=env.get("SERPAPI_API_KEY"),
            jina_api_key=env.get("JINA_API_KEY"),
            supadata_api_key=env.get("SUPADATA_API_KEY"),
            google_news_rss=bool(providers.get("google_news_rss", True)),
        )
