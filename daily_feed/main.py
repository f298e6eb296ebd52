"""
Daily Feed Generator
This script finds news for each feed-enabled user with several search
providers, summarizes and scores the results with Google Gemini, and stores
the best articles of the day in Firestore.
"""

import argparse
import logging
import sys
from typing import Any, List, Mapping, Optional

from daily_feed.config import FeedConfig, Settings, load_config
from daily_feed.content.acquirer import ContentAcquirer
from daily_feed.errors import ConfigurationError
from daily_feed.pipeline.workflow import FeedRunner, WorkflowController, WorkflowResult
from daily_feed.search.google_news import GoogleNewsRSSProvider
from daily_feed.search.registry import ProviderRegistry
from daily_feed.search.serpapi import SerpApiProvider
from daily_feed.search.tavily import TavilyProvider
from daily_feed.services.db import FirestoreStore
from daily_feed.services.llm import LLMService


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def build_registry(settings: Settings) -> ProviderRegistry:
    """Registers every search provider that has credentials.

    Raises ConfigurationError when none can be registered.
    """
    registry = ProviderRegistry()
    if settings.tavily_api_key:
        registry.register(TavilyProvider(settings.tavily_api_key))
    if settings.serpapi_api_key:
        registry.register(SerpApiProvider(settings.serpapi_api_key))
    if settings.google_news_rss:
        registry.register(GoogleNewsRSSProvider())

    if len(registry) == 0:
        raise ConfigurationError("No search providers configured. Daily feed disabled.")
    return registry


def build_runner(
    config: Mapping[str, Any], settings: Settings, store: Optional[FirestoreStore] = None
) -> FeedRunner:
    """Wires the feed pipeline from configuration.

    Raises ConfigurationError when a required collaborator is missing.
    """
    feed_config = FeedConfig.from_sources(config)
    registry = build_registry(settings)

    if not settings.gemini_api_key:
        raise ConfigurationError("GEMINI_KEY not set. Daily feed disabled.")
    llm = LLMService(
        settings.gemini_api_key,
        model=settings.gemini_model,
        fallback_models=settings.gemini_fallback_models,
    )

    if store is None:
        store = FirestoreStore(settings.gcp_project_id)

    acquirer = ContentAcquirer.default(
        jina_api_key=settings.jina_api_key,
        supadata_api_key=settings.supadata_api_key,
    )
    controller = WorkflowController.build(store, registry, llm, acquirer, feed_config)
    logger.info("Daily feed enabled with providers: %s", ", ".join(registry.names()))
    return FeedRunner(store, controller, delay_between_users=feed_config.delay_between_users)


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution entry point."""
    parser = argparse.ArgumentParser(description="Generate today's feed articles.")
    parser.add_argument(
        "--user",
        action="append",
        dest="users",
        help="Run only for this user ID (repeatable). Defaults to every feed-enabled user.",
    )
    parser.add_argument(
        "--config", default="config.json", help="Config file name or path."
    )
    args = parser.parse_args(argv)

    config = load_config(args.config)
    settings = Settings.from_env(config)

    try:
        runner = build_runner(config, settings)
    except ConfigurationError as e:
        logger.error("Error: %s", e)
        return 1

    results: List[WorkflowResult] = runner.run_all(args.users)
    total = sum(r.stored for r in results)
    logger.info("Stored %d articles across %d users.", total, len(results))
    return 0


if __name__ == "__main__":
    sys.exit(main())
