"""
Daily feed workflow.

One run generates articles for a single user:

    check preferences -> [generate query -> search -> process candidates
    -> store] -> stop check -> loop or terminate

Candidate processing (acquire, summarize, evaluate) fans out over a bounded
thread pool and the controller waits for every worker before storing. A run
stops when the daily article goal is met, the loop cap is hit or the run
deadline expires. It never raises; failures only reduce the number of
stored articles.
"""

import concurrent.futures
import datetime
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from daily_feed.config import FeedConfig
from daily_feed.content.acquirer import ContentAcquirer
from daily_feed.models import CandidateArticle, FeedPreferences, ScoredCandidate
from daily_feed.pipeline.filter_store import FilterAndStore
from daily_feed.pipeline.query import QueryGenerator
from daily_feed.pipeline.scoring import Evaluator, Summarizer
from daily_feed.search.aggregator import SearchAggregator
from daily_feed.search.registry import ProviderRegistry
from daily_feed.services.base import FeedStore
from daily_feed.services.llm import LanguageModel

logger = logging.getLogger(__name__)

TERMINATED_DISABLED = "disabled"
TERMINATED_GOAL_REACHED = "goal_reached"
TERMINATED_LOOP_LIMIT = "loop_limit"
TERMINATED_DEADLINE = "deadline"
TERMINATED_ERROR = "error"


@dataclass
class WorkflowResult:
    """Outcome of one workflow run."""

    user_id: str
    stored: int = 0
    loops: int = 0
    total_for_today: int = 0
    terminated_by: str = ""


class WorkflowController:
    """Runs the goal-seeking feed loop for one user at a time."""

    def __init__(
        self,
        store: FeedStore,
        query_generator: QueryGenerator,
        aggregator: SearchAggregator,
        acquirer: ContentAcquirer,
        summarizer: Summarizer,
        evaluator: Evaluator,
        filter_store: FilterAndStore,
        config: FeedConfig,
        today: Callable[[], datetime.date] = datetime.date.today,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.query_generator = query_generator
        self.aggregator = aggregator
        self.acquirer = acquirer
        self.summarizer = summarizer
        self.evaluator = evaluator
        self.filter_store = filter_store
        self.config = config
        self.today = today
        self.clock = clock

    @classmethod
    def build(
        cls,
        store: FeedStore,
        registry: ProviderRegistry,
        llm: LanguageModel,
        acquirer: ContentAcquirer,
        config: FeedConfig,
    ) -> "WorkflowController":
        """Wires the standard pipeline stages from their collaborators."""
        return cls(
            store=store,
            query_generator=QueryGenerator(llm, max_length=config.max_query_length),
            aggregator=SearchAggregator(registry, config.search_max_results_per_provider),
            acquirer=acquirer,
            summarizer=Summarizer(llm),
            evaluator=Evaluator(llm),
            filter_store=FilterAndStore(store, config.min_relevance_score),
            config=config,
        )

    def run(self, user_id: str, deadline: Optional[float] = None) -> WorkflowResult:
        """Generates today's articles for a user.

        ``deadline`` is a time budget in seconds and defaults to
        ``config.run_deadline``.
        """
        result = WorkflowResult(user_id=user_id)
        budget = self.config.run_deadline if deadline is None else deadline
        try:
            self._run(user_id, self.clock() + budget, result)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Feed workflow failed for user %s", user_id)
            result.terminated_by = TERMINATED_ERROR

        logger.info(
            "Finished for user %s: stored %d in %d loop(s), %d for today (%s)",
            user_id,
            result.stored,
            result.loops,
            result.total_for_today,
            result.terminated_by,
        )
        return result

    def _run(self, user_id: str, deadline_at: float, result: WorkflowResult) -> None:
        logger.info("Starting feed workflow for user %s", user_id)

        prefs = self.store.get_feed_preferences(user_id)
        if not prefs["feed_enabled"] or not prefs["interest_prompt"].strip():
            logger.info("Feed disabled or empty interest prompt for user %s", user_id)
            result.terminated_by = TERMINATED_DISABLED
            return

        stored_count = self._count_existing(user_id)
        result.total_for_today = stored_count

        while (
            stored_count < self.config.max_articles_per_day
            and result.loops < self.config.max_search_loops
        ):
            if self.clock() >= deadline_at:
                logger.warning("Run deadline reached for user %s", user_id)
                result.terminated_by = TERMINATED_DEADLINE
                return

            result.loops += 1
            logger.info(
                "Loop %d/%d (Stored: %d/%d)",
                result.loops,
                self.config.max_search_loops,
                stored_count,
                self.config.max_articles_per_day,
            )

            stored = self._iterate(user_id, prefs, deadline_at, stored_count)
            stored_count += stored
            result.stored += stored
            result.total_for_today = stored_count

        if stored_count >= self.config.max_articles_per_day:
            result.terminated_by = TERMINATED_GOAL_REACHED
        else:
            result.terminated_by = TERMINATED_LOOP_LIMIT

    def _count_existing(self, user_id: str) -> int:
        try:
            return len(self.store.get_daily_articles(user_id, self.today()))
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning("Could not count today's articles for %s: %s", user_id, e)
            return 0

    def _iterate(
        self, user_id: str, prefs: FeedPreferences, deadline_at: float, stored_count: int
    ) -> int:
        """One loop body. Returns the number of articles stored."""
        try:
            query = self.query_generator.generate(prefs["interest_prompt"])
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Query generation failed: %s", e)
            return 0
        if not query:
            logger.warning("Query generation returned an empty query")
            return 0

        candidates = self.aggregator.search(query)
        if not candidates:
            logger.info("No search results found.")
            return 0

        candidates = self._drop_known(user_id, candidates)
        if not candidates:
            logger.info("Every candidate was already stored for this user.")
            return 0

        scored = self.process_candidates(candidates, prefs, deadline_at)
        # Best first, so a nearly full day keeps the strongest articles
        scored.sort(key=lambda s: s["score"], reverse=True)

        remaining = self.config.max_articles_per_day - stored_count
        return self.filter_store.store_accepted(user_id, scored, remaining)

    def _drop_known(
        self, user_id: str, candidates: Sequence[CandidateArticle]
    ) -> List[CandidateArticle]:
        fresh = []
        for candidate in candidates:
            try:
                if self.store.article_url_exists(user_id, candidate["url"]):
                    continue
            except Exception as e:  # pylint: disable=broad-exception-caught
                # FilterAndStore checks again before writing
                logger.warning("URL existence check failed for %s: %s", candidate["url"], e)
            fresh.append(candidate)
        logger.info("Deduplication: %d candidates -> %d new.", len(candidates), len(fresh))
        return fresh

    def process_candidates(
        self,
        candidates: Sequence[CandidateArticle],
        prefs: FeedPreferences,
        deadline_at: float,
    ) -> List[ScoredCandidate]:
        """Acquires, summarizes and evaluates candidates concurrently.

        At most ``worker_concurrency`` candidates are in flight. Returns once
        every worker has finished, or when the deadline expires, in which
        case queued candidates are cancelled.
        """
        results: List[ScoredCandidate] = []
        lock = threading.Lock()

        def work(candidate: CandidateArticle) -> None:
            scored = self._process_one(candidate, prefs, deadline_at)
            if scored is not None:
                with lock:
                    results.append(scored)

        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=self.config.worker_concurrency, thread_name_prefix="feed-worker"
        )
        timed_out = False
        try:
            futures = [executor.submit(work, c) for c in candidates]
            timeout = max(0.0, deadline_at - self.clock())
            _, not_done = concurrent.futures.wait(futures, timeout=timeout)
            timed_out = bool(not_done)
        finally:
            if timed_out:
                logger.warning(
                    "Run deadline reached with %d candidate(s) unprocessed", len(not_done)
                )
                executor.shutdown(wait=False, cancel_futures=True)
            else:
                executor.shutdown(wait=True)

        with lock:
            accepted = list(results)
        logger.info("Processed %d candidates -> %d scored.", len(candidates), len(accepted))
        return accepted

    def _expired(self, deadline_at: float, url: str, stage: str) -> bool:
        if self.clock() >= deadline_at:
            logger.info("Run deadline reached before %s of %s", stage, url)
            return True
        return False

    def _process_one(
        self, candidate: CandidateArticle, prefs: FeedPreferences, deadline_at: float
    ) -> Optional[ScoredCandidate]:
        """Acquires, summarizes and evaluates one candidate.

        The deadline is re-checked before each stage so a worker still
        running after the fan-out wait gave up makes no further calls.
        """
        url = candidate["url"]
        try:
            if self._expired(deadline_at, url, "acquisition"):
                return None
            content = self.acquirer.acquire(candidate)
            if self._expired(deadline_at, url, "summarization"):
                return None
            summary = self.summarizer.summarize(content)
            if not summary:
                logger.warning("Empty summary for %s", url)
                return None
            if self._expired(deadline_at, url, "evaluation"):
                return None
            score = self.evaluator.evaluate(
                summary, prefs["interest_prompt"], prefs["eval_prompt"]
            )
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning("Dropping candidate %s: %s", url, e)
            return None

        logger.info("Scored %.2f: %s", score, candidate["title"])
        return {"candidate": candidate, "summary": summary, "score": score}


class FeedRunner:
    """Runs the workflow for every feed-enabled user, one after another."""

    def __init__(
        self,
        store: FeedStore,
        controller: WorkflowController,
        delay_between_users: float = 120.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.controller = controller
        self.delay_between_users = delay_between_users
        self.sleep = sleep

    def run_all(self, user_ids: Optional[Sequence[str]] = None) -> List[WorkflowResult]:
        """Runs each user in turn; a failing user never stops the rest."""
        if user_ids is None:
            try:
                user_ids = self.store.get_users_with_feed_enabled()
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error("Failed to list users with feed enabled: %s", e)
                return []

        logger.info("Processing %d users with feed enabled...", len(user_ids))
        results = []
        for i, user_id in enumerate(user_ids):
            if i > 0 and self.delay_between_users > 0:
                logger.info(
                    "Rate limiting: waiting %.0fs before user %d/%d...",
                    self.delay_between_users,
                    i + 1,
                    len(user_ids),
                )
                self.sleep(self.delay_between_users)
            results.append(self.controller.run(user_id))

        succeeded = sum(1 for r in results if r.terminated_by != TERMINATED_ERROR)
        logger.info("Feed generation completed. Success: %d/%d users", succeeded, len(results))
        return results
