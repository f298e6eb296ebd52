"""
Summarization and relevance evaluation.

The evaluator fails closed: a response that cannot be read as a number
scores 0.0 and the candidate is rejected.
"""

import logging
import re

from daily_feed.errors import ScoreParseError
from daily_feed.models import DEFAULT_EVAL_CRITERIA
from daily_feed.services.llm import LanguageModel

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"^[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")


def parse_score(text: str) -> float:
    """Reads the leading number of a model response.

    Accepts surrounding whitespace and markdown code fences, a trailing
    percent sign, and trailing prose after the number. Raises
    ScoreParseError when no number leads the response.
    """
    cleaned = (text or "").strip().strip("`").strip()
    match = _NUMBER.match(cleaned)
    if not match:
        raise ScoreParseError(f"no score in response: {text!r}")
    return float(match.group(0))


def normalize_score(value: float) -> float:
    """Maps a raw score into [0, 1].

    Values in (1, 100] are read as percentages; anything above 100 clamps to
    1.0 and negatives clamp to 0.0.
    """
    if value < 0.0:
        return 0.0
    if value > 1.0:
        if value <= 100.0:
            return value / 100.0
        return 1.0
    return value


class Summarizer:
    """Condenses article content with the language model."""

    def __init__(self, llm: LanguageModel):
        self.llm = llm

    def summarize(self, content: str) -> str:
        return self.llm.generate_summary(content).strip()


class Evaluator:
    """Scores a summary against the user's interests and criteria."""

    _EVAL_PROMPT = """Evaluate this article summary for a user.
User Interests: "{interests}"
Evaluation Criteria: "{criteria}"

Article Summary:
"{summary}"

Task: Rate the relevance and quality of this article on a scale of 0.0 to 1.0.
0.0 = Totally irrelevant / Spam
1.0 = Perfect match / Must read

Return ONLY the float score (e.g. 0.85)."""

    def __init__(self, llm: LanguageModel):
        self.llm = llm

    def build_prompt(self, summary: str, interests: str, criteria: str = "") -> str:
        return self._EVAL_PROMPT.format(
            interests=interests,
            criteria=criteria.strip() or DEFAULT_EVAL_CRITERIA,
            summary=summary,
        )

    def evaluate(self, summary: str, interests: str, criteria: str = "") -> float:
        """Returns a relevance score in [0, 1].

        Model call failures propagate as TransientProviderError; an
        unreadable response scores 0.0.
        """
        response = self.llm.generate_completion(self.build_prompt(summary, interests, criteria))
        try:
            raw = parse_score(response)
        except ScoreParseError as e:
            logger.warning("Rejecting candidate, %s", e)
            return 0.0

        score = normalize_score(raw)
        if score != raw:
            logger.info("Normalized score %s -> %.2f", raw, score)
        return score
