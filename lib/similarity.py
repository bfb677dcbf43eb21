# =============================================================================
# lib/similarity.py - IP Filing Similarity Scoring
# =============================================================================
# Scores how close a pending IP filing is to an already-accepted one.
#
# Two scorers:
# - AI comparison: asks an OpenAI chat model for a JSON object with
#   titleSimilarity / descriptionSimilarity (0-100). Rate-limit errors are
#   retried with exponential backoff (1s, 2s, 4s, ...).
# - Word overlap: lower-cased word sets, |A ∩ B| / |A ∪ B| * 100. Used when
#   the AI call fails or returns something unparseable.
#
# Usage:
#   from lib.similarity import SimilarityChecker, FilingText
#
#   checker = SimilarityChecker()
#   score = checker.compare(
#       FilingText(title="Solar roof tile", description="..."),
#       FilingText(title="Photovoltaic roof tile", description="..."),
#   )
#   print(score.overall, score.source)
# =============================================================================

from __future__ import annotations

import json
import logging
import re
import time
from typing import Any, Callable, Iterable, Literal

from pydantic import BaseModel, Field, computed_field

logger = logging.getLogger(__name__)

# Lazy-loaded OpenAI client
_client = None


def get_openai_client():
    """Get or create OpenAI client (lazy initialization)."""
    global _client
    if _client is None:
        from openai import OpenAI
        from app.config import settings
        _client = OpenAI(api_key=settings.OPENAI_API_KEY)
    return _client


WORD_PATTERN = re.compile(r"\w+")
JSON_BLOCK_PATTERN = re.compile(r"\{[\s\S]*\}")


# =============================================================================
# Models
# =============================================================================

class FilingText(BaseModel):
    """The two text fields of a filing that get compared."""
    title: str = Field(default="", max_length=500)
    description: str = Field(default="", max_length=20000)


class SimilarityScore(BaseModel):
    """Per-field similarity between two filings, 0-100."""
    title_similarity: int = Field(..., ge=0, le=100)
    description_similarity: int = Field(..., ge=0, le=100)
    source: Literal["ai", "heuristic"]

    @computed_field
    @property
    def overall(self) -> int:
        """Mean of the title and description scores."""
        return round((self.title_similarity + self.description_similarity) / 2)


class SimilarityMatch(BaseModel):
    """One accepted filing compared against the filing under review."""
    filing_id: str
    title: str
    score: SimilarityScore
    flagged: bool = False


# =============================================================================
# Word Overlap Heuristic
# =============================================================================

def tokenize(text: str | None) -> set[str]:
    """Lower-cased set of word tokens."""
    return set(WORD_PATTERN.findall((text or "").lower()))


def word_overlap_similarity(a: str | None, b: str | None) -> int:
    """
    Jaccard overlap of the word sets of two texts, scaled to 0-100.

    Returns 0 when either text has no words.

    Example:
        word_overlap_similarity("solar roof tile", "roof tile")  # 67
    """
    words_a = tokenize(a)
    words_b = tokenize(b)
    if not words_a or not words_b:
        return 0
    return round(100 * len(words_a & words_b) / len(words_a | words_b))


def heuristic_score(pending: FilingText, accepted: FilingText) -> SimilarityScore:
    """Score two filings with the word overlap heuristic."""
    return SimilarityScore(
        title_similarity=word_overlap_similarity(pending.title, accepted.title),
        description_similarity=word_overlap_similarity(pending.description, accepted.description),
        source="heuristic",
    )


# =============================================================================
# AI Response Parsing
# =============================================================================

COMPARISON_PROMPT = """You are comparing two intellectual property filings (patents, trademarks, copyrights or trade secrets). Each has a title and a description.

Judge how closely the concepts and meaning of the two filings overlap. Account for synonyms, paraphrase and context, not only shared words. The reviewer uses your answer to decide whether the pending filing is too close to one that was already accepted.

Pending filing:
Title: "{pending_title}"
Description: "{pending_description}"

Accepted filing:
Title: "{accepted_title}"
Description: "{accepted_description}"

Answer with this JSON object and nothing else:
{{
  "titleSimilarity": <number between 0 and 100>,
  "descriptionSimilarity": <number between 0 and 100>
}}"""


def _clamp_score(value: Any) -> int:
    """Coerce a model-supplied number into 0-100. Raises ValueError/TypeError if not numeric."""
    number = float(value)
    if number != number:  # NaN
        raise ValueError("score is NaN")
    return int(round(min(100.0, max(0.0, number))))


def parse_similarity_response(text: str | None) -> tuple[int, int] | None:
    """
    Extract (title, description) scores from a model reply.

    The reply may wrap the JSON object in prose or a code fence; the first
    '{' through the last '}' is parsed.

    Returns:
        (title_similarity, description_similarity), or None if the reply
        has no parseable object or either score is missing or non-numeric
    """
    if not text:
        return None

    match = JSON_BLOCK_PATTERN.search(text)
    if not match:
        return None

    try:
        data = json.loads(match.group(0))
        return (
            _clamp_score(data["titleSimilarity"]),
            _clamp_score(data["descriptionSimilarity"]),
        )
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        logger.warning(f"Unparseable similarity response: {e}")
        return None


# =============================================================================
# Checker
# =============================================================================

class SimilarityChecker:
    """
    Compares filings with the AI endpoint, falling back to word overlap.

    Args:
        client: OpenAI client (defaults to the shared lazy client)
        model: Chat model name (defaults to settings.OPENAI_MODEL)
        max_retries: Attempts per comparison on rate-limit errors; 0 or 1
            means a single attempt with no retry
        sleep: Sleep function, injectable for tests
    """

    def __init__(
        self,
        client=None,
        model: str | None = None,
        max_retries: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        from app.config import settings

        self._client = client
        self.model = model or settings.OPENAI_MODEL
        self.max_retries = (
            settings.SIMILARITY_MAX_RETRIES if max_retries is None else max_retries
        )
        self.sleep = sleep

    @property
    def client(self):
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    def _request(self, prompt: str) -> str:
        """Call the chat endpoint, retrying rate-limit errors with 2^i second backoff."""
        from openai import RateLimitError

        attempts = max(1, self.max_retries)
        for attempt in range(attempts):
            try:
                response = self.client.chat.completions.create(
                    model=self.model,
                    messages=[{"role": "user", "content": prompt}],
                    temperature=0,
                    max_tokens=100,
                )
                return response.choices[0].message.content or ""
            except RateLimitError:
                if attempt == attempts - 1:
                    raise
                wait_seconds = 2 ** attempt
                logger.info(f"Similarity endpoint rate limited, retrying in {wait_seconds}s")
                self.sleep(wait_seconds)
        return ""

    def compare(self, pending: FilingText, accepted: FilingText) -> SimilarityScore:
        """
        Score one pending filing against one accepted filing.

        Never raises for endpoint problems: any failure falls back to
        the word overlap heuristic and is reported via `source`.
        """
        prompt = COMPARISON_PROMPT.format(
            pending_title=pending.title,
            pending_description=pending.description,
            accepted_title=accepted.title,
            accepted_description=accepted.description,
        )

        try:
            scores = parse_similarity_response(self._request(prompt))
        except Exception as e:
            logger.warning(f"Similarity endpoint failed, using word overlap: {e}")
            scores = None

        if scores is None:
            return heuristic_score(pending, accepted)

        return SimilarityScore(
            title_similarity=scores[0],
            description_similarity=scores[1],
            source="ai",
        )

    def analyze(
        self,
        pending: FilingText,
        candidates: Iterable[dict[str, Any]],
        delay: float = 0.0,
        threshold: int = 70,
        progress: Callable[[int, int], None] | None = None,
    ) -> list[SimilarityMatch]:
        """
        Compare a pending filing with each candidate, one call at a time.

        Args:
            pending: Filing under review
            candidates: Accepted filing records (id, title, description)
            delay: Seconds to wait between consecutive calls
            threshold: Overall score at or above which a match is flagged
            progress: Called as progress(done, total) after each comparison

        Returns:
            Matches sorted by overall score, highest first
        """
        candidates = list(candidates)
        total = len(candidates)
        matches: list[SimilarityMatch] = []

        for index, record in enumerate(candidates):
            if index > 0 and delay > 0:
                self.sleep(delay)

            accepted = FilingText(
                title=record.get("title") or "",
                description=record.get("description") or "",
            )
            score = self.compare(pending, accepted)
            matches.append(SimilarityMatch(
                filing_id=str(record.get("id")),
                title=accepted.title,
                score=score,
                flagged=score.overall >= threshold,
            ))

            if progress:
                progress(index + 1, total)

        matches.sort(key=lambda m: m.score.overall, reverse=True)
        return matches
