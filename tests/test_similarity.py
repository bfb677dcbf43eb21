# =============================================================================
# tests/test_similarity.py - Filing Similarity Tests
# =============================================================================
# Tests for the word overlap heuristic, AI response parsing, rate-limit
# retries and the sequential analysis loop. The OpenAI client is mocked.
#
# Run with: pytest tests/test_similarity.py -v
# =============================================================================

from unittest.mock import MagicMock, patch

import httpx
import pytest
from openai import RateLimitError

from lib.similarity import (
    FilingText,
    SimilarityChecker,
    SimilarityScore,
    heuristic_score,
    parse_similarity_response,
    tokenize,
    word_overlap_similarity,
)


def chat_reply(content: str) -> MagicMock:
    """Build a chat completion response carrying `content`."""
    choice = MagicMock()
    choice.message.content = content
    response = MagicMock()
    response.choices = [choice]
    return response


def rate_limit_error() -> RateLimitError:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    return RateLimitError(
        "Rate limit reached",
        response=httpx.Response(429, request=request),
        body=None,
    )


@pytest.fixture
def client():
    """A mocked OpenAI client."""
    return MagicMock()


@pytest.fixture
def sleeps():
    """Records requested sleeps instead of sleeping."""
    return []


@pytest.fixture
def checker(client, sleeps):
    return SimilarityChecker(client=client, model="test-model", max_retries=3, sleep=sleeps.append)


PENDING = FilingText(title="solar roof tile", description="a tile that makes power")
ACCEPTED = FilingText(title="roof tile", description="a tile for roofs")


# =============================================================================
# Word Overlap
# =============================================================================

class TestWordOverlap:
    """Tests for the Jaccard word overlap fallback."""

    def test_partial_overlap(self):
        """Test |A ∩ B| / |A ∪ B| scaled to 0-100."""
        assert word_overlap_similarity("solar roof tile", "roof tile") == 67

    def test_case_and_punctuation_ignored(self):
        assert word_overlap_similarity("Roof, Tile!", "roof tile") == 100

    def test_disjoint(self):
        assert word_overlap_similarity("solar panel", "chemical sensor") == 0

    def test_empty_text_scores_zero(self):
        """Test that an empty side scores 0 instead of dividing by zero."""
        assert word_overlap_similarity("", "roof tile") == 0
        assert word_overlap_similarity(None, None) == 0

    def test_tokenize_dedupes(self):
        assert tokenize("tile Tile TILE") == {"tile"}

    def test_heuristic_score_source(self):
        score = heuristic_score(PENDING, ACCEPTED)

        assert score.source == "heuristic"
        assert score.title_similarity == 67


class TestSimilarityScore:
    def test_overall_is_mean(self):
        score = SimilarityScore(title_similarity=80, description_similarity=61, source="ai")
        assert score.overall == 70

    def test_overall_serialized(self):
        score = SimilarityScore(title_similarity=50, description_similarity=50, source="ai")
        assert score.model_dump()["overall"] == 50


# =============================================================================
# Response Parsing
# =============================================================================

class TestParseSimilarityResponse:
    """Tests for extracting scores from model replies."""

    def test_plain_json(self):
        assert parse_similarity_response('{"titleSimilarity": 80, "descriptionSimilarity": 45}') == (80, 45)

    def test_json_in_code_fence(self):
        text = 'Here you go:\n```json\n{"titleSimilarity": 12.6, "descriptionSimilarity": "30"}\n```'
        assert parse_similarity_response(text) == (13, 30)

    def test_scores_clamped(self):
        assert parse_similarity_response('{"titleSimilarity": 140, "descriptionSimilarity": -5}') == (100, 0)

    def test_missing_key(self):
        assert parse_similarity_response('{"titleSimilarity": 80}') is None

    def test_non_numeric(self):
        assert parse_similarity_response('{"titleSimilarity": "high", "descriptionSimilarity": 5}') is None

    def test_no_json(self):
        assert parse_similarity_response("I cannot compare these.") is None
        assert parse_similarity_response("") is None
        assert parse_similarity_response(None) is None


# =============================================================================
# Checker
# =============================================================================

class TestSimilarityChecker:
    """Tests for AI comparison with fallback and retries."""

    def test_ai_scores_used(self, checker, client):
        client.chat.completions.create.return_value = chat_reply(
            '{"titleSimilarity": 90, "descriptionSimilarity": 70}'
        )

        score = checker.compare(PENDING, ACCEPTED)

        assert score.source == "ai"
        assert score.overall == 80
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert "solar roof tile" in kwargs["messages"][0]["content"]

    def test_unparseable_reply_falls_back(self, checker, client):
        """Test that a malformed reply uses the word overlap heuristic."""
        client.chat.completions.create.return_value = chat_reply("no idea")

        score = checker.compare(PENDING, ACCEPTED)

        assert score.source == "heuristic"
        assert score.title_similarity == 67

    def test_endpoint_error_falls_back(self, checker, client):
        client.chat.completions.create.side_effect = RuntimeError("connection reset")

        assert checker.compare(PENDING, ACCEPTED).source == "heuristic"

    def test_rate_limit_retried_with_backoff(self, checker, client, sleeps):
        """Test 2^i second backoff between rate-limited attempts."""
        client.chat.completions.create.side_effect = [
            rate_limit_error(),
            rate_limit_error(),
            chat_reply('{"titleSimilarity": 10, "descriptionSimilarity": 20}'),
        ]

        score = checker.compare(PENDING, ACCEPTED)

        assert score.source == "ai"
        assert sleeps == [1, 2]
        assert client.chat.completions.create.call_count == 3

    def test_rate_limit_exhausted_falls_back(self, checker, client, sleeps):
        client.chat.completions.create.side_effect = rate_limit_error()

        score = checker.compare(PENDING, ACCEPTED)

        assert score.source == "heuristic"
        assert client.chat.completions.create.call_count == 3
        assert sleeps == [1, 2]

    def test_zero_retries_single_attempt(self, client, sleeps):
        """Test that an explicit max_retries=0 is honoured, not replaced by the default."""
        checker = SimilarityChecker(client=client, model="test-model", max_retries=0, sleep=sleeps.append)
        client.chat.completions.create.side_effect = rate_limit_error()

        score = checker.compare(PENDING, ACCEPTED)

        assert checker.max_retries == 0
        assert score.source == "heuristic"
        assert client.chat.completions.create.call_count == 1
        assert sleeps == []


class TestAnalyze:
    """Tests for the sequential comparison loop."""

    @pytest.fixture
    def candidates(self):
        return [
            {"id": "a", "title": "roof tile", "description": "a tile"},
            {"id": "b", "title": "solar roof tile", "description": "a tile that makes power"},
            {"id": "c", "title": "chemical sensor", "description": "detects gas"},
        ]

    def test_sorted_and_flagged(self, checker, client, candidates):
        """Test that matches come back highest first, flagged at the threshold."""
        client.chat.completions.create.side_effect = RuntimeError("offline")

        matches = checker.analyze(PENDING, candidates, threshold=70)

        assert [m.filing_id for m in matches] == ["b", "a", "c"]
        assert matches[0].flagged is True
        assert matches[-1].flagged is False

    def test_delay_between_calls(self, checker, client, sleeps, candidates):
        """Test that the delay is applied between calls, not before the first."""
        client.chat.completions.create.return_value = chat_reply(
            '{"titleSimilarity": 10, "descriptionSimilarity": 10}'
        )

        checker.analyze(PENDING, candidates, delay=0.5)

        assert sleeps == [0.5, 0.5]

    def test_progress_reported(self, checker, client, candidates):
        client.chat.completions.create.return_value = chat_reply(
            '{"titleSimilarity": 10, "descriptionSimilarity": 10}'
        )
        progress = MagicMock()

        checker.analyze(PENDING, candidates, progress=progress)

        assert progress.call_args_list[-1].args == (3, 3)
        assert progress.call_count == 3

    def test_no_candidates(self, checker, client):
        assert checker.analyze(PENDING, []) == []
        client.chat.completions.create.assert_not_called()


class TestDefaults:
    def test_settings_used_for_model_and_retries(self):
        with patch("app.config.settings") as settings:
            settings.OPENAI_MODEL = "configured-model"
            settings.SIMILARITY_MAX_RETRIES = 5

            checker = SimilarityChecker(client=MagicMock())

        assert checker.model == "configured-model"
        assert checker.max_retries == 5
