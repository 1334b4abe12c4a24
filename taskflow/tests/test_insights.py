"""Unit tests for the insight generator."""

from openai import APIConnectionError
import httpx

from taskflow.config import Settings
from taskflow.services.insights import (
    FALLBACK_INSIGHT,
    InsightGenerator,
    build_prompt,
    compute_statistics,
)
from taskflow.services.normalizer import canonicalize

from .fakes import FakeLLMClient

TASKS = [
    {"title": "Write tests", "status": "done", "priority": "high"},
    {"title": "Fix bug", "status": "in-progress", "extras": {"priority": "high", "tags": ["code"]}},
    {"title": "Plan sprint", "status": "pending", "dueDate": "2025-03-01"},
    {"title": "Read book", "status": "pending"},
]


def make_settings(**overrides):
    return Settings(jwt_secret="s", **overrides)


class TestStatistics:
    def test_counts(self):
        stats = compute_statistics([canonicalize(t) for t in TASKS])

        assert stats.total_tasks == 4
        assert stats.completed_tasks == 1
        assert stats.in_progress_tasks == 1
        assert stats.pending_tasks == 2
        assert stats.completion_rate == 25

    def test_empty(self):
        stats = compute_statistics([])
        assert stats.total_tasks == 0
        assert stats.completion_rate == 0


def test_prompt_uses_normalized_fields():
    views = [canonicalize(t) for t in TASKS]
    prompt = build_prompt(views, compute_statistics(views))

    assert "Fix bug" in prompt
    assert '"code"' in prompt
    assert "2025-03-01" in prompt
    assert "Completion Rate: 25%" in prompt


def test_generate_returns_model_text():
    llm = FakeLLMClient(content="  Great work!  ")
    result = InsightGenerator(make_settings(insights_model="test-model"), client=llm).generate("u-1", TASKS)

    assert result["insight"] == "Great work!"
    assert result["statistics"].total_tasks == 4
    assert llm.calls[0]["model"] == "test-model"
    assert llm.calls[0]["messages"][0]["role"] == "system"


def test_missing_api_key_falls_back():
    generator = InsightGenerator(make_settings(gemini_api_key=None))

    assert generator.client is None
    assert generator.generate("u-1", TASKS)["insight"] == FALLBACK_INSIGHT


def test_api_key_builds_openai_client():
    generator = InsightGenerator(make_settings(gemini_api_key="key"))
    assert generator.client is not None


def test_connection_error_falls_back():
    request = httpx.Request("POST", "https://example.invalid")
    llm = FakeLLMClient(error=APIConnectionError(request=request))

    result = InsightGenerator(make_settings(), client=llm).generate("u-1", TASKS)

    assert result["insight"] == FALLBACK_INSIGHT
    assert result["statistics"].total_tasks == 4


def test_empty_answer_falls_back():
    llm = FakeLLMClient(content="   ")
    assert InsightGenerator(make_settings(), client=llm).generate("u-1", [])["insight"] == FALLBACK_INSIGHT


def test_none_answer_falls_back():
    llm = FakeLLMClient(content=None)
    assert InsightGenerator(make_settings(), client=llm).generate("u-1", [])["insight"] == FALLBACK_INSIGHT
