"""
Test Suite for Multi-Platform Query Execution
"""

import time

import pytest

from platforms.runner import PlatformRunner, _RateLimiter, empty_answer
from conftest import FakeClient, make_runner

QUERIES = [
    {"query_text": "best plumbers in Austin", "category": "discovery"},
    {"query_text": "what does Acme do", "category": "business"},
    {"query_text": "compare Acme", "category": "comparison"},
]


def echo(prompt):
    return f"answer to {prompt}"


class TestRun:
    def test_answers_in_query_order(self):
        runner = make_runner({"chatgpt": FakeClient("chatgpt", echo), "claude": FakeClient("claude", echo)})
        results = runner.run(QUERIES)

        assert [p["platform"] for p in results] == ["chatgpt", "claude"]
        for entry in results:
            assert [r["query"] for r in entry["results"]] == [q["query_text"] for q in QUERIES]
            assert [r["text"] for r in entry["results"]] == [f"answer to {q['query_text']}" for q in QUERIES]

    def test_failed_call_becomes_empty_answer(self):
        def flaky(prompt):
            if "compare" in prompt:
                raise RuntimeError("503 overloaded")
            return "fine"

        results = make_runner({"gemini": FakeClient("gemini", flaky)}).run(QUERIES)
        failed = results[0]["results"][2]
        assert failed["text"] == ""
        assert failed["cost"] == 0.0
        assert failed["tokens"] == 0
        assert "503" in failed["error"]
        assert "error" not in results[0]["results"][0]

    def test_callbacks(self):
        seen, progress = [], []
        runner = make_runner({"chatgpt": FakeClient("chatgpt", echo), "claude": FakeClient("claude", echo)})
        runner.run(
            QUERIES,
            progress_callback=lambda done, total, msg: progress.append((done, total)),
            on_answer=lambda platform, answer: seen.append(platform),
        )
        assert sorted(seen) == ["chatgpt"] * 3 + ["claude"] * 3
        assert progress[-1] == (6, 6)

    def test_accepts_plain_strings(self):
        results = make_runner({"claude": FakeClient("claude", echo)}).run(["hello"])
        assert results[0]["results"][0]["text"] == "answer to hello"

    def test_no_clients(self):
        with pytest.raises(ValueError, match="No AI platform API keys configured"):
            make_runner({}).run(QUERIES)


class TestAsk:
    def test_prefers_claude(self):
        runner = make_runner({"chatgpt": FakeClient("chatgpt", "from chatgpt"), "claude": FakeClient("claude", "from claude")})
        assert runner.analysis_platform() == "claude"
        assert runner.ask("hi")["text"] == "from claude"

    def test_falls_back_in_preference_order(self):
        runner = make_runner({"perplexity": FakeClient("perplexity", "p"), "gemini": FakeClient("gemini", "g")})
        assert runner.analysis_platform() == "gemini"

    def test_no_platform(self):
        runner = make_runner({})
        assert runner.analysis_client() is None
        assert runner.ask("hi")["error"] == "No analysis platform configured"

    def test_timeout(self):
        def slow(prompt):
            time.sleep(0.5)
            return "late"

        answer = make_runner({"claude": FakeClient("claude", slow)}).ask("hi", timeout=0.05)
        assert answer["text"] == ""
        assert "timeout" in answer["error"]


class TestRateLimiter:
    def test_spaces_calls(self):
        limiter = _RateLimiter({"claude": 0.1})
        start = time.time()
        limiter.wait("claude")
        limiter.wait("claude")
        assert time.time() - start >= 0.09

    def test_unknown_platform_is_ignored(self):
        _RateLimiter({}).wait("claude")


def test_empty_answer():
    assert empty_answer() == {"text": "", "model": None, "tokens": 0, "cost": 0.0}
    assert empty_answer("boom")["error"] == "boom"


def test_explicit_empty_clients_are_kept():
    assert PlatformRunner(clients={}).platforms == []
