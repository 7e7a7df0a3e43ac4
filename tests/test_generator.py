"""
Test Suite for Report Generation

End-to-end runs of the pipeline against fake platform clients.
"""

import json
import time
from unittest.mock import MagicMock, patch

import pytest

from conftest import FakeClient, DisabledExtractor, DisabledSearch, make_runner
from reports.generator import ReportGenerator, validate_website, share_url_for
from web.google_search import CompetitorSearchClient, SearchError


LIST_ANSWER = (
    "1. Acme Plumbing\n2. Rapid Rooter\n3. Best Pipes\n"
    "All three are well reviewed local plumbers with emergency availability."
)
COMPETITORS_JSON = json.dumps({"competitors": [{"name": "Rapid Rooter"}, {"name": "Best Pipes"}]})
ANALYSIS_JSON = json.dumps({
    "strengths": ["Excellent customer service", "Fast speed of response", "Fair pricing"],
    "weaknesses": ["Limited weekend hours"],
    "why_recommended": "Quick and friendly",
})
PROFILE_JSON = json.dumps({
    "business_name": "Acme Plumbing",
    "business_type": "plumbing service",
    "primary_services": ["Drain cleaning", "Water heaters", "Leak repair"],
    "location": {"city": "Austin", "state": "TX", "country": "US"},
    "competitor_search_terms": ["plumbers in Austin"],
    "industry_keywords": ["plumbing"],
})


def claude_responder(prompt):
    if prompt.startswith("TARGET:"):
        return COMPETITORS_JSON
    if prompt.startswith("Provide a brief analysis"):
        return ANALYSIS_JSON
    if prompt.startswith("Analyze this business website"):
        return PROFILE_JSON
    return LIST_ANSWER


def failing_responder(prompt):
    raise RuntimeError("rate limited")


class FailingSearch:
    configured = True

    def find_competitors(self, business):
        raise SearchError("quota exceeded")


class FakeExtractor:
    configured = True

    def extract(self, url):
        return {"url": url, "domain": "acme.example", "title": "Acme Plumbing | Home",
                "services": ["Drain cleaning"]}


REQUEST = {
    "target_website": "https://acme.example",
    "business_name": "Acme Plumbing",
    "business_type": "plumbing service",
    "business_location": "Austin, TX",
}


def make_generator(db, clients, extractor=None):
    return ReportGenerator(
        db=db,
        runner=make_runner(clients),
        extractor=extractor or DisabledExtractor(),
        search=DisabledSearch(),
        knowledge_probe=False,
    )


# ============================================================================
# Validation
# ============================================================================

class TestValidation:
    @pytest.mark.parametrize("url", ["", None, "acme.example", "ftp://acme.example", "https://"])
    def test_rejects_bad_websites(self, url):
        with pytest.raises(ValueError):
            validate_website(url)

    def test_accepts_http_and_https(self):
        assert validate_website(" https://acme.example ") == "https://acme.example"
        assert validate_website("http://acme.example/path") == "http://acme.example/path"

    def test_invalid_request_creates_nothing(self, db):
        generator = make_generator(db, {})
        with pytest.raises(ValueError):
            generator.create({"target_website": "acme.example"})
        assert db.list_reports() == []

    def test_create_defaults(self, db):
        generator = make_generator(db, {})
        report = db.get_report(generator.create({"target_website": "https://acme.example"}))
        assert report["status"] == "pending"
        assert report["business_type"] == "business"
        assert len(report["share_token"]) == 32
        assert report["share_url"] == share_url_for(report["share_token"])


# ============================================================================
# Pipeline
# ============================================================================

class TestGenerate:
    def test_completes_with_one_failed_platform(self, db):
        clients = {
            "chatgpt": FakeClient("chatgpt", failing_responder),
            "claude": FakeClient("claude", claude_responder),
        }
        generator = make_generator(db, clients)
        report_id = generator.create(REQUEST)
        progress = []

        report = generator.generate(report_id, progress_callback=lambda *a: progress.append(a))

        assert report["status"] == "completed"
        assert report["ai_platform_scores"] == {"claude": 100}
        assert report["overall_score"] == 100
        assert report["query_count"] == 12
        assert report["api_cost_usd"] > 0
        assert report["report_data"]["platforms_failed"] == ["chatgpt"]
        assert report["report_data"]["platforms_analyzed"] == ["chatgpt", "claude"]
        assert len(db.get_platform_responses(report_id)) == 12
        assert [p[0] for p in progress] == list(range(1, 9))

    def test_report_sections(self, db):
        clients = {"claude": FakeClient("claude", claude_responder)}
        generator = make_generator(db, clients)
        report = generator.generate(generator.create(REQUEST))

        competitors = report["competitor_analysis"]
        assert [c["name"] for c in competitors["competitors"]] == ["Rapid Rooter", "Best Pipes"]
        assert [c["name"] for c in competitors["top_competitors"]] == ["Rapid Rooter", "Best Pipes"]

        gaps = report["content_gap_analysis"]
        assert gaps["primary_brand"]["ai_visibility_score"] == 100
        assert {g["gap_title"] for g in gaps["structural_gaps"]} == {
            "Schema Markup Optimization", "Citation Network Expansion",
        }
        assert set(gaps["implementation_timeline"]) == {"immediate", "short_term", "long_term"}
        assert gaps["ai_knowledge_scores"]["best_platform"]["platform"] == "claude"
        assert "direct_probe" not in gaps["ai_knowledge_scores"]

        assert report["recommendations"]
        assert all(a["status"] == "pending" for a in report["recommendations"])

    def test_no_platforms_marks_error(self, db):
        generator = make_generator(db, {})
        report = generator.generate(generator.create(REQUEST))
        assert report["status"] == "error"
        assert "No AI platform" in report["error_message"]
        assert report["processing_duration_ms"] is not None

    def test_all_calls_failed_marks_error(self, db):
        generator = make_generator(db, {"chatgpt": FakeClient("chatgpt", failing_responder)})
        report = generator.generate(generator.create(REQUEST))
        assert report["status"] == "error"
        assert report["error_message"] == "All AI platform queries failed"

    def test_unknown_report(self, db):
        with pytest.raises(ValueError):
            make_generator(db, {}).generate(999)

    def test_profile_fills_missing_details(self, db):
        clients = {"claude": FakeClient("claude", claude_responder)}
        generator = make_generator(db, clients, extractor=FakeExtractor())
        report = generator.generate(generator.create({"target_website": "https://acme.example"}))

        assert report["status"] == "completed"
        assert report["business_name"] == "Acme Plumbing"
        assert report["business_type"] == "plumbing service"
        assert report["business_location"] == "Austin, TX"
        assert report["report_data"]["business_profile"]["fallback_used"] is False

    def test_name_falls_back_to_domain(self, db):
        clients = {"claude": FakeClient("claude", "Nothing useful here.")}
        generator = make_generator(db, clients)
        report = generator.generate(generator.create({"target_website": "https://www.acme.example"}))

        assert report["business_name"] == "acme.example"
        assert report["business_location"] == "Unknown"

    def test_knowledge_probe(self, db):
        probe_answer = json.dumps({"mentioned": True, "mention_count": 3, "knowledge_level": "Medium"})

        def responder(prompt):
            if prompt.startswith("You are an AI knowledge assessment tool"):
                return probe_answer
            return claude_responder(prompt)

        generator = ReportGenerator(
            db=db, runner=make_runner({"claude": FakeClient("claude", responder)}),
            extractor=DisabledExtractor(), search=DisabledSearch(), knowledge_probe=True,
        )
        report = generator.generate(generator.create(REQUEST))
        probe = report["content_gap_analysis"]["ai_knowledge_scores"]["direct_probe"]
        assert probe["platforms"]["claude"]["score"] == 66
        assert probe["average_score"] == 66

    def test_search_failure_is_skipped(self, db):
        generator = ReportGenerator(
            db=db, runner=make_runner({"claude": FakeClient("claude", claude_responder)}),
            extractor=DisabledExtractor(), search=FailingSearch(), knowledge_probe=False,
        )
        report = generator.generate(generator.create(REQUEST))
        assert report["status"] == "completed"

    def test_malformed_search_results_are_skipped(self, db):
        response = MagicMock(status_code=200, ok=True)
        response.json.return_value = {"items": [{"title": "Rapid Rooter Plumbing Austin", "snippet": "plumbing"}]}
        generator = ReportGenerator(
            db=db, runner=make_runner({"claude": FakeClient("claude", claude_responder)}),
            extractor=DisabledExtractor(), search=CompetitorSearchClient(api_key="key", engine_id="cx"),
            knowledge_probe=False,
        )
        with patch("web.google_search.requests.get", return_value=response):
            report = generator.generate(generator.create(REQUEST))
        assert report["status"] == "completed"
        assert all(c["source"] == "ai_answers" for c in report["competitor_analysis"]["competitors"])


class TestStart:
    def test_runs_in_background(self, db):
        generator = make_generator(db, {"claude": FakeClient("claude", claude_responder)})
        report_id = generator.start(REQUEST)

        deadline = time.time() + 10
        while time.time() < deadline:
            if db.get_report(report_id)["status"] in ("completed", "error"):
                break
            time.sleep(0.05)
        assert db.get_report(report_id)["status"] == "completed"
