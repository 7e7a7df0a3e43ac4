"""
Test Suite for Business Profile Detection
"""

import json

from conftest import FakeClient
from analysis.business import (
    BusinessAnalyzer, confidence_score, format_location, build_analysis_context, DEFAULT_LOCATION,
)


WEBSITE = {
    "url": "https://acme.example",
    "domain": "acme.example",
    "title": "Acme Plumbing | Austin Plumbers",
    "meta_description": "Licensed plumber serving Austin",
    "schema_data": [{"@type": "Plumber"}],
    "services": ["Drain cleaning", "Leak repair"],
    "text_content": "Welcome to Acme Plumbing.",
}
ANALYSIS = {
    "business_name": "Acme Plumbing",
    "business_type": "plumbing service",
    "primary_services": ["Drain cleaning", "Leak repair", "Water heaters"],
    "location": {"city": "Austin", "state": "TX", "country": "US"},
    "competitor_search_terms": ["plumbers austin", "best plumber austin", "emergency plumber austin"],
}


class TestHelpers:
    def test_format_location(self):
        assert format_location({"city": 78701, "state": "TX"}) == "78701, TX"
        assert format_location({"city": "Austin", "state": "TX"}) == "Austin, TX"
        assert format_location({"country": "Canada"}) == "Canada"
        assert format_location(None) == DEFAULT_LOCATION

    def test_confidence_score(self):
        assert confidence_score(ANALYSIS, WEBSITE) == 100
        assert confidence_score({"business_name": "acme.example"}, {"domain": "acme.example"}) == 0

    def test_context_lists_services(self):
        context = build_analysis_context(WEBSITE)
        assert "Services/Products Listed:\nDrain cleaning\nLeak repair" in context
        assert "Page Title: Acme Plumbing | Austin Plumbers" in context


class TestAnalyzer:
    def test_analyze(self):
        analyzer = BusinessAnalyzer(FakeClient("claude", json.dumps(ANALYSIS)))
        profile = analyzer.analyze(WEBSITE)
        assert profile["business_name"] == "Acme Plumbing"
        assert profile["location_string"] == "Austin, TX"
        assert profile["fallback_used"] is False
        assert profile["confidence_score"] == 100

    def test_missing_search_terms_are_generated(self):
        analysis = dict(ANALYSIS, competitor_search_terms=[])
        profile = BusinessAnalyzer.validate(analysis, WEBSITE)
        assert profile["competitor_search_terms"][0] == "plumbing service in Austin, TX"

    def test_bad_json_falls_back(self):
        profile = BusinessAnalyzer(FakeClient("claude", "not json")).analyze(WEBSITE)
        assert profile["fallback_used"] is True
        assert profile["business_type"] == "plumbing service"
        assert profile["primary_services"] == ["Drain cleaning", "Leak repair"]
        assert profile["confidence_score"] == 30

    def test_malformed_field_types_fall_back(self):
        analysis = dict(ANALYSIS, location={"city": 78701, "state": None}, business_type=5)
        profile = BusinessAnalyzer(FakeClient("claude", json.dumps(analysis))).analyze(WEBSITE)
        assert profile["fallback_used"] is True
        assert profile["business_type"] == "plumbing service"

    def test_no_client_falls_back(self):
        profile = BusinessAnalyzer(None).analyze({"domain": "shop.example"})
        assert profile["business_name"] == "shop.example"
        assert profile["business_type"] == "business"
