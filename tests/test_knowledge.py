"""
Test Suite for the Direct Knowledge Probe
"""

import json

from conftest import FakeClient, make_runner
from analysis.knowledge import score_assessment, build_probe_prompt, KnowledgeProbe


class TestScoreAssessment:
    def test_level_plus_mentions(self):
        text = json.dumps({
            "mentioned": True, "mention_count": 4, "knowledge_level": "High",
            "facts_known": ["Founded 1998", "Family owned"], "confidence": 70,
        })
        result = score_assessment(text)
        assert result["score"] == 88
        assert result["knowledge_level"] == "High"
        assert result["facts_known"] == ["Founded 1998", "Family owned"]

    def test_mention_bonus_is_capped(self):
        result = score_assessment('{"knowledge_level": "High", "mention_count": 50}')
        assert result["score"] == 100

    def test_facts_do_not_add_points(self):
        text = json.dumps({"knowledge_level": "Medium", "mention_count": 0, "facts_known": ["a", "b", "c"]})
        assert score_assessment(text)["score"] == 60

    def test_fenced_json(self):
        text = '```json\n{"knowledge_level": "Low", "mention_count": 1}\n```'
        assert score_assessment(text)["score"] == 32

    def test_unparseable_but_informative(self):
        result = score_assessment("Acme Plumbing is a family business in Austin.")
        assert result["knowledge_level"] == "Low"
        assert result["score"] == 30
        assert result["confidence"] == 30

    def test_unparseable_and_unknown(self):
        result = score_assessment("I don't know this business.")
        assert result["knowledge_level"] == "None"
        assert result["score"] == 0
        assert result["mentioned"] is False


def test_probe_prompt_includes_details():
    prompt = build_probe_prompt("Acme Plumbing", "plumbing service", "Austin, TX", "https://acme.example")
    assert 'What do you know about "Acme Plumbing" in Austin, TX?' in prompt
    assert "- Website: https://acme.example" in prompt
    assert "Website" not in build_probe_prompt("Acme Plumbing")


def test_probe_skips_failed_platforms_in_average():
    def broken(prompt):
        raise RuntimeError("down")

    runner = make_runner({
        "chatgpt": FakeClient("chatgpt", '{"knowledge_level": "Medium", "mention_count": 0}'),
        "claude": FakeClient("claude", broken),
    })
    result = KnowledgeProbe(runner).probe("Acme Plumbing", "plumbing service", "Austin, TX")

    assert result["platforms"]["chatgpt"]["score"] == 60
    assert result["platforms"]["claude"]["score"] == 0
    assert result["platforms"]["claude"]["error"] == "down"
    assert result["average_score"] == 60
    assert result["cost"] == 0.001
