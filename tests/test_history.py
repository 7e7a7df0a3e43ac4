"""
Test Suite for Score History
"""

from analysis.history import ScoreHistory


def _completed(db, overall, scores, token):
    report_id = db.create_report(target_website="https://acme.example", share_token=token)
    db.mark_generating(report_id)
    db.complete_report(
        report_id, report_data={}, content_gap_analysis={}, ai_platform_scores=scores,
        competitor_analysis={}, recommendations=[], overall_score=overall,
        processing_duration_ms=1, api_cost_usd=0.0, query_count=6,
    )
    return report_id


def test_trends(db):
    _completed(db, 30, {"chatgpt": 20, "claude": 40}, "a")
    _completed(db, 55, {"chatgpt": 50, "claude": 60}, "b")
    history = ScoreHistory(db)

    assert [t["overall_score"] for t in history.get_overall_trend("https://acme.example")] == [30, 55]
    platform_rows = history.get_platform_trend("https://acme.example")
    assert len(platform_rows) == 4
    assert {(r["platform"], r["score"]) for r in platform_rows[2:]} == {("chatgpt", 50), ("claude", 60)}
    assert history.get_trend_delta("https://acme.example") == 25


def test_delta_needs_two_reports(db):
    _completed(db, 30, {"claude": 30}, "a")
    assert ScoreHistory(db).get_trend_delta("https://acme.example") is None
    assert ScoreHistory(db).get_overall_trend("https://unknown.example") == []
