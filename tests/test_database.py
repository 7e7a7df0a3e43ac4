"""
Test Suite for Report Persistence
"""

from datetime import datetime, timedelta


def _create(db, website="https://acme.example", token="tok123"):
    return db.create_report(
        target_website=website, business_name="Acme Plumbing", business_type="plumbing service",
        business_location="Austin, TX", share_token=token, share_url=f"http://localhost/s?token={token}",
    )


def _complete(db, report_id, overall=50, scores=None):
    db.mark_generating(report_id)
    db.complete_report(
        report_id,
        report_data={"business_name": "Acme Plumbing"},
        content_gap_analysis={"total_gaps": 2},
        ai_platform_scores=scores or {"claude": overall},
        competitor_analysis={"total_competitors": 0},
        recommendations=[{"action_title": "Do it"}],
        overall_score=overall,
        processing_duration_ms=1200,
        api_cost_usd=0.0123,
        query_count=6,
    )


class TestReports:
    def test_create_and_get(self, db):
        report_id = _create(db)
        report = db.get_report(report_id)

        assert report["status"] == "pending"
        assert report["business_name"] == "Acme Plumbing"
        assert report["share_enabled"] is True
        assert report["share_views"] == 0
        assert report["created_at"]

    def test_status_flow(self, db):
        report_id = _create(db)
        db.mark_generating(report_id)
        report = db.get_report(report_id)
        assert report["status"] == "generating"
        assert report["generation_started_at"]

        _complete(db, report_id)
        report = db.get_report(report_id)
        assert report["status"] == "completed"
        assert report["ai_platform_scores"] == {"claude": 50}
        assert report["recommendations"] == [{"action_title": "Do it"}]
        assert report["processing_duration_ms"] == 1200
        assert report["generation_completed_at"]

    def test_fail(self, db):
        report_id = _create(db)
        db.fail_report(report_id, "boom", processing_duration_ms=10)
        report = db.get_report(report_id)
        assert report["status"] == "error"
        assert report["error_message"] == "boom"

    def test_update_business_info_skips_empty(self, db):
        report_id = _create(db)
        db.update_business_info(report_id, business_name="Acme Plumbing LLC", business_type=None,
                                competitor_websites=["https://rival.example"])
        report = db.get_report(report_id)
        assert report["business_name"] == "Acme Plumbing LLC"
        assert report["business_type"] == "plumbing service"
        assert report["competitor_websites"] == ["https://rival.example"]

    def test_list_and_soft_delete(self, db):
        first = _create(db, token="a")
        second = _create(db, token="b")
        _complete(db, second)

        assert {r["id"] for r in db.list_reports()} == {first, second}
        assert [r["id"] for r in db.list_reports(status="completed")] == [second]

        db.soft_delete_report(first)
        assert [r["id"] for r in db.list_reports()] == [second]
        assert db.get_report(first) is None
        assert db.get_report(first, include_deleted=True)["deleted_at"]


class TestSharing:
    def test_lookup_counts_views(self, db):
        _create(db, token="shared")
        assert db.get_report_by_share_token("shared")["share_views"] == 1
        assert db.get_report_by_share_token("shared")["share_views"] == 2

    def test_disabled_or_deleted(self, db):
        report_id = _create(db, token="shared")
        db.set_share_enabled(report_id, False)
        assert db.get_report_by_share_token("shared") is None

        db.set_share_enabled(report_id, True)
        db.soft_delete_report(report_id)
        assert db.get_report_by_share_token("shared") is None

    def test_unknown_token(self, db):
        assert db.get_report_by_share_token("nope") is None


class TestPlatformResponses:
    def test_store_and_list(self, db):
        report_id = _create(db)
        db.store_platform_response(report_id, "claude", {
            "query": "best plumbers", "text": "Acme", "model": "m", "tokens": 10, "cost": 0.001,
        })
        db.store_platform_response(report_id, "chatgpt", {
            "query": "best plumbers", "text": "", "tokens": 0, "cost": 0.0, "error": "timeout",
        })
        rows = db.get_platform_responses(report_id)
        assert [r["platform"] for r in rows] == ["chatgpt", "claude"]
        assert rows[0]["error_message"] == "timeout"
        assert rows[1]["response_text"] == "Acme"


class TestStaleReports:
    def test_old_generating_reports_fail(self, db):
        stale = _create(db, token="old")
        fresh = _create(db, token="new")
        db.mark_generating(stale)
        db.mark_generating(fresh)
        old = (datetime.now() - timedelta(minutes=30)).isoformat()
        db.execute("UPDATE external_reports SET generation_started_at = ? WHERE id = ?", (old, stale))

        assert db.fail_stale_reports(20) == 1
        assert db.get_report(stale)["status"] == "error"
        assert db.get_report(fresh)["status"] == "generating"

    def test_stale_report_is_not_completed_later(self, db):
        report_id = _create(db, token="late")
        db.mark_generating(report_id)
        old = (datetime.now() - timedelta(minutes=30)).isoformat()
        db.execute("UPDATE external_reports SET generation_started_at = ? WHERE id = ?", (old, report_id))
        db.fail_stale_reports(20)

        db.complete_report(
            report_id, report_data={}, content_gap_analysis={}, ai_platform_scores={"claude": 10},
            competitor_analysis={}, recommendations=[], overall_score=10,
            processing_duration_ms=1, api_cost_usd=0.0, query_count=6,
        )
        report = db.get_report(report_id)
        assert report["status"] == "error"
        assert report["overall_score"] is None


class TestScoreHistory:
    def test_completed_reports_for_website(self, db):
        first = _create(db, token="1")
        _complete(db, first, overall=40)
        second = _create(db, token="2")
        _complete(db, second, overall=65)
        _create(db, token="3")
        other = _create(db, website="https://other.example", token="4")
        _complete(db, other, overall=90)

        history = db.get_score_history("https://acme.example")
        assert [h["overall_score"] for h in history] == [40, 65]
        assert history[0]["ai_platform_scores"] == {"claude": 40}
