import os
import json
import sqlite3
from datetime import datetime, timedelta
from config.settings import DB_PATH

JSON_COLUMNS = (
    "competitor_websites", "report_data", "content_gap_analysis",
    "ai_platform_scores", "competitor_analysis", "recommendations",
)


def _now():
    return datetime.now().isoformat()


def _decode(row):
    if row is None:
        return None
    for column in JSON_COLUMNS:
        if row.get(column):
            row[column] = json.loads(row[column])
    if "share_enabled" in row:
        row["share_enabled"] = bool(row["share_enabled"])
    return row


class DatabaseManager:
    def __init__(self, db_path=None):
        self.db_path = db_path or DB_PATH
        os.makedirs(os.path.dirname(os.path.abspath(self.db_path)), exist_ok=True)
        self._init_db()

    def _get_conn(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    def _init_db(self):
        schema_path = os.path.join(os.path.dirname(__file__), "schema.sql")
        with open(schema_path, "r") as f:
            schema_sql = f.read()
        conn = self._get_conn()
        conn.executescript(schema_sql)
        conn.close()

    def query(self, sql, params=None):
        conn = self._get_conn()
        cursor = conn.execute(sql, params or ())
        rows = [dict(row) for row in cursor.fetchall()]
        conn.close()
        return rows

    def execute(self, sql, params=None):
        conn = self._get_conn()
        cursor = conn.execute(sql, params or ())
        conn.commit()
        last_id = cursor.lastrowid
        conn.close()
        return last_id

    def _update(self, report_id, expect_status=None, **fields):
        fields["updated_at"] = _now()
        for column in JSON_COLUMNS:
            if column in fields and fields[column] is not None:
                fields[column] = json.dumps(fields[column])
        assignments = ", ".join(f"{k} = :{k}" for k in fields)
        fields["report_id"] = report_id
        sql = f"UPDATE external_reports SET {assignments} WHERE id = :report_id"
        if expect_status:
            fields["expect_status"] = expect_status
            sql += " AND status = :expect_status"
        self.execute(sql, fields)

    # --- Reports ---
    def create_report(self, target_website, business_name=None, business_type="business",
                      business_location="", competitor_websites=None, share_token=None,
                      share_url=None, generated_by_name=None, generated_by_email=None):
        now = _now()
        return self.execute(
            """INSERT INTO external_reports
               (generated_by_name, generated_by_email, target_website, business_name,
                business_type, business_location, competitor_websites, share_token,
                share_url, status, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 'pending', ?, ?)""",
            (generated_by_name, generated_by_email, target_website, business_name,
             business_type, business_location,
             json.dumps(competitor_websites) if competitor_websites else None,
             share_token, share_url, now, now),
        )

    def get_report(self, report_id, include_deleted=False):
        sql = "SELECT * FROM external_reports WHERE id = ?"
        if not include_deleted:
            sql += " AND deleted_at IS NULL"
        rows = self.query(sql, (report_id,))
        return _decode(rows[0]) if rows else None

    def list_reports(self, status=None, limit=50):
        sql = "SELECT * FROM external_reports WHERE deleted_at IS NULL"
        params = []
        if status:
            sql += " AND status = ?"
            params.append(status)
        sql += " ORDER BY created_at DESC, id DESC LIMIT ?"
        params.append(limit)
        return [_decode(r) for r in self.query(sql, params)]

    def get_report_by_share_token(self, share_token):
        """A shared report, counting the view. None unless sharing is enabled."""
        rows = self.query(
            """SELECT * FROM external_reports
               WHERE share_token = ? AND share_enabled = 1 AND deleted_at IS NULL""",
            (share_token,),
        )
        if not rows:
            return None
        self.execute(
            "UPDATE external_reports SET share_views = share_views + 1 WHERE id = ?",
            (rows[0]["id"],),
        )
        report = _decode(rows[0])
        report["share_views"] += 1
        return report

    def mark_generating(self, report_id):
        self._update(report_id, status="generating", generation_started_at=_now())

    def update_business_info(self, report_id, business_name=None, business_type=None,
                             business_location=None, competitor_websites=None):
        fields = {
            "business_name": business_name,
            "business_type": business_type,
            "business_location": business_location,
            "competitor_websites": competitor_websites,
        }
        fields = {k: v for k, v in fields.items() if v}
        if fields:
            self._update(report_id, **fields)

    def complete_report(self, report_id, report_data, content_gap_analysis, ai_platform_scores,
                        competitor_analysis, recommendations, overall_score,
                        processing_duration_ms, api_cost_usd, query_count):
        """Store the results. A report no longer ``generating`` (failed as stale) is left as is."""
        self._update(
            report_id,
            expect_status="generating",
            status="completed",
            report_data=report_data,
            content_gap_analysis=content_gap_analysis,
            ai_platform_scores=ai_platform_scores,
            competitor_analysis=competitor_analysis,
            recommendations=recommendations,
            overall_score=overall_score,
            generation_completed_at=_now(),
            processing_duration_ms=processing_duration_ms,
            api_cost_usd=api_cost_usd,
            query_count=query_count,
            error_message=None,
        )

    def fail_report(self, report_id, error_message, processing_duration_ms=None):
        self._update(
            report_id,
            status="error",
            error_message=error_message,
            generation_completed_at=_now(),
            processing_duration_ms=processing_duration_ms,
        )

    def soft_delete_report(self, report_id):
        self._update(report_id, deleted_at=_now())

    def set_share_enabled(self, report_id, enabled):
        self._update(report_id, share_enabled=1 if enabled else 0)

    def fail_stale_reports(self, minutes):
        """Reports stuck in ``generating`` since before the cutoff become errors."""
        cutoff = (datetime.now() - timedelta(minutes=minutes)).isoformat()
        stale = self.query(
            """SELECT id FROM external_reports
               WHERE status IN ('pending', 'generating') AND deleted_at IS NULL
                     AND COALESCE(generation_started_at, created_at) < ?""",
            (cutoff,),
        )
        for row in stale:
            self.fail_report(row["id"], f"Report generation did not finish within {minutes} minutes")
        return len(stale)

    # --- Platform responses ---
    def store_platform_response(self, report_id, platform, answer):
        return self.execute(
            """INSERT INTO platform_responses
               (report_id, platform, query_text, response_text, model_name, tokens,
                cost_usd, error_message, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (report_id, platform, answer.get("query", ""), answer.get("text") or "",
             answer.get("model"), answer.get("tokens", 0), answer.get("cost", 0.0),
             answer.get("error"), _now()),
        )

    def get_platform_responses(self, report_id):
        return self.query(
            "SELECT * FROM platform_responses WHERE report_id = ? ORDER BY platform, id",
            (report_id,),
        )

    # --- History ---
    def get_score_history(self, target_website):
        return [
            _decode(r) for r in self.query(
                """SELECT id, business_name, overall_score, ai_platform_scores,
                          generation_completed_at
                   FROM external_reports
                   WHERE target_website = ? AND status = 'completed' AND deleted_at IS NULL
                   ORDER BY generation_completed_at, id""",
                (target_website,),
            )
        ]
