class ScoreHistory:
    """Score trends across completed reports for the same website."""

    def __init__(self, db):
        self.db = db

    def get_overall_trend(self, target_website):
        return [
            {
                "report_id": row["id"],
                "date": row["generation_completed_at"],
                "overall_score": row["overall_score"],
            }
            for row in self.db.get_score_history(target_website)
        ]

    def get_platform_trend(self, target_website):
        """One row per (report, platform), oldest report first."""
        rows = []
        for row in self.db.get_score_history(target_website):
            for platform, score in (row.get("ai_platform_scores") or {}).items():
                rows.append({
                    "report_id": row["id"],
                    "date": row["generation_completed_at"],
                    "platform": platform,
                    "score": score,
                })
        return rows

    def get_trend_delta(self, target_website):
        """Change in overall score between the last two reports, or None."""
        trend = self.get_overall_trend(target_website)
        if len(trend) < 2:
            return None
        return trend[-1]["overall_score"] - trend[-2]["overall_score"]
