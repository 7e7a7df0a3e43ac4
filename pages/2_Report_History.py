import os

import pandas as pd
import plotly.express as px
import streamlit as st

st.set_page_config(page_title="Report History", layout="wide")

from auth import check_password
if not check_password():
    st.stop()
from analysis.history import ScoreHistory
from config.settings import PLATFORM_LABELS, STALE_REPORT_MINUTES
from db.database import DatabaseManager
from reports.pdf_report import generate_pdf
from report_view import render_report, status_label

st.header("Report History")

db = DatabaseManager()
stale = db.fail_stale_reports(STALE_REPORT_MINUTES)
if stale:
    st.warning(f"Marked {stale} stuck report(s) as failed.")

status_filter = st.selectbox("Status", ["all", "completed", "generating", "pending", "error"])
reports = db.list_reports(status=None if status_filter == "all" else status_filter, limit=200)

if not reports:
    st.info("No reports found.")
    st.stop()

options = {
    r["id"]: f"#{r['id']} {r.get('business_name') or r['target_website']} | "
             f"{r['created_at'][:10]} | {status_label(r)}"
    for r in reports
}
selected = st.selectbox("Select report", list(options), format_func=lambda x: options[x])
report = db.get_report(selected)

col1, col2, col3 = st.columns(3)
with col1:
    if report["status"] == "completed" and st.button("Generate PDF"):
        with st.spinner("Rendering PDF..."):
            try:
                path = generate_pdf(report)
                with open(path, "rb") as f:
                    st.download_button("Download PDF", f.read(), file_name=os.path.basename(path),
                                       mime="application/pdf", type="primary")
            except Exception as e:
                st.error(f"Error generating PDF: {e}")
with col2:
    enabled = st.toggle("Sharing enabled", value=report["share_enabled"])
    if enabled != report["share_enabled"]:
        db.set_share_enabled(selected, enabled)
        st.rerun()
    if report["share_enabled"]:
        st.caption(f"Share link: {report['share_url']} ({report['share_views']} views)")
with col3:
    if st.button("Delete report"):
        db.soft_delete_report(selected)
        st.success(f"Report #{selected} deleted.")
        st.rerun()

st.divider()
render_report(report)

history = ScoreHistory(db)
overall = history.get_overall_trend(report["target_website"])
if len(overall) > 1:
    st.divider()
    st.subheader("Score Trend")
    delta = history.get_trend_delta(report["target_website"])
    st.metric("Latest Overall Score", overall[-1]["overall_score"], delta=delta)

    df = pd.DataFrame(history.get_platform_trend(report["target_website"]))
    df["platform"] = df["platform"].map(lambda p: PLATFORM_LABELS.get(p, p))
    fig = px.line(df, x="date", y="score", color="platform", markers=True,
                  title="Platform Scores Over Time",
                  labels={"score": "Score", "date": "Date", "platform": "Platform"})
    st.plotly_chart(fig, use_container_width=True)

with st.expander("Raw platform answers"):
    for row in db.get_platform_responses(selected):
        label = PLATFORM_LABELS.get(row["platform"], row["platform"])
        st.markdown(f"**{label}**: {row['query_text']}")
        if row["error_message"]:
            st.error(row["error_message"])
        else:
            st.text(row["response_text"])
