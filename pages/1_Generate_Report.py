import time

import streamlit as st

st.set_page_config(page_title="Generate Report", layout="wide")

from auth import check_password
if not check_password():
    st.stop()
from db.database import DatabaseManager
from platforms.runner import build_clients
from reports.generator import ReportGenerator
from report_view import render_report, status_label

st.header("Generate AI Visibility Report")

db = DatabaseManager()
clients = build_clients()
if not clients:
    st.error("No AI platform API keys configured.")
    st.info("Add OPENAI_API_KEY, ANTHROPIC_API_KEY, GOOGLE_AI_API_KEY or PERPLEXITY_API_KEY to `.env` or Streamlit secrets.")
    st.stop()

st.markdown(
    f"Asks **{len(clients)} AI platform(s)** six discovery, business and comparison questions, "
    "then analyzes competitors, content gaps and citation opportunities. "
    "Typical run time is 1-2 minutes."
)

with st.form("report_request"):
    target_website = st.text_input("Website *", placeholder="https://example.com")
    col1, col2, col3 = st.columns(3)
    business_name = col1.text_input("Business name", help="Detected from the website when empty")
    business_type = col2.text_input("Business type", placeholder="e.g. plumbing service")
    business_location = col3.text_input("Location", placeholder="e.g. Austin, TX")
    competitor_text = st.text_area("Known competitor websites (one per line)", height=80)
    submitted = st.form_submit_button("Generate Report", type="primary")

if submitted:
    request = {
        "target_website": target_website,
        "business_name": business_name,
        "business_type": business_type,
        "business_location": business_location,
        "competitor_websites": [line.strip() for line in competitor_text.splitlines() if line.strip()],
    }
    try:
        generator = ReportGenerator(db=db)
        st.session_state["active_report_id"] = generator.start(request)
    except ValueError as e:
        st.error(str(e))

report_id = st.session_state.get("active_report_id")
if report_id:
    status_text = st.empty()
    report = db.get_report(report_id)
    with st.spinner("Generating report..."):
        while report and report["status"] in ("pending", "generating"):
            status_text.text(f"Report #{report_id}: {status_label(report)}")
            time.sleep(3)
            report = db.get_report(report_id)

    if report is None:
        st.warning(f"Report #{report_id} no longer exists.")
    else:
        status_text.text(f"Report #{report_id}: {status_label(report)}")
        if report["status"] == "completed":
            st.success("Report complete!")
        render_report(report)
