import streamlit as st

st.set_page_config(
    page_title="AI Visibility Reports",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)

from auth import check_password
if not check_password():
    st.stop()

from config.settings import _get_secret, STALE_REPORT_MINUTES
from db.database import DatabaseManager
from report_view import status_label

st.title("AI Visibility Report Generator")
st.markdown(
    "Measure how often ChatGPT, Claude, Gemini and Perplexity recommend a local business, "
    "who they recommend instead, and what to fix. Use the sidebar to navigate between views."
)

db = DatabaseManager()
db.fail_stale_reports(STALE_REPORT_MINUTES)

reports = db.list_reports(limit=200)
completed = [r for r in reports if r["status"] == "completed"]

cols = st.columns(4)
cols[0].metric("Reports", len(reports))
cols[1].metric("Completed", len(completed))
cols[2].metric(
    "Avg Overall Score",
    f"{sum(r['overall_score'] for r in completed) / len(completed):.0f}" if completed else "N/A",
)
cols[3].metric("Total API Cost", f"${sum(r['api_cost_usd'] or 0 for r in completed):.2f}")

if reports:
    st.subheader("Latest Reports")
    for report in reports[:5]:
        st.markdown(
            f"{status_label(report)} | **{report.get('business_name') or report['target_website']}** | "
            f"{report['created_at'][:16].replace('T', ' ')}"
            + (f" | score {report['overall_score']}" if report["status"] == "completed" else "")
        )
else:
    st.info("No reports yet. Go to **Generate Report** to create your first one.")

with st.expander("API Key Status"):
    for key in [
        "OPENAI_API_KEY", "ANTHROPIC_API_KEY", "GOOGLE_AI_API_KEY", "PERPLEXITY_API_KEY",
        "SCRAPINGBEE_API_KEY", "GOOGLE_CUSTOM_SEARCH_API_KEY", "GOOGLE_CUSTOM_SEARCH_ENGINE_ID",
    ]:
        if _get_secret(key):
            st.success(f"{key}: Configured")
        else:
            st.warning(f"{key}: not set")
