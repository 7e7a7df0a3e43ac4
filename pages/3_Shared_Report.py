import streamlit as st

st.set_page_config(page_title="Shared Report", layout="wide")

from db.database import DatabaseManager
from report_view import render_report

token = st.query_params.get("token")
if not token:
    st.warning("This page needs a share link.")
    st.stop()

report = DatabaseManager().get_report_by_share_token(token)
if report is None:
    st.error("This report does not exist or is no longer shared.")
    st.stop()

st.header("AI Visibility Report")
render_report(report, show_internal=False)
