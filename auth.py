"""Simple password gate for the Streamlit app."""

import os

import streamlit as st


def check_password():
    """Returns True if the user has entered the correct password."""
    if st.session_state.get("authenticated"):
        return True

    st.title("AI Visibility Reports")
    st.markdown("---")
    password = st.text_input("Enter password to access the dashboard:", type="password")

    if password:
        try:
            correct = st.secrets["APP_PASSWORD"]
        except Exception:
            correct = os.getenv("APP_PASSWORD")

        if correct and password == correct:
            st.session_state["authenticated"] = True
            st.rerun()
        elif not correct:
            st.error("APP_PASSWORD is not configured.")
        else:
            st.error("Incorrect password.")

    return False
