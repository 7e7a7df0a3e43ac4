"""Streamlit rendering of a single report, shared by the history and share pages."""

import pandas as pd
import plotly.express as px
import streamlit as st

from config.settings import PLATFORM_LABELS

STATUS_ICONS = {
    "pending": "⏳",
    "generating": "⚙️",
    "completed": "✅",
    "error": "❌",
}
PRIORITY_COLORS = {"critical": "#E74C3C", "high": "#F39C12", "medium": "#4F46E5", "low": "#27AE60"}


def status_label(report):
    return f"{STATUS_ICONS.get(report['status'], '?')} {report['status'].title()}"


def render_report(report, show_internal=True):
    """Render a report row. ``show_internal`` adds cost and raw metadata."""
    data = report.get("report_data") or {}
    gaps = report.get("content_gap_analysis") or {}
    competitor_analysis = report.get("competitor_analysis") or {}
    scores = report.get("ai_platform_scores") or {}
    business_name = data.get("business_name") or report.get("business_name") or report["target_website"]

    st.subheader(business_name)
    st.caption(
        f"{report['target_website']} | {data.get('business_type') or report.get('business_type')} | "
        f"{data.get('location') or report.get('business_location')}"
    )

    if report["status"] != "completed":
        st.info(f"Report status: {status_label(report)}")
        if report.get("error_message"):
            st.error(report["error_message"])
        return

    cols = st.columns(4)
    cols[0].metric("Overall Score", f"{report.get('overall_score', 0)}/100")
    cols[1].metric("AI Queries", report.get("query_count") or 0)
    cols[2].metric("Competitors Found", competitor_analysis.get("total_competitors", 0))
    cols[3].metric("Content Gaps", gaps.get("total_gaps", 0))
    if show_internal:
        st.caption(
            f"Generated in {(report.get('processing_duration_ms') or 0) / 1000:.1f}s | "
            f"API cost ${report.get('api_cost_usd') or 0:.4f}"
        )
    if data.get("platforms_failed"):
        failed = ", ".join(PLATFORM_LABELS.get(p, p) for p in data["platforms_failed"])
        st.warning(f"No answers received from {failed}; not scored.")

    tab_scores, tab_competitors, tab_gaps, tab_actions = st.tabs(
        ["Platform Scores", "Competitors", "Content Gaps", "Action Plan"]
    )

    with tab_scores:
        if scores:
            df = pd.DataFrame(
                [{"Platform": PLATFORM_LABELS.get(p, p), "Score": s} for p, s in scores.items()]
            )
            fig = px.bar(df, x="Platform", y="Score", range_y=[0, 100], text="Score",
                         title="AI Visibility by Platform")
            st.plotly_chart(fig, use_container_width=True)

        knowledge = gaps.get("ai_knowledge_scores") or {}
        if knowledge.get("platforms"):
            st.dataframe(
                pd.DataFrame(knowledge["platforms"]).assign(
                    platform=lambda d: d["platform"].map(lambda p: PLATFORM_LABELS.get(p, p))
                ),
                use_container_width=True, hide_index=True,
            )
        probe = knowledge.get("direct_probe")
        if probe:
            st.markdown(f"**Direct knowledge probe:** average {probe['average_score']}/100")
            for platform, assessment in probe["platforms"].items():
                st.markdown(
                    f"- {PLATFORM_LABELS.get(platform, platform)}: "
                    f"{assessment['knowledge_level']} ({assessment['score']}/100)"
                )

    with tab_competitors:
        competitors = competitor_analysis.get("competitors", [])
        if competitors:
            st.dataframe(
                pd.DataFrame([
                    {
                        "Rank": c.get("rank"),
                        "Competitor": c["name"],
                        "Mentions": c.get("detection_count", 0),
                        "Platforms": ", ".join(PLATFORM_LABELS.get(p, p) for p in c.get("platforms", [])),
                        "Website": c.get("website") or "",
                    }
                    for c in competitors
                ]),
                use_container_width=True, hide_index=True,
            )
        else:
            st.info("No competitors were named in the AI answers.")

        for top in competitor_analysis.get("top_competitors", []):
            with st.expander(f"{top['name']} (in-depth)"):
                st.markdown(f"*{top.get('why_recommended', '')}*")
                left, right = st.columns(2)
                left.markdown("**Strengths**\n" + "\n".join(f"- {s}" for s in top.get("strengths", [])))
                right.markdown("**Weaknesses**\n" + "\n".join(f"- {w}" for w in top.get("weaknesses", [])))

        left, right = st.columns(2)
        left.markdown("**Your competitive advantages**\n" + "\n".join(
            f"- {a}" for a in competitor_analysis.get("competitive_advantages", [])))
        right.markdown("**Areas to improve**\n" + "\n".join(
            f"- {w}" for w in competitor_analysis.get("competitive_weaknesses", [])))

    with tab_gaps:
        breakdown = gaps.get("severity_breakdown") or {}
        cols = st.columns(3)
        cols[0].metric("Critical", breakdown.get("critical", 0))
        cols[1].metric("Significant", breakdown.get("significant", 0))
        cols[2].metric("Moderate", breakdown.get("moderate", 0))
        for key, title in (
            ("structural_gaps", "Structural"),
            ("critical_topic_gaps", "Critical Topics"),
            ("significant_topic_gaps", "Significant Topics"),
            ("thematic_gaps", "Thematic"),
        ):
            items = gaps.get(key) or []
            if not items:
                continue
            st.markdown(f"#### {title}")
            for gap in items:
                st.markdown(
                    f"**{gap['gap_title']}** ({gap['severity']}): {gap['gap_description']}  \n"
                    f"➡️ {gap['recommended_action']}"
                )

        st.markdown("#### Citation Opportunities")
        for opp in gaps.get("citation_opportunities", []):
            st.markdown(
                f"- **{PLATFORM_LABELS.get(opp['platform'], opp['platform'])}** "
                f"({opp['priority']}, {opp['status']}): {opp['description']}"
            )

    with tab_actions:
        for action in report.get("recommendations") or []:
            color = PRIORITY_COLORS.get(action["priority"], "#333333")
            st.markdown(
                f"<span style='color:{color}'><b>[{action['priority'].upper()}]</b></span> "
                f"**{action['action_title']}**: {action['action_description']}",
                unsafe_allow_html=True,
            )
            st.caption(
                f"{action['category']} | impact {action['estimated_impact']} | "
                f"effort {action['estimated_effort']} | {action['timeline'].replace('_', ' ')}"
            )

        timeline = gaps.get("implementation_timeline") or {}
        st.markdown("#### Implementation Timeline")
        cols = st.columns(3)
        for col, (phase, label) in zip(cols, (
            ("immediate", "Immediate"), ("short_term", "Short Term"), ("long_term", "Long Term"),
        )):
            items = timeline.get(phase) or []
            col.markdown(f"**{label}**")
            for item in items:
                col.markdown(f"- {item['title']} *({item['duration']})*")
            if not items:
                col.caption("Nothing scheduled")
