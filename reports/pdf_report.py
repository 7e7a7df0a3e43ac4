"""
PDF export for a completed AI visibility report.
Uses reportlab for PDF layout and matplotlib for charts.
"""

import io
import os
import re
from datetime import datetime
from xml.sax.saxutils import escape

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle,
    Image, PageBreak, HRFlowable,
)

from config.settings import PLATFORM_LABELS, REPORT_OUTPUT_DIR

# ── Color palette ─────────────────────────────────────────────
PRIMARY = colors.HexColor("#4F46E5")
PRIMARY_DARK = colors.HexColor("#1E1B4B")
LIGHT_GRAY = colors.HexColor("#F5F5F5")
MED_GRAY = colors.HexColor("#CCCCCC")
DARK_GRAY = colors.HexColor("#333333")
GREEN = colors.HexColor("#27AE60")
RED = colors.HexColor("#E74C3C")
AMBER = colors.HexColor("#F39C12")

PLATFORM_COLORS = {
    "chatgpt": "#10A37F",
    "claude": "#D97757",
    "gemini": "#4285F4",
    "perplexity": "#20808D",
}
SEVERITY_COLORS = {"critical": RED, "significant": AMBER, "moderate": PRIMARY}
PRIORITY_COLORS = {"critical": RED, "high": AMBER, "medium": PRIMARY, "low": GREEN}


def score_color(score):
    if score >= 70:
        return GREEN
    if score >= 40:
        return AMBER
    return RED


def safe_filename(name):
    return re.sub(r"[^A-Za-z0-9]+", "_", name or "report").strip("_") or "report"


class VisibilityReportPDF:
    def __init__(self):
        self.styles = getSampleStyleSheet()
        self._setup_styles()

    def _setup_styles(self):
        """Add custom paragraph styles for the report."""
        self.styles.add(ParagraphStyle(
            "ReportTitle", parent=self.styles["Title"],
            fontSize=26, textColor=PRIMARY_DARK, spaceAfter=6,
            alignment=TA_CENTER, fontName="Helvetica-Bold",
        ))
        self.styles.add(ParagraphStyle(
            "ReportSubtitle", parent=self.styles["Normal"],
            fontSize=14, textColor=colors.HexColor("#666666"),
            spaceAfter=20, alignment=TA_CENTER,
        ))
        self.styles.add(ParagraphStyle(
            "SectionHeader", parent=self.styles["Heading1"],
            fontSize=18, textColor=PRIMARY_DARK, spaceBefore=16,
            spaceAfter=8, fontName="Helvetica-Bold",
        ))
        self.styles.add(ParagraphStyle(
            "SubHeader", parent=self.styles["Heading2"],
            fontSize=13, textColor=PRIMARY, spaceBefore=10,
            spaceAfter=4, fontName="Helvetica-Bold",
        ))
        self.styles.add(ParagraphStyle(
            "ReportBody", parent=self.styles["Normal"],
            fontSize=10, leading=14, spaceAfter=6,
            alignment=TA_JUSTIFY, textColor=DARK_GRAY,
        ))
        self.styles.add(ParagraphStyle(
            "SmallText", parent=self.styles["Normal"],
            fontSize=8, leading=10, textColor=colors.HexColor("#555555"),
        ))
        self.styles.add(ParagraphStyle(
            "HeaderCell", parent=self.styles["SmallText"],
            textColor=colors.white,
        ))
        self.styles.add(ParagraphStyle(
            "KPILabel", parent=self.styles["Normal"],
            fontSize=9, textColor=colors.HexColor("#666666"),
            alignment=TA_CENTER,
        ))
        self.styles.add(ParagraphStyle(
            "BulletItem", parent=self.styles["Normal"],
            fontSize=10, leading=14, leftIndent=20, spaceBefore=2,
            spaceAfter=2, bulletIndent=8, textColor=DARK_GRAY,
        ))

    # ── Charts ────────────────────────────────────────────────
    def _make_chart_image(self, fig, width=6.5, height=3.5):
        """Convert a matplotlib figure to a reportlab Image flowable."""
        buf = io.BytesIO()
        fig.savefig(buf, format="png", dpi=150, bbox_inches="tight",
                    facecolor="white", edgecolor="none")
        plt.close(fig)
        buf.seek(0)
        return Image(buf, width=width * inch, height=height * inch)

    def _chart_platform_scores(self, scores):
        """Bar chart: visibility score per platform."""
        platforms = list(scores)
        values = [scores[p] for p in platforms]
        x = np.arange(len(platforms))

        fig, ax = plt.subplots(figsize=(8, 3.5))
        bars = ax.bar(x, values, 0.5,
                      color=[PLATFORM_COLORS.get(p, "#888888") for p in platforms],
                      edgecolor="white", linewidth=0.5)
        for bar, val in zip(bars, values):
            ax.text(bar.get_x() + bar.get_width() / 2, bar.get_height() + 1,
                    f"{val}", ha="center", va="bottom", fontsize=9, fontweight="bold")

        ax.set_ylabel("Visibility Score", fontsize=10)
        ax.set_title("AI Visibility by Platform", fontsize=13, fontweight="bold", pad=12)
        ax.set_xticks(x)
        ax.set_xticklabels([PLATFORM_LABELS.get(p, p) for p in platforms], fontsize=9)
        ax.set_ylim(0, 110)
        ax.axhline(y=70, color="#27AE60", linestyle="--", alpha=0.4, linewidth=1)
        ax.axhline(y=40, color="#F39C12", linestyle="--", alpha=0.4, linewidth=1)
        ax.spines["top"].set_visible(False)
        ax.spines["right"].set_visible(False)
        ax.grid(axis="y", alpha=0.3)
        fig.tight_layout()
        return self._make_chart_image(fig, width=6.5, height=2.9)

    def _chart_competitor_mentions(self, business_name, business_mentions, competitors):
        """Horizontal bars: answers naming the business vs each competitor."""
        names = [business_name] + [c["name"] for c in competitors]
        counts = [business_mentions] + [c.get("detection_count", 0) for c in competitors]
        y = np.arange(len(names))

        fig, ax = plt.subplots(figsize=(8, 0.5 * len(names) + 1.2))
        ax.barh(y, counts, 0.6,
                color=["#4F46E5"] + ["#9CA3AF"] * len(competitors))
        for i, val in enumerate(counts):
            ax.text(val + 0.1, i, str(val), va="center", fontsize=9)
        ax.set_yticks(y)
        ax.set_yticklabels(names, fontsize=9)
        ax.invert_yaxis()
        ax.set_xlabel("AI answers mentioning", fontsize=10)
        ax.set_title("Mentions: You vs Competitors", fontsize=13, fontweight="bold", pad=12)
        ax.spines["top"].set_visible(False)
        ax.spines["right"].set_visible(False)
        fig.tight_layout()
        return self._make_chart_image(fig, width=6.5, height=0.4 * len(names) + 1.0)

    # ── Tables ────────────────────────────────────────────────
    def _kpi_cards(self, report):
        overall = report.get("overall_score") or 0
        gaps = report.get("content_gap_analysis") or {}
        competitors = report.get("competitor_analysis") or {}
        color = score_color(overall).hexval().replace("0x", "#")

        cells = [
            (f'<font color="{color}" size="20"><b>{overall}</b></font>', "Overall Score"),
            (f'<font size="20"><b>{report.get("query_count") or 0}</b></font>', "AI Queries"),
            (f'<font size="20"><b>{competitors.get("total_competitors", 0)}</b></font>', "Competitors Found"),
            (f'<font size="20"><b>{gaps.get("total_gaps", 0)}</b></font>', "Content Gaps"),
        ]
        row = [
            Paragraph(f'{value}<br/><font size="8" color="#888">{label}</font>', self.styles["KPILabel"])
            for value, label in cells
        ]
        tbl = Table([row], colWidths=[1.75 * inch] * len(row))
        tbl.setStyle(TableStyle([
            ("ALIGN", (0, 0), (-1, -1), "CENTER"),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("GRID", (0, 0), (-1, -1), 0.5, MED_GRAY),
            ("BACKGROUND", (0, 0), (-1, -1), LIGHT_GRAY),
            ("TOPPADDING", (0, 0), (-1, -1), 10),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 10),
        ]))
        return tbl

    def _grid_table(self, header, rows, col_widths, color_column=None, palette=None):
        """A header + rows table; ``color_column`` cells are tinted from ``palette``."""
        data = [[Paragraph(f"<b>{escape(h)}</b>", self.styles["HeaderCell"]) for h in header]]
        for row in rows:
            data.append([Paragraph(escape(str(cell)), self.styles["SmallText"]) for cell in row])

        style = [
            ("BACKGROUND", (0, 0), (-1, 0), PRIMARY_DARK),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("GRID", (0, 0), (-1, -1), 0.5, MED_GRAY),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, LIGHT_GRAY]),
            ("TOPPADDING", (0, 0), (-1, -1), 4),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ]
        if color_column is not None and palette:
            for i, row in enumerate(rows, start=1):
                tint = palette.get(str(row[color_column]).lower())
                if tint is not None:
                    style.append(("TEXTCOLOR", (color_column, i), (color_column, i), tint))
        tbl = Table(data, colWidths=[w * inch for w in col_widths], repeatRows=1)
        tbl.setStyle(TableStyle(style))
        return tbl

    def _bullets(self, items):
        return [Paragraph(escape(str(item)), self.styles["BulletItem"], bulletText="•") for item in items]

    # ── Header / Footer ──────────────────────────────────────
    @staticmethod
    def _header_footer(canvas, doc):
        canvas.saveState()
        canvas.setStrokeColor(PRIMARY)
        canvas.setLineWidth(2)
        canvas.line(40, letter[1] - 35, letter[0] - 40, letter[1] - 35)
        canvas.setFont("Helvetica", 7)
        canvas.setFillColor(colors.HexColor("#AAAAAA"))
        canvas.drawString(40, letter[1] - 30, "AI Visibility Report")
        canvas.drawRightString(letter[0] - 40, letter[1] - 30, "CONFIDENTIAL")

        canvas.drawString(40, 25, f"Generated {datetime.now().strftime('%B %d, %Y at %I:%M %p')}")
        canvas.drawRightString(letter[0] - 40, 25, f"Page {doc.page}")
        canvas.restoreState()

    def _section(self, story, title):
        story.append(Paragraph(title, self.styles["SectionHeader"]))
        story.append(HRFlowable(width="100%", thickness=1, color=PRIMARY, spaceAfter=8))

    # ── Main report builder ───────────────────────────────────
    def generate(self, report, output_path=None) -> str:
        """Render a completed report row to PDF. Returns the output file path."""
        if report.get("status") != "completed":
            raise ValueError(f"Report {report.get('id')} is not completed (status: {report.get('status')})")

        data = report.get("report_data") or {}
        gaps = report.get("content_gap_analysis") or {}
        competitor_analysis = report.get("competitor_analysis") or {}
        actions = report.get("recommendations") or []
        scores = report.get("ai_platform_scores") or {}
        business_name = data.get("business_name") or report.get("business_name") or report["target_website"]

        if output_path is None:
            os.makedirs(REPORT_OUTPUT_DIR, exist_ok=True)
            output_path = os.path.join(
                REPORT_OUTPUT_DIR,
                f"AI_Visibility_{safe_filename(business_name)}_{report['id']}.pdf",
            )

        doc = SimpleDocTemplate(
            output_path, pagesize=letter,
            topMargin=0.6 * inch, bottomMargin=0.5 * inch,
            leftMargin=0.6 * inch, rightMargin=0.6 * inch,
        )
        story = []

        # ─── COVER PAGE ──────────────────────────────────────
        story.append(Spacer(1, 1.5 * inch))
        story.append(Paragraph("AI Visibility Report", self.styles["ReportTitle"]))
        story.append(HRFlowable(width="60%", thickness=2, color=PRIMARY, spaceAfter=12, spaceBefore=6))
        story.append(Paragraph(escape(business_name), self.styles["ReportSubtitle"]))
        completed = (report.get("generation_completed_at") or "")[:10]
        story.append(Paragraph(f"Report Date: {completed}", self.styles["ReportSubtitle"]))
        story.append(Spacer(1, 0.4 * inch))

        cover_info = [
            ["Website", report["target_website"]],
            ["Business Type", data.get("business_type") or report.get("business_type") or ""],
            ["Location", data.get("location") or report.get("business_location") or ""],
            ["AI Platforms", ", ".join(PLATFORM_LABELS.get(p, p) for p in data.get("platforms_analyzed", []))],
            ["Queries Analyzed", str(report.get("query_count") or 0)],
        ]
        cover_tbl = Table(cover_info, colWidths=[2 * inch, 4 * inch])
        cover_tbl.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 10),
            ("TEXTCOLOR", (0, 0), (0, -1), PRIMARY_DARK),
            ("TEXTCOLOR", (1, 0), (1, -1), DARK_GRAY),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("TOPPADDING", (0, 0), (-1, -1), 6),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ("LINEBELOW", (0, 0), (-1, -2), 0.5, MED_GRAY),
        ]))
        story.append(cover_tbl)
        story.append(PageBreak())

        # ─── 1. SCORE SUMMARY ────────────────────────────────
        self._section(story, "1. Score Summary")
        story.append(self._kpi_cards(report))
        story.append(Spacer(1, 0.2 * inch))
        overall = report.get("overall_score") or 0
        story.append(Paragraph(
            f"{escape(business_name)} is mentioned in AI answers with an overall visibility score of "
            f"<b>{overall}/100</b>, the average share of successful answers on each platform that "
            f"name the business.",
            self.styles["ReportBody"],
        ))
        if data.get("platforms_failed"):
            failed = ", ".join(PLATFORM_LABELS.get(p, p) for p in data["platforms_failed"])
            story.append(Paragraph(
                f"<i>No answers were received from {escape(failed)}; these platforms are not scored.</i>",
                self.styles["SmallText"],
            ))

        # ─── 2. PLATFORM SCORES ──────────────────────────────
        self._section(story, "2. AI Platform Scores")
        if scores:
            story.append(self._chart_platform_scores(scores))
        details = data.get("platform_details") or {}
        knowledge = {p["platform"]: p for p in (gaps.get("ai_knowledge_scores") or {}).get("platforms", [])}
        rows = []
        for platform, score in scores.items():
            detail = details.get(platform, {})
            rows.append([
                PLATFORM_LABELS.get(platform, platform),
                score,
                f"{detail.get('mentions', 0)}/{detail.get('successful_queries', 0)}",
                detail.get("average_rank") or "N/A",
                knowledge.get(platform, {}).get("knowledge_level", ""),
                knowledge.get(platform, {}).get("recommendation", ""),
            ])
        story.append(self._grid_table(
            ["Platform", "Score", "Mentions", "Avg Line", "Level", "Recommendation"],
            rows, [1.0, 0.6, 0.8, 0.7, 0.8, 3.4],
        ))
        story.append(PageBreak())

        # ─── 3. COMPETITORS ──────────────────────────────────
        self._section(story, "3. Competitive Landscape")
        competitors = competitor_analysis.get("competitors", [])
        if competitors:
            business_mentions = sum(d.get("mentions", 0) for d in details.values())
            story.append(self._chart_competitor_mentions(business_name, business_mentions, competitors))
            story.append(self._grid_table(
                ["Rank", "Competitor", "Mentions", "Platforms", "Website"],
                [
                    [c.get("rank", ""), c["name"], c.get("detection_count", 0),
                     ", ".join(PLATFORM_LABELS.get(p, p) for p in c.get("platforms", [])),
                     c.get("website") or ""]
                    for c in competitors
                ],
                [0.5, 1.8, 0.8, 1.8, 2.4],
            ))
        else:
            story.append(Paragraph("No competitors were named in the AI answers.", self.styles["ReportBody"]))

        for top in competitor_analysis.get("top_competitors", []):
            story.append(Paragraph(escape(top["name"]), self.styles["SubHeader"]))
            story.append(Paragraph(f"<i>{escape(top.get('why_recommended') or '')}</i>", self.styles["ReportBody"]))
            story.append(Paragraph("<b>Strengths</b>", self.styles["ReportBody"]))
            story.extend(self._bullets(top.get("strengths", [])))
            story.append(Paragraph("<b>Weaknesses</b>", self.styles["ReportBody"]))
            story.extend(self._bullets(top.get("weaknesses", [])))

        story.append(Paragraph("Your Competitive Advantages", self.styles["SubHeader"]))
        story.extend(self._bullets(competitor_analysis.get("competitive_advantages", [])))
        story.append(Paragraph("Areas to Improve", self.styles["SubHeader"]))
        story.extend(self._bullets(competitor_analysis.get("competitive_weaknesses", [])))
        story.append(PageBreak())

        # ─── 4. CONTENT GAPS ─────────────────────────────────
        self._section(story, "4. Content Gaps")
        breakdown = gaps.get("severity_breakdown") or {}
        story.append(Paragraph(
            f"{gaps.get('total_gaps', 0)} gaps found: "
            f"{breakdown.get('critical', 0)} critical, {breakdown.get('significant', 0)} significant, "
            f"{breakdown.get('moderate', 0)} moderate.",
            self.styles["ReportBody"],
        ))
        all_gaps = (
            gaps.get("structural_gaps", []) + gaps.get("critical_topic_gaps", [])
            + gaps.get("significant_topic_gaps", []) + gaps.get("thematic_gaps", [])
        )
        story.append(self._grid_table(
            ["Gap", "Severity", "Description", "Recommended Action"],
            [[g["gap_title"], g["severity"], g["gap_description"], g["recommended_action"]] for g in all_gaps],
            [1.4, 0.8, 2.4, 2.7], color_column=1, palette=SEVERITY_COLORS,
        ))

        # ─── 5. ACTION PLAN ──────────────────────────────────
        self._section(story, "5. Priority Action Plan")
        if actions:
            story.append(self._grid_table(
                ["Action", "Priority", "Category", "How to Fix", "Impact"],
                [
                    [a["action_title"], a["priority"], a["category"], a["fix_instructions"], a["estimated_impact"]]
                    for a in actions
                ],
                [1.6, 0.8, 1.0, 3.0, 0.9], color_column=1, palette=PRIORITY_COLORS,
            ))
        else:
            story.append(Paragraph("No priority actions were generated.", self.styles["ReportBody"]))

        timeline = gaps.get("implementation_timeline") or {}
        story.append(Paragraph("Implementation Timeline", self.styles["SubHeader"]))
        for phase, label in (("immediate", "Immediate"), ("short_term", "Short Term"), ("long_term", "Long Term")):
            items = timeline.get(phase) or []
            if not items:
                continue
            story.append(Paragraph(f"<b>{label}</b> ({escape(items[0]['duration'])})", self.styles["ReportBody"]))
            story.extend(self._bullets(f"{i['title']} [{i['priority']}]" for i in items))

        # ─── 6. CITATIONS ────────────────────────────────────
        self._section(story, "6. Citation Opportunities")
        story.append(self._grid_table(
            ["Source", "Priority", "Status", "Description"],
            [
                [PLATFORM_LABELS.get(c["platform"], c["platform"]), c["priority"], c["status"], c["description"]]
                for c in gaps.get("citation_opportunities", [])
            ],
            [1.6, 0.8, 1.0, 3.9], color_column=1, palette=PRIORITY_COLORS,
        ))

        doc.build(story, onFirstPage=self._header_footer, onLaterPages=self._header_footer)
        return output_path


def generate_pdf(report, output_path=None) -> str:
    """Convenience function to render a report to PDF."""
    return VisibilityReportPDF().generate(report, output_path=output_path)
