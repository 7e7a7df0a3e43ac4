import logging
import secrets
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from urllib.parse import urlparse

from analysis.business import BusinessAnalyzer
from analysis.competitors import CompetitorAnalyzer, build_competitor_analysis
from analysis.gaps import ContentGapAnalyzer
from analysis.knowledge import KnowledgeProbe
from analysis.recommendations import RecommendationEngine
from analysis import scoring
from config.queries import build_queries
from config.settings import (
    FRONTEND_URL, TOP_COMPETITORS_ANALYZED, MAX_STORED_COMPETITOR_WEBSITES,
    ENABLE_KNOWLEDGE_PROBE, SCRAPINGBEE_COST_USD, STALE_REPORT_MINUTES,
)
from db.database import DatabaseManager
from platforms.runner import PlatformRunner
from web.google_search import CompetitorSearchClient, SearchError
from web.scrapingbee import WebsiteExtractor, ExtractionError

logger = logging.getLogger(__name__)


def validate_website(url) -> str:
    url = (url or "").strip()
    if not url:
        raise ValueError("target_website is required")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid website URL: {url!r} (must start with http:// or https://)")
    return url


def share_url_for(token) -> str:
    return f"{FRONTEND_URL.rstrip('/')}/Shared_Report?token={token}"


class ReportGenerator:
    def __init__(self, db=None, runner=None, extractor=None, search=None, knowledge_probe=None):
        self.db = db or DatabaseManager()
        self.runner = runner or PlatformRunner()
        self.extractor = extractor or WebsiteExtractor()
        self.search = search or CompetitorSearchClient()
        self.knowledge_probe = ENABLE_KNOWLEDGE_PROBE if knowledge_probe is None else knowledge_probe

    def create(self, request: dict) -> int:
        """Validate a report request and insert it as ``pending``."""
        website = validate_website(request.get("target_website"))
        token = secrets.token_hex(16)
        report_id = self.db.create_report(
            target_website=website,
            business_name=(request.get("business_name") or "").strip() or None,
            business_type=(request.get("business_type") or "").strip() or "business",
            business_location=(request.get("business_location") or "").strip(),
            competitor_websites=request.get("competitor_websites") or None,
            share_token=token,
            share_url=share_url_for(token),
            generated_by_name=request.get("generated_by_name"),
            generated_by_email=request.get("generated_by_email"),
        )
        logger.info(f"Created report {report_id} for {website}")
        return report_id

    def start(self, request: dict) -> int:
        """Create a report and generate it in a background thread. Returns at once."""
        self.db.fail_stale_reports(STALE_REPORT_MINUTES)
        report_id = self.create(request)
        worker = threading.Thread(target=self.generate, args=(report_id,), daemon=True)
        worker.start()
        return report_id

    def generate(self, report_id, progress_callback=None) -> dict:
        """Run the full pipeline for a report. Failures are recorded on the report."""
        report = self.db.get_report(report_id)
        if report is None:
            raise ValueError(f"Report {report_id} not found")

        self.db.mark_generating(report_id)
        logger.info(f"=== Report {report_id} generating: {report['target_website']} ===")
        start_time = time.time()

        try:
            result = self._run_pipeline(report_id, report, progress_callback)
        except Exception as e:
            duration = int((time.time() - start_time) * 1000)
            logger.error(f"Report {report_id} failed: {e}", exc_info=True)
            self.db.fail_report(report_id, str(e), processing_duration_ms=duration)
            return self.db.get_report(report_id)

        duration = int((time.time() - start_time) * 1000)
        self.db.complete_report(
            report_id,
            processing_duration_ms=duration,
            **result,
        )
        report = self.db.get_report(report_id)
        if report is None or report["status"] != "completed":
            logger.warning(f"Report {report_id} was failed or deleted before it finished, results discarded")
            return report
        logger.info(
            f"Report {report_id} completed in {duration / 1000:.1f}s, "
            f"{result['query_count']} queries, cost ${result['api_cost_usd']:.4f}"
        )
        return report

    def _progress(self, progress_callback, phase, message):
        logger.info(f"[PHASE {phase}] {message}")
        if progress_callback:
            progress_callback(phase, 8, message)

    def _profile_business(self, report):
        """Website extraction and AI business analysis, or None when unavailable."""
        if not self.extractor.configured:
            logger.info("ScrapingBee not configured, skipping website analysis")
            return None, 0.0
        try:
            website_data = self.extractor.extract(report["target_website"])
        except ExtractionError as e:
            logger.warning(f"Website extraction failed, continuing without it: {e}")
            return None, 0.0
        profile = BusinessAnalyzer(self.runner.analysis_client()).analyze(website_data)
        profile["website"] = report["target_website"]
        return profile, SCRAPINGBEE_COST_USD

    def _run_pipeline(self, report_id, report, progress_callback):
        total_cost = 0.0
        website = report["target_website"]

        profile, cost = self._profile_business(report)
        total_cost += cost

        business_name = report.get("business_name") or (profile or {}).get("business_name") \
            or urlparse(website).netloc.replace("www.", "")
        business_type = report.get("business_type")
        if (not business_type or business_type == "business") and profile:
            business_type = profile["business_type"]
        location = report.get("business_location") or (profile or {}).get("location_string") or "Unknown"
        self.db.update_business_info(
            report_id, business_name=business_name, business_type=business_type,
            business_location=location,
        )

        candidates = []
        if self.search.configured:
            business = profile or {"business_type": business_type, "location_string": location}
            try:
                candidates = self.search.find_competitors(business)
            except SearchError as e:
                logger.warning(f"Competitor search failed, continuing without it: {e}")

        # Phase 1
        self._progress(progress_callback, 1, "Querying AI platforms")
        queries = build_queries(business_name, business_type, location)
        platform_results = self.runner.run(
            queries,
            on_answer=lambda platform, answer: self.db.store_platform_response(report_id, platform, answer),
        )
        answers = [r for p in platform_results for r in p["results"]]
        query_count = len(answers)
        total_cost += sum(r.get("cost", 0.0) for r in answers)
        if all(r.get("error") for r in answers):
            raise RuntimeError("All AI platform queries failed")
        responses = [r["text"] for r in answers]

        # Phase 2
        self._progress(progress_callback, 2, "Discovering and analyzing competitors")
        analyzer = CompetitorAnalyzer(self.runner)
        competitors = analyzer.discover(platform_results, business_name, candidates)
        top = competitors[:TOP_COMPETITORS_ANALYZED]
        if top:
            with ThreadPoolExecutor(max_workers=len(top)) as executor:
                analyses = list(executor.map(
                    lambda c: analyzer.analyze_in_depth(c, business_type, location), top
                ))
        else:
            analyses = []
        total_cost += sum(a.get("cost", 0.0) for a in analyses)

        # Phase 3
        self._progress(progress_callback, 3, "Analyzing content gaps")
        gap_profile = dict(profile or {}, website=website)
        gaps = ContentGapAnalyzer().analyze(responses, business_name, analyses, gap_profile)

        # Phase 4
        self._progress(progress_callback, 4, "Analyzing citation opportunities")
        citations = scoring.citation_opportunities(platform_results, business_name)

        # Phase 5
        self._progress(progress_callback, 5, "Computing AI knowledge scores")
        scores = scoring.platform_scores(platform_results, business_name)
        knowledge = scoring.knowledge_scores(scores)
        if self.knowledge_probe:
            probe = KnowledgeProbe(self.runner).probe(business_name, business_type, location, website)
            total_cost += probe["cost"]
            knowledge["direct_probe"] = probe

        # Phase 6
        self._progress(progress_callback, 6, "Generating prioritized action plan")
        engine = RecommendationEngine()
        actions = engine.priority_actions(gaps, citations, knowledge)
        timeline = engine.implementation_timeline(actions)

        # Phase 7
        self._progress(progress_callback, 7, "Computing platform scores")
        overall = scoring.overall_score(scores)
        gaps["primary_brand"]["ai_visibility_score"] = overall

        # Phase 8
        self._progress(progress_callback, 8, "Assembling final report")
        business_mentions = sum(1 for text in responses if scoring.mentions_business(text, business_name))
        competitor_analysis = build_competitor_analysis(
            competitors, analyses, gaps["primary_brand"], knowledge, business_mentions
        )

        competitor_websites = list(report.get("competitor_websites") or [])
        for competitor in competitors:
            if competitor.get("website") and competitor["website"] not in competitor_websites:
                competitor_websites.append(competitor["website"])
        if competitor_websites:
            self.db.update_business_info(
                report_id, competitor_websites=competitor_websites[:MAX_STORED_COMPETITOR_WEBSITES]
            )

        report_data = {
            "business_name": business_name,
            "business_type": business_type,
            "location": location,
            "website": website,
            "generated_at": datetime.now().isoformat(),
            "overall_score": overall,
            "platform_scores": scores,
            "platform_details": scoring.platform_details(platform_results, business_name),
            "platforms_analyzed": [p["platform"] for p in platform_results],
            "platforms_failed": scoring.failed_platforms(platform_results),
            "query_count": query_count,
            "queries": queries,
            "business_profile": profile,
        }
        content_gap_analysis = dict(
            gaps,
            implementation_timeline=timeline,
            citation_opportunities=citations,
            ai_knowledge_scores=knowledge,
        )

        return {
            "report_data": report_data,
            "content_gap_analysis": content_gap_analysis,
            "ai_platform_scores": scores,
            "competitor_analysis": competitor_analysis,
            "recommendations": actions,
            "overall_score": overall,
            "api_cost_usd": round(total_cost, 4),
            "query_count": query_count,
        }
