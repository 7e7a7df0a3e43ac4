"""Business profile detection from extracted website content."""

import datetime
import json
import logging

from analysis.parser import extract_json
from config.topics import BUSINESS_TYPE_KEYWORDS

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "United States"

SYSTEM_PROMPT = """You are a business analysis expert. Analyze website data and extract accurate business information.

Your task is to intelligently identify:
1. The EXACT business name (not domain, not generic terms)
2. The SPECIFIC business type/industry (e.g. "residential junk removal service", not "service company")
3. Primary services or products offered
4. Geographic location (city, state, country)
5. Target customer demographics
6. Unique value proposition
7. Strategic search terms for finding similar competitors

Return ONLY valid JSON, no markdown formatting."""

RESPONSE_SHAPE = """{
  "business_name": "Exact business name from branding",
  "business_type": "Specific industry/category",
  "business_description": "One-sentence description of what they do",
  "primary_services": ["service1", "service2", "service3"],
  "location": {"city": "City or null", "state": "State or null", "country": "Country"},
  "target_market": "Primary customer demographic",
  "unique_value_proposition": "What makes them different",
  "competitor_search_terms": ["search query 1", "search query 2", "search query 3"],
  "industry_keywords": ["keyword1", "keyword2", "keyword3"],
  "service_area": "Geographic area they serve"
}"""


def format_location(location) -> str:
    if not location:
        return DEFAULT_LOCATION
    parts = [str(p) for p in (location.get("city"), location.get("state")) if p]
    if not parts and location.get("country"):
        parts.append(str(location["country"]))
    return ", ".join(parts) if parts else DEFAULT_LOCATION


def fallback_search_terms(business_type, location):
    return [
        f"{business_type} in {location}",
        f"best {business_type} {location}",
        f"top {business_type} near {location}",
    ]


class BusinessAnalyzer:
    def __init__(self, client):
        self.client = client

    def analyze(self, website_data: dict) -> dict:
        logger.info("Starting AI business analysis...")
        if self.client is None:
            return self.fallback(website_data)

        try:
            response = self.client.query(
                build_analysis_context(website_data),
                system=SYSTEM_PROMPT,
                max_tokens=1500,
            )
            analysis = extract_json(response["text"])
            if not isinstance(analysis, dict):
                raise ValueError("Business analysis is not a JSON object")
            profile = self.validate(analysis, website_data)
        except Exception as e:
            logger.warning(f"AI business analysis failed, falling back to basic extraction: {e}")
            return self.fallback(website_data)

        logger.info(
            f"Business analysis complete: {profile['business_name']} "
            f"({profile['business_type']}) in {profile['location_string']}"
        )
        return profile

    @staticmethod
    def validate(analysis: dict, website_data: dict) -> dict:
        location = analysis.get("location") if isinstance(analysis.get("location"), dict) else {}
        profile = {
            "business_name": analysis.get("business_name") or website_data.get("title") or website_data.get("domain"),
            "business_type": analysis.get("business_type") or "business",
            "business_description": analysis.get("business_description") or "",
            "primary_services": _as_list(analysis.get("primary_services")),
            "location": location,
            "location_string": format_location(location),
            "target_market": analysis.get("target_market") or "general consumers",
            "unique_value_proposition": analysis.get("unique_value_proposition") or "",
            "competitor_search_terms": _as_list(analysis.get("competitor_search_terms")),
            "industry_keywords": _as_list(analysis.get("industry_keywords")),
            "service_area": analysis.get("service_area") or "",
            "confidence_score": confidence_score(analysis, website_data),
            "analysis_timestamp": datetime.datetime.now().isoformat(),
            "fallback_used": False,
        }
        if not profile["competitor_search_terms"]:
            profile["competitor_search_terms"] = fallback_search_terms(
                profile["business_type"], profile["location_string"]
            )
        return profile

    @staticmethod
    def fallback(website_data: dict) -> dict:
        logger.info("Using fallback business analysis")
        og = website_data.get("og_data") or {}
        business_name = og.get("title") or website_data.get("title") or website_data.get("domain")

        business_type = "business"
        description = (website_data.get("meta_description") or website_data.get("title") or "").lower()
        for candidate, keywords in BUSINESS_TYPE_KEYWORDS.items():
            if any(k in description for k in keywords):
                business_type = candidate
                break

        return {
            "business_name": business_name,
            "business_type": business_type,
            "business_description": website_data.get("meta_description") or "",
            "primary_services": list(website_data.get("services") or []),
            "location": {},
            "location_string": DEFAULT_LOCATION,
            "target_market": "general consumers",
            "unique_value_proposition": "",
            "competitor_search_terms": [
                f"{business_type} near me",
                f"best {business_type}",
                f"top {business_type} services",
            ],
            "industry_keywords": [business_type],
            "service_area": "",
            "confidence_score": 30,
            "analysis_timestamp": datetime.datetime.now().isoformat(),
            "fallback_used": True,
        }


def _as_list(value):
    return [str(v) for v in value] if isinstance(value, list) else []


def confidence_score(analysis: dict, website_data: dict) -> int:
    score = 0
    location = analysis.get("location") or {}
    if analysis.get("business_name") and analysis["business_name"] != website_data.get("domain"):
        score += 20
    if analysis.get("business_type") and len(analysis["business_type"]) > 5:
        score += 20
    if isinstance(location, dict) and (location.get("city") or location.get("state")):
        score += 15
    if len(analysis.get("primary_services") or []) >= 3:
        score += 15
    if len(analysis.get("competitor_search_terms") or []) >= 3:
        score += 15
    if website_data.get("schema_data"):
        score += 15
    return min(100, score)


def build_analysis_context(website_data: dict) -> str:
    lines = [
        "Analyze this business website and return a JSON object with the following structure:",
        "",
        RESPONSE_SHAPE,
        "",
        "WEBSITE DATA:",
        f"URL: {website_data.get('url', '')}",
        f"Domain: {website_data.get('domain', '')}",
        f"Page Title: {website_data.get('title', '')}",
    ]
    if website_data.get("meta_description"):
        lines.append(f"Meta Description: {website_data['meta_description']}")
    if website_data.get("schema_data"):
        lines.append(f"\nSchema.org Data:\n{json.dumps(website_data['schema_data'], indent=2)[:1000]}")
    if website_data.get("og_data"):
        lines.append(f"\nOpen Graph Data:\n{json.dumps(website_data['og_data'], indent=2)}")
    if website_data.get("headings"):
        headings = "\n".join(f"{h['level']}: {h['text']}" for h in website_data["headings"][:10])
        lines.append(f"\nMain Headings:\n{headings}")
    if website_data.get("services"):
        lines.append("\nServices/Products Listed:\n" + "\n".join(website_data["services"]))

    contact = website_data.get("contact_info") or {}
    if contact.get("emails"):
        lines.append(f"\nEmail: {contact['emails'][0]}")
    if contact.get("phones"):
        lines.append(f"Phone: {contact['phones'][0]}")
    if contact.get("addresses"):
        lines.append(f"Address: {contact['addresses'][0]}")

    if website_data.get("about_content"):
        lines.append(f"\nAbout Section:\n{website_data['about_content'][:500]}")
    lines.append(f"\nMain Content (first 2000 chars):\n{(website_data.get('text_content') or '')[:2000]}")
    return "\n".join(lines)
