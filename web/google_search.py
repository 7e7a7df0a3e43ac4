"""Competitor candidates from Google Custom Search."""

import logging
from urllib.parse import urlparse

import requests

from config.settings import (
    GOOGLE_CUSTOM_SEARCH_API_KEY, GOOGLE_CUSTOM_SEARCH_ENGINE_ID, GOOGLE_SEARCH_URL,
    GOOGLE_SEARCH_TIMEOUT, MAX_SEARCH_TERMS, MAX_COMPETITORS,
)
from config.topics import BLOCKED_DOMAINS, DIRECTORY_DOMAINS, IRRELEVANT_TERMS

logger = logging.getLogger(__name__)

TITLE_SEPARATORS = [" - ", " | ", " – ", " — "]


class SearchError(Exception):
    """Raised when a search request fails."""


class CompetitorSearchClient:
    def __init__(self, api_key=None, engine_id=None, timeout=GOOGLE_SEARCH_TIMEOUT):
        self.api_key = api_key or GOOGLE_CUSTOM_SEARCH_API_KEY
        self.engine_id = engine_id or GOOGLE_CUSTOM_SEARCH_ENGINE_ID
        self.timeout = timeout

    @property
    def configured(self):
        return bool(self.api_key and self.engine_id)

    def search(self, query: str) -> list:
        if not self.configured:
            raise SearchError("Google Custom Search API credentials not configured")
        try:
            resp = requests.get(
                GOOGLE_SEARCH_URL,
                params={
                    "key": self.api_key,
                    "cx": self.engine_id,
                    "q": query,
                    "num": 10,
                    "gl": "us",
                    "lr": "lang_en",
                },
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise SearchError(f"Google Search failed: {e}") from e

        if resp.status_code == 429:
            raise SearchError("Google Search API rate limit exceeded")
        if not resp.ok:
            raise SearchError(f"Google Search failed: HTTP {resp.status_code}")
        try:
            return resp.json().get("items") or []
        except (ValueError, AttributeError) as e:
            raise SearchError(f"Google Search returned an unexpected body: {e}") from e

    def find_competitors(self, business: dict) -> list:
        """Search with the business's competitor terms and keep plausible competitors."""
        terms = list(business.get("competitor_search_terms") or [])
        if not terms:
            business_type = business.get("business_type", "business")
            location = business.get("location_string", "")
            terms = [
                f"{business_type} in {location}",
                f"best {business_type} {location}",
                f"top {business_type} near {location}",
            ]

        competitors = {}
        for term in terms[:MAX_SEARCH_TERMS]:
            logger.info(f"Searching: {term!r}")
            try:
                results = self.search(term)
            except SearchError as e:
                logger.warning(f"Search failed for {term!r}: {e}")
                continue

            for result in results:
                if not is_valid_competitor(result, business):
                    continue
                website = result["link"]
                if website in competitors:
                    continue
                competitors[website] = {
                    "name": clean_business_name(result["title"]),
                    "website": website,
                    "description": result.get("snippet", ""),
                    "source_query": term,
                    "relevance_score": relevance_score(result, business),
                }

        ranked = sorted(competitors.values(), key=lambda c: c["relevance_score"], reverse=True)
        return ranked[:MAX_COMPETITORS]


def is_valid_competitor(result: dict, business: dict) -> bool:
    url = (result.get("link") or "").lower()
    if not url:
        return False
    title = (result.get("title") or "").lower()
    snippet = (result.get("snippet") or "").lower()

    if any(d in url for d in BLOCKED_DOMAINS):
        return False
    if any(d in url for d in DIRECTORY_DOMAINS):
        return False
    if any(term in title or term in snippet for term in IRRELEVANT_TERMS):
        return False
    if len(title) < 5 or len(title.split()) < 2:
        return False

    keywords = [k.lower() for k in business.get("industry_keywords") or []]
    business_type = business.get("business_type", "").lower()
    if keywords:
        relevant = any(k in title or k in snippet for k in keywords)
        if not relevant and not (business_type and business_type in snippet):
            return False
    return True


def clean_business_name(title: str) -> str:
    """Cut page-title suffixes ("Acme Plumbing | Home") down to the business name."""
    name = title
    for sep in TITLE_SEPARATORS:
        name = name.split(sep)[0]
    name = " ".join(name.rstrip(". ").split())
    return name if len(name) >= 3 else title


def relevance_score(result: dict, business: dict) -> int:
    score = 50
    title = result.get("title", "").lower()
    snippet = (result.get("snippet") or "").lower()
    url = result.get("link", "").lower()

    business_type = business.get("business_type", "").lower()
    if business_type and business_type in title:
        score += 20

    keywords = [k.lower() for k in business.get("industry_keywords") or []]
    score += 5 * sum(1 for k in keywords if k in title or k in snippet)

    location = business.get("location") or {}
    city = (location.get("city") or "").lower()
    state = (location.get("state") or "").lower()
    if city and (city in title or city in snippet):
        score += 15
    if state and (state in title or state in snippet):
        score += 10

    host = urlparse(url).netloc
    if host.count(".") == 2 and host.startswith("www."):
        score += 10

    services = [s.lower() for s in business.get("primary_services") or []]
    score += 3 * sum(1 for s in services if s in snippet)

    if len(title) > 100:
        score -= 15
    if "?" in url or "&" in url:
        score -= 10

    return max(0, min(100, score))
