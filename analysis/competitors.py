import logging
from analysis.parser import ResponseParser, extract_json, is_valid_response
from config.settings import (
    MAX_COMPETITORS, COMPETITOR_ANALYSIS_TIMEOUT, PLATFORM_LABELS,
)

logger = logging.getLogger(__name__)

DEFAULT_WEAKNESSES = [
    "May have limited availability during peak seasons",
    "Pricing information not always transparent online",
]
DEFAULT_ADVANTAGES = [
    "Local market presence",
    "Established reputation",
    "Customer loyalty potential",
]
DEFAULT_COMPETITIVE_WEAKNESSES = [
    "Limited online visibility",
    "Competitors have stronger AI presence",
    "Missing key content elements",
]


def mentions(text: str, name: str) -> bool:
    return bool(text) and bool(name) and name.lower() in text.lower()


def generic_analysis(competitor: dict, business_type: str, location: str) -> dict:
    return {
        "name": competitor["name"],
        "website": competitor.get("website"),
        "strengths": [
            f"Established {business_type} presence in {location}",
            "Local market knowledge and customer relationships",
            "Competitive service offerings",
        ],
        "weaknesses": [
            "Limited online visibility compared to market leaders",
            "Fewer customer reviews than top competitors",
        ],
        "mention_count": competitor.get("detection_count", 0),
        "why_recommended": f"Local {business_type} provider with established presence in {location}",
        "generic": True,
        "cost": 0.0,
    }


class CompetitorAnalyzer:
    def __init__(self, runner, parser=None):
        self.runner = runner
        self.parser = parser or ResponseParser(runner.analysis_client())

    def discover(self, platform_results, business_name, search_candidates=()) -> list:
        """Competitors named in the platform answers, merged with search candidates.

        Each competitor is counted against every answer: ``detection_count`` is the
        number of answers naming it and ``platforms`` the platforms that did.
        """
        answers = [
            (p["platform"], r.get("text", ""))
            for p in platform_results
            for r in p["results"]
        ]
        names = self.parser.extract_competitors([text for _, text in answers], business_name)

        found = {}
        for name in names:
            found[name.lower()] = {"name": name, "website": None, "source": "ai_answers"}

        for candidate in search_candidates:
            key = candidate["name"].lower()
            if mentions(candidate["name"], business_name):
                continue
            if key in found:
                found[key]["website"] = found[key]["website"] or candidate.get("website")
            else:
                found[key] = {
                    "name": candidate["name"],
                    "website": candidate.get("website"),
                    "source": "search",
                }

        platform_order = [p["platform"] for p in platform_results]
        for competitor in found.values():
            hits = [platform for platform, text in answers if mentions(text, competitor["name"])]
            competitor["detection_count"] = len(hits)
            competitor["platforms"] = [p for p in platform_order if p in hits]

        ranked = sorted(found.values(), key=lambda c: c["detection_count"], reverse=True)[:MAX_COMPETITORS]
        for rank, competitor in enumerate(ranked, start=1):
            competitor["rank"] = rank

        logger.info(f"Found {len(ranked)} competitors: {', '.join(c['name'] for c in ranked)}")
        return ranked

    def analyze_in_depth(self, competitor: dict, business_type: str, location: str) -> dict:
        name = competitor["name"]
        prompt = f"""Provide a brief analysis of {name} as a {business_type} business in {location}.

Return ONLY a JSON object with this exact structure:
{{
  "strengths": ["strength 1", "strength 2", "strength 3"],
  "weaknesses": ["weakness 1", "weakness 2"],
  "why_recommended": "One reason customers choose them"
}}

Keep responses concise and factual. If you don't have specific information, provide general analysis based on typical {business_type} business characteristics."""

        result = self.runner.ask(prompt, timeout=COMPETITOR_ANALYSIS_TIMEOUT)
        text = result.get("text", "")

        if not is_valid_response(text):
            logger.info(f"Using generic analysis for {name}")
            analysis = generic_analysis(competitor, business_type, location)
            analysis["cost"] = result.get("cost", 0.0)
            return analysis

        try:
            parsed = extract_json(text)
            strengths = [str(s) for s in parsed.get("strengths") or []][:3]
            weaknesses = [str(w) for w in parsed.get("weaknesses") or []][:2]
            why = str(parsed.get("why_recommended") or "").strip()
        except (ValueError, AttributeError) as e:
            logger.warning(f"Competitor analysis for {name} was not parseable: {e}")
            analysis = generic_analysis(competitor, business_type, location)
            analysis["cost"] = result.get("cost", 0.0)
            return analysis

        return {
            "name": name,
            "website": competitor.get("website"),
            "strengths": strengths or generic_analysis(competitor, business_type, location)["strengths"],
            "weaknesses": weaknesses or list(DEFAULT_WEAKNESSES),
            "mention_count": competitor.get("detection_count", 0),
            "why_recommended": why or "Trusted local provider with consistent service quality",
            "generic": False,
            "cost": result.get("cost", 0.0),
        }


def build_competitor_analysis(competitors, analyses, primary_brand, knowledge_scores, business_mentions):
    """The ``competitor_analysis`` section of a report."""
    by_name = {a["name"]: a for a in analyses}

    top_competitors = []
    for analysis in analyses:
        competitor = next((c for c in competitors if c["name"] == analysis["name"]), {})
        top_competitors.append({
            "name": analysis["name"],
            "website": analysis.get("website"),
            "detection_count": competitor.get("detection_count", 0),
            "platforms": competitor.get("platforms", []),
            "strengths": analysis["strengths"],
            "weaknesses": analysis["weaknesses"],
            "mention_frequency": analysis["mention_count"],
            "why_recommended": analysis["why_recommended"],
        })

    advantages = [s for s in primary_brand.get("strengths", []) if s.startswith("Good ")]
    for platform in knowledge_scores.get("platforms", []):
        if platform["knowledge_level"] == "High":
            advantages.append(f"Strong visibility on {PLATFORM_LABELS.get(platform['platform'], platform['platform'])}")

    weaknesses = [
        f"Limited visibility on {PLATFORM_LABELS.get(p['platform'], p['platform'])}"
        for p in knowledge_scores.get("needs_improvement", [])
    ]
    for competitor in competitors:
        if competitor["detection_count"] > business_mentions:
            weaknesses.append(f"{competitor['name']} is mentioned more often in AI answers")

    return {
        "competitors": [
            {
                "name": c["name"],
                "website": c.get("website"),
                "detection_count": c["detection_count"],
                "platforms": c["platforms"],
                "rank": c["rank"],
                "source": c.get("source"),
                "analysis": by_name.get(c["name"]),
            }
            for c in competitors
        ],
        "total_competitors": len(competitors),
        "top_competitors": top_competitors,
        "competitive_advantages": advantages or list(DEFAULT_ADVANTAGES),
        "competitive_weaknesses": weaknesses or list(DEFAULT_COMPETITIVE_WEAKNESSES),
    }
