from analysis.parser import is_valid_response
from config.topics import TOPIC_KEYWORDS, CRITICAL_TOPICS

MAX_GAPS_PER_TYPE = 3


def extract_topics(text: str) -> list:
    lowered = text.lower()
    return [kw for kw in TOPIC_KEYWORDS if kw in lowered]


class ContentGapAnalyzer:
    """Compares competitor strengths with what AI answers say about the business."""

    def analyze(self, responses, business_name, competitor_analyses, business_profile=None) -> dict:
        valid = [r for r in responses if is_valid_response(r)]
        corpus = " ".join(valid).lower()
        names = [c["name"] for c in competitor_analyses]

        competitor_topics = []
        for comp in competitor_analyses:
            for strength in comp.get("strengths") or []:
                for topic in extract_topics(strength):
                    if topic not in competitor_topics:
                        competitor_topics.append(topic)

        critical, significant, topics_found = [], [], []
        for topic in competitor_topics:
            if topic in corpus:
                topics_found.append(topic)
                continue

            having = [
                c["name"] for c in competitor_analyses
                if any(topic in s.lower() for s in c.get("strengths") or [])
            ]
            if not having:
                continue

            is_critical = topic in CRITICAL_TOPICS
            gap = {
                "gap_type": "critical_topic" if is_critical else "significant_topic",
                "gap_title": f"{topic.capitalize()} Emphasis",
                "gap_description": (
                    f"Competitors emphasize their {topic}, but this isn't highlighted "
                    f"in AI responses about your business"
                ),
                "severity": "critical" if is_critical else "significant",
                "competitors_have_this": having[:2],
                "recommended_action": f"Add content highlighting your {topic} excellence",
                "content_type": "website_content",
            }
            (critical if is_critical else significant).append(gap)

        thematic = self._thematic_gaps(corpus, business_profile, names)
        structural = self._structural_gaps(names)

        critical = critical[:MAX_GAPS_PER_TYPE]
        significant = significant[:MAX_GAPS_PER_TYPE]
        all_gaps = structural + thematic + critical + significant

        return {
            "primary_brand": {
                "name": business_name,
                "website": (business_profile or {}).get("website", ""),
                "strengths": (
                    [f"Good {t} recognition" for t in topics_found]
                    if topics_found
                    else ["Has some AI visibility", "Mentioned in search results"]
                ),
                "weaknesses": (
                    ["Limited emphasis on key competitive factors", "Inconsistent information across platforms"]
                    if critical
                    else ["Could improve visibility on some platforms"]
                ),
                "ai_visibility_score": 0,
            },
            "top_competitors": [
                {
                    "name": c["name"],
                    "strengths": c.get("strengths") or [],
                    "mention_frequency": c.get("mention_count", 0),
                }
                for c in competitor_analyses
            ],
            "structural_gaps": structural,
            "thematic_gaps": thematic,
            "critical_topic_gaps": critical,
            "significant_topic_gaps": significant,
            "total_gaps": len(all_gaps),
            "severity_breakdown": {
                "critical": sum(1 for g in all_gaps if g["severity"] == "critical"),
                "significant": sum(1 for g in all_gaps if g["severity"] == "significant"),
                "moderate": sum(1 for g in all_gaps if g["severity"] == "moderate"),
            },
        }

    @staticmethod
    def _thematic_gaps(corpus, business_profile, competitor_names):
        services = (business_profile or {}).get("primary_services") or []
        gaps = []
        for service in services:
            if service.lower() in corpus:
                continue
            gaps.append({
                "gap_type": "thematic",
                "gap_title": f"{service} Coverage",
                "gap_description": (
                    f"Your website lists {service}, but AI responses never associate it with your business"
                ),
                "severity": "moderate",
                "competitors_have_this": competitor_names[:2],
                "recommended_action": f"Publish dedicated, citable content about your {service} offering",
                "content_type": "website_content",
            })
        return gaps[:MAX_GAPS_PER_TYPE]

    @staticmethod
    def _structural_gaps(competitor_names):
        return [
            {
                "gap_type": "structural",
                "gap_title": "Schema Markup Optimization",
                "gap_description": "Enhance structured data to improve AI platform understanding",
                "severity": "critical",
                "competitors_have_this": competitor_names[:2],
                "recommended_action": "Implement comprehensive LocalBusiness schema markup with services, reviews, and FAQs",
                "content_type": "technical_seo",
            },
            {
                "gap_type": "structural",
                "gap_title": "Citation Network Expansion",
                "gap_description": "Expand presence in directories and citation sources",
                "severity": "significant",
                "competitors_have_this": competitor_names[:2],
                "recommended_action": "Build citations on major directories (Yelp, Yellow Pages, industry-specific sites)",
                "content_type": "citations",
            },
        ]
