"""Visibility scores computed from platform answers.

Only successful answers count: a call that failed or timed out has an
``error`` and no text, so it says nothing about the business's visibility.
"""

from config.settings import PLATFORM_LABELS

HIGH_KNOWLEDGE = 70
MODERATE_KNOWLEDGE = 40

KNOWLEDGE_RECOMMENDATIONS = {
    "High": "Maintain current strategy and monitor for changes",
    "Moderate": "Increase content optimization and citation building",
    "Low": "Critical: Implement comprehensive visibility improvement plan",
}


def successful(results):
    return [r for r in results if not r.get("error") and r.get("text")]


def mentions_business(text: str, business_name: str) -> bool:
    return bool(business_name) and business_name.lower() in (text or "").lower()


def platform_scores(platform_results, business_name) -> dict:
    """Mention rate (0-100) per platform that produced at least one answer."""
    scores = {}
    for entry in platform_results:
        ok = successful(entry["results"])
        if not ok:
            continue
        mentioned = sum(1 for r in ok if mentions_business(r["text"], business_name))
        scores[entry["platform"]] = round(mentioned / len(ok) * 100)
    return scores


def failed_platforms(platform_results) -> list:
    return [p["platform"] for p in platform_results if not successful(p["results"])]


def platform_details(platform_results, business_name) -> dict:
    """Mentions, line rank and prominence per platform.

    The rank of a mention is the 1-based line of the answer it appears on; a
    platform that never mentions the business is treated as rank 10.
    """
    details = {}
    business_lower = (business_name or "").lower()
    for entry in platform_results:
        ok = successful(entry["results"])
        if not ok:
            continue

        mentions = 0
        ranks = []
        for result in ok:
            if not mentions_business(result["text"], business_name):
                continue
            mentions += 1
            for idx, line in enumerate(result["text"].split("\n"), start=1):
                if business_lower in line.lower():
                    ranks.append(idx)

        mention_rate = mentions / len(ok) * 100
        avg_rank = sum(ranks) / len(ranks) if ranks else 10
        rank_score = max(0, 100 - (avg_rank - 1) * 10)
        prominence = round(mention_rate * 0.6 + rank_score * 0.4)

        details[entry["platform"]] = {
            "mentions": mentions,
            "successful_queries": len(ok),
            "failed_queries": len(entry["results"]) - len(ok),
            "mention_rate": round(mention_rate, 1),
            "average_rank": round(avg_rank, 1) if ranks else None,
            "prominence_score": min(100, max(0, prominence)),
        }
    return details


def knowledge_level(score) -> str:
    if score >= HIGH_KNOWLEDGE:
        return "High"
    if score >= MODERATE_KNOWLEDGE:
        return "Moderate"
    return "Low"


def knowledge_scores(scores: dict) -> dict:
    platforms = []
    for platform, score in scores.items():
        level = knowledge_level(score)
        platforms.append({
            "platform": platform,
            "score": score,
            "knowledge_level": level,
            "recommendation": KNOWLEDGE_RECOMMENDATIONS[level],
        })

    ranked = sorted(platforms, key=lambda p: p["score"], reverse=True)
    return {
        "platforms": platforms,
        "overall_knowledge": round(sum(p["score"] for p in platforms) / len(platforms)) if platforms else 0,
        "best_platform": ranked[0] if ranked else None,
        "needs_improvement": [p for p in ranked if p["knowledge_level"] == "Low"],
    }


def citation_opportunities(platform_results, business_name) -> list:
    opportunities = []
    for entry in platform_results:
        ok = successful(entry["results"])
        if not ok:
            continue
        label = PLATFORM_LABELS.get(entry["platform"], entry["platform"])
        count = sum(1 for r in ok if mentions_business(r["text"], business_name))
        if count == 0:
            opportunities.append({
                "platform": entry["platform"],
                "priority": "critical",
                "status": "required",
                "description": f"Your business is not mentioned at all on {label}. Priority action needed.",
            })
        elif count < 3:
            opportunities.append({
                "platform": entry["platform"],
                "priority": "high",
                "status": "recommended",
                "description": f"Increase presence on {label} - currently only {count} mentions.",
            })

    opportunities.append({
        "platform": "Google Business Profile",
        "priority": "critical",
        "status": "required",
        "description": "Ensure GBP listing is fully optimized with photos, posts, and reviews",
    })
    opportunities.append({
        "platform": "Local Directories",
        "priority": "high",
        "status": "recommended",
        "description": "Add business to Yelp, Yellow Pages, and industry-specific directories",
    })
    return opportunities


def overall_score(scores: dict) -> int:
    if not scores:
        raise ValueError("No platform scores to average")
    return round(sum(scores.values()) / len(scores))
