"""Direct knowledge probe: ask every platform what it knows about the business."""

import logging
from analysis.parser import extract_json
from config.topics import UNKNOWN_MARKERS

logger = logging.getLogger(__name__)

LEVEL_BASE_SCORES = {"high": 80, "medium": 60, "low": 30, "none": 0}

ASSESSMENT_INSTRUCTIONS = (
    "You are an AI knowledge assessment tool. Provide a JSON response with: "
    "mentioned (boolean), mention_count (number 0-10), knowledge_level (None/Low/Medium/High), "
    "facts_known (array of facts), confidence (0-100). "
    "Be honest - if you don't know the business, say so."
)


def build_probe_prompt(business_name, business_type=None, location=None, website=None) -> str:
    where = f" in {location}" if location else ""
    lines = [
        ASSESSMENT_INSTRUCTIONS,
        "",
        f'What do you know about "{business_name}"{where}?',
        "",
        "Business Details:",
        f"- Name: {business_name}",
        f"- Type: {business_type or 'Unknown'}",
        f"- Location: {location or 'Unknown'}",
    ]
    if website:
        lines.append(f"- Website: {website}")
    lines += [
        "",
        "If you don't know this specific business, be honest and return mentioned: false.",
    ]
    return "\n".join(lines)


def score_assessment(text: str) -> dict:
    """Score one platform's self-assessment.

    The score is the base for the stated knowledge level plus two points per
    self-reported mention (at most 20), capped at 100. Answers without usable
    JSON count as "Low" unless they say the platform does not know the business.
    """
    try:
        data = extract_json(text)
        if not isinstance(data, dict):
            raise ValueError("Assessment is not a JSON object")
        level = str(data.get("knowledge_level") or "None")
        count = int(data.get("mention_count") or 0)
    except (ValueError, TypeError) as e:
        logger.debug(f"Knowledge assessment not parseable: {e}")
        lowered = (text or "").lower()
        mentioned = bool(lowered) and not any(m in lowered for m in UNKNOWN_MARKERS)
        return {
            "mentioned": mentioned,
            "mention_count": 1 if mentioned else 0,
            "knowledge_level": "Low" if mentioned else "None",
            "facts_known": [],
            "confidence": 30,
            "score": 30 if mentioned else 0,
            "details": "Some information found" if mentioned else "No information found",
        }

    base = LEVEL_BASE_SCORES.get(level.lower(), 0)
    score = min(base + min(count * 2, 20), 100)
    return {
        "mentioned": bool(data.get("mentioned")),
        "mention_count": count,
        "knowledge_level": level,
        "facts_known": [str(f) for f in data.get("facts_known") or []],
        "confidence": data.get("confidence") or 0,
        "score": score,
        "details": f"{level} knowledge with {count} facts known",
    }


class KnowledgeProbe:
    def __init__(self, runner):
        self.runner = runner

    def probe(self, business_name, business_type=None, location=None, website=None) -> dict:
        """Returns ``{"platforms": {platform: assessment}, "average_score", "cost"}``."""
        prompt = build_probe_prompt(business_name, business_type, location, website)
        platform_results = self.runner.run([prompt])

        assessments = {}
        cost = 0.0
        for entry in platform_results:
            answer = entry["results"][0]
            cost += answer.get("cost", 0.0)
            if answer.get("error"):
                assessments[entry["platform"]] = {
                    "mentioned": False,
                    "mention_count": 0,
                    "knowledge_level": "None",
                    "facts_known": [],
                    "confidence": 0,
                    "score": 0,
                    "details": f"Error: {answer['error']}",
                    "error": answer["error"],
                }
                continue
            assessments[entry["platform"]] = score_assessment(answer["text"])
            logger.info(
                f"{entry['platform']}: {assessments[entry['platform']]['knowledge_level']} knowledge "
                f"({assessments[entry['platform']]['score']}/100)"
            )

        scored = [a["score"] for a in assessments.values() if not a.get("error")]
        return {
            "platforms": assessments,
            "average_score": round(sum(scored) / len(scored)) if scored else 0,
            "cost": cost,
        }
