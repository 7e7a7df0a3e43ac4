import json
import logging
from config.topics import REFUSAL_MARKERS

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 60
MAX_PROMPT_CHARS = 12000


def extract_json(text: str):
    """Parse the JSON object an LLM returned, with or without markdown fences."""
    if not text:
        raise ValueError("Empty response")

    text = text.strip()
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0]
    elif "```" in text:
        text = text.split("```")[1].split("```")[0]

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("No JSON object found in response")
    try:
        return json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in response: {e}") from e


def is_valid_response(text: str) -> bool:
    """A usable answer: not empty, not trivially short, not a refusal."""
    if not text or len(text) <= 50:
        return False
    lowered = text.lower()
    return not any(marker in lowered for marker in REFUSAL_MARKERS)


class ResponseParser:
    """Extracts structured data from free-text platform answers with an LLM."""

    def __init__(self, client):
        self.client = client

    def extract_competitors(self, responses, business_name: str) -> list:
        valid = [r for r in responses if is_valid_response(r)]
        if self.client is None or not valid:
            return []

        system_prompt = """Extract the names of businesses recommended or discussed in AI assistant answers.

Return ONLY a JSON object (no markdown, no explanation) with this exact structure:
{
  "competitors": [
    {"name": "Exact Business Name"}
  ]
}

RULES:
- Only real, specific businesses (not categories, not directories, not generic phrases)
- Use the business name exactly as written, without list numbers or formatting
- Order by how prominently the answers recommend them
- Exclude the business named as TARGET"""

        joined = "\n\n---\n\n".join(valid)[:MAX_PROMPT_CHARS]
        prompt = f"TARGET: {business_name}\n\nANSWERS:\n{joined}"

        try:
            response = self.client.query(prompt, system=system_prompt, max_tokens=1024)
            parsed = extract_json(response["text"])
            return self._normalize_names(parsed, business_name)
        except Exception as e:
            logger.warning(f"Competitor extraction failed: {e}")
            return []

    @staticmethod
    def _normalize_names(parsed: dict, business_name: str) -> list:
        raw = parsed.get("competitors") or parsed.get("businesses") or []
        business_lower = business_name.lower().strip()
        names = []
        seen = set()
        for item in raw:
            name = item.get("name", "") if isinstance(item, dict) else str(item)
            name = " ".join(name.replace("**", "").split())
            key = name.lower()
            if not (MIN_NAME_LENGTH <= len(name) <= MAX_NAME_LENGTH):
                continue
            if key in seen or key == business_lower:
                continue
            if business_lower and business_lower in key:
                continue
            seen.add(key)
            names.append(name)
        return names
