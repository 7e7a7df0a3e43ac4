import math
import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception
from config.settings import (
    GOOGLE_AI_API_KEY, GEMINI_BASE_URL, GEMINI_MODEL, GEMINI_COST_PER_MTOK,
    MAX_TOKENS, TEMPERATURE, PLATFORM_TIMEOUTS,
)


def _is_transient(exc):
    if isinstance(exc, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return True
    if isinstance(exc, requests.exceptions.HTTPError) and exc.response is not None:
        return exc.response.status_code == 429 or exc.response.status_code >= 500
    return False


class GeminiClient:
    platform = "gemini"

    def __init__(self, api_key=None, model=None, timeout=None):
        self.api_key = api_key or GOOGLE_AI_API_KEY
        self.model = model or GEMINI_MODEL
        self.timeout = timeout or PLATFORM_TIMEOUTS["gemini"]
        self.headers = {"Content-Type": "application/json"}

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception(_is_transient),
        reraise=True,
    )
    def query(self, prompt: str, system: str = None, max_tokens: int = None) -> dict:
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "maxOutputTokens": max_tokens or MAX_TOKENS,
                "temperature": TEMPERATURE,
            },
        }
        if system:
            payload["systemInstruction"] = {"parts": [{"text": system}]}

        url = f"{GEMINI_BASE_URL}/{self.model}:generateContent"
        resp = requests.post(
            url, params={"key": self.api_key}, headers=self.headers,
            json=payload, timeout=self.timeout,
        )
        resp.raise_for_status()
        return self._parse(prompt, resp.json())

    def _parse(self, prompt: str, data: dict) -> dict:
        text = ""
        for candidate in data.get("candidates", [])[:1]:
            for part in candidate.get("content", {}).get("parts", []):
                text += part.get("text", "")

        # generateContent does not always report usage; estimate at ~4 chars per token
        usage = data.get("usageMetadata", {})
        tokens = usage.get("totalTokenCount") or math.ceil((len(prompt) + len(text)) / 4)

        return {
            "text": text,
            "model": data.get("modelVersion", self.model),
            "tokens": tokens,
            "cost": tokens / 1_000_000 * GEMINI_COST_PER_MTOK,
        }
