import openai
from openai import OpenAI
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
from config.settings import (
    OPENAI_API_KEY, OPENAI_MODEL, OPENAI_COST_PER_MTOK, MAX_TOKENS, TEMPERATURE,
    PLATFORM_TIMEOUTS, PERPLEXITY_API_KEY, PERPLEXITY_BASE_URL, PERPLEXITY_MODEL,
    PERPLEXITY_COST_PER_MTOK,
)

TRANSIENT_ERRORS = (openai.APIConnectionError, openai.RateLimitError, openai.InternalServerError)


class ChatGPTClient:
    """Client for OpenAI ChatGPT via chat completions."""

    platform = "chatgpt"
    cost_per_mtok = OPENAI_COST_PER_MTOK

    def __init__(self, api_key=None, model=None, timeout=None):
        self.client = OpenAI(
            api_key=api_key or OPENAI_API_KEY,
            timeout=timeout or PLATFORM_TIMEOUTS["chatgpt"],
            max_retries=0,
        )
        self.model = model or OPENAI_MODEL

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        reraise=True,
    )
    def query(self, prompt: str, system: str = None, max_tokens: int = None) -> dict:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = self.client.chat.completions.create(
            model=self.model,
            max_tokens=max_tokens or MAX_TOKENS,
            temperature=TEMPERATURE,
            messages=messages,
        )

        text = response.choices[0].message.content if response.choices else ""
        tokens = response.usage.total_tokens if response.usage else 0

        return {
            "text": text or "",
            "model": response.model,
            "tokens": tokens,
            "cost": tokens / 1_000_000 * self.cost_per_mtok,
        }


class PerplexityClient(ChatGPTClient):
    """Perplexity speaks the OpenAI chat completions protocol on its own base URL."""

    platform = "perplexity"
    cost_per_mtok = PERPLEXITY_COST_PER_MTOK

    def __init__(self, api_key=None, model=None, timeout=None):
        self.client = OpenAI(
            api_key=api_key or PERPLEXITY_API_KEY,
            base_url=PERPLEXITY_BASE_URL,
            timeout=timeout or PLATFORM_TIMEOUTS["perplexity"],
            max_retries=0,
        )
        self.model = model or PERPLEXITY_MODEL
