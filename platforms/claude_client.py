import anthropic
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
from config.settings import (
    ANTHROPIC_API_KEY, CLAUDE_MODEL, MAX_TOKENS, TEMPERATURE, PLATFORM_TIMEOUTS,
    CLAUDE_INPUT_COST_PER_MTOK, CLAUDE_OUTPUT_COST_PER_MTOK,
)


class ClaudeClient:
    platform = "claude"

    def __init__(self, api_key=None, model=None, timeout=None):
        self.client = anthropic.Anthropic(
            api_key=api_key or ANTHROPIC_API_KEY,
            timeout=timeout or PLATFORM_TIMEOUTS["claude"],
            max_retries=0,
        )
        self.model = model or CLAUDE_MODEL

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((anthropic.APIConnectionError, anthropic.RateLimitError, anthropic.InternalServerError)),
        reraise=True,
    )
    def query(self, prompt: str, system: str = None, max_tokens: int = None) -> dict:
        kwargs = {
            "model": self.model,
            "max_tokens": max_tokens or MAX_TOKENS,
            "temperature": TEMPERATURE,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        response = self.client.messages.create(**kwargs)

        text = response.content[0].text if response.content else ""
        input_tokens = response.usage.input_tokens or 0
        output_tokens = response.usage.output_tokens or 0
        cost = (
            input_tokens / 1_000_000 * CLAUDE_INPUT_COST_PER_MTOK
            + output_tokens / 1_000_000 * CLAUDE_OUTPUT_COST_PER_MTOK
        )

        return {
            "text": text,
            "model": response.model,
            "tokens": input_tokens + output_tokens,
            "cost": cost,
        }
