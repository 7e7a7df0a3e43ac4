import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed, TimeoutError as FutureTimeoutError
from config.settings import (
    OPENAI_API_KEY, ANTHROPIC_API_KEY, GOOGLE_AI_API_KEY, PERPLEXITY_API_KEY,
    OPENAI_DELAY_SECONDS, CLAUDE_DELAY_SECONDS, GEMINI_DELAY_SECONDS, PERPLEXITY_DELAY_SECONDS,
    PLATFORMS, ANALYSIS_PLATFORM_PREFERENCE, PLATFORM_LABELS, MAX_WORKERS,
)

logger = logging.getLogger(__name__)

# Per-platform rate limiting (seconds between requests per platform)
PLATFORM_DELAYS = {
    "chatgpt": OPENAI_DELAY_SECONDS,
    "claude": CLAUDE_DELAY_SECONDS,
    "gemini": GEMINI_DELAY_SECONDS,
    "perplexity": PERPLEXITY_DELAY_SECONDS,
}


def empty_answer(error=None) -> dict:
    """The answer recorded for a failed or timed-out call."""
    answer = {"text": "", "model": None, "tokens": 0, "cost": 0.0}
    if error:
        answer["error"] = error
    return answer


def build_clients() -> dict:
    """Instantiate a client for every platform with a configured API key."""
    from platforms.claude_client import ClaudeClient
    from platforms.gemini_client import GeminiClient
    from platforms.openai_client import ChatGPTClient, PerplexityClient

    keyed = {
        "chatgpt": (OPENAI_API_KEY, ChatGPTClient),
        "claude": (ANTHROPIC_API_KEY, ClaudeClient),
        "gemini": (GOOGLE_AI_API_KEY, GeminiClient),
        "perplexity": (PERPLEXITY_API_KEY, PerplexityClient),
    }
    clients = {}
    for platform in PLATFORMS:
        api_key, cls = keyed[platform]
        if api_key:
            clients[platform] = cls(api_key=api_key)
    return clients


class _RateLimiter:
    """Thread-safe per-platform rate limiter."""
    def __init__(self, delays):
        self._delays = delays
        self._locks = {p: threading.Lock() for p in delays}
        self._last_call = {p: 0.0 for p in delays}

    def wait(self, platform):
        if platform not in self._locks:
            return
        with self._locks[platform]:
            delay = self._delays[platform]
            elapsed = time.time() - self._last_call[platform]
            if elapsed < delay:
                time.sleep(delay - elapsed)
            self._last_call[platform] = time.time()


class PlatformRunner:
    def __init__(self, clients=None, max_workers=MAX_WORKERS, delays=None):
        self.clients = clients if clients is not None else build_clients()
        self.max_workers = max_workers
        self._rate_limiter = _RateLimiter(delays if delays is not None else PLATFORM_DELAYS)

    @property
    def platforms(self):
        return list(self.clients)

    def _run_single(self, platform, prompt, system=None, max_tokens=None):
        """Execute a single (prompt, platform) pair. Thread-safe, never raises."""
        label = PLATFORM_LABELS.get(platform, platform)
        try:
            self._rate_limiter.wait(platform)
            result = self.clients[platform].query(prompt, system=system, max_tokens=max_tokens)
            return {
                "text": result.get("text") or "",
                "model": result.get("model"),
                "tokens": result.get("tokens", 0),
                "cost": result.get("cost", 0.0),
            }
        except Exception as e:
            logger.warning(f"{label} failed: {e}")
            return empty_answer(str(e))

    def run(self, queries, progress_callback=None, on_answer=None) -> list:
        """Run every query on every configured platform concurrently.

        Returns one entry per platform, ``{"platform": name, "results": [...]}``,
        with answers in query order. A failed call contributes an empty answer
        carrying an ``error`` string instead of failing the batch.
        """
        if not self.clients:
            raise ValueError("No AI platform API keys configured")

        query_texts = [q["query_text"] if isinstance(q, dict) else q for q in queries]
        answers = {platform: [None] * len(query_texts) for platform in self.clients}
        total_steps = len(query_texts) * len(self.clients)
        done_count = 0

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self._run_single, platform, text): (platform, idx)
                for platform in self.clients
                for idx, text in enumerate(query_texts)
            }

            for future in as_completed(futures):
                platform, idx = futures[future]
                answer = future.result()
                answer["query"] = query_texts[idx]
                answers[platform][idx] = answer
                done_count += 1

                if on_answer:
                    on_answer(platform, answer)
                if progress_callback:
                    status = "error" if answer.get("error") else "ok"
                    progress_callback(
                        done_count, total_steps,
                        f"[{done_count}/{total_steps}] {PLATFORM_LABELS.get(platform, platform)}: {status}"
                    )

        platform_results = []
        for platform in self.clients:
            results = answers[platform]
            cost = sum(r["cost"] for r in results)
            failed = sum(1 for r in results if r.get("error"))
            logger.info(f"[{platform.upper()}] Completed {len(results)} queries ({failed} failed), cost: ${cost:.4f}")
            platform_results.append({"platform": platform, "results": results})
        return platform_results

    def analysis_platform(self):
        for platform in ANALYSIS_PLATFORM_PREFERENCE:
            if platform in self.clients:
                return platform
        return None

    def analysis_client(self):
        platform = self.analysis_platform()
        return self.clients[platform] if platform else None

    def ask(self, prompt, system=None, max_tokens=None, timeout=None) -> dict:
        """Single call on the preferred analysis platform, abandoned after ``timeout`` seconds."""
        platform = self.analysis_platform()
        if platform is None:
            return empty_answer("No analysis platform configured")

        if timeout is None:
            return self._run_single(platform, prompt, system=system, max_tokens=max_tokens)

        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(self._run_single, platform, prompt, system, max_tokens)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            message = f"{PLATFORM_LABELS.get(platform, platform)} timeout after {timeout}s"
            logger.warning(message)
            return empty_answer(message)
        finally:
            executor.shutdown(wait=False)
