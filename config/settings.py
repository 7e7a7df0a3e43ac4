import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root
PROJECT_ROOT = Path(__file__).parent.parent
load_dotenv(PROJECT_ROOT / ".env")


def _get_secret(key):
    """Read from env vars first, fall back to Streamlit secrets (for Cloud deployment)."""
    val = os.getenv(key)
    if val:
        return val
    try:
        import streamlit as st
        return st.secrets[key]
    except Exception:
        return None


# API Keys
OPENAI_API_KEY = _get_secret("OPENAI_API_KEY")
ANTHROPIC_API_KEY = _get_secret("ANTHROPIC_API_KEY")
GOOGLE_AI_API_KEY = _get_secret("GOOGLE_AI_API_KEY")
PERPLEXITY_API_KEY = _get_secret("PERPLEXITY_API_KEY")
SCRAPINGBEE_API_KEY = _get_secret("SCRAPINGBEE_API_KEY")
GOOGLE_CUSTOM_SEARCH_API_KEY = _get_secret("GOOGLE_CUSTOM_SEARCH_API_KEY")
GOOGLE_CUSTOM_SEARCH_ENGINE_ID = _get_secret("GOOGLE_CUSTOM_SEARCH_ENGINE_ID")

# Shared answer settings
MAX_TOKENS = 500
TEMPERATURE = 0.7

# OpenAI (ChatGPT) Configuration
OPENAI_MODEL = "gpt-4o-mini"
OPENAI_DELAY_SECONDS = 0.5
OPENAI_COST_PER_MTOK = 0.30

# Claude Configuration
CLAUDE_MODEL = "claude-3-5-haiku-20241022"
CLAUDE_DELAY_SECONDS = 0.5
CLAUDE_INPUT_COST_PER_MTOK = 1.00
CLAUDE_OUTPUT_COST_PER_MTOK = 5.00

# Gemini Configuration
GEMINI_MODEL = "gemini-2.0-flash"
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
GEMINI_DELAY_SECONDS = 0.5
GEMINI_COST_PER_MTOK = 0.075

# Perplexity Configuration
PERPLEXITY_BASE_URL = "https://api.perplexity.ai"
PERPLEXITY_MODEL = "sonar"
PERPLEXITY_DELAY_SECONDS = 1.0
PERPLEXITY_COST_PER_MTOK = 1.00

# Timeouts (seconds)
PLATFORM_TIMEOUTS = {
    "chatgpt": 20,
    "claude": 20,
    "gemini": 20,
    "perplexity": 25,
}
COMPETITOR_ANALYSIS_TIMEOUT = 15
SCRAPINGBEE_TIMEOUT = 30
GOOGLE_SEARCH_TIMEOUT = 10

# Website extraction / search
SCRAPINGBEE_URL = "https://app.scrapingbee.com/api/v1/"
SCRAPINGBEE_COST_USD = 0.01
GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
MAX_SEARCH_TERMS = 3

# Pipeline
MAX_WORKERS = 8
MAX_COMPETITORS = 5
TOP_COMPETITORS_ANALYZED = 2
MAX_STORED_COMPETITOR_WEBSITES = 10
ENABLE_KNOWLEDGE_PROBE = (_get_secret("ENABLE_KNOWLEDGE_PROBE") or "").lower() in ("1", "true", "yes")
STALE_REPORT_MINUTES = 20

# Sharing
FRONTEND_URL = _get_secret("FRONTEND_URL") or "http://localhost:8501"

# Database
DB_PATH = str(PROJECT_ROOT / "data" / "ai_visibility.db")

# Reports
REPORT_OUTPUT_DIR = str(PROJECT_ROOT / "reports" / "output")

# Platforms in preference order for analysis calls
PLATFORMS = ["chatgpt", "claude", "gemini", "perplexity"]
ANALYSIS_PLATFORM_PREFERENCE = ["claude", "chatgpt", "gemini", "perplexity"]
PLATFORM_LABELS = {
    "chatgpt": "ChatGPT",
    "claude": "Claude",
    "gemini": "Gemini",
    "perplexity": "Perplexity",
}
