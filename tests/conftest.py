"""
Pytest Configuration and Shared Fixtures

Fake platform clients and a throwaway database; no test touches the network.
"""

import pytest

from db.database import DatabaseManager
from platforms.runner import PlatformRunner


# ============================================================================
# Fake clients
# ============================================================================

class FakeClient:
    """Stands in for a provider client. ``responder(prompt)`` returns text or raises."""

    def __init__(self, platform, responder, cost=0.001, tokens=100):
        self.platform = platform
        self.responder = responder
        self.cost = cost
        self.tokens = tokens
        self.prompts = []

    def query(self, prompt, system=None, max_tokens=None):
        self.prompts.append(prompt)
        text = self.responder(prompt) if callable(self.responder) else self.responder
        return {"text": text, "model": f"{self.platform}-fake", "tokens": self.tokens, "cost": self.cost}


class DisabledExtractor:
    configured = False


class DisabledSearch:
    configured = False


def make_runner(clients):
    return PlatformRunner(clients=clients, max_workers=4, delays={})


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def db(tmp_path):
    return DatabaseManager(str(tmp_path / "reports.db"))


@pytest.fixture
def long_answer():
    """An answer long enough to count as valid."""
    def build(body):
        return body + " This answer includes enough additional detail to be considered a real response."
    return build


@pytest.fixture
def platform_results():
    """Two platforms, three answers each; one ChatGPT call failed."""
    return [
        {
            "platform": "chatgpt",
            "results": [
                {"text": "1. Acme Plumbing\n2. Rapid Rooter\n3. Best Pipes", "cost": 0.001, "tokens": 50},
                {"text": "Rapid Rooter is well reviewed.\nAcme Plumbing is also popular.", "cost": 0.001, "tokens": 50},
                {"text": "", "cost": 0.0, "tokens": 0, "error": "timeout"},
            ],
        },
        {
            "platform": "claude",
            "results": [
                {"text": "Rapid Rooter and Best Pipes are common choices.", "cost": 0.002, "tokens": 60},
                {"text": "I don't have details on local plumbers.", "cost": 0.002, "tokens": 60},
                {"text": "Top picks: Best Pipes.", "cost": 0.002, "tokens": 60},
            ],
        },
    ]
