"""
Test Suite for Query Templates
"""

from config.queries import build_queries, QUERY_TEMPLATES


def test_fills_every_template():
    queries = build_queries("Acme Plumbing", "plumbing service", "Austin, TX")

    assert len(queries) == len(QUERY_TEMPLATES) == 6
    assert queries[0]["query_text"].startswith("List exactly 5 plumbing service businesses in Austin, TX")
    assert all("{" not in q["query_text"] for q in queries)
    assert [q["category"] for q in queries] == [
        "discovery", "discovery", "business", "business", "comparison", "comparison",
    ]


def test_business_queries_name_the_business():
    queries = build_queries("Acme Plumbing", "plumbing service", "Austin, TX")
    named = [q for q in queries if q["category"] != "discovery"]
    assert all("Acme Plumbing" in q["query_text"] for q in named)
