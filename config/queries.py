QUERY_TEMPLATES = [
    # === Discovery (2 queries) ===
    {
        "template": "List exactly 5 {business_type} businesses in {location} with just their business names, one per line. Format: 1. BusinessName",
        "category": "discovery",
    },
    {
        "template": "What are the top-rated {business_type} companies in {location}? List 5 names.",
        "category": "discovery",
    },

    # === Business specific (2 queries) ===
    {
        "template": "What services does {business_name} in {location} provide? Be specific about what they offer.",
        "category": "business",
    },
    {
        "template": "Describe {business_name}'s strengths and weaknesses as a {business_type} business.",
        "category": "business",
    },

    # === Comparison (2 queries) ===
    {
        "template": "Compare {business_name} to the best {business_type} businesses in {location}. What makes each unique?",
        "category": "comparison",
    },
    {
        "template": "What should someone know about {business_name} compared to other {business_type} options in {location}?",
        "category": "comparison",
    },
]


def build_queries(business_name, business_type, location):
    """Fill the query templates for one business. Returns a list of query dicts."""
    values = {
        "business_name": business_name,
        "business_type": business_type,
        "location": location,
    }
    return [
        {"query_text": t["template"].format(**values), "category": t["category"]}
        for t in QUERY_TEMPLATES
    ]
