import streamlit as st

st.set_page_config(page_title="About & Glossary", layout="wide")
st.header("About This Application")

st.markdown("""
## What This App Does

The **AI Visibility Report Generator** measures how a local business appears when people ask AI
assistants for recommendations. For one business website it answers:

- **Do AI assistants know this business?** How often is it named when people ask for the category in its area?
- **Who do they recommend instead?** Which competitors keep appearing, and why?
- **What is missing?** Which topics competitors are known for that the business is not?
- **What should be fixed first?** A prioritized action plan with an implementation timeline.

## How It Works

### 1. Business Profile (optional)
When a ScrapingBee key is configured, the website is fetched and parsed (title, schema.org data,
headings, services, contact details) and an LLM turns it into a business profile: name, category,
location, services and competitor search terms. Missing request fields are filled from it.
With a Google Custom Search key, competitor candidates are also found through web search.

### 2. Platform Queries
Six questions (two discovery, two about the business, two comparisons) are sent to every configured
platform: **ChatGPT**, **Claude**, **Gemini** and **Perplexity**. A failed or timed-out answer is recorded
and skipped; it never stops the report.

### 3. Analysis
- **Competitor discovery**: an LLM extracts the businesses named in the answers; each is counted across answers.
- **Competitor analysis**: the top two competitors get an in-depth strengths / weaknesses analysis.
- **Content gaps**: competitor strengths that AI answers never associate with the business.
- **Citation opportunities**: platforms where the business is rarely or never mentioned.
- **Action plan**: gaps and opportunities turned into prioritized actions with a timeline.

### 4. Sharing and Export
Every report gets a share link (viewable without the app password while sharing is enabled)
and can be exported to PDF from **Report History**.

---
""")

st.header("Glossary of Terms")

glossary = {
    "AI Visibility Report":
        "A generated document scoring how often and how well a business appears in AI assistant answers "
        "for category and location questions.",

    "Platform":
        "One AI assistant provider: ChatGPT (OpenAI), Claude (Anthropic), Gemini (Google) or Perplexity.",

    "Platform Score":
        "The percentage (0-100) of successful answers from a platform that mention the business by name. "
        "Example: if Claude names the business in 3 of 6 answers, its Claude score is 50. "
        "Failed or timed-out calls are not counted.",

    "Overall Score":
        "The average of the platform scores. Platforms that returned no answers at all are listed as "
        "failed and left out.",

    "Knowledge Level":
        "**High** (score 70+), **Moderate** (40-69) or **Low** (below 40). Low-knowledge platforms "
        "become action items.",

    "Prominence":
        "A detail metric combining mention rate (60%) with how early in the answer the business "
        "appears (40%). An answer that names the business on its first line ranks highest.",

    "Competitor Discovery":
        "Extracting the business names that AI answers recommend. Each competitor's **detection count** "
        "is the number of answers that name it.",

    "Content Gap":
        "A recommendation derived from comparing competitor strengths with what AI answers say about the "
        "business. Types: **structural** (schema markup, citations), **critical topic** (service, quality, "
        "customer), **significant topic** (other topics such as pricing or staff) and **thematic** "
        "(your own services that AI answers never mention).",

    "Citation Opportunity":
        "A place where more mentions of the business would help AI assistants learn about it: "
        "platforms with few or no mentions, Google Business Profile and local directories.",

    "Direct Knowledge Probe":
        "Optional (ENABLE_KNOWLEDGE_PROBE): each platform is asked what it knows about the business and "
        "rates its own knowledge. Scored from the stated level plus the number of facts known.",

    "Share Link":
        "A private link to a read-only copy of the report. View counts are tracked and sharing can be "
        "switched off at any time.",
}

for term, definition in glossary.items():
    with st.expander(f"**{term}**"):
        st.markdown(definition)
