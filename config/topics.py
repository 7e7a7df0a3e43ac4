TOPIC_KEYWORDS = [
    "service", "quality", "experience", "selection", "pricing", "atmosphere",
    "staff", "location", "hours", "parking", "cleanliness", "speed",
]

CRITICAL_TOPICS = {"service", "quality", "customer"}

# Phrases marking an answer as a refusal / non-answer
REFUSAL_MARKERS = ["i'm sorry", "i cannot", "without more"]

# Phrases marking a knowledge self-assessment as "does not know the business"
UNKNOWN_MARKERS = ["don't know", "no information", "not familiar"]

# Search result filters
BLOCKED_DOMAINS = [
    ".gov", ".edu", ".mil", "wikipedia.org", "facebook.com", "linkedin.com",
    "twitter.com", "instagram.com", "youtube.com",
]
DIRECTORY_DOMAINS = [
    "yelp.com", "yellowpages.com", "bbb.org", "mapquest.com", "superpages.com",
    "manta.com", "chamberofcommerce.com", "bizapedia.com", "whitepages.com",
    "angi.com", "homeadvisor.com", "thumbtack.com", "indeed.com",
    "glassdoor.com", "craigslist.org",
]
IRRELEVANT_TERMS = [
    "support", "help center", "customer service", "contact us", "about us",
    "privacy policy", "terms of service", "sitemap", "careers", "jobs",
    "hiring", "blog post", "article", "news",
]

# Fallback business type detection from page title / description
BUSINESS_TYPE_KEYWORDS = {
    "restaurant": ["restaurant", "dining", "cafe", "bistro", "eatery"],
    "dental clinic": ["dental", "dentist", "orthodont"],
    "law firm": ["attorney", "lawyer", "legal", "law firm"],
    "plumbing service": ["plumber", "plumbing"],
    "auto repair": ["auto repair", "mechanic", "car service"],
    "real estate": ["real estate", "realtor", "property"],
    "salon": ["salon", "hair", "beauty"],
    "gym": ["gym", "fitness", "workout"],
}

# CSS selectors and lead-in phrases for service lists on business websites
SERVICE_SELECTORS = [
    "ul.services li",
    ".service-item",
    "[class*='service']",
    "ul[class*='offering'] li",
]
SERVICE_LEAD_INS = [
    "services:", "we offer:", "what we do:", "our services include",
    "specializing in:", "we provide:", "offerings:",
]
ABOUT_SELECTORS = [
    "section[class*='about']",
    "div[class*='about']",
    "#about",
    "section[id*='about']",
]
