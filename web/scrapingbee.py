"""Website content extraction through the ScrapingBee rendering proxy."""

import datetime
import json
import logging
import re
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from config.settings import SCRAPINGBEE_API_KEY, SCRAPINGBEE_URL, SCRAPINGBEE_TIMEOUT
from config.topics import SERVICE_SELECTORS, SERVICE_LEAD_INS, ABOUT_SELECTORS

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_RE = re.compile(r"(?:\+?1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")
ABOUT_RE = re.compile(r"about\s+us:?\s*([^<]{100,500})", re.IGNORECASE)

MAX_TEXT_CHARS = 10000
MAX_ABOUT_CHARS = 1000


class ExtractionError(Exception):
    """Raised when a website cannot be fetched or parsed."""


def _unique(items, limit):
    seen = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen[:limit]


class WebsiteExtractor:
    def __init__(self, api_key=None, timeout=SCRAPINGBEE_TIMEOUT):
        self.api_key = api_key or SCRAPINGBEE_API_KEY
        self.timeout = timeout

    @property
    def configured(self):
        return bool(self.api_key)

    def fetch_html(self, url: str) -> str:
        resp = requests.get(
            SCRAPINGBEE_URL,
            params={
                "api_key": self.api_key,
                "url": url,
                "render_js": "true",
                "premium_proxy": "false",
                "country_code": "us",
            },
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.text

    def extract(self, url: str) -> dict:
        logger.info(f"Extracting content from: {url}")
        if not self.api_key:
            raise ExtractionError("ScrapingBee API key not configured")
        try:
            html = self.fetch_html(url)
        except requests.exceptions.RequestException as e:
            raise ExtractionError(f"Failed to extract website content: {e}") from e

        data = parse_website(url, html)
        logger.info(
            f"Content extracted: title={data['title']!r}, "
            f"{len(data['text_content'])} chars, {len(data['services'])} services"
        )
        return data


def parse_website(url: str, html: str) -> dict:
    """Pull the business-relevant parts out of a rendered page."""
    soup = BeautifulSoup(html, "html.parser")
    domain = urlparse(url).netloc.lower()
    if domain.startswith("www."):
        domain = domain[4:]

    meta = soup.find("meta", attrs={"name": "description"})
    schema_data = _schema_data(soup)

    data = {
        "url": url,
        "domain": domain,
        "title": _title(soup),
        "meta_description": (meta.get("content") or "").strip() if meta else "",
        "schema_data": schema_data,
        "og_data": _open_graph(soup),
        "headings": _headings(soup),
        "contact_info": _contact_info(html, schema_data),
        "services": _services(soup, html),
        "about_content": _about(soup, html),
        "internal_links": _links(soup, domain, internal=True),
        "external_links": _links(soup, domain, internal=False),
        "images": _images(soup),
        "extraction_timestamp": datetime.datetime.now().isoformat(),
    }
    # Text last: it strips navigation and script elements from the tree
    data["text_content"] = _text_content(soup)
    return data


def _title(soup):
    if soup.title and soup.title.get_text(strip=True):
        return soup.title.get_text(strip=True)
    h1 = soup.find("h1")
    if h1 and h1.get_text(strip=True):
        return h1.get_text(strip=True)
    og = soup.find("meta", attrs={"property": "og:title"})
    if og and og.get("content"):
        return og["content"]
    return "Untitled"


def _schema_data(soup):
    blocks = []
    for tag in soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            blocks.append(json.loads(tag.string or ""))
        except json.JSONDecodeError:
            continue
    return blocks


def _open_graph(soup):
    og = {}
    for tag in soup.find_all("meta", attrs={"property": re.compile(r"^og:")}):
        content = tag.get("content")
        if content:
            og[tag["property"][3:]] = content
    return og


def _headings(soup):
    headings = []
    for tag in soup.find_all(["h1", "h2", "h3", "h4"]):
        text = tag.get_text(" ", strip=True)
        if text:
            headings.append({"level": tag.name, "text": text})
    return headings


def _text_content(soup):
    for tag in soup(["script", "style", "nav", "header", "footer"]):
        tag.decompose()
    body = soup.body or soup
    text = re.sub(r"\s+", " ", body.get_text(" ")).strip()
    return text[:MAX_TEXT_CHARS]


def _contact_info(html, schema_data):
    contact = {
        "emails": _unique(EMAIL_RE.findall(html), 3),
        "phones": _unique(PHONE_RE.findall(html), 3),
        "addresses": [],
    }
    if schema_data and isinstance(schema_data[0], dict) and schema_data[0].get("address"):
        contact["addresses"].append(json.dumps(schema_data[0]["address"]))
    return contact


def _services(soup, html):
    services = []
    for selector in SERVICE_SELECTORS:
        for tag in soup.select(selector):
            text = tag.get_text(" ", strip=True)
            if text and len(text) < 100 and text not in services:
                services.append(text)

    lowered = html.lower()
    for lead_in in SERVICE_LEAD_INS:
        pos = lowered.find(lead_in)
        if pos == -1:
            continue
        tail = html[pos + len(lead_in):].split(".")[0]
        for item in re.split(r"[,\n]", tail)[:5]:
            cleaned = item.strip()
            if cleaned and len(cleaned) < 100 and cleaned not in services:
                services.append(cleaned)

    return services[:10]


def _about(soup, html):
    for selector in ABOUT_SELECTORS:
        for tag in soup.select(selector):
            content = tag.get_text(" ", strip=True)
            if len(content) > 50:
                return content[:MAX_ABOUT_CHARS]

    match = ABOUT_RE.search(html)
    if match:
        return match.group(1).strip()
    return ""


def _links(soup, domain, internal=True):
    links = []
    for tag in soup.find_all("a", href=True):
        href = tag["href"]
        if href.startswith("#") or href.startswith("javascript:"):
            continue
        absolute = urljoin(f"https://{domain}/", href)
        host = urlparse(absolute).netloc.lower()
        if not host:
            continue
        is_internal = domain in host
        if is_internal == internal and absolute not in links:
            links.append(absolute)
    return links[:20]


def _images(soup):
    images = []
    for tag in soup.find_all("img", src=True):
        src = tag["src"]
        if not src.startswith("data:"):
            images.append({"src": src, "alt": tag.get("alt", "")})
    return images[:10]
