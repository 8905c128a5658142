"""Fetch a page and extract the conversion signals the analyzers grade.

Signals are best-effort: structure comes from BeautifulSoup, wording from
regular expressions over the visible text. Nothing here is rendered, so
JavaScript-built pages will look thin.
"""

import json
import logging
import re
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from .errors import FetchError

logger = logging.getLogger(__name__)


DEFAULT_HEADERS = {
    "User-Agent": "SiteGrader/1.0 (+https://sitegrade.pro) Mozilla/5.0 (compatible)",
    "Accept": "text/html,application/xhtml+xml",
}

# Visible characters treated as "above the fold"
ABOVE_FOLD_CHARS = 1500

PHONE_RE = re.compile(r"(?:\+?1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")

CTA_RE = re.compile(
    r"\b(call|contact|quote|estimate|free|schedule|book|get started|request|consultation)\b",
    re.IGNORECASE,
)

TESTIMONIAL_RE = re.compile(
    r"\b(testimonials?|reviews?|customer said|what our|clients say|rated|stars?|hear from|feedback)\b",
    re.IGNORECASE,
)

REVIEW_PLATFORM_RE = re.compile(
    r"\b(google\s+reviews?|yelp|bbb|better business bureau|angi|angie's list|homeadvisor)\b",
    re.IGNORECASE,
)

REVIEW_HOST_RE = re.compile(
    r"(^|\.)(yelp\.com|bbb\.org|angi\.com|angieslist\.com|homeadvisor\.com|g\.page)$",
    re.IGNORECASE,
)

# Google Business profile and review links
GOOGLE_REVIEW_URL_RE = re.compile(
    r"//(maps\.google\.[a-z.]+|(www\.)?google\.[a-z.]+/maps|search\.google\.com/local)",
    re.IGNORECASE,
)

LICENSE_RE = re.compile(r"\b(licen[sc]ed|insured|bonded|certified|accredited)\b", re.IGNORECASE)

LOCATION_RE = re.compile(
    r"\b(FL|Florida|Naples|Fort Myers|Cape Coral|Sarasota|Tampa|Bonita Springs|"
    r"Estero|Lehigh|Marco Island|\d{5})\b",
    re.IGNORECASE,
)

STOCK_IMG_RE = re.compile(
    r"(unsplash|pexels|shutterstock|istockphoto|gettyimages|stock|placeholder)",
    re.IGNORECASE,
)

SERVICE_RE = re.compile(
    r"\b(pool|hvac|air condition|roofing|roof|plumb|electric|landscap|paint|remodel|construct)",
    re.IGNORECASE,
)

LOCAL_SCHEMA_RE = re.compile(
    r"LocalBusiness|HomeAndConstructionBusiness|Plumber|RoofingContractor|HVACBusiness",
    re.IGNORECASE,
)

RESPONSIVE_CSS_RE = re.compile(r"@media[^{]*(max|min)-width", re.IGNORECASE)


@dataclass(frozen=True)
class ParsedPage:
    """Signals extracted from one fetched page."""
    html: str
    url: str
    final_url: str

    # SEO / meta
    title: str = ""
    meta_description: str = ""
    h1: str = ""
    og_title: str = ""
    og_description: str = ""

    # Conversion
    phone_numbers: tuple[str, ...] = ()
    has_click_to_call: bool = False
    form_count: int = 0
    has_cta_above_fold: bool = False
    cta_count: int = 0
    nav_link_count: int = 0

    # Trust
    has_testimonials: bool = False
    has_reviews: bool = False
    has_license: bool = False
    has_about_page: bool = False

    # Visual
    has_real_photos: bool = False
    image_count: int = 0

    # Mobile fallbacks for when PageSpeed can't render the page
    has_viewport_meta: bool = False
    has_responsive_css: bool = False

    # Schema / local SEO
    has_schema: bool = False
    has_local_schema: bool = False
    mentions_location: bool = False
    mentions_service: bool = False

    @property
    def is_https(self) -> bool:
        return self.final_url.lower().startswith("https://")

    @property
    def html_bytes(self) -> int:
        return len(self.html.encode("utf-8"))


def normalize_url(url: str) -> str:
    """Ensure URL has a scheme."""
    url = url.strip()
    if not re.match(r"^https?://", url, re.IGNORECASE):
        url = "https://" + url
    return url


def _meta_content(soup: BeautifulSoup, **attrs: str) -> str:
    tag = soup.find("meta", attrs=attrs)
    if not tag:
        return ""
    return (tag.get("content") or "").strip()


def _visible_text(soup: BeautifulSoup) -> str:
    """Text of the body with scripts and styles removed, whitespace collapsed."""
    body = soup.body or soup
    body = BeautifulSoup(str(body), "lxml")
    for tag in body.find_all(["script", "style", "noscript"]):
        tag.decompose()
    return re.sub(r"\s+", " ", body.get_text(" ")).strip()


def _count_nav_links(soup: BeautifulSoup) -> int:
    count = 0
    for block in soup.find_all(["nav", "header"]):
        # Nested nav inside header is counted once, through the outer block
        if block.find_parent(["nav", "header"]):
            continue
        count += len(block.find_all("a"))
    return count


def _links_to_review_platform(soup: BeautifulSoup) -> bool:
    for link in soup.find_all("a", href=True):
        href = link["href"].strip()
        try:
            host = urlparse(href).hostname or ""
        except ValueError:
            continue
        if REVIEW_HOST_RE.search(host) or GOOGLE_REVIEW_URL_RE.search(href):
            return True
    return False


def _json_ld_blobs(soup: BeautifulSoup) -> list[str]:
    blobs = []
    for script in soup.find_all("script", type="application/ld+json"):
        content = script.string or script.get_text()
        if not content:
            continue
        try:
            blobs.append(json.dumps(json.loads(content)))
        except json.JSONDecodeError:
            # Broken JSON-LD still counts as schema markup being present
            blobs.append(content)
    return blobs


def parse_page(html: str, url: str, final_url: str | None = None) -> ParsedPage:
    """Extract grading signals from raw HTML."""
    final_url = final_url or url
    soup = BeautifulSoup(html, "lxml")

    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else ""
    h1_tag = soup.find("h1")
    h1 = h1_tag.get_text(" ", strip=True) if h1_tag else ""

    all_text = re.sub(r"\s+", " ", soup.get_text(" ")).strip()
    body_text = _visible_text(soup)
    above_fold = body_text[:ABOVE_FOLD_CHARS]

    # Conversion
    phone_numbers = tuple(dict.fromkeys(m.group(0) for m in PHONE_RE.finditer(html)))
    tel_links = soup.find_all("a", href=re.compile(r"^\s*tel:", re.IGNORECASE))
    cta_count = len(CTA_RE.findall(all_text))

    # Trust
    has_reviews = bool(
        re.search(r"\breview", all_text, re.IGNORECASE)
        or REVIEW_PLATFORM_RE.search(all_text)
        or _links_to_review_platform(soup)
    )
    about_links = soup.find_all("a", href=re.compile(r"about", re.IGNORECASE))

    # Visual
    srcs = [img.get("src") for img in soup.find_all("img") if img.get("src")]
    has_real_photos = any(not STOCK_IMG_RE.search(src) for src in srcs)

    # Schema
    blobs = _json_ld_blobs(soup)
    has_schema = bool(blobs)
    has_local_schema = has_schema and any(LOCAL_SCHEMA_RE.search(b) for b in blobs)

    return ParsedPage(
        html=html,
        url=url,
        final_url=final_url,
        title=title,
        meta_description=_meta_content(soup, name="description"),
        h1=h1,
        og_title=_meta_content(soup, property="og:title"),
        og_description=_meta_content(soup, property="og:description"),
        phone_numbers=phone_numbers,
        has_click_to_call=bool(tel_links),
        form_count=len(soup.find_all("form")),
        has_cta_above_fold=bool(CTA_RE.search(above_fold)),
        cta_count=cta_count,
        nav_link_count=_count_nav_links(soup),
        has_testimonials=bool(TESTIMONIAL_RE.search(all_text)),
        has_reviews=has_reviews,
        has_license=bool(LICENSE_RE.search(all_text)),
        has_about_page=bool(about_links),
        has_real_photos=has_real_photos,
        image_count=len(srcs),
        has_viewport_meta=soup.find("meta", attrs={"name": "viewport"}) is not None,
        has_responsive_css=bool(RESPONSIVE_CSS_RE.search(html)),
        has_schema=has_schema,
        has_local_schema=has_local_schema,
        mentions_location=bool(LOCATION_RE.search(all_text)),
        mentions_service=bool(SERVICE_RE.search(all_text)),
    )


def fetch_page(url: str, client: httpx.Client) -> ParsedPage:
    """Fetch a URL and parse it.

    Raises:
        FetchError: on timeout, transport failure or a 4xx/5xx response.
    """
    url = normalize_url(url)
    try:
        response = client.get(url, follow_redirects=True)
        response.raise_for_status()
    except httpx.TimeoutException as e:
        raise FetchError(url, "timed out") from e
    except httpx.HTTPStatusError as e:
        raise FetchError(url, f"HTTP {e.response.status_code}") from e
    except httpx.RequestError as e:
        raise FetchError(url, f"request failed: {e}") from e

    logger.debug("Fetched %s (%d bytes)", response.url, len(response.content))
    return parse_page(response.text, url, str(response.url))
