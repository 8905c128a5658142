"""Nearby competitor lookup through Google Places Text Search."""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from .page import ParsedPage

logger = logging.getLogger(__name__)


API_URL = "https://places.googleapis.com/v1/places:searchText"
FIELD_MASK = "places.displayName,places.rating,places.userRatingCount,places.googleMapsUri"
MAX_COMPETITORS = 5

_STATES = (
    "AL|AK|AZ|AR|CA|CO|CT|DE|FL|GA|HI|ID|IL|IN|IA|KS|KY|LA|ME|MD|MA|MI|MN|MS|MO|MT|NE|NV|NH|NJ|"
    "NM|NY|NC|ND|OH|OK|OR|PA|RI|SC|SD|TN|TX|UT|VT|VA|WA|WV|WI|WY|"
    "Alabama|Alaska|Arizona|Arkansas|California|Colorado|Connecticut|Delaware|Florida|Georgia|"
    "Hawaii|Idaho|Illinois|Indiana|Iowa|Kansas|Kentucky|Louisiana|Maine|Maryland|Massachusetts|"
    "Michigan|Minnesota|Mississippi|Missouri|Montana|Nebraska|Nevada|New\\sHampshire|New\\sJersey|"
    "New\\sMexico|New\\sYork|North\\sCarolina|North\\sDakota|Ohio|Oklahoma|Oregon|Pennsylvania|"
    "Rhode\\sIsland|South\\sCarolina|South\\sDakota|Tennessee|Texas|Utah|Vermont|Virginia|"
    "Washington|West\\sVirginia|Wisconsin|Wyoming"
)

# "Bradenton, FL", "Tampa Bay, Florida", "Cape Coral FL", "Sarasota & Gulf Coast FL"
CITY_STATE_RE = re.compile(
    r"\b([A-Z][a-z]+(?:\s[A-Z][a-z]+)*(?:\s&\s[A-Z][a-z]+(?:\s[A-Z][a-z]+)*)?),?\s*"
    rf"({_STATES})\b"
)


@dataclass(frozen=True)
class Competitor:
    name: str
    rating: float
    review_count: int
    maps_url: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "rating": self.rating,
            "reviewCount": self.review_count,
            "mapsUrl": self.maps_url,
        }


@dataclass(frozen=True)
class CompetitorData:
    search_query: str
    competitors: tuple[Competitor, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "competitors": [c.to_dict() for c in self.competitors],
            "searchQuery": self.search_query,
        }


def extract_location(page: ParsedPage) -> Optional[str]:
    """First "City, ST" pair found in the page's title and meta fields."""
    for source in (page.title, page.meta_description, page.h1, page.og_title, page.og_description):
        if not source:
            continue
        match = CITY_STATE_RE.search(source)
        if match:
            return f"{match.group(1)}, {match.group(2)}"
    return None


def scanned_business_name(page: ParsedPage) -> str:
    """Business name guessed from the title: text before the first | or dash."""
    return re.split(r"\s*[|–—-]\s*", page.title or "")[0].strip().lower()


def parse_places(data: dict[str, Any], own_name: str = "") -> list[Competitor]:
    """Rated places from a searchText response, minus the scanned business."""
    places = data.get("places") if isinstance(data, dict) else None
    if not isinstance(places, list):
        return []

    competitors = []
    for place in places:
        if not isinstance(place, dict):
            continue
        display = place.get("displayName")
        name = str((display.get("text") if isinstance(display, dict) else None) or "").strip()
        lowered = name.lower()
        if own_name and lowered and (lowered in own_name or own_name in lowered):
            continue
        rating = place.get("rating")
        count = place.get("userRatingCount")
        if isinstance(rating, bool) or not isinstance(rating, (int, float)) or rating <= 0:
            continue
        competitors.append(Competitor(
            name=name or "Unknown",
            rating=float(rating),
            review_count=count if isinstance(count, int) else 0,
            maps_url=place.get("googleMapsUri") or "",
        ))
        if len(competitors) == MAX_COMPETITORS:
            break
    return competitors


def find_competitors(
    page: ParsedPage,
    business_type: str,
    client: httpx.Client,
    api_key: Optional[str] = None,
    timeout: float = 10.0,
) -> Optional[CompetitorData]:
    """Top-rated competitors near the business. None when skipped or on failure."""
    if not api_key:
        return None

    location = extract_location(page)
    if not location:
        logger.info("Competitors: no City + State found on page, skipping")
        return None

    query = f"{business_type} in {location}"
    logger.debug("Competitors: searching for %r", query)

    try:
        resp = client.post(
            API_URL,
            headers={
                "Content-Type": "application/json",
                "X-Goog-Api-Key": api_key,
                "X-Goog-FieldMask": FIELD_MASK,
            },
            json={"textQuery": query},
            timeout=timeout,
        )
        resp.raise_for_status()
        data = resp.json()
    except httpx.TimeoutException:
        logger.warning("Competitors: Places search timed out after %ss", timeout)
        return None
    except httpx.HTTPStatusError as e:
        logger.warning("Competitors: Places API error %s", e.response.status_code)
        return None
    except httpx.RequestError as e:
        logger.warning("Competitors: request failed: %s", e)
        return None
    except ValueError:
        logger.warning("Competitors: response was not JSON")
        return None

    competitors = parse_places(data, scanned_business_name(page))
    if not competitors:
        logger.info("Competitors: no usable results for %r", query)
        return None

    return CompetitorData(search_query=query, competitors=tuple(competitors))
