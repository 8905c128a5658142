"""AI copy review through OpenRouter.

Asks a chat model to judge the page's copy and turns its answer into the
optional "Content Quality" category. Any failure returns None so the
report still generates from the six page analyzers.
"""

import html as html_lib
import json
import logging
import re
from typing import Literal, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .models import CategoryResult, Finding, Impact
from .page import ParsedPage

logger = logging.getLogger(__name__)


API_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "minimax/minimax-m2.5"

CATEGORY_NAME = "Content Quality"
EXPECTED_FINDINGS = 5

MAX_TEXT_CHARS = 4000
# Below this much raw text the page is probably rendered client-side
MIN_RAW_TEXT_CHARS = 200
MIN_REVIEW_CHARS = 50

SYSTEM_PROMPT = """You are a conversion rate optimization expert reviewing a home service business website. Your job is to evaluate the visible copy and messaging, not the technical implementation.

Return EXACTLY 5 findings as a JSON array. Each finding must have:
- "label": short description (3-8 words)
- "pass": true if the page does this well, false if it needs improvement
- "detail": 1-2 sentences explaining what you found and a specific recommendation. Use examples when possible.
- "impact": "high", "medium", or "low"

Evaluate these 5 areas (one finding per area, in order):
1. Headline clarity: Does the hero communicate what/where/who within 5 seconds?
2. CTA persuasiveness: Is the call-to-action specific and compelling (not generic)?
3. Value proposition: Is there a clear reason to choose this business over competitors?
4. Industry-specific messaging: Does the copy address what this trade's customers actually care about?
5. Trust language: Does the copy itself build credibility (beyond just having review widgets)?

Return ONLY the JSON array, no markdown fences, no extra text."""


class AiFinding(BaseModel):
    """One finding as the model must return it."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    label: str = Field(min_length=1)
    passed: bool = Field(alias="pass", strict=True)
    detail: str
    impact: Literal["high", "medium", "low"]

    def to_finding(self) -> Finding:
        return Finding(
            label=self.label,
            passed=self.passed,
            detail=self.detail,
            impact=Impact(self.impact),
        )


_findings_adapter = TypeAdapter(list[AiFinding])


def extract_visible_text(raw_html: str) -> str:
    """Strip tags, decode entities, collapse whitespace, cap at 4000 chars."""
    text = re.sub(r"<script[\s\S]*?</script>", "", raw_html, flags=re.IGNORECASE)
    text = re.sub(r"<style[\s\S]*?</style>", "", text, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]*>", " ", text)
    text = html_lib.unescape(text)
    text = re.sub(r"\s+", " ", text).strip()
    return text[:MAX_TEXT_CHARS]


def build_page_text(page: ParsedPage) -> str:
    """Best available text to review.

    JS-rendered sites have almost no text in the raw HTML, so a summary of
    the parsed signals stands in. Returns "" when there's too little to
    review.
    """
    raw_text = extract_visible_text(page.html)
    if len(raw_text) >= MIN_RAW_TEXT_CHARS:
        return raw_text

    parts = []
    if page.title:
        parts.append(f"Page title: {page.title}")
    if page.meta_description:
        parts.append(f"Meta description: {page.meta_description}")
    if page.h1:
        parts.append(f"Main headline: {page.h1}")
    if page.og_title:
        parts.append(f"OG title: {page.og_title}")
    if page.og_description:
        parts.append(f"OG description: {page.og_description}")
    if page.phone_numbers:
        parts.append(f"Phone numbers found: {', '.join(page.phone_numbers)}")
    if page.has_click_to_call:
        parts.append("Has click-to-call links")
    if page.form_count:
        parts.append(f"Has {page.form_count} form(s)")
    if page.has_testimonials:
        parts.append("Has testimonials section")
    if page.has_reviews:
        parts.append("Has reviews/ratings")
    if page.has_license:
        parts.append("Mentions licensing/insurance")
    if page.cta_count:
        parts.append(f"Found {page.cta_count} CTA keywords")
    if page.has_cta_above_fold:
        parts.append("Has CTA above the fold")
    if page.mentions_location:
        parts.append("Mentions service location")
    if page.mentions_service:
        parts.append("Mentions service type")
    if raw_text:
        parts.append(f"\nRaw page text: {raw_text}")

    combined = "\n".join(parts)
    if len(combined) < MIN_REVIEW_CHARS:
        return ""
    return combined


def build_user_message(business_type: str, ad_spend: Optional[str], visible_text: str) -> str:
    msg = f"Business type: {business_type}\n"
    if ad_spend and ad_spend.lower() != "none":
        msg += f"Monthly ad spend: {ad_spend}\n"
    msg += f"\nPage text:\n{visible_text}"
    return msg


def parse_review(content: str) -> Optional[CategoryResult]:
    """Turn the model's reply into the Content Quality category.

    Reasoning models may think out loud before answering, so the JSON array
    is taken from the first "[" to the last "]". The reply must hold exactly
    five well-formed findings.
    """
    start = content.find("[")
    end = content.rfind("]")
    if start == -1 or end <= start:
        logger.warning("AI review: no JSON array in response")
        return None

    try:
        items = _findings_adapter.validate_python(json.loads(content[start:end + 1]))
    except json.JSONDecodeError as e:
        logger.warning("AI review: invalid JSON (%s)", e)
        return None
    except ValidationError as e:
        logger.warning("AI review: malformed findings (%d errors)", e.error_count())
        return None

    if len(items) != EXPECTED_FINDINGS:
        logger.warning("AI review: expected %d findings, got %d", EXPECTED_FINDINGS, len(items))
        return None

    return CategoryResult(name=CATEGORY_NAME, findings=[item.to_finding() for item in items])


def run_ai_review(
    page: ParsedPage,
    business_type: str,
    ad_spend: Optional[str],
    client: httpx.Client,
    api_key: Optional[str] = None,
    model: str = DEFAULT_MODEL,
    timeout: float = 25.0,
) -> Optional[CategoryResult]:
    """Review the page copy. Returns None when skipped or on any failure."""
    if not api_key:
        return None

    visible_text = build_page_text(page)
    if not visible_text:
        logger.warning("AI review: not enough page text to review")
        return None

    logger.debug("AI review: sending %d chars to %s", len(visible_text), model)

    try:
        resp = client.post(
            API_URL,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_message(business_type, ad_spend, visible_text)},
                ],
                "temperature": 0.3,
                "max_tokens": 1024,
            },
            timeout=timeout,
        )
        resp.raise_for_status()
        data = resp.json()
    except httpx.TimeoutException:
        logger.warning("AI review timed out after %ss", timeout)
        return None
    except httpx.HTTPStatusError as e:
        logger.warning("AI review API error %s", e.response.status_code)
        return None
    except httpx.RequestError as e:
        logger.warning("AI review request failed: %s", e)
        return None
    except ValueError:
        logger.warning("AI review: response was not JSON")
        return None

    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        content = None
    if not isinstance(content, str) or not content:
        logger.warning("AI review: empty response content")
        return None

    return parse_review(content)
