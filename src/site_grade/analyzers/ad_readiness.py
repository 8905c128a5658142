"""Ad Landing Readiness analyzer."""

from typing import Optional

from ..models import CategoryResult, Finding, Impact
from ..page import ParsedPage
from ..pagespeed import PageSpeedResult

NAME = "Ad Landing Readiness"

AD_LOAD_LIMIT_MS = 4000
# Raw HTML above this is a slow landing page even before images and scripts
HTML_WEIGHT_LIMIT_BYTES = 500_000
MAX_NAV_LINKS = 8


def _load_time_finding(page: ParsedPage, speed: Optional[PageSpeedResult]) -> Finding:
    if speed is None:
        kb = page.html_bytes // 1000
        light = page.html_bytes < HTML_WEIGHT_LIMIT_BYTES
        return Finding(
            label="Landing page weight",
            passed=light,
            detail=(
                f"Your page's HTML is {kb}KB, light enough that paid visitors aren't kept "
                "waiting before anything starts to load."
                if light else
                f"Your page's HTML alone is {kb}KB. That's before a single image or script "
                "loads. Paid visitors on a phone connection will wait, and many will leave."
            ),
            impact=Impact.MEDIUM,
        )

    load_sec = f"{speed.lcp_ms / 1000:.1f}"
    fast = speed.lcp_ms < AD_LOAD_LIMIT_MS
    return Finding(
        label="Ad click load time",
        passed=fast,
        detail=(
            f"Your site loads in {load_sec}s after an ad click. That's fast enough to keep most "
            "paid visitors on the page."
            if fast else
            f"Your site takes {load_sec}s to load after an ad click. You're paying for every "
            f"click, and at {load_sec}s a big chunk of those paid visitors leave before the "
            "page even finishes loading. Every second of delay cuts your conversion rate."
        ),
        impact=Impact.HIGH,
    )


def analyze_ad_readiness(
    page: ParsedPage,
    speed: Optional[PageSpeedResult],
    business_type: str,
) -> CategoryResult:
    """Check whether a paid click lands somewhere that converts.

    Looks for the service and area being named, a fast load, and a page
    that isn't buried in navigation with nothing to click on.
    """
    trade = business_type.lower()
    findings: list[Finding] = []

    findings.append(Finding(
        label="Service mentioned above the fold",
        passed=page.mentions_service,
        detail=(
            f"Your site mentions your service right away. When someone clicks an ad for "
            f"\"{trade}\", they immediately see that they're in the right place."
            if page.mentions_service else
            f"We didn't find your service mentioned prominently on the page. When someone "
            f"clicks an ad for \"{trade}\" and doesn't immediately see that word on your site, "
            "they hit the back button. Make sure your headline says exactly what you do."
        ),
        impact=Impact.HIGH,
    ))

    findings.append(Finding(
        label="Service area mentioned",
        passed=page.mentions_location,
        detail=(
            "Your site mentions your service area. Customers who click a local ad want to "
            "confirm you work in their area, and you make that clear."
            if page.mentions_location else
            "We didn't find any mention of your service area or city on the page. When "
            "someone searches for \"roofer near me\" and clicks your ad, they need to see their "
            "city or neighborhood on your site. Otherwise they assume you don't serve their "
            "area."
        ),
        impact=Impact.HIGH,
    ))

    findings.append(_load_time_finding(page, speed))

    distracted = page.nav_link_count > MAX_NAV_LINKS and page.cta_count < 2
    if distracted:
        ctas = "zero" if page.cta_count == 0 else str(page.cta_count)
        plural = "" if page.cta_count == 1 else "s"
        focus_detail = (
            f"Your page has {page.nav_link_count} navigation links but only {ctas} "
            f"call-to-action{plural}. When you're paying for clicks, you want visitors focused "
            "on contacting you, not browsing around. Simplify the navigation and add more "
            "\"Get a Quote\" or \"Call Now\" buttons."
        )
    else:
        focus_detail = (
            "Your page stays focused. It doesn't overwhelm visitors with too many navigation "
            "options, and it has clear calls-to-action. That's what you want for paid traffic."
        )
    findings.append(Finding(
        label="Page focus and clarity",
        passed=not distracted,
        detail=focus_detail,
        impact=Impact.MEDIUM,
    ))

    return CategoryResult(name=NAME, findings=findings)
