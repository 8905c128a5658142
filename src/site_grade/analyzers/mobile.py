"""Mobile Experience analyzer."""

from typing import Optional

from ..models import CategoryResult, Finding, Impact
from ..page import ParsedPage
from ..pagespeed import PageSpeedResult

NAME = "Mobile Experience"

LOAD_TIME_LIMIT_MS = 3000


def analyze_mobile(page: ParsedPage, speed: Optional[PageSpeedResult]) -> CategoryResult:
    """Check load time, responsive layout, viewport, text size and tap targets.

    Lighthouse often fails to render slow pages and then reports the layout
    audits as failing. Layout, viewport and text size therefore also pass when
    the raw HTML shows the signal, so a measurement failure is not counted
    against the site.
    """
    findings: list[Finding] = []

    if speed is None:
        has_viewport = page.has_viewport_meta
        findings.append(Finding(
            label="Viewport configured",
            passed=has_viewport,
            detail=(
                "Your site has a viewport meta tag, which is a basic mobile requirement."
                if has_viewport else
                "Your site is missing the viewport meta tag. Without it, the page shows up "
                "tiny on phone screens."
            ),
            impact=Impact.HIGH,
        ))
        return CategoryResult(name=NAME, findings=findings)

    # Load time
    load_ok = speed.lcp_ms < LOAD_TIME_LIMIT_MS
    load_sec = f"{speed.lcp_ms / 1000:.1f}"
    findings.append(Finding(
        label="Mobile load time",
        passed=load_ok,
        detail=(
            f"Your site loads in {load_sec}s on a phone. That's solid. Most visitors stick "
            "around when it loads under 3 seconds."
            if load_ok else
            f"Your site takes {load_sec}s to load on a phone. The industry standard is under 3s. "
            "53% of visitors leave after 3 seconds."
        ),
        impact=Impact.HIGH,
    ))

    # Responsive layout
    responsive = speed.is_responsive or page.has_responsive_css
    findings.append(Finding(
        label="Mobile-responsive layout",
        passed=responsive,
        detail=(
            "Your site adjusts properly to phone screens. Text and images resize to fit "
            "without sideways scrolling."
            if responsive else
            "Your site doesn't adapt to phone screens. Visitors have to pinch and zoom, "
            "which drives most of them away."
        ),
        impact=Impact.HIGH,
    ))

    # Viewport
    viewport = speed.viewport_set or page.has_viewport_meta
    findings.append(Finding(
        label="Viewport configured",
        passed=viewport,
        detail=(
            "Your site tells the phone browser how to size the page correctly. This is a "
            "basic but important mobile requirement."
            if viewport else
            "Your site is missing the viewport setting that tells phones how to display the "
            "page. Without it, the page shows up tiny on mobile screens."
        ),
        impact=Impact.MEDIUM,
    ))

    # Text size. A page with both a viewport tag and media queries is built to scale its text.
    readable = speed.font_size_ok or (page.has_viewport_meta and page.has_responsive_css)
    findings.append(Finding(
        label="Readable text on mobile",
        passed=readable,
        detail=(
            "Text on your site is large enough to read on a phone without zooming in. "
            "Customers can easily read your content."
            if readable else
            "Some text on your site is too small to read on a phone. Customers have to zoom "
            "in, which is frustrating and makes them more likely to leave."
        ),
        impact=Impact.MEDIUM,
    ))

    # Tap targets
    findings.append(Finding(
        label="Tap-friendly buttons",
        passed=speed.tap_targets_ok,
        detail=(
            "Your buttons and links are large enough to tap easily on a phone. No accidental "
            "mis-taps for your customers."
            if speed.tap_targets_ok else
            "Some buttons or links on your site are too small or too close together on a "
            "phone. Customers will tap the wrong thing, get frustrated, and leave."
        ),
        impact=Impact.MEDIUM,
    ))

    return CategoryResult(name=NAME, findings=findings)
