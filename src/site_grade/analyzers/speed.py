"""Page Speed analyzer."""

from typing import Optional

from ..models import CategoryResult, Finding, Impact, round_half_up
from ..pagespeed import PageSpeedResult

NAME = "Page Speed"


def format_bytes(num_bytes: float) -> str:
    """Human-readable page size in KB or MB (decimal units)."""
    if num_bytes >= 1_000_000:
        return f"{num_bytes / 1_000_000:.1f}MB"
    return f"{round_half_up(num_bytes / 1_000)}KB"


def weight_breakdown(speed: PageSpeedResult) -> str:
    """Image and script share of the page, e.g. " (images 2.1MB, scripts 640KB)"."""
    parts = []
    if speed.image_bytes:
        parts.append(f"images {format_bytes(speed.image_bytes)}")
    if speed.script_bytes:
        parts.append(f"scripts {format_bytes(speed.script_bytes)}")
    return f" ({', '.join(parts)})" if parts else ""


def analyze_speed(speed: Optional[PageSpeedResult]) -> CategoryResult:
    """Grade Lighthouse performance, page weight, first paint, CLS and TBT.

    Without PageSpeed data there is nothing to measure from the HTML alone,
    so the category is a single failing finding and scores 0.
    """
    if speed is None:
        unavailable = Finding(
            label="Speed data unavailable",
            passed=False,
            detail=(
                "We couldn't run a detailed speed test on your site right now. This usually "
                "means Google's testing service is temporarily unavailable. Try scanning "
                "again in a few minutes."
            ),
            impact=Impact.HIGH,
        )
        return CategoryResult.unavailable(NAME, unavailable)

    findings: list[Finding] = []

    # Overall performance
    perf = speed.performance_score
    perf_pct = round_half_up(perf * 100)
    if perf >= 0.9:
        perf_detail = (
            f"Your site scored {perf_pct} out of 100 on Google's speed test. That's excellent. "
            "Google rewards fast sites with better search rankings."
        )
    elif perf >= 0.5:
        perf_detail = (
            f"Your site scored {perf_pct} out of 100 on Google's speed test. That's acceptable, "
            "but there's room to improve. Faster sites rank higher and convert better."
        )
    else:
        perf_detail = (
            f"Your site scored {perf_pct} out of 100 on Google's speed test. That's below "
            "average. Google uses speed as a ranking factor, so this is hurting you in search "
            "results and driving away customers."
        )
    findings.append(Finding(
        label="Overall performance score",
        passed=perf >= 0.5,
        detail=perf_detail,
        impact=Impact.HIGH,
    ))

    # Page weight
    size = format_bytes(speed.total_bytes)
    breakdown = weight_breakdown(speed)
    light = speed.total_bytes / 1_000_000 < 3
    findings.append(Finding(
        label="Page weight",
        passed=light,
        detail=(
            f"Your page is {size} total{breakdown}. That's a reasonable size. It won't eat up your "
            "customers' phone data or take forever on a slow connection."
            if light else
            f"Your page is {size} total{breakdown}. That's heavy: anything over 3MB loads slowly on phone "
            "connections. Large images are usually the culprit. Compress your images and your "
            "site will load much faster."
        ),
        impact=Impact.HIGH,
    ))

    # First paint
    fcp_sec = f"{speed.fcp_ms / 1000:.1f}"
    fast_paint = speed.fcp_ms < 2000
    findings.append(Finding(
        label="First paint time",
        passed=fast_paint,
        detail=(
            f"Your site shows something on screen in {fcp_sec}s. That's fast enough that "
            "visitors know the page is loading and stick around."
            if fast_paint else
            f"Your site takes {fcp_sec}s before anything appears on screen. If a visitor sees a "
            "blank white page for more than 2 seconds, many assume it's broken and hit the "
            "back button."
        ),
        impact=Impact.MEDIUM,
    ))

    # Layout stability
    cls = f"{speed.cls_score:.2f}"
    stable = speed.cls_score < 0.1
    findings.append(Finding(
        label="Layout stability",
        passed=stable,
        detail=(
            f"Your page layout stays stable while loading (shift score: {cls}). Nothing jumps "
            "around unexpectedly when customers are trying to read or tap a button."
            if stable else
            f"Your page layout shifts around while loading (shift score: {cls}). You try to tap "
            "a button and the page jumps. That's happening on your site. It frustrates "
            "customers and Google penalizes it."
        ),
        impact=Impact.MEDIUM,
    ))

    # Interactivity
    tbt = round_half_up(speed.fid_ms)
    snappy = speed.fid_ms < 300
    findings.append(Finding(
        label="Interactivity speed",
        passed=snappy,
        detail=(
            f"Your site responds to taps and clicks in {tbt}ms. That feels snappy, so customers "
            "won't notice any delay."
            if snappy else
            f"Your site takes {tbt}ms to respond after someone taps a button. Anything over "
            "300ms feels sluggish. Usually this means the site is running too much code in the "
            "background."
        ),
        impact=Impact.LOW,
    ))

    return CategoryResult(name=NAME, findings=findings)
