"""Run a full scan: fetch, analyze, grade, render verdicts, store."""

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from .ai_review import run_ai_review
from .analyzers import (
    analyze_ad_readiness,
    analyze_lead_capture,
    analyze_mobile,
    analyze_seo,
    analyze_speed,
    analyze_trust,
)
from .competitors import find_competitors
from .config import Settings, get_settings
from .grading import Grader, grade_report
from .models import CategoryResult
from .page import DEFAULT_HEADERS, ParsedPage, fetch_page, normalize_url
from .pagespeed import PageSpeedResult, run_pagespeed
from .store import ReportStore
from .verdicts import overall_verdict, wasted_spend_verdict

logger = logging.getLogger(__name__)


TOP_FIXES = 5


def new_report_id() -> str:
    return uuid.uuid4().hex[:12]


def run_analyzers(
    page: ParsedPage,
    speed: Optional[PageSpeedResult],
    business_type: str,
) -> list[CategoryResult]:
    """The six page analyzers, in report order."""
    return [
        analyze_mobile(page, speed),
        analyze_lead_capture(page),
        analyze_trust(page),
        analyze_speed(speed),
        analyze_seo(page, business_type),
        analyze_ad_readiness(page, speed, business_type),
    ]


def scan_site(
    url: str,
    business_type: str,
    ad_spend: Optional[str] = None,
    settings: Optional[Settings] = None,
    store: Optional[ReportStore] = None,
    client: Optional[httpx.Client] = None,
    grader: Optional[Grader] = None,
) -> dict[str, Any]:
    """Scan a URL and return the stored report.

    The page fetch and PageSpeed run in parallel, then the AI review and
    competitor search run while the analyzers grade the page. Only the page
    fetch can fail the scan.

    Raises:
        FetchError: when the page itself can't be fetched.
    """
    settings = settings or get_settings()
    url = normalize_url(url)
    owns_client = client is None
    if client is None:
        client = httpx.Client(
            headers={**DEFAULT_HEADERS, "User-Agent": settings.user_agent},
            timeout=settings.fetch_timeout,
        )

    try:
        with ThreadPoolExecutor(max_workers=2) as executor:
            speed_future = executor.submit(
                run_pagespeed, url, client,
                api_key=settings.pagespeed_api_key,
                timeout=settings.pagespeed_timeout,
            )
            page_future = executor.submit(fetch_page, url, client)
            page = page_future.result()
            speed = speed_future.result()

            ai_future = executor.submit(
                run_ai_review, page, business_type, ad_spend, client,
                api_key=settings.openrouter_api_key,
                model=settings.openrouter_model,
                timeout=settings.ai_timeout,
            )
            competitors_future = executor.submit(
                find_competitors, page, business_type, client,
                api_key=settings.google_places_api_key,
                timeout=settings.places_timeout,
            )

            categories = run_analyzers(page, speed, business_type)
            ai_result = ai_future.result()
            competitors = competitors_future.result()
    finally:
        if owns_client:
            client.close()

    if ai_result is not None:
        categories.append(ai_result)

    if grader is not None:
        graded = grader.grade(categories, ad_spend, business_type)
    else:
        graded = grade_report(categories, ad_spend, business_type)

    report = {
        "id": new_report_id(),
        "url": url,
        "finalUrl": page.final_url,
        "businessType": business_type,
        "adSpend": ad_spend,
        "scannedAt": datetime.now(timezone.utc).isoformat(),
        "overallScore": graded.overall_score,
        "overallGrade": graded.overall_grade,
        "verdict": overall_verdict(graded.overall_grade),
        "wastedSpend": graded.wasted_spend.to_dict() if graded.wasted_spend else None,
        "wastedSpendVerdict": (
            wasted_spend_verdict(graded.wasted_spend, business_type)
            if graded.wasted_spend else None
        ),
        "categories": [c.to_dict() for c in graded.categories],
        "priorityFixes": [f.to_dict() for f in graded.top_fixes(TOP_FIXES)],
        "pageTitle": page.title,
        "competitors": competitors.to_dict() if competitors else None,
    }

    logger.info(
        "Scanned %s: %s (%d)%s",
        page.final_url, graded.overall_grade, graded.overall_score,
        "" if speed else " without PageSpeed data",
    )

    if store is not None:
        store.save(report, ttl_seconds=settings.report_ttl_seconds)
        store.record_scan(business_type, graded.overall_grade, ad_spend)

    return report
