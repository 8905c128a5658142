"""SEO Basics analyzer."""

import re

from ..models import CategoryResult, Finding, Impact
from ..page import ParsedPage

NAME = "SEO Basics"

MIN_TITLE_CHARS = 10
MIN_DESCRIPTION_CHARS = 20


def _title_finding(page: ParsedPage, business_type: str) -> Finding:
    title = page.title.strip()
    generic = re.fullmatch(r"home", title, re.IGNORECASE) is not None
    ok = len(page.title) > MIN_TITLE_CHARS and not generic

    if ok:
        detail = (
            f"Your page title is \"{page.title}\". It's descriptive and tells Google what your "
            "business does. Good."
        )
    elif not page.title:
        detail = (
            "Your page has no title tag. This is the single most important thing Google reads "
            "to understand what your page is about. Add a title like "
            "\"Smith Roofing | Licensed Roofer in Naples, FL\"."
        )
    elif generic:
        detail = (
            "Your page title is just \"Home.\" That tells Google nothing about your business. "
            f"Change it to something like \"{business_type} Services | Your City, State\"."
        )
    else:
        detail = (
            f"Your page title is only {len(page.title)} characters. That's too short to be "
            "useful. Include your business name, what you do, and where you are."
        )
    return Finding(label="Title tag", passed=ok, detail=detail, impact=Impact.HIGH)


def _description_finding(page: ParsedPage) -> Finding:
    length = len(page.meta_description)
    ok = length > MIN_DESCRIPTION_CHARS
    if ok:
        detail = (
            f"You have a meta description ({length} characters). This is the snippet Google "
            "shows under your title in search results, and it helps convince people to click."
        )
    elif length == 0:
        detail = (
            "Your page has no meta description. Google will pick random text from your page "
            "to show in search results, and it usually picks something awkward. Write a 1-2 "
            "sentence summary of what you do and where."
        )
    else:
        detail = (
            f"Your meta description is only {length} characters. That's too short to be "
            "useful in search results. Aim for 120-160 characters that describe your services "
            "and location."
        )
    return Finding(label="Meta description", passed=ok, detail=detail, impact=Impact.HIGH)


def _schema_detail(page: ParsedPage, business_type: str) -> str:
    if page.has_local_schema:
        return (
            "Your site includes structured data that tells Google you're a local business. "
            "This helps you show up in Google's map results and local searches."
        )
    if page.has_schema:
        return (
            "Your site has some structured data, but it doesn't specifically identify you as a "
            "local business. Updating this can help you show up in \"near me\" searches and "
            "Google Maps."
        )
    return (
        "Your site doesn't have any structured data. This is behind-the-scenes code that helps "
        f"Google understand you're a local {business_type.lower()} business. Without it, "
        "you're harder to find in local searches."
    )


def analyze_seo(page: ParsedPage, business_type: str) -> CategoryResult:
    """Check title, meta description, H1, HTTPS and local business schema."""
    findings: list[Finding] = [
        _title_finding(page, business_type),
        _description_finding(page),
    ]

    h1 = re.sub(r"<[^>]*>", "", page.h1).strip()
    findings.append(Finding(
        label="Main heading (H1)",
        passed=bool(h1),
        detail=(
            f"Your main heading is \"{h1}\". Google uses this to understand your page's "
            "primary topic."
            if h1 else
            "Your page is missing a main heading. This is like a newspaper article with no "
            "headline. Google and visitors both use it to understand what the page is about."
        ),
        impact=Impact.MEDIUM,
    ))

    findings.append(Finding(
        label="SSL certificate (secure site)",
        passed=page.is_https,
        detail=(
            "Your site uses a secure connection (the lock icon in the browser). Google "
            "requires this, and customers trust it."
            if page.is_https else
            "Your site doesn't use a secure connection. Browsers show a \"Not Secure\" "
            "warning, which scares customers away. Google also penalizes non-secure sites in "
            "search rankings. Most hosting providers offer free SSL certificates."
        ),
        impact=Impact.MEDIUM,
    ))

    findings.append(Finding(
        label="Local business schema",
        passed=page.has_local_schema,
        detail=_schema_detail(page, business_type),
        impact=Impact.MEDIUM,
    ))

    return CategoryResult(name=NAME, findings=findings)
