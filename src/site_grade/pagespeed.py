"""Google PageSpeed Insights v5 client (mobile strategy)."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


API_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"


@dataclass(frozen=True)
class PageSpeedResult:
    """Lighthouse measurements for one URL, mobile strategy."""
    performance_score: float  # 0-1
    lcp_ms: float
    cls_score: float
    fid_ms: float  # total blocking time, used as the interactivity proxy
    fcp_ms: float
    total_bytes: float = 0.0
    image_bytes: float = 0.0
    script_bytes: float = 0.0
    viewport_set: bool = False
    font_size_ok: bool = False
    tap_targets_ok: bool = False

    @property
    def is_responsive(self) -> bool:
        return self.viewport_set and self.font_size_ok


def _audit_numeric(audits: dict[str, Any], key: str, attr: str = "numericValue") -> float:
    entry = audits.get(key)
    if not isinstance(entry, dict):
        return 0.0
    value = entry.get(attr)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def _audit_passes(audits: dict[str, Any], key: str) -> bool:
    entry = audits.get(key)
    return isinstance(entry, dict) and entry.get("score") == 1


def _resource_bytes(audits: dict[str, Any], resource_type: str) -> float:
    summary = audits.get("resource-summary")
    if not isinstance(summary, dict):
        return 0.0
    details = summary.get("details")
    items = details.get("items") if isinstance(details, dict) else None
    if not isinstance(items, list):
        return 0.0
    for item in items:
        if isinstance(item, dict) and item.get("resourceType") == resource_type:
            size = item.get("transferSize")
            return float(size) if isinstance(size, (int, float)) else 0.0
    return 0.0


def parse_pagespeed(data: dict[str, Any]) -> Optional[PageSpeedResult]:
    """Turn a runPagespeed JSON payload into a PageSpeedResult.

    Returns None when the payload has no Lighthouse result.
    """
    lighthouse = data.get("lighthouseResult") if isinstance(data, dict) else None
    if not isinstance(lighthouse, dict):
        return None

    audits = lighthouse.get("audits")
    if not isinstance(audits, dict):
        audits = {}
    categories = lighthouse.get("categories")
    perf = categories.get("performance") if isinstance(categories, dict) else None
    perf_score = perf.get("score") if isinstance(perf, dict) else None
    if isinstance(perf_score, bool) or not isinstance(perf_score, (int, float)):
        perf_score = 0.0

    return PageSpeedResult(
        performance_score=float(perf_score),
        lcp_ms=_audit_numeric(audits, "largest-contentful-paint"),
        cls_score=_audit_numeric(audits, "cumulative-layout-shift"),
        fid_ms=_audit_numeric(audits, "total-blocking-time"),
        fcp_ms=_audit_numeric(audits, "first-contentful-paint"),
        total_bytes=_audit_numeric(audits, "total-byte-weight"),
        image_bytes=_resource_bytes(audits, "image"),
        script_bytes=_resource_bytes(audits, "script"),
        viewport_set=_audit_passes(audits, "viewport"),
        font_size_ok=_audit_passes(audits, "font-size"),
        tap_targets_ok=_audit_passes(audits, "tap-targets"),
    )


def run_pagespeed(
    url: str,
    client: httpx.Client,
    api_key: str | None = None,
    timeout: float = 60.0,
) -> Optional[PageSpeedResult]:
    """Run PageSpeed Insights for a URL.

    Never raises: any failure is logged and reported as None so the
    analyzers fall back to page-only checks.
    """
    params: list[tuple[str, str]] = [
        ("url", url),
        ("strategy", "mobile"),
        ("category", "performance"),
        ("category", "accessibility"),
    ]
    if api_key:
        params.append(("key", api_key))

    try:
        resp = client.get(API_URL, params=params, timeout=timeout)
        resp.raise_for_status()
        data = resp.json()
    except httpx.TimeoutException:
        logger.warning("PageSpeed timed out after %ss for %s", timeout, url)
        return None
    except httpx.HTTPStatusError as e:
        logger.warning("PageSpeed API error %s for %s", e.response.status_code, url)
        return None
    except httpx.RequestError as e:
        logger.warning("PageSpeed request failed for %s: %s", url, e)
        return None
    except ValueError:
        logger.warning("PageSpeed returned invalid JSON for %s", url)
        return None

    result = parse_pagespeed(data)
    if result is None:
        logger.warning("PageSpeed response for %s missing lighthouseResult", url)
    return result
