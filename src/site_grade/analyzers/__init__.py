"""Category analyzers. Each is a pure function returning a CategoryResult."""

from .mobile import analyze_mobile
from .lead_capture import analyze_lead_capture
from .trust import analyze_trust
from .speed import analyze_speed
from .seo import analyze_seo
from .ad_readiness import analyze_ad_readiness

__all__ = [
    "analyze_mobile",
    "analyze_lead_capture",
    "analyze_trust",
    "analyze_speed",
    "analyze_seo",
    "analyze_ad_readiness",
]
