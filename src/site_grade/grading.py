"""Combine category results into an overall grade, fix list and waste estimate.

Everything here is a pure function of its inputs. Missing data shows up as
absence (a skipped category, a ``None`` estimate), never as an exception.
"""

from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence

from .models import (
    CategoryResult,
    GradedCategory,
    GradedReport,
    PriorityFix,
    WastedSpend,
    round_half_up,
)


CATEGORY_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "Mobile Experience": 0.25,
    "Lead Capture": 0.25,
    "Trust & Credibility": 0.15,
    "Page Speed": 0.15,
    "SEO Basics": 0.10,
    "Ad Landing Readiness": 0.10,
})

GRADE_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (97, "A+"),
    (93, "A"),
    (90, "A-"),
    (87, "B+"),
    (83, "B"),
    (80, "B-"),
    (77, "C+"),
    (73, "C"),
    (70, "C-"),
    (67, "D+"),
    (63, "D"),
    (60, "D-"),
)

GRADE_COLORS: Mapping[str, str] = MappingProxyType({
    "A": "#22c55e",
    "B": "#3b82f6",
    "C": "#eab308",
    "D": "#f97316",
})
FAILING_COLOR = "#ef4444"

# Sentinel bracket for businesses that don't advertise
NO_AD_SPEND = "none"

SPEND_MIDPOINTS: Mapping[str, int] = MappingProxyType({
    "Under $500": 350,
    "$500-$1,000": 750,
    "$1,000-$2,500": 1750,
    "$2,500-$5,000": 3750,
    "$5,000+": 6500,
})

# Average monthly ad spend by trade, used when the business didn't say
INDUSTRY_AVG_SPEND: Mapping[str, int] = MappingProxyType({
    "HVAC": 2600,
    "Plumbing": 2200,
    "Roofing": 3200,
    "Electrical": 1800,
    "Pool Service": 1400,
    "Landscaping": 1200,
    "Painting": 1500,
    "Remodeling": 2800,
    "Pest Control": 1600,
    "Cleaning": 1100,
    "Other": 1500,
})
DEFAULT_TRADE = "Other"

# Share of spend lost at a score of 0
MAX_WASTE_FACTOR = 0.7


def score_to_grade(score: float) -> str:
    """Letter grade for a 0-100 score. Anything under 60 is an F."""
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


def grade_color(grade: str) -> str:
    return GRADE_COLORS.get(grade[:1], FAILING_COLOR)


def collect_priority_fixes(categories: Iterable[CategoryResult]) -> list[PriorityFix]:
    """Every failed finding, highest impact first.

    The sort is stable, so findings of equal rank keep category order and
    then finding order.
    """
    fixes = [
        PriorityFix(
            label=finding.label,
            detail=finding.detail,
            effort=finding.impact.effort,
            impact=finding.impact,
        )
        for category in categories
        for finding in category.findings
        if not finding.passed
    ]
    return sorted(fixes, key=lambda fix: (fix.impact.rank, fix.effort.rank))


class Grader:
    """Grades a list of category results.

    Lookup tables are injected so callers can grade with different weights
    or spend tables; they are copied into read-only mappings.
    """

    def __init__(
        self,
        weights: Mapping[str, float] = CATEGORY_WEIGHTS,
        spend_midpoints: Mapping[str, int] = SPEND_MIDPOINTS,
        industry_spend: Mapping[str, int] = INDUSTRY_AVG_SPEND,
    ):
        self.weights: Mapping[str, float] = MappingProxyType(dict(weights))
        self.spend_midpoints: Mapping[str, int] = MappingProxyType(dict(spend_midpoints))
        self.industry_spend: Mapping[str, int] = MappingProxyType(
            {trade.lower(): amount for trade, amount in industry_spend.items()}
        )

    def weight_for(self, name: str) -> float:
        """Weight of a category; unknown categories weigh nothing."""
        return self.weights.get(name, 0.0)

    def overall_score(self, categories: Sequence[CategoryResult]) -> int:
        """Weighted mean of category scores over the weights actually present."""
        weighted_sum = 0.0
        weight_total = 0.0
        for category in categories:
            weight = self.weight_for(category.name)
            weighted_sum += category.score * weight
            weight_total += weight
        if weight_total <= 0:
            return 0
        return round_half_up(weighted_sum / weight_total)

    def monthly_spend_for(self, business_type: str) -> int:
        default = self.industry_spend.get(DEFAULT_TRADE.lower(), 0)
        return self.industry_spend.get((business_type or "").strip().lower(), default)

    def estimate_waste(
        self,
        score: int,
        ad_spend: Optional[str],
        business_type: str,
    ) -> Optional[WastedSpend]:
        """Estimated monthly ad dollars lost at this score.

        ``"none"`` and unrecognized brackets give no estimate. No bracket at
        all (None, empty or blank) falls back to the trade's average spend.
        """
        ad_spend = (ad_spend or "").strip() or None
        if ad_spend is not None and ad_spend.lower() == NO_AD_SPEND:
            return None

        if ad_spend:
            monthly = self.spend_midpoints.get(ad_spend)
            if monthly is None:
                return None
            is_estimated = False
        else:
            monthly = self.monthly_spend_for(business_type)
            is_estimated = True

        waste_factor = (100 - score) / 100 * MAX_WASTE_FACTOR
        mid_waste = monthly * waste_factor
        return WastedSpend(
            low=round_half_up(mid_waste * 0.8),
            high=round_half_up(mid_waste * 1.2),
            monthly_spend=monthly,
            is_estimated=is_estimated,
        )

    def grade(
        self,
        categories: Sequence[CategoryResult],
        ad_spend: Optional[str] = None,
        business_type: str = DEFAULT_TRADE,
    ) -> GradedReport:
        graded = []
        for category in categories:
            letter = score_to_grade(category.score)
            graded.append(GradedCategory(
                name=category.name,
                score=category.score,
                grade=letter,
                grade_color=grade_color(letter),
                findings=category.findings,
            ))

        score = self.overall_score(categories)
        return GradedReport(
            overall_score=score,
            overall_grade=score_to_grade(score),
            categories=tuple(graded),
            priority_fixes=tuple(collect_priority_fixes(categories)),
            wasted_spend=self.estimate_waste(score, ad_spend, business_type),
        )


_default_grader = Grader()


def grade_report(
    categories: Sequence[CategoryResult],
    ad_spend: Optional[str] = None,
    business_type: str = DEFAULT_TRADE,
) -> GradedReport:
    """Grade categories with the standard weights and spend tables."""
    return _default_grader.grade(categories, ad_spend, business_type)


def estimate_waste(score: int, ad_spend: Optional[str], business_type: str) -> Optional[WastedSpend]:
    return _default_grader.estimate_waste(score, ad_spend, business_type)
