"""Data models for SiteGrade scan results."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional


class Impact(Enum):
    """Severity of a finding. Drives both score weight and fix priority."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        return {Impact.HIGH: 30, Impact.MEDIUM: 20, Impact.LOW: 10}[self]

    @property
    def rank(self) -> int:
        return {Impact.HIGH: 0, Impact.MEDIUM: 1, Impact.LOW: 2}[self]

    @property
    def effort(self) -> "Effort":
        """Effort label a failed check of this impact is reported with."""
        return {
            Impact.HIGH: Effort.QUICK,
            Impact.MEDIUM: Effort.MEDIUM,
            Impact.LOW: Effort.INVOLVED,
        }[self]


class Effort(Enum):
    """How much work a fix takes."""
    QUICK = "quick"
    MEDIUM = "medium"
    INVOLVED = "involved"

    @property
    def rank(self) -> int:
        return {Effort.QUICK: 0, Effort.MEDIUM: 1, Effort.INVOLVED: 2}[self]


def round_half_up(value: float) -> int:
    """Round .5 up for non-negative values (62.5 -> 63).

    Float noise from weighted sums is trimmed first so 67.99999999999999
    is treated as 68.
    """
    return int(math.floor(round(value, 9) + 0.5))


@dataclass(frozen=True)
class Finding:
    """A single pass/fail check."""
    label: str
    passed: bool
    detail: str
    impact: Impact

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "pass": self.passed,
            "detail": self.detail,
            "impact": self.impact.value,
        }


def calculate_category_score(findings: Iterable[Finding]) -> int:
    """Weighted pass ratio of a category's findings, 0-100.

    High findings weigh 30, medium 20, low 10. A category without findings
    scores 0.
    """
    earned = 0
    total = 0
    for finding in findings:
        total += finding.impact.weight
        if finding.passed:
            earned += finding.impact.weight
    if total == 0:
        return 0
    return round_half_up(earned / total * 100)


@dataclass(frozen=True)
class CategoryResult:
    """Findings of one analyzer. The score is always derived from them."""
    name: str
    findings: tuple[Finding, ...] = ()
    score: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "findings", tuple(self.findings))
        object.__setattr__(self, "score", calculate_category_score(self.findings))

    @classmethod
    def unavailable(cls, name: str, finding: Finding) -> "CategoryResult":
        """Category that couldn't be measured: one explanatory finding, scored 0."""
        result = cls(name=name, findings=(finding,))
        object.__setattr__(result, "score", 0)
        return result

    @property
    def failed(self) -> list[Finding]:
        return [f for f in self.findings if not f.passed]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "score": self.score,
            "findings": [f.to_dict() for f in self.findings],
        }


@dataclass(frozen=True)
class GradedCategory:
    """A category result with its letter grade attached."""
    name: str
    score: int
    grade: str
    grade_color: str
    findings: tuple[Finding, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "score": self.score,
            "grade": self.grade,
            "gradeColor": self.grade_color,
            "findings": [f.to_dict() for f in self.findings],
        }


@dataclass(frozen=True)
class PriorityFix:
    """A failed finding, ranked for the fix list."""
    label: str
    detail: str
    effort: Effort
    impact: Impact

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "detail": self.detail,
            "effort": self.effort.value,
            "impact": self.impact.value,
        }


@dataclass(frozen=True)
class WastedSpend:
    """Estimated monthly ad dollars lost to visitors who never convert."""
    low: int
    high: int
    monthly_spend: int
    is_estimated: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "low": self.low,
            "high": self.high,
            "monthlySpend": self.monthly_spend,
            "isEstimated": self.is_estimated,
        }


@dataclass(frozen=True)
class GradedReport:
    """Overall score, grade, graded categories and ranked fixes."""
    overall_score: int
    overall_grade: str
    categories: tuple[GradedCategory, ...] = ()
    priority_fixes: tuple[PriorityFix, ...] = ()
    wasted_spend: Optional[WastedSpend] = None

    def top_fixes(self, limit: int = 5) -> list[PriorityFix]:
        return list(self.priority_fixes[:limit])

    def to_dict(self) -> dict[str, Any]:
        return {
            "overallScore": self.overall_score,
            "overallGrade": self.overall_grade,
            "categories": [c.to_dict() for c in self.categories],
            "priorityFixes": [f.to_dict() for f in self.priority_fixes],
            "wastedSpend": self.wasted_spend.to_dict() if self.wasted_spend else None,
        }
