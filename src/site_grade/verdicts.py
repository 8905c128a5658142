"""Plain-English verdicts for a graded report."""

from .models import WastedSpend

OVERALL_VERDICTS = {
    "A": "Your site is doing its job. Nice work.",
    "B": "Solid foundation, but you're leaving leads on the table.",
    "C": "Your site is costing you business. Fixable, but don't wait.",
    "D": "Your site is letting leads slip through your fingers.",
}
FAILING_VERDICT = (
    "Your site is actively working against you. Every day this stays live, "
    "you're losing money."
)

ABANDONMENT_NOTE = (
    "Google data shows 53% of mobile visitors abandon sites that take over "
    "3 seconds to load."
)


def overall_verdict(grade: str) -> str:
    return OVERALL_VERDICTS.get(grade[:1], FAILING_VERDICT)


def wasted_spend_verdict(spend: WastedSpend, business_type: str) -> str:
    low = f"{spend.low:,}"
    high = f"{spend.high:,}"
    monthly = f"{spend.monthly_spend:,}"

    if spend.is_estimated:
        return (
            f"The average {business_type.lower()} business spends ~${monthly}/mo on ads "
            f"(LocaliQ, 2025). Based on your site's score, we estimate "
            f"${low}-${high}/mo is lost to visitors who leave before converting. "
            f"{ABANDONMENT_NOTE}"
        )

    return (
        f"At ${monthly}/mo in ad spend, we estimate ${low}-${high}/mo "
        f"is wasted on visitors who leave before converting. "
        f"{ABANDONMENT_NOTE}"
    )
