"""Lead Capture analyzer."""

from ..models import CategoryResult, Finding, Impact
from ..page import ParsedPage

NAME = "Lead Capture"


def analyze_lead_capture(page: ParsedPage) -> CategoryResult:
    """Check how easy it is for a visitor to call or send an inquiry."""
    findings: list[Finding] = []

    # Phone number
    phone_count = len(page.phone_numbers)
    found = "a phone number" if phone_count == 1 else f"{phone_count} phone numbers"
    findings.append(Finding(
        label="Phone number visible",
        passed=phone_count > 0,
        detail=(
            f"We found {found} on your site. Customers can see how to call you right away."
            if phone_count > 0 else
            "We didn't find a phone number on your homepage. Most home service customers "
            "want to call, so make that number big and obvious."
        ),
        impact=Impact.HIGH,
    ))

    # Click-to-call
    findings.append(Finding(
        label="Click-to-call phone link",
        passed=page.has_click_to_call,
        detail=(
            "Your phone number is set up as a tap-to-call link. When someone taps it on their "
            "phone, it dials automatically. That's exactly what you want."
            if page.has_click_to_call else
            "Your phone number isn't set up as a tap-to-call link. On a phone, customers have "
            "to memorize the number and switch to their dialer. Adding a tap-to-call link is "
            "a quick win."
        ),
        impact=Impact.HIGH,
    ))

    # Contact form
    forms = "a contact form" if page.form_count == 1 else f"{page.form_count} forms"
    findings.append(Finding(
        label="Contact form present",
        passed=page.form_count > 0,
        detail=(
            f"Your site has {forms}. Customers who don't want to call can still reach you."
            if page.form_count > 0 else
            "There's no contact form on your homepage. Some customers prefer filling out a "
            "form over calling, especially after hours. You're missing those leads."
        ),
        impact=Impact.HIGH,
    ))

    # CTA above the fold
    findings.append(Finding(
        label="Call-to-action above the fold",
        passed=page.has_cta_above_fold,
        detail=(
            "You have a clear call-to-action visible as soon as the page loads. Visitors know "
            "what to do next without scrolling."
            if page.has_cta_above_fold else
            "There's no clear call-to-action visible when the page first loads. Visitors see "
            "your site but aren't told what to do next. Add a \"Get a Free Quote\" or "
            "\"Call Now\" button near the top."
        ),
        impact=Impact.MEDIUM,
    ))

    # Multiple conversion points
    enough_ctas = page.cta_count >= 2
    findings.append(Finding(
        label="Multiple conversion points",
        passed=enough_ctas,
        detail=(
            f"Your site has {page.cta_count} calls-to-action spread across the page. That "
            "gives customers multiple chances to reach out as they scroll."
            if enough_ctas else
            f"Your site only has {'zero' if page.cta_count == 0 else 'one'} call-to-action. "
            "Add more throughout the page so customers can contact you wherever they are on "
            "the page."
        ),
        impact=Impact.MEDIUM,
    ))

    return CategoryResult(name=NAME, findings=findings)
