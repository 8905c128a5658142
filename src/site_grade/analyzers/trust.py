"""Trust & Credibility analyzer."""

from ..models import CategoryResult, Finding, Impact
from ..page import ParsedPage

NAME = "Trust & Credibility"

MIN_PROJECT_PHOTOS = 3


def _photos_detail(page: ParsedPage, enough: bool) -> str:
    if enough:
        return (
            f"Your site has {page.image_count} images and they look like real project photos, "
            "not stock images. Showing your actual work is one of the best ways to win trust."
        )
    if page.image_count < MIN_PROJECT_PHOTOS:
        plural = "" if page.image_count == 1 else "s"
        return (
            f"Your site only has {page.image_count} image{plural}. Add photos of your real "
            "work: before and after shots, your team on the job, completed projects. "
            "Homeowners want to see what they're paying for."
        )
    return (
        "Your images look like stock photos. Homeowners can tell the difference. Replace them "
        "with photos of your actual work, your crew, and your trucks."
    )


def analyze_trust(page: ParsedPage) -> CategoryResult:
    """Check testimonials, reviews, credentials, about page and real photos."""
    findings: list[Finding] = []

    findings.append(Finding(
        label="Customer testimonials",
        passed=page.has_testimonials,
        detail=(
            "Your site includes customer testimonials. Nothing sells a home service business "
            "like hearing from happy customers."
            if page.has_testimonials else
            "We didn't find any customer testimonials on your site. Homeowners want to hear "
            "from other homeowners before they hire you. Even 2-3 short quotes make a big "
            "difference."
        ),
        impact=Impact.HIGH,
    ))

    findings.append(Finding(
        label="Review platform linked",
        passed=page.has_reviews,
        detail=(
            "Your site links to or references review platforms like Google or Yelp. "
            "Third-party reviews carry more weight than anything you say about yourself."
            if page.has_reviews else
            "We didn't find any links to review sites like Google, Yelp, or the BBB. Linking "
            "to your reviews shows you have nothing to hide and builds instant trust."
        ),
        impact=Impact.HIGH,
    ))

    findings.append(Finding(
        label="License and insurance mentioned",
        passed=page.has_license,
        detail=(
            "Your site mentions that you're licensed, insured, or bonded. Homeowners look for "
            "this because it tells them you're a legitimate operation."
            if page.has_license else
            "We didn't see any mention of licensing, insurance, or bonding on your site. "
            "Homeowners worry about liability. Mentioning your credentials puts their mind "
            "at ease."
        ),
        impact=Impact.MEDIUM,
    ))

    findings.append(Finding(
        label="About page exists",
        passed=page.has_about_page,
        detail=(
            "You have an About page. Homeowners want to know who they're letting into their "
            "house, and an About page with your story and team photos makes you feel real."
            if page.has_about_page else
            "We didn't find a link to an About page. Homeowners want to know who's behind the "
            "business. Adding a page with your story, your team, and how long you've been "
            "around builds confidence."
        ),
        impact=Impact.MEDIUM,
    ))

    enough_photos = page.has_real_photos and page.image_count >= MIN_PROJECT_PHOTOS
    findings.append(Finding(
        label="Real project photos",
        passed=enough_photos,
        detail=_photos_detail(page, enough_photos),
        impact=Impact.MEDIUM,
    ))

    return CategoryResult(name=NAME, findings=findings)
