import unittest

from site_grade.grading import (
    CATEGORY_WEIGHTS,
    FAILING_COLOR,
    Grader,
    collect_priority_fixes,
    estimate_waste,
    grade_color,
    grade_report,
    score_to_grade,
)
from site_grade.models import Effort, Impact

from .factories import category, finding, scored


SCENARIO = [
    scored("Mobile Experience", 80),
    scored("Lead Capture", 60),
    scored("Trust & Credibility", 90),
    scored("Page Speed", 70),
    scored("SEO Basics", 50),
    scored("Ad Landing Readiness", 40),
]


class OverallScoreTests(unittest.TestCase):
    def test_weighted_scenario(self):
        report = grade_report(SCENARIO)
        self.assertEqual(report.overall_score, 68)
        self.assertEqual(report.overall_grade, "D+")

    def test_categories_keep_input_order(self):
        report = grade_report(SCENARIO)
        self.assertEqual([c.name for c in report.categories], [c.name for c in SCENARIO])
        self.assertEqual([c.score for c in report.categories], [80, 60, 90, 70, 50, 40])

    def test_unknown_categories_weigh_nothing(self):
        report = grade_report([scored("Something Else", 100), scored("Lead Capture", 40)])
        self.assertEqual(report.overall_score, 40)

    def test_only_zero_weight_categories_scores_zero(self):
        report = grade_report([scored("Content Quality", 100)])
        self.assertEqual(report.overall_score, 0)
        self.assertEqual(report.overall_grade, "F")

    def test_empty_report(self):
        report = grade_report([])
        self.assertEqual(report.overall_score, 0)
        self.assertEqual(report.overall_grade, "F")
        self.assertEqual(report.priority_fixes, ())

    def test_renormalizes_over_present_weights(self):
        # 0.25 * 100 + 0.15 * 50 over 0.40
        report = grade_report([scored("Mobile Experience", 100), scored("Page Speed", 50)])
        self.assertEqual(report.overall_score, 81)

    def test_score_in_range(self):
        for score in (0, 1, 59, 60, 99, 100):
            report = grade_report([scored(name, score) for name in CATEGORY_WEIGHTS])
            self.assertEqual(report.overall_score, score)

    def test_deterministic(self):
        categories = [
            category("Lead Capture", finding("a", False), finding("b", True, Impact.LOW)),
            category("SEO Basics", finding("c", False, Impact.MEDIUM)),
        ]
        first = grade_report(categories, "$500-$1,000", "Roofing")
        second = grade_report(categories, "$500-$1,000", "Roofing")
        self.assertEqual(first, second)
        self.assertEqual(first.to_dict(), second.to_dict())


class LetterGradeTests(unittest.TestCase):
    def test_thresholds(self):
        cases = {
            100: "A+", 97: "A+", 96: "A", 93: "A", 92: "A-", 90: "A-",
            89: "B+", 87: "B+", 86: "B", 83: "B", 82: "B-", 80: "B-",
            79: "C+", 77: "C+", 76: "C", 73: "C", 72: "C-", 70: "C-",
            69: "D+", 67: "D+", 66: "D", 63: "D", 62: "D-", 60: "D-",
            59: "F", 0: "F",
        }
        for score, grade in cases.items():
            self.assertEqual(score_to_grade(score), grade, score)

    def test_monotonic(self):
        order = ["F", "D-", "D", "D+", "C-", "C", "C+", "B-", "B", "B+", "A-", "A", "A+"]
        ranks = [order.index(score_to_grade(s)) for s in range(101)]
        self.assertEqual(ranks, sorted(ranks))

    def test_colors_follow_letter(self):
        self.assertEqual(grade_color("A+"), "#22c55e")
        self.assertEqual(grade_color("B-"), "#3b82f6")
        self.assertEqual(grade_color("C"), "#eab308")
        self.assertEqual(grade_color("D+"), "#f97316")
        self.assertEqual(grade_color("F"), FAILING_COLOR)

    def test_graded_category_carries_grade_and_color(self):
        graded = grade_report([scored("Lead Capture", 85)]).categories[0]
        self.assertEqual(graded.grade, "B")
        self.assertEqual(graded.grade_color, "#3b82f6")


class PriorityFixTests(unittest.TestCase):
    def test_only_failed_findings_highest_impact_first(self):
        categories = [
            category(
                "Lead Capture",
                finding("low one", False, Impact.LOW),
                finding("passing", True, Impact.HIGH),
                finding("medium one", False, Impact.MEDIUM),
            ),
            category("SEO Basics", finding("high one", False, Impact.HIGH)),
        ]
        fixes = collect_priority_fixes(categories)
        self.assertEqual([f.label for f in fixes], ["high one", "medium one", "low one"])
        self.assertEqual([f.effort for f in fixes], [Effort.QUICK, Effort.MEDIUM, Effort.INVOLVED])

    def test_ties_keep_input_order(self):
        categories = [
            category("Mobile Experience", finding("m1", False), finding("m2", False)),
            category("Lead Capture", finding("l1", False)),
            category("Trust & Credibility", finding("t1", False)),
        ]
        fixes = collect_priority_fixes(categories)
        self.assertEqual([f.label for f in fixes], ["m1", "m2", "l1", "t1"])

    def test_fixes_include_zero_weight_categories(self):
        categories = [category("Content Quality", finding("headline", False, Impact.MEDIUM))]
        report = grade_report(categories)
        self.assertEqual([f.label for f in report.priority_fixes], ["headline"])

    def test_top_fixes_truncates(self):
        categories = [category("Lead Capture", *[finding(f"f{i}", False) for i in range(8)])]
        report = grade_report(categories)
        self.assertEqual(len(report.priority_fixes), 8)
        self.assertEqual([f.label for f in report.top_fixes(5)], ["f0", "f1", "f2", "f3", "f4"])


class WastedSpendTests(unittest.TestCase):
    def test_no_ad_spend(self):
        self.assertIsNone(estimate_waste(50, "none", "HVAC"))
        self.assertIsNone(estimate_waste(50, "None", "HVAC"))

    def test_known_bracket(self):
        waste = estimate_waste(68, "$1,000-$2,500", "Plumbing")
        self.assertEqual(waste.monthly_spend, 1750)
        self.assertFalse(waste.is_estimated)
        self.assertEqual((waste.low, waste.high), (314, 470))

    def test_trade_average_when_no_bracket(self):
        waste = estimate_waste(50, None, "HVAC")
        self.assertTrue(waste.is_estimated)
        self.assertEqual(waste.monthly_spend, 2600)
        self.assertEqual((waste.low, waste.high), (728, 1092))

    def test_empty_bracket_uses_trade_average(self):
        self.assertEqual(estimate_waste(50, "", "HVAC").monthly_spend, 2600)

    def test_blank_bracket_uses_trade_average(self):
        waste = estimate_waste(50, "   ", "HVAC")
        self.assertEqual(waste, estimate_waste(50, None, "HVAC"))
        self.assertTrue(waste.is_estimated)

    def test_bracket_whitespace_is_ignored(self):
        self.assertEqual(estimate_waste(68, " $1,000-$2,500 ", "Plumbing").monthly_spend, 1750)
        self.assertIsNone(estimate_waste(68, " none ", "Plumbing"))

    def test_trade_lookup_is_case_insensitive(self):
        self.assertEqual(estimate_waste(50, None, "hvac").monthly_spend, 2600)

    def test_unknown_trade_uses_default(self):
        self.assertEqual(estimate_waste(50, None, "Chimney Sweep").monthly_spend, 1500)

    def test_unknown_bracket(self):
        self.assertIsNone(estimate_waste(50, "$1M+", "HVAC"))

    def test_perfect_score_wastes_nothing(self):
        waste = estimate_waste(100, "$5,000+", "Roofing")
        self.assertEqual((waste.low, waste.high), (0, 0))

    def test_low_never_exceeds_high(self):
        for score in range(0, 101, 7):
            waste = estimate_waste(score, "$500-$1,000", "Other")
            self.assertLessEqual(waste.low, waste.high)

    def test_report_carries_estimate(self):
        report = grade_report(SCENARIO, "$1,000-$2,500", "Plumbing")
        self.assertEqual(report.wasted_spend.to_dict(), {
            "low": 314, "high": 470, "monthlySpend": 1750, "isEstimated": False,
        })


class GraderTests(unittest.TestCase):
    def test_injected_weights(self):
        grader = Grader(weights={"Lead Capture": 1.0})
        report = grader.grade([scored("Lead Capture", 40), scored("Mobile Experience", 100)])
        self.assertEqual(report.overall_score, 40)

    def test_injected_spend_tables(self):
        grader = Grader(spend_midpoints={"small": 100}, industry_spend={"Other": 1000})
        self.assertEqual(grader.estimate_waste(0, "small", "x").monthly_spend, 100)
        self.assertEqual(grader.estimate_waste(0, None, "x").monthly_spend, 1000)
        self.assertIsNone(grader.estimate_waste(0, "$5,000+", "x"))

    def test_tables_are_read_only_copies(self):
        weights = {"Lead Capture": 1.0}
        grader = Grader(weights=weights)
        weights["Lead Capture"] = 0.0
        self.assertEqual(grader.weight_for("Lead Capture"), 1.0)
        with self.assertRaises(TypeError):
            grader.weights["Lead Capture"] = 0.5

    def test_missing_weight_is_zero(self):
        self.assertEqual(Grader().weight_for("Content Quality"), 0.0)


if __name__ == "__main__":
    unittest.main()
