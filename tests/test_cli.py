import json
import sys
import tempfile
import unittest
from unittest import mock

from click.testing import CliRunner

from site_grade import cli as cli_module
from site_grade.cli import cli, main
from site_grade.config import Settings
from site_grade.errors import FetchError
from site_grade.store import ReportStore


REPORT = {
    "id": "3f9c2a1b7d4e",
    "url": "https://acmeplumbing.com",
    "finalUrl": "https://acmeplumbing.com/",
    "businessType": "Plumbing",
    "adSpend": "$1,000-$2,500",
    "scannedAt": "2025-10-09T12:00:00+00:00",
    "overallScore": 68,
    "overallGrade": "D+",
    "verdict": "Your site is letting leads slip through your fingers.",
    "wastedSpend": {"low": 314, "high": 470, "monthlySpend": 1750, "isEstimated": False},
    "wastedSpendVerdict": "At $1,750/mo in ad spend, we estimate $314-$470/mo is wasted.",
    "categories": [
        {
            "name": "Lead Capture",
            "score": 60,
            "grade": "D-",
            "gradeColor": "#f97316",
            "findings": [
                {"label": "Contact form present", "pass": False, "detail": "Add a form.", "impact": "high"},
                {"label": "Phone number visible", "pass": True, "detail": "Found one.", "impact": "high"},
            ],
        },
    ],
    "priorityFixes": [
        {"label": "Contact form present", "detail": "Add a form.", "effort": "quick", "impact": "high"},
    ],
    "pageTitle": "Acme Plumbing",
    "competitors": {
        "searchQuery": "Plumbing in Naples, FL",
        "competitors": [
            {"name": "Gulf Coast Plumbing", "rating": 4.9, "reviewCount": 310, "mapsUrl": ""},
        ],
    },
}


class CliTestCase(unittest.TestCase):
    def setUp(self):
        self.runner = CliRunner()
        self.tmp = tempfile.TemporaryDirectory()
        self.settings = Settings(_env_file=None, report_dir=self.tmp.name, stats_token="secret")
        patcher = mock.patch.object(cli_module, "load_settings", return_value=self.settings)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self.tmp.cleanup)

    def seed(self, report=REPORT):
        with cli_module.open_store() as store:
            store.save(report)


class ScanCommandTests(CliTestCase):
    def test_scan_json(self):
        with mock.patch.object(cli_module, "scan_site", return_value=REPORT) as scan_site:
            result = self.runner.invoke(cli, ["scan", "acmeplumbing.com", "-b", "Plumbing", "--json"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(json.loads(result.stdout[result.stdout.index("{"):])["overallGrade"], "D+")
        args = scan_site.call_args
        self.assertEqual(args.args, ("acmeplumbing.com", "Plumbing", None))
        self.assertIsInstance(args.kwargs["store"], ReportStore)

    def test_scan_no_save(self):
        with mock.patch.object(cli_module, "scan_site", return_value=REPORT) as scan_site:
            result = self.runner.invoke(cli, ["scan", "acmeplumbing.com", "--no-save", "-s", "none"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIsNone(scan_site.call_args.kwargs["store"])
        self.assertEqual(scan_site.call_args.args[2], "none")

    def test_scan_rich_output(self):
        with mock.patch.object(cli_module, "scan_site", return_value=REPORT):
            result = self.runner.invoke(cli, ["scan", "acmeplumbing.com", "--all"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Priority Fixes", result.output)
        self.assertIn("Contact form present", result.output)
        self.assertIn("Gulf Coast Plumbing", result.output)

    def test_rejects_unknown_bracket(self):
        result = self.runner.invoke(cli, ["scan", "acmeplumbing.com", "-s", "$1M"])
        self.assertEqual(result.exit_code, 2)

    def test_fetch_failure(self):
        error = FetchError("https://acmeplumbing.com", "HTTP 503")
        with mock.patch.object(cli_module, "scan_site", side_effect=error):
            result = self.runner.invoke(cli, ["scan", "acmeplumbing.com"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Scan failed", result.output)

    def test_verbose_after_scan(self):
        with mock.patch.object(cli_module, "scan_site", return_value=REPORT), \
                mock.patch.object(cli_module, "setup_logging") as setup_logging:
            result = self.runner.invoke(cli, ["scan", "acmeplumbing.com", "-v", "--json"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(setup_logging.call_args_list, [mock.call(False), mock.call(True)])

    def test_verbose_before_scan(self):
        with mock.patch.object(cli_module, "scan_site", return_value=REPORT), \
                mock.patch.object(cli_module, "setup_logging") as setup_logging:
            result = self.runner.invoke(cli, ["-v", "scan", "acmeplumbing.com", "--json"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(setup_logging.call_args_list, [mock.call(True)])


class ReportCommandTests(CliTestCase):
    def test_report_json(self):
        self.seed()
        result = self.runner.invoke(cli, ["report", "3f9c2a1b7d4e", "--json"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(json.loads(result.output), REPORT)

    def test_report_missing(self):
        result = self.runner.invoke(cli, ["report", "aaaaaaaaaaaa"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("not found", result.output)

    def test_report_invalid_id(self):
        result = self.runner.invoke(cli, ["report", "../secrets"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Invalid report ID", result.output)


class LeadAndStatsTests(CliTestCase):
    def test_lead_then_stats(self):
        self.seed()
        with cli_module.open_store() as store:
            store.record_scan("Plumbing", "D+", "$1,000-$2,500")

        result = self.runner.invoke(cli, [
            "lead", "3f9c2a1b7d4e", "--name", "Jane Doe", "--email", "jane@example.com", "--phone", "239-555-0142",
        ])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Lead recorded", result.output)
        self.assertIn("jane@example.com", result.output)

        result = self.runner.invoke(cli, ["stats", "--token", "secret", "--json"])
        self.assertEqual(result.exit_code, 0, result.output)
        stats = json.loads(result.output)
        self.assertEqual(stats["leads"]["byType"], {"Plumbing": 1})
        self.assertEqual(stats["conversion"]["overall"], 1.0)

    def test_stats_table(self):
        with cli_module.open_store() as store:
            store.record_scan("HVAC", "B", None)
        result = self.runner.invoke(cli, ["stats", "--token", "secret"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("HVAC", result.output)

    def test_stats_wrong_token(self):
        result = self.runner.invoke(cli, ["stats", "--token", "nope"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Unauthorized", result.output)

    def test_lead_unknown_report(self):
        result = self.runner.invoke(cli, ["lead", "aaaaaaaaaaaa", "--name", "Jane Doe", "--email", "jane@example.com"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Report not found", result.output)

    def test_lead_requires_email(self):
        self.seed()
        result = self.runner.invoke(cli, ["lead", "3f9c2a1b7d4e", "--name", "Jane Doe"])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("--email", result.output)
        with cli_module.open_store() as store:
            self.assertEqual(store.get_leads("secret", "secret"), [])

    def test_lead_requires_name(self):
        self.seed()
        result = self.runner.invoke(cli, ["lead", "3f9c2a1b7d4e", "--email", "jane@example.com"])
        self.assertEqual(result.exit_code, 2)

    def test_lead_invalid_email(self):
        self.seed()
        result = self.runner.invoke(cli, ["lead", "3f9c2a1b7d4e", "--name", "Jane Doe", "--email", "jane"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Invalid email address", result.output)

    def test_leads_json(self):
        self.seed()
        self.runner.invoke(cli, ["lead", "3f9c2a1b7d4e", "--name", "Jane Doe", "--email", "jane@example.com"])
        result = self.runner.invoke(cli, ["leads", "--token", "secret", "--json"])
        self.assertEqual(result.exit_code, 0, result.output)
        rows = json.loads(result.output)
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["reportId"], "3f9c2a1b7d4e")
        self.assertEqual((rows[0]["name"], rows[0]["email"], rows[0]["phone"]), ("Jane Doe", "jane@example.com", None))

    def test_leads_table(self):
        self.seed()
        self.runner.invoke(cli, ["lead", "3f9c2a1b7d4e", "--name", "Jane Doe", "--email", "jane@example.com"])
        result = self.runner.invoke(cli, ["leads", "--token", "secret"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Consultation requests", result.output)

    def test_leads_empty(self):
        result = self.runner.invoke(cli, ["leads", "--token", "secret"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("No consultation requests yet", result.output)

    def test_leads_wrong_token(self):
        result = self.runner.invoke(cli, ["leads", "--token", "nope"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Unauthorized", result.output)


class MainTests(unittest.TestCase):
    def test_bare_url_runs_scan(self):
        with mock.patch.object(sys, "argv", ["site-grade", "acmeplumbing.com"]), \
                mock.patch.object(cli_module, "cli") as fake_cli:
            main()
            self.assertEqual(sys.argv[1:], ["scan", "acmeplumbing.com"])
        fake_cli.assert_called_once_with()

    def test_bare_url_after_verbose_flag(self):
        with mock.patch.object(sys, "argv", ["site-grade", "-v", "acmeplumbing.com"]), \
                mock.patch.object(cli_module, "cli"):
            main()
            self.assertEqual(sys.argv[1:], ["-v", "scan", "acmeplumbing.com"])

    def test_commands_untouched(self):
        with mock.patch.object(sys, "argv", ["site-grade", "report", "3f9c2a1b7d4e"]), \
                mock.patch.object(cli_module, "cli"):
            main()
            self.assertEqual(sys.argv[1:], ["report", "3f9c2a1b7d4e"])


if __name__ == "__main__":
    unittest.main()
