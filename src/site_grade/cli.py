"""CLI interface for site-grade."""

import json
import logging
import sys
from typing import Any

import click
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import __version__
from .config import get_settings
from .errors import ConfigError, FetchError, InvalidLead, InvalidReportId, ReportNotFound, Unauthorized
from .grading import INDUSTRY_AVG_SPEND, NO_AD_SPEND, SPEND_MIDPOINTS
from .scanner import scan_site
from .store import ReportStore


console = Console()
err_console = Console(stderr=True)

COMMANDS = ["scan", "report", "lead", "leads", "stats"]


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def load_settings():
    try:
        return get_settings()
    except ConfigError as e:
        raise click.ClickException(str(e))


def open_store() -> ReportStore:
    return ReportStore(load_settings().report_dir / "reports.sqlite3")


def grade_style(grade: str) -> str:
    """Rich style for a letter grade."""
    return {
        "A": "green",
        "B": "blue",
        "C": "yellow",
        "D": "orange1",
    }.get(grade[:1], "red")


def impact_icon(impact: str) -> str:
    return {"high": "✗", "medium": "⚠", "low": "ℹ"}.get(impact, "•")


def print_score_bar(score: int, grade: str, width: int = 20) -> Text:
    """Create a visual score bar."""
    filled = int((score / 100) * width)
    empty = width - filled
    color = grade_style(grade)

    bar = Text()
    bar.append("█" * filled, style=color)
    bar.append("░" * empty, style="dim")
    bar.append(f" {score}/100  {grade}", style=f"bold {color}")
    return bar


def print_report(report: dict[str, Any], verbose: bool = False) -> None:
    """Print a stored report to the console."""
    console.print()
    console.print(Panel(
        f"[bold]{report['finalUrl']}[/bold]\n"
        f"[dim]{report['businessType']} • scanned {report['scannedAt']} • id {report['id']}[/dim]",
        title="📈 SiteGrade",
        border_style="blue"
    ))

    console.print()
    console.print("  Overall: ", end="")
    console.print(print_score_bar(report["overallScore"], report["overallGrade"], width=25))
    console.print(f"  [italic]{report['verdict']}[/italic]")
    console.print()

    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Category", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Grade", justify="center")
    table.add_column("Failed")

    for cat in report["categories"]:
        failed = sum(1 for f in cat["findings"] if not f["pass"])
        style = grade_style(cat["grade"])
        table.add_row(
            cat["name"],
            f"[{style}]{cat['score']}[/]",
            f"[{style}]{cat['grade']}[/]",
            f"[red]{failed}[/red]" if failed else "[green]OK[/green]",
        )

    console.print(table)

    if verbose:
        console.print("\n[bold]All Findings:[/bold]\n")
        for cat in report["categories"]:
            console.print(f"  [bold cyan]{cat['name']}[/bold cyan]")
            for f in cat["findings"]:
                mark = "[green]✓[/green]" if f["pass"] else "[red]✗[/red]"
                console.print(f"    {mark} {f['label']} [dim]({f['impact']})[/dim]")
                console.print(f"      [dim]{f['detail']}[/dim]")

    fixes = report["priorityFixes"]
    if fixes:
        console.print("\n[bold]🎯 Priority Fixes:[/bold]\n")
        for i, fix in enumerate(fixes, 1):
            console.print(
                f"  {i}. {impact_icon(fix['impact'])} [bold]{fix['label']}[/bold] "
                f"[dim]({fix['impact']} impact, {fix['effort']} fix)[/dim]"
            )
            console.print(f"     [cyan]{fix['detail']}[/cyan]")
            console.print()

    if report.get("wastedSpendVerdict"):
        console.print(Panel(report["wastedSpendVerdict"], title="💸 Wasted Ad Spend", border_style="red"))

    competitors = report.get("competitors")
    if competitors:
        comp_table = Table(box=box.SIMPLE, title=f"Competitors: {competitors['searchQuery']}")
        comp_table.add_column("Business")
        comp_table.add_column("Rating", justify="right")
        comp_table.add_column("Reviews", justify="right")
        for c in competitors["competitors"]:
            comp_table.add_row(c["name"], f"{c['rating']:.1f}", str(c["reviewCount"]))
        console.print(comp_table)

    console.print("[dim]─" * 50 + "[/dim]")
    console.print(f"[dim]site-grade v{__version__}[/dim]")
    console.print()


@click.group(invoke_without_command=True)
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
@click.pass_context
@click.version_option(version=__version__)
def cli(ctx, verbose: bool):
    """SiteGrade - how well does a website turn ad clicks into leads?

    \b
    Quick start:
        site-grade scan example.com --business-type Plumbing
        site-grade report 3f9c2a1b7d4e

    \b
    Commands:
        scan    Grade a website
        report  Show a saved report
        lead    Record a consultation request for a saved report
        leads   List consultation requests (needs the stats token)
        stats   Show scan and lead statistics (needs the stats token)

    \b
    Use -v before the command for debug logging:
        site-grade -v scan example.com
    """
    setup_logging(verbose)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument("url")
@click.option("-b", "--business-type", default="Other", show_default=True,
              help=f"Trade, e.g. {', '.join(list(INDUSTRY_AVG_SPEND)[:4])}")
@click.option("-s", "--ad-spend", type=click.Choice([*SPEND_MIDPOINTS, NO_AD_SPEND]),
              default=None, help="Monthly ad spend bracket (omit to use the trade average)")
@click.option("--save/--no-save", default=True, help="Store the report for 30 days")
@click.option("--all", "show_all", is_flag=True, help="Show every finding, not just the fixes")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
def scan(url: str, business_type: str, ad_spend: str | None, save: bool, show_all: bool,
         json_output: bool, verbose: bool):
    """Grade a website's ability to convert ad traffic.

    \b
    Examples:
        site-grade scan acmeplumbing.com -b Plumbing
        site-grade scan acmeplumbing.com -b Plumbing -s '$1,000-$2,500'
        site-grade scan acmeplumbing.com --json
    """
    if verbose:
        setup_logging(True)
    settings = load_settings()
    store = open_store() if save else None
    try:
        with console.status(f"[bold blue]Scanning {url}...[/bold blue]"):
            report = scan_site(url, business_type, ad_spend, settings=settings, store=store)
    except FetchError as e:
        err_console.print(f"[red]Scan failed:[/red] {e}")
        sys.exit(1)
    finally:
        if store is not None:
            store.close()

    if json_output:
        click.echo(json.dumps(report, indent=2))
    else:
        print_report(report, verbose=show_all)


@cli.command()
@click.argument("report_id")
@click.option("--all", "show_all", is_flag=True, help="Show every finding, not just the fixes")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def report(report_id: str, show_all: bool, json_output: bool):
    """Show a saved report."""
    try:
        with open_store() as store:
            data = store.get(report_id)
    except (InvalidReportId, ReportNotFound) as e:
        err_console.print(f"[red]{e}[/red]")
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(data, indent=2))
    else:
        print_report(data, verbose=show_all)


@cli.command()
@click.argument("report_id")
@click.option("--name", required=True, help="Who is asking for the consultation")
@click.option("--email", required=True, help="Where to reach them")
@click.option("--phone", default=None, help="Optional phone number")
def lead(report_id: str, name: str, email: str, phone: str | None):
    """Record a consultation request against a saved report.

    \b
    Example:
        site-grade lead 3f9c2a1b7d4e --name "Jane Doe" --email jane@example.com
    """
    try:
        with open_store() as store:
            data = store.get(report_id)
            store.record_lead(data, name, email, phone)
    except (InvalidReportId, ReportNotFound, InvalidLead) as e:
        err_console.print(f"[red]{e}[/red]")
        sys.exit(1)

    console.print(
        f"[green]✓[/green] Lead recorded for {data['finalUrl']} ({data['overallGrade']}): "
        f"{name.strip()} <{email.strip()}>"
    )


@cli.command()
@click.option("--token", prompt=True, hide_input=True, help="Stats token")
@click.option("--limit", default=20, show_default=True, type=click.IntRange(min=1), help="How many to show")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def leads(token: str, limit: int, json_output: bool):
    """List recent consultation requests."""
    try:
        with open_store() as store:
            rows = store.get_leads(token, load_settings().stats_token, limit=limit)
    except Unauthorized:
        err_console.print("[red]Unauthorized[/red]")
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(rows, indent=2))
        return

    if not rows:
        console.print("[dim]No consultation requests yet.[/dim]")
        return

    table = Table(box=box.SIMPLE, show_header=True, header_style="bold", title="Consultation requests")
    table.add_column("When", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Email")
    table.add_column("Phone")
    table.add_column("Report")
    for row in rows:
        table.add_row(row["createdAt"][:16], row["name"], row["email"], row["phone"] or "-", row["reportId"])
    console.print(table)


@cli.command()
@click.option("--token", prompt=True, hide_input=True, help="Stats token")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def stats(token: str, json_output: bool):
    """Show scan and lead statistics."""
    try:
        with open_store() as store:
            data = store.get_stats(token, load_settings().stats_token)
    except Unauthorized:
        err_console.print("[red]Unauthorized[/red]")
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(data, indent=2))
        return

    table = Table(box=box.SIMPLE, show_header=True, header_style="bold", title="Scans by trade")
    table.add_column("Trade", style="cyan")
    table.add_column("Scans", justify="right")
    table.add_column("Leads", justify="right")
    table.add_column("Conversion", justify="right")
    for trade, scans in data["scans"]["byType"].items():
        table.add_row(
            trade,
            str(scans),
            str(data["leads"]["byType"].get(trade, 0)),
            f"{data['conversion']['byType'][trade]:.0%}",
        )
    console.print(table)
    console.print(
        f"  Total: {data['scans']['total']} scans, {data['leads']['total']} leads "
        f"({data['conversion']['overall']:.0%})"
    )
    grades = ", ".join(f"{g}: {n}" for g, n in sorted(data["scans"]["byGrade"].items()))
    if grades:
        console.print(f"  Grades: {grades}")


# Convenience: allow `site-grade URL` as shortcut for `site-grade scan URL`
def main():
    """Entry point that handles both `site-grade URL` and `site-grade scan URL`."""
    args = sys.argv[1:]

    # If the first non-option arg looks like a URL (not a command), insert 'scan' before it
    for i, arg in enumerate(args):
        if arg.startswith('-'):
            continue
        if arg not in COMMANDS and ('.' in arg or arg == 'localhost'):
            sys.argv.insert(i + 1, 'scan')
        break

    cli()


if __name__ == "__main__":
    main()
