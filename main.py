"""
DesertWatch - Command Line Interface

Runs the agent workflows against an in-process dashboard session and renders the
trace, plan and views with rich formatting.

Usage Examples:
    # Full discovery → strategy workflow
    python main.py workflow

    # Direct planner question (no question → interactive mode)
    python main.py ask "Where is dialysis capacity weakest?"
    python main.py ask

    # Intervention plan for one facility
    python main.py intervene gh-tth

    # Knowledge grid / deserts / audit views
    python main.py --near 9.40,-0.85 reports --region Northern --radius 150
    python main.py deserts
    python main.py audit --status warning

Environment Variables:
    OPENAI_API_KEY: Required for model calls
    OPENAI_MODEL:   Model for the JSON agents (default: gpt-4o-mini)
    SEARCH_MODEL:   Model used with web search (default: gpt-4o-mini)
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import List, Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from desertwatch.data.seed import AUDIT_LOG
from desertwatch.llm_errors import format_provider_error, is_rate_limit_error
from desertwatch.models import AgentStep, GeoPoint, GroundingLink
from desertwatch.session import DashboardSession
from desertwatch.views.grid import equipment_status_counts, filter_audit, filter_reports
from desertwatch.views.map_layer import is_severe
from desertwatch.workflow import run_agentic_workflow, run_intervention_protocol, run_query

console = Console()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

STATUS_STYLES = {"completed": "green", "active": "yellow", "error": "red", "pending": "dim"}
AUDIT_STYLES = {"success": "green", "warning": "yellow", "info": "cyan"}


# ── CLI Formatting ──────────────────────────────────────────────────────────


def display_steps(steps: List[AgentStep]) -> None:
    """Agent trace as a table, one row per step."""
    if not steps:
        return
    table = Table(title="🧠 Agent Trace", show_header=True, header_style="bold cyan")
    table.add_column("Time", style="dim")
    table.add_column("Agent", style="bold")
    table.add_column("Action")
    table.add_column("Status")
    table.add_column("ms", justify="right", style="dim")
    table.add_column("Description", style="dim")

    for step in steps:
        style = STATUS_STYLES.get(step.status, "")
        ms = f"{step.metrics.execution_time:.0f}" if step.metrics else ""
        table.add_row(
            step.timestamp,
            step.agent_name,
            step.action,
            f"[{style}]{step.status}[/{style}]",
            ms,
            step.description or "",
        )
    console.print(table)


def display_grounding(links: List[GroundingLink], max_display: int = 10) -> None:
    if not links:
        return

    console.print("\n[bold yellow]📚 Grounding:[/bold yellow]")
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("URI", style="cyan")
    for i, link in enumerate(links[:max_display], 1):
        table.add_row(str(i), link.title or link.uri, link.uri)
    console.print(table)

    if len(links) > max_display:
        console.print(f"[dim]... and {len(links) - max_display} more links[/dim]")


def display_run(session: DashboardSession, ok: bool, elapsed: float) -> None:
    """Trace, plan panel and grounding for a finished run."""
    display_steps(session.steps)

    if session.plan:
        console.print(Panel(Markdown(session.plan), title="💡 Plan", border_style="green"))

    if not ok:
        err = session.last_error
        hint = "OpenAI rate limit reached; wait 20-30 seconds and retry." if err and is_rate_limit_error(err) else ""
        console.print(
            Panel(
                f"[bold red]Error:[/bold red] {format_provider_error(err) if err else 'unknown'}\n"
                f"[dim]{hint}[/dim]",
                title="❌ Run Failed",
                border_style="red",
            )
        )

    display_grounding(session.grounding_links)
    console.print(f"[dim]{len(session.steps)} steps in {elapsed:.2f}s[/dim]")


# ── Commands ────────────────────────────────────────────────────────────────


def cmd_workflow(session: DashboardSession, args: argparse.Namespace) -> int:
    with console.status("[bold green]🤔 Running agent workflow...", spinner="dots"):
        start = time.time()
        ok = run_agentic_workflow(session, args.topic) if args.topic else run_agentic_workflow(session)
    display_run(session, ok, time.time() - start)
    return 0 if ok else 1


def cmd_ask_once(session: DashboardSession, question: str) -> int:
    console.print(f"\n[bold cyan]❓ Query:[/bold cyan] {question}\n")
    with console.status("[bold green]🤔 Processing...", spinner="dots"):
        start = time.time()
        result = run_query(session, question)
    if result is None:
        return 0
    display_run(session, result, time.time() - start)
    return 0 if result else 1


def interactive_mode(session: DashboardSession) -> int:
    """REPL over the direct query agent."""
    console.print(
        Panel(
            "[bold blue]DesertWatch Planner[/bold blue]\n"
            "[dim]Ask about facility gaps across the current reports.[/dim]\n"
            "[dim]Commands: 'quit', 'exit', or Ctrl+C to exit[/dim]",
            border_style="blue",
        )
    )
    count = 0
    while True:
        try:
            question = console.input("\n[bold blue]>[/bold blue] ").strip()
        except (EOFError, KeyboardInterrupt):
            break
        if not question:
            continue
        if question.lower() in ("quit", "exit", "q"):
            break
        cmd_ask_once(session, question)
        count += 1
    console.print(f"\n[dim]Goodbye! Processed {count} queries.[/dim]")
    return 0


def cmd_ask(session: DashboardSession, args: argparse.Namespace) -> int:
    if not args.question:
        return interactive_mode(session)
    return cmd_ask_once(session, " ".join(args.question))


def cmd_intervene(session: DashboardSession, args: argparse.Namespace) -> int:
    report = session.get_report(args.report_id)
    if report is None:
        console.print(f"[bold red]Unknown report id:[/bold red] {args.report_id}")
        return 2
    with console.status(f"[bold green]🚑 Intervention protocol for {report.facility_name}...", spinner="dots"):
        start = time.time()
        ok = run_intervention_protocol(session, report)
    display_run(session, ok, time.time() - start)
    return 0 if ok else 1


def cmd_reports(session: DashboardSession, args: argparse.Namespace) -> int:
    if args.radius is not None and session.user_location is None:
        console.print("[yellow]--radius ignored: no location set (use --near LAT,LNG)[/yellow]")
    reports = filter_reports(
        session.reports,
        search=args.search,
        region=args.region,
        radius_km=args.radius,
        origin=session.user_location,
    )
    table = Table(title=f"🏥 Knowledge Grid ({len(reports)})", header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Facility", style="bold")
    table.add_column("Region")
    table.add_column("Beds", justify="right")
    table.add_column("Equipment (op/lim/off)", justify="center")
    table.add_column("Gaps", style="dim")
    for r in reports:
        data = r.extracted_data
        counts = equipment_status_counts(r)
        table.add_row(
            r.id,
            r.facility_name,
            r.region,
            str(data.beds) if data else "-",
            f"{counts['Operational']}/{counts['Limited']}/{counts['Offline']}",
            ", ".join(data.gaps) if data else "",
        )
    console.print(table)
    return 0


def cmd_deserts(session: DashboardSession, args: argparse.Namespace) -> int:
    table = Table(title="🗺️ Medical Deserts", header_style="bold cyan")
    table.add_column("Region", style="bold")
    table.add_column("Severity", justify="right")
    table.add_column("Risk")
    table.add_column("Density")
    table.add_column("Primary gaps", style="dim")
    for d in session.deserts:
        style = "red" if is_severe(d) else "green"
        table.add_row(
            d.region,
            f"[{style}]{d.severity:g}[/{style}]",
            f"{d.predicted_risk:g}",
            d.population_density,
            ", ".join(d.primary_gaps),
        )
    console.print(table)
    return 0


def cmd_audit(session: DashboardSession, args: argparse.Namespace) -> int:
    table = Table(title="🔒 Audit Log", header_style="bold cyan")
    table.add_column("Time", style="dim")
    table.add_column("Event", style="bold")
    table.add_column("User")
    table.add_column("Status")
    for log in filter_audit(AUDIT_LOG, args.status):
        style = AUDIT_STYLES[log.status]
        table.add_row(log.timestamp, log.event, log.user, f"[{style}]{log.status}[/{style}]")
    console.print(table)
    return 0


# ── Main Entry Point ────────────────────────────────────────────────────────


def _lat_lng(raw: str) -> GeoPoint:
    try:
        lat, lng = (float(x) for x in raw.split(","))
        return GeoPoint(lat=lat, lng=lng)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected LAT,LNG, got {raw!r}") from e


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="DesertWatch multi-agent CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--near", type=_lat_lng, metavar="LAT,LNG", help="User location for radius and strategy")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("workflow", help="Run discovery → parse → verify → predict → strategize")
    p.add_argument("--topic", help="Discovery search topic")
    p.set_defaults(func=cmd_workflow)

    p = sub.add_parser("ask", help="Ask the planner a question (no question → interactive mode)")
    p.add_argument("question", nargs="*")
    p.set_defaults(func=cmd_ask)

    p = sub.add_parser("intervene", help="Run the intervention protocol for one report")
    p.add_argument("report_id")
    p.set_defaults(func=cmd_intervene)

    p = sub.add_parser("reports", help="Knowledge grid")
    p.add_argument("--search", default="")
    p.add_argument("--region", default="All")
    p.add_argument("--radius", type=float, help="Radius in km from --near")
    p.set_defaults(func=cmd_reports)

    p = sub.add_parser("deserts", help="Medical desert regions")
    p.set_defaults(func=cmd_deserts)

    p = sub.add_parser("audit", help="Audit log")
    p.add_argument("--status", default="all", choices=["all", "success", "warning", "info"])
    p.set_defaults(func=cmd_audit)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    session = DashboardSession()
    session.user_location = args.near
    return args.func(session, args)


if __name__ == "__main__":
    sys.exit(main())
