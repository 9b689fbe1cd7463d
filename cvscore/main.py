"""Command-line entry point for cvscore."""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from google.genai.errors import ClientError, ServerError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .cache import DEFAULT_CACHE_DIR, ScoreCache
from .composer import analyze_cv
from .cv_parser import load_cv, translate_cv
from .grader import TIMEOUT_SECONDS
from .llm import api_key, create_client
from .messages import msg
from .models import AtsScoreResponse, CvDocument, normalize_locale
from .scorer import SECTION_MAX

# Load environment variables
load_dotenv()

console = Console()

_PRIORITY_STYLES = {
    "critical": ("red", "Critical"),
    "recommended": ("yellow", "Recommended"),
    "optional": ("dim", "Optional"),
}


def _score_style(pct: int) -> str:
    if pct >= 80:
        return "bold green"
    if pct >= 50:
        return "yellow"
    return "red"


def display_overview(response: AtsScoreResponse) -> None:
    """Show the overall score, the rule-based score and the LLM grade."""
    style = _score_style(response.overall_score)
    lines = [f"[{style}]{response.overall_score}[/{style}] / 100"]
    if response.rule_score is not None and response.rule_score != response.overall_score:
        lines.append(f"[dim]Rule-based score: {response.rule_score}[/dim]")
    if response.llm_grade:
        lines.append(f"[bold]Overall impression:[/bold] {response.llm_grade}")
    console.print(Panel("\n".join(lines), title="ATS Score", border_style="blue"))
    console.print()


def display_breakdown(response: AtsScoreResponse, locale: str) -> None:
    """Display the per-section breakdown in a table."""
    table = Table(title="Section Breakdown", show_header=True, header_style="bold magenta")
    table.add_column("Section", style="white")
    table.add_column("Points", justify="right", style="cyan")
    table.add_column("Score", justify="center", width=7)
    table.add_column("Feedback", style="dim", max_width=60)

    earned = response.breakdown.model_dump(by_alias=True) if response.breakdown else {}
    for key, category in zip(SECTION_MAX, response.categories):
        style = _score_style(category.score)
        points = f"{earned.get(key, 0)}/{SECTION_MAX[key]}"
        feedback = category.feedback
        if len(feedback) > 60:
            feedback = feedback[:57] + "..."
        table.add_row(
            msg(locale, f"section.{key}"),
            points,
            f"[{style}]{category.score}%[/{style}]",
            escape(feedback),
        )

    console.print(table)
    console.print()


def display_suggestions(response: AtsScoreResponse) -> None:
    """Display suggestions grouped by priority."""
    if not response.suggestions:
        console.print("[green]No suggestions - nice work![/green]")
        console.print()
        return

    for priority, (style, label) in _PRIORITY_STYLES.items():
        items = [s for s in response.suggestions if s.priority == priority]
        if not items:
            continue
        console.print(f"[bold {style}]{label}[/bold {style}]")
        for suggestion in items:
            console.print(f"  • {escape(suggestion.text)}")
        console.print()


def display_positives(response: AtsScoreResponse) -> None:
    if not response.positives:
        return
    text = "\n".join(f"  ✓ {escape(p.text)}" for p in response.positives)
    console.print(Panel(text, title="What works", border_style="green"))
    console.print()


def _export_cv(cv: CvDocument, path: Path) -> None:
    path.write_text(cv.model_dump_json(by_alias=True, indent=2), encoding="utf-8")


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s  %(levelname)-8s  %(message)s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cvscore",
        description="cvscore: rule-based ATS scoring for structured CVs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cvscore cv.json
  cvscore cv.json --locale pt
  cvscore cv.pdf --no-cache
  cvscore cv.json --no-llm --json
  cvscore cv.json --translate pt --export cv.pt.json
        """,
    )

    parser.add_argument(
        "cv_path",
        type=Path,
        help="Path to your CV (supported: .json, .pdf, .docx, .md, .txt)",
    )
    parser.add_argument(
        "--locale",
        choices=["en", "pt"],
        default=None,
        help="Feedback language (default: the CV's own locale, then en)",
    )
    parser.add_argument(
        "--translate",
        choices=["en", "pt"],
        default=None,
        metavar="LOCALE",
        help="Translate the CV to en or pt with Gemini before scoring",
    )
    parser.add_argument(
        "--export",
        type=Path,
        default=None,
        metavar="PATH",
        help="Write the loaded (or translated) CV document to PATH as JSON",
    )
    parser.add_argument(
        "--no-llm",
        action="store_true",
        help="Skip the LLM writing-quality grade (rule-based score only)",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Ignore cache and force a fresh run",
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=DEFAULT_CACHE_DIR,
        help=f"Cache directory (default: {DEFAULT_CACHE_DIR})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=TIMEOUT_SECONDS,
        help=f"LLM grading timeout in seconds (default: {TIMEOUT_SECONDS:g})",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the score as JSON instead of tables",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase log output (-v info, -vv debug)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the cvscore CLI."""
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    cache = ScoreCache(args.cache_dir) if not args.no_cache else None
    use_llm = not args.no_llm and api_key() is not None

    try:
        client = create_client() if use_llm else None

        if args.json:
            cv = load_cv(args.cv_path, client=client, locale=args.locale)
            if args.translate:
                cv = translate_cv(client or create_client(), cv, args.translate)
            if args.export:
                _export_cv(cv, args.export)
            locale = normalize_locale(args.locale or cv.locale)
            response = analyze_cv(cv, locale, client=client, cache=cache, timeout=args.timeout)
            print(response.model_dump_json(by_alias=True, indent=2))
            return 0

        # Header
        console.print()
        console.print(
            Panel.fit(
                "[bold blue]cvscore[/bold blue]\n[dim]ATS compatibility check for your CV[/dim]",
                border_style="blue",
            )
        )
        console.print()

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Reading CV...", total=None)
            cv = load_cv(args.cv_path, client=client, locale=args.locale)
            progress.update(task, description="[green]✓[/green] CV loaded")
            if args.translate:
                progress.update(task, description=f"Translating CV to {args.translate}...")
                cv = translate_cv(client or create_client(), cv, args.translate)
                progress.update(task, description=f"[green]✓[/green] CV translated to {args.translate}")

        if args.export:
            _export_cv(cv, args.export)
            console.print(f"[dim]CV saved to {escape(str(args.export))}[/dim]")

        locale = normalize_locale(args.locale or cv.locale)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            label = "Scoring CV with AI review..." if client else "Scoring CV..."
            task = progress.add_task(label, total=None)
            response = analyze_cv(cv, locale, client=client, cache=cache, timeout=args.timeout)
            progress.update(task, description="[green]✓[/green] Scoring complete")

        console.print()
        display_overview(response)
        display_breakdown(response, locale)
        display_suggestions(response)
        display_positives(response)

        return 0

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1
    except (ServerError, ClientError) as e:
        console.print(f"[red]API Error:[/red] {escape(str(e))}")
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user.[/yellow]")
        return 130


def cli():
    """CLI entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
