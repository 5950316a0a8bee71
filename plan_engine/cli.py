"""Command line interface for the plan engine.

Runs the engine over local JSON files: decode a generated plan, classify
activities, report plan compliance, and extract a plan from response text.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from plan_engine.analysis import analyze_plan_compliance, generate_plan_adjustment_suggestions
from plan_engine.config import settings
from plan_engine.core import setup_logger
from plan_engine.errors import MalformedPlanError
from plan_engine.plans import Plan, decode_plan, extract_training_plan_json
from plan_engine.workouts import Activity, AthleteBaseline, classify

console = Console()

app = typer.Typer(
    name="plan-engine",
    help="Training plan engine - decode plans, classify activities, analyze compliance",
    add_completion=False,
)

_SEVERITY_STYLES: dict[str, str] = {
    "high": "bold red",
    "medium": "yellow",
    "low": "cyan",
    "positive": "green",
}


@app.callback()
def main(
    log_level: str | None = typer.Option(None, "--log-level", help="Log level (defaults to PLAN_ENGINE_LOG_LEVEL)"),
) -> None:
    """Configure logging before any command runs."""
    setup_logger(settings, level=log_level)


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(Panel(Text(f"Invalid JSON in {path.name}", style="bold red"), subtitle=str(e), border_style="red"))
        raise typer.Exit(1) from e


def _load_plan(path: Path) -> Plan:
    try:
        return decode_plan(_read_json(path))
    except MalformedPlanError as e:
        console.print(Panel(Text("Malformed plan", style="bold red"), subtitle=str(e), border_style="red"))
        raise typer.Exit(1) from e


@app.command()
def decode(
    plan_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Generated plan JSON file"),
    as_json: bool = typer.Option(False, "--json", help="Print the canonical plan as JSON"),
) -> None:
    """Decode a generated plan into the canonical structure."""
    plan = _load_plan(plan_file)

    if as_json:
        typer.echo(plan.model_dump_json(indent=2))
        return

    table = Table(title=plan.meta.plan_name or "Training plan")
    table.add_column("Week", justify="right")
    table.add_column("Phase")
    table.add_column("Day")
    table.add_column("Category")
    table.add_column("Title")
    table.add_column("Min", justify="right")
    table.add_column("Segments", justify="right")
    for week in plan.schedule:
        for day in week.days:
            table.add_row(
                str(week.week_number),
                week.phase_name,
                day.day_name,
                day.activity_category,
                day.activity_title,
                str(day.total_estimated_duration_min),
                str(len(day.workout_structure)),
            )
    console.print(table)


@app.command(name="classify")
def classify_command(
    activity_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Activity JSON (object or list)"),
    baseline_file: Path | None = typer.Option(
        None, "--baseline", "-b", exists=True, dir_okay=False, help="Athlete baseline JSON"
    ),
) -> None:
    """Classify running activities by workout type."""
    payload = _read_json(activity_file)
    records = payload if isinstance(payload, list) else [payload]
    baseline = AthleteBaseline.model_validate(_read_json(baseline_file)) if baseline_file else None

    table = Table(title="Workout classification")
    table.add_column("Activity")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Confidence", justify="right")
    table.add_column("Rule")
    for record in records:
        activity = Activity.from_strava(record)
        result = classify(activity, baseline)
        if result is None:
            logger.debug(f"Skipping non-run activity {activity.id}")
            table.add_row(str(activity.id), activity.name, "-", "-", "not a run")
            continue
        table.add_row(str(activity.id), activity.name, result.type.value, f"{result.confidence:.2f}", result.rule)
    console.print(table)


@app.command()
def compliance(
    plan_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Plan JSON file"),
    on_date: datetime | None = typer.Option(
        None, "--date", "-d", formats=["%Y-%m-%d"], help="Reference date (defaults to today)"
    ),
) -> None:
    """Report plan compliance, trends, warnings and suggestions."""
    plan = _load_plan(plan_file)
    if plan.start_date is None:
        console.print("[yellow]Plan has no start date; nothing to analyze[/yellow]")
        return

    report = analyze_plan_compliance(plan, on_date.date() if on_date else None)

    table = Table(title=f"Compliance: {report.overall_compliance_rate}% overall")
    table.add_column("Week", justify="right")
    table.add_column("Dates")
    table.add_column("Status")
    table.add_column("Done", justify="right")
    table.add_column("Missed", justify="right")
    table.add_column("Rate", justify="right")
    for week in report.weekly_compliance:
        table.add_row(
            str(week.week_number),
            f"{week.week_range.start} - {week.week_range.end}",
            week.week_status,
            f"{week.completed_workouts}/{week.total_workouts}",
            str(week.missed_workouts),
            f"{week.compliance_rate:.0f}%",
        )
    console.print(table)

    for trend in report.trends:
        console.print(Text(f"Trend {trend.type}: {trend.message}", style=_SEVERITY_STYLES[trend.severity]))
    for warning in report.warnings:
        console.print(
            Panel(
                Text(warning.message, style=_SEVERITY_STYLES[warning.severity]),
                subtitle=warning.action,
                border_style=_SEVERITY_STYLES[warning.severity],
            )
        )
    for suggestion in generate_plan_adjustment_suggestions(report):
        console.print(f"[bold]{suggestion.title}[/bold] ({suggestion.priority}): {suggestion.description}")


@app.command()
def extract(
    text_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Response text containing a plan"),
) -> None:
    """Extract a training plan JSON object from response text."""
    plan_json = extract_training_plan_json(text_file.read_text(encoding="utf-8"))
    if plan_json is None:
        console.print(Panel(Text("No training plan found", style="bold red"), border_style="red"))
        raise typer.Exit(1)
    typer.echo(json.dumps(plan_json, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    app()
