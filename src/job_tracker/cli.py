"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from job_tracker.clients.llm_client import LLMClient
from job_tracker.config import AppConfig, load_config
from job_tracker.models.analysis import AIAnalysisResult
from job_tracker.models.job import Job, JobCreate, JobStatus, JobUpdate
from job_tracker.parsers.cv_parser import load_cv
from job_tracker.parsers.description_parser import guess_job_header, load_description_file
from job_tracker.parsers.job_list_parser import parse_job_list
from job_tracker.pipeline.batch_analyzer import BatchAnalyzer
from job_tracker.pipeline.job_analyzer import JobAnalyzer, classify_analysis_error
from job_tracker.store.job_store import SORT_COLUMNS, JobStore
from job_tracker.utils.obfuscation import obfuscate_job, obfuscate_jobs

app = typer.Typer(
    name="job-tracker",
    help="Personal job application tracker with AI job-description analysis",
    no_args_is_help=True,
)
console = Console()

STATUS_COLORS = {
    JobStatus.APPLIED: "blue",
    JobStatus.INTERVIEWING: "yellow",
    JobStatus.ACCEPTED: "green",
    JobStatus.REJECTED: "red",
}

_state: dict = {"config": None, "db": None}


@app.callback()
def main(
    db: Path = typer.Option(None, "--db", help="SQLite database path (overrides config)"),
    config_path: Path = typer.Option(None, "--config", help="config.yaml path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Track job applications and analyze job descriptions."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    try:
        _state["config"] = load_config(config_path)
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    _state["db"] = db


def _config() -> AppConfig:
    return _state["config"] or load_config()


def _store() -> JobStore:
    return JobStore(_state["db"] or _config().storage.resolved_db_path)


def _analyzer() -> JobAnalyzer:
    if not os.environ.get("ANTHROPIC_API_KEY"):
        console.print("[red]AI service not configured. Please add your Anthropic API key (ANTHROPIC_API_KEY).[/red]")
        raise typer.Exit(1)
    config = _config()
    llm = LLMClient(timeout=config.llm.timeout, max_retries=config.llm.max_retries)
    return JobAnalyzer(llm, model=config.llm.model, max_tokens=config.llm.max_tokens)


def _parse_date(value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise typer.BadParameter(f"Expected YYYY-MM-DD, got {value!r}")


def _get_job_or_exit(store: JobStore, job_id: str) -> Job:
    job = store.get(job_id)
    if job is None:
        console.print(f"[red]Job not found: {escape(job_id)}[/red]")
        raise typer.Exit(1)
    return job


def _status_text(status: JobStatus) -> str:
    color = STATUS_COLORS.get(status, "white")
    return f"[{color}]{status.value}[/{color}]"


def _print_usage(analyzer: JobAnalyzer) -> None:
    usage = analyzer.llm.token_summary()
    if usage["calls"]:
        console.print(
            f"[dim]Tokens: {usage['input']} in / {usage['output']} out over {usage['calls']} call(s)[/dim]"
        )


def _print_analysis(result: AIAnalysisResult | Job) -> None:
    lines: list[str] = []
    if result.suitability_score is not None:
        lines.append(f"[bold]Suitability: {result.suitability_score:g}/100[/bold]")
    if result.suitability_reason:
        lines.append(escape(result.suitability_reason))
    if result.salary_min is not None or result.salary_max is not None:
        low = f"{result.salary_min:,.0f}" if result.salary_min is not None else "?"
        high = f"{result.salary_max:,.0f}" if result.salary_max is not None else "?"
        lines.append(f"Salary: {low} - {high} {escape(result.salary_currency or '')}".rstrip())
    if result.work_arrangement:
        lines.append(f"Work arrangement: {escape(result.work_arrangement)}")
    console.print(Panel("\n".join(lines) or "[dim]No summary fields[/dim]", title="AI analysis"))

    for label, items in (
        ("Requirements", result.requirements),
        ("Responsibilities", result.responsibilities),
        ("Benefits", result.benefits),
        ("Suggested next steps", result.suggested_next_steps),
    ):
        if items:
            console.print(f"\n[bold]{label}:[/bold]")
            for item in items:
                console.print(f"  - {escape(item)}")


@app.command("import")
def import_jobs(
    file: str = typer.Argument(help="Text file with a pasted job list ('-' for stdin)"),
    year: int = typer.Option(None, "--year", help="Year for '15 Jan' style headers (default: config or current year)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Only show what would be imported"),
) -> None:
    """Bulk-import jobs from a freeform pasted list."""
    if file == "-":
        text = sys.stdin.read()
    else:
        path = Path(file)
        if not path.exists():
            console.print(f"[red]File not found: {escape(str(path))}[/red]")
            raise typer.Exit(1)
        text = path.read_text(encoding="utf-8")

    config = _config()
    result = parse_job_list(
        text,
        year=year or config.imports.default_year,
        default_title=config.imports.default_title,
    )

    table = Table(title=f"Parsed jobs ({len(result.jobs)})")
    table.add_column("Date")
    table.add_column("Company", style="bold")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Location")
    table.add_column("Notes", style="dim")
    for job in result.jobs:
        table.add_row(
            job.application_date.strftime("%Y-%m-%d"),
            escape(job.company),
            escape(job.title),
            _status_text(job.status),
            escape(job.location or ""),
            escape(job.notes or ""),
        )
    console.print(table)

    if result.errors:
        console.print(f"\n[yellow]Could not parse {len(result.errors)} line(s):[/yellow]")
        for error in result.errors:
            console.print(f"  - {escape(error)}")

    if dry_run or not result.jobs:
        return

    created = _store().bulk_create(result.jobs)
    console.print(f"\n[green]Successfully imported {len(created)} jobs[/green]")


@app.command()
def add(
    title: str = typer.Option(..., "--title", help="Job title"),
    company: str = typer.Option(..., "--company", help="Company name"),
    description: Path = typer.Option(None, "--description", help="Job description text file"),
    location: str = typer.Option(None, "--location"),
    date: str = typer.Option(None, "--date", help="Application date (YYYY-MM-DD)"),
    status: JobStatus = typer.Option(JobStatus.APPLIED, "--status"),
    notes: str = typer.Option(None, "--notes"),
    linkedin_url: str = typer.Option(None, "--linkedin-url"),
    linkedin_name: str = typer.Option(None, "--linkedin-name"),
) -> None:
    """Add a single job application."""
    try:
        data = JobCreate(
            title=title,
            company=company,
            description=load_description_file(str(description)) if description else None,
            location=location,
            application_date=_parse_date(date),
            status=status,
            notes=notes,
            linkedin_contact_url=linkedin_url,
            linkedin_contact_name=linkedin_name,
        )
    except ValidationError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    job = _store().create(data)
    console.print(f"[green]Added {escape(job.company)} - {escape(job.title)} ({job.id})[/green]")


@app.command("list")
def list_jobs(
    status: JobStatus = typer.Option(None, "--status", help="Filter by status"),
    search: str = typer.Option(None, "--search", "-s", help="Search company, title, location and notes"),
    sort: str = typer.Option("application_date", "--sort", help=f"One of: {', '.join(SORT_COLUMNS)}"),
    ascending: bool = typer.Option(False, "--asc", help="Sort ascending"),
    demo: bool = typer.Option(False, "--demo", help="Obfuscate company names (demo mode)"),
) -> None:
    """List tracked jobs."""
    try:
        jobs = _store().list_jobs(status=status, search=search, sort_by=sort, descending=not ascending)
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    if demo:
        jobs = obfuscate_jobs(jobs)

    if not jobs:
        label = "jobs" if status is None else f"{status.value.lower()} jobs"
        console.print(f"[yellow]No {label} found.[/yellow]")
        return

    table = Table(title=f"Jobs ({len(jobs)})")
    table.add_column("ID", style="dim")
    table.add_column("Date")
    table.add_column("Company", style="bold")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Location")
    table.add_column("Fit", justify="right")
    for job in jobs:
        table.add_row(
            job.id[:8],
            job.application_date.strftime("%Y-%m-%d"),
            escape(job.company),
            escape(job.title),
            _status_text(job.status),
            escape(job.location or ""),
            f"{job.suitability_score:g}" if job.suitability_score is not None else "",
        )
    console.print(table)


@app.command()
def show(
    job_id: str = typer.Argument(help="Job ID"),
    demo: bool = typer.Option(False, "--demo", help="Obfuscate company name and description"),
) -> None:
    """Show one job with its AI analysis."""
    job = _get_job_or_exit(_store(), job_id)
    if demo:
        job = obfuscate_job(job)

    details = [
        f"Status: {_status_text(job.status)}",
        f"Applied: {job.application_date:%Y-%m-%d}",
    ]
    if job.location:
        details.append(f"Location: {escape(job.location)}")
    if job.linkedin_contact_name or job.linkedin_contact_url:
        contact = " ".join(filter(None, [job.linkedin_contact_name, job.linkedin_contact_url]))
        messaged = "messaged" if job.has_messaged_contact else "not messaged yet"
        details.append(f"Contact: {escape(contact)} ({messaged})")
    if job.notes:
        details.append(f"Notes: {escape(job.notes)}")
    console.print(Panel("\n".join(details), title=f"{escape(job.company)} - {escape(job.title)}"))

    if job.ai_analyzed_at is not None:
        _print_analysis(job)
    elif job.description:
        console.print("[dim]Not analyzed yet. Run `job-tracker analyze` to analyze it.[/dim]")


@app.command()
def update(
    job_id: str = typer.Argument(help="Job ID"),
    title: str = typer.Option(None, "--title"),
    company: str = typer.Option(None, "--company"),
    description: Path = typer.Option(None, "--description", help="Job description text file"),
    location: str = typer.Option(None, "--location"),
    date: str = typer.Option(None, "--date", help="Application date (YYYY-MM-DD)"),
    status: JobStatus = typer.Option(None, "--status"),
    notes: str = typer.Option(None, "--notes"),
    linkedin_url: str = typer.Option(None, "--linkedin-url"),
    linkedin_name: str = typer.Option(None, "--linkedin-name"),
    messaged: bool = typer.Option(False, "--messaged", help="Mark the LinkedIn contact as messaged"),
    not_messaged: bool = typer.Option(False, "--not-messaged", help="Mark the LinkedIn contact as not messaged"),
) -> None:
    """Update fields of a job."""
    changes = {
        "title": title,
        "company": company,
        "description": load_description_file(str(description)) if description else None,
        "location": location,
        "application_date": _parse_date(date),
        "status": status,
        "notes": notes,
        "linkedin_contact_url": linkedin_url,
        "linkedin_contact_name": linkedin_name,
        "has_messaged_contact": True if messaged else (False if not_messaged else None),
    }
    try:
        data = JobUpdate(**{k: v for k, v in changes.items() if v is not None})
    except ValidationError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    job = _store().update(job_id, data)
    if job is None:
        console.print(f"[red]Job not found: {escape(job_id)}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Updated {escape(job.company)} - {escape(job.title)}[/green]")


@app.command()
def delete(job_id: str = typer.Argument(help="Job ID")) -> None:
    """Delete a job."""
    if not _store().delete(job_id):
        console.print(f"[red]Job not found: {escape(job_id)}[/red]")
        raise typer.Exit(1)
    console.print("[green]Job deleted[/green]")


@app.command()
def clear(yes: bool = typer.Option(False, "--yes", help="Skip confirmation")) -> None:
    """Delete all jobs."""
    if not yes and not typer.confirm("Delete ALL jobs?"):
        raise typer.Exit(0)
    count = _store().clear()
    console.print(f"[green]Successfully deleted {count} jobs[/green]")


@app.command()
def stats() -> None:
    """Show job counts per status."""
    s = _store().stats()
    console.print(
        Panel(
            f"Total: [bold]{s.total}[/bold]\n"
            f"{_status_text(JobStatus.APPLIED)}: {s.applied}\n"
            f"{_status_text(JobStatus.INTERVIEWING)}: {s.interviewing}\n"
            f"{_status_text(JobStatus.ACCEPTED)}: {s.accepted}\n"
            f"{_status_text(JobStatus.REJECTED)}: {s.rejected}",
            title="Job stats",
        )
    )


@app.command()
def analyze(job_id: str = typer.Argument(help="Job ID")) -> None:
    """Run AI analysis on one job's description."""
    store = _store()
    job = _get_job_or_exit(store, job_id)
    if not job.description:
        console.print("[red]Job has no description to analyze[/red]")
        raise typer.Exit(1)

    analyzer = _analyzer()
    with console.status("Analyzing job description..."):
        try:
            result = asyncio.run(analyzer.analyze(job.description, store.get_cv()))
        except Exception as e:
            console.print(f"[red]{classify_analysis_error(e)}[/red]")
            raise typer.Exit(1)

    store.apply_analysis(job.id, result)
    console.print("[green]Job analyzed successfully[/green]")
    _print_analysis(result)
    _print_usage(analyzer)


@app.command("analyze-all")
def analyze_all() -> None:
    """Analyze every job that has a description but no analysis yet."""
    store = _store()
    config = _config()
    batch = BatchAnalyzer(
        _analyzer(),
        store,
        batch_size=config.batch.batch_size,
        delay_seconds=config.batch.delay_seconds,
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Analyzing jobs...", total=None)

        def on_progress(done: int, total: int) -> None:
            progress.update(task, description=f"Analyzed {done}/{total} jobs")

        report = asyncio.run(batch.run(store.get_cv(), on_progress=on_progress))

    console.print(f"[green]{report.message}[/green]")
    if report.failed:
        console.print(f"[yellow]{report.failed} of {report.total} failed:[/yellow]")
        for detail in report.error_details:
            console.print(f"  - {escape(detail)}")
    _print_usage(batch.analyzer)


@app.command()
def fit(
    file: Path = typer.Argument(help="Job description text file"),
    save: bool = typer.Option(False, "--save", help="Save as a new job with the analysis"),
) -> None:
    """Analyze a job description against your CV without saving it first."""
    if not file.exists():
        console.print(f"[red]File not found: {escape(str(file))}[/red]")
        raise typer.Exit(1)
    description = load_description_file(str(file))
    if not description:
        console.print("[red]Job description is required[/red]")
        raise typer.Exit(1)

    store = _store()
    analyzer = _analyzer()
    with console.status("Analyzing job description..."):
        try:
            result = asyncio.run(analyzer.analyze(description, store.get_cv()))
        except Exception as e:
            console.print(f"[red]{classify_analysis_error(e)}[/red]")
            raise typer.Exit(1)
    _print_analysis(result)
    _print_usage(analyzer)

    if save:
        title, company, location = guess_job_header(description)
        score = f"{result.suitability_score:g}" if result.suitability_score is not None else "0"
        job = store.create(JobCreate(
            title=title,
            company=company,
            description=description,
            location=location,
            notes=f"Created from job fit analysis with {score}% match",
        ))
        store.apply_analysis(job.id, result)
        console.print(f"\n[green]Saved {escape(job.company)} - {escape(job.title)} ({job.id})[/green]")


@app.command("cv-set")
def cv_set(file: Path = typer.Argument(help="CV file (PDF/DOCX/TXT/MD)")) -> None:
    """Store your CV for suitability scoring."""
    if not file.exists():
        console.print(f"[red]File not found: {escape(str(file))}[/red]")
        raise typer.Exit(1)
    try:
        content = load_cv(file)
        _store().save_cv(content)
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]CV saved ({len(content)} chars)[/green]")


@app.command("cv-show")
def cv_show() -> None:
    """Print the stored CV."""
    content = _store().get_cv()
    if content is None:
        console.print("[yellow]No CV stored. Use `job-tracker cv-set FILE`.[/yellow]")
        raise typer.Exit(1)
    console.print(Panel(escape(content), title="CV"))


if __name__ == "__main__":
    app()
