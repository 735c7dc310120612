"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from gap_tailor.config import AppConfig, load_config
from gap_tailor.errors import GapTailorError
from gap_tailor.export import download_filename
from gap_tailor.models.gaps import GapAnalysisResult
from gap_tailor.models.tailoring import TailoredData
from gap_tailor.pipeline.gap_resolution import GapResolution, Phase, run_gap_analysis
from gap_tailor.pipeline.orchestrator import TailorOrchestrator
from gap_tailor.session import TailorSession

app = typer.Typer(
    name="gap-tailor",
    help="Tailor resume bullet points to a job posting, with interactive gap analysis",
    no_args_is_help=True,
)
console = Console()

_PRIORITY_STYLE = {"high": "red", "medium": "yellow", "low": "dim"}


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=verbose)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _fail(exc: GapTailorError) -> typer.Exit:
    console.print(f"[red]{exc.message}[/red]")
    return typer.Exit(1)


def _upload(orchestrator: TailorOrchestrator, session: TailorSession, resume: Path) -> None:
    if not resume.exists():
        console.print(f"[red]Resume file not found: {resume}[/red]")
        raise typer.Exit(1)
    orchestrator.upload_resume(session, resume.read_bytes(), resume.name)
    console.print(f"[dim]Resume: {len(session.resume.content)} characters from {resume.name}[/dim]")


async def _load_job(
    orchestrator: TailorOrchestrator,
    session: TailorSession,
    job_url: str | None,
    job_file: Path | None,
    title: str,
    company: str,
) -> None:
    if job_url:
        try:
            with console.status("Fetching job posting..."):
                await orchestrator.load_job_from_url(session, job_url)
        except GapTailorError as exc:
            console.print(f"[yellow]{exc.message}[/yellow]")
            console.print("[yellow]Enter the job posting manually instead.[/yellow]")
        else:
            console.print(f"[green]Job: {session.job.title} at {session.job.company}[/green]")
            return

    if job_file is not None:
        if not job_file.exists():
            console.print(f"[red]Job description file not found: {job_file}[/red]")
            raise typer.Exit(1)
        description = job_file.read_text(encoding="utf-8")
    else:
        title = title or Prompt.ask("Job title", default="")
        company = company or Prompt.ask("Company", default="")
        console.print("Paste the job description, then an empty line:")
        lines = []
        while line := input():
            lines.append(line)
        description = "\n".join(lines)
    orchestrator.load_job_manual(session, title, company, description)


def _print_gaps(result: GapAnalysisResult) -> None:
    if result.matched_skills:
        console.print(f"[green]Matched:[/green] {', '.join(result.matched_skills)}")
    table = Table(title="Gaps")
    table.add_column("#", justify="right")
    table.add_column("Skill")
    table.add_column("Priority")
    table.add_column("Why it matters")
    for i, gap in enumerate(result.gaps, start=1):
        style = _PRIORITY_STYLE[gap.priority.value]
        table.add_row(str(i), gap.skill, f"[{style}]{gap.priority.value}[/{style}]", gap.context)
    console.print(table)


async def _resolve_gaps(orchestrator: TailorOrchestrator, session: TailorSession) -> None:
    """Ask the gap questions one by one and record the answers on the session."""
    inputs = session.snapshot()
    resolution = GapResolution(on_complete=session.record_gap_answers)

    async def analyze() -> GapAnalysisResult:
        result = await orchestrator.run_analysis(
            inputs.resume_text, inputs.job.text_for_model, inputs.job.title, inputs.job.company
        )
        session.record_gap_analysis(result)
        return result

    while resolution.phase is not Phase.COMPLETE:
        if resolution.phase is Phase.ANALYZING:
            with console.status("Comparing your experience against the job requirements..."):
                await run_gap_analysis(resolution, analyze)
        elif resolution.phase is Phase.ERROR:
            console.print(f"[red]{resolution.error}[/red]")
            if Confirm.ask("Try again?", default=True):
                resolution.retry()
            else:
                resolution.skip()
        elif resolution.phase is Phase.NO_GAPS:
            console.print("[green]No significant gaps found. Your resume covers the requirements.[/green]")
            resolution.continue_()
        else:
            _ask_question(resolution)


def _ask_question(resolution: GapResolution) -> None:
    if resolution.question_number == 1:
        _print_gaps(resolution.analysis)
    question = resolution.current_question
    console.print(
        Panel(
            f"{question.question}\n[dim]{question.context}[/dim]",
            title=f"Question {resolution.question_number} of {resolution.total} "
            f"({question.priority.value} priority)",
        )
    )
    console.print(f"[dim]{resolution.remaining} left; answer 'skip' to tailor now[/dim]")
    answer = Prompt.ask("Experience?", choices=["y", "n", "skip"], default="y")
    if answer == "skip":
        resolution.skip()
        return
    if answer == "n":
        resolution.choose_no_experience()
        console.print(f"[dim]{resolution.compensation_note}[/dim]")
    else:
        resolution.choose_has_experience()
        while not resolution.can_submit:
            resolution.set_response(Prompt.ask(f"Briefly describe your experience with {question.skill}"))
    resolution.submit()


def _print_tailored(tailored: TailoredData) -> None:
    for s_index, section in enumerate(tailored.sections):
        table = Table(title=section.title, show_lines=True)
        table.add_column("#", justify="right")
        table.add_column("Original")
        table.add_column("Tailored")
        table.add_column("Pick")
        for b_index, (original, rewritten, rec) in enumerate(section.rows()):
            table.add_row(
                f"{s_index}.{b_index}",
                original or "[dim]N/A[/dim]",
                rewritten or "",
                rec.value if rec else "",
            )
        console.print(table)
    if tailored.summary:
        console.print(Panel(tailored.summary, title="Summary"))
    if tailored.key_matches:
        console.print(f"[green]Key matches:[/green] {', '.join(tailored.key_matches)}")


def _edit_bullets(session: TailorSession) -> None:
    while Confirm.ask("Edit a tailored bullet?", default=False):
        ref = Prompt.ask("Bullet (section.bullet, e.g. 0.1)")
        try:
            s_index, b_index = (int(p) for p in ref.split(".", 1))
        except ValueError:
            console.print("[red]Use the section.bullet numbers from the table.[/red]")
            continue
        try:
            session.edit_bullet(s_index, b_index, Prompt.ask("New text"))
        except GapTailorError as exc:
            console.print(f"[red]{exc.message}[/red]")


@app.command()
def tailor(
    resume: Path = typer.Option(..., "--resume", "-r", help="Resume file (PDF/DOCX/TEX)"),
    job_url: str = typer.Option(None, "--job-url", "-u", help="Job posting URL"),
    job_file: Path = typer.Option(None, "--job-file", "-j", help="Job description text file"),
    title: str = typer.Option("", "--title", help="Job title (manual entry)"),
    company: str = typer.Option("", "--company", help="Company (manual entry)"),
    skip_gaps: bool = typer.Option(False, "--skip-gaps", help="Tailor without gap questions"),
    output: Path = typer.Option(None, "--output", "-o", help="Output PDF path"),
    docx: bool = typer.Option(False, "--docx", help="Also write a .docx next to the PDF"),
    edit: bool = typer.Option(False, "--edit", help="Edit tailored bullets before export"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Tailor a resume to a job posting, asking about gaps first."""
    _setup_logging(verbose)
    config = load_config()
    orchestrator = TailorOrchestrator.from_config(config)
    session = TailorSession()

    async def _prepare() -> None:
        await _load_job(orchestrator, session, job_url, job_file, title, company)
        if not skip_gaps:
            await _resolve_gaps(orchestrator, session)
        with console.status("Tailoring your resume..."):
            await orchestrator.tailor(session)

    try:
        _upload(orchestrator, session, resume)
        asyncio.run(_prepare())
        _print_tailored(session.tailored)
        if edit:
            _edit_bullets(session)

        if output is None:
            output = Path("output") / download_filename(session.job.company, "pdf")
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(orchestrator.render_pdf(session))
        console.print(f"\n[green]PDF saved: {output}[/green]")
        if docx:
            docx_path = output.with_suffix(".docx")
            docx_path.write_bytes(orchestrator.render_docx(session))
            console.print(f"[green]DOCX saved: {docx_path}[/green]")
    except GapTailorError as exc:
        raise _fail(exc) from exc

    if verbose:
        usage = orchestrator.llm.get_token_summary()
        console.print(f"[dim]Tokens: {usage['input']} in, {usage['output']} out[/dim]")


@app.command()
def analyze(
    resume: Path = typer.Option(..., "--resume", "-r", help="Resume file (PDF/DOCX/TEX)"),
    job_url: str = typer.Option(None, "--job-url", "-u", help="Job posting URL"),
    job_file: Path = typer.Option(None, "--job-file", "-j", help="Job description text file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Show the gap analysis only."""
    _setup_logging(verbose)
    orchestrator = TailorOrchestrator.from_config(load_config())
    session = TailorSession()

    async def _run() -> None:
        await _load_job(orchestrator, session, job_url, job_file, "", "")
        with console.status("Analyzing gaps..."):
            await orchestrator.analyze_gaps(session)

    try:
        _upload(orchestrator, session, resume)
        asyncio.run(_run())
    except GapTailorError as exc:
        raise _fail(exc) from exc
    _print_gaps(session.gap_analysis)


@app.command()
def scrape(
    url: str = typer.Argument(help="Job posting URL"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Fetch a job posting and show what was extracted."""
    _setup_logging(verbose)
    orchestrator = TailorOrchestrator.from_config(load_config())
    try:
        with console.status("Fetching job posting..."):
            job = asyncio.run(orchestrator.fetch_job(url))
    except GapTailorError as exc:
        raise _fail(exc) from exc

    console.print(Panel(job.description[:2000], title=f"{job.title} - {job.company}"))
    for label, items in (("Requirements", job.requirements), ("Responsibilities", job.responsibilities)):
        if items:
            console.print(f"\n[bold]{label}[/bold]")
            for item in items:
                console.print(f"  - {item}")


@app.command()
def extract(
    resume: Path = typer.Argument(help="Resume file (PDF/DOCX/TEX)"),
) -> None:
    """Print the plain text extracted from a resume file."""
    config = load_config()
    orchestrator = TailorOrchestrator.from_config(config)
    if not resume.exists():
        console.print(f"[red]Resume file not found: {resume}[/red]")
        raise typer.Exit(1)
    try:
        document = orchestrator.extract_resume(resume.read_bytes(), resume.name)
    except GapTailorError as exc:
        raise _fail(exc) from exc
    console.print(document.content, markup=False, highlight=False)


@app.command()
def serve(
    host: str = typer.Option(None, "--host", help="Bind address"),
    port: int = typer.Option(None, "--port", help="Port"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    from gap_tailor.api import create_app

    config: AppConfig = load_config()
    uvicorn.run(
        create_app(config),
        host=host or config.server.host,
        port=port or config.server.port,
    )


if __name__ == "__main__":
    app()
